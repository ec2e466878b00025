"""CSV ingestion: uploaded text to source rows."""

from bughunter.ingestion.csv_reader import parse_input_csv, read_input_csv

__all__ = ["parse_input_csv", "read_input_csv"]
