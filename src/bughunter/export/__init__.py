"""Export module: record batches to downloadable CSV."""

from bughunter.export.csv_export import (
    encode_csv,
    encode_submission_csv,
    escape_csv_field,
    export_filename,
    export_results_csv,
    export_session_csv,
    write_export,
)

__all__ = [
    "encode_csv",
    "encode_submission_csv",
    "escape_csv_field",
    "export_filename",
    "export_results_csv",
    "export_session_csv",
    "write_export",
]
