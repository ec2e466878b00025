"""Decode uploaded CSV text into id/buggy-code rows.

Quoted fields may contain commas, doubled quotes and raw newlines,
so quote state is tracked across the whole input by the csv reader
rather than by splitting on line breaks first.
"""

from __future__ import annotations

import csv
import io
import logging

from bughunter.constants import CODE_HEADERS, CSV_FIELD_SIZE_LIMIT, ID_HEADER
from bughunter.models.record import SourceRow
from bughunter.resilience.errors import InputError

logger = logging.getLogger(__name__)

csv.field_size_limit(CSV_FIELD_SIZE_LIMIT)


def parse_input_csv(text: str) -> list[SourceRow]:
    """Decode CSV text, returning [] when the input is unusable.

    The empty result is the signal the caller turns into a
    user-facing "unrecognized file" message.
    """
    try:
        return read_input_csv(text)
    except InputError as exc:
        logger.warning("event=csv_rejected reason=%s", exc)
        return []


def read_input_csv(text: str) -> list[SourceRow]:
    """Decode CSV text, raising InputError when it is unusable."""
    if len(text.split("\n")) < 2:
        raise InputError("expected a header row and at least one more line")

    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        header = next(reader)
        id_idx, code_idx = _locate_columns(header)
        rows: list[SourceRow] = []
        for cols in reader:
            row = _row_values(cols, id_idx, code_idx)
            if row is not None:
                rows.append(row)
    except csv.Error as exc:
        raise InputError(
            f"malformed CSV near line {reader.line_num}: {exc}"
        ) from exc

    logger.debug("event=csv_decoded rows=%d", len(rows))
    return rows


def _locate_columns(header: list[str]) -> tuple[int, int]:
    """Return (id_index, code_index) from a header row."""
    names = [h.strip().lower() for h in header]
    id_idx = _first_index(names, {ID_HEADER})
    code_idx = _first_index(names, CODE_HEADERS)
    if id_idx is None:
        raise InputError("no 'id' column in header")
    if code_idx is None:
        raise InputError(
            "no code column in header "
            f"(expected one of: {', '.join(sorted(CODE_HEADERS))})"
        )
    return id_idx, code_idx


def _first_index(names: list[str], wanted: set[str] | frozenset[str]) -> int | None:
    for i, name in enumerate(names):
        if name in wanted:
            return i
    return None


def _row_values(
    cols: list[str], id_idx: int, code_idx: int
) -> SourceRow | None:
    """Pull the two required values; None skips the row."""
    if not cols:
        return None
    record_id = cols[id_idx].strip() if id_idx < len(cols) else ""
    code = cols[code_idx].strip() if code_idx < len(cols) else ""
    if not record_id or not code:
        return None
    return SourceRow(id=record_id, buggy_code=code)
