"""CSV export: submission payload, session snapshot, full results."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from pathlib import Path

from bughunter.constants import (
    RESULTS_EXPORT_HEADERS,
    SESSION_EXPORT_HEADERS,
    SUBMISSION_HEADERS,
)
from bughunter.models.record import Record

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def escape_csv_field(value: str) -> str:
    """Quote a field containing a comma, quote or line break.

    Inner double quotes are doubled; the decoder inverts exactly
    this rule.
    """
    if any(ch in value for ch in _NEEDS_QUOTING):
        return '"' + value.replace('"', '""') + '"'
    return value


def encode_csv(
    headers: Sequence[str],
    rows: Iterable[Sequence[str]],
) -> str:
    """Header plus rows, comma-joined fields, newline-joined rows."""
    lines = [",".join(escape_csv_field(h) for h in headers)]
    lines.extend(
        ",".join(escape_csv_field(field) for field in row)
        for row in rows
    )
    return "\n".join(lines)


def encode_submission_csv(records: Iterable[Record]) -> str:
    """Two-column id/buggyCode CSV sent to the analysis gateway."""
    return encode_csv(
        SUBMISSION_HEADERS,
        ((r.id, r.buggy_code) for r in records),
    )


def export_session_csv(records: Iterable[Record]) -> str:
    """Lightweight session snapshot without type or score."""
    return encode_csv(
        SESSION_EXPORT_HEADERS,
        (
            (
                r.id,
                r.explanation,
                r.api_context,
                r.buggy_code,
                r.corrected_code,
            )
            for r in records
        ),
    )


def export_results_csv(records: Iterable[Record]) -> str:
    """Full analysis results including bug type and trust score."""
    return encode_csv(
        RESULTS_EXPORT_HEADERS,
        (
            (
                r.id,
                r.bug_type.value,
                str(r.trust_score),
                r.explanation,
                r.api_context,
                r.buggy_code,
                r.corrected_code,
            )
            for r in records
        ),
    )


def export_filename(prefix: str, day: date | None = None) -> str:
    """Download name with an ISO date suffix, e.g. abh-session-2025-01-31.csv."""
    return f"{prefix}-{(day or date.today()).isoformat()}.csv"


def write_export(
    content: str,
    output_dir: Path,
    prefix: str,
    day: date | None = None,
) -> Path:
    """Write CSV content under output_dir and return the file path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(prefix, day)
    path.write_text(content, encoding="utf-8")
    return path
