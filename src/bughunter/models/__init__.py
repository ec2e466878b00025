"""Domain types shared by the codec, gateway and session layers."""

from bughunter.models.record import (
    Record,
    SourceRow,
    coerce_bug_type,
    coerce_trust_score,
)

__all__ = [
    "Record",
    "SourceRow",
    "coerce_bug_type",
    "coerce_trust_score",
]
