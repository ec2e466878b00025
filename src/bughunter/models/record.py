"""Record: the unit of analysis work."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, NamedTuple

from bughunter.constants import (
    DEFAULT_BUG_TYPE,
    DEFAULT_TRUST_SCORE,
    TRUST_SCORE_MAX,
    TRUST_SCORE_MIN,
    UNANALYZED_TRUST_SCORE,
    BugType,
)

logger = logging.getLogger(__name__)

_BUG_TYPES_BY_VALUE = {bt.value.lower(): bt for bt in BugType}


class SourceRow(NamedTuple):
    """An id/buggy-code pair decoded from an uploaded CSV."""

    id: str
    buggy_code: str


def coerce_bug_type(value: object) -> BugType:
    """Map an untrusted value onto BugType, defaulting to Logic."""
    if isinstance(value, BugType):
        return value
    if isinstance(value, str):
        found = _BUG_TYPES_BY_VALUE.get(value.strip().lower())
        if found is not None:
            return found
    return DEFAULT_BUG_TYPE


def coerce_trust_score(value: object) -> int:
    """Round and clamp a numeric score; non-numbers get the default.

    bool is rejected even though it subclasses int.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_TRUST_SCORE
    if isinstance(value, float) and not math.isfinite(value):
        return DEFAULT_TRUST_SCORE
    return max(TRUST_SCORE_MIN, min(TRUST_SCORE_MAX, round(value)))


@dataclass(frozen=True)
class Record:
    """One buggy snippet and, once analyzed, its fix and metadata."""

    id: str
    buggy_code: str
    corrected_code: str = ""
    explanation: str = ""
    bug_type: BugType = DEFAULT_BUG_TYPE
    api_context: str = ""
    trust_score: int = UNANALYZED_TRUST_SCORE

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Record id must be non-empty")
        if not TRUST_SCORE_MIN <= self.trust_score <= TRUST_SCORE_MAX:
            raise ValueError(
                f"trust_score {self.trust_score} outside "
                f"[{TRUST_SCORE_MIN}, {TRUST_SCORE_MAX}]"
            )
        if not isinstance(self.bug_type, BugType):
            object.__setattr__(
                self, "bug_type", coerce_bug_type(self.bug_type)
            )

    @classmethod
    def stub(cls, record_id: str, buggy_code: str) -> Record:
        """Create a not-yet-analyzed record from an uploaded row."""
        return cls(id=record_id, buggy_code=buggy_code)

    @classmethod
    def from_row(cls, row: SourceRow) -> Record:
        return cls.stub(row.id, row.buggy_code)

    @classmethod
    def from_payload(
        cls,
        data: dict[str, Any],
        *,
        fallback_id: str = "",
    ) -> Record:
        """Build a record from a gateway result object.

        Missing text fields become empty strings, bugType falls back
        to Logic and a non-numeric trustScore becomes 80. An empty id
        takes ``fallback_id`` (the submitted record at that position).
        """
        missing = [
            key for key in _PAYLOAD_FIELDS if key not in data
        ]
        if missing:
            logger.debug(
                "event=result_fields_defaulted id=%s fields=%s",
                data.get("id") or fallback_id,
                ",".join(missing),
            )

        record_id = _text(data.get("id")).strip() or fallback_id
        return cls(
            id=record_id,
            buggy_code=_text(data.get("buggyCode")),
            corrected_code=_text(data.get("correctedCode")),
            explanation=_text(data.get("explanation")),
            bug_type=coerce_bug_type(data.get("bugType")),
            api_context=_text(data.get("apiContext")),
            trust_score=coerce_trust_score(data.get("trustScore")),
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase wire shape."""
        return {
            "id": self.id,
            "buggyCode": self.buggy_code,
            "correctedCode": self.corrected_code,
            "explanation": self.explanation,
            "bugType": self.bug_type.value,
            "apiContext": self.api_context,
            "trustScore": self.trust_score,
        }


_PAYLOAD_FIELDS = (
    "id",
    "buggyCode",
    "correctedCode",
    "explanation",
    "bugType",
    "apiContext",
    "trustScore",
)


def _text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
