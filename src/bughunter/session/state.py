"""Explicit session state and the reducer that advances it.

Every change to what the user sees goes through ``reduce``. Gateway
outcomes carry the generation they were started under; outcomes from
a superseded generation are dropped, so two batches never mix.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from bughunter.constants import NavDirection
from bughunter.models.record import Record, SourceRow
from bughunter.samples import SAMPLE_RECORDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    """Everything the UI renders, as one immutable value."""

    records: tuple[Record, ...] = SAMPLE_RECORDS
    # True once the batch holds analysis results (canned set included)
    analyzed: bool = True
    index: int = 0
    active: Record | None = None
    hunted: tuple[Record, ...] = ()
    in_flight: bool = False
    generation: int = 0
    error: str | None = None

    @property
    def current(self) -> Record | None:
        if not self.records:
            return None
        return self.records[self.index]


# ── Actions ──────────────────────────────────────────────


@dataclass(frozen=True)
class Navigate:
    direction: NavDirection


@dataclass(frozen=True)
class LoadRows:
    """Replace the batch with stub records from an upload."""

    rows: tuple[SourceRow, ...]


@dataclass(frozen=True)
class RevealCurrent:
    """Show the already-analyzed current record."""


@dataclass(frozen=True)
class SubmitStarted:
    """A new submission begins; bumps the generation."""


@dataclass(frozen=True)
class SubmitSucceeded:
    generation: int
    records: tuple[Record, ...]


@dataclass(frozen=True)
class SubmitFailed:
    generation: int
    message: str


type Action = (
    Navigate
    | LoadRows
    | RevealCurrent
    | SubmitStarted
    | SubmitSucceeded
    | SubmitFailed
)


def reduce(state: SessionState, action: Action) -> SessionState:
    """Return the state that follows ``action``."""
    match action:
        case Navigate(direction=direction):
            return _navigate(state, direction)
        case LoadRows(rows=rows):
            return _load_rows(state, rows)
        case RevealCurrent():
            return _reveal(state)
        case SubmitStarted():
            return replace(
                state,
                in_flight=True,
                error=None,
                generation=state.generation + 1,
            )
        case SubmitSucceeded(generation=generation, records=records):
            if generation != state.generation:
                return _stale(state, generation)
            return _apply_batch(state, records)
        case SubmitFailed(generation=generation, message=message):
            if generation != state.generation:
                return _stale(state, generation)
            return replace(state, in_flight=False, error=message)
    raise TypeError(f"Unknown action: {action!r}")


def export_snapshot(state: SessionState) -> tuple[Record, ...]:
    """Records to export: revealed ones if any, else the whole batch."""
    return state.hunted or state.records


# ── Helpers ──────────────────────────────────────────────


def _navigate(
    state: SessionState, direction: NavDirection
) -> SessionState:
    count = len(state.records)
    if count == 0:
        return replace(state, active=None)
    step = -1 if direction == NavDirection.PREV else 1
    return replace(
        state, index=(state.index + step) % count, active=None
    )


def _load_rows(
    state: SessionState, rows: Sequence[SourceRow]
) -> SessionState:
    if not rows:
        return replace(
            state, error="No rows with an id and buggy code were found"
        )
    return replace(
        state,
        records=tuple(Record.from_row(r) for r in rows),
        analyzed=False,
        index=0,
        active=None,
        hunted=(),
        error=None,
    )


def _reveal(state: SessionState) -> SessionState:
    current = state.current
    if current is None:
        return state
    return replace(
        state,
        active=current,
        hunted=_add_hunted(state.hunted, (current,)),
        error=None,
    )


def _apply_batch(
    state: SessionState, records: tuple[Record, ...]
) -> SessionState:
    """Swap the whole batch in; keep the cursor in range."""
    if not records:
        return replace(
            state,
            in_flight=False,
            error="Analysis returned no results",
        )
    index = min(state.index, len(records) - 1)
    active = records[index]
    return replace(
        state,
        records=records,
        analyzed=True,
        index=index,
        active=active,
        hunted=_add_hunted(state.hunted, records),
        in_flight=False,
        error=None,
    )


def _add_hunted(
    hunted: tuple[Record, ...], new: Sequence[Record]
) -> tuple[Record, ...]:
    """Append records by id; a re-analyzed id replaces its entry."""
    merged = {r.id: r for r in hunted}
    for record in new:
        merged[record.id] = record
    return tuple(merged.values())


def _stale(state: SessionState, generation: int) -> SessionState:
    logger.info(
        "event=stale_result_dropped generation=%d current=%d",
        generation,
        state.generation,
    )
    return state
