"""Async driver that feeds gateway outcomes through the reducer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from bughunter.constants import NavDirection, TransportReason
from bughunter.gateway.client import AnalyzedBatch
from bughunter.ingestion.csv_reader import parse_input_csv
from bughunter.models.record import Record
from bughunter.resilience.errors import ProtocolError, TransportError
from bughunter.session.state import (
    Action,
    LoadRows,
    Navigate,
    RevealCurrent,
    SessionState,
    SubmitFailed,
    SubmitStarted,
    SubmitSucceeded,
    reduce,
)

logger = logging.getLogger(__name__)


class BatchSubmitter(Protocol):
    """Anything that can analyze a batch (the gateway client, a fake)."""

    async def submit(
        self, records: Sequence[Record]
    ) -> AnalyzedBatch: ...


class HuntSession:
    """Owns the current SessionState and the in-flight submission.

    A new submission cancels the previous one; the generation check
    in the reducer drops anything that still arrives late.
    """

    def __init__(
        self,
        submitter: BatchSubmitter | None = None,
        state: SessionState | None = None,
    ) -> None:
        self._submitter = submitter
        self._state = state or SessionState()
        self._task: asyncio.Task[AnalyzedBatch] | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    def dispatch(self, action: Action) -> SessionState:
        self._state = reduce(self._state, action)
        return self._state

    def navigate(self, direction: NavDirection) -> SessionState:
        return self.dispatch(Navigate(direction))

    def load_csv(self, text: str) -> int:
        """Decode an upload into stub records; returns the row count."""
        rows = parse_input_csv(text)
        self.dispatch(LoadRows(tuple(rows)))
        return len(rows)

    async def hunt(self) -> SessionState:
        """Reveal from an analyzed batch, or analyze the batch remotely."""
        if self._state.current is None:
            return self._state
        if self._state.analyzed or self._submitter is None:
            return self.dispatch(RevealCurrent())
        return await self.analyze()

    async def analyze(self) -> SessionState:
        """Submit the whole batch and swap it in on success."""
        if self._submitter is None:
            raise RuntimeError("No gateway configured for analysis")

        previous = self._task
        if previous is not None and not previous.done():
            previous.cancel()

        generation = self.dispatch(SubmitStarted()).generation
        task = asyncio.create_task(
            self._submitter.submit(self._state.records)
        )
        self._task = task

        try:
            batch = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.info(
                "event=submission_superseded generation=%d", generation
            )
            return self._state
        except TransportError as exc:
            return self.dispatch(
                SubmitFailed(generation, failure_message(exc))
            )
        except ProtocolError as exc:
            logger.warning(
                "event=gateway_protocol_error generation=%d error=%s",
                generation,
                exc,
            )
            return self.dispatch(
                SubmitFailed(generation, failure_message(exc))
            )
        except Exception as exc:
            logger.exception(
                "event=submission_error generation=%d", generation
            )
            return self.dispatch(
                SubmitFailed(generation, failure_message(exc))
            )
        finally:
            if self._task is task:
                self._task = None

        return self.dispatch(
            SubmitSucceeded(generation, batch.records)
        )


def failure_message(error: Exception) -> str:
    """User-facing text for a failed submission."""
    if isinstance(error, ProtocolError):
        return "Analysis failed: the analysis service returned an unexpected response."
    if isinstance(error, TransportError):
        if error.reason is TransportReason.RATE_LIMITED:
            return "Rate limit exceeded. Please try again later."
        if error.reason is TransportReason.QUOTA_EXHAUSTED:
            return "Analysis quota exhausted. Please add credits and retry."
    return f"Analysis failed: {error}"
