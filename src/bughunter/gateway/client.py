"""Async client for the remote analysis gateway.

Wire contract:
    POST {"csvContent": "<id,buggyCode CSV>"}
    200  {"results": [{id, buggyCode, correctedCode, explanation,
                       bugType, apiContext, trustScore}, ...]}
    4xx/5xx {"error": "<message>"}

The client holds no batch state: a failed submit raises and leaves
whatever the caller is displaying untouched.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from types import TracebackType
from typing import Any, cast

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

from bughunter.config import Settings
from bughunter.constants import (
    ERROR_TRUNCATION_CHARS,
    ID_HEX_LENGTH,
    RETRY_INITIAL_WAIT,
    RETRY_MAX_WAIT,
    STATUS_PAYMENT_REQUIRED,
    STATUS_RATE_LIMITED,
    TransportReason,
)
from bughunter.export.csv_export import encode_submission_csv
from bughunter.models.record import Record
from bughunter.resilience.errors import (
    ProtocolError,
    TransportError,
    is_retryable_gateway_error,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyzedBatch:
    """Validated result of one gateway submission."""

    records: tuple[Record, ...]
    request_id: str
    duration_ms: float


class AnalysisGatewayClient:
    """Submits record batches to the analysis gateway.

    Usage::

        async with AnalysisGatewayClient(settings) as client:
            batch = await client.submit(records)
    """

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: httpx.AsyncClient | None = None,
        wait: wait_base | None = None,
    ) -> None:
        self._url = settings.gateway_url
        self._max_attempts = settings.gateway_max_attempts
        self._wait = wait or wait_exponential_jitter(
            initial=RETRY_INITIAL_WAIT, max=RETRY_MAX_WAIT
        )
        headers = {"Content-Type": "application/json"}
        if settings.api_key:
            headers["X-API-Key"] = settings.api_key
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=settings.gateway_timeout_seconds
        )
        self._headers = headers

    async def __aenter__(self) -> AnalysisGatewayClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def submit(self, records: Sequence[Record]) -> AnalyzedBatch:
        """Send the batch as CSV and return the analyzed records.

        Raises TransportError for network/HTTP failures and
        ProtocolError when a 2xx body breaks the results contract.
        """
        request_id = uuid.uuid4().hex[:ID_HEX_LENGTH]
        payload = {"csvContent": encode_submission_csv(records)}
        start = time.monotonic()

        logger.info(
            "event=gateway_submit request_id=%s records=%d url=%s",
            request_id,
            len(records),
            self._url,
        )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=self._wait,
            retry=retry_if_exception(is_retryable_gateway_error),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    response = await self._post(payload)
        except TransportError as exc:
            logger.warning(
                "event=gateway_failed request_id=%s reason=%s status=%s",
                request_id,
                exc.reason,
                exc.status_code,
            )
            raise

        results = decode_results(response, records)
        duration_ms = (time.monotonic() - start) * 1000
        logger.info(
            "event=gateway_done request_id=%s results=%d duration_ms=%.0f",
            request_id,
            len(results),
            duration_ms,
        )
        return AnalyzedBatch(
            records=results,
            request_id=request_id,
            duration_ms=duration_ms,
        )

    async def _post(self, payload: dict[str, str]) -> httpx.Response:
        try:
            response = await self._http.post(
                self._url, json=payload, headers=self._headers
            )
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            # No usable response: network, timeout, decoding, redirects
            raise TransportError(
                f"Analysis gateway request failed: {exc}",
                TransportReason.GATEWAY_FAILURE,
            ) from exc

        if response.is_success:
            return response
        raise transport_error_for(response)


def transport_error_for(response: httpx.Response) -> TransportError:
    """Map a non-success response onto a TransportError."""
    status = response.status_code
    message = _error_message(response)
    if status == STATUS_RATE_LIMITED:
        return TransportError(
            message or "Rate limited; retry later",
            TransportReason.RATE_LIMITED,
            status,
        )
    if status == STATUS_PAYMENT_REQUIRED:
        return TransportError(
            message or "Analysis quota exhausted",
            TransportReason.QUOTA_EXHAUSTED,
            status,
        )
    return TransportError(
        message or f"Analysis gateway error: {status}",
        TransportReason.GATEWAY_FAILURE,
        status,
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        error = cast(dict[str, Any], body).get("error")
        if isinstance(error, str):
            return error[:ERROR_TRUNCATION_CHARS]
    return ""


def decode_results(
    response: httpx.Response,
    submitted: Sequence[Record],
) -> tuple[Record, ...]:
    """Validate the results envelope and build records positionally."""
    try:
        body: Any = response.json()
    except ValueError as exc:
        raise ProtocolError("Gateway response is not valid JSON") from exc

    if not isinstance(body, dict):
        raise ProtocolError("Gateway response is not a JSON object")
    raw_results = cast(dict[str, Any], body).get("results")
    if not isinstance(raw_results, list):
        raise ProtocolError("Gateway response has no 'results' array")

    items = cast(list[Any], raw_results)
    if len(items) != len(submitted):
        logger.warning(
            "event=result_count_mismatch submitted=%d returned=%d",
            len(submitted),
            len(items),
        )

    records: list[Record] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ProtocolError(f"Result {i} is not a JSON object")
        fallback_id = (
            submitted[i].id if i < len(submitted) else f"RESULT-{i + 1}"
        )
        records.append(
            Record.from_payload(
                cast(dict[str, Any], item), fallback_id=fallback_id
            )
        )
    return tuple(records)
