"""Error taxonomy and classification for structured error handling.

Three raised failure kinds cross module boundaries:

- InputError: uploaded CSV is malformed or unrecognized
- TransportError: the gateway call failed or returned non-2xx
- ProtocolError: the gateway answered 2xx but broke the JSON contract

classify_error() buckets httpx and provider exceptions; the gateway
retry predicate and the LLM circuit breakers both decide from it.
"""

from __future__ import annotations

import asyncio
from enum import Enum

import httpx

from bughunter.constants import TransportReason


class BugHunterError(Exception):
    """Base class for all reported failures."""


class InputError(BugHunterError):
    """Uploaded CSV could not be interpreted."""


class TransportError(BugHunterError):
    """Gateway call did not complete or returned a non-success status."""

    def __init__(
        self,
        message: str,
        reason: TransportReason,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.status_code = status_code


class ProtocolError(BugHunterError):
    """Gateway returned success but violated the response contract."""


class ErrorClass(Enum):
    TRANSIENT = "transient"  # 429, dropped connections
    SERVER = "server"  # 5xx
    TIMEOUT = "timeout"  # connect/read deadline exceeded
    CLIENT = "client"  # 400, 401, 402, 403, 404
    UNKNOWN = "unknown"  # corrupt bodies, redirect loops, anything else


def classify_error(error: Exception) -> ErrorClass:
    """Bucket an exception from httpx or an LLM provider.

    Order: structured ``status_code``, then httpx/builtin exception
    types, then message text for untyped provider exceptions.
    """
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        if status_code == 429:
            return ErrorClass.TRANSIENT
        if 400 <= status_code < 500:
            return ErrorClass.CLIENT
        if 500 <= status_code < 600:
            return ErrorClass.SERVER

    if isinstance(
        error, (httpx.TimeoutException, TimeoutError, asyncio.TimeoutError)
    ):
        return ErrorClass.TIMEOUT
    if isinstance(error, (httpx.TransportError, ConnectionError)):
        return ErrorClass.TRANSIENT
    if isinstance(error, httpx.RequestError):
        # DecodingError, TooManyRedirects: repeating the request won't help
        return ErrorClass.UNKNOWN

    msg = str(error).lower()

    if "timeout" in msg or "timed out" in msg:
        return ErrorClass.TIMEOUT
    if "429" in msg or "rate limit" in msg or "rate_limit" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("500", "502", "503", "504")):
        return ErrorClass.SERVER
    if "econnrefused" in msg or "connection" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("400", "401", "402", "403", "404")):
        return ErrorClass.CLIENT

    return ErrorClass.UNKNOWN


_RETRYABLE = frozenset({
    ErrorClass.TRANSIENT,
    ErrorClass.SERVER,
    ErrorClass.TIMEOUT,
})


def is_retryable(error: Exception) -> bool:
    """Return True if the error category supports retry."""
    return classify_error(error) in _RETRYABLE


def is_retryable_gateway_error(error: BaseException) -> bool:
    """Retry predicate for gateway submissions.

    Rate-limit and quota signals go straight to the user. Other
    gateway failures are classified by their HTTP status, or by the
    underlying httpx exception when no response arrived.
    """
    if not isinstance(error, TransportError):
        return False
    if error.reason is not TransportReason.GATEWAY_FAILURE:
        return False
    cause = error.__cause__
    if error.status_code is None and isinstance(cause, Exception):
        return is_retryable(cause)
    return is_retryable(error)


def counts_as_provider_outage(error: BaseException) -> bool:
    """Whether an LLM failure should count toward its circuit breaker.

    Client-class errors (bad request, bad key, no credits) mean the
    provider is up and answering.
    """
    if not isinstance(error, Exception):
        return False
    return classify_error(error) is not ErrorClass.CLIENT
