"""Shared LLM call with per-model circuit breaker and rate-limit retry."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import litellm
from circuitbreaker import (  # pyright: ignore[reportUnknownVariableType]
    CircuitBreaker,
    CircuitBreakerError,
)
from litellm.exceptions import RateLimitError as LitellmRateLimitError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from bughunter.constants import (
    CB_LLM_FAILURE_THRESHOLD,
    CB_LLM_RECOVERY_TIMEOUT,
    LLM_MAX_OUTPUT_TOKENS,
    RETRY_INITIAL_WAIT,
    RETRY_MAX_ATTEMPTS,
    RETRY_MAX_WAIT,
)
from bughunter.resilience.errors import counts_as_provider_outage

logger = logging.getLogger(__name__)

# litellm stubs have partially unknown types: typed alias
if TYPE_CHECKING:
    _acompletion: Callable[..., Coroutine[Any, Any, Any]]
else:
    _acompletion = litellm.acompletion


@dataclass(frozen=True)
class LLMToolCallResult:
    """Forced tool-call output plus token metadata."""

    arguments: str | None  # None when the model skipped the tool
    model: str
    input_tokens: int
    output_tokens: int


def _counts_as_breaker_failure(
    thrown_type: type, thrown_value: BaseException
) -> bool:
    """Return True if the error should count as a CB failure.

    Rate limits are retried, never counted; other client-class
    errors (402 included) are account problems, not outages.
    """
    if issubclass(thrown_type, LitellmRateLimitError):
        return False
    return counts_as_provider_outage(thrown_value)


# Per-model circuit breaker registry: each model gets independent
# failure tracking so one provider's outage doesn't block fallback
# to another provider.
_breaker_registry: dict[str, CircuitBreaker] = {}  # pyright: ignore[reportUnknownVariableType]


def _get_breaker(model: str) -> CircuitBreaker:  # pyright: ignore[reportUnknownParameterType]
    """Get or create a circuit breaker for the given model."""
    if model not in _breaker_registry:
        _breaker_registry[model] = CircuitBreaker(  # pyright: ignore[reportUnknownMemberType]
            failure_threshold=CB_LLM_FAILURE_THRESHOLD,
            recovery_timeout=CB_LLM_RECOVERY_TIMEOUT,
            expected_exception=_counts_as_breaker_failure,
            name=f"llm_{model}",
        )
    return _breaker_registry[model]


@retry(
    stop=stop_after_attempt(RETRY_MAX_ATTEMPTS),
    wait=wait_exponential_jitter(
        initial=RETRY_INITIAL_WAIT, max=RETRY_MAX_WAIT
    ),
    retry=retry_if_exception_type(LitellmRateLimitError),
    reraise=True,
)
async def guarded_tool_call(
    model: str,
    messages: list[dict[str, str]],
    timeout: int,
    *,
    tools: list[dict[str, Any]],
    tool_choice: dict[str, Any],
    api_key: str | None = None,
) -> LLMToolCallResult:
    """Circuit-breaker-protected completion that forces a tool call.

    - Each model has its own circuit breaker (per-model registry).
    - Circuit opens after 5 consecutive provider failures,
      recovers after 30s.
    - Tenacity retries rate-limit errors (429) with jittered
      exponential backoff before surfacing them.
    - ``api_key=None`` lets litellm read the provider key from the
      environment.
    """
    breaker = _get_breaker(model)
    if breaker.opened:  # pyright: ignore[reportUnknownMemberType]
        raise CircuitBreakerError(breaker)  # pyright: ignore[reportUnknownArgumentType]
    with breaker:  # pyright: ignore[reportUnknownMemberType]
        response: Any = await _acompletion(
            model=model,
            messages=messages,
            timeout=timeout,
            max_tokens=LLM_MAX_OUTPUT_TOKENS,
            tools=tools,
            tool_choice=tool_choice,
            api_key=api_key,
        )

    usage: Any = getattr(response, "usage", None)
    message: Any = response.choices[0].message
    tool_calls: Any = getattr(message, "tool_calls", None) or []
    arguments: str | None = None
    if tool_calls:
        arguments = getattr(tool_calls[0].function, "arguments", None)

    return LLMToolCallResult(
        arguments=arguments or None,
        model=model,
        input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
        output_tokens=getattr(usage, "completion_tokens", 0) or 0,
    )
