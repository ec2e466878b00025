"""Forward submitted CSV to the LLM and return its structured results."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, cast

from circuitbreaker import CircuitBreakerError
from litellm.exceptions import RateLimitError as LitellmRateLimitError

from bughunter.analysis._llm_call import guarded_tool_call
from bughunter.config import Settings
from bughunter.constants import (
    MSG_NO_TOOL_CALL,
    MSG_PAYMENT_REQUIRED,
    MSG_RATE_LIMITED,
    STATUS_PAYMENT_REQUIRED,
    STATUS_RATE_LIMITED,
)
from bughunter.prompts import (
    RDI_ANALYSIS_PROMPT,
    SUGGEST_FIXES_TOOL_CHOICE,
    SUGGEST_FIXES_TOOL_SCHEMA,
    build_analysis_prompt,
)

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """The LLM provider failed; carries the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class AnalysisOutcome:
    payload: dict[str, Any]  # {"results": [...]}
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


async def analyze_csv(
    csv_content: str,
    settings: Settings | None = None,
) -> AnalysisOutcome:
    """Run the RDI analysis prompt over ``csv_content``.

    Models are tried in chain order. Rate-limit and payment
    failures are surfaced immediately since a fallback model on
    the same account would hit the same wall.
    """
    if settings is None:
        settings = Settings()

    messages = [
        {"role": "system", "content": RDI_ANALYSIS_PROMPT},
        {"role": "user", "content": build_analysis_prompt(csv_content)},
    ]

    last_error: Exception | None = None
    for model in settings.litellm_model_chain:
        try:
            result = await guarded_tool_call(
                model,
                messages,
                settings.llm_timeout_seconds,
                tools=[SUGGEST_FIXES_TOOL_SCHEMA],
                tool_choice=SUGGEST_FIXES_TOOL_CHOICE,
                api_key=settings.provider_api_key(model),
            )
        except CircuitBreakerError as exc:
            logger.warning("event=circuit_open model=%s", model)
            last_error = exc
            continue
        except LitellmRateLimitError as exc:
            raise UpstreamError(
                MSG_RATE_LIMITED, STATUS_RATE_LIMITED
            ) from exc
        except Exception as exc:
            if getattr(exc, "status_code", None) == STATUS_PAYMENT_REQUIRED:
                raise UpstreamError(
                    MSG_PAYMENT_REQUIRED, STATUS_PAYMENT_REQUIRED
                ) from exc
            logger.warning(
                "event=analysis_model_failed model=%s",
                model,
                exc_info=True,
            )
            last_error = exc
            continue

        if result.arguments is None:
            raise UpstreamError(MSG_NO_TOOL_CALL)
        return AnalysisOutcome(
            payload=parse_tool_arguments(result.arguments),
            model=result.model,
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
        )

    raise UpstreamError(f"AI gateway error: {last_error}")


def parse_tool_arguments(arguments: str) -> dict[str, Any]:
    """Decode the suggest_fixes arguments; must hold a results list."""
    try:
        data: Any = json.loads(arguments)
    except json.JSONDecodeError as exc:
        raise UpstreamError(
            f"Tool call arguments are not valid JSON: {exc}"
        ) from exc
    if not isinstance(data, dict) or not isinstance(
        cast(dict[str, Any], data).get("results"), list
    ):
        raise UpstreamError("Tool call arguments missing 'results' array")
    return cast(dict[str, Any], data)
