"""Structured JSON logger for gateway request and error tracking."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from bughunter.constants import ERROR_TRUNCATION_CHARS
__all__ = ["GatewayLogger"]


class GatewayLogger:
    """Structured JSON logger with request_id correlation."""

    def __init__(self, log_dir: Path, level: str = "INFO") -> None:
        self._log_dir = log_dir
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger("bughunter.audit")
        self._logger.setLevel(getattr(logging, level.upper()))

        if not self._logger.handlers:
            handler = logging.FileHandler(log_dir / "gateway.log")
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)

    def log_request(
        self,
        request_id: str,
        row_count: int,
        model: str,
        result_count: int,
        duration_ms: float,
        input_tokens: int = 0,
        output_tokens: int = 0,
    ) -> None:
        self._logger.info(
            json.dumps({
                "type": "request",
                "timestamp": datetime.now(UTC).isoformat(),
                "request_id": request_id,
                "row_count": row_count,
                "model": model,
                "result_count": result_count,
                "duration_ms": duration_ms,
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
            })
        )

    def log_error(
        self,
        request_id: str,
        status_code: int,
        error: str,
    ) -> None:
        self._logger.error(
            json.dumps({
                "type": "error",
                "timestamp": datetime.now(UTC).isoformat(),
                "request_id": request_id,
                "status_code": status_code,
                "error": error[:ERROR_TRUNCATION_CHARS],
            })
        )
