"""Analysis gateway endpoint: CSV in, structured fixes out."""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from bughunter.analysis.analyzer import UpstreamError
from bughunter.api.dependencies import (
    AnalyzerFn,
    get_analyzer,
    get_gateway_logger,
    get_settings,
)
from bughunter.api.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    ErrorResponse,
)
from bughunter.config import Settings
from bughunter.constants import ID_HEX_LENGTH, MSG_CSV_REQUIRED
from bughunter.ingestion.csv_reader import parse_input_csv
from bughunter.logger import GatewayLogger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.post(
    "/analyze",
    responses={
        200: {"model": AnalyzeResponse},
        400: {"model": ErrorResponse},
        402: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def analyze(
    request: Request,
    settings: Settings = Depends(get_settings),
    gateway_logger: GatewayLogger = Depends(get_gateway_logger),
    analyzer: AnalyzerFn = Depends(get_analyzer),
) -> JSONResponse:
    """Analyze every row of the submitted id/buggyCode CSV."""
    request_id = uuid.uuid4().hex[:ID_HEX_LENGTH]

    try:
        body = AnalyzeRequest.model_validate_json(await request.body())
    except ValidationError:
        body = None
    if body is None or not body.csv_content:
        gateway_logger.log_error(request_id, 400, MSG_CSV_REQUIRED)
        return _error(400, MSG_CSV_REQUIRED)

    csv_content = body.csv_content
    row_count = len(parse_input_csv(csv_content))
    start = time.monotonic()

    try:
        outcome = await analyzer(csv_content, settings)
    except UpstreamError as exc:
        logger.warning(
            "event=analyze_failed request_id=%s status=%d error=%s",
            request_id,
            exc.status_code,
            exc,
        )
        gateway_logger.log_error(request_id, exc.status_code, str(exc))
        return _error(exc.status_code, str(exc))
    except Exception as exc:
        logger.exception("event=analyze_error request_id=%s", request_id)
        gateway_logger.log_error(request_id, 500, str(exc))
        return _error(500, str(exc) or "Unknown error")

    duration_ms = (time.monotonic() - start) * 1000
    results = outcome.payload.get("results", [])
    gateway_logger.log_request(
        request_id,
        row_count=row_count,
        model=outcome.model,
        result_count=len(results),
        duration_ms=duration_ms,
        input_tokens=outcome.input_tokens,
        output_tokens=outcome.output_tokens,
    )
    return JSONResponse(content=outcome.payload)
