"""Request/response schemas for the gateway HTTP API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AnalyzeRequest(BaseModel):
    """Request body for POST /api/analyze."""

    model_config = ConfigDict(populate_by_name=True)

    csv_content: str | None = Field(default=None, alias="csvContent")


class AnalyzeResponse(BaseModel):
    """Success body: one result object per submitted row."""

    results: list[dict[str, Any]]


class ErrorResponse(BaseModel):
    """Error body for every non-2xx answer."""

    error: str
