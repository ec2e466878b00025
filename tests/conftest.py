"""Shared test fixtures: app state, gateway fakes, sample data."""

import os

# Force demo API keys for all tests: no real LLM calls.
# These are set unconditionally at import time, so even if you have
# real keys in your shell environment, pytest overwrites them before
# any Settings() is created.
os.environ["GEMINI_API_KEY"] = "for-demo-purposes-only"
os.environ["OPENAI_API_KEY"] = "for-demo-purposes-only"
os.environ["API_KEY"] = ""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from bughunter.api.dependencies import get_analyzer
from bughunter.config import Settings
from bughunter.logger import GatewayLogger
from bughunter.main import app
from bughunter.models.record import Record

GATEWAY_URL = "http://gateway.test/api/analyze"


def setup_test_app(
    tmp_path: Path,
    *,
    analyzer: Any = None,
    settings: Settings | None = None,
) -> None:
    """Common app-state setup for API test fixtures.

    ASGITransport does not run the lifespan, so the state it
    would create is installed here instead.
    """
    app.state.settings = settings or Settings()
    app.state.logger = GatewayLogger(
        log_dir=Path(tmp_path / "logs"), level="WARNING"
    )
    if analyzer is not None:
        app.dependency_overrides[get_analyzer] = lambda: analyzer


def make_records(*ids: str) -> list[Record]:
    """Stub records whose buggy code mentions their id."""
    return [
        Record.stub(record_id, f"RDI_BEGIN();\nmeasure({record_id});")
        for record_id in ids
    ]


def result_payload(record: Record, **overrides: Any) -> dict[str, Any]:
    """A fully populated gateway result for ``record``."""
    payload: dict[str, Any] = {
        "id": record.id,
        "buggyCode": record.buggy_code,
        "correctedCode": record.buggy_code + "\nRDI_END();",
        "explanation": "**Missing Lifecycle Terminator**",
        "bugType": "Lifecycle",
        "apiContext": "**RDI_END()** releases resources",
        "trustScore": 93,
    }
    payload.update(overrides)
    return payload


class RecordingHandler:
    """httpx.MockTransport handler replaying canned responses."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # The last response repeats for any further requests
        if len(self._responses) > 1:
            response = self._responses.pop(0)
        else:
            response = self._responses[0]
        if isinstance(response, Exception):
            raise response
        # Fresh copy so a repeated response is never re-consumed
        return httpx.Response(
            status_code=response.status_code,
            headers=response.headers,
            content=response.content,
        )

    @property
    def bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def gateway_settings() -> Settings:
    return Settings(gateway_url=GATEWAY_URL, gateway_max_attempts=3)


@pytest.fixture
def mock_http() -> Callable[[RecordingHandler], httpx.AsyncClient]:
    """Factory for an AsyncClient backed by a RecordingHandler."""

    def _make(handler: RecordingHandler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
