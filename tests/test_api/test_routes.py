"""Tests for API routes using httpx AsyncClient."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from bughunter.analysis.analyzer import AnalysisOutcome, UpstreamError
from bughunter.config import Settings
from bughunter.main import app
from bughunter.models.record import Record
from tests.conftest import make_records, result_payload, setup_test_app

CSV = "id,buggyCode\nBUG-1,RDI_BEGIN();\nBUG-2,measure();"


class FakeAnalyzer:
    """Stands in for analyze_csv; records what it was given."""

    def __init__(
        self,
        payload: dict[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.payload = payload or {"results": []}
        self.error = error
        self.calls: list[str] = []

    async def __call__(
        self, csv_content: str, settings: Settings | None = None
    ) -> AnalysisOutcome:
        self.calls.append(csv_content)
        if self.error is not None:
            raise self.error
        return AnalysisOutcome(
            payload=self.payload,
            model="test-model",
            input_tokens=300,
            output_tokens=150,
        )


async def _client(tmp_path: Path, **kwargs: Any):
    setup_test_app(tmp_path, **kwargs)
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
def analyzer() -> FakeAnalyzer:
    records = make_records("BUG-1", "BUG-2")
    return FakeAnalyzer(
        payload={"results": [result_payload(r) for r in records]}
    )


@pytest.fixture
async def client(tmp_path: Path, analyzer: FakeAnalyzer):
    """Test client with a fake analyzer (no LLM calls)."""
    async with await _client(tmp_path, analyzer=analyzer) as c:
        yield c

    app.dependency_overrides.clear()


class TestHealthRoutes:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert "timestamp" in data


class TestAnalyzeRoute:
    async def test_success_returns_results(
        self, client: AsyncClient, analyzer: FakeAnalyzer
    ) -> None:
        resp = await client.post("/api/analyze", json={"csvContent": CSV})
        assert resp.status_code == 200
        results = resp.json()["results"]
        assert [r["id"] for r in results] == ["BUG-1", "BUG-2"]
        assert analyzer.calls == [CSV]
        # Results decode into records on the client side
        assert Record.from_payload(results[0]).trust_score == 93

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"csvContent": ""},
            {"csvContent": None},
            {"csvContent": 42},
        ],
    )
    async def test_missing_csv_content_is_400(
        self,
        client: AsyncClient,
        analyzer: FakeAnalyzer,
        body: dict[str, Any],
    ) -> None:
        resp = await client.post("/api/analyze", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "csvContent is required"}
        assert analyzer.calls == []

    async def test_malformed_json_is_400(
        self, client: AsyncClient
    ) -> None:
        resp = await client.post(
            "/api/analyze",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (UpstreamError("Rate limit exceeded. Please try again later.", 429), 429),
            (UpstreamError("Payment required. Please add credits.", 402), 402),
            (UpstreamError("No tool call response from AI"), 500),
        ],
    )
    async def test_upstream_errors_map_to_status(
        self, tmp_path: Path, error: UpstreamError, status: int
    ) -> None:
        async with await _client(
            tmp_path, analyzer=FakeAnalyzer(error=error)
        ) as c:
            resp = await c.post("/api/analyze", json={"csvContent": CSV})
        app.dependency_overrides.clear()

        assert resp.status_code == status
        assert resp.json() == {"error": str(error)}

    async def test_unexpected_error_is_500(self, tmp_path: Path) -> None:
        async with await _client(
            tmp_path, analyzer=FakeAnalyzer(error=RuntimeError("kaboom"))
        ) as c:
            resp = await c.post("/api/analyze", json={"csvContent": CSV})
        app.dependency_overrides.clear()

        assert resp.status_code == 500
        assert resp.json() == {"error": "kaboom"}

    async def test_request_logged_to_audit_log(
        self, client: AsyncClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="bughunter.audit"):
            await client.post("/api/analyze", json={"csvContent": CSV})
        audit = [
            r.getMessage()
            for r in caplog.records
            if r.name == "bughunter.audit"
        ]
        assert len(audit) == 1
        assert '"row_count": 2' in audit[0]
        assert '"result_count": 2' in audit[0]
        assert '"model": "test-model"' in audit[0]
        assert '"input_tokens": 300' in audit[0]
        assert '"output_tokens": 150' in audit[0]


class TestCors:
    async def test_preflight_answered(self, client: AsyncClient) -> None:
        resp = await client.options(
            "/api/analyze",
            headers={
                "Origin": "https://example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type, apikey",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"
        allowed = resp.headers["access-control-allow-headers"].lower()
        for header in ("authorization", "x-client-info", "apikey"):
            assert header in allowed

    async def test_simple_request_carries_allow_origin(
        self, client: AsyncClient
    ) -> None:
        resp = await client.post(
            "/api/analyze",
            json={"csvContent": CSV},
            headers={"Origin": "https://example.com"},
        )
        assert resp.headers["access-control-allow-origin"] == "*"


class TestApiKey:
    @pytest.fixture
    async def secured(self, tmp_path: Path, analyzer: FakeAnalyzer):
        async with await _client(
            tmp_path,
            analyzer=analyzer,
            settings=Settings(api_key="s3cret"),
        ) as c:
            yield c
        app.dependency_overrides.clear()

    async def test_missing_key_rejected(self, secured: AsyncClient) -> None:
        resp = await secured.post("/api/analyze", json={"csvContent": CSV})
        assert resp.status_code == 401

    async def test_valid_key_accepted(self, secured: AsyncClient) -> None:
        resp = await secured.post(
            "/api/analyze",
            json={"csvContent": CSV},
            headers={"X-API-Key": "s3cret"},
        )
        assert resp.status_code == 200

    async def test_health_is_exempt(self, secured: AsyncClient) -> None:
        resp = await secured.get("/api/health")
        assert resp.status_code == 200
