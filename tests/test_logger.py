"""Tests for the structured gateway audit logger."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from bughunter.constants import ERROR_TRUNCATION_CHARS
from bughunter.logger import GatewayLogger


def _audit_entries(caplog: pytest.LogCaptureFixture) -> list[dict]:
    return [
        json.loads(r.getMessage())
        for r in caplog.records
        if r.name == "bughunter.audit"
    ]


def test_creates_log_dir(tmp_path: Path) -> None:
    GatewayLogger(log_dir=tmp_path / "nested" / "logs")
    assert (tmp_path / "nested" / "logs").is_dir()


def test_request_entry(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    audit = GatewayLogger(log_dir=tmp_path)
    with caplog.at_level(logging.INFO, logger="bughunter.audit"):
        audit.log_request(
            "abc123",
            row_count=3,
            model="gemini/gemini-2.5-flash",
            result_count=3,
            duration_ms=12.5,
            input_tokens=1500,
            output_tokens=420,
        )
    (entry,) = _audit_entries(caplog)
    assert entry["type"] == "request"
    assert entry["input_tokens"] == 1500
    assert entry["output_tokens"] == 420
    assert entry["request_id"] == "abc123"
    assert entry["row_count"] == 3
    assert entry["model"] == "gemini/gemini-2.5-flash"
    assert "timestamp" in entry


def test_error_entry_truncated(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    audit = GatewayLogger(log_dir=tmp_path)
    with caplog.at_level(logging.INFO, logger="bughunter.audit"):
        audit.log_error("abc123", 500, "x" * 1000)
    (entry,) = _audit_entries(caplog)
    assert entry["type"] == "error"
    assert entry["status_code"] == 500
    assert len(entry["error"]) == ERROR_TRUNCATION_CHARS
