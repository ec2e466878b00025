"""Tests for CLI argument parsing and command execution."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from bughunter.cli import _build_parser, _run_analyze, _run_samples
from bughunter.constants import TransportReason
from bughunter.gateway.client import AnalyzedBatch
from bughunter.ingestion.csv_reader import read_input_csv
from bughunter.models.record import Record
from bughunter.resilience.errors import TransportError


class TestArgParser:
    def test_version_flag(self) -> None:
        args = _build_parser().parse_args(["--version"])
        assert args.version is True

    def test_serve_defaults(self) -> None:
        args = _build_parser().parse_args(["serve"])
        assert args.command == "serve"
        assert args.host == "127.0.0.1"
        assert args.port == 8000

    def test_analyze_with_options(self) -> None:
        args = _build_parser().parse_args(
            [
                "analyze",
                "bugs.csv",
                "-o",
                "./out",
                "--gateway-url",
                "http://gw:8000/api/analyze",
                "--verbose",
            ]
        )
        assert args.input_csv == "bugs.csv"
        assert args.output_dir == "./out"
        assert args.gateway_url == "http://gw:8000/api/analyze"
        assert args.verbose is True

    def test_no_command(self) -> None:
        assert _build_parser().parse_args([]).command is None


class TestSamples:
    def test_session_snapshot_written(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        args = _build_parser().parse_args(["samples", "-o", str(tmp_path)])
        _run_samples(args)

        (path,) = tmp_path.glob("abh-session-*.csv")
        header = path.read_text().split("\n")[0]
        assert header == "ID,Explanation,Context,Original Code,Corrected Code"
        assert "Wrote 5 sample(s)" in capsys.readouterr().out

    def test_full_results_written(self, tmp_path: Path) -> None:
        args = _build_parser().parse_args(
            ["samples", "-o", str(tmp_path), "--full"]
        )
        _run_samples(args)
        (path,) = tmp_path.glob("abh-results-*.csv")
        assert path.read_text().startswith("ID,BugType,TrustScore,")


class _FakeClient:
    """Async-context gateway client that stamps every record."""

    error: Exception | None = None

    def __init__(self, settings: Any) -> None:
        self.settings = settings

    async def __aenter__(self) -> _FakeClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        return None

    async def submit(self, records: Sequence[Record]) -> AnalyzedBatch:
        if self.error is not None:
            raise self.error
        return AnalyzedBatch(
            records=tuple(
                replace(r, corrected_code="fixed();", trust_score=91)
                for r in records
            ),
            request_id="cli-test",
            duration_ms=1.0,
        )


class TestAnalyze:
    def _write_input(self, tmp_path: Path, text: str) -> Path:
        path = tmp_path / "bugs.csv"
        path.write_text(text, encoding="utf-8")
        return path

    def test_results_exported(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        source = self._write_input(
            tmp_path, "ID,Buggy Code\nBUG-1,a();\nBUG-2,b();"
        )
        out = tmp_path / "out"
        args = _build_parser().parse_args(
            ["analyze", str(source), "-o", str(out)]
        )
        with patch(
            "bughunter.gateway.client.AnalysisGatewayClient", _FakeClient
        ):
            _run_analyze(args)

        (path,) = out.glob("abh-results-*.csv")
        lines = path.read_text().split("\n")
        assert len(lines) == 3
        assert lines[1].startswith("BUG-1,Logic,91,")
        assert "Done! 2 result(s)" in capsys.readouterr().out

    def test_missing_file_exits(self, tmp_path: Path) -> None:
        args = _build_parser().parse_args(
            ["analyze", str(tmp_path / "nope.csv")]
        )
        with pytest.raises(SystemExit) as info:
            _run_analyze(args)
        assert info.value.code == 1

    def test_unrecognized_csv_exits(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        source = self._write_input(tmp_path, "name,value\nx,1")
        args = _build_parser().parse_args(["analyze", str(source)])
        with pytest.raises(SystemExit):
            _run_analyze(args)
        assert "unrecognized CSV" in capsys.readouterr().err

    def test_gateway_failure_exits(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        source = self._write_input(tmp_path, "id,code\nBUG-1,a();")
        args = _build_parser().parse_args(
            ["analyze", str(source), "-o", str(tmp_path / "out")]
        )
        failing = type(
            "_Failing",
            (_FakeClient,),
            {
                "error": TransportError(
                    "Rate limit exceeded.", TransportReason.RATE_LIMITED, 429
                )
            },
        )
        with patch("bughunter.gateway.client.AnalysisGatewayClient", failing):
            with pytest.raises(SystemExit):
                _run_analyze(args)
        assert "rate_limited" in capsys.readouterr().err
        assert not (tmp_path / "out").exists()


def test_results_csv_reads_back_as_input(tmp_path: Path) -> None:
    """An exported results file is itself a valid upload."""
    args = _build_parser().parse_args(
        ["samples", "-o", str(tmp_path), "--full"]
    )
    _run_samples(args)
    (path,) = tmp_path.glob("abh-results-*.csv")
    rows = read_input_csv(path.read_text())
    assert [r.id for r in rows][:2] == ["BUG-001", "BUG-002"]
