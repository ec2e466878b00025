"""FastAPI dependency injection for settings, logger and analyzer."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import Request

from bughunter.analysis.analyzer import AnalysisOutcome, analyze_csv
from bughunter.config import Settings
from bughunter.logger import GatewayLogger

AnalyzerFn = Callable[[str, Settings], Awaitable[AnalysisOutcome]]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway_logger(request: Request) -> GatewayLogger:
    return request.app.state.logger


def get_analyzer() -> AnalyzerFn:
    """The LLM-backed analyzer; overridden in tests."""
    return analyze_csv
