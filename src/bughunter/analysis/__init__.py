"""LLM-backed RDI analysis for the gateway service."""

from bughunter.analysis._llm_call import (
    LLMToolCallResult,
    guarded_tool_call,
)
from bughunter.analysis.analyzer import (
    AnalysisOutcome,
    UpstreamError,
    analyze_csv,
)

__all__ = [
    "AnalysisOutcome",
    "LLMToolCallResult",
    "UpstreamError",
    "analyze_csv",
    "guarded_tool_call",
]
