"""Shared constants: single source of truth for cross-module values.

All magic strings and numbers that appear in 2+ files belong here.
StrEnum members are str-compatible, so downstream code (JSON, CSV,
HTTP payloads) works unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class BugType(StrEnum):
    """Closed set of bug classifications."""

    LOGIC = "Logic"
    HARDWARE_CONSTRAINTS = "Hardware Constraints"
    SYNTAX = "Syntax"
    LIFECYCLE = "Lifecycle"
    PARAMETER_ORDER = "Parameter Order"


class TransportReason(StrEnum):
    """Why a gateway call failed at the transport level.

    RATE_LIMITED and QUOTA_EXHAUSTED are user-actionable;
    everything else collapses into GATEWAY_FAILURE.
    """

    RATE_LIMITED = "rate_limited"
    QUOTA_EXHAUSTED = "quota_exhausted"
    GATEWAY_FAILURE = "gateway_failure"


class NavDirection(StrEnum):
    """Direction for paging through the record batch."""

    PREV = "prev"
    NEXT = "next"


# ── Record Defaults ──────────────────────────────────────

DEFAULT_BUG_TYPE = BugType.LOGIC
DEFAULT_TRUST_SCORE = 80  # result omitted a numeric score
UNANALYZED_TRUST_SCORE = 0  # stub sentinel
TRUST_SCORE_MIN = 0
TRUST_SCORE_MAX = 100

# ── CSV Layout ───────────────────────────────────────────

ID_HEADER = "id"
CODE_HEADERS = frozenset({
    "buggycode",
    "buggy code",
    "code",
    "original code",
})

# Raised from the csv module default of 128 KiB per field
CSV_FIELD_SIZE_LIMIT = 2**31 - 1

SUBMISSION_HEADERS = ("id", "buggyCode")
SESSION_EXPORT_HEADERS = (
    "ID",
    "Explanation",
    "Context",
    "Original Code",
    "Corrected Code",
)
RESULTS_EXPORT_HEADERS = (
    "ID",
    "BugType",
    "TrustScore",
    "Explanation",
    "APIContext",
    "BuggyCode",
    "CorrectedCode",
)

SESSION_EXPORT_PREFIX = "abh-session"
RESULTS_EXPORT_PREFIX = "abh-results"

# ── Gateway HTTP ─────────────────────────────────────────

ANALYZE_PATH = "/api/analyze"
STATUS_RATE_LIMITED = 429
STATUS_PAYMENT_REQUIRED = 402

CORS_ALLOW_HEADERS = (
    "authorization",
    "x-client-info",
    "apikey",
    "content-type",
    "x-supabase-client-platform",
    "x-supabase-client-platform-version",
    "x-supabase-client-runtime",
    "x-supabase-client-runtime-version",
)

MSG_CSV_REQUIRED = "csvContent is required"
MSG_RATE_LIMITED = "Rate limit exceeded. Please try again later."
MSG_PAYMENT_REQUIRED = (
    "Payment required. Please add credits to your workspace."
)
MSG_NO_TOOL_CALL = "No tool call response from AI"

# ── LLM Tool ─────────────────────────────────────────────

SUGGEST_FIXES_TOOL = "suggest_fixes"
LLM_MAX_OUTPUT_TOKENS = 8192

# ── Circuit Breaker Configuration ────────────────────────

CB_LLM_FAILURE_THRESHOLD = 5
CB_LLM_RECOVERY_TIMEOUT = 30

# ── Retry Strategy ───────────────────────────────────────

RETRY_MAX_ATTEMPTS = 3
RETRY_INITIAL_WAIT = 2
RETRY_MAX_WAIT = 30

# ── Misc ─────────────────────────────────────────────────

ERROR_TRUNCATION_CHARS = 200
ID_HEX_LENGTH = 12

# ── Auth Exempt Paths ────────────────────────────────────

AUTH_EXEMPT_PATHS = frozenset({
    "/api/health",
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
})

AUTH_EXEMPT_PREFIXES = ("/api/health",)
