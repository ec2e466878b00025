"""LLM system prompt and tool schema for RDI bug analysis."""

from typing import Any

from bughunter.constants import SUGGEST_FIXES_TOOL, BugType

RDI_ANALYSIS_PROMPT = f"""\
You are an expert RDI (Remote Device Interface) code analyzer for \
semiconductor test systems. You analyze buggy RDI code and produce \
corrected versions.

You will receive CSV rows where each row has an "id" and "buggyCode" \
column. For each row, analyze the buggy RDI code and produce:
1. correctedCode - the fixed version
2. explanation - why it failed
3. bugType - one of: {", ".join(bt.value for bt in BugType)}
4. apiContext - relevant RDI API documentation for the fix
5. trustScore - 0-100 confidence score

Common RDI bugs to look for:
- Incorrect iClamp parameter order: should be (pin, mode, highLimit, lowLimit)
- Improper lifecycle: operations outside RDI_BEGIN/RDI_END blocks
- Voltage range violations: AVI64 pins max 30V, DVI16 pins max 20V
- Port/pin type mismatches: analog ports must pair with analog pins
- Measurement binding order: smartVec().burstUpload() must be called \
before measure()
- Missing RDI_END causing resource leaks

Return one result per input row, in input order. You MUST respond using \
the {SUGGEST_FIXES_TOOL} tool with the analysis results."""


def build_analysis_prompt(csv_content: str) -> str:
    """User message carrying the submitted CSV."""
    return (
        "Analyze the following CSV of buggy RDI code and return "
        f"fixes for each row:\n\n{csv_content}"
    )


_RESULT_FIELDS = (
    "id",
    "buggyCode",
    "correctedCode",
    "explanation",
    "bugType",
    "apiContext",
    "trustScore",
)

SUGGEST_FIXES_TOOL_SCHEMA: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": SUGGEST_FIXES_TOOL,
        "description": "Return analysis results for each buggy RDI code row.",
        "parameters": {
            "type": "object",
            "properties": {
                "results": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "string"},
                            "buggyCode": {"type": "string"},
                            "correctedCode": {"type": "string"},
                            "explanation": {"type": "string"},
                            "bugType": {
                                "type": "string",
                                "enum": [bt.value for bt in BugType],
                            },
                            "apiContext": {"type": "string"},
                            "trustScore": {"type": "number"},
                        },
                        "required": list(_RESULT_FIELDS),
                        "additionalProperties": False,
                    },
                },
            },
            "required": ["results"],
            "additionalProperties": False,
        },
    },
}

SUGGEST_FIXES_TOOL_CHOICE: dict[str, Any] = {
    "type": "function",
    "function": {"name": SUGGEST_FIXES_TOOL},
}
