"""Canned RDI bug examples shown before any upload."""

from __future__ import annotations

from bughunter.constants import BugType
from bughunter.models.record import Record

SAMPLE_RECORDS: tuple[Record, ...] = (
    Record(
        id="BUG-001",
        buggy_code=(
            "// Incorrect iClamp parameter order\n"
            "RDI_BEGIN();\n"
            "AVI64.setVoltage(pinA, 35.0);  // Exceeds 30V max\n"
            "iClamp(pinB, 0.5, 0.1, HIGH);  // Wrong param order\n"
            "measure(pinA);\n"
            "RDI_END();"
        ),
        corrected_code=(
            "// Fixed iClamp parameter order & voltage\n"
            "RDI_BEGIN();\n"
            "AVI64.setVoltage(pinA, 28.0);  // Within 30V limit\n"
            "iClamp(pinB, HIGH, 0.5, 0.1);  // Correct: pin, mode, high, low\n"
            "measure(pinA);\n"
            "RDI_END();"
        ),
        explanation=(
            "Two bugs found:\n"
            "1. **Voltage Range Violation**: AVI64 pins have a maximum "
            "voltage of 30V. The original code sets 35V, which can damage "
            "hardware.\n"
            "2. **iClamp Parameter Order**: The iClamp function expects "
            "(pin, mode, highLimit, lowLimit), but parameters were "
            "shuffled; mode was placed third instead of second."
        ),
        bug_type=BugType.PARAMETER_ORDER,
        api_context=(
            "**AVI64.setVoltage(pin, voltage)**\n"
            "- Range: -2V to +30V\n"
            "- Exceeding range triggers HW protection fault\n\n"
            "**iClamp(pin, mode, highLimit, lowLimit)**\n"
            "- mode: HIGH | LOW | BOTH\n"
            "- Limits in Amps (0.001 to 1.0)"
        ),
        trust_score=94,
    ),
    Record(
        id="BUG-002",
        buggy_code=(
            "// Lifecycle error\n"
            "measure(pinA);\n"
            "RDI_BEGIN();\n"
            "AVI64.connect(portX, pinA);\n"
            "smartVec().burstUpload(data);\n"
            "RDI_END();"
        ),
        corrected_code=(
            "// Fixed lifecycle order\n"
            "RDI_BEGIN();\n"
            "AVI64.connect(portX, pinA);\n"
            "smartVec().burstUpload(data);\n"
            "measure(pinA);\n"
            "RDI_END();"
        ),
        explanation=(
            "**Improper Lifecycle**: `measure()` was called before "
            "`RDI_BEGIN()`, meaning the measurement subsystem is "
            "uninitialized. All RDI operations must occur between "
            "`RDI_BEGIN()` and `RDI_END()` markers. The measurement was "
            "moved inside the lifecycle block."
        ),
        bug_type=BugType.LIFECYCLE,
        api_context=(
            "**RDI Lifecycle Protocol**\n"
            "- `RDI_BEGIN()` initializes hardware context\n"
            "- All pin operations must be within BEGIN/END\n"
            "- `RDI_END()` releases resources & flushes buffers\n"
            "- Calling ops outside lifecycle = undefined behavior"
        ),
        trust_score=98,
    ),
    Record(
        id="BUG-003",
        buggy_code=(
            "// Port/pin mismatch\n"
            "RDI_BEGIN();\n"
            "DVI16.connect(portAnalog, pinDigital_3);\n"
            "DVI16.setVoltage(portAnalog, 5.0);\n"
            "measure(pinDigital_3);\n"
            "RDI_END();"
        ),
        corrected_code=(
            "// Fixed port/pin configuration\n"
            "RDI_BEGIN();\n"
            "DVI16.connect(portAnalog, pinAnalog_3);\n"
            "DVI16.setVoltage(portAnalog, 5.0);\n"
            "measure(pinAnalog_3);\n"
            "RDI_END();"
        ),
        explanation=(
            "**Port Name & Pin Config Mismatch**: `portAnalog` was "
            "connected to `pinDigital_3`, which is a digital-type pin. "
            "Analog ports must be paired with analog-capable pins. This "
            "mismatch causes silent measurement errors and incorrect test "
            "results."
        ),
        bug_type=BugType.LOGIC,
        api_context=(
            "**DVI16.connect(port, pin)**\n"
            "- Port type must match pin capability\n"
            "- Analog ports → analog pins only\n"
            "- Digital ports → digital pins only\n"
            "- Mismatch does NOT throw error; fails silently"
        ),
        trust_score=91,
    ),
    Record(
        id="BUG-004",
        buggy_code=(
            "// Measurement binding order\n"
            "RDI_BEGIN();\n"
            "AVI64.connect(portX, pinA);\n"
            "result = measure(pinA);\n"
            "smartVec().burstUpload(testPattern);\n"
            "applyResult(result);\n"
            "RDI_END();"
        ),
        corrected_code=(
            "// Fixed measurement binding order\n"
            "RDI_BEGIN();\n"
            "AVI64.connect(portX, pinA);\n"
            "smartVec().burstUpload(testPattern);\n"
            "result = measure(pinA);\n"
            "applyResult(result);\n"
            "RDI_END();"
        ),
        explanation=(
            "**Measurement Binding Order Bug**: `measure()` was called "
            "before `smartVec().burstUpload()`. The burst pattern must be "
            "uploaded and applied to pins before taking measurements, "
            "otherwise the measurement captures an idle/default state "
            "instead of the test stimulus response."
        ),
        bug_type=BugType.LOGIC,
        api_context=(
            "**smartVec().burstUpload(pattern)**\n"
            "- Must be called BEFORE measure()\n"
            "- Uploads vector pattern to sequencer\n"
            "- Pattern executes on next clock cycle\n\n"
            "**measure(pin)** captures pin state AFTER pattern completes"
        ),
        trust_score=87,
    ),
    Record(
        id="BUG-005",
        buggy_code=(
            "// Missing RDI_END\n"
            "RDI_BEGIN();\n"
            "AVI64.connect(portX, pinA);\n"
            "AVI64.setVoltage(portX, 12.0);\n"
            "iClamp(pinA, HIGH, 0.5, 0.1);\n"
            "measure(pinA);\n"
            "// forgot RDI_END"
        ),
        corrected_code=(
            "// Added missing RDI_END\n"
            "RDI_BEGIN();\n"
            "AVI64.connect(portX, pinA);\n"
            "AVI64.setVoltage(portX, 12.0);\n"
            "iClamp(pinA, HIGH, 0.5, 0.1);\n"
            "measure(pinA);\n"
            "RDI_END();"
        ),
        explanation=(
            "**Missing Lifecycle Terminator**: `RDI_END()` was never "
            "called. This leaves hardware resources locked, prevents other "
            "test sequences from executing, and can cause resource "
            "exhaustion on the tester. Every `RDI_BEGIN()` must have a "
            "matching `RDI_END()`."
        ),
        bug_type=BugType.LIFECYCLE,
        api_context=(
            "**RDI_END()**\n"
            "- Releases all pin connections\n"
            "- Flushes measurement buffers\n"
            "- Resets clamp settings\n"
            "- MUST be called even if errors occur\n"
            "- Consider using try/finally pattern"
        ),
        trust_score=96,
    ),
)
