"""Session state, reducer and the async hunt driver."""

from bughunter.session.hunt import BatchSubmitter, HuntSession, failure_message
from bughunter.session.state import (
    Action,
    LoadRows,
    Navigate,
    RevealCurrent,
    SessionState,
    SubmitFailed,
    SubmitStarted,
    SubmitSucceeded,
    export_snapshot,
    reduce,
)

__all__ = [
    "Action",
    "BatchSubmitter",
    "HuntSession",
    "LoadRows",
    "Navigate",
    "RevealCurrent",
    "SessionState",
    "SubmitFailed",
    "SubmitStarted",
    "SubmitSucceeded",
    "export_snapshot",
    "failure_message",
    "reduce",
]
