"""Domain entities and value objects used by the shutdown coordinator."""

from __future__ import annotations

from .context import DiagnosticContext
from .handlers import CleanupCallback, CleanupHandler
from .reason_codes import UNKNOWN_REASON, ReasonCode, ReasonCodeTable, coerce_code
from .state import ShutdownPhase, ShutdownReason, ShutdownSnapshot, ShutdownState

__all__ = [
    "CleanupCallback",
    "CleanupHandler",
    "DiagnosticContext",
    "ReasonCode",
    "ReasonCodeTable",
    "ShutdownPhase",
    "ShutdownReason",
    "ShutdownSnapshot",
    "ShutdownState",
    "UNKNOWN_REASON",
    "coerce_code",
]
