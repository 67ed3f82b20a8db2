"""Graceful shutdown coordinator for long-running Python processes.

Every fatal trigger (uncaught exception, unhandled asyncio failure,
``SIGINT``/``SIGUSR1``/``SIGUSR2``, :func:`quit`) funnels into one idempotent
shutdown sequence: registered cleanup handlers run concurrently, a forced-exit
deadline bounds them, and the process exits with a code naming the trigger.

>>> import graceful_exit
>>> graceful_exit.describe(3)
'SIGINT'
"""

from __future__ import annotations

from .application.use_cases import DEFAULT_TIMEOUT_MS
from .domain import DiagnosticContext, ReasonCode, ReasonCodeTable, ShutdownPhase, ShutdownReason, ShutdownSnapshot
from .runtime import (
    GracefulExitHandle,
    attach_loop,
    describe,
    graceful_exit,
    inspect_runtime,
    is_initialised,
    quit,
    setup,
    summary_info,
    teardown,
)

__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "DiagnosticContext",
    "GracefulExitHandle",
    "ReasonCode",
    "ReasonCodeTable",
    "ShutdownPhase",
    "ShutdownReason",
    "ShutdownSnapshot",
    "attach_loop",
    "describe",
    "graceful_exit",
    "inspect_runtime",
    "is_initialised",
    "quit",
    "setup",
    "summary_info",
    "teardown",
]
