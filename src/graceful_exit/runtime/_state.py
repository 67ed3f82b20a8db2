"""Runtime state container and access helpers."""

from __future__ import annotations

from dataclasses import dataclass
from threading import RLock

from graceful_exit.adapters import TriggerCapture
from graceful_exit.application.ports import LogSinkPort
from graceful_exit.application.use_cases import ShutdownOrchestrator
from graceful_exit.domain import CleanupCallback, DiagnosticContext, ReasonCodeTable

from ._settings import RuntimeSettings


@dataclass(slots=True)
class GracefulExitRuntime:
    """Aggregate of live collaborators assembled by the composition root."""

    orchestrator: ShutdownOrchestrator
    triggers: TriggerCapture
    context: DiagnosticContext
    codes: ReasonCodeTable
    primary: LogSinkPort
    diagnostic: LogSinkPort
    settings: RuntimeSettings


_STATE: GracefulExitRuntime | None = None
_PENDING: list[CleanupCallback] = []
_STATE_LOCK = RLock()


def set_runtime(runtime: GracefulExitRuntime) -> None:
    """Install ``runtime`` as the active singleton."""

    with _STATE_LOCK:
        global _STATE
        _STATE = runtime


def clear_runtime() -> None:
    """Remove the active runtime if present."""

    with _STATE_LOCK:
        global _STATE
        _STATE = None


def current_runtime() -> GracefulExitRuntime:
    """Return the active runtime or raise when uninitialised."""

    with _STATE_LOCK:
        if _STATE is None:
            raise RuntimeError("graceful_exit.setup() must be called before using the shutdown API")
        return _STATE


def is_initialised() -> bool:
    """Return ``True`` when :func:`graceful_exit.setup` has been called."""

    with _STATE_LOCK:
        return _STATE is not None


def register_or_queue(callback: CleanupCallback) -> bool:
    """Register on the active runtime; queue when none exists.

    Returns ``True`` when the callback was queued for the next setup.
    """

    with _STATE_LOCK:
        if _STATE is None:
            _PENDING.append(callback)
            return True
        orchestrator = _STATE.orchestrator
    orchestrator.register(callback)
    return False


def drain_pending() -> tuple[CleanupCallback, ...]:
    """Return and forget callbacks queued before setup."""

    with _STATE_LOCK:
        pending = tuple(_PENDING)
        _PENDING.clear()
        return pending


__all__ = [
    "GracefulExitRuntime",
    "clear_runtime",
    "current_runtime",
    "drain_pending",
    "is_initialised",
    "register_or_queue",
    "set_runtime",
]
