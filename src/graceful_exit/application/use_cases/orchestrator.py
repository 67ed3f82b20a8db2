"""Shutdown orchestration: idempotency guard, handler fan-out, forced exit.

Purpose
-------
Own the single shutdown sequence of the process. Every trigger ends up in
:meth:`ShutdownOrchestrator.begin`; the first one wins, runs all registered
cleanup handlers concurrently, and arms a forced-exit deadline. The process
exits with the originating reason code once every handler settled or the
deadline elapsed, whichever comes first.

Contents
--------
* :class:`ShutdownOrchestrator` – the state machine
  (``IDLE`` → ``SHUTTING_DOWN`` → ``EXITED``).
* Message constants shared with tests and docs.

System Role
-----------
Application-layer core composed by :mod:`graceful_exit.runtime` and driven by
:class:`graceful_exit.adapters.triggers.TriggerCapture`.

Concurrency Notes
-----------------
Triggers arrive from the event loop, from ``signal.signal`` handlers, from
``threading.excepthook`` on worker threads, and from the deadline timer
thread. All phase and counter mutations therefore happen under one
re-entrant lock; the phase flips to ``SHUTTING_DOWN`` before any handler is
invoked. The deadline runs on a :class:`threading.Timer` so a blocked event
loop cannot postpone the forced exit.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from typing import Any, Awaitable, Sequence

from graceful_exit.application.ports import LogSinkPort, ProcessPort
from graceful_exit.domain import (
    CleanupCallback,
    CleanupHandler,
    ReasonCode,
    ReasonCodeTable,
    ShutdownPhase,
    ShutdownReason,
    ShutdownSnapshot,
    ShutdownState,
)

from .report import ExitReport

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000

FORCE_EXIT_MESSAGE = "Force Exit (2x SIGINT)"
LEAK_MESSAGE = "CLEANUP WAS CALLED AGAIN!!! There is some error leaking in the cleanup process."
TIMEOUT_MESSAGE = "Cleanup Timeout"
LATE_REGISTRATION_MESSAGE = "Cleanup handler registered after shutdown began; it will not run"


class ShutdownOrchestrator:
    """Drive the shutdown state machine for one process.

    Parameters
    ----------
    primary, diagnostic:
        Log sinks. ``primary`` receives ``info`` records (force exit, timeout);
        ``diagnostic`` receives the verbose trace.
    codes:
        Reason-code table used for handler reasons and log lines.
    report:
        Exit report callable, invoked exactly once right before exiting.
    process:
        Port performing the actual exit.
    timeout_ms:
        Forced-exit deadline in milliseconds. ``0`` exits without waiting.
    """

    def __init__(
        self,
        *,
        primary: LogSinkPort,
        diagnostic: LogSinkPort,
        codes: ReasonCodeTable,
        report: ExitReport,
        process: ProcessPort,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        if timeout_ms < 0:
            raise ValueError("timeout_ms must be zero or positive")
        self._primary = primary
        self._diagnostic = diagnostic
        self._codes = codes
        self._report = report
        self._process = process
        self._timeout_ms = timeout_ms
        self._lock = threading.RLock()
        self._state = ShutdownState()
        self._handlers: list[CleanupHandler] = []
        self._timer: threading.Timer | None = None
        self._home_loop: asyncio.AbstractEventLoop | None = None
        self._wait_task: asyncio.Task[None] | None = None

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @property
    def codes(self) -> ReasonCodeTable:
        return self._codes

    @property
    def handlers(self) -> tuple[CleanupHandler, ...]:
        with self._lock:
            return tuple(self._handlers)

    def snapshot(self) -> ShutdownSnapshot:
        with self._lock:
            return self._state.snapshot()

    def attach_loop(self, loop: asyncio.AbstractEventLoop | None) -> None:
        """Remember the host loop so triggers from other threads run handlers there."""

        self._home_loop = loop

    def register(self, callback: CleanupCallback) -> CleanupHandler | None:
        """Add one cleanup handler; returns ``None`` once shutdown has begun."""

        handler: CleanupHandler | None = None
        with self._lock:
            if self._state.phase is ShutdownPhase.IDLE:
                handler = CleanupHandler(callback=callback, index=len(self._handlers))
                self._handlers.append(handler)
                self._state.note_registered()
        if handler is None:
            LOGGER.warning(LATE_REGISTRATION_MESSAGE)
            self._diagnostic.log(LATE_REGISTRATION_MESSAGE)
        return handler

    def begin(self, code: int) -> None:
        """Start the shutdown sequence for ``code`` or handle a repeated trigger."""

        with self._lock:
            started = self._state.begin(code)
            phase = self._state.phase
            handlers = tuple(self._handlers) if started else ()
            if started and self._timeout_ms > 0:
                self._arm_timer(code)

        if not started:
            self._handle_repeat(code, phase)
            return

        reason = ShutdownReason(code=code, description=self._codes.describe(code))
        LOGGER.info("Shutdown started (%s - %s) with %d cleanup handler(s)", reason.code, reason.description, len(handlers))
        self._diagnostic.log(f"CLEANUP GRACEFULLY {reason.code} - {reason.description}", len(handlers))
        self._dispatch(handlers, reason)

    def terminate(self, code: int) -> None:
        """Fix the exit code, emit the exit report once, and exit the process."""

        with self._lock:
            if not self._state.finish(code):
                return
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        try:
            self._report(code)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Exit report failed; exiting anyway", exc_info=exc)
        self._process.exit(code)

    def _handle_repeat(self, code: int, phase: ShutdownPhase) -> None:
        if phase is ShutdownPhase.EXITED:
            LOGGER.debug("Ignoring shutdown trigger %s after exit", code)
            return
        if code == ReasonCode.SIGINT:
            self._diagnostic.log(FORCE_EXIT_MESSAGE)
            self._primary.info(FORCE_EXIT_MESSAGE)
            self.terminate(code)
            return
        LOGGER.warning(LEAK_MESSAGE)
        self._diagnostic.log(LEAK_MESSAGE)

    def _dispatch(self, handlers: Sequence[CleanupHandler], reason: ShutdownReason) -> None:
        """Run the handlers on the calling loop, the home loop, or a fresh loop."""

        loop = _running_loop()
        if loop is not None:
            # signal.signal handlers run here while the selector may be blocked
            loop.call_soon_threadsafe(self._launch, handlers, reason, loop)
            return
        home = self._home_loop
        if home is not None and home.is_running() and not home.is_closed():
            home.call_soon_threadsafe(self._launch, handlers, reason, home)
            return
        self._launch(handlers, reason, None)

    def _launch(
        self,
        handlers: Sequence[CleanupHandler],
        reason: ShutdownReason,
        loop: asyncio.AbstractEventLoop | None,
    ) -> None:
        with self._lock:
            if self._state.phase is ShutdownPhase.EXITED:
                return
        pending = self._start_handlers(handlers, reason)

        if self._timeout_ms == 0:
            if pending:
                _discard(pending)
                self._notify_timeout()
            self.terminate(reason.code)
            return
        if not pending:
            self.terminate(reason.code)
            return

        if loop is not None:
            self._wait_task = loop.create_task(self._await_handlers(pending, reason.code))
            return
        try:
            asyncio.run(self._await_handlers(pending, reason.code))
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Cleanup loop failed", exc_info=exc)
            self._diagnostic.log("Error on Graceful Exit Process", exc)
            self.terminate(ReasonCode.CLEANUP_ERROR)

    def _start_handlers(
        self,
        handlers: Sequence[CleanupHandler],
        reason: ShutdownReason,
    ) -> list[tuple[CleanupHandler, Awaitable[Any]]]:
        """Invoke every handler in registration order; collect awaitables."""

        pending: list[tuple[CleanupHandler, Awaitable[Any]]] = []
        for handler in handlers:
            try:
                result = handler.invoke(reason)
            except BaseException as exc:  # noqa: BLE001
                self._record_failure(handler, exc)
                self._mark_completed()
                continue
            if inspect.isawaitable(result):
                pending.append((handler, result))
            else:
                self._mark_completed()
        return pending

    async def _await_handlers(self, pending: Sequence[tuple[CleanupHandler, Awaitable[Any]]], code: int) -> None:
        tasks = [asyncio.ensure_future(self._settle(handler, awaitable)) for handler, awaitable in pending]
        await asyncio.wait(tasks)
        self.terminate(code)

    async def _settle(self, handler: CleanupHandler, awaitable: Awaitable[Any]) -> None:
        try:
            await awaitable
        except asyncio.CancelledError:
            LOGGER.debug("Cleanup handler %s was cancelled", handler.name)
        except BaseException as exc:  # noqa: BLE001
            self._record_failure(handler, exc)
        self._mark_completed()

    def _mark_completed(self) -> None:
        with self._lock:
            self._state.note_completed()
            completed, registered = self._state.completed, self._state.registered
        LOGGER.debug("Cleanup handler settled (%d/%d)", completed, registered)

    def _record_failure(self, handler: CleanupHandler, exc: BaseException) -> None:
        LOGGER.error("Cleanup handler %s raised; continuing", handler.name, exc_info=exc)
        self._diagnostic.log("Error on cleanup callback", handler.name, repr(exc))

    def _arm_timer(self, code: int) -> None:
        timer = threading.Timer(self._timeout_ms / 1000.0, self._on_deadline, args=(code,))
        timer.daemon = True
        timer.name = "graceful-exit-deadline"
        self._timer = timer
        timer.start()

    def _on_deadline(self, code: int) -> None:
        with self._lock:
            if self._state.phase is not ShutdownPhase.SHUTTING_DOWN:
                return
        self._notify_timeout()
        self.terminate(code)

    def _notify_timeout(self) -> None:
        LOGGER.warning("Cleanup deadline of %d ms elapsed", self._timeout_ms)
        self._diagnostic.log(TIMEOUT_MESSAGE)
        self._primary.info(TIMEOUT_MESSAGE)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _discard(pending: Sequence[tuple[CleanupHandler, Awaitable[Any]]]) -> None:
    """Close coroutines that will never be awaited so they do not warn."""

    for _handler, awaitable in pending:
        if inspect.iscoroutine(awaitable):
            awaitable.close()


__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "FORCE_EXIT_MESSAGE",
    "LATE_REGISTRATION_MESSAGE",
    "LEAK_MESSAGE",
    "ShutdownOrchestrator",
    "TIMEOUT_MESSAGE",
]
