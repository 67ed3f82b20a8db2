"""Trigger capture: map fatal process events onto shutdown reason codes.

Purpose
-------
Subscribe to every source that should end the process and forward each one
as a single ``begin(code)`` call. The capture layer never cleans up itself;
it only logs the two error sources before forwarding.

Contents
--------
* :data:`SIGNAL_CODES` – signal names and their reason codes.
* :class:`TriggerCapture` – installs and restores the hooks.

Sources
-------
============================================  ====  ==========================
Source                                        Code  Before forwarding
============================================  ====  ==========================
``sys.excepthook`` / ``threading.excepthook``  1     log traceback, both sinks
asyncio loop exception handler                2     log exception + context
``SIGINT``                                    3     –
``SIGUSR1``                                   4     –
``SIGUSR2``                                   5     –
:meth:`TriggerCapture.quit`                   101*  –
============================================  ====  ==========================

``*`` or the code supplied by the caller. A ``KeyboardInterrupt`` escaping to
``sys.excepthook`` counts as ``SIGINT``.

System Role
-----------
Stays installed for the life of the process: a second trigger (notably a
second ``SIGINT``) must still reach the orchestrator.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
import threading
import traceback
from types import FrameType, TracebackType
from typing import Any, Callable

from graceful_exit.application.ports import LogSinkPort
from graceful_exit.domain import ReasonCode

LOGGER = logging.getLogger(__name__)

BeginShutdown = Callable[[int], None]
LoopExceptionHandler = Callable[[asyncio.AbstractEventLoop, dict[str, Any]], object]

SIGNAL_CODES: tuple[tuple[str, ReasonCode], ...] = (
    ("SIGINT", ReasonCode.SIGINT),
    ("SIGUSR1", ReasonCode.SIGUSR1),
    ("SIGUSR2", ReasonCode.SIGUSR2),
)


class TriggerCapture:
    """Install process-wide hooks that funnel into ``begin``.

    Parameters
    ----------
    begin:
        Orchestrator entry point receiving the reason code.
    primary, diagnostic:
        Sinks receiving the error logs of the two exception sources.
    signals:
        ``(signal name, reason code)`` pairs; names missing on the current
        platform are skipped.
    chain_default_hooks:
        When ``True`` the previously installed excepthooks and loop handlers
        still run, so Python's own traceback output is kept.
    """

    def __init__(
        self,
        *,
        begin: BeginShutdown,
        primary: LogSinkPort,
        diagnostic: LogSinkPort,
        signals: tuple[tuple[str, int], ...] = SIGNAL_CODES,
        chain_default_hooks: bool = True,
    ) -> None:
        self._begin = begin
        self._primary = primary
        self._diagnostic = diagnostic
        self._signals = signals
        self._chain = chain_default_hooks
        self._installed = False
        self._previous_excepthook: Callable[..., Any] | None = None
        self._previous_threading_hook: Callable[..., Any] | None = None
        self._previous_signals: dict[int, Any] = {}
        self._loop_signals: list[tuple[asyncio.AbstractEventLoop, int]] = []
        self._loops: list[tuple[asyncio.AbstractEventLoop, LoopExceptionHandler | None]] = []

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Install all hooks; ``loop`` defaults to the running loop, if any."""

        if self._installed:
            return
        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._on_uncaught
        self._previous_threading_hook = threading.excepthook
        threading.excepthook = self._on_thread_exception

        target = loop if loop is not None else _running_loop()
        if target is not None:
            self.attach_loop(target)
        self._install_signals(target)
        self._installed = True
        LOGGER.debug("Shutdown triggers installed")

    def attach_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Route ``loop``'s unhandled exceptions into the shutdown sequence."""

        if any(existing is loop for existing, _previous in self._loops):
            return
        self._loops.append((loop, loop.get_exception_handler()))
        loop.set_exception_handler(self._on_loop_exception)

    def uninstall(self) -> None:
        """Restore every hook replaced by :meth:`install`."""

        if not self._installed:
            return
        if sys.excepthook == self._on_uncaught and self._previous_excepthook is not None:
            sys.excepthook = self._previous_excepthook
        if threading.excepthook == self._on_thread_exception and self._previous_threading_hook is not None:
            threading.excepthook = self._previous_threading_hook

        for loop, signum in self._loop_signals:
            if not loop.is_closed():
                loop.remove_signal_handler(signum)
        self._loop_signals.clear()
        for signum, previous in self._previous_signals.items():
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous_signals.clear()

        for loop, previous_handler in self._loops:
            if not loop.is_closed():
                loop.set_exception_handler(previous_handler)
        self._loops.clear()
        self._installed = False
        LOGGER.debug("Shutdown triggers restored")

    def on_signal(self, code: int) -> None:
        """Forward a signal trigger without any pre-forward action."""

        self._begin(code)

    def quit(self, code: int | None = None) -> None:
        """Explicit programmatic shutdown; ``None`` or ``0`` selects code 101."""

        self._begin(int(code) if code else ReasonCode.PROGRAMMATIC_QUIT)

    def _install_signals(self, loop: asyncio.AbstractEventLoop | None) -> None:
        on_main_thread = threading.current_thread() is threading.main_thread()
        for name, code in self._signals:
            signum = getattr(signal, name, None)
            if signum is None:
                LOGGER.debug("Signal %s is not available on this platform", name)
                continue
            if not on_main_thread:
                LOGGER.warning("Signal handlers can only be installed from the main thread; skipping %s", name)
                continue
            if loop is not None:
                try:
                    loop.add_signal_handler(signum, self.on_signal, code)
                except (NotImplementedError, RuntimeError):
                    pass
                else:
                    self._loop_signals.append((loop, signum))
                    continue
            self._previous_signals[signum] = signal.signal(signum, self._signal_handler(code))

    def _signal_handler(self, code: int) -> Callable[[int, FrameType | None], None]:
        def _handle(signum: int, frame: FrameType | None) -> None:
            self.on_signal(code)

        return _handle

    def _on_uncaught(
        self,
        exc_type: type[BaseException],
        exc: BaseException,
        tb: TracebackType | None,
    ) -> None:
        if self._chain and self._previous_excepthook is not None:
            self._previous_excepthook(exc_type, exc, tb)
        if issubclass(exc_type, KeyboardInterrupt):
            self._begin(ReasonCode.SIGINT)
            return
        self._report_exception(exc_type, exc, tb)
        self._begin(ReasonCode.UNCAUGHT_EXCEPTION)

    def _on_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return
        if self._chain and self._previous_threading_hook is not None:
            self._previous_threading_hook(args)
        self._report_exception(args.exc_type, args.exc_value, args.exc_traceback)
        self._begin(ReasonCode.UNCAUGHT_EXCEPTION)

    def _on_loop_exception(self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        if self._chain:
            previous = next((handler for known, handler in self._loops if known is loop), None)
            if previous is not None:
                previous(loop, context)
            else:
                loop.default_exception_handler(context)
        exception = context.get("exception")
        reason = exception if exception is not None else context.get("message", "unknown")
        details = {key: repr(value) for key, value in context.items() if key not in {"exception", "message"}}
        message = f"Unhandled Rejection -> {reason!r}\n"
        self._primary.error(message, details)
        self._diagnostic.log(message, details)
        self._begin(ReasonCode.UNHANDLED_REJECTION)

    def _report_exception(
        self,
        exc_type: type[BaseException],
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        rendered = "".join(traceback.format_exception(exc_type, exc, tb)).rstrip()
        message = f"Uncaught Exception -> {rendered}"
        self._primary.error(message)
        self._diagnostic.log(message)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


__all__ = ["SIGNAL_CODES", "TriggerCapture"]
