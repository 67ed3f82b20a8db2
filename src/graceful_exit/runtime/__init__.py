"""Runtime façade that wires the shutdown coordinator for the whole process.

Purpose
-------
Expose a stable entry point (``setup``, ``graceful_exit``, ``quit``,
``teardown``) that host applications use instead of importing the inner
layers directly.

Contents
--------
* ``setup`` – composition root; installs the trigger hooks.
* ``graceful_exit`` – cleanup handler registration (queued before setup).
* ``quit`` – explicit programmatic shutdown.
* ``attach_loop`` – route a later-created event loop's failures.
* ``teardown`` – restore hooks and clear the singleton (tests, embedding).
* ``inspect_runtime`` / ``describe`` – read-only introspection.

System Role
-----------
Outer shell of the clean-architecture stack: callers only see this module
and :class:`GracefulExitHandle`.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

from graceful_exit.application.ports import ProcessPort
from graceful_exit.application.use_cases import DEFAULT_TIMEOUT_MS
from graceful_exit.domain import CleanupCallback, DiagnosticContext, ReasonCodeTable, ShutdownSnapshot

from ._composition import build_runtime
from ._settings import RuntimeSettings, build_runtime_settings
from ._state import (
    GracefulExitRuntime,
    clear_runtime,
    current_runtime,
    drain_pending,
    is_initialised,
    register_or_queue,
    set_runtime,
)


@dataclass(frozen=True)
class GracefulExitHandle:
    """Handle returned by :func:`setup`.

    Attributes
    ----------
    context:
        Diagnostic context the host fills during normal operation; it is
        serialised into the exit report when non-empty.
    codes:
        Effective reason-code table (built-ins plus custom entries).
    """

    context: DiagnosticContext
    codes: ReasonCodeTable


def setup(
    *,
    callbacks: CleanupCallback | Iterable[CleanupCallback] | None = None,
    log_path: str | Path | None = None,
    debug_label: str | None = None,
    logger: Any = None,
    diagnostic_logger: Any = None,
    custom_codes: Mapping[Any, str] | None = None,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    process: ProcessPort | None = None,
    install_triggers: bool = True,
    loop: asyncio.AbstractEventLoop | None = None,
) -> GracefulExitHandle:
    """Compose the shutdown coordinator and install the trigger hooks.

    Why
    ---
    Hosts call ``setup`` once at startup so every fatal path (uncaught
    exceptions, unhandled asyncio failures, ``SIGINT``/``SIGUSR1``/``SIGUSR2``,
    :func:`quit`) ends in the same bounded cleanup sequence.

    Inputs
    ------
    callbacks:
        One callable or a sequence, registered in order as cleanup handlers.
    log_path:
        File for the default primary sink (``GRACEFUL_EXIT_LOG_PATH``).
    debug_label:
        Label for the default Rich diagnostic sink, printed when ``DEBUG``
        selects it (``GRACEFUL_EXIT_DEBUG_LABEL``).
    logger, diagnostic_logger:
        Host loggers overriding the primary and diagnostic defaults. Any
        callable, :class:`logging.Logger`, or object with ``info``/``error``.
    custom_codes:
        Extra or overriding reason-code descriptions.
    timeout_ms:
        Forced-exit deadline in milliseconds (``GRACEFUL_EXIT_TIMEOUT_MS``).
    process:
        Alternative :class:`ProcessPort` (tests, embedding).
    install_triggers:
        ``False`` skips the hooks; only :func:`quit` then starts a shutdown.
    loop:
        Event loop whose exception handler and signal handlers to use;
        defaults to the running loop when called from a coroutine.

    Outputs
    -------
    :class:`GracefulExitHandle` exposing the diagnostic context.

    Side Effects
    ------------
    Raises :class:`RuntimeError` when already set up. Replaces
    ``sys.excepthook``, ``threading.excepthook`` and the signal handlers.

    Examples
    --------
    >>> import graceful_exit  # doctest: +SKIP
    >>> handle = graceful_exit.setup(log_path="exit.log", timeout_ms=2000)  # doctest: +SKIP
    >>> handle.context["job"] = "nightly-import"  # doctest: +SKIP
    >>> graceful_exit.graceful_exit(close_database)  # doctest: +SKIP
    """

    if is_initialised():
        raise RuntimeError(
            "graceful_exit.setup() cannot be called twice without teardown(); call graceful_exit.teardown() first",
        )

    settings = build_runtime_settings(
        callbacks=callbacks,
        log_path=log_path,
        debug_label=debug_label,
        logger=logger,
        diagnostic_logger=diagnostic_logger,
        custom_codes=custom_codes,
        timeout_ms=timeout_ms,
        process=process,
        install_triggers=install_triggers,
    )
    runtime = build_runtime(settings, pending=drain_pending())
    set_runtime(runtime)

    target = loop if loop is not None else _running_loop()
    runtime.orchestrator.attach_loop(target)
    if settings.install_triggers:
        runtime.triggers.install(target)

    return GracefulExitHandle(context=runtime.context, codes=runtime.codes)


def graceful_exit(callback: CleanupCallback) -> None:
    """Register ``callback`` as a cleanup handler.

    May be called any number of times. Before :func:`setup` the callback is
    queued and registered by the next ``setup``; after a shutdown started it
    is logged and ignored.
    """

    if not callable(callback):
        raise TypeError(f"cleanup handler must be callable, got {callback!r}")
    register_or_queue(callback)


def quit(code: int | None = None) -> None:  # noqa: A001
    """Request a graceful shutdown with ``code``; ``None`` or ``0`` selects ``101``."""

    current_runtime().triggers.quit(code)


def attach_loop(loop: asyncio.AbstractEventLoop) -> None:
    """Route ``loop``'s unhandled exceptions to the coordinator and run handlers on it."""

    runtime = current_runtime()
    runtime.triggers.attach_loop(loop)
    runtime.orchestrator.attach_loop(loop)


def teardown() -> None:
    """Restore the original hooks and clear the runtime singleton.

    Raises :class:`RuntimeError` when :func:`setup` has not been called.
    """

    runtime = current_runtime()
    runtime.triggers.uninstall()
    for sink in (runtime.primary, runtime.diagnostic):
        close = getattr(sink, "close", None)
        if callable(close) and sink is not runtime.settings.logger and sink is not runtime.settings.diagnostic_logger:
            close()
    clear_runtime()
    drain_pending()


def inspect_runtime() -> ShutdownSnapshot:
    """Return a read-only snapshot of the shutdown state."""

    return current_runtime().orchestrator.snapshot()


def describe(code: int) -> str:
    """Describe ``code`` with the active table (built-ins only before setup)."""

    if is_initialised():
        return current_runtime().codes.describe(code)
    return ReasonCodeTable().describe(code)


def summary_info() -> str:
    """Return the metadata banner used by the CLI entry point.

    Outputs
    -------
    str
        Multi-line banner ending with a newline.
    """

    from .. import __init__conf__

    lines: list[str] = []

    def _capture(text: str) -> None:
        lines.append(text)

    __init__conf__.print_info(writer=_capture)
    return "".join(lines)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


__all__ = [
    "GracefulExitHandle",
    "GracefulExitRuntime",
    "RuntimeSettings",
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
