"""Runtime composition helpers wiring domain, application, and adapters.

Purpose
-------
Translate :class:`RuntimeSettings` into the live :class:`GracefulExitRuntime`
singleton. The helpers keep wiring small, declarative, and testable.

Contents
--------
* Sink selection (explicit host loggers win over path/label defaults).
* :func:`build_runtime` – composition root.
"""

from __future__ import annotations

from typing import Sequence

from graceful_exit.adapters import DebugLabelSink, FileSink, NullSink, SystemProcess, TriggerCapture, resolve_sink
from graceful_exit.application.ports import LogSinkPort, ProcessPort
from graceful_exit.application.use_cases import ShutdownOrchestrator, create_exit_report
from graceful_exit.domain import CleanupCallback, DiagnosticContext, ReasonCodeTable

from ._settings import RuntimeSettings
from ._state import GracefulExitRuntime


def build_runtime(settings: RuntimeSettings, *, pending: Sequence[CleanupCallback] = ()) -> GracefulExitRuntime:
    """Assemble the shutdown runtime from resolved settings.

    ``pending`` callbacks (queued before setup) are registered ahead of the
    ``callbacks`` passed to setup, preserving call order.
    """

    primary = _select_primary_sink(settings)
    diagnostic = _select_diagnostic_sink(settings)
    codes = ReasonCodeTable(settings.custom_codes)
    context = DiagnosticContext()
    process: ProcessPort = settings.process if settings.process is not None else SystemProcess()

    report = create_exit_report(
        primary=primary,
        diagnostic=diagnostic,
        codes=codes,
        context=context,
        process=process,
    )
    orchestrator = ShutdownOrchestrator(
        primary=primary,
        diagnostic=diagnostic,
        codes=codes,
        report=report,
        process=process,
        timeout_ms=settings.timeout_ms,
    )
    for callback in (*pending, *settings.callbacks):
        orchestrator.register(callback)

    triggers = TriggerCapture(begin=orchestrator.begin, primary=primary, diagnostic=diagnostic)

    return GracefulExitRuntime(
        orchestrator=orchestrator,
        triggers=triggers,
        context=context,
        codes=codes,
        primary=primary,
        diagnostic=diagnostic,
        settings=settings,
    )


def _select_primary_sink(settings: RuntimeSettings) -> LogSinkPort:
    """Host logger first, then the file sink for ``log_path``, else no-op."""

    if settings.logger is not None:
        return resolve_sink(settings.logger)
    if settings.log_path is not None:
        return FileSink(settings.log_path)
    return NullSink()


def _select_diagnostic_sink(settings: RuntimeSettings) -> LogSinkPort:
    """Host diagnostic logger first, then the Rich label sink, else no-op."""

    if settings.diagnostic_logger is not None:
        return resolve_sink(settings.diagnostic_logger)
    if settings.debug_label is not None:
        return DebugLabelSink(settings.debug_label)
    return NullSink()


__all__ = ["build_runtime"]
