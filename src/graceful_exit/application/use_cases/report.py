"""Use case emitting the final "process exiting" report.

Purpose
-------
Tell operators why the process stopped: the diagnostic context gathered by
the host (when any) and a closing line with pid, exit code, and the reason
description.

System Role
-----------
Invoked exactly once by :class:`~graceful_exit.application.use_cases.orchestrator.ShutdownOrchestrator`
after the exit code is fixed and immediately before the process port exits.
"""

from __future__ import annotations

import logging
from typing import Callable

from graceful_exit.application.ports import LogSinkPort, ProcessPort
from graceful_exit.domain import DiagnosticContext, ReasonCodeTable

ExitReport = Callable[[int], None]

LOGGER = logging.getLogger(__name__)


def format_exit_line(*, pid: int, code: int, description: str) -> str:
    """Return the closing report line.

    Examples
    --------
    >>> format_exit_line(pid=42, code=3, description="SIGINT")
    '(PID 42) Exiting with code: 3 - SIGINT'
    """

    return f"(PID {pid}) Exiting with code: {code} - {description}"


def create_exit_report(
    *,
    primary: LogSinkPort,
    diagnostic: LogSinkPort,
    codes: ReasonCodeTable,
    context: DiagnosticContext,
    process: ProcessPort,
) -> ExitReport:
    """Return a callable writing the exit report for a given exit code.

    Parameters
    ----------
    primary:
        Main sink (file logger or host logger); receives ``info`` records.
    diagnostic:
        Debug-label sink; receives plain ``log`` records.
    codes:
        Table resolving the exit code to its description.
    context:
        Host-populated diagnostic context, serialised when non-empty.
    process:
        Supplies the process id shown in the closing line.

    Examples
    --------
    >>> class Sink:
    ...     def __init__(self): self.lines = []
    ...     def log(self, message, *extra): self.lines.append(message)
    ...     info = error = log
    >>> class Proc:
    ...     pid = 7
    ...     def exit(self, code): return None
    >>> primary, diagnostic = Sink(), Sink()
    >>> report = create_exit_report(primary=primary, diagnostic=diagnostic, codes=ReasonCodeTable(),
    ...                             context=DiagnosticContext(), process=Proc())
    >>> report(666)
    >>> primary.lines
    ['(PID 7) Exiting with code: 666 - unknown']
    """

    def report(code: int) -> None:
        try:
            extra_info = context.to_json()
        except (TypeError, ValueError) as exc:
            LOGGER.error("Diagnostic context is not JSON serialisable", exc_info=exc)
            extra_info = repr(context.snapshot())
        if extra_info is not None:
            diagnostic.log(f"Graceful Exit extra info: {extra_info}")
            primary.info(extra_info)

        line = format_exit_line(pid=process.pid, code=code, description=codes.describe(code))
        primary.info(line)
        diagnostic.log(line)

    return report


__all__ = ["ExitReport", "create_exit_report", "format_exit_line"]
