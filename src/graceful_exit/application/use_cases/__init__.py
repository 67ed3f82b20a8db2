"""Use cases: exit reporting and shutdown orchestration."""

from __future__ import annotations

from .orchestrator import DEFAULT_TIMEOUT_MS, ShutdownOrchestrator
from .report import ExitReport, create_exit_report, format_exit_line

__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "ExitReport",
    "ShutdownOrchestrator",
    "create_exit_report",
    "format_exit_line",
]
