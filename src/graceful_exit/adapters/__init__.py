"""Adapter implementations for the shutdown coordinator ports."""

from __future__ import annotations

from .debug_sink import DebugLabelSink, label_enabled
from .file_sink import FileSink
from .process import SystemProcess
from .sinks import CallableSink, NullSink, StdlibLoggerSink, resolve_sink
from .triggers import SIGNAL_CODES, TriggerCapture

__all__ = [
    "CallableSink",
    "DebugLabelSink",
    "FileSink",
    "NullSink",
    "SIGNAL_CODES",
    "StdlibLoggerSink",
    "SystemProcess",
    "TriggerCapture",
    "label_enabled",
    "resolve_sink",
]
