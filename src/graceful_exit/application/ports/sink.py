"""Log sink port describing where shutdown messages go.

Purpose
-------
Define the minimal logging capability the coordinator needs from the two
collaborating sinks (the primary, usually file-backed, sink and the
diagnostic debug-label sink) so any host logger can be plugged in.

Contents
--------
* :class:`LogSinkPort` – runtime-checkable protocol with ``log``, ``info`` and
  ``error``.

System Role
-----------
Adapters in :mod:`graceful_exit.adapters.sinks` satisfy this protocol; the
application layer only ever talks to it.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LogSinkPort(Protocol):
    """Receive shutdown messages at default, info, and error severity."""

    def log(self, message: str, *extra: Any) -> None:
        """Record ``message`` at the sink's default severity."""

    def info(self, message: str, *extra: Any) -> None:
        """Record an informational ``message``."""

    def error(self, message: str, *extra: Any) -> None:
        """Record an error ``message``."""


__all__ = ["LogSinkPort"]
