"""Application-layer ports (protocols) for the shutdown coordinator."""

from __future__ import annotations

from .process import ProcessPort
from .sink import LogSinkPort

__all__ = ["LogSinkPort", "ProcessPort"]
