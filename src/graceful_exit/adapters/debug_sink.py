"""Rich-powered diagnostic sink keyed by a debug label.

Purpose
-------
Provide the default diagnostic sink when the host passes ``debug_label`` to
:func:`graceful_exit.setup`. Output goes to stderr and is only produced when the
``DEBUG`` environment variable selects the label, so verbose shutdown tracing
can be switched on per deployment without code changes.

Contents
--------
* :func:`label_enabled` – ``DEBUG`` pattern matching.
* :class:`DebugLabelSink` – adapter implementing :class:`LogSinkPort`.

Alignment Notes
---------------
``DEBUG`` holds comma or whitespace separated glob patterns
(``DEBUG=app:*,-app:noisy``). A leading ``-`` excludes; exclusions win.
"""

from __future__ import annotations

import os
import re
import time
import zlib
from fnmatch import fnmatchcase
from typing import Any, Callable

from rich.console import Console
from rich.text import Text

from graceful_exit.application.ports import LogSinkPort

from .sinks import render_message

DEBUG_ENV_VAR = "DEBUG"

#: Styles cycled by label hash so concurrent labels stay distinguishable.
_LABEL_STYLES = ("cyan", "magenta", "green", "yellow", "blue", "red")

_SPLIT = re.compile(r"[\s,]+")


def label_enabled(label: str, patterns: str | None) -> bool:
    """Return ``True`` when ``patterns`` selects ``label``.

    Examples
    --------
    >>> label_enabled("app:exit", "app:*")
    True
    >>> label_enabled("app:exit", "app:*,-app:exit")
    False
    >>> label_enabled("app:exit", None)
    False
    """

    if not patterns:
        return False
    included = False
    for token in _SPLIT.split(patterns.strip()):
        if not token:
            continue
        if token.startswith("-"):
            if fnmatchcase(label, token[1:]):
                return False
            continue
        if fnmatchcase(label, token):
            included = True
    return included


class DebugLabelSink(LogSinkPort):
    """Print ``<label> <message> +<delta>ms`` lines to stderr via Rich."""

    def __init__(
        self,
        label: str,
        *,
        console: Console | None = None,
        enabled: bool | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not label or not label.strip():
            raise ValueError("debug_label must not be empty")
        self._label = label.strip()
        self._enabled = enabled if enabled is not None else label_enabled(self._label, os.getenv(DEBUG_ENV_VAR))
        self._console = console if console is not None else Console(stderr=True)
        self._style = _LABEL_STYLES[zlib.crc32(self._label.encode("utf-8")) % len(_LABEL_STYLES)]
        self._clock = clock
        self._last: float | None = None

    @property
    def label(self) -> str:
        return self._label

    @property
    def enabled(self) -> bool:
        return self._enabled

    def log(self, message: str, *extra: Any) -> None:
        if not self._enabled:
            return
        now = self._clock()
        delta_ms = 0 if self._last is None else int((now - self._last) * 1000)
        self._last = now
        line = Text()
        line.append(f"  {self._label} ", style=f"bold {self._style}")
        line.append(render_message(message, extra))
        line.append(f" +{delta_ms}ms", style=self._style)
        self._console.print(line, highlight=False, soft_wrap=True)

    def info(self, message: str, *extra: Any) -> None:
        self.log(message, *extra)

    def error(self, message: str, *extra: Any) -> None:
        self.log(message, *extra)


__all__ = ["DEBUG_ENV_VAR", "DebugLabelSink", "label_enabled"]
