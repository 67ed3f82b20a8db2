"""Log sink adapters and the duck-typed resolver.

Purpose
-------
Turn whatever the host hands to :func:`graceful_exit.setup` (nothing, a plain
callable, a :class:`logging.Logger`, or an object with ``info``/``error``) into
a :class:`~graceful_exit.application.ports.LogSinkPort` once, at configuration
time, so the orchestrator never probes for capabilities at shutdown.

Contents
--------
* :class:`NullSink` – default no-op sink.
* :class:`CallableSink` – wraps callables and partial logger objects.
* :class:`StdlibLoggerSink` – routes to a :class:`logging.Logger`.
* :func:`resolve_sink` – selection logic.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from graceful_exit.application.ports import LogSinkPort


def render_message(message: str, extra: tuple[Any, ...]) -> str:
    """Join ``message`` and ``extra`` into a single line.

    Examples
    --------
    >>> render_message("Error on cleanup callback", ("close_db", "ValueError()"))
    'Error on cleanup callback close_db ValueError()'
    """

    if not extra:
        return str(message)
    return " ".join([str(message), *(str(item) for item in extra)])


class NullSink(LogSinkPort):
    """Discard every message."""

    def log(self, message: str, *extra: Any) -> None:
        return None

    def info(self, message: str, *extra: Any) -> None:
        return None

    def error(self, message: str, *extra: Any) -> None:
        return None


class CallableSink(LogSinkPort):
    """Adapt a callable or a partial logger object to :class:`LogSinkPort`.

    Missing ``info``/``error`` capabilities fall back to the default
    callable (the object itself when callable, else its ``log`` or ``info``).
    Extra positional arguments are forwarded untouched.
    """

    def __init__(self, candidate: Any) -> None:
        default = _default_writer(candidate)
        if default is None:
            raise TypeError(f"logger must be callable or provide log/info/error methods, got {candidate!r}")
        self._candidate = candidate
        self._log: Callable[..., Any] = default
        self._info: Callable[..., Any] = _method(candidate, "info") or default
        self._error: Callable[..., Any] = _method(candidate, "error") or default

    @property
    def wrapped(self) -> Any:
        return self._candidate

    def log(self, message: str, *extra: Any) -> None:
        self._log(message, *extra)

    def info(self, message: str, *extra: Any) -> None:
        self._info(message, *extra)

    def error(self, message: str, *extra: Any) -> None:
        self._error(message, *extra)


class StdlibLoggerSink(LogSinkPort):
    """Route messages to a :class:`logging.Logger` (``log`` maps to ``DEBUG``)."""

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter) -> None:
        self._logger = logger

    @property
    def logger(self) -> logging.Logger | logging.LoggerAdapter:
        return self._logger

    def log(self, message: str, *extra: Any) -> None:
        self._logger.debug("%s", render_message(message, extra))

    def info(self, message: str, *extra: Any) -> None:
        self._logger.info("%s", render_message(message, extra))

    def error(self, message: str, *extra: Any) -> None:
        self._logger.error("%s", render_message(message, extra))


def resolve_sink(candidate: Any) -> LogSinkPort:
    """Return a :class:`LogSinkPort` for ``candidate``.

    Examples
    --------
    >>> isinstance(resolve_sink(None), NullSink)
    True
    >>> lines = []
    >>> sink = resolve_sink(lines.append)
    >>> sink.error("boom")
    >>> lines
    ['boom']
    """

    if candidate is None:
        return NullSink()
    if isinstance(candidate, (logging.Logger, logging.LoggerAdapter)):
        return StdlibLoggerSink(candidate)
    if all(_method(candidate, name) is not None for name in ("log", "info", "error")):
        return candidate
    return CallableSink(candidate)


def _method(candidate: Any, name: str) -> Callable[..., Any] | None:
    attribute = getattr(candidate, name, None)
    return attribute if callable(attribute) else None


def _default_writer(candidate: Any) -> Callable[..., Any] | None:
    if callable(candidate):
        return candidate
    return _method(candidate, "log") or _method(candidate, "info") or _method(candidate, "error")


__all__ = ["CallableSink", "NullSink", "StdlibLoggerSink", "render_message", "resolve_sink"]
