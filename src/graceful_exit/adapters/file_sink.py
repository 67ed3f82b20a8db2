"""File-backed log sink built on the stdlib :mod:`logging` machinery.

Purpose
-------
Provide the default primary sink when the host passes ``log_path`` to
:func:`graceful_exit.setup`: one timestamped line per message, appended to the
given file.

System Role
-----------
Owns a dedicated, non-propagating :class:`logging.Logger` so shutdown lines
never leak into (or duplicate through) the host's root logger configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from graceful_exit.application.ports import LogSinkPort

from .sinks import render_message

_LINE_FORMAT = "%(asctime)s %(levelname)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class FileSink(LogSinkPort):
    """Append shutdown messages to ``path``.

    The file is created lazily on the first write; parent directories are
    created eagerly so a bad path fails at setup time rather than at exit.
    """

    def __init__(self, path: str | Path, *, logger_name: str | None = None) -> None:
        self._path = Path(path).expanduser()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        name = logger_name or f"graceful_exit.file.{self._path.resolve()}"
        self._logger = logging.getLogger(name)
        self._logger.propagate = False
        self._logger.setLevel(logging.DEBUG)
        for existing in list(self._logger.handlers):
            self._logger.removeHandler(existing)
            existing.close()
        handler = logging.FileHandler(self._path, mode="a", encoding="utf-8", delay=True)
        handler.setFormatter(logging.Formatter(_LINE_FORMAT, datefmt=_DATE_FORMAT))
        self._handler = handler
        self._logger.addHandler(handler)

    @property
    def path(self) -> Path:
        return self._path

    def log(self, message: str, *extra: Any) -> None:
        self._logger.info("%s", render_message(message, extra))

    def info(self, message: str, *extra: Any) -> None:
        self._logger.info("%s", render_message(message, extra))

    def error(self, message: str, *extra: Any) -> None:
        self._logger.error("%s", render_message(message, extra))

    def flush(self) -> None:
        self._handler.flush()

    def close(self) -> None:
        """Detach and close the file handler (used by :func:`graceful_exit.teardown`)."""

        self._logger.removeHandler(self._handler)
        self._handler.close()


__all__ = ["FileSink"]
