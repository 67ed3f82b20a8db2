"""Diagnostic context attached to the final exit report.

Purpose
-------
Hold free-form key/value data that any part of the host application can
populate while it runs, so the exit report can say what the process was
doing when it stopped.

Contents
--------
* :class:`DiagnosticContext` – thread-safe mutable mapping with JSON export.

System Role
-----------
Created empty by :func:`graceful_exit.setup`, handed back to the caller via
:class:`graceful_exit.GracefulExitHandle`, and read exactly once by the exit
report. It is never cleared.
"""

from __future__ import annotations

import json
from collections.abc import MutableMapping
from threading import RLock
from typing import Any, Iterator


class DiagnosticContext(MutableMapping[str, Any]):
    """Mutable mapping guarded by a re-entrant lock.

    Examples
    --------
    >>> ctx = DiagnosticContext()
    >>> ctx["foo"] = "bar"
    >>> ctx.to_json()
    '{"foo":"bar"}'
    >>> DiagnosticContext().to_json() is None
    True
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._lock = RLock()
        self._data: dict[str, Any] = dict(initial or {})

    def __getitem__(self, key: str) -> Any:
        with self._lock:
            return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def __delitem__(self, key: str) -> None:
        with self._lock:
            del self._data[key]

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._data))

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __repr__(self) -> str:
        return f"DiagnosticContext({self.snapshot()!r})"

    def snapshot(self) -> dict[str, Any]:
        """Return a shallow copy of the current entries."""

        with self._lock:
            return dict(self._data)

    def to_json(self) -> str | None:
        """Serialise the entries as compact JSON, or ``None`` when empty.

        Keys and values that JSON cannot represent natively are rendered with
        ``str``. Circular values still raise :class:`ValueError`.
        """

        data = self.snapshot()
        if not data:
            return None
        keyed = {str(key): value for key, value in data.items()}
        return json.dumps(keyed, separators=(",", ":"), ensure_ascii=False, default=str)


__all__ = ["DiagnosticContext"]
