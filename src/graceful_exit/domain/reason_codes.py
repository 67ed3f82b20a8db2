"""Reason-code vocabulary describing why a shutdown started.

Purpose
-------
Give every shutdown trigger a stable integer identity that doubles as the
process exit code, plus a human-readable description for the exit report.

Contents
--------
* :class:`ReasonCode` – built-in codes as an :class:`~enum.IntEnum`.
* :class:`ReasonCodeTable` – merged lookup of built-in and caller codes.
* :data:`UNKNOWN_REASON` – description used for unmapped codes.

System Role
-----------
Consumed by the orchestrator (exit codes), the trigger capture layer (code
assignment), and the exit report (descriptions).
"""

from __future__ import annotations

from enum import IntEnum
from types import MappingProxyType
from typing import Iterator, Mapping


UNKNOWN_REASON = "unknown"


class ReasonCode(IntEnum):
    """Built-in shutdown reasons."""

    UNCAUGHT_EXCEPTION = 1
    UNHANDLED_REJECTION = 2
    SIGINT = 3
    SIGUSR1 = 4
    SIGUSR2 = 5
    CLEANUP_ERROR = 100
    PROGRAMMATIC_QUIT = 101


_BUILTIN_DESCRIPTIONS: Mapping[int, str] = MappingProxyType(
    {
        ReasonCode.UNCAUGHT_EXCEPTION: "Uncaught Exception",
        ReasonCode.UNHANDLED_REJECTION: "Unhandled Promise Rejection",
        ReasonCode.SIGINT: "SIGINT",
        ReasonCode.SIGUSR1: "SIGUSR1",
        ReasonCode.SIGUSR2: "SIGUSR2",
        ReasonCode.CLEANUP_ERROR: "Error on Graceful Exit Process",
        ReasonCode.PROGRAMMATIC_QUIT: "Programmatically quitting",
    }
)


def coerce_code(value: object) -> int:
    """Return ``value`` as a plain ``int`` or raise :class:`ValueError`."""

    if isinstance(value, bool):
        raise ValueError(f"reason code must be an integer, got {value!r}")
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"reason code must be an integer, got {value!r}")


class ReasonCodeTable(Mapping[int, str]):
    """Immutable mapping of reason codes to descriptions.

    Custom entries extend or override the built-in descriptions; built-in
    codes are never removed.

    Examples
    --------
    >>> table = ReasonCodeTable({666: "The number of the beast"})
    >>> table.describe(666)
    'The number of the beast'
    >>> table.describe(3)
    'SIGINT'
    >>> table.describe(42)
    'unknown'
    """

    __slots__ = ("_entries",)

    def __init__(self, custom: Mapping[object, str] | None = None) -> None:
        entries: dict[int, str] = {int(code): text for code, text in _BUILTIN_DESCRIPTIONS.items()}
        for code, text in (custom or {}).items():
            entries[coerce_code(code)] = str(text)
        self._entries = entries

    def __getitem__(self, code: int) -> str:
        return self._entries[int(code)]

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def describe(self, code: int) -> str:
        """Return the description for ``code`` or :data:`UNKNOWN_REASON`."""

        return self._entries.get(code, UNKNOWN_REASON)


__all__ = ["ReasonCode", "ReasonCodeTable", "UNKNOWN_REASON", "coerce_code"]
