"""Static package metadata surfaced by the CLI ``info`` command.

Keep these values in sync with ``pyproject.toml``.
"""

from __future__ import annotations

from typing import Callable

name = "graceful_exit"
title = "Graceful shutdown coordinator for long-running Python processes"
version = "0.1.0"
shell_command = "graceful-exit"

_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", name),
    ("title", title),
    ("version", version),
    ("shell_command", shell_command),
)


def print_info(writer: Callable[[str], object] | None = None) -> None:
    """Emit the metadata banner line by line.

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for graceful_exit:\\n'
    """

    emit = writer if writer is not None else (lambda text: print(text, end=""))
    width = max(len(label) for label, _value in _FIELDS)
    emit(f"Info for {name}:\n")
    emit("\n")
    for label, value in _FIELDS:
        emit(f"    {label.ljust(width)} = {value}\n")


__all__ = ["name", "print_info", "shell_command", "title", "version"]
