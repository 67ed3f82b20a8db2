"""Port for the hosting process identity and termination."""

from __future__ import annotations

from typing import NoReturn, Protocol, runtime_checkable


@runtime_checkable
class ProcessPort(Protocol):
    """Expose the process id and the unconditional exit primitive."""

    @property
    def pid(self) -> int:
        """Return the operating-system process identifier."""

    def exit(self, code: int) -> NoReturn | None:
        """Terminate the process with ``code``.

        Production adapters never return; test doubles record the call and
        return ``None``.
        """


__all__ = ["ProcessPort"]
