"""Cleanup handler records."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Union

from .state import ShutdownReason

CleanupCallback = Callable[..., Union[Awaitable[Any], Any]]


def _accepts_reason(callback: CleanupCallback) -> bool:
    """Return ``True`` when ``callback`` has a required positional parameter or ``*args``."""

    try:
        signature = inspect.signature(callback)
    except (TypeError, ValueError):
        return False
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            if parameter.default is inspect.Parameter.empty:
                return True
    return False


@dataclass(slots=True, frozen=True)
class CleanupHandler:
    """A registered unit of shutdown work.

    Attributes
    ----------
    callback:
        Sync or async callable. It receives the :class:`ShutdownReason` when it
        declares a required positional parameter or ``*args`` and is called
        without arguments otherwise.
    index:
        Registration order, starting at ``0``.
    """

    callback: CleanupCallback
    index: int
    takes_reason: bool = field(init=False)

    def __post_init__(self) -> None:
        if not callable(self.callback):
            raise TypeError(f"cleanup handler must be callable, got {self.callback!r}")
        object.__setattr__(self, "takes_reason", _accepts_reason(self.callback))

    @property
    def name(self) -> str:
        return getattr(self.callback, "__qualname__", None) or repr(self.callback)

    def invoke(self, reason: ShutdownReason) -> Any:
        """Call the callback; the result may be an awaitable."""

        if self.takes_reason:
            return self.callback(reason)
        return self.callback()


__all__ = ["CleanupCallback", "CleanupHandler"]
