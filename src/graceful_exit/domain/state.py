"""Shutdown state machine values.

Purpose
-------
Track the process-wide shutdown phase and the handler counters without any
I/O, so the orchestrator can enforce idempotency and the completion
invariant in one place.

Contents
--------
* :class:`ShutdownPhase` – ``IDLE`` → ``SHUTTING_DOWN`` → ``EXITED``.
* :class:`ShutdownReason` – code/description pair handed to cleanup handlers.
* :class:`ShutdownState` – mutable phase and counters owned by one orchestrator.
* :class:`ShutdownSnapshot` – read-only view for callers and tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ShutdownPhase(Enum):
    """Lifecycle phases of the shutdown coordinator."""

    IDLE = "idle"
    SHUTTING_DOWN = "shutting_down"
    EXITED = "exited"


@dataclass(slots=True, frozen=True)
class ShutdownReason:
    """Why the shutdown sequence started."""

    code: int
    description: str


@dataclass(slots=True, frozen=True)
class ShutdownSnapshot:
    """Immutable view over :class:`ShutdownState`."""

    phase: ShutdownPhase
    origin_code: int | None
    exit_code: int | None
    registered: int
    completed: int


class ShutdownState:
    """Phase flag plus registered/completed counters.

    The state object does not lock; callers serialise access (the
    orchestrator holds its own lock around every mutation).

    Examples
    --------
    >>> state = ShutdownState()
    >>> state.note_registered()
    >>> state.begin(3)
    True
    >>> state.begin(1)
    False
    >>> state.note_completed()
    >>> state.all_completed
    True
    """

    __slots__ = ("_phase", "_origin_code", "_exit_code", "_registered", "_completed")

    def __init__(self) -> None:
        self._phase = ShutdownPhase.IDLE
        self._origin_code: int | None = None
        self._exit_code: int | None = None
        self._registered = 0
        self._completed = 0

    @property
    def phase(self) -> ShutdownPhase:
        return self._phase

    @property
    def origin_code(self) -> int | None:
        """Code of the trigger that started the shutdown, if any."""

        return self._origin_code

    @property
    def exit_code(self) -> int | None:
        return self._exit_code

    @property
    def registered(self) -> int:
        return self._registered

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def all_completed(self) -> bool:
        return self._completed == self._registered

    def note_registered(self) -> None:
        self._registered += 1

    def note_completed(self) -> None:
        if self._completed >= self._registered:
            raise RuntimeError("completed handlers cannot exceed registered handlers")
        self._completed += 1

    def begin(self, code: int) -> bool:
        """Enter ``SHUTTING_DOWN``; return ``False`` when already past ``IDLE``."""

        if self._phase is not ShutdownPhase.IDLE:
            return False
        self._phase = ShutdownPhase.SHUTTING_DOWN
        self._origin_code = code
        return True

    def finish(self, code: int) -> bool:
        """Enter ``EXITED`` with ``code``; return ``False`` when already exited."""

        if self._phase is ShutdownPhase.EXITED:
            return False
        self._phase = ShutdownPhase.EXITED
        self._exit_code = code
        return True

    def snapshot(self) -> ShutdownSnapshot:
        return ShutdownSnapshot(
            phase=self._phase,
            origin_code=self._origin_code,
            exit_code=self._exit_code,
            registered=self._registered,
            completed=self._completed,
        )


__all__ = ["ShutdownPhase", "ShutdownReason", "ShutdownSnapshot", "ShutdownState"]
