from __future__ import annotations

import os

import pytest

from graceful_exit.adapters import SystemProcess
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def test_pid_matches_current_process() -> None:
    assert SystemProcess().pid == os.getpid()


def test_exit_uses_os_exit(monkeypatch: pytest.MonkeyPatch) -> None:
    recorded: list[int] = []

    class Exited(Exception):
        pass

    def fake_exit(code: int) -> None:
        recorded.append(code)
        raise Exited

    monkeypatch.setattr(os, "_exit", fake_exit)
    monkeypatch.setattr("logging.shutdown", lambda: None)

    with pytest.raises(Exited):
        SystemProcess().exit(3)

    assert recorded == [3]
