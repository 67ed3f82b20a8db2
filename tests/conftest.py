from __future__ import annotations

from typing import Iterator

import pytest

from graceful_exit import runtime
from graceful_exit.runtime import _state
from tests.fakes import RecordingProcess, RecordingSink


@pytest.fixture
def primary() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def diagnostic() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def process() -> RecordingProcess:
    return RecordingProcess()


@pytest.fixture(autouse=True)
def reset_runtime(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("GRACEFUL_EXIT_TIMEOUT_MS", "GRACEFUL_EXIT_LOG_PATH", "GRACEFUL_EXIT_DEBUG_LABEL", "DEBUG"):
        monkeypatch.delenv(name, raising=False)
    try:
        yield
    finally:
        if runtime.is_initialised():
            runtime.teardown()
        _state.drain_pending()
