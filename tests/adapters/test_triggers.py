from __future__ import annotations

import asyncio
import os
import signal
import sys
import threading
import time
from typing import Iterator

import pytest

from graceful_exit.adapters import TriggerCapture
from tests.fakes import RecordingSink
from tests.os_markers import OS_AGNOSTIC, POSIX_ONLY

pytestmark = [OS_AGNOSTIC]


@pytest.fixture
def codes() -> list[int]:
    return []


@pytest.fixture
def capture(codes: list[int], primary: RecordingSink, diagnostic: RecordingSink) -> Iterator[TriggerCapture]:
    triggers = TriggerCapture(begin=codes.append, primary=primary, diagnostic=diagnostic, chain_default_hooks=False)
    try:
        yield triggers
    finally:
        triggers.uninstall()


def raised(exc: BaseException) -> BaseException:
    try:
        raise exc
    except BaseException as caught:  # noqa: BLE001
        return caught


def wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.01)
    return True


def test_install_and_uninstall_restore_process_hooks(capture: TriggerCapture) -> None:
    original_excepthook = sys.excepthook
    original_threading_hook = threading.excepthook

    capture.install()

    assert capture.installed is True
    assert sys.excepthook != original_excepthook
    assert threading.excepthook != original_threading_hook

    capture.uninstall()

    assert capture.installed is False
    assert sys.excepthook == original_excepthook
    assert threading.excepthook == original_threading_hook


def test_uncaught_exception_is_logged_and_forwarded_as_one(
    capture: TriggerCapture, codes: list[int], primary: RecordingSink, diagnostic: RecordingSink
) -> None:
    capture.install()
    exc = raised(ValueError("boom"))

    sys.excepthook(type(exc), exc, exc.__traceback__)

    assert codes == [1]
    [message] = primary.messages("error")
    assert message.startswith("Uncaught Exception -> Traceback")
    assert message.endswith("ValueError: boom")
    assert diagnostic.messages("log") == [message]


def test_keyboard_interrupt_counts_as_sigint(capture: TriggerCapture, codes: list[int], primary: RecordingSink) -> None:
    capture.install()
    exc = raised(KeyboardInterrupt())

    sys.excepthook(type(exc), exc, exc.__traceback__)

    assert codes == [3]
    assert primary.messages("error") == []


def test_previous_excepthook_is_chained(
    monkeypatch: pytest.MonkeyPatch, codes: list[int], primary: RecordingSink, diagnostic: RecordingSink
) -> None:
    seen: list[type[BaseException]] = []
    monkeypatch.setattr(sys, "excepthook", lambda exc_type, exc, tb: seen.append(exc_type))
    triggers = TriggerCapture(begin=codes.append, primary=primary, diagnostic=diagnostic)
    triggers.install()
    try:
        exc = raised(LookupError("missing"))
        sys.excepthook(type(exc), exc, exc.__traceback__)
    finally:
        triggers.uninstall()

    assert seen == [LookupError]
    assert codes == [1]


def test_worker_thread_exception_is_forwarded(capture: TriggerCapture, codes: list[int], primary: RecordingSink) -> None:
    capture.install()

    def crash() -> None:
        raise RuntimeError("worker died")

    worker = threading.Thread(target=crash)
    worker.start()
    worker.join()

    assert codes == [1]
    assert "RuntimeError: worker died" in primary.messages("error")[0]


def test_worker_thread_system_exit_is_ignored(capture: TriggerCapture, codes: list[int]) -> None:
    capture.install()

    worker = threading.Thread(target=sys.exit)
    worker.start()
    worker.join()

    assert codes == []


@pytest.mark.parametrize("code, expected", [(None, 101), (0, 101), (666, 666)])
def test_quit_forwards_supplied_or_default_code(
    capture: TriggerCapture, codes: list[int], code: int | None, expected: int
) -> None:
    capture.quit(code)

    assert codes == [expected]


@POSIX_ONLY
@pytest.mark.parametrize("signame, expected", [("SIGUSR1", 4), ("SIGUSR2", 5)])
def test_process_signals_map_to_reason_codes(capture: TriggerCapture, codes: list[int], signame: str, expected: int) -> None:
    capture.install()

    os.kill(os.getpid(), getattr(signal, signame))

    assert wait_until(lambda: codes == [expected])


@POSIX_ONLY
def test_uninstall_restores_previous_signal_handlers(capture: TriggerCapture) -> None:
    previous = signal.getsignal(signal.SIGUSR1)

    capture.install()
    assert signal.getsignal(signal.SIGUSR1) != previous
    capture.uninstall()

    assert signal.getsignal(signal.SIGUSR1) == previous


@pytest.mark.asyncio
async def test_loop_exception_is_logged_and_forwarded_as_two(
    capture: TriggerCapture, codes: list[int], primary: RecordingSink, diagnostic: RecordingSink
) -> None:
    loop = asyncio.get_running_loop()
    capture.install(loop)

    loop.call_exception_handler({"message": "Task exception was never retrieved", "exception": ValueError("boom")})

    assert codes == [2]
    [(level, message, extra)] = primary.records
    assert level == "error"
    assert message == "Unhandled Rejection -> ValueError('boom')\n"
    assert extra == ({},)
    assert diagnostic.messages("log") == [message]


@pytest.mark.asyncio
async def test_loop_exception_without_exception_uses_message(capture: TriggerCapture, codes: list[int], primary: RecordingSink) -> None:
    loop = asyncio.get_running_loop()
    capture.install(loop)

    loop.call_exception_handler({"message": "callback failed", "handle": "<Handle>"})

    assert codes == [2]
    [(_level, message, extra)] = primary.records
    assert message == "Unhandled Rejection -> 'callback failed'\n"
    assert extra == ({"handle": "'<Handle>'"},)


@pytest.mark.asyncio
async def test_uninstall_restores_loop_exception_handler(capture: TriggerCapture) -> None:
    loop = asyncio.get_running_loop()
    original = loop.get_exception_handler()

    capture.install(loop)
    assert loop.get_exception_handler() is not original
    capture.uninstall()

    assert loop.get_exception_handler() is original


@POSIX_ONLY
@pytest.mark.asyncio
async def test_signals_use_the_running_loop(capture: TriggerCapture, codes: list[int]) -> None:
    loop = asyncio.get_running_loop()
    capture.install(loop)

    os.kill(os.getpid(), signal.SIGUSR2)
    for _ in range(100):
        if codes:
            break
        await asyncio.sleep(0.01)

    assert codes == [5]
