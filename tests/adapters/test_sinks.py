from __future__ import annotations

import logging

import pytest

from graceful_exit.adapters import CallableSink, NullSink, StdlibLoggerSink, resolve_sink
from tests.fakes import RecordingSink
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def test_none_resolves_to_null_sink() -> None:
    sink = resolve_sink(None)

    assert isinstance(sink, NullSink)
    sink.log("ignored")
    sink.info("ignored")
    sink.error("ignored")


def test_plain_callable_receives_every_level() -> None:
    lines: list[tuple[object, ...]] = []

    sink = resolve_sink(lambda *parts: lines.append(parts))
    sink.log("a", 1)
    sink.info("b")
    sink.error("c", "d")

    assert isinstance(sink, CallableSink)
    assert lines == [("a", 1), ("b",), ("c", "d")]


def test_complete_sink_objects_are_used_as_is() -> None:
    recording = RecordingSink()

    assert resolve_sink(recording) is recording


def test_partial_logger_objects_fall_back_to_log() -> None:
    class OnlyLog:
        def __init__(self) -> None:
            self.lines: list[str] = []

        def log(self, message: str, *extra: object) -> None:
            self.lines.append(message)

    target = OnlyLog()
    sink = resolve_sink(target)
    sink.info("info line")
    sink.error("error line")

    assert isinstance(sink, CallableSink)
    assert sink.wrapped is target
    assert target.lines == ["info line", "error line"]


def test_partial_logger_objects_keep_available_methods() -> None:
    class InfoAndError:
        def __init__(self) -> None:
            self.calls: list[tuple[str, str]] = []

        def info(self, message: str) -> None:
            self.calls.append(("info", message))

        def error(self, message: str) -> None:
            self.calls.append(("error", message))

    target = InfoAndError()
    sink = resolve_sink(target)
    sink.log("trace")
    sink.error("broken")

    assert target.calls == [("info", "trace"), ("error", "broken")]


def test_stdlib_loggers_are_routed_by_level(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.graceful_exit.sinks")
    sink = resolve_sink(logger)

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        sink.log("trace", "detail")
        sink.info("report")
        sink.error("failure")

    assert isinstance(sink, StdlibLoggerSink)
    assert [(record.levelno, record.getMessage()) for record in caplog.records] == [
        (logging.DEBUG, "trace detail"),
        (logging.INFO, "report"),
        (logging.ERROR, "failure"),
    ]


def test_unusable_candidates_are_rejected() -> None:
    with pytest.raises(TypeError, match="logger must be callable"):
        resolve_sink(object())
