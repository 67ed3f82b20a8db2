from __future__ import annotations

import logging
from pathlib import Path

from graceful_exit.adapters import FileSink
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def test_lines_are_appended_with_level(tmp_path: Path) -> None:
    target = tmp_path / "logs" / "exit.log"
    sink = FileSink(target)
    try:
        sink.info("(PID 1) Exiting with code: 3 - SIGINT")
        sink.error("Uncaught Exception -> boom")
        sink.log("Error on cleanup callback", "close_db", "ValueError()")
        sink.flush()
    finally:
        sink.close()

    lines = target.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 3
    assert lines[0].endswith("INFO (PID 1) Exiting with code: 3 - SIGINT")
    assert lines[1].endswith("ERROR Uncaught Exception -> boom")
    assert lines[2].endswith("INFO Error on cleanup callback close_db ValueError()")


def test_file_is_created_lazily(tmp_path: Path) -> None:
    target = tmp_path / "exit.log"
    sink = FileSink(target)
    try:
        assert sink.path == target
        assert not target.exists()
    finally:
        sink.close()


def test_messages_do_not_reach_the_root_logger(tmp_path: Path, caplog) -> None:
    sink = FileSink(tmp_path / "exit.log", logger_name="tests.graceful_exit.file")
    try:
        with caplog.at_level(logging.DEBUG):
            sink.info("private")
    finally:
        sink.close()

    assert "private" not in caplog.text


def test_recreating_a_sink_for_the_same_path_replaces_the_handler(tmp_path: Path) -> None:
    target = tmp_path / "exit.log"
    first = FileSink(target)
    second = FileSink(target)
    try:
        second.info("once")
        second.flush()
    finally:
        first.close()
        second.close()

    assert target.read_text(encoding="utf-8").count("once") == 1
