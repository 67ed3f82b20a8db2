from __future__ import annotations

import json
import threading
from datetime import date

from graceful_exit.domain import DiagnosticContext
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def test_empty_context_serialises_to_none() -> None:
    assert DiagnosticContext().to_json() is None


def test_context_serialises_compact_json() -> None:
    context = DiagnosticContext({"foo": "bar"})
    context["count"] = 2

    assert context.to_json() == '{"foo":"bar","count":2}'


def test_non_json_values_fall_back_to_str() -> None:
    context = DiagnosticContext({"day": date(2025, 1, 2)})

    assert json.loads(context.to_json() or "{}") == {"day": "2025-01-02"}


def test_non_string_keys_are_rendered_as_strings() -> None:
    context = DiagnosticContext()
    context[("worker", 1)] = "busy"  # type: ignore[index]
    context[7] = "seven"  # type: ignore[index]

    assert json.loads(context.to_json() or "{}") == {"('worker', 1)": "busy", "7": "seven"}


def test_snapshot_is_a_detached_copy() -> None:
    context = DiagnosticContext({"a": 1})
    snapshot = context.snapshot()
    snapshot["b"] = 2

    assert "b" not in context
    assert dict(context) == {"a": 1}


def test_concurrent_writers_do_not_lose_entries() -> None:
    context = DiagnosticContext()

    def writer(prefix: str) -> None:
        for index in range(200):
            context[f"{prefix}-{index}"] = index

    threads = [threading.Thread(target=writer, args=(name,)) for name in ("a", "b", "c")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(context) == 600
