from __future__ import annotations

from graceful_exit.application.use_cases import create_exit_report, format_exit_line
from graceful_exit.domain import DiagnosticContext, ReasonCodeTable
from tests.fakes import RecordingProcess, RecordingSink
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def build_report(
    primary: RecordingSink,
    diagnostic: RecordingSink,
    *,
    context: DiagnosticContext | None = None,
    codes: ReasonCodeTable | None = None,
):
    return create_exit_report(
        primary=primary,
        diagnostic=diagnostic,
        codes=codes or ReasonCodeTable(),
        context=context if context is not None else DiagnosticContext(),
        process=RecordingProcess(),
    )


def test_exit_line_names_pid_code_and_description(primary: RecordingSink, diagnostic: RecordingSink) -> None:
    build_report(primary, diagnostic)(3)

    assert primary.messages("info") == ["(PID 4242) Exiting with code: 3 - SIGINT"]
    assert diagnostic.messages("log") == ["(PID 4242) Exiting with code: 3 - SIGINT"]


def test_context_block_precedes_exit_line(primary: RecordingSink, diagnostic: RecordingSink) -> None:
    context = DiagnosticContext({"foo": "bar"})

    build_report(primary, diagnostic, context=context)(1)

    assert diagnostic.messages() == [
        'Graceful Exit extra info: {"foo":"bar"}',
        "(PID 4242) Exiting with code: 1 - Uncaught Exception",
    ]
    assert primary.messages("info") == [
        '{"foo":"bar"}',
        "(PID 4242) Exiting with code: 1 - Uncaught Exception",
    ]


def test_context_is_read_at_report_time(primary: RecordingSink, diagnostic: RecordingSink) -> None:
    context = DiagnosticContext()
    report = build_report(primary, diagnostic, context=context)
    context["stage"] = "late"

    report(101)

    assert primary.messages("info")[0] == '{"stage":"late"}'


def test_custom_and_unknown_codes(primary: RecordingSink, diagnostic: RecordingSink) -> None:
    report = build_report(primary, diagnostic, codes=ReasonCodeTable({666: "The number of the beast"}))

    report(666)
    report(42)

    assert primary.messages("info") == [
        "(PID 4242) Exiting with code: 666 - The number of the beast",
        "(PID 4242) Exiting with code: 42 - unknown",
    ]


def test_format_exit_line() -> None:
    assert format_exit_line(pid=1, code=101, description="Programmatically quitting") == (
        "(PID 1) Exiting with code: 101 - Programmatically quitting"
    )


def test_tuple_keys_in_context_are_reported(primary: RecordingSink, diagnostic: RecordingSink) -> None:
    context = DiagnosticContext()
    context[("job", 3)] = "import"  # type: ignore[index]

    build_report(primary, diagnostic, context=context)(1)

    assert primary.messages("info") == [
        '{"(\'job\', 3)":"import"}',
        "(PID 4242) Exiting with code: 1 - Uncaught Exception",
    ]


def test_circular_context_value_still_emits_exit_line(primary: RecordingSink, diagnostic: RecordingSink) -> None:
    loop_value: list[object] = []
    loop_value.append(loop_value)
    context = DiagnosticContext({"loop": loop_value})

    build_report(primary, diagnostic, context=context)(4)

    assert primary.messages("info") == [
        "{'loop': [[...]]}",
        "(PID 4242) Exiting with code: 4 - SIGUSR1",
    ]
    assert diagnostic.messages("log")[-1] == "(PID 4242) Exiting with code: 4 - SIGUSR1"
