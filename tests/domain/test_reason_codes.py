from __future__ import annotations

import pytest

from graceful_exit.domain import UNKNOWN_REASON, ReasonCode, ReasonCodeTable, coerce_code
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def test_builtin_table_lists_every_reason() -> None:
    table = ReasonCodeTable()

    assert dict(table) == {
        1: "Uncaught Exception",
        2: "Unhandled Promise Rejection",
        3: "SIGINT",
        4: "SIGUSR1",
        5: "SIGUSR2",
        100: "Error on Graceful Exit Process",
        101: "Programmatically quitting",
    }


def test_reason_code_enum_values_match_exit_codes() -> None:
    assert ReasonCode.SIGINT == 3
    assert ReasonCode.SIGUSR2 == 5
    assert ReasonCode.PROGRAMMATIC_QUIT == 101


def test_custom_codes_extend_and_override_without_removing() -> None:
    table = ReasonCodeTable({666: "The number of the beast", 3: "Ctrl+C"})

    assert table.describe(666) == "The number of the beast"
    assert table.describe(3) == "Ctrl+C"
    assert table.describe(101) == "Programmatically quitting"
    assert len(table) == 8


def test_unmapped_codes_describe_as_unknown() -> None:
    assert ReasonCodeTable().describe(42) == UNKNOWN_REASON == "unknown"


def test_iteration_is_sorted_by_code() -> None:
    table = ReasonCodeTable({50: "middle"})

    assert list(table) == [1, 2, 3, 4, 5, 50, 100, 101]


def test_string_codes_are_coerced() -> None:
    table = ReasonCodeTable({" 7 ": "seven"})

    assert table[7] == "seven"


@pytest.mark.parametrize("value", ["abc", 1.5, True, None, ""])
def test_coerce_code_rejects_non_integers(value: object) -> None:
    with pytest.raises(ValueError, match="reason code must be an integer"):
        coerce_code(value)


def test_coerce_code_accepts_negative_strings() -> None:
    assert coerce_code("-3") == -3
