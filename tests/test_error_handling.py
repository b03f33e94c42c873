from __future__ import annotations

from textwrap import dedent

import pytest

from carrion_ref.runner import execute
from carrion_ref.runtime import CrnError, CrnInt
from tests.support.harness import (
    CarrionArityError,
    CarrionAssignmentError,
    CarrionIndexError,
    CarrionNameError,
    CarrionNotImplementedError,
    CarrionRuntimeError,
    CarrionSyntaxError,
    CarrionTypeError,
    CarrionZeroDivisionError,
    run_program,
)

MESSAGE_CASES = [
    pytest.param("missing", "Identifier not found: missing (line 1, col 1)", id="undefined-identifier"),
    pytest.param("x = 1\ny + 1", "Identifier not found: y (line 2, col 1)", id="undefined-on-later-line"),
    pytest.param("1 + true", "Type mismatch: integer + boolean (line 1, col 1)", id="type-mismatch"),
    pytest.param('"a" - "b"', "Unknown operator: string - string (line 1, col 1)", id="unknown-operator"),
    pytest.param('"a" == "a"', "Unknown operator: string == string (line 1, col 1)", id="string-equality"),
    pytest.param("-true", "Unknown operator: -boolean (line 1, col 1)", id="unknown-prefix"),
    pytest.param("x = 1\n\n1 / 0", "division by zero (line 3, col 1)", id="division-by-zero"),
    pytest.param(
        "[10, 20, 30][3]",
        "Index out of bounds: 3 (list length: 3) (line 1, col 1)",
        id="list-index-out-of-range",
    ),
    pytest.param(
        '"hi"[5]',
        "Index out of bounds: 5 (string length: 2) (line 1, col 1)",
        id="string-index-out-of-range",
    ),
    pytest.param("1[0]", "Index operation not supported: integer[integer] (line 1, col 1)", id="bad-index"),
    pytest.param(
        "a, b = 1, 2, 3",
        "Assignment count mismatch: 2 targets but 3 values (line 1, col 1)",
        id="count-mismatch",
    ),
    pytest.param("len(1, 2)", "len() expects 1 argument(s), got 2 (line 1, col 1)", id="arity"),
    pytest.param("len(3)", "argument to len not supported, got integer (line 1, col 1)", id="len-type"),
    pytest.param("x = 3\nx()", "Not a function: integer (line 2, col 1)", id="not-callable"),
    pytest.param("[*1]", "Cannot unpack integer, expected a list (line 1, col 1)", id="unpack-non-list"),
    pytest.param("for c in 1: c", "Object is not iterable: integer (line 1, col 1)", id="not-iterable"),
    pytest.param("q += 1", "Undefined variable: q (line 1, col 1)", id="compound-undefined"),
    pytest.param("s = none\ns++", "Cannot increment none (line 2, col 1)", id="increment-none"),
    pytest.param("3++", "Invalid increment target: must be an identifier (line 1, col 1)", id="increment-literal"),
    pytest.param(
        "spell f(): 1\nf()",
        "User-defined function calls not yet implemented (line 2, col 1)",
        id="user-call",
    ),
    pytest.param(
        "if true:\n    x = 1\n    missing",
        "Identifier not found: missing (line 3, col 5)",
        id="inside-block",
    ),
]


@pytest.mark.parametrize("source, message", MESSAGE_CASES)
def test_runtime_error_messages(source: str, message: str) -> None:
    with pytest.raises(CarrionRuntimeError) as info:
        run_program(source)

    assert str(info.value) == message


@pytest.mark.parametrize(
    "exc_type",
    [
        CarrionTypeError,
        CarrionNameError,
        CarrionIndexError,
        CarrionArityError,
        CarrionAssignmentError,
        CarrionZeroDivisionError,
        CarrionNotImplementedError,
    ],
)
def test_runtime_errors_share_base(exc_type: type) -> None:
    assert issubclass(exc_type, CarrionRuntimeError)


def test_first_error_aborts_evaluation(capsys: pytest.CaptureFixture[str]) -> None:
    source = dedent(
        """\
        print("before")
        1 / 0
        print("after")
        """
    )
    with pytest.raises(CarrionZeroDivisionError):
        run_program(source)

    assert capsys.readouterr().out == "before\n"


def test_syntax_errors_prevent_evaluation(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(CarrionSyntaxError) as info:
        run_program('print("never")\nx = )')

    assert capsys.readouterr().out == ""
    assert len(info.value.errors) == 1


def test_error_keeps_innermost_location() -> None:
    source = "x = 1\nif x:\n    y = [1, 2][7]\n"
    with pytest.raises(CarrionIndexError) as info:
        run_program(source)

    assert info.value.crn_meta.line == 3
    assert info.value.crn_meta.column == 5


def test_execute_wraps_syntax_errors() -> None:
    result = execute("x = \ny = )")

    assert isinstance(result, CrnError)
    assert result.message == "Encountered parsing errors"
    assert len(result.details) == 2
    assert repr(result) == "Error: Encountered parsing errors"


def test_execute_wraps_runtime_errors() -> None:
    result = execute("missing")

    assert isinstance(result, CrnError)
    assert result.message == "Identifier not found: missing (line 1, col 1)"


def test_execute_returns_value_on_success() -> None:
    assert execute("1 + 2") == CrnInt(3)


def test_environment_survives_failed_run(env) -> None:
    run_program("x = 41", env)

    with pytest.raises(CarrionNameError):
        run_program("y", env)

    assert run_program("x + 1", env) == CrnInt(42)
