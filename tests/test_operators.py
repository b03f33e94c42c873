from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    CarrionAssignmentError,
    CarrionNameError,
    CarrionTypeError,
    CarrionZeroDivisionError,
    run_runtime_case,
)

SCENARIOS = [
    pytest.param("5 + 2 * 10", ("int", 25), None, id="precedence-basic"),
    pytest.param("(5 + 10 * 2 + 15 / 3) * 2 + -10", ("int", 50), None, id="precedence-mixed"),
    pytest.param("50 / 2 * 2 + 10", ("int", 60), None, id="left-assoc-divide"),
    pytest.param("2 * (5 + 10)", ("int", 30), None, id="grouping"),
    pytest.param("10 - 2 - 3", ("int", 5), None, id="left-assoc-minus"),
    pytest.param("7 / 2", ("int", 3), None, id="int-divide-truncates"),
    pytest.param("-7 / 2", ("int", -3), None, id="int-divide-truncates-toward-zero"),
    pytest.param("7 % 3", ("int", 1), None, id="int-mod"),
    pytest.param("-7 % 3", ("int", -1), None, id="int-mod-sign-follows-dividend"),
    pytest.param("2 ** 10", ("int", 1024), None, id="int-power"),
    pytest.param("2 ** -1", ("float", 0.5), None, id="int-negative-power-is-float"),
    pytest.param("9223372036854775807 + 1", ("int", -9223372036854775808), None, id="int-wraps"),
    pytest.param("-9223372036854775807 - 2", ("int", 9223372036854775807), None, id="int-wraps-negative"),
    pytest.param("1.5 + 2.25", ("float", 3.75), None, id="float-add"),
    pytest.param("7.5 / 2.5", ("float", 3.0), None, id="float-divide"),
    pytest.param("5.5 % 2.0", ("float", 1.5), None, id="float-mod"),
    pytest.param("1.5 * 4.0", ("float", 6.0), None, id="float-multiply"),
    pytest.param("2.0 ** 3.0", ("float", 8.0), None, id="float-power"),
    pytest.param("-2.5", ("float", -2.5), None, id="float-negate"),
    pytest.param("-5", ("int", -5), None, id="int-negate"),
    pytest.param("1 < 2", ("bool", True), None, id="lt"),
    pytest.param("2 > 3", ("bool", False), None, id="gt"),
    pytest.param("2 <= 2", ("bool", True), None, id="lte"),
    pytest.param("2.5 >= 2.5", ("bool", True), None, id="float-gte"),
    pytest.param("1 == 1", ("bool", True), None, id="int-eq"),
    pytest.param("1 != 1", ("bool", False), None, id="int-neq"),
    pytest.param('"foo" + "bar"', ("string", "foobar"), None, id="string-concat"),
    pytest.param('"a" == "a"', None, CarrionTypeError, id="string-eq-unsupported"),
    pytest.param('"a" != "b"', None, CarrionTypeError, id="string-neq-unsupported"),
    pytest.param("true == false", ("bool", False), None, id="bool-eq"),
    pytest.param("true != false", ("bool", True), None, id="bool-neq"),
    pytest.param("not true", ("bool", False), None, id="not-true"),
    pytest.param("!false", ("bool", True), None, id="bang-false"),
    pytest.param("not 0", ("bool", False), None, id="not-zero-since-zero-is-truthy"),
    pytest.param("not none", ("bool", True), None, id="not-none"),
    pytest.param("not not 5", ("bool", True), None, id="double-not"),
    pytest.param("true and 5", ("int", 5), None, id="and-yields-right"),
    pytest.param("false and missing", ("bool", False), None, id="and-short-circuits"),
    pytest.param("none or 7", ("int", 7), None, id="or-yields-right"),
    pytest.param("1 or missing", ("int", 1), None, id="or-short-circuits"),
    pytest.param("x = 5\nx = x + 5\nx", ("int", 10), None, id="rebind-from-self"),
    pytest.param("x = 20\nx /= 4\nx", ("int", 5), None, id="compound-divide"),
    pytest.param("x = 3\nx *= 4\nx", ("int", 12), None, id="compound-multiply"),
    pytest.param("x = 3\nx -= 4\nx", ("int", -1), None, id="compound-minus"),
    pytest.param("x = 1\nx += 2", ("int", 3), None, id="compound-yields-new-value"),
    pytest.param('s = "a"\ns += "b"\ns', ("string", "ab"), None, id="compound-string"),
    pytest.param("x = 1.5\nx *= 2.0\nx", ("float", 3.0), None, id="compound-float"),
    pytest.param("x = 1\nx++\nx", ("int", 2), None, id="postfix-incr-stores"),
    pytest.param("x = 1\nx++", ("int", 1), None, id="postfix-yields-old"),
    pytest.param("x = 1\nx--\nx", ("int", 0), None, id="postfix-decr"),
    pytest.param("x = 1\n++x", ("int", 2), None, id="prefix-incr-yields-new"),
    pytest.param("x = 1\n--x", ("int", 0), None, id="prefix-decr"),
    pytest.param("x = 1.5\nx++\nx", ("float", 2.5), None, id="incr-float"),
    pytest.param("1 + true", None, CarrionTypeError, id="int-plus-bool"),
    pytest.param("1 + 1.5", None, CarrionTypeError, id="int-plus-float"),
    pytest.param('"a" - "b"', None, CarrionTypeError, id="string-minus"),
    pytest.param('"a" * 3', None, CarrionTypeError, id="string-times-int"),
    pytest.param("true < false", None, CarrionTypeError, id="bool-ordering"),
    pytest.param("-true", None, CarrionTypeError, id="negate-bool"),
    pytest.param('-"a"', None, CarrionTypeError, id="negate-string"),
    pytest.param("1 / 0", None, CarrionZeroDivisionError, id="int-divide-by-zero"),
    pytest.param("1 % 0", None, CarrionZeroDivisionError, id="int-mod-by-zero"),
    pytest.param("1.0 / 0.0", None, CarrionZeroDivisionError, id="float-divide-by-zero"),
    pytest.param("x = 4\nx /= 0", None, CarrionZeroDivisionError, id="compound-divide-by-zero"),
    pytest.param("y += 1", None, CarrionNameError, id="compound-undefined"),
    pytest.param("y++", None, CarrionNameError, id="incr-undefined"),
    pytest.param('s = "a"\ns++', None, CarrionTypeError, id="incr-string"),
    pytest.param("5++", None, CarrionAssignmentError, id="incr-literal"),
    pytest.param("[1][0] = 2", None, CarrionAssignmentError, id="assign-to-index"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_operators(source: str, expectation, expected_exc) -> None:
    run_runtime_case(dedent(source), expectation, expected_exc)


@pytest.mark.parametrize(
    "source, expected",
    [
        pytest.param("1.0 * 2.0", "2", id="integral-float"),
        pytest.param("1.0 / 4.0", "0.25", id="fractional-float"),
        pytest.param("0.0 - 0.5", "-0.5", id="negative-float"),
        pytest.param("2.0 ** 2000.0", "inf", id="float-overflow"),
        pytest.param("(0.0 - 8.0) ** 0.5", "NaN", id="float-nan"),
        pytest.param("true", "true", id="bool"),
        pytest.param("none", "none", id="none"),
    ],
)
def test_value_display(source: str, expected: str) -> None:
    run_runtime_case(source, ("display", expected), None)


@pytest.mark.parametrize(
    "source, expectation, expected_exc",
    [
        pytest.param(" + ".join(["1"] * 5000), ("int", 5000), None, id="long-sum"),
        pytest.param("x = 1\n" + " * ".join(["x"] * 4000), ("int", 1), None, id="long-product"),
        pytest.param(" - ".join(["1"] * 3000) + " + true", None, CarrionTypeError, id="long-chain-type-error"),
        pytest.param("(1 + 2) * 3 - (false or 4)", ("int", 5), None, id="grouped-and-logical-operands"),
    ],
)
def test_long_operator_chains(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
