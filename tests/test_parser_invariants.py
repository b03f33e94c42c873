from __future__ import annotations

from typing import List

import pytest

from carrion_ref.parser_rd import Parser, parse_source
from tests.support.harness import TT, CarrionSyntaxError, ParseError, lex, parse

PARSE_ERROR_CASES = [
    pytest.param("x = ", "No prefix parsing function found for token EOF", id="missing-rhs"),
    pytest.param("x = )", "No prefix parsing function found for token RPAR (')')", id="stray-closer"),
    pytest.param("if x\n    y", "Expected ':' after if condition.", id="if-missing-colon"),
    pytest.param("while x\n    y", "Expected ':' after while condition.", id="while-missing-colon"),
    pytest.param("for 1 in xs: y", "Expected loop variable after 'for'", id="for-missing-variable"),
    pytest.param("for x of xs: y", "Expected 'in' after loop variable", id="for-missing-in"),
    pytest.param("spell (a): a", "Expected spell name after 'spell'", id="spell-missing-name"),
    pytest.param("spell f(a b): a", "Expected ')' after parameters", id="spell-bad-params"),
    pytest.param("spell f(a) a", "Expected ':' after spell signature", id="spell-missing-colon"),
    pytest.param("else:\n    1", "'else' without a matching 'if'", id="dangling-else"),
    pytest.param("otherwise x:\n    1", "'otherwise' without a matching 'if'", id="dangling-otherwise"),
    pytest.param("match x", "'match' is a reserved keyword and is not supported", id="reserved-statement"),
    pytest.param("y = grim", "'grim' is a reserved keyword and is not supported", id="reserved-expression"),
    pytest.param("x y", "Expected end of statement, got IDENT ('y')", id="two-expressions"),
    pytest.param("a, b", "Expected end of statement, got COMMA (',')", id="bare-comma"),
    pytest.param(
        "99999999999999999999",
        "Could not parse '99999999999999999999' as an integer.",
        id="integer-overflow",
    ),
    pytest.param("a, b += 1", "Compound assignment requires exactly one target", id="compound-two-targets"),
    pytest.param("    x = 1", "Unexpected indent", id="unexpected-indent"),
    pytest.param("if x:\n", "Expected an indented block", id="missing-block"),
    pytest.param("if x:", "Expected a statement after ':'", id="colon-at-eof"),
    pytest.param("[1, 2", "Expected ']'", id="unclosed-list"),
    pytest.param("f(1, 2", "Expected ')'", id="unclosed-call"),
    pytest.param("(1 + 2", "Expected ')' after expression", id="unclosed-group"),
    pytest.param("a[1", "Expected ']' after index", id="unclosed-index"),
    pytest.param('{"a" 1}', "Expected ':' after dict key", id="dict-missing-colon"),
    pytest.param('{"a": 1 "b": 2}', "Expected '}' after dict entries", id="dict-missing-comma"),
]


@pytest.mark.parametrize("source, message", PARSE_ERROR_CASES)
def test_parse_errors(source: str, message: str) -> None:
    _, errors = parse(source)

    assert errors, "expected at least one syntax error"
    assert isinstance(errors[0], ParseError)
    assert errors[0].message == message


def test_error_text_carries_position() -> None:
    _, errors = parse("x = 1\ny = )")
    assert str(errors[0]) == "No prefix parsing function found for token RPAR (')') at line 2, col 5"


def test_errors_accumulate_and_parsing_resumes() -> None:
    program, errors = parse("x = \ny = 2\nz = )\nw = 3\n")

    assert len(errors) == 2
    assert [err.token.line for err in errors] == [1, 3]
    assert [stmt.data for stmt in program.children] == ["assignstmt", "assignstmt"]


def test_error_inside_block_does_not_hide_following_statements() -> None:
    program, errors = parse("if x:\n    y = \nz = 1\n")

    assert len(errors) == 1
    assert [stmt.data for stmt in program.children][-1] == "assignstmt"


def test_parse_source_raises_with_every_error() -> None:
    with pytest.raises(CarrionSyntaxError) as info:
        parse_source("x = \ny = )\n")

    assert len(info.value.errors) == 2
    assert "at line 1" in str(info.value)


def test_parse_source_returns_program_tree() -> None:
    tree = parse_source("x = 1\nx")
    assert tree.data == "program"
    assert len(tree.children) == 2


def test_too_many_otherwise_clauses() -> None:
    source = "if a: 1\n" + "otherwise a: 1\n" * (Parser.MAX_OTHERWISE_CLAUSES + 1)
    _, errors = parse(source)

    assert errors[0].message == "Too many otherwise clauses: maximum 50 allowed"


def test_otherwise_clause_limit_is_inclusive() -> None:
    source = "if a: 1\n" + "otherwise a: 1\n" * Parser.MAX_OTHERWISE_CLAUSES
    _, errors = parse(source)

    assert errors == []


def test_block_statement_ceiling() -> None:
    source = "if a:\n" + "    x = 1\n" * (Parser.MAX_BLOCK_STATEMENTS + 1)
    _, errors = parse(source)

    assert errors[0].message == "Block too large: maximum 100 statements allowed"


def test_nesting_ceiling() -> None:
    source = "(" * 200 + "1" + ")" * 200
    _, errors = parse(source)

    assert [err.message for err in errors] == ["Program nested too deeply"]


def test_recovery_ceiling() -> None:
    source = ")\n" * (Parser.MAX_RECOVERIES + 5)
    _, errors = parse(source)

    assert errors[-1].message == "Too many syntax errors, giving up"
    assert len(errors) == Parser.MAX_RECOVERIES + 1


RESILIENCE_SOURCES = [
    pytest.param("))) ((( ::: ,,,", id="punctuation-soup"),
    pytest.param("if if if", id="keyword-soup"),
    pytest.param("\t\t\tx", id="leading-tabs"),
    pytest.param("spell", id="lone-spell"),
    pytest.param("else otherwise", id="dangling-clauses"),
    pytest.param("[1, 2,, 3]", id="double-comma"),
    pytest.param("}{", id="reversed-braces"),
    pytest.param("x = = = 1", id="repeated-assign"),
    pytest.param("for in in in: :", id="for-soup"),
    pytest.param("if x:\n  a\n    b\n", id="unexpected-nested-indent"),
    pytest.param("spell f(:\n    return\n", id="broken-signature"),
    pytest.param("*", id="bare-star"),
    pytest.param("1 +", id="dangling-operator"),
]


@pytest.mark.parametrize("source", RESILIENCE_SOURCES)
def test_invalid_programs_yield_errors_without_raising(source: str) -> None:
    program, errors = parse(source)

    assert program.data == "program"
    assert errors


@pytest.mark.parametrize(
    "source",
    [
        pytest.param('"never closed', id="unterminated-string"),
        pytest.param("/* never closed", id="unterminated-comment"),
        pytest.param("", id="empty"),
        pytest.param("\n\n\n", id="only-newlines"),
        pytest.param("   ", id="only-spaces"),
        pytest.param("@@@ $$$", id="junk"),
    ],
)
def test_parser_never_raises(source: str) -> None:
    program, _ = parse(source)
    assert program.data == "program"


INDENT_BALANCE_SOURCES = [
    pytest.param("x = 1", id="flat"),
    pytest.param("if x:\n    y\n", id="one-block"),
    pytest.param("if x:\n    if y:\n        z", id="nested-unclosed-at-eof"),
    pytest.param("a:\n  b:\n    c:\n      d\ne\n", id="triple-dedent"),
    pytest.param("if x:\n    y\n  z\n", id="inconsistent-dedent"),
    pytest.param("\n".join(" " * i + "a" for i in range(70)), id="past-nesting-ceiling"),
    pytest.param("\n".join([" " * i + "a" for i in range(30)] + ["b"]), id="past-dedent-ceiling"),
    pytest.param("f(\n    1,\n        2)\n", id="brackets"),
]


def _count(tokens: List[object], token_type: TT) -> int:
    return sum(1 for tok in tokens if tok.type == token_type)


@pytest.mark.parametrize("source", INDENT_BALANCE_SOURCES)
def test_indents_and_dedents_balance(source: str) -> None:
    tokens, _ = lex(source)

    assert _count(tokens, TT.INDENT) == _count(tokens, TT.DEDENT)
    assert tokens[-1].type == TT.EOF


def test_parser_with_empty_token_list() -> None:
    parser = Parser([])
    program = parser.parse_program()

    assert program.children == []
    assert parser.errors == []
