"""prompt_toolkit lexer for live Carrion syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as CrnLexer
from .token_types import KEYWORDS, RESERVED, TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "reserved": "italic ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

_LITERAL_KEYWORDS = {TT.TRUE, TT.FALSE, TT.NONE}

# Token type → highlight group.
_TT_GROUP = {
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NONE: "constant",
    TT.INTEGER: "number",
    TT.FLOAT: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LSQB: "punctuation",
    TT.RSQB: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
    TT.DOT: "punctuation",
    TT.COMMA: "punctuation",
    TT.COLON: "punctuation",
}

for _tt in KEYWORDS.values():
    if _tt in _LITERAL_KEYWORDS:
        continue
    _TT_GROUP[_tt] = "reserved" if _tt in RESERVED else "keyword"

for _op, _tt in CrnLexer.OPERATORS:
    _TT_GROUP.setdefault(_tt, "operator")

_LAYOUT = {TT.NEWLINE, TT.INDENT, TT.DEDENT, TT.EOF}


def _token_end(text: str, tok: Tok, start: int) -> int:
    """Column just past the token's source text."""
    if tok.type != TT.STRING:
        return start + len(tok.value)

    quote = text[start]
    pos = start + 1

    while pos < len(text) and text[pos] != quote:
        pos += 2 if text[pos] == "\\" else 1

    return min(pos + 1, len(text))


def _gap(text: str) -> StyleAndTextTuples:
    stripped = text.lstrip()
    if stripped.startswith(("//", "/*", "#")):
        lead = len(text) - len(stripped)
        return [("", text[:lead]), (GROUP_STYLE["comment"], stripped)]
    return [("", text)]


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    tokens = CrnLexer(text, file="<repl>", log_errors=False).tokenize()

    result: StyleAndTextTuples = []
    pos = 0

    for tok in tokens:
        if tok.type in _LAYOUT:
            continue

        start = tok.column - 1
        if start < pos or start >= len(text):
            continue

        # Unstyled gap (whitespace, comments, skipped characters) before token.
        if start > pos:
            result.extend(_gap(text[pos:start]))

        end = _token_end(text, tok, start)
        style = GROUP_STYLE.get(_TT_GROUP.get(tok.type, ""), "")
        result.append((style, text[start:end]))
        pos = end

    # Trailing text.
    if pos < len(text):
        result.extend(_gap(text[pos:]))

    return result if result else [("", text)]


class CarrionLexer(Lexer):
    """prompt_toolkit Lexer that highlights Carrion source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
