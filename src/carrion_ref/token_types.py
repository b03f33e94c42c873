"""
Token Types for the Carrion Parser

Shared between lexer and parser to avoid circular dependencies.
"""

from types import MappingProxyType
from typing import Mapping
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Special
    ILLEGAL = auto()
    EOF = auto()
    NEWLINE = auto()
    INDENT = auto()
    DEDENT = auto()

    # Identifiers and literals
    IDENT = auto()
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()

    # Arithmetic
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    MOD = auto()
    POW = auto()

    # Assignment
    ASSIGN = auto()  # =
    PLUSEQ = auto()
    MINUSEQ = auto()
    STAREQ = auto()
    SLASHEQ = auto()

    # Increment/Decrement
    INCR = auto()  # ++
    DECR = auto()  # --

    # Comparison
    EQ = auto()
    NEQ = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()

    # Bitwise-looking symbols (lexed, no grammar yet)
    BANG = auto()  # !
    AMP = auto()  # &
    HASH = auto()  # #
    AT = auto()  # @
    PIPE = auto()  # |
    CARET = auto()  # ^
    TILDE = auto()  # ~
    LSHIFT = auto()  # <<
    RSHIFT = auto()  # >>

    # Punctuation
    COMMA = auto()
    COLON = auto()
    DOT = auto()
    LPAR = auto()
    RPAR = auto()
    LBRACE = auto()
    RBRACE = auto()
    LSQB = auto()
    RSQB = auto()

    # Keywords
    IF = auto()
    ELSE = auto()
    OTHERWISE = auto()
    WHILE = auto()
    FOR = auto()
    IN = auto()
    LOOP = auto()
    STOP = auto()
    SKIP = auto()
    RETURN = auto()
    SPELL = auto()
    ARCANESPELL = auto()
    GRIM = auto()
    INIT = auto()
    SELF = auto()
    ARCANE = auto()
    ATTEMPT = auto()
    RESOLVE = auto()
    ENSNARE = auto()
    RAISE = auto()
    AS = auto()
    MATCH = auto()
    CASE = auto()
    SUPER = auto()
    CHECK = auto()
    MAYBE = auto()
    IMPORT = auto()
    IGNORE = auto()

    # Literal keywords
    TRUE = auto()
    FALSE = auto()
    NONE = auto()

    # Logical
    AND = auto()
    OR = auto()
    NOT = auto()


@dataclass(frozen=True)
class Tok:
    """Token with position info"""

    type: TT
    value: str
    file: str = "<string>"
    line: int = 0
    column: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"


# Lookup is case-insensitive: callers lower-case the spelling first.
KEYWORDS: Mapping[str, TT] = MappingProxyType({
    'if': TT.IF,
    'else': TT.ELSE,
    'otherwise': TT.OTHERWISE,
    'while': TT.WHILE,
    'for': TT.FOR,
    'in': TT.IN,
    'loop': TT.LOOP,
    'stop': TT.STOP,
    'skip': TT.SKIP,
    'return': TT.RETURN,
    'spell': TT.SPELL,
    'arcanespell': TT.ARCANESPELL,
    'grim': TT.GRIM,
    'init': TT.INIT,
    'self': TT.SELF,
    'arcane': TT.ARCANE,
    'attempt': TT.ATTEMPT,
    'resolve': TT.RESOLVE,
    'ensnare': TT.ENSNARE,
    'raise': TT.RAISE,
    'as': TT.AS,
    'match': TT.MATCH,
    'case': TT.CASE,
    'super': TT.SUPER,
    'check': TT.CHECK,
    'maybe': TT.MAYBE,
    'import': TT.IMPORT,
    'ignore': TT.IGNORE,
    'true': TT.TRUE,
    'false': TT.FALSE,
    'none': TT.NONE,
    'and': TT.AND,
    'or': TT.OR,
    'not': TT.NOT,
})

# Keywords that lex but have no production in the grammar.
RESERVED = frozenset({
    TT.LOOP,
    TT.ARCANESPELL,
    TT.GRIM,
    TT.INIT,
    TT.SELF,
    TT.ARCANE,
    TT.ATTEMPT,
    TT.RESOLVE,
    TT.ENSNARE,
    TT.RAISE,
    TT.AS,
    TT.MATCH,
    TT.CASE,
    TT.SUPER,
    TT.CHECK,
    TT.MAYBE,
    TT.IMPORT,
    TT.IGNORE,
})


def lookup_identifier(text: str) -> TT:
    """Classify an identifier spelling as keyword or plain identifier."""
    return KEYWORDS.get(text.lower(), TT.IDENT)
