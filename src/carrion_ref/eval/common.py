from __future__ import annotations

from typing import Any, Optional

from lark import Token

from ..runtime import (
    CrnBool,
    CrnBuiltin,
    CrnDict,
    CrnError,
    CrnFloat,
    CrnFunction,
    CrnInt,
    CrnList,
    CrnNone,
    CrnReturn,
    CrnString,
    CrnValue,
    CarrionAssignmentError,
)
from ..tree import is_token

INT_BITS = 64
_INT_MOD = 1 << INT_BITS
_INT_SIGN = 1 << (INT_BITS - 1)

def token_kind(node: Any) -> Optional[str]:
    if not is_token(node):
        return None
    tok: Token = node
    return str(tok.type)

def expect_ident_token(node: Any, context: str) -> str:
    if is_token(node) and token_kind(node) == 'IDENT':
        return str(node.value)

    raise CarrionAssignmentError(f"Invalid {context}: must be an identifier")

def wrap_int(value: int) -> int:
    """Two's-complement wrap into the signed 64-bit range."""
    value &= _INT_MOD - 1
    return value - _INT_MOD if value & _INT_SIGN else value

def stringify(value: CrnValue) -> str:
    if isinstance(value, CrnString):
        return value.value

    return repr(value)

def dict_key(value: CrnValue) -> str:
    """Keys are stored by their display form; strings pass through."""
    return stringify(value)

def type_name(value: CrnValue) -> str:
    match value:
        case CrnInt():
            return "integer"
        case CrnFloat():
            return "float"
        case CrnBool():
            return "boolean"
        case CrnString():
            return "string"
        case CrnList():
            return "list"
        case CrnDict():
            return "dict"
        case CrnFunction():
            return "function"
        case CrnBuiltin():
            return "builtin"
        case CrnReturn():
            return "return"
        case CrnError():
            return "error"
        case CrnNone():
            return "none"
        case _:
            return type(value).__name__
