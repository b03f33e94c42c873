from __future__ import annotations

from ..runtime import CrnBool, CrnNone, CrnValue

def is_truthy(val: CrnValue) -> bool:
    """Only `false` and `none` are falsy. Zero and empty containers are true."""
    match val:
        case CrnBool(value=b):
            return b
        case CrnNone():
            return False
        case _:
            return True
