"""Built-in functions (print, len, ...) registered via carrion_ref.runtime."""

from __future__ import annotations

from typing import List

from .runtime import register_stdlib, CrnNone, CrnInt, CrnString, CrnList, CrnDict, CrnValue
from .runtime import CarrionRuntimeError, CarrionTypeError
from .eval.common import stringify, type_name

@register_stdlib("print")
def std_print(_env, args: List[CrnValue]) -> CrnNone:
    rendered = [stringify(arg) for arg in args]
    print(*rendered)
    return CrnNone()

@register_stdlib("len", arity=1)
def std_len(_env, args: List[CrnValue]) -> CrnInt:
    match args[0]:
        case CrnString(value=s):
            return CrnInt(len(s))
        case CrnList(items=items):
            return CrnInt(len(items))
        case CrnDict(slots=slots):
            return CrnInt(len(slots))
        case other:
            raise CarrionTypeError(f"argument to len not supported, got {type_name(other)}")

@register_stdlib("push", arity=2)
def std_push(_env, args: List[CrnValue]) -> CrnList:
    target, value = args

    if not isinstance(target, CrnList):
        raise CarrionTypeError(f"first argument to push must be a list, got {type_name(target)}")

    return CrnList(target.items + [value])

@register_stdlib("pop", arity=1)
def std_pop(_env, args: List[CrnValue]) -> CrnList:
    target = args[0]

    if not isinstance(target, CrnList):
        raise CarrionTypeError(f"argument to pop must be a list, got {type_name(target)}")

    if not target.items:
        raise CarrionRuntimeError("cannot pop from an empty list")

    return CrnList(target.items[:-1])

@register_stdlib("keys", arity=1)
def std_keys(_env, args: List[CrnValue]) -> CrnList:
    target = args[0]

    if not isinstance(target, CrnDict):
        raise CarrionTypeError(f"argument to keys must be a dict, got {type_name(target)}")

    return CrnList([CrnString(k) for k in target.slots])

@register_stdlib("values", arity=1)
def std_values(_env, args: List[CrnValue]) -> CrnList:
    target = args[0]

    if not isinstance(target, CrnDict):
        raise CarrionTypeError(f"argument to values must be a dict, got {type_name(target)}")

    return CrnList(list(target.slots.values()))

@register_stdlib("type", arity=1)
def std_type(_env, args: List[CrnValue]) -> CrnString:
    return CrnString(type_name(args[0]))

@register_stdlib("str", arity=1)
def std_str(_env, args: List[CrnValue]) -> CrnString:
    return CrnString(stringify(args[0]))
