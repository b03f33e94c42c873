from __future__ import annotations

from typing import Callable, List

from lark import Tree

from ..runtime import (
    Environment,
    CrnBuiltin,
    CrnDict,
    CrnFunction,
    CrnInt,
    CrnList,
    CrnNone,
    CrnString,
    CrnValue,
    CarrionArityError,
    CarrionIndexError,
    CarrionNotImplementedError,
    CarrionTypeError,
)
from ..tree import Node, tree_children
from .common import dict_key, type_name
from .literals import eval_items

EvalFunc = Callable[[Node, Environment], CrnValue]

def eval_index(n: Tree, env: Environment, eval_func: EvalFunc) -> CrnValue:
    obj_node, index_node = n.children
    obj = eval_func(obj_node, env)
    index = eval_func(index_node, env)
    return index_value(obj, index)

def index_value(obj: CrnValue, index: CrnValue) -> CrnValue:
    """
    Lists and strings take integer positions and fail when out of range.
    Dicts take any key (by display form) and yield none when it is missing.
    """
    match obj, index:
        case CrnList(items=items), CrnInt(value=i):
            if 0 <= i < len(items):
                return items[i]
            raise CarrionIndexError(f"Index out of bounds: {i} (list length: {len(items)})")
        case CrnString(value=s), CrnInt(value=i):
            if 0 <= i < len(s):
                return CrnString(s[i])
            raise CarrionIndexError(f"Index out of bounds: {i} (string length: {len(s)})")
        case CrnDict(slots=slots), _:
            return slots.get(dict_key(index), CrnNone())

    raise CarrionTypeError(f"Index operation not supported: {type_name(obj)}[{type_name(index)}]")

def eval_call(n: Tree, env: Environment, eval_func: EvalFunc) -> CrnValue:
    callee_node, args_node = n.children
    callee = eval_func(callee_node, env)
    args = eval_items(tree_children(args_node), env, eval_func)
    return call_value(callee, args, env)

def call_value(callee: CrnValue, args: List[CrnValue], env: Environment) -> CrnValue:
    match callee:
        case CrnBuiltin(name=name, fn=fn, arity=arity):
            if arity is not None and len(args) != arity:
                raise CarrionArityError(
                    f"{name}() expects {arity} argument(s), got {len(args)}"
                )
            return fn(env, args)
        case CrnFunction():
            raise CarrionNotImplementedError("User-defined function calls not yet implemented")

    raise CarrionTypeError(f"Not a function: {type_name(callee)}")
