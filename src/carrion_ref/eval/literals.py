from __future__ import annotations

from typing import Callable, Dict, List

from lark import Tree

from ..runtime import (
    Environment,
    CrnBool,
    CrnDict,
    CrnFloat,
    CrnInt,
    CrnList,
    CrnString,
    CrnValue,
    CarrionRuntimeError,
    CarrionTypeError,
)
from ..tree import Node, tree_children, tree_label
from .common import dict_key, type_name

EvalFunc = Callable[[Node, Environment], CrnValue]

def eval_int_literal(n: Tree) -> CrnInt:
    return CrnInt(int(n.children[0]))

def eval_float_literal(n: Tree) -> CrnFloat:
    return CrnFloat(float(n.children[0]))

def eval_string_literal(n: Tree) -> CrnString:
    return CrnString(str(n.children[0]))

def eval_bool_literal(n: Tree) -> CrnBool:
    return CrnBool(n.children[0] == 'true')

def eval_items(nodes: List[Node], env: Environment, eval_func: EvalFunc) -> List[CrnValue]:
    """Evaluate left to right, splicing `*expr` elements into the result."""
    values: List[CrnValue] = []

    for node in nodes:
        if tree_label(node) == 'unpack':
            spread = eval_func(node.children[0], env)
            if not isinstance(spread, CrnList):
                raise CarrionTypeError(f"Cannot unpack {type_name(spread)}, expected a list")
            values.extend(spread.items)
        else:
            values.append(eval_func(node, env))

    return values

def eval_list(n: Tree, env: Environment, eval_func: EvalFunc) -> CrnList:
    return CrnList(eval_items(tree_children(n), env, eval_func))

def eval_dict(n: Tree, env: Environment, eval_func: EvalFunc) -> CrnDict:
    slots: Dict[str, CrnValue] = {}

    for pair in tree_children(n):
        key_node, value_node = pair.children
        key = eval_func(key_node, env)
        value = eval_func(value_node, env)
        slots[dict_key(key)] = value

    return CrnDict(slots)

def eval_unpack(_n: Tree, _env: Environment) -> CrnValue:
    raise CarrionRuntimeError("Unpacking is only allowed inside a list literal or call arguments")
