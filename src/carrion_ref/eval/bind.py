from __future__ import annotations

from typing import Callable, List

from lark import Tree

from ..runtime import (
    Environment,
    CrnFloat,
    CrnInt,
    CrnList,
    CrnValue,
    CarrionAssignmentError,
    CarrionNameError,
    CarrionTypeError,
)
from ..tree import Node, tree_children
from .common import expect_ident_token, type_name, wrap_int
from .expr import apply_binary_operator

EvalFunc = Callable[[Node, Environment], CrnValue]

def eval_assign_stmt(n: Tree, env: Environment, eval_func: EvalFunc) -> CrnValue:
    """
    Bind one value to one or more identifiers.

    With several targets a list value is spread positionally and must have
    one element per target; any other value is bound to every target.
    """
    targets_node, value_node = n.children
    targets: List[Node] = tree_children(targets_node)
    value = eval_func(value_node, env)

    names = [expect_ident_token(t, "assignment target") for t in targets]

    if len(names) == 1:
        env.set(names[0], value)
        return value

    if isinstance(value, CrnList):
        if len(value.items) != len(names):
            raise CarrionAssignmentError(
                f"Assignment count mismatch: {len(names)} targets but {len(value.items)} values"
            )

        for name, item in zip(names, value.items):
            env.set(name, item)
        return value

    for name in names:
        env.set(name, value)
    return value

def eval_compound_assign(n: Tree, env: Environment, eval_func: EvalFunc) -> CrnValue:
    target, op_tok, value_node = n.children
    name = expect_ident_token(target, "compound assignment target")

    current = env.lookup(name)
    if current is None:
        raise CarrionNameError(f"Undefined variable: {name}")

    rhs = eval_func(value_node, env)
    result = apply_binary_operator(str(op_tok.value), current, rhs)
    env.set(name, result)
    return result

def eval_postfix(n: Tree, env: Environment) -> CrnValue:
    operand, op_tok = n.children
    delta = 1 if op_tok.value == '++' else -1
    return apply_increment(operand, env, delta, prefix=False)

def apply_increment(target: Node, env: Environment, delta: int, prefix: bool) -> CrnValue:
    """Store the stepped value; prefix form yields it, postfix the old one."""
    name = expect_ident_token(target, "increment target")

    current = env.lookup(name)
    if current is None:
        raise CarrionNameError(f"Undefined variable: {name}")

    match current:
        case CrnInt(value=v):
            updated: CrnValue = CrnInt(wrap_int(v + delta))
        case CrnFloat(value=v):
            updated = CrnFloat(v + delta)
        case _:
            raise CarrionTypeError(f"Cannot increment {type_name(current)}")

    env.set(name, updated)
    return updated if prefix else current
