from __future__ import annotations

from typing import Callable, Iterator

from lark import Tree

from ..runtime import (
    Environment,
    CrnList,
    CrnNone,
    CrnReturn,
    CrnString,
    CrnValue,
    CarrionTypeError,
    LoopSkipSignal,
    LoopStopSignal,
)
from ..tree import Node, children_by_label, child_by_label
from .blocks import eval_block
from .common import type_name
from .helpers import is_truthy

EvalFunc = Callable[[Node, Environment], CrnValue]

def eval_if_stmt(n: Tree, env: Environment, eval_func: EvalFunc) -> CrnValue:
    cond_node, then_block = n.children[0], n.children[1]

    if is_truthy(eval_func(cond_node, env)):
        return eval_block(then_block, env, eval_func)

    for clause in children_by_label(n, 'otherwise'):
        clause_cond, clause_block = clause.children
        if is_truthy(eval_func(clause_cond, env)):
            return eval_block(clause_block, env, eval_func)

    else_clause = child_by_label(n, 'elseclause')
    if else_clause is not None:
        return eval_block(else_clause.children[0], env, eval_func)

    return CrnNone()

def eval_while_stmt(n: Tree, env: Environment, eval_func: EvalFunc) -> CrnValue:
    cond_node, body = n.children
    result: CrnValue = CrnNone()

    while is_truthy(eval_func(cond_node, env)):
        try:
            result = eval_block(body, env, eval_func)
        except LoopSkipSignal:
            continue
        except LoopStopSignal:
            break

        if isinstance(result, CrnReturn):
            return result

    return result

def eval_for_stmt(n: Tree, env: Environment, eval_func: EvalFunc) -> CrnValue:
    var_tok, iter_node, body = n.children
    name = str(var_tok.value)
    iterable = eval_func(iter_node, env)
    result: CrnValue = CrnNone()

    for item in _iterate(iterable):
        env.set(name, item)

        try:
            result = eval_block(body, env, eval_func)
        except LoopSkipSignal:
            continue
        except LoopStopSignal:
            break

        if isinstance(result, CrnReturn):
            return result

    return result

def _iterate(value: CrnValue) -> Iterator[CrnValue]:
    match value:
        case CrnList(items=items):
            return iter(list(items))
        case CrnString(value=s):
            return (CrnString(ch) for ch in s)

    raise CarrionTypeError(f"Object is not iterable: {type_name(value)}")

def eval_stop_stmt(_n: Tree, _env: Environment) -> CrnValue:
    raise LoopStopSignal()

def eval_skip_stmt(_n: Tree, _env: Environment) -> CrnValue:
    raise LoopSkipSignal()
