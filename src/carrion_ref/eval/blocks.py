from __future__ import annotations

from typing import Callable, List

from lark import Tree

from ..runtime import (
    Environment,
    CrnNone,
    CrnReturn,
    CrnValue,
    CarrionRuntimeError,
    LoopSkipSignal,
    LoopStopSignal,
)
from ..tree import Node, node_meta, tree_children

EvalFunc = Callable[[Node, Environment], CrnValue]

def eval_program(children: List[Node], env: Environment, eval_func: EvalFunc) -> CrnValue:
    """Run top-level statements, returning the last value (a return's payload if one fires)."""
    result: CrnValue = CrnNone()

    for child in children:
        try:
            result = eval_func(child, env)
        except LoopStopSignal:
            raise _outside_loop("stop", child) from None
        except LoopSkipSignal:
            raise _outside_loop("skip", child) from None

        if isinstance(result, CrnReturn):
            return result.value

    return result

def eval_block(n: Tree, env: Environment, eval_func: EvalFunc) -> CrnValue:
    """Run a block; a return-signal stops it and is passed up unchanged."""
    result: CrnValue = CrnNone()

    for child in tree_children(n):
        result = eval_func(child, env)

        if isinstance(result, CrnReturn):
            return result

    return result

def eval_return_stmt(n: Tree, env: Environment, eval_func: EvalFunc) -> CrnReturn:
    if n.children:
        return CrnReturn(eval_func(n.children[0], env))

    return CrnReturn(CrnNone())

def _outside_loop(keyword: str, stmt: Node) -> CarrionRuntimeError:
    err = CarrionRuntimeError(f"'{keyword}' outside of a loop")
    err.crn_meta = node_meta(stmt)
    return err
