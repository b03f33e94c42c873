from __future__ import annotations

from typing import Callable, Optional
from lark import Token

from .runtime import (
    Environment,
    CrnNone,
    CrnValue,
    CarrionRuntimeError,
    init_stdlib,
)

from .tree import Node, Tree, is_token, node_meta

from .eval.blocks import eval_block, eval_program, eval_return_stmt
from .eval.loops import eval_if_stmt, eval_while_stmt, eval_for_stmt, eval_stop_stmt, eval_skip_stmt
from .eval.bind import eval_assign_stmt, eval_compound_assign, eval_postfix
from .eval.expr import eval_prefix, eval_infix
from .eval.chains import eval_index, eval_call
from .eval.literals import (
    eval_int_literal,
    eval_float_literal,
    eval_string_literal,
    eval_bool_literal,
    eval_list,
    eval_dict,
    eval_unpack,
)
from .eval.fn import eval_fn_def

EvalFunc = Callable[[Node, Environment], CrnValue]


def _maybe_attach_location(exc: CarrionRuntimeError, node: Node) -> None:
    if exc.crn_meta is not None:
        return

    meta = node_meta(node)

    if meta is not None and getattr(meta, "line", None) is not None:
        exc.crn_meta = meta

# ---------------- Public API ----------------

def evaluate(program: Node, env: Optional[Environment]=None) -> CrnValue:
    """
    Evaluate a parsed program (or any single node) against `env`.

    The first runtime error aborts evaluation and propagates as a
    CarrionRuntimeError subclass.
    """
    init_stdlib()

    if env is None:
        env = Environment()

    try:
        return eval_node(program, env)
    except RecursionError:
        raise CarrionRuntimeError("Maximum evaluation depth exceeded") from None

# ---------------- Core evaluator ----------------

def eval_node(n: Node, env: Environment) -> CrnValue:
    try:
        return _eval_node_inner(n, env)
    except CarrionRuntimeError as e:
        _maybe_attach_location(e, n)
        raise


def _eval_node_inner(n: Node, env: Environment) -> CrnValue:
    if is_token(n):
        return _eval_token(n, env)

    d = n.data
    handler = _NODE_DISPATCH.get(d)
    if handler is not None:
        return handler(n, env)

    match d:
        case 'program':
            return eval_program(n.children, env, eval_node)
        case 'block':
            return eval_block(n, env, eval_node)
        case 'exprstmt':
            return eval_node(n.children[0], env)
        case 'prefix':
            op, operand = n.children
            return eval_prefix(op, operand, env, eval_node)
        case 'infix':
            lhs, op, rhs = n.children
            return eval_infix(lhs, op, rhs, env, eval_node)
        case _:
            raise CarrionRuntimeError(f"Unknown node: {d}")

# ---------------- Tokens ----------------

def _eval_token(t: Token, env: Environment) -> CrnValue:
    if t.type == 'IDENT':
        return env.get(str(t.value))

    raise CarrionRuntimeError(f"Unhandled token {t.type}:{t.value}")

# ---------------- Dispatch ----------------

_NODE_DISPATCH: dict[str, Callable[[Tree, Environment], CrnValue]] = {
    'int': lambda n, _: eval_int_literal(n),
    'float': lambda n, _: eval_float_literal(n),
    'string': lambda n, _: eval_string_literal(n),
    'bool': lambda n, _: eval_bool_literal(n),
    'none': lambda _, __: CrnNone(),
    'list': lambda n, env: eval_list(n, env, eval_node),
    'dict': lambda n, env: eval_dict(n, env, eval_node),
    'unpack': eval_unpack,
    'postfix': eval_postfix,
    'index': lambda n, env: eval_index(n, env, eval_node),
    'call': lambda n, env: eval_call(n, env, eval_node),
    'fndef': eval_fn_def,
    'returnstmt': lambda n, env: eval_return_stmt(n, env, eval_node),
    'ifstmt': lambda n, env: eval_if_stmt(n, env, eval_node),
    'whilestmt': lambda n, env: eval_while_stmt(n, env, eval_node),
    'forstmt': lambda n, env: eval_for_stmt(n, env, eval_node),
    'stopstmt': eval_stop_stmt,
    'skipstmt': eval_skip_stmt,
    'assignstmt': lambda n, env: eval_assign_stmt(n, env, eval_node),
    'compound_assign': lambda n, env: eval_compound_assign(n, env, eval_node),
}
