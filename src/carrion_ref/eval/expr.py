from __future__ import annotations

import math
from typing import Callable

from lark import Token

from ..runtime import (
    Environment,
    CrnBool,
    CrnFloat,
    CrnInt,
    CrnString,
    CrnValue,
    CarrionTypeError,
    CarrionZeroDivisionError,
)
from ..tree import Node, is_tree
from .common import type_name, wrap_int
from .helpers import is_truthy

EvalFunc = Callable[[Node, Environment], CrnValue]

_COMPARISONS = {'==', '!=', '<', '>', '<=', '>='}

def eval_prefix(op_tok: Token, operand_node: Node, env: Environment, eval_func: EvalFunc) -> CrnValue:
    op = str(op_tok.value)

    if op in ('++', '--'):
        from .bind import apply_increment
        return apply_increment(operand_node, env, 1 if op == '++' else -1, prefix=True)

    operand = eval_func(operand_node, env)

    match op:
        case 'not':
            return CrnBool(not is_truthy(operand))
        case '-':
            match operand:
                case CrnInt(value=v):
                    return CrnInt(wrap_int(-v))
                case CrnFloat(value=v):
                    return CrnFloat(-v)
            raise CarrionTypeError(f"Unknown operator: -{type_name(operand)}")
        case _:
            raise CarrionTypeError(f"Unknown operator: {op}{type_name(operand)}")

def eval_infix(left_node: Node, op_tok: Token, right_node: Node, env: Environment, eval_func: EvalFunc) -> CrnValue:
    op = str(op_tok.value)

    if op in ('and', 'or'):
        return eval_logical(op, left_node, right_node, env, eval_func)

    # Left-nested chains such as `a + b + c` are folded in a loop.
    pending = [(op, right_node)]
    while _is_folding_infix(left_node):
        left_node, inner_op, inner_right = left_node.children
        pending.append((str(inner_op.value), inner_right))

    acc = eval_func(left_node, env)
    for step_op, step_right in reversed(pending):
        acc = apply_binary_operator(step_op, acc, eval_func(step_right, env))
    return acc

def _is_folding_infix(node: Node) -> bool:
    return is_tree(node) and node.data == 'infix' and str(node.children[1].value) not in ('and', 'or')

def eval_logical(op: str, left_node: Node, right_node: Node, env: Environment, eval_func: EvalFunc) -> CrnValue:
    """Short-circuit and/or, yielding whichever operand decided the result."""
    lhs = eval_func(left_node, env)

    if op == 'and':
        if not is_truthy(lhs):
            return lhs
    elif is_truthy(lhs):
        return lhs

    return eval_func(right_node, env)

def apply_binary_operator(op: str, lhs: CrnValue, rhs: CrnValue) -> CrnValue:
    match lhs, rhs:
        case CrnInt(value=a), CrnInt(value=b):
            return _int_op(op, a, b)
        case CrnFloat(value=a), CrnFloat(value=b):
            return _float_op(op, a, b)
        case CrnString(value=a), CrnString(value=b):
            match op:
                case '+':
                    return CrnString(a + b)
        case CrnBool(value=a), CrnBool(value=b):
            match op:
                case '==':
                    return CrnBool(a == b)
                case '!=':
                    return CrnBool(a != b)

    if type(lhs) is not type(rhs):
        raise CarrionTypeError(f"Type mismatch: {type_name(lhs)} {op} {type_name(rhs)}")

    raise CarrionTypeError(f"Unknown operator: {type_name(lhs)} {op} {type_name(rhs)}")

def _compare(op: str, a, b) -> CrnBool:
    match op:
        case '==':
            return CrnBool(a == b)
        case '!=':
            return CrnBool(a != b)
        case '<':
            return CrnBool(a < b)
        case '>':
            return CrnBool(a > b)
        case '<=':
            return CrnBool(a <= b)
        case _:
            return CrnBool(a >= b)

def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q

def _int_op(op: str, a: int, b: int) -> CrnValue:
    if op in _COMPARISONS:
        return _compare(op, a, b)

    match op:
        case '+':
            return CrnInt(wrap_int(a + b))
        case '-':
            return CrnInt(wrap_int(a - b))
        case '*':
            return CrnInt(wrap_int(a * b))
        case '/':
            if b == 0:
                raise CarrionZeroDivisionError()
            return CrnInt(wrap_int(_trunc_div(a, b)))
        case '%':
            if b == 0:
                raise CarrionZeroDivisionError()
            return CrnInt(wrap_int(a - b * _trunc_div(a, b)))
        case '**':
            if b < 0:
                return CrnFloat(_float_pow(float(a), float(b)))
            return CrnInt(wrap_int(pow(a, b, 1 << 64)))

    raise CarrionTypeError(f"Unknown operator: integer {op} integer")

def _float_op(op: str, a: float, b: float) -> CrnValue:
    if op in _COMPARISONS:
        return _compare(op, a, b)

    match op:
        case '+':
            return CrnFloat(a + b)
        case '-':
            return CrnFloat(a - b)
        case '*':
            return CrnFloat(a * b)
        case '/':
            if b == 0:
                raise CarrionZeroDivisionError()
            return CrnFloat(a / b)
        case '%':
            if b == 0:
                raise CarrionZeroDivisionError()
            return CrnFloat(math.fmod(a, b))
        case '**':
            return CrnFloat(_float_pow(a, b))

    raise CarrionTypeError(f"Unknown operator: float {op} float")

def _float_pow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        # 0 ** negative, or a negative base with a fractional exponent
        return math.inf if a == 0 else math.nan
