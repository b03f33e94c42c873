from __future__ import annotations

import importlib
from typing import Optional
from .types import (
    CrnNone, CrnInt, CrnFloat, CrnBool, CrnString, CrnList, CrnDict,
    CrnReturn, CrnBuiltin, CrnFunction, CrnError, CrnValue, BuiltinFn,
    Builtins, Environment,
    CarrionRuntimeError, CarrionTypeError, CarrionNameError, CarrionIndexError,
    CarrionArityError, CarrionAssignmentError, CarrionZeroDivisionError,
    CarrionNotImplementedError, LoopStopSignal, LoopSkipSignal,
)

__all__ = [
    "CrnNone", "CrnInt", "CrnFloat", "CrnBool", "CrnString", "CrnList", "CrnDict",
    "CrnReturn", "CrnBuiltin", "CrnFunction", "CrnError", "CrnValue", "BuiltinFn",
    "Builtins", "Environment",
    "CarrionRuntimeError", "CarrionTypeError", "CarrionNameError", "CarrionIndexError",
    "CarrionArityError", "CarrionAssignmentError", "CarrionZeroDivisionError",
    "CarrionNotImplementedError", "LoopStopSignal", "LoopSkipSignal",
    "init_stdlib", "register_stdlib", "new_environment",
]

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_stdlib hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("carrion_ref.stdlib")
    _STDLIB_INITIALIZED = True

def register_stdlib(name: str, *, arity: Optional[int] = None):
    def dec(fn: BuiltinFn):
        Builtins.stdlib_functions[name] = CrnBuiltin(name=name, fn=fn, arity=arity)
        return fn

    return dec

def new_environment() -> Environment:
    """Fresh environment with every builtin bound."""
    init_stdlib()
    return Environment()
