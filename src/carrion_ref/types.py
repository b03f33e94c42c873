from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from typing_extensions import TypeAlias
from .tree import Node

# ---------- Value Model ----------

@dataclass
class CrnNone:
    def __repr__(self) -> str:
        return "none"

@dataclass
class CrnInt:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass
class CrnFloat:
    value: float
    def __repr__(self) -> str:
        v = self.value
        if math.isnan(v):
            return "NaN"
        if math.isinf(v):
            return "inf" if v > 0 else "-inf"
        return str(int(v)) if v.is_integer() else repr(v)

@dataclass
class CrnBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class CrnString:
    value: str
    def __repr__(self) -> str:
        return self.value

@dataclass
class CrnList:
    items: List['CrnValue']
    def __repr__(self) -> str:
        return display(self)

@dataclass
class CrnDict:
    slots: Dict[str, 'CrnValue']
    def __repr__(self) -> str:
        return display(self)

@dataclass
class CrnReturn:
    """Return-signal: stops every enclosing statement sequence up to the program."""
    value: 'CrnValue'
    def __repr__(self) -> str:
        return repr(self.value)

BuiltinFn = Callable[['Environment', List['CrnValue']], 'CrnValue']

@dataclass(frozen=True)
class CrnBuiltin:
    name: str
    fn: BuiltinFn
    arity: Optional[int] = None  # None for variadic
    def __repr__(self) -> str:
        return "[Builtin Function]"

@dataclass
class CrnFunction:
    """A `spell` definition. It holds no environment, so it cannot be called yet."""
    name: str
    params: List[str]
    body: Node
    def __repr__(self) -> str:
        return "[Function]"

@dataclass
class CrnError:
    message: str
    details: List[str] = field(default_factory=list)
    def __repr__(self) -> str:
        return f"Error: {self.message}"

def display(value: CrnValue) -> str:
    """Display form of a value; nested lists and dicts are walked with an explicit stack."""
    out: List[str] = []
    stack: List[object] = [value]

    while stack:
        item = stack.pop()

        if isinstance(item, str):
            out.append(item)
        elif isinstance(item, CrnList):
            stack.append("]")
            for i, x in enumerate(reversed(item.items)):
                if i:
                    stack.append(", ")
                stack.append(x)
            stack.append("[")
        elif isinstance(item, CrnDict):
            stack.append("}")
            for i, (k, v) in enumerate(reversed(list(item.slots.items()))):
                if i:
                    stack.append(", ")
                stack.append(v)
                stack.append(f"{k}: ")
            stack.append("{")
        else:
            out.append(repr(item))

    return "".join(out)

CrnValue: TypeAlias = (
    CrnNone
    | CrnInt
    | CrnFloat
    | CrnBool
    | CrnString
    | CrnList
    | CrnDict
    | CrnReturn
    | CrnBuiltin
    | CrnFunction
    | CrnError
)

class Builtins:
    stdlib_functions: Dict[str, CrnBuiltin] = {}

# ---------- Environment ----------

class Environment:
    """Flat, single-scope name bindings for one program run or REPL session."""

    def __init__(self) -> None:
        from .runtime import init_stdlib

        init_stdlib()
        self.store: Dict[str, CrnValue] = {}

        for name, builtin in Builtins.stdlib_functions.items():
            self.store[name] = builtin

    def get(self, name: str) -> CrnValue:
        if name in self.store:
            return self.store[name]

        raise CarrionNameError(f"Identifier not found: {name}")

    def lookup(self, name: str) -> Optional[CrnValue]:
        return self.store.get(name)

    def set(self, name: str, val: CrnValue) -> None:
        self.store[name] = val

    def __contains__(self, name: object) -> bool:
        return name in self.store

# ---------- Exceptions ----------

class CarrionRuntimeError(Exception):
    crn_meta: Optional[object]

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.crn_meta = None

    def __str__(self) -> str:
        msg = super().__str__()

        meta = getattr(self, "crn_meta", None)
        if meta is None:
            return msg

        line = getattr(meta, "line", None)
        col = getattr(meta, "column", None)

        if line is None:
            return msg

        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class CarrionTypeError(CarrionRuntimeError):
    pass

class CarrionNameError(CarrionRuntimeError):
    pass

class CarrionIndexError(CarrionRuntimeError):
    pass

class CarrionArityError(CarrionRuntimeError):
    pass

class CarrionAssignmentError(CarrionRuntimeError):
    pass

class CarrionZeroDivisionError(CarrionRuntimeError):
    def __init__(self, message: str = "division by zero"):
        super().__init__(message)

class CarrionNotImplementedError(CarrionRuntimeError):
    pass

class LoopStopSignal(Exception):
    """Internal control flow for `stop`."""

class LoopSkipSignal(Exception):
    """Internal control flow for `skip`."""
