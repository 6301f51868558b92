from __future__ import annotations

import enum
import math
import sys
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Union

from typing_extensions import TypeAlias

from .config import InterpreterConfig
from .tree import Node

Ident: TypeAlias = str

# ---------- Value Model ----------

@dataclass
class TernNone:
    def __repr__(self) -> str:
        return "None"

@dataclass
class TernNumber:
    value: float
    def __repr__(self) -> str:
        return format_number(self.value)

@dataclass
class TernString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class TernBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class TernList:
    items: List['TernValue']
    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass
class TernRange:
    start: int
    stop: int

    def __iter__(self):
        return iter(range(self.start, self.stop))

    def __repr__(self) -> str:
        return f"{self.start}..{self.stop}"

@dataclass(eq=False)
class TernFunction:
    name: str
    params: List[Ident]
    body: Node
    frame: Optional['Environment'] = None  # defining environment, used when lexical_scope is on
    def __repr__(self) -> str:
        return f"<function {self.name}({', '.join(self.params)})>"

@dataclass(eq=False)
class TernStruct:
    name: str
    fields: List[Ident]
    methods: Dict[str, TernFunction] = field(default_factory=dict)
    def __repr__(self) -> str:
        return f"<struct {self.name} {{ {', '.join(self.fields)} }}>"

@dataclass
class TernInstance:
    name: str
    fields: Dict[Ident, 'TernValue']
    def __repr__(self) -> str:
        pairs = ", ".join(f"{k}: {v!r}" for k, v in self.fields.items())
        return f"{self.name} {{ {pairs} }}" if pairs else f"{self.name} {{}}"

# Enum values have no construction path yet; they exist so the type model is complete.
@dataclass
class TernEnum:
    variants: List[str]

@dataclass
class TernEnumVariant:
    name: str
    variant: str

TernValue: TypeAlias = (
    TernNone
    | TernNumber
    | TernString
    | TernBool
    | TernList
    | TernRange
    | TernFunction
    | TernStruct
    | TernInstance
    | TernEnum
    | TernEnumVariant
)

# ---------- Type descriptors (diagnostics only) ----------

class TypeKind(enum.Enum):
    INT = "Int"
    STRING = "String"
    BOOL = "Bool"
    LIST = "List"
    FUNC = "Func"
    RANGE = "Range"
    ENUM = "Enum"
    FIELD_ENUM = "FieldEnum"
    STRUCT = "Struct"
    FIELD_STRUCT = "FieldStruct"
    NONE = "None"

@dataclass(frozen=True)
class TernType:
    kind: TypeKind
    name: Optional[str] = None

    def __str__(self) -> str:
        if self.name is None:
            return self.kind.value

        return f"{self.kind.value}({self.name})"

def get_type(value: TernValue) -> TernType:
    match value:
        case TernNumber():
            return TernType(TypeKind.INT)
        case TernString():
            return TernType(TypeKind.STRING)
        case TernBool():
            return TernType(TypeKind.BOOL)
        case TernFunction():
            return TernType(TypeKind.FUNC)
        case TernList():
            return TernType(TypeKind.LIST)
        case TernRange():
            return TernType(TypeKind.RANGE)
        case TernInstance(name=name):
            return TernType(TypeKind.FIELD_STRUCT, name)
        case TernStruct(name=name):
            return TernType(TypeKind.STRUCT, name)
        case TernNone():
            return TernType(TypeKind.NONE)
        case TernEnum():
            return TernType(TypeKind.ENUM)
        case TernEnumVariant(name=name):
            return TernType(TypeKind.FIELD_ENUM, name)
        case _:
            raise TypeError(f"Not a Tern value: {type(value).__name__}")

# ---------- Display ----------

def format_number(num: float) -> str:
    """Plain decimal rendering: no exponent, no trailing '.0'."""
    if math.isnan(num):
        return "NaN"

    if math.isinf(num):
        return "inf" if num > 0 else "-inf"

    if num == 0:
        return "-0" if math.copysign(1.0, num) < 0 else "0"

    # shortest round-trip digits, so 1e23 prints as written
    text = format(Decimal(repr(num)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text

def display(value: TernValue) -> str:
    match value:
        case TernNumber(value=num):
            return format_number(num)
        case TernString(value=s):
            return s
        case TernBool(value=b):
            return "true" if b else "false"
        case TernFunction():
            return "function"
        case TernList(items=items):
            return "[" + ", ".join(display(item) for item in items) + "]"
        case TernRange():
            return "range"
        case TernNone():
            return "None"
        case _:
            raise NotImplementedError(f"display is not implemented for {get_type(value)}")

# ---------- Exceptions ----------

class TernRuntimeError(Exception):
    meta: Optional[object]

    def __init__(self, message: str):
        super().__init__(message)
        self.meta = None

    def __str__(self) -> str:
        msg = super().__str__()

        line = getattr(self.meta, "line", None)
        if line is None:
            return msg

        col = getattr(self.meta, "column", None)
        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class VarNotFoundError(TernRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Variable '{name}' not found")
        self.name = name

class VarAlreadyDefinedError(TernRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Variable '{name}' is already defined")
        self.name = name

class TypeMismatchError(TernRuntimeError):
    def __init__(self, expected: str, found: Union[TernType, str]):
        super().__init__(f"Type mismatch: expected {expected}, found {found}")
        self.expected = expected
        self.found = found

class OperandError(TernRuntimeError):
    verb = "combine"

    def __init__(self, left: str, right: str):
        super().__init__(f"Cannot {self.verb} {left} and {right}")
        self.left = left
        self.right = right

class CannotAddError(OperandError):
    verb = "add"

class CannotSubError(OperandError):
    verb = "subtract"

class CannotMulError(OperandError):
    verb = "multiply"

class CannotDivError(OperandError):
    verb = "divide"

class CannotModError(OperandError):
    verb = "take the modulo of"

class CannotCompareError(OperandError):
    verb = "compare"

class FunctionNotFoundError(TernRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Function '{name}' not found")
        self.name = name

class StructNotFoundError(TernRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Struct '{name}' not found")
        self.name = name

class AttrNotFoundError(TernRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Attribute '{name}' not found")
        self.name = name

class IndexOutOfBoundsError(TernRuntimeError):
    def __init__(self, index: Union[int, float], name: str):
        super().__init__(f"Index {index} out of bounds for '{name}'")
        self.index = index
        self.name = name

class IsBuiltinError(TernRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"'{name}' is a builtin function and cannot be redefined")
        self.name = name

class ArityError(TernRuntimeError):
    def __init__(self, name: str, expected: int, found: int):
        super().__init__(f"Function '{name}' expects {expected} argument(s); got {found}")
        self.name = name
        self.expected = expected
        self.found = found

# ---------- Builtins ----------

BuiltinFn = Callable[['Environment', List[TernValue]], TernValue]

@dataclass(frozen=True)
class BuiltinFunction:
    name: str
    fn: BuiltinFn

class Builtins:
    functions: Dict[str, BuiltinFunction] = {}

# ---------- Environment ----------

Writer = Callable[[str], object]

class Environment:
    """One layer of bindings plus the host capabilities shared by its children."""

    def __init__(
        self,
        parent: Optional['Environment'] = None,
        *,
        builtins: Optional[Dict[str, BuiltinFunction]] = None,
        write: Optional[Writer] = None,
        config: Optional[InterpreterConfig] = None,
        source: Optional[str] = None,
    ):
        self.parent = parent
        self.vars: Dict[Ident, TernValue] = {}

        if builtins is None and parent is not None:
            builtins = parent.builtins
        elif builtins is None:
            from .runtime import init_stdlib  # local import to avoid cycle
            init_stdlib()
            builtins = dict(Builtins.functions)
        if write is None:
            write = parent.write if parent is not None else sys.stdout.write
        if config is None:
            config = parent.config if parent is not None else InterpreterConfig()
        if source is None and parent is not None:
            source = parent.source

        self.builtins: Dict[str, BuiltinFunction] = builtins
        self.write: Writer = write
        self.config: InterpreterConfig = config
        self.source: Optional[str] = source

    def spawn(self, parent: Optional['Environment'] = None) -> 'Environment':
        """New environment sharing builtins, sink and config; bindings start empty."""
        return Environment(
            parent,
            builtins=self.builtins,
            write=self.write,
            config=self.config,
            source=self.source,
        )

    def bind(self, name: Ident, value: TernValue) -> None:
        self.vars[name] = value

    def lookup(self, name: Ident) -> Optional[TernValue]:
        env: Optional[Environment] = self

        while env is not None:
            if name in env.vars:
                return env.vars[name]
            env = env.parent

        return None

    def get(self, name: Ident) -> TernValue:
        value = self.lookup(name)
        if value is None:
            raise VarNotFoundError(name)

        return value

    def exists(self, name: Ident) -> bool:
        return self.lookup(name) is not None

    def exists_local(self, name: Ident) -> bool:
        return name in self.vars

    def set(self, name: Ident, value: TernValue) -> None:
        env: Optional[Environment] = self

        while env is not None:
            if name in env.vars:
                env.vars[name] = value
                return
            env = env.parent

        raise VarNotFoundError(name)

    def is_builtin(self, name: str) -> bool:
        return name in self.builtins

    def builtin(self, name: str) -> BuiltinFunction:
        return self.builtins[name]
