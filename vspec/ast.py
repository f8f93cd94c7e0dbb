# vspec/ast.py
"""
Typed abstract syntax tree for the specification language.

Every node is an immutable (frozen) dataclass so trees can be compared
structurally, hashed, and shared between threads.  Value expressions carry
their elaborated :data:`VType`; boolean expressions are always boolean.

    VType     BoolType | IntType | BvType | ArrayType | StructType | UnknownType
    VExpr     Ident | IntLit | BvLit | BoolLit | OpApp | FuncApp
    BExpr     BoolConst | BOpApp | COpApp
    Spec      Requires | Ensures | Modifies | Track
    FuncSpec  name + ordered specs
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple, Union


# ═══════════════════════════════════════════════════════════════════════════
#  VALUE TYPES
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BoolType:
    def __str__(self) -> str:
        return "bool"


@dataclass(frozen=True)
class IntType:
    def __str__(self) -> str:
        return "int"


@dataclass(frozen=True)
class BvType:
    width: int

    def __str__(self) -> str:
        return f"bv{self.width}"


@dataclass(frozen=True)
class ArrayType:
    index: "VType"
    element: "VType"

    def __str__(self) -> str:
        return f"[{self.index}]{self.element}"


@dataclass(frozen=True)
class StructType:
    """A struct with ordered ``(field name, field type)`` pairs and a byte size."""

    name: str
    fields: Tuple[Tuple[str, "VType"], ...] = ()
    size: int = 0

    def field_type(self, name: str) -> Optional["VType"]:
        for fname, ftype in self.fields:
            if fname == name:
                return ftype
        return None

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(fname for fname, _ in self.fields)

    def __str__(self) -> str:
        return f"struct {self.name}"


@dataclass(frozen=True)
class UnknownType:
    """Placeholder type of nodes elaborated without a type catalogue."""

    def __str__(self) -> str:
        return "unknown"


VType = Union[BoolType, IntType, BvType, ArrayType, StructType, UnknownType]

BOOL = BoolType()
INT = IntType()
UNKNOWN = UnknownType()


def is_unknown(vtype: VType) -> bool:
    return isinstance(vtype, UnknownType)


# ═══════════════════════════════════════════════════════════════════════════
#  OPERATORS
# ═══════════════════════════════════════════════════════════════════════════

class ValueOp(Enum):
    """Value-level operators; binary operators use their surface symbol."""

    ADD = "+"
    SUB = "-"
    BV_XOR = "^"
    BV_AND = "&"
    BV_OR = "|"
    DIV = "/"
    MUL = "*"
    RIGHT_SHIFT = ">>"
    URIGHT_SHIFT = ">>>"
    LEFT_SHIFT = "<<"
    CONCAT = "++"
    ARRAY_INDEX = "[]"
    GET_FIELD = "."
    DEREF = "deref"

    @property
    def is_arithmetic(self) -> bool:
        return self in _ARITHMETIC_OPS

    @property
    def is_shift(self) -> bool:
        return self in _SHIFT_OPS


_ARITHMETIC_OPS = frozenset({
    ValueOp.ADD, ValueOp.SUB, ValueOp.MUL, ValueOp.DIV,
    ValueOp.BV_XOR, ValueOp.BV_AND, ValueOp.BV_OR,
})
_SHIFT_OPS = frozenset({
    ValueOp.RIGHT_SHIFT, ValueOp.URIGHT_SHIFT, ValueOp.LEFT_SHIFT,
})


@dataclass(frozen=True)
class Slice:
    """Bit extraction ``e[hi:lo]``; the result has ``hi - lo`` bits."""

    lo: int
    hi: int

    @property
    def width(self) -> int:
        return self.hi - self.lo


Operator = Union[ValueOp, Slice]


class CompOp(Enum):
    GT = ">"
    LT = "<"
    GEQ = ">="
    LEQ = "<="
    EQUAL = "=="
    NEQUAL = "!="
    GTU = ">_u"
    LTU = "<_u"
    GEU = ">=_u"
    LEU = "<=_u"

    @property
    def is_unsigned(self) -> bool:
        return self.value.endswith("_u")


class BoolOp(Enum):
    NEG = "!"
    CONJ = "&&"
    DISJ = "||"
    IMPLIES = "==>"


# ═══════════════════════════════════════════════════════════════════════════
#  VALUE EXPRESSIONS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Ident:
    name: str
    type: VType = UNKNOWN

    @property
    def is_system(self) -> bool:
        return self.name.startswith("$")


@dataclass(frozen=True)
class IntLit:
    value: int
    type: VType = INT


@dataclass(frozen=True)
class BvLit:
    """Bit-vector literal.

    ``type`` is normally ``BvType``; address literals produced by global
    renaming keep the type of the global they replace.
    """

    value: int
    type: VType


@dataclass(frozen=True)
class BoolLit:
    value: bool
    type: VType = BOOL


@dataclass(frozen=True)
class OpApp:
    op: Operator
    operands: Tuple["VExpr", ...]
    type: VType = UNKNOWN


@dataclass(frozen=True)
class FuncApp:
    name: str
    args: Tuple["VExpr", ...]
    type: VType = UNKNOWN


VExpr = Union[Ident, IntLit, BvLit, BoolLit, OpApp, FuncApp]
LITERAL_NODES = (IntLit, BvLit)


# ═══════════════════════════════════════════════════════════════════════════
#  BOOLEAN EXPRESSIONS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Forall:
    var: Ident
    type: VType


@dataclass(frozen=True)
class Exists:
    var: Ident
    type: VType


BoolOperator = Union[BoolOp, Forall, Exists]


@dataclass(frozen=True)
class BoolConst:
    value: bool


@dataclass(frozen=True)
class BOpApp:
    op: BoolOperator
    operands: Tuple["BExpr", ...]


@dataclass(frozen=True)
class COpApp:
    op: CompOp
    operands: Tuple[VExpr, VExpr]


BExpr = Union[BoolConst, BOpApp, COpApp]


# ═══════════════════════════════════════════════════════════════════════════
#  SPECIFICATIONS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Requires:
    condition: BExpr


@dataclass(frozen=True)
class Ensures:
    condition: BExpr


@dataclass(frozen=True)
class Modifies:
    names: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Track:
    label: str
    expr: VExpr


Spec = Union[Requires, Ensures, Modifies, Track]


@dataclass(frozen=True)
class FuncSpec:
    name: str
    specs: Tuple[Spec, ...] = ()

    def requires(self) -> Tuple[BExpr, ...]:
        return tuple(s.condition for s in self.specs if isinstance(s, Requires))

    def ensures(self) -> Tuple[BExpr, ...]:
        return tuple(s.condition for s in self.specs if isinstance(s, Ensures))

    def modified(self) -> FrozenSet[str]:
        names: FrozenSet[str] = frozenset()
        for s in self.specs:
            if isinstance(s, Modifies):
                names = names | s.names
        return names
