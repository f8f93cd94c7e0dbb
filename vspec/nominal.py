# vspec/nominal.py
"""
Nominal (debug-information level) types.

These describe program objects the way the type catalogue and the system
model report them: sizes and layouts, not verification sorts.
:func:`to_vtype` maps them onto the value types used in the AST.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from vspec import ast as A


@dataclass(frozen=True)
class Scalar:
    """A base type of ``width`` bits."""

    width: int


@dataclass(frozen=True)
class Pointer:
    target: Optional["NominalType"]
    width: int


@dataclass(frozen=True)
class Array:
    element: "NominalType"
    index: Optional["NominalType"] = None
    length: Optional[int] = None


@dataclass(frozen=True)
class StructField:
    name: str
    type: "NominalType"
    offset: int = 0


@dataclass(frozen=True)
class Struct:
    name: str
    fields: Tuple[StructField, ...] = ()
    size: int = 0  # bytes

    def field(self, name: str) -> Optional[StructField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


NominalType = Union[Scalar, Pointer, Array, Struct]


def to_vtype(ntype: NominalType, xlen: int = 64) -> A.VType:
    """Map a nominal type onto the value type used by the elaborator.

    Scalars and pointers are bit-vectors of their width.  Arrays without an
    explicit index type are indexed by ``xlen``-bit addresses.
    """
    if isinstance(ntype, Scalar):
        return A.BvType(ntype.width)
    if isinstance(ntype, Pointer):
        return A.BvType(ntype.width)
    if isinstance(ntype, Array):
        index = (
            to_vtype(ntype.index, xlen)
            if ntype.index is not None
            else A.BvType(xlen)
        )
        return A.ArrayType(index, to_vtype(ntype.element, xlen))
    if isinstance(ntype, Struct):
        return A.StructType(
            ntype.name,
            tuple((f.name, to_vtype(f.type, xlen)) for f in ntype.fields),
            ntype.size,
        )
    raise TypeError(f"not a nominal type: {ntype!r}")
