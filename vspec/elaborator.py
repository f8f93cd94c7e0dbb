# vspec/elaborator.py
"""
Type elaboration of value expressions.

The tree builder in :mod:`vspec.parser` calls one :class:`Elaborator` method
per grammar production, so every node receives its type as soon as it is
built.  :mod:`vspec.resolver` reuses the same methods to type trees that were
parsed without a catalogue.

Resolution order for a bare identifier:

1. variables bound by an enclosing quantifier,
2. formal arguments of the current function (always ``bv<xlen>``),
3. global variables of the type catalogue.

``$name`` identifiers are looked up in the system model only.  When the
context has no catalogue every lookup is skipped and identifiers get
``UNKNOWN``; operators over unknown operands stay unknown.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from vspec import ast as A
from vspec.catalogue import GlobalNotFoundError
from vspec.context import ParseContext
from vspec.errors import (
    ArityMismatchError,
    InvalidFieldNameError,
    InvalidLiteralError,
    InvalidSliceError,
    NotAStructError,
    NotAnArrayError,
    SourceSpan,
    TypeMismatchError,
    UndefinedGlobalError,
    UnknownFieldError,
    UnknownFunctionError,
    UnknownSystemEntityError,
)
from vspec.nominal import to_vtype

logger = logging.getLogger(__name__)

INT_MIN = -(1 << 63)
INT_MAX = (1 << 63) - 1
U64_MASK = (1 << 64) - 1
SLICE_BOUND_MAX = (1 << 16) - 1

BUILTIN_FUNCTIONS = ("old", "sext", "uext")


def _parse_int(text: str) -> int:
    if text[:2].lower() == "0x":
        return int(text[2:], 16)
    return int(text, 10)


def _is_numeric(vtype: A.VType) -> bool:
    return isinstance(vtype, (A.BvType, A.IntType))


def implicit_deref(node: A.VExpr) -> A.VExpr:
    """Wrap *node* in a ``Deref`` of the same type when it is a bit-vector.

    Applied after resolving a global, indexing an array, and accessing a
    struct field: the elaborated expression then denotes the stored value
    rather than its location.
    """
    if isinstance(node.type, A.BvType):
        return A.OpApp(A.ValueOp.DEREF, (node,), node.type)
    return node


class Elaborator:
    def __init__(self, context: ParseContext) -> None:
        self.context = context

    # ═══════════════════════════════════════════════════════════════════
    #  Identifiers
    # ═══════════════════════════════════════════════════════════════════

    def resolve(self, name: str, span: Optional[SourceSpan] = None) -> A.VExpr:
        if name.startswith("$"):
            return self.system_ident(name, span)
        return self.ident(name, span)

    def system_ident(self, name: str, span: Optional[SourceSpan] = None) -> A.Ident:
        if not self.context.typed:
            return A.Ident(name, A.UNKNOWN)
        model = self.context.system_model
        nominal = model.entity_type(name[1:], self.context.xlen)
        if nominal is None:
            raise UnknownSystemEntityError(name, span, known=sorted(model.names()))
        return A.Ident(name, to_vtype(nominal, self.context.xlen))

    def ident(self, name: str, span: Optional[SourceSpan] = None) -> A.VExpr:
        ctx = self.context
        bound = ctx.bound_type(name)
        if bound is not None:
            return A.Ident(name, bound)
        if not ctx.typed:
            return A.Ident(name, A.UNKNOWN)
        if ctx.is_formal(name):
            return A.Ident(name, A.BvType(ctx.xlen))
        try:
            nominal = ctx.catalogue.lookup_global_type(name)
        except GlobalNotFoundError:
            raise UndefinedGlobalError(name, span, function=ctx.current_function) from None
        resolved = A.Ident(name, to_vtype(nominal, ctx.xlen))
        logger.debug("Resolved global '%s' as %s", name, resolved.type)
        return implicit_deref(resolved)

    def bind(self, name: str, width: int, span: Optional[SourceSpan] = None):
        """Context manager binding a quantified ``bv<width>`` variable."""
        if width <= 0:
            raise InvalidLiteralError(f"bv{width}", "bit-vector width must be positive", span)
        return self.context.binding(name, A.BvType(width))

    # ═══════════════════════════════════════════════════════════════════
    #  Literals
    # ═══════════════════════════════════════════════════════════════════

    def int_lit(
        self,
        text: str,
        negative: bool = False,
        span: Optional[SourceSpan] = None,
    ) -> A.IntLit:
        value = _parse_int(text)
        if negative:
            value = -value
        if not INT_MIN <= value <= INT_MAX:
            shown = f"-{text}" if negative else text
            raise InvalidLiteralError(shown, "does not fit in a signed 64-bit integer", span)
        return A.IntLit(value)

    def bv_lit(
        self,
        text: str,
        width: int,
        negative: bool = False,
        span: Optional[SourceSpan] = None,
    ) -> A.BvLit:
        """Bit-vector literal ``<text>bv<width>``.

        A negated literal is the two's complement of the magnitude over 64
        bits, truncated to ``width`` bits when ``width`` is smaller.
        """
        shown = f"{'-' if negative else ''}{text}bv{width}"
        value = _parse_int(text)
        if width <= 0:
            raise InvalidLiteralError(shown, "bit-vector width must be positive", span)
        if value > U64_MASK:
            raise InvalidLiteralError(shown, "value does not fit in 64 bits", span)
        if width < 64 and value >= (1 << width):
            raise InvalidLiteralError(shown, f"value does not fit in {width} bits", span)
        if negative:
            value = (-value) & U64_MASK
            if width < 64:
                value &= (1 << width) - 1
        return A.BvLit(value, A.BvType(width))

    # ═══════════════════════════════════════════════════════════════════
    #  Operators
    # ═══════════════════════════════════════════════════════════════════

    def binary(
        self,
        op: A.ValueOp,
        lhs: A.VExpr,
        rhs: A.VExpr,
        span: Optional[SourceSpan] = None,
    ) -> A.OpApp:
        return A.OpApp(op, (lhs, rhs), self._binary_type(op, lhs.type, rhs.type, span))

    def _binary_type(
        self,
        op: A.ValueOp,
        left: A.VType,
        right: A.VType,
        span: Optional[SourceSpan],
    ) -> A.VType:
        if A.is_unknown(left) or A.is_unknown(right):
            return A.UNKNOWN
        context = f"operator '{op.value}'"
        if op is A.ValueOp.CONCAT:
            for operand in (left, right):
                if not isinstance(operand, A.BvType):
                    raise TypeMismatchError("bit-vector", str(operand), span, context)
            return A.BvType(left.width + right.width)
        if op.is_shift:
            for operand in (left, right):
                if not _is_numeric(operand):
                    raise TypeMismatchError("bit-vector or int", str(operand), span, context)
            # Typed by the shifted value, not the shift amount: `g << 1bv8` is bv32.
            return left
        if not _is_numeric(left):
            raise TypeMismatchError("bit-vector or int", str(left), span, context)
        if left != right:
            raise TypeMismatchError(str(left), str(right), span, context)
        return left

    def slice(
        self,
        base: A.VExpr,
        hi: int,
        lo: int,
        span: Optional[SourceSpan] = None,
    ) -> A.OpApp:
        if hi > SLICE_BOUND_MAX or lo > SLICE_BOUND_MAX:
            raise InvalidSliceError(hi, lo, "bounds must fit in 16 bits", span)
        if hi <= lo:
            raise InvalidSliceError(hi, lo, "upper bound must exceed lower bound", span)
        if not A.is_unknown(base.type):
            if not isinstance(base.type, A.BvType):
                raise TypeMismatchError("bit-vector", str(base.type), span, "slice")
            if hi > base.type.width:
                raise InvalidSliceError(
                    hi, lo, f"upper bound exceeds operand width {base.type.width}", span
                )
        op = A.Slice(lo=lo, hi=hi)
        return A.OpApp(op, (base,), A.BvType(op.width))

    def array_index(
        self,
        base: A.VExpr,
        index: A.VExpr,
        span: Optional[SourceSpan] = None,
    ) -> A.VExpr:
        if A.is_unknown(base.type):
            return A.OpApp(A.ValueOp.ARRAY_INDEX, (base, index), A.UNKNOWN)
        if not isinstance(base.type, A.ArrayType):
            raise NotAnArrayError(str(base.type), span)
        if not A.is_unknown(index.type) and not _is_numeric(index.type):
            raise TypeMismatchError("bit-vector or int", str(index.type), span, "array index")
        address = A.OpApp(A.ValueOp.ARRAY_INDEX, (base, index), base.type.element)
        return implicit_deref(address)

    def get_field(
        self,
        base: A.VExpr,
        field_name: str,
        span: Optional[SourceSpan] = None,
    ) -> A.VExpr:
        if not field_name.isalnum():
            raise InvalidFieldNameError(field_name, span)
        if A.is_unknown(base.type):
            return A.OpApp(
                A.ValueOp.GET_FIELD,
                (base, A.Ident(field_name, A.UNKNOWN)),
                A.UNKNOWN,
            )
        if not isinstance(base.type, A.StructType):
            raise NotAStructError(field_name, str(base.type), span)
        ftype = base.type.field_type(field_name)
        if ftype is None:
            raise UnknownFieldError(
                field_name, base.type.name, span, known=base.type.field_names
            )
        address = A.OpApp(A.ValueOp.GET_FIELD, (base, A.Ident(field_name, ftype)), ftype)
        return implicit_deref(address)

    def deref(self, operand: A.VExpr, span: Optional[SourceSpan] = None) -> A.OpApp:
        """Explicit ``*e``: the result has the operand's type."""
        return A.OpApp(A.ValueOp.DEREF, (operand,), operand.type)

    def func_app(
        self,
        name: str,
        args: Sequence[A.VExpr],
        span: Optional[SourceSpan] = None,
    ) -> A.FuncApp:
        args = tuple(args)
        if name not in BUILTIN_FUNCTIONS:
            raise UnknownFunctionError(name, span)
        if name == "old":
            if len(args) != 1:
                raise ArityMismatchError(name, 1, len(args), span)
            return A.FuncApp(name, args, args[0].type)
        # sext / uext
        if len(args) != 2:
            raise ArityMismatchError(name, 2, len(args), span)
        amount, operand = args
        if not isinstance(amount, A.LITERAL_NODES) or amount.value < 0:
            raise TypeMismatchError(
                "non-negative integer literal", _describe(amount), span,
                f"first argument of '{name}'",
            )
        if A.is_unknown(operand.type):
            return A.FuncApp(name, args, A.UNKNOWN)
        if not isinstance(operand.type, A.BvType):
            raise TypeMismatchError(
                "bit-vector", str(operand.type), span, f"second argument of '{name}'"
            )
        return A.FuncApp(name, args, A.BvType(operand.type.width + amount.value))

    # ═══════════════════════════════════════════════════════════════════
    #  Comparisons
    # ═══════════════════════════════════════════════════════════════════

    def comparison(
        self,
        op: A.CompOp,
        lhs: A.VExpr,
        rhs: A.VExpr,
        span: Optional[SourceSpan] = None,
    ) -> A.COpApp:
        left, right = lhs.type, rhs.type
        if not (A.is_unknown(left) or A.is_unknown(right)):
            context = f"comparison '{op.value}'"
            if left != right:
                raise TypeMismatchError(str(left), str(right), span, context)
            if op.is_unsigned and not isinstance(left, A.BvType):
                raise TypeMismatchError("bit-vector", str(left), span, context)
        return A.COpApp(op, (lhs, rhs))


def _describe(node: A.VExpr) -> str:
    if isinstance(node, A.Ident):
        return f"identifier '{node.name}'"
    return type(node).__name__
