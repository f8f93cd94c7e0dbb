# vspec/sexp.py
"""
Canonical S-expression form of the AST (built with ``sexpdata``).

    Ident     (ident NAME TYPE)
    IntLit    (int VALUE)
    BvLit     (bv VALUE WIDTH)          or (bv VALUE TYPE) for address literals
    BoolLit   (bool true|false)
    OpApp     (OP TYPE OPERAND...)      OP: add sub xor and or div mul
                                            ashr lshr shl concat index
                                            field deref  or (slice HI LO)
    FuncApp   (call NAME TYPE ARG...)
    BExpr     (const true|false) (not B) (conj B B) (disj B B) (implies B B)
              (forall (VAR TYPE) B) (exists (VAR TYPE) B) (CMP V V)
    Spec      (requires B) (ensures B) (modifies NAME...) (track LABEL V)
    FuncSpec  (fun NAME SPEC...)

Types render as ``bool``, ``int``, ``unknown``, ``(bv W)``,
``(array INDEX ELEM)`` and ``(struct NAME SIZE)``.
"""

from __future__ import annotations

from typing import Any, Iterable, List

from sexpdata import Symbol, dumps as _dumps

from vspec import ast as A

_VALUE_OP_TAGS = {
    A.ValueOp.ADD: "add",
    A.ValueOp.SUB: "sub",
    A.ValueOp.BV_XOR: "xor",
    A.ValueOp.BV_AND: "and",
    A.ValueOp.BV_OR: "or",
    A.ValueOp.DIV: "div",
    A.ValueOp.MUL: "mul",
    A.ValueOp.RIGHT_SHIFT: "ashr",
    A.ValueOp.URIGHT_SHIFT: "lshr",
    A.ValueOp.LEFT_SHIFT: "shl",
    A.ValueOp.CONCAT: "concat",
    A.ValueOp.ARRAY_INDEX: "index",
    A.ValueOp.GET_FIELD: "field",
    A.ValueOp.DEREF: "deref",
}

_BOOL_OP_TAGS = {
    A.BoolOp.NEG: "not",
    A.BoolOp.CONJ: "conj",
    A.BoolOp.DISJ: "disj",
    A.BoolOp.IMPLIES: "implies",
}


def _sym(name: str) -> Symbol:
    return Symbol(name)


def _bool(value: bool) -> Symbol:
    return Symbol("true" if value else "false")


def type_to_sexp(vtype: A.VType) -> Any:
    if isinstance(vtype, A.BvType):
        return [_sym("bv"), vtype.width]
    if isinstance(vtype, A.ArrayType):
        return [_sym("array"), type_to_sexp(vtype.index), type_to_sexp(vtype.element)]
    if isinstance(vtype, A.StructType):
        return [_sym("struct"), _sym(vtype.name), vtype.size]
    return _sym(str(vtype))


def to_sexp(node: Any) -> Any:
    """Convert an AST node (or list of nodes) into nested sexpdata values."""
    if isinstance(node, (list, tuple)):
        return [to_sexp(n) for n in node]

    # Value expressions
    if isinstance(node, A.Ident):
        return [_sym("ident"), _sym(node.name), type_to_sexp(node.type)]
    if isinstance(node, A.IntLit):
        return [_sym("int"), node.value]
    if isinstance(node, A.BvLit):
        if isinstance(node.type, A.BvType):
            return [_sym("bv"), node.value, node.type.width]
        return [_sym("bv"), node.value, type_to_sexp(node.type)]
    if isinstance(node, A.BoolLit):
        return [_sym("bool"), _bool(node.value)]
    if isinstance(node, A.OpApp):
        if isinstance(node.op, A.Slice):
            head: Any = [_sym("slice"), node.op.hi, node.op.lo]
        else:
            head = _sym(_VALUE_OP_TAGS[node.op])
        return [head, type_to_sexp(node.type), *_all(node.operands)]
    if isinstance(node, A.FuncApp):
        return [_sym("call"), _sym(node.name), type_to_sexp(node.type), *_all(node.args)]

    # Boolean expressions
    if isinstance(node, A.BoolConst):
        return [_sym("const"), _bool(node.value)]
    if isinstance(node, A.COpApp):
        return [_sym(node.op.value), *_all(node.operands)]
    if isinstance(node, A.BOpApp):
        if isinstance(node.op, (A.Forall, A.Exists)):
            tag = "forall" if isinstance(node.op, A.Forall) else "exists"
            binder = [_sym(node.op.var.name), type_to_sexp(node.op.type)]
            return [_sym(tag), binder, *_all(node.operands)]
        return [_sym(_BOOL_OP_TAGS[node.op]), *_all(node.operands)]

    # Specifications
    if isinstance(node, A.Requires):
        return [_sym("requires"), to_sexp(node.condition)]
    if isinstance(node, A.Ensures):
        return [_sym("ensures"), to_sexp(node.condition)]
    if isinstance(node, A.Modifies):
        return [_sym("modifies"), *(_sym(n) for n in sorted(node.names))]
    if isinstance(node, A.Track):
        return [_sym("track"), _sym(node.label), to_sexp(node.expr)]
    if isinstance(node, A.FuncSpec):
        return [_sym("fun"), _sym(node.name), *_all(node.specs)]

    raise TypeError(f"cannot convert {type(node).__name__} to an S-expression")


def _all(nodes: Iterable[Any]) -> List[Any]:
    return [to_sexp(n) for n in nodes]


def dumps(node: Any) -> str:
    """Render *node* as a single-line S-expression string."""
    return _dumps(to_sexp(node))
