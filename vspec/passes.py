# vspec/passes.py
"""
Rewrite passes run after elaboration, and the multi-file pipeline.

``rename_globals``
    Replaces each identifier that denotes a global variable by a bit-vector
    literal holding the global's address.  The literal keeps the
    identifier's elaborated type, so field and index typing above it still
    holds.

``fold_constants``
    Evaluates operators whose operands are literals.  Bit-vector results
    wrap at their width, integer results at 64 bits (two's complement).
    Indexing an address literal computes the element address, and
    dereferencing an address literal becomes the memory-cell identifier
    ``mem_access_<addr>``.

``process_specs``
    Parses spec files and runs both passes over every ``requires`` and
    ``ensures`` condition.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from vspec import ast as A
from vspec.catalogue import GlobalNotFoundError, TypeCatalogue
from vspec.config import ParserConfig
from vspec.context import ParseContext
from vspec.parser import SpecParser
from vspec.resolver import TypeResolver
from vspec.system_model import SystemModel
from vspec.visitor import SpecTransformer

logger = logging.getLogger(__name__)

MEM_ACCESS_PREFIX = "mem_access_"

_U64 = 1 << 64
_I64_MIN = -(1 << 63)


# ═══════════════════════════════════════════════════════════════════
#  Global renaming
# ═══════════════════════════════════════════════════════════════════

class GlobalRenamer(SpecTransformer):
    def __init__(self, catalogue: TypeCatalogue, function: Optional[str] = None) -> None:
        self.catalogue = catalogue
        self.context = ParseContext(catalogue=catalogue, function=function)

    def visit_func_spec(self, node: A.FuncSpec) -> A.FuncSpec:
        self.context.enter_function(node.name)
        return super().visit_func_spec(node)

    def visit_bop_app(self, node: A.BOpApp) -> A.BExpr:
        if isinstance(node.op, (A.Forall, A.Exists)):
            var = node.op.var
            with self.context.binding(var.name, var.type):
                return super().visit_bop_app(node)
        return super().visit_bop_app(node)

    def visit_op_app(self, node: A.OpApp) -> A.VExpr:
        if node.op is A.ValueOp.GET_FIELD:
            # The second operand names the field, not a variable.
            base, field_ident = node.operands
            return A.OpApp(node.op, (self.visit(base), field_ident), node.type)
        return super().visit_op_app(node)

    def visit_ident(self, node: A.Ident) -> A.VExpr:
        name = node.name
        if (
            node.is_system
            or self.context.bound_type(name) is not None
            or self.context.is_formal(name)
        ):
            return node
        try:
            self.catalogue.lookup_global_type(name)
        except GlobalNotFoundError:
            return node
        address = self.catalogue.global_address(name)
        if address is None:
            logger.warning("Global '%s' has no known address; left symbolic", name)
            return node
        return A.BvLit(address, node.type)


def rename_globals(node, catalogue: TypeCatalogue, function: Optional[str] = None):
    """Replace global identifiers in *node* by their address literals."""
    return GlobalRenamer(catalogue, function).visit(node)


# ═══════════════════════════════════════════════════════════════════
#  Constant folding
# ═══════════════════════════════════════════════════════════════════

def _mask(width: int) -> int:
    return (1 << width) - 1


def _wrap_signed64(value: int) -> int:
    return ((value - _I64_MIN) % _U64) + _I64_MIN


def _to_signed(value: int, width: int) -> int:
    return value - (1 << width) if value >> (width - 1) & 1 else value


def _byte_size(vtype: A.VType) -> Optional[int]:
    if isinstance(vtype, A.BvType):
        return max(1, vtype.width // 8)
    if isinstance(vtype, A.StructType):
        return vtype.size
    return None


def _literal(value: int, vtype: A.VType) -> Optional[A.VExpr]:
    if isinstance(vtype, A.BvType):
        return A.BvLit(value & _mask(vtype.width), vtype)
    if isinstance(vtype, A.IntType):
        return A.IntLit(_wrap_signed64(value))
    return None


def _width_of(vtype: A.VType) -> int:
    return vtype.width if isinstance(vtype, A.BvType) else 64


class ConstantFolder(SpecTransformer):
    def visit_op_app(self, node: A.OpApp) -> A.VExpr:
        node = super().visit_op_app(node)
        operands = node.operands
        if not all(isinstance(o, A.LITERAL_NODES) for o in operands):
            return node

        op = node.op
        if isinstance(op, A.Slice):
            (base,) = operands
            return A.BvLit((base.value >> op.lo) & _mask(op.width), node.type)
        if op is A.ValueOp.DEREF:
            (address,) = operands
            return A.Ident(f"{MEM_ACCESS_PREFIX}{address.value}", node.type)
        if op is A.ValueOp.ARRAY_INDEX:
            return self._fold_index(node)

        folded = self._fold_binary(op, operands[0], operands[1], node.type)
        return folded if folded is not None else node

    def _fold_index(self, node: A.OpApp) -> A.VExpr:
        base, index = node.operands
        if not isinstance(base.type, A.ArrayType):
            return node
        elem_size = _byte_size(base.type.element)
        if elem_size is None:
            return node
        return A.BvLit((base.value + elem_size * index.value) % _U64, node.type)

    def _fold_binary(self, op: A.ValueOp, lhs, rhs, vtype: A.VType) -> Optional[A.VExpr]:
        left, right = lhs.value, rhs.value
        width = _width_of(vtype)
        signed = isinstance(vtype, A.IntType)

        if op is A.ValueOp.CONCAT:
            if not isinstance(rhs.type, A.BvType):
                return None
            return _literal((left << rhs.type.width) | right, vtype)
        if op is A.ValueOp.ADD:
            return _literal(left + right, vtype)
        if op is A.ValueOp.SUB:
            return _literal(left - right, vtype)
        if op is A.ValueOp.MUL:
            return _literal(left * right, vtype)
        if op is A.ValueOp.DIV:
            if right == 0:
                return None
            if signed:
                quotient = abs(left) // abs(right)
                return _literal(-quotient if (left < 0) != (right < 0) else quotient, vtype)
            return _literal(left // right, vtype)
        if op is A.ValueOp.BV_XOR:
            return _literal(left ^ right, vtype)
        if op is A.ValueOp.BV_AND:
            return _literal(left & right, vtype)
        if op is A.ValueOp.BV_OR:
            return _literal(left | right, vtype)

        if right < 0:
            return None
        amount = min(right, width)
        if op is A.ValueOp.LEFT_SHIFT:
            return _literal(left << amount, vtype)
        if op is A.ValueOp.URIGHT_SHIFT:
            return _literal((left & _mask(width)) >> amount, vtype)
        if op is A.ValueOp.RIGHT_SHIFT:
            value = left if signed else _to_signed(left, width)
            return _literal(value >> amount, vtype)
        return None


def fold_constants(node):
    """Fold literal sub-expressions of *node*."""
    return ConstantFolder().visit(node)


# ═══════════════════════════════════════════════════════════════════
#  Pipeline
# ═══════════════════════════════════════════════════════════════════

def _rewrite_conditions(func_spec: A.FuncSpec, catalogue: TypeCatalogue) -> List[A.Spec]:
    rewritten: List[A.Spec] = []
    for spec in func_spec.specs:
        if isinstance(spec, (A.Requires, A.Ensures)):
            condition = rename_globals(spec.condition, catalogue, func_spec.name)
            spec = type(spec)(fold_constants(condition))
        rewritten.append(spec)
    return rewritten


def process_specs(
    paths: Iterable[Union[str, Path]],
    catalogue: TypeCatalogue,
    config: Optional[ParserConfig] = None,
    system_model: Optional[SystemModel] = None,
) -> Dict[str, List[A.Spec]]:
    """Parse, type and rewrite every spec file; key the result by function."""
    config = config or ParserConfig()
    if config.deferred_typing:
        parser = SpecParser(None, system_model, config)
        resolver: Optional[TypeResolver] = TypeResolver(catalogue, system_model, config.xlen)
    else:
        parser = SpecParser(catalogue, system_model, config)
        resolver = None

    result: Dict[str, List[A.Spec]] = {}
    for path in paths:
        for func_spec in parser.parse_file(path):
            if resolver is not None:
                func_spec = resolver.resolve_func_spec(func_spec)
            if func_spec.name in result:
                logger.warning(
                    "Function '%s' specified more than once; %s replaces the earlier block",
                    func_spec.name, path,
                )
            result[func_spec.name] = _rewrite_conditions(func_spec, catalogue)
    logger.info("Processed specifications for %d function(s)", len(result))
    return result
