# vspec/resolver.py
"""
Deferred type resolution.

A tree parsed without a catalogue carries ``UNKNOWN`` placeholder types.
:class:`TypeResolver` types such a tree once the catalogue is available.
It rebuilds every subtree that still contains a placeholder through the
same :class:`~vspec.elaborator.Elaborator` methods the parser uses, so the
result is identical to a parse with the catalogue supplied up front.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from vspec import ast as A
from vspec.catalogue import TypeCatalogue
from vspec.context import ParseContext
from vspec.elaborator import Elaborator
from vspec.system_model import SystemModel
from vspec.visitor import SpecTransformer

logger = logging.getLogger(__name__)


def is_resolved(node: A.VExpr) -> bool:
    """True when neither *node* nor any sub-expression has an unknown type."""
    if A.is_unknown(node.type):
        return False
    if isinstance(node, A.OpApp):
        return all(is_resolved(o) for o in node.operands)
    if isinstance(node, A.FuncApp):
        return all(is_resolved(a) for a in node.args)
    return True


class _Resolution(SpecTransformer):
    def __init__(self, elaborator: Elaborator) -> None:
        self.elaborator = elaborator
        self.context = elaborator.context

    def visit_func_spec(self, node: A.FuncSpec) -> A.FuncSpec:
        self.context.enter_function(node.name)
        return super().visit_func_spec(node)

    def visit_bop_app(self, node: A.BOpApp) -> A.BExpr:
        if isinstance(node.op, (A.Forall, A.Exists)):
            var = node.op.var
            with self.context.binding(var.name, var.type):
                return A.BOpApp(node.op, tuple(self.visit(o) for o in node.operands))
        return super().visit_bop_app(node)

    def visit_cop_app(self, node: A.COpApp) -> A.BExpr:
        lhs, rhs = node.operands
        return self.elaborator.comparison(node.op, self.visit(lhs), self.visit(rhs))

    def visit_ident(self, node: A.Ident) -> A.VExpr:
        if A.is_unknown(node.type):
            return self.elaborator.resolve(node.name)
        return node

    def visit_op_app(self, node: A.OpApp) -> A.VExpr:
        if is_resolved(node):
            return node
        elab = self.elaborator
        op = node.op
        if op is A.ValueOp.GET_FIELD:
            base, field_ident = node.operands
            return elab.get_field(self.visit(base), field_ident.name)
        operands = [self.visit(o) for o in node.operands]
        if isinstance(op, A.Slice):
            return elab.slice(operands[0], op.hi, op.lo)
        if op is A.ValueOp.DEREF:
            return elab.deref(operands[0])
        if op is A.ValueOp.ARRAY_INDEX:
            return elab.array_index(operands[0], operands[1])
        return elab.binary(op, operands[0], operands[1])

    def visit_func_app(self, node: A.FuncApp) -> A.VExpr:
        if is_resolved(node):
            return node
        return self.elaborator.func_app(node.name, [self.visit(a) for a in node.args])


class TypeResolver:
    """Types trees produced by a catalogue-less parse."""

    def __init__(
        self,
        catalogue: TypeCatalogue,
        system_model: Optional[SystemModel] = None,
        xlen: int = 64,
    ) -> None:
        self.catalogue = catalogue
        self.system_model = system_model
        self.xlen = xlen

    def _run(self, node, function: Optional[str] = None):
        context = ParseContext(
            catalogue=self.catalogue,
            system_model=self.system_model,
            xlen=self.xlen,
            function=function,
        )
        return _Resolution(Elaborator(context)).visit(node)

    def resolve_func_spec(self, func_spec: A.FuncSpec) -> A.FuncSpec:
        logger.debug("Resolving types in function '%s'", func_spec.name)
        return self._run(func_spec)

    def resolve_func_specs(self, func_specs: Iterable[A.FuncSpec]) -> List[A.FuncSpec]:
        return [self.resolve_func_spec(fs) for fs in func_specs]

    def resolve_spec(self, spec: A.Spec, function: Optional[str] = None) -> A.Spec:
        return self._run(spec, function)

    def resolve_bexpr(self, bexpr: A.BExpr, function: Optional[str] = None) -> A.BExpr:
        return self._run(bexpr, function)

    def resolve_vexpr(self, vexpr: A.VExpr, function: Optional[str] = None) -> A.VExpr:
        return self._run(vexpr, function)
