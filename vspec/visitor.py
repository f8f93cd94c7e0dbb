# vspec/visitor.py
"""
Visitor infrastructure for AST rewrites.

``SpecTransformer`` rebuilds the tree bottom-up.  Each ``visit_X`` returns a
new node (or the original when nothing changed); subclasses override the
methods they care about.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

from vspec import ast as A

__all__ = ["SpecTransformer"]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@lru_cache(maxsize=None)
def visit_method_name(cls_name: str) -> str:
    """``BOpApp`` → ``visit_bop_app``."""
    return "visit_" + _CAMEL_BOUNDARY.sub("_", cls_name).lower()


class SpecTransformer:
    """Visitor that rebuilds the AST, allowing transformations."""

    def visit(self, node: Any) -> Any:
        """Dispatch to ``visit_<snake_case class name>``, walking base classes."""
        for cls in type(node).__mro__:
            method = getattr(self, visit_method_name(cls.__name__), None)
            if method is not None:
                return method(node)
        return self.generic_visit(node)

    def generic_visit(self, node: Any) -> Any:
        """Default: return node unchanged."""
        return node

    # --- Specifications ---

    def visit_func_spec(self, node: A.FuncSpec) -> A.FuncSpec:
        return A.FuncSpec(node.name, tuple(self.visit(s) for s in node.specs))

    def visit_requires(self, node: A.Requires) -> A.Requires:
        return A.Requires(self.visit(node.condition))

    def visit_ensures(self, node: A.Ensures) -> A.Ensures:
        return A.Ensures(self.visit(node.condition))

    def visit_modifies(self, node: A.Modifies) -> A.Modifies:
        return node

    def visit_track(self, node: A.Track) -> A.Track:
        return A.Track(node.label, self.visit(node.expr))

    # --- Boolean expressions ---

    def visit_bool_const(self, node: A.BoolConst) -> A.BExpr:
        return node

    def visit_bop_app(self, node: A.BOpApp) -> A.BExpr:
        return A.BOpApp(node.op, tuple(self.visit(o) for o in node.operands))

    def visit_cop_app(self, node: A.COpApp) -> A.BExpr:
        lhs, rhs = node.operands
        return A.COpApp(node.op, (self.visit(lhs), self.visit(rhs)))

    # --- Value expressions ---

    def visit_ident(self, node: A.Ident) -> A.VExpr:
        return node

    def visit_int_lit(self, node: A.IntLit) -> A.VExpr:
        return node

    def visit_bv_lit(self, node: A.BvLit) -> A.VExpr:
        return node

    def visit_bool_lit(self, node: A.BoolLit) -> A.VExpr:
        return node

    def visit_op_app(self, node: A.OpApp) -> A.VExpr:
        return A.OpApp(node.op, tuple(self.visit(o) for o in node.operands), node.type)

    def visit_func_app(self, node: A.FuncApp) -> A.VExpr:
        return A.FuncApp(node.name, tuple(self.visit(a) for a in node.args), node.type)
