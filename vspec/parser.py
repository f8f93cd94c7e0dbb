# vspec/parser.py
"""
Specification parser: source text → typed AST.

Usage::

    from vspec.parser import SpecParser
    from vspec.catalogue import load_catalogue

    parser = SpecParser(load_catalogue("prog.json"))
    func_specs = parser.parse_specs('''
        fun f {
            requires x >_u 0bv64;
            ensures $a0 == old(x);
            modifies $a0, g;
        }
    ''')

Without a catalogue (``SpecParser()``) the parser builds the same tree
shape with ``UNKNOWN`` placeholder types; see :mod:`vspec.resolver`.

Parsing is done in two steps: parsimonious matches the whole input against
:data:`vspec.grammar.SPEC_GRAMMAR`, then :class:`SpecTreeBuilder` walks the
parse tree bottom-up, asking the :class:`~vspec.elaborator.Elaborator` to
type each node as it is built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Union

from parsimonious.exceptions import ParseError
from parsimonious.expressions import Literal, Regex
from parsimonious.nodes import Node, NodeVisitor

from vspec import ast as A
from vspec.catalogue import TypeCatalogue
from vspec.config import ParserConfig
from vspec.context import ParseContext
from vspec.elaborator import Elaborator
from vspec.errors import (
    ErrorReporter,
    InvalidCharacterError,
    SourceSpan,
    SpecSyntaxError,
    VspecError,
    VspecErrorCodes,
)
from vspec.grammar import ALPHABET, SPEC_GRAMMAR
from vspec.system_model import SystemModel

logger = logging.getLogger(__name__)

_VALUE_OPS = {op.value: op for op in A.ValueOp}
_COMP_OPS = {op.value: op for op in A.CompOp}
_BOOL_OPS = {op.value: op for op in A.BoolOp}


# ═══════════════════════════════════════════════════════════════════
#  PARSE TREE → AST
# ═══════════════════════════════════════════════════════════════════

class SpecTreeBuilder(NodeVisitor):
    """Transforms a parsimonious parse tree into the typed AST."""

    unwrapped_exceptions = (VspecError, RecursionError)

    def __init__(self, elaborator: Elaborator, text: str, filename: str = "") -> None:
        self.elaborator = elaborator
        self.context = elaborator.context
        self.text = text
        self.filename = filename

    def span(self, node: Node) -> SourceSpan:
        return SourceSpan.from_offsets(self.text, node.start, node.end, self.filename)

    def visit(self, node: Node) -> Any:
        # The function name and quantifier bindings must be in place before
        # the nested expressions are elaborated.
        if node.expr_name == "func_spec":
            self.context.enter_function(node.children[2].text)
        elif node.expr_name == "quantified":
            return self._visit_quantified(node)
        return super().visit(node)

    def generic_visit(self, node: Node, visited_children: List[Any]) -> Any:
        """Default: leaves yield the node itself, anything else its children."""
        if node.children or not isinstance(node.expr, (Literal, Regex)):
            return visited_children
        return node

    # ─────────────────────────────────────────────────────────────
    # Entry points
    # ─────────────────────────────────────────────────────────────

    def visit_func_specs(self, node, visited_children):
        _, func_specs, _ = visited_children
        return list(func_specs)

    def visit_func_spec_entry(self, node, visited_children):
        _, func_spec, _ = visited_children
        return func_spec

    def visit_specs(self, node, visited_children):
        _, specs, _ = visited_children
        return list(specs)

    def visit_bexpr_entry(self, node, visited_children):
        return visited_children[1]

    def visit_vexpr_entry(self, node, visited_children):
        return visited_children[1]

    # ─────────────────────────────────────────────────────────────
    # Specifications
    # ─────────────────────────────────────────────────────────────

    def visit_func_spec(self, node, visited_children):
        _, _, name, _, _, _, specs, _, _ = visited_children
        return A.FuncSpec(name, tuple(specs))

    def visit_spec(self, node, visited_children):
        return visited_children[0]

    def visit_requires_spec(self, node, visited_children):
        return A.Requires(visited_children[2])

    def visit_ensures_spec(self, node, visited_children):
        return A.Ensures(visited_children[2])

    def visit_modifies_spec(self, node, visited_children):
        _, _, first, rest, _, _, _ = visited_children
        return A.Modifies(frozenset([first, *rest]))

    def visit_more_locations(self, node, visited_children):
        return [item[-1] for item in visited_children]

    def visit_location(self, node, visited_children):
        return node.text

    def visit_track_spec(self, node, visited_children):
        label = visited_children[4]
        return A.Track(label, visited_children[8])

    # ─────────────────────────────────────────────────────────────
    # Boolean expressions
    # ─────────────────────────────────────────────────────────────

    def visit_bexpr(self, node, visited_children):
        left, tail = visited_children
        if not tail:
            return left
        op, right = tail[0]
        return A.BOpApp(op, (left, right))

    def visit_bool_tail(self, node, visited_children):
        _, op, _, right = visited_children
        return op, right

    def visit_bool_op(self, node, visited_children):
        return _BOOL_OPS[node.text]

    def visit_bexpr2(self, node, visited_children):
        (value,) = visited_children
        if isinstance(value, bool):
            return A.BoolConst(value)
        return value

    def visit_negation(self, node, visited_children):
        return A.BOpApp(A.BoolOp.NEG, (visited_children[-1],))

    def _visit_quantified(self, node: Node) -> A.BOpApp:
        quantifier, _, body = node.children
        kind = quantifier.children[0].text
        var_name = quantifier.children[4].text
        width = int(quantifier.children[8].match.group(1))
        with self.elaborator.bind(var_name, width, self.span(quantifier)) as var:
            condition = self.visit(body)
        op = A.Forall(var, var.type) if kind == "forall" else A.Exists(var, var.type)
        return A.BOpApp(op, (condition,))

    def visit_comparison(self, node, visited_children):
        lhs, _, op, _, rhs = visited_children
        return self.elaborator.comparison(op, lhs, rhs, self.span(node))

    def visit_comp_op(self, node, visited_children):
        return _COMP_OPS[node.text]

    def visit_paren_bexpr(self, node, visited_children):
        return visited_children[2]

    # ─────────────────────────────────────────────────────────────
    # Value expressions
    # ─────────────────────────────────────────────────────────────

    def visit_vexpr(self, node, visited_children):
        return self._fold_left(*visited_children)

    def visit_vexpr2(self, node, visited_children):
        return self._fold_left(*visited_children)

    def _fold_left(self, first, tails):
        result = first
        for op, rhs, span in tails:
            result = self.elaborator.binary(op, result, rhs, span)
        return result

    def visit_add_tail(self, node, visited_children):
        _, op, _, rhs = visited_children
        return op, rhs, self.span(node)

    visit_mul_tail = visit_add_tail

    def visit_add_op(self, node, visited_children):
        return _VALUE_OPS[node.text]

    visit_mul_op = visit_add_op

    def visit_postfix(self, node, visited_children):
        term, selectors = visited_children
        result = term
        for apply_selector in selectors:
            result = apply_selector(result)
        return result

    def visit_selector(self, node, visited_children):
        _, (selector,) = visited_children
        return selector

    def visit_slice(self, node, visited_children) -> Callable[[A.VExpr], A.VExpr]:
        hi, lo = visited_children[2], visited_children[6]
        span = self.span(node)
        return lambda base: self.elaborator.slice(base, hi, lo, span)

    def visit_index(self, node, visited_children) -> Callable[[A.VExpr], A.VExpr]:
        index = visited_children[2]
        span = self.span(node)
        return lambda base: self.elaborator.array_index(base, index, span)

    def visit_field(self, node, visited_children) -> Callable[[A.VExpr], A.VExpr]:
        field_name = visited_children[2]
        span = self.span(node)
        return lambda base: self.elaborator.get_field(base, field_name, span)

    def visit_term(self, node, visited_children):
        (value,) = visited_children
        if isinstance(value, bool):
            return A.BoolLit(value)
        if isinstance(value, str):
            return self.elaborator.resolve(value, self.span(node))
        return value

    def visit_func_app(self, node, visited_children):
        name, _, _, _, first, rest, _, _ = visited_children
        return self.elaborator.func_app(name, [first, *rest], self.span(node))

    def visit_more_args(self, node, visited_children):
        return [item[-1] for item in visited_children]

    def visit_builtin(self, node, visited_children):
        return node.text

    def visit_deref(self, node, visited_children):
        _, _, (target,) = visited_children
        span = self.span(node)
        return self.elaborator.deref(self.elaborator.resolve(target, span), span)

    def visit_paren_vexpr(self, node, visited_children):
        return visited_children[2]

    # ─────────────────────────────────────────────────────────────
    # Lexical
    # ─────────────────────────────────────────────────────────────

    def visit_bv_lit(self, node, visited_children):
        minus, digits = visited_children
        match = digits.match
        return self.elaborator.bv_lit(
            match.group(1), int(match.group(2)), negative=bool(minus), span=self.span(node)
        )

    def visit_int_lit(self, node, visited_children):
        minus, digits = visited_children
        return self.elaborator.int_lit(digits.text, negative=bool(minus), span=self.span(node))

    def visit_bool_lit(self, node, visited_children):
        return node.text == "true"

    def visit_nat(self, node, visited_children):
        return int(node.text)

    def visit_name(self, node, visited_children):
        return node.text

    visit_system_name = visit_name
    visit_field_name = visit_name


# ═══════════════════════════════════════════════════════════════════
#  PUBLIC API
# ═══════════════════════════════════════════════════════════════════

@dataclass
class ParseResult:
    """Outcome of :meth:`SpecParser.try_parse_specs`."""

    func_specs: List[A.FuncSpec] = field(default_factory=list)
    errors: List[VspecError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _syntax_error(exc: ParseError, text: str, filename: str) -> VspecError:
    pos = min(exc.pos, len(text))
    span = SourceSpan.from_offsets(text, pos, file=filename)
    if pos < len(text) and text[pos] not in ALPHABET:
        return InvalidCharacterError(text[pos], span)
    if pos >= len(text) or not text[pos:].strip():
        return SpecSyntaxError(
            "Unexpected end of input",
            span=span,
            rule=getattr(exc.expr, "name", ""),
            code=VspecErrorCodes.UNEXPECTED_EOF,
        )
    found = text[pos:].split(None, 1)[0][:20]
    rule = getattr(exc.expr, "name", "") or ""
    message = f"Unexpected input '{found}'"
    if rule:
        message += f" while parsing {rule.replace('_', ' ')}"
    return SpecSyntaxError(message, span=span, rule=rule, found=found)


def _nesting_error(text: str, filename: str) -> SpecSyntaxError:
    logger.debug("Recursion limit hit while parsing %d characters", len(text))
    return SpecSyntaxError(
        "Expression nested too deeply to parse",
        span=SourceSpan.from_offsets(text, 0, file=filename),
    )


class SpecParser:
    """Parses specification text against one catalogue and system model.

    The parser holds no per-parse state; every call builds its own
    :class:`~vspec.context.ParseContext`.
    """

    def __init__(
        self,
        catalogue: Optional[TypeCatalogue] = None,
        system_model: Optional[SystemModel] = None,
        config: Optional[ParserConfig] = None,
    ) -> None:
        self.catalogue = catalogue
        self.system_model = system_model
        self.config = config or ParserConfig()
        self.config.log_warnings()

    @property
    def typed(self) -> bool:
        return self.catalogue is not None

    def _parse(
        self,
        rule: str,
        text: str,
        filename: str = "",
        function: Optional[str] = None,
    ) -> Any:
        try:
            tree = SPEC_GRAMMAR[rule].parse(text)
        except ParseError as exc:
            raise _syntax_error(exc, text, filename) from exc
        except RecursionError as exc:
            raise _nesting_error(text, filename) from exc
        context = ParseContext(
            catalogue=self.catalogue,
            system_model=self.system_model,
            xlen=self.config.xlen,
            function=function,
        )
        builder = SpecTreeBuilder(Elaborator(context), text, filename)
        try:
            return builder.visit(tree)
        except RecursionError as exc:
            raise _nesting_error(text, filename) from exc

    def parse_specs(self, text: str, filename: str = "") -> List[A.FuncSpec]:
        """Parse a sequence of ``fun`` blocks."""
        return self._parse("func_specs", text, filename)

    def parse_func_spec(self, text: str, filename: str = "") -> A.FuncSpec:
        """Parse exactly one ``fun`` block."""
        return self._parse("func_spec_entry", text, filename)

    def parse_clauses(
        self,
        text: str,
        function: Optional[str] = None,
        filename: str = "",
    ) -> List[A.Spec]:
        """Parse bare clauses, optionally in the scope of *function*."""
        return self._parse("specs", text, filename, function)

    def parse_bexpr(self, text: str, function: Optional[str] = None) -> A.BExpr:
        return self._parse("bexpr_entry", text, function=function)

    def parse_vexpr(self, text: str, function: Optional[str] = None) -> A.VExpr:
        return self._parse("vexpr_entry", text, function=function)

    def parse_file(self, path: Union[str, Path]) -> List[A.FuncSpec]:
        p = Path(path)
        logger.info("Parsing specification file %s", p)
        return self.parse_specs(p.read_text(encoding="utf-8"), filename=str(p))

    def parse_files(self, paths: Iterable[Union[str, Path]]) -> List[A.FuncSpec]:
        func_specs: List[A.FuncSpec] = []
        for path in paths:
            func_specs.extend(self.parse_file(path))
        return func_specs

    def try_parse_specs(self, text: str, filename: str = "") -> ParseResult:
        """Like :meth:`parse_specs` but collects the error instead of raising."""
        reporter = ErrorReporter(source_file=filename, source=text)
        try:
            return ParseResult(func_specs=self.parse_specs(text, filename))
        except VspecError as exc:
            reporter.report(exc)
            logger.debug("Parse failed: %s", exc.message)
        return ParseResult(errors=reporter.errors)


# ─────────────────────────────────────────────────────────────────
# Convenience functions
# ─────────────────────────────────────────────────────────────────

def parse_specs(
    text: str,
    catalogue: Optional[TypeCatalogue] = None,
    xlen: int = 64,
    filename: str = "",
) -> List[A.FuncSpec]:
    return SpecParser(catalogue, config=ParserConfig(xlen=xlen)).parse_specs(text, filename)


def parse_bexpr(
    text: str,
    catalogue: Optional[TypeCatalogue] = None,
    function: Optional[str] = None,
    xlen: int = 64,
) -> A.BExpr:
    return SpecParser(catalogue, config=ParserConfig(xlen=xlen)).parse_bexpr(text, function)


def parse_vexpr(
    text: str,
    catalogue: Optional[TypeCatalogue] = None,
    function: Optional[str] = None,
    xlen: int = 64,
) -> A.VExpr:
    return SpecParser(catalogue, config=ParserConfig(xlen=xlen)).parse_vexpr(text, function)
