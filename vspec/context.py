# vspec/context.py
"""
Per-parse session state.

A :class:`ParseContext` is created for every parse (or resolution) call and
is never shared, so concurrent parses over the same catalogue do not
interfere.  It tracks the function whose block is being elaborated and the
variables bound by enclosing quantifiers.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, FrozenSet, Iterator, List, Optional

from vspec import ast as A
from vspec.catalogue import TypeCatalogue
from vspec.system_model import DEFAULT_SYSTEM_MODEL, SystemModel

logger = logging.getLogger(__name__)


class ParseContext:
    def __init__(
        self,
        catalogue: Optional[TypeCatalogue] = None,
        system_model: Optional[SystemModel] = None,
        xlen: int = 64,
        function: Optional[str] = None,
    ) -> None:
        self.catalogue = catalogue
        self.system_model = system_model or DEFAULT_SYSTEM_MODEL
        self.xlen = xlen
        self.current_function: Optional[str] = None
        self._formals: Optional[FrozenSet[str]] = None
        self._bound: Dict[str, List[A.VType]] = {}
        if function is not None:
            self.enter_function(function)

    @property
    def typed(self) -> bool:
        return self.catalogue is not None

    # ------------------------------------------------------------------
    #  Current function
    # ------------------------------------------------------------------

    def enter_function(self, name: str) -> None:
        """Make *name* the current function.

        The previous value is not restored when the block ends; the next
        ``fun`` header simply overwrites it.
        """
        logger.debug("Elaborating specifications of function '%s'", name)
        self.current_function = name
        self._formals = None

    def formals(self) -> FrozenSet[str]:
        """Argument names of the current function (empty if unknown)."""
        if self._formals is None:
            sig = None
            if self.catalogue is not None and self.current_function is not None:
                sig = self.catalogue.lookup_function_signature(self.current_function)
            if sig is None and self.current_function is not None and self.typed:
                logger.debug(
                    "No signature for function '%s'; formals are skipped",
                    self.current_function,
                )
            self._formals = frozenset(sig.arg_names) if sig is not None else frozenset()
        return self._formals

    def is_formal(self, name: str) -> bool:
        return name in self.formals()

    # ------------------------------------------------------------------
    #  Quantifier scopes
    # ------------------------------------------------------------------

    @contextmanager
    def binding(self, name: str, vtype: A.VType) -> Iterator[A.Ident]:
        """Bind *name* to *vtype* for the duration of the ``with`` block."""
        self._bound.setdefault(name, []).append(vtype)
        try:
            yield A.Ident(name, vtype)
        finally:
            stack = self._bound[name]
            stack.pop()
            if not stack:
                del self._bound[name]

    def bound_type(self, name: str) -> Optional[A.VType]:
        stack = self._bound.get(name)
        return stack[-1] if stack else None
