# vspec/templates.py
"""Skeleton specification files generated from the type catalogue."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from vspec.catalogue import TypeCatalogue

logger = logging.getLogger(__name__)

INDENT = "    "


def function_template(name: str, catalogue: TypeCatalogue) -> str:
    """One ``fun`` block with trivially true clauses for function *name*."""
    sig = catalogue.lookup_function_signature(name)
    lines = [f"fun {name} {{"]
    if sig is None:
        logger.warning("No signature for function '%s' in the catalogue", name)
        lines.append(f"{INDENT}// arguments: unknown")
    elif sig.args:
        lines.append(f"{INDENT}// arguments: {', '.join(sig.arg_names)}")
    else:
        lines.append(f"{INDENT}// arguments: none")
    lines.append(f"{INDENT}requires true;")
    lines.append(f"{INDENT}ensures true;")
    lines.append("}")
    return "\n".join(lines)


def function_templates(
    catalogue: TypeCatalogue,
    names: Optional[Iterable[str]] = None,
) -> str:
    """Templates for *names* (default: every catalogue function), sorted."""
    selected: List[str] = sorted(set(names)) if names is not None else catalogue.function_names()
    blocks = [function_template(name, catalogue) for name in selected]
    return "\n\n".join(blocks) + ("\n" if blocks else "")
