# vspec/catalogue.py
"""
Type Catalogue: the debug-information view of the program under
verification.

The elaborator only needs two queries (function signatures and global
variable types).  Renaming globals to addresses additionally needs
:meth:`TypeCatalogue.global_address`.  :class:`InMemoryCatalogue` is the
concrete implementation used by the CLI (loaded from JSON) and by tests.

JSON format::

    {
      "functions": {"f": [{"name": "x", "type": {"kind": "base", "bytes": 8}}]},
      "globals":   {"g": {"type": {"kind": "base", "bytes": 4}, "address": 4096}}
    }

Type descriptions::

    {"kind": "base",    "bytes": N}
    {"kind": "pointer", "bytes": N, "to": T}
    {"kind": "array",   "element": T, "index": T, "length": N}
    {"kind": "struct",  "name": S, "bytes": N,
                        "fields": [{"name": F, "type": T, "offset": N}]}
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from vspec.errors import CatalogueError
from vspec.nominal import Array, NominalType, Pointer, Scalar, Struct, StructField

logger = logging.getLogger(__name__)


class GlobalNotFoundError(LookupError):
    """Raised by :meth:`TypeCatalogue.lookup_global_type` for unknown names."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


@dataclass(frozen=True)
class Argument:
    name: str
    type: NominalType


@dataclass(frozen=True)
class FunctionSignature:
    name: str
    args: Tuple[Argument, ...] = ()

    @property
    def arg_names(self) -> Tuple[str, ...]:
        return tuple(a.name for a in self.args)


@dataclass(frozen=True)
class GlobalVariable:
    name: str
    type: NominalType
    address: Optional[int] = None


class TypeCatalogue(ABC):
    """Read-only source of function signatures and global variable types."""

    @abstractmethod
    def lookup_function_signature(self, name: str) -> Optional[FunctionSignature]:
        """Return the signature of function *name*, or ``None`` if unknown."""

    @abstractmethod
    def lookup_global_type(self, name: str) -> NominalType:
        """Return the type of global *name*; raise :class:`GlobalNotFoundError`."""

    def global_address(self, name: str) -> Optional[int]:
        """Memory address of global *name*, if the catalogue knows it."""
        return None

    def function_names(self) -> List[str]:
        return []


class InMemoryCatalogue(TypeCatalogue):
    """Catalogue backed by plain dictionaries."""

    def __init__(
        self,
        functions: Optional[Mapping[str, Iterable[Union[Argument, Tuple[str, NominalType]]]]] = None,
        global_vars: Optional[Mapping[str, Union[GlobalVariable, NominalType]]] = None,
    ) -> None:
        self._functions: Dict[str, FunctionSignature] = {}
        self._globals: Dict[str, GlobalVariable] = {}
        for fname, args in (functions or {}).items():
            self.add_function(fname, args)
        for gname, gvar in (global_vars or {}).items():
            if isinstance(gvar, GlobalVariable):
                self._globals[gname] = gvar
            else:
                self.add_global(gname, gvar)

    def add_function(
        self,
        name: str,
        args: Iterable[Union[Argument, Tuple[str, NominalType]]] = (),
    ) -> FunctionSignature:
        normalised = tuple(
            a if isinstance(a, Argument) else Argument(a[0], a[1]) for a in args
        )
        sig = FunctionSignature(name, normalised)
        self._functions[name] = sig
        return sig

    def add_global(
        self,
        name: str,
        ntype: NominalType,
        address: Optional[int] = None,
    ) -> GlobalVariable:
        gvar = GlobalVariable(name, ntype, address)
        self._globals[name] = gvar
        return gvar

    def lookup_function_signature(self, name: str) -> Optional[FunctionSignature]:
        return self._functions.get(name)

    def lookup_global_type(self, name: str) -> NominalType:
        try:
            return self._globals[name].type
        except KeyError:
            raise GlobalNotFoundError(name) from None

    def global_address(self, name: str) -> Optional[int]:
        gvar = self._globals.get(name)
        return gvar.address if gvar is not None else None

    def function_names(self) -> List[str]:
        return sorted(self._functions)

    def global_names(self) -> List[str]:
        return sorted(self._globals)

    def __repr__(self) -> str:
        return (
            f"InMemoryCatalogue(functions={len(self._functions)}, "
            f"globals={len(self._globals)})"
        )


# ═══════════════════════════════════════════════════════════════════════════
#  JSON loading
# ═══════════════════════════════════════════════════════════════════════════

def _parse_type(raw: Any, where: str) -> NominalType:
    if not isinstance(raw, dict) or "kind" not in raw:
        raise CatalogueError(f"{where}: type description must be an object with a 'kind'")
    kind = raw["kind"]
    try:
        if kind == "base":
            return Scalar(int(raw["bytes"]) * 8)
        if kind == "pointer":
            target = raw.get("to")
            return Pointer(
                _parse_type(target, f"{where}.to") if target is not None else None,
                int(raw.get("bytes", 8)) * 8,
            )
        if kind == "array":
            index = raw.get("index")
            return Array(
                element=_parse_type(raw["element"], f"{where}.element"),
                index=_parse_type(index, f"{where}.index") if index is not None else None,
                length=raw.get("length"),
            )
        if kind == "struct":
            fields = tuple(
                StructField(
                    name=str(f["name"]),
                    type=_parse_type(f["type"], f"{where}.{f['name']}"),
                    offset=int(f.get("offset", 0)),
                )
                for f in raw.get("fields", [])
            )
            return Struct(str(raw["name"]), fields, int(raw.get("bytes", 0)))
    except KeyError as exc:
        raise CatalogueError(f"{where}: missing key {exc.args[0]!r}") from exc
    except (TypeError, ValueError) as exc:
        raise CatalogueError(f"{where}: {exc}") from exc
    raise CatalogueError(f"{where}: unknown type kind {kind!r}")


def catalogue_from_dict(data: Mapping[str, Any]) -> InMemoryCatalogue:
    """Build an :class:`InMemoryCatalogue` from decoded JSON."""
    if not isinstance(data, Mapping):
        raise CatalogueError("catalogue must be a JSON object")

    catalogue = InMemoryCatalogue()
    for fname, args in (data.get("functions") or {}).items():
        if not isinstance(args, list):
            raise CatalogueError(f"functions.{fname}: argument list expected")
        parsed = []
        for i, arg in enumerate(args):
            if not isinstance(arg, dict) or "name" not in arg:
                raise CatalogueError(f"functions.{fname}[{i}]: argument needs a 'name'")
            parsed.append(Argument(
                str(arg["name"]),
                _parse_type(arg.get("type", {"kind": "base", "bytes": 8}),
                            f"functions.{fname}.{arg['name']}"),
            ))
        catalogue.add_function(fname, parsed)

    for gname, entry in (data.get("globals") or {}).items():
        if not isinstance(entry, dict) or "type" not in entry:
            raise CatalogueError(f"globals.{gname}: object with a 'type' expected")
        address = entry.get("address")
        if address is not None and not isinstance(address, int):
            raise CatalogueError(f"globals.{gname}: address must be an integer")
        catalogue.add_global(gname, _parse_type(entry["type"], f"globals.{gname}"), address)

    logger.debug("Loaded %r", catalogue)
    return catalogue


def load_catalogue(path: Union[str, Path]) -> InMemoryCatalogue:
    """Read a JSON catalogue file."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CatalogueError(f"{p}: invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    logger.info("Loading type catalogue from %s", p)
    return catalogue_from_dict(data)
