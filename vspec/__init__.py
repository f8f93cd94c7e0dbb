"""vspec — front end for binary-level function specifications.

Parses ``fun f { requires ...; ensures ...; modifies ...; track ...; }``
blocks into a typed AST, resolving identifiers against a type catalogue
(debug information of the program under verification) and a fixed
system model of machine state.

Submodules
----------
errors
    Exception hierarchy, ``VSPEC-NNNN`` error codes, ``SourceSpan`` and
    ``ErrorReporter``.

ast
    Immutable AST nodes and value types.

grammar / parser
    parsimonious PEG grammar and the tree builder that elaborates types
    while the AST is built.

elaborator / resolver
    Typing rules, and deferred typing of trees parsed without a catalogue.

catalogue / system_model / nominal
    Type sources consulted during elaboration.

passes
    Global-to-address renaming, constant folding, multi-file pipeline.

sexp / templates
    S-expression dump and skeleton spec generation.

main
    CLI entry-point with subcommands: ``check``, ``dump-sexp``, ``template``.

Usage
-----
Command-line::

    python -m vspec check prog.spec --catalogue prog.json
    python -m vspec --help

Programmatic::

    from vspec import SpecParser, load_catalogue

    parser = SpecParser(load_catalogue("prog.json"))
    for func_spec in parser.parse_file("prog.spec"):
        print(func_spec.name, func_spec.modified())
"""

from __future__ import annotations

__version__: str = "0.1.0"

from vspec.catalogue import InMemoryCatalogue, TypeCatalogue, load_catalogue
from vspec.config import ParserConfig
from vspec.errors import ErrorReporter, VspecError
from vspec.parser import SpecParser, parse_bexpr, parse_specs, parse_vexpr
from vspec.passes import fold_constants, process_specs, rename_globals
from vspec.resolver import TypeResolver
from vspec.system_model import DEFAULT_SYSTEM_MODEL, SystemModel

__all__: list[str] = [
    "__version__",
    "DEFAULT_SYSTEM_MODEL",
    "ErrorReporter",
    "InMemoryCatalogue",
    "ParserConfig",
    "SpecParser",
    "SystemModel",
    "TypeCatalogue",
    "TypeResolver",
    "VspecError",
    "fold_constants",
    "load_catalogue",
    "parse_bexpr",
    "parse_specs",
    "parse_vexpr",
    "process_specs",
    "rename_globals",
]
