#!/usr/bin/env python3
"""vspec/main.py — CLI entry-point for the specification front end.

Usage examples
--------------
    # Parse and type-check spec files against a catalogue
    python -m vspec check prog.spec --catalogue prog.json

    # Syntax-only check (no catalogue, placeholder types)
    python -m vspec check prog.spec

    # Dump the typed AST as S-expressions
    python -m vspec dump-sexp prog.spec --catalogue prog.json

    # Run global renaming and constant folding as well
    python -m vspec dump-sexp prog.spec --catalogue prog.json --rewrite

    # Generate skeleton spec blocks for every catalogue function
    python -m vspec template --catalogue prog.json -o prog.spec

Exit codes
----------
    0   Success.
    1   One or more specification errors were reported.
    2   Infrastructure failure (missing file, bad catalogue, bad options).

The module doubles as ``python -m vspec`` via the companion
``vspec/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from vspec import __version__
from vspec.ast import FuncSpec
from vspec.catalogue import TypeCatalogue, load_catalogue
from vspec.config import ParserConfig
from vspec.errors import ConfigError, ErrorPhase, ErrorReporter, VspecError
from vspec.parser import SpecParser
from vspec.passes import process_specs
from vspec.resolver import TypeResolver
from vspec.sexp import dumps
from vspec.templates import function_templates

_log = logging.getLogger("vspec")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the root ``vspec`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("vspec")
    for old in list(root.handlers):
        root.removeHandler(old)
    root.setLevel(level)
    root.addHandler(handler)


def _resolve_path(raw: str, label: str = "file") -> Path:
    """Resolve *raw* to an absolute ``Path``, raising on missing files."""
    p = Path(raw).expanduser().resolve()
    if not p.exists():
        _log.error("%s not found: %s", label, p)
        raise SystemExit(EXIT_INFRA)
    return p


def _open_output(path: Optional[str]) -> TextIO:
    if path is None or path == "-":
        return sys.stdout
    return open(path, "w", encoding="utf-8")


def _load_catalogue(args: argparse.Namespace) -> Optional[TypeCatalogue]:
    if not args.catalogue:
        return None
    return load_catalogue(_resolve_path(args.catalogue, "catalogue"))


def _config(args: argparse.Namespace) -> ParserConfig:
    return ParserConfig(xlen=args.xlen, deferred_typing=getattr(args, "deferred", False))


def _report(reporter: ErrorReporter, fmt: str) -> None:
    if fmt == "json":
        print(reporter.to_json(), file=sys.stderr)
    else:
        for line in reporter.format_all():
            print(line, file=sys.stderr)


# ===========================================================================
# Commands
# ===========================================================================

def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""
    catalogue = _load_catalogue(args)
    config = _config(args)
    if catalogue is None:
        _log.info("No catalogue given; checking syntax only")
    parser = SpecParser(None if config.deferred_typing else catalogue, config=config)
    resolver = (
        TypeResolver(catalogue, xlen=config.xlen)
        if config.deferred_typing and catalogue is not None
        else None
    )

    failed = False
    total = 0
    for raw in args.specs:
        path = _resolve_path(raw, "spec file")
        text = path.read_text(encoding="utf-8")
        reporter = ErrorReporter(source_file=str(path), source=text)
        result = parser.try_parse_specs(text, filename=str(path))
        for error in result.errors:
            reporter.report(error)
        if result.ok and resolver is not None:
            try:
                resolver.resolve_func_specs(result.func_specs)
            except VspecError as exc:
                reporter.report(exc)
        if len(reporter):
            failed = True
            _report(reporter, args.format)
        else:
            total += len(result.func_specs)
            _log.info("%s: %d function block(s) OK", path, len(result.func_specs))

    if failed:
        return EXIT_ERROR
    print(f"OK: {total} function block(s) in {len(args.specs)} file(s)")
    return EXIT_OK


def cmd_dump_sexp(args: argparse.Namespace) -> int:
    """Handle the 'dump-sexp' command."""
    catalogue = _load_catalogue(args)
    config = _config(args)
    paths = [_resolve_path(raw, "spec file") for raw in args.specs]

    lines: List[str] = []
    if args.rewrite:
        if catalogue is None:
            _log.error("--rewrite needs --catalogue")
            return EXIT_INFRA
        for fname, specs in process_specs(paths, catalogue, config).items():
            lines.append(dumps(FuncSpec(fname, tuple(specs))))
    else:
        deferred = config.deferred_typing and catalogue is not None
        parser = SpecParser(None if deferred else catalogue, config=config)
        func_specs = parser.parse_files(paths)
        if deferred:
            func_specs = TypeResolver(catalogue, xlen=config.xlen).resolve_func_specs(func_specs)
        for func_spec in func_specs:
            lines.append(dumps(func_spec))

    out = _open_output(args.output)
    try:
        for line in lines:
            out.write(line + "\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


def cmd_template(args: argparse.Namespace) -> int:
    """Handle the 'template' command."""
    catalogue = _load_catalogue(args)
    if catalogue is None:
        _log.error("template needs --catalogue")
        return EXIT_INFRA
    text = function_templates(catalogue, args.function or None)
    out = _open_output(args.output)
    try:
        out.write(text)
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-c", "--catalogue",
        default=None,
        metavar="FILE",
        help="JSON type catalogue (functions and globals).",
    )
    p.add_argument(
        "--xlen",
        type=int,
        default=64,
        help="Machine word width in bits (default: 64).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vspec",
        description="Parse and type-check binary-level function specifications.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    subparsers = parser.add_subparsers(title="commands")

    # --- check -------------------------------------------------------------
    p_check = subparsers.add_parser(
        "check",
        help="Parse and type-check specification files.",
        description="Report syntax, resolution and type errors.",
    )
    p_check.add_argument("specs", nargs="+", metavar="SPEC", help="Specification files.")
    _add_common(p_check)
    p_check.add_argument(
        "--deferred",
        action="store_true",
        help="Parse without the catalogue, then resolve types.",
    )
    p_check.add_argument(
        "-f", "--format",
        choices=["text", "json"],
        default="text",
        help="Diagnostic format (default: text).",
    )
    p_check.set_defaults(func=cmd_check)

    # --- dump-sexp ---------------------------------------------------------
    p_dump = subparsers.add_parser(
        "dump-sexp",
        help="Dump the typed AST as S-expressions.",
        description="Parse specification files and print one S-expression per function.",
    )
    p_dump.add_argument("specs", nargs="+", metavar="SPEC", help="Specification files.")
    _add_common(p_dump)
    p_dump.add_argument(
        "--deferred",
        action="store_true",
        help="Parse without the catalogue, then resolve types.",
    )
    p_dump.add_argument(
        "--rewrite",
        action="store_true",
        help="Rename globals to addresses and fold constants first.",
    )
    p_dump.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    p_dump.set_defaults(func=cmd_dump_sexp)

    # --- template ----------------------------------------------------------
    p_template = subparsers.add_parser(
        "template",
        help="Generate skeleton specification blocks.",
        description="Emit one 'fun' block per catalogue function.",
    )
    _add_common(p_template)
    p_template.add_argument(
        "--function",
        action="append",
        default=[],
        metavar="NAME",
        help="Only this function (repeatable).",
    )
    p_template.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    p_template.set_defaults(func=cmd_template)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the vspec CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    # No subcommand given → print help.
    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except ConfigError as exc:
        _log.error("%s", exc.message)
        return EXIT_INFRA
    except VspecError as exc:
        print(exc.to_gcc_format(), file=sys.stderr)
        return EXIT_INFRA if exc.code.phase is ErrorPhase.CONFIG else EXIT_ERROR
    except OSError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA


if __name__ == "__main__":
    sys.exit(main())
