# tests/conftest.py
"""
Shared fixtures: a small type catalogue and parsers built over it.

Catalogue contents
------------------
globals
    g       4-byte scalar            @ 0x1000
    s       struct point {a, p}      @ 0x2000
    arr     array of 4-byte scalars  @ 0x3000
    sarr    array of struct point    @ 0x4000
    x       2-byte scalar            @ 0x5000   (shadowed by f's formal)
    noaddr  1-byte scalar            (no address)
functions
    f(x, y)   two 8-byte arguments
    h()       no arguments
"""

import json

import pytest

from vspec.catalogue import InMemoryCatalogue
from vspec.config import ParserConfig
from vspec.nominal import Array, Pointer, Scalar, Struct, StructField
from vspec.parser import SpecParser
from vspec.resolver import TypeResolver

POINT = Struct(
    "point",
    (
        StructField("a", Scalar(32), 0),
        StructField("p", Pointer(Scalar(32), 64), 8),
    ),
    16,
)

CATALOGUE_JSON = {
    "functions": {
        "f": [
            {"name": "x", "type": {"kind": "base", "bytes": 8}},
            {"name": "y", "type": {"kind": "base", "bytes": 8}},
        ],
        "h": [],
    },
    "globals": {
        "g": {"type": {"kind": "base", "bytes": 4}, "address": 4096},
        "s": {
            "type": {
                "kind": "struct",
                "name": "point",
                "bytes": 16,
                "fields": [
                    {"name": "a", "type": {"kind": "base", "bytes": 4}, "offset": 0},
                    {
                        "name": "p",
                        "type": {"kind": "pointer", "bytes": 8,
                                 "to": {"kind": "base", "bytes": 4}},
                        "offset": 8,
                    },
                ],
            },
            "address": 8192,
        },
    },
}


@pytest.fixture
def catalogue():
    cat = InMemoryCatalogue()
    cat.add_global("g", Scalar(32), 0x1000)
    cat.add_global("s", POINT, 0x2000)
    cat.add_global("arr", Array(Scalar(32)), 0x3000)
    cat.add_global("sarr", Array(POINT), 0x4000)
    cat.add_global("x", Scalar(16), 0x5000)
    cat.add_global("noaddr", Scalar(8))
    cat.add_function("f", [("x", Scalar(64)), ("y", Scalar(64))])
    cat.add_function("h", [])
    return cat


@pytest.fixture
def parser(catalogue):
    """Parser that types while parsing."""
    return SpecParser(catalogue)


@pytest.fixture
def parser32(catalogue):
    return SpecParser(catalogue, config=ParserConfig(xlen=32))


@pytest.fixture
def untyped():
    """Parser without a catalogue (placeholder types)."""
    return SpecParser()


@pytest.fixture
def resolver(catalogue):
    return TypeResolver(catalogue)


@pytest.fixture
def point():
    return POINT


@pytest.fixture
def catalogue_data():
    return CATALOGUE_JSON


@pytest.fixture
def catalogue_file(tmp_path):
    path = tmp_path / "prog.json"
    path.write_text(json.dumps(CATALOGUE_JSON), encoding="utf-8")
    return path


@pytest.fixture
def write_spec(tmp_path):
    """Write spec text to a file under tmp_path and return its path."""

    def _write(text, name="prog.spec"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
