# tests/test_sexp.py
"""
Tests for the canonical S-expression dump of the AST.
"""

import pytest
from sexpdata import Symbol, loads

from vspec import ast as A
from vspec.sexp import dumps, to_sexp, type_to_sexp


class TestTypes:

    def test_scalar_types(self):
        assert type_to_sexp(A.BvType(8)) == [Symbol("bv"), 8]
        assert type_to_sexp(A.INT) == Symbol("int")
        assert type_to_sexp(A.BOOL) == Symbol("bool")
        assert type_to_sexp(A.UNKNOWN) == Symbol("unknown")

    def test_aggregate_types(self):
        arr = A.ArrayType(A.BvType(64), A.BvType(32))
        assert type_to_sexp(arr) == [Symbol("array"), [Symbol("bv"), 64], [Symbol("bv"), 32]]
        st = A.StructType("point", (("a", A.BvType(32)),), 16)
        assert type_to_sexp(st) == [Symbol("struct"), Symbol("point"), 16]


class TestValues:

    def test_binary(self, untyped):
        assert dumps(untyped.parse_vexpr("1bv8 + 2bv8")) == "(add (bv 8) (bv 1 8) (bv 2 8))"

    def test_integer(self, untyped):
        assert dumps(untyped.parse_vexpr("-3")) == "(int -3)"

    def test_global(self, parser):
        assert dumps(parser.parse_vexpr("g")) == "(deref (bv 32) (ident g (bv 32)))"

    def test_slice(self, parser):
        assert dumps(parser.parse_vexpr("$pc[8:0]")) == (
            "((slice 8 0) (bv 8) (ident $pc (bv 64)))"
        )

    def test_call(self, parser):
        assert dumps(parser.parse_vexpr("old($a0)")) == (
            "(call old (bv 64) (ident $a0 (bv 64)))"
        )

    def test_address_literal_keeps_type(self):
        lit = A.BvLit(4096, A.ArrayType(A.BvType(64), A.BvType(8)))
        assert dumps(lit) == "(bv 4096 (array (bv 64) (bv 8)))"

    def test_placeholder_type(self, untyped):
        assert dumps(untyped.parse_vexpr("q")) == "(ident q unknown)"


class TestBooleans:

    def test_constant(self, parser):
        assert dumps(parser.parse_bexpr("true")) == "(const true)"

    def test_comparison(self, parser):
        assert dumps(parser.parse_bexpr("1 <= 2")) == "(<= (int 1) (int 2))"

    def test_unsigned_comparison(self, parser):
        text = dumps(parser.parse_bexpr("$a0 >=_u $a1"))
        assert text.startswith("(>=_u ")

    def test_connectives(self, parser):
        assert dumps(parser.parse_bexpr("!true ==> false")) == (
            "(implies (not (const true)) (const false))"
        )

    def test_quantifier(self, parser):
        assert dumps(parser.parse_bexpr("forall (i: bv8) :: i == i")) == (
            "(forall (i (bv 8)) (== (ident i (bv 8)) (ident i (bv 8))))"
        )


class TestSpecs:

    def test_func_spec(self, parser):
        (fs,) = parser.parse_specs(
            "fun h { requires true; modifies g, $a0; track [r] $a0; }"
        )
        assert dumps(fs) == (
            "(fun h (requires (const true)) (modifies $a0 g) "
            "(track r (ident $a0 (bv 64))))"
        )

    def test_list_of_specs(self, parser):
        specs = parser.parse_specs("fun h { } fun f { }")
        assert dumps(specs) == "((fun h) (fun f))"

    def test_reads_back(self, parser):
        (fs,) = parser.parse_specs("fun f { ensures x == y; }")
        tree = loads(dumps(fs))
        assert tree[0] == Symbol("fun")
        assert tree[1] == Symbol("f")

    def test_rejects_foreign_objects(self):
        with pytest.raises(TypeError):
            to_sexp(object())
