# tests/test_passes.py
"""
Tests for the rewrite passes (global renaming, constant folding) and the
multi-file ``process_specs`` pipeline.
"""

import logging

import pytest

from vspec import ast as A
from vspec.config import ParserConfig
from vspec.errors import UndefinedGlobalError
from vspec.passes import MEM_ACCESS_PREFIX, fold_constants, process_specs, rename_globals

BV8 = A.BvType(8)
BV32 = A.BvType(32)
BV64 = A.BvType(64)


def bv(value, width):
    return A.BvLit(value, A.BvType(width))


class TestRenameGlobals:

    def test_global_becomes_address(self, parser, catalogue):
        node = rename_globals(parser.parse_vexpr("g"), catalogue)
        assert node == A.OpApp(A.ValueOp.DEREF, (A.BvLit(0x1000, BV32),), BV32)

    def test_address_keeps_aggregate_type(self, parser, catalogue):
        node = rename_globals(parser.parse_vexpr("arr[1bv64]"), catalogue)
        (address,) = node.operands
        base, _ = address.operands
        assert base == A.BvLit(0x3000, A.ArrayType(BV64, BV32))

    def test_formals_are_kept(self, parser, catalogue):
        node = parser.parse_vexpr("x", function="f")
        assert rename_globals(node, catalogue, "f") == node

    def test_formal_scope_follows_func_spec(self, parser, catalogue):
        (fs,) = parser.parse_specs("fun f { requires x == y; }")
        assert rename_globals(fs, catalogue) == fs

    def test_system_names_are_kept(self, parser, catalogue):
        node = parser.parse_vexpr("$a0")
        assert rename_globals(node, catalogue) == node

    def test_bound_variables_are_kept(self, parser, catalogue):
        expr = parser.parse_bexpr("forall (g: bv32) :: g == 0bv32")
        assert rename_globals(expr, catalogue) == expr

    def test_field_names_are_not_globals(self, catalogue):
        # A field that happens to share a global's name.
        field = A.Ident("g", BV32)
        base = A.Ident("s", A.StructType("point", (("g", BV32),), 4))
        node = A.OpApp(A.ValueOp.GET_FIELD, (base, field), BV32)
        renamed = rename_globals(node, catalogue)
        assert renamed.operands[1] == field
        assert renamed.operands[0] == A.BvLit(0x2000, base.type)

    def test_global_without_address(self, parser, catalogue, caplog):
        node = parser.parse_vexpr("noaddr")
        with caplog.at_level(logging.WARNING, logger="vspec"):
            assert rename_globals(node, catalogue) == node
        assert "noaddr" in caplog.text


class TestFoldConstants:

    @pytest.mark.parametrize("text, expected", [
        ("1bv8 + 255bv8", bv(0, 8)),
        ("3bv8 - 5bv8", bv(254, 8)),
        ("16bv8 * 16bv8", bv(0, 8)),
        ("7bv8 / 2bv8", bv(3, 8)),
        ("0xf0bv8 ^ 0xffbv8", bv(0x0F, 8)),
        ("0xf0bv8 & 0x3cbv8", bv(0x30, 8)),
        ("0xf0bv8 | 0x0fbv8", bv(0xFF, 8)),
        ("1bv8 << 3", bv(8, 8)),
        ("1bv8 << 9", bv(0, 8)),
        ("0x80bv8 >>> 1", bv(0x40, 8)),
        ("0x80bv8 >> 1", bv(0xC0, 8)),
        ("1bv4 ++ 2bv4", bv(0x12, 8)),
        ("(0xf0bv8)[7:4]", bv(7, 3)),
    ])
    def test_bit_vector_ops(self, untyped, text, expected):
        assert fold_constants(untyped.parse_vexpr(text)) == expected

    @pytest.mark.parametrize("text, value", [
        ("2 * 3 + 1", 7),
        ("-7 / 2", -3),
        ("7 / -2", -3),
        ("-8 >> 1", -4),
        ("9223372036854775807 + 1", -(1 << 63)),
    ])
    def test_integer_ops(self, untyped, text, value):
        assert fold_constants(untyped.parse_vexpr(text)) == A.IntLit(value)

    def test_division_by_zero_is_kept(self, untyped):
        node = untyped.parse_vexpr("5bv8 / 0bv8")
        assert fold_constants(node) == node

    def test_symbolic_operands_are_kept(self, parser):
        node = parser.parse_vexpr("g + 1bv32")
        assert fold_constants(node) == node

    def test_partial_folding(self, parser):
        node = fold_constants(parser.parse_vexpr("g + (1bv32 + 2bv32)"))
        assert node.operands[1] == bv(3, 32)

    def test_deref_of_address(self):
        node = A.OpApp(A.ValueOp.DEREF, (A.BvLit(0x1000, BV32),), BV32)
        assert fold_constants(node) == A.Ident(f"{MEM_ACCESS_PREFIX}4096", BV32)

    def test_index_of_address(self):
        arr = A.BvLit(0x3000, A.ArrayType(BV64, BV32))
        node = A.OpApp(A.ValueOp.ARRAY_INDEX, (arr, bv(2, 64)), BV32)
        assert fold_constants(node) == A.BvLit(0x3008, BV32)

    def test_folds_inside_conditions(self, untyped):
        (fs,) = untyped.parse_specs("fun f { requires 1bv8 + 1bv8 == 2bv8; }")
        folded = fold_constants(fs)
        (cond,) = folded.requires()
        assert cond.operands == (bv(2, 8), bv(2, 8))


class TestProcessSpecs:

    def test_memory_cells(self, catalogue, write_spec):
        path = write_spec("""
            fun h {
                requires g == 5bv32;
                ensures arr[2bv64] == g;
            }
        """)
        result = process_specs([path], catalogue)
        (requires, ensures) = result["h"]
        g_cell = A.Ident(f"{MEM_ACCESS_PREFIX}{0x1000}", BV32)
        assert requires == A.Requires(A.COpApp(A.CompOp.EQUAL, (g_cell, bv(5, 32))))
        arr_cell = A.Ident(f"{MEM_ACCESS_PREFIX}{0x3008}", BV32)
        assert ensures == A.Ensures(A.COpApp(A.CompOp.EQUAL, (arr_cell, g_cell)))

    def test_modifies_and_track_untouched(self, catalogue, write_spec):
        path = write_spec("fun h { modifies g; track [t] g; }")
        specs = process_specs([path], catalogue)["h"]
        assert specs[0] == A.Modifies(frozenset({"g"}))
        assert specs[1] == A.Track(
            "t", A.OpApp(A.ValueOp.DEREF, (A.Ident("g", BV32),), BV32)
        )

    def test_formals_survive(self, catalogue, write_spec):
        path = write_spec("fun f { requires x == 1bv32 ++ 2bv32; }")
        (requires,) = process_specs([path], catalogue)["f"]
        assert requires.condition.operands == (
            A.Ident("x", BV64),
            bv((1 << 32) | 2, 64),
        )

    def test_several_files(self, catalogue, write_spec):
        first = write_spec("fun f { requires true; }", "a.spec")
        second = write_spec("fun h { ensures true; }", "b.spec")
        result = process_specs([first, second], catalogue)
        assert sorted(result) == ["f", "h"]

    def test_duplicate_function_last_wins(self, catalogue, write_spec, caplog):
        first = write_spec("fun h { requires true; }", "a.spec")
        second = write_spec("fun h { requires false; }", "b.spec")
        with caplog.at_level(logging.WARNING, logger="vspec"):
            result = process_specs([first, second], catalogue)
        assert result["h"] == [A.Requires(A.BoolConst(False))]
        assert "more than once" in caplog.text

    def test_deferred_typing_gives_same_result(self, catalogue, write_spec):
        path = write_spec("fun f { requires arr[x] == g && y != 0bv64; }")
        eager = process_specs([path], catalogue)
        deferred = process_specs([path], catalogue, ParserConfig(deferred_typing=True))
        assert deferred == eager

    def test_errors_propagate(self, catalogue, write_spec):
        path = write_spec("fun h { requires missing == 0bv8; }")
        with pytest.raises(UndefinedGlobalError):
            process_specs([path], catalogue)
