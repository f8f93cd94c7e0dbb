# tests/test_grammar.py
"""
Tests that the specification PEG grammar accepts and rejects the right
inputs at the grammar level (before the tree builder runs).
"""

import pytest
from parsimonious.exceptions import ParseError

from vspec.grammar import ALPHABET, KEYWORDS, SPEC_GRAMMAR


def accepts(rule, text):
    try:
        SPEC_GRAMMAR[rule].parse(text)
    except ParseError:
        return False
    return True


class TestGrammarWellFormed:

    def test_entry_rules_exist(self):
        for rule in ("func_specs", "func_spec_entry", "specs",
                     "bexpr_entry", "vexpr_entry"):
            assert rule in SPEC_GRAMMAR, f"Rule {rule!r} missing"

    def test_default_rule_is_func_specs(self):
        assert SPEC_GRAMMAR.default_rule.name == "func_specs"

    def test_alphabet_covers_operator_characters(self):
        for ch in "+-^&|/*<>=!$[]{}():;,.":
            assert ch in ALPHABET
        assert "@" not in ALPHABET
        assert "#" not in ALPHABET


class TestFuncSpecs:

    def test_empty_input(self):
        assert accepts("func_specs", "")

    def test_whitespace_and_comments_only(self):
        assert accepts("func_specs", "  // line\n /* block\n comment */ \n")

    def test_empty_block(self):
        assert accepts("func_specs", "fun f { }")

    def test_several_blocks(self):
        text = """
            fun f { requires true; }
            fun g { ensures $a0 == 0bv64; modifies $a0; }
        """
        assert accepts("func_specs", text)

    def test_missing_semicolon(self):
        assert not accepts("func_specs", "fun f { requires true }")

    def test_missing_closing_brace(self):
        assert not accepts("func_specs", "fun f { requires true;")

    def test_func_spec_entry_needs_exactly_one(self):
        assert accepts("func_spec_entry", "fun f { }")
        assert not accepts("func_spec_entry", "fun f { } fun g { }")
        assert not accepts("func_spec_entry", "")


class TestClauses:

    @pytest.mark.parametrize("text", [
        "requires x == y;",
        "ensures $a0 >=_u old($a0);",
        "modifies $a0;",
        "modifies $a0, $a1, g;",
        "track [ret] $a0;",
        "track [ label ] g[7:0];",
    ])
    def test_clause_forms(self, text):
        assert accepts("specs", text)

    def test_modifies_needs_a_location(self):
        assert not accepts("specs", "modifies ;")

    def test_track_needs_label(self):
        assert not accepts("specs", "track $a0;")


class TestBooleanExpressions:

    @pytest.mark.parametrize("text", [
        "true",
        "false",
        "!true",
        "!(a == b)",
        "a == b && c != d",
        "a < b || a > b",
        "a == b ==> c == d",
        "forall (i: bv32) :: i >_u 0bv32",
        "exists (i: bv8) :: (i == 1bv8 || i == 2bv8)",
        "(true)",
        "a <=_u b",
        "a >=_u b",
        "a <_u b",
        "a >_u b",
    ])
    def test_accepted(self, text):
        assert accepts("bexpr_entry", text)

    @pytest.mark.parametrize("text", [
        "a",
        "a == ",
        "a = b",
        "forall i :: true",
        "forall (i: int) :: true",
        "true &&",
    ])
    def test_rejected(self, text):
        assert not accepts("bexpr_entry", text)


class TestValueExpressions:

    @pytest.mark.parametrize("text", [
        "x",
        "$pc",
        "42",
        "-42",
        "0x2A",
        "42bv8",
        "0xffbv8",
        "-1bv64",
        "a + b - c",
        "a ^ b & c | d",
        "a / b * c",
        "a >> 1 >>> 2 << 3",
        "a ++ b",
        "a[7:0]",
        "a[i]",
        "a.b",
        "a[i].b[3:0]",
        "*g",
        "*$sp",
        "old(x)",
        "sext(32, x)",
        "uext(8, x[7:0])",
        "(a + b) * c",
    ])
    def test_accepted(self, text):
        assert accepts("vexpr_entry", text)

    @pytest.mark.parametrize("text", [
        "",
        "a +",
        "a[7:]",
        "$",
        "$1a",
        "old()",
        "*(a)",
        "a.",
    ])
    def test_rejected(self, text):
        assert not accepts("vexpr_entry", text)


class TestKeywords:

    @pytest.mark.parametrize(
        "keyword", [k for k in KEYWORDS if k not in ("true", "false")]
    )
    def test_keyword_is_not_a_name(self, keyword):
        assert not accepts("vexpr_entry", f"{keyword} + 1")

    def test_keyword_prefix_is_a_name(self):
        assert accepts("vexpr_entry", "function + oldval + trueish")

    def test_keyword_cannot_name_a_function(self):
        assert not accepts("func_specs", "fun requires { }")


class TestComments:

    def test_line_comment_inside_expression(self):
        assert accepts("bexpr_entry", "a == // trailing\n b")

    def test_block_comment_inside_expression(self):
        assert accepts("vexpr_entry", "a /* plus */ + b")

    def test_slash_star_always_opens_a_comment(self):
        # `a /*b */ + c` is `a + c`, never `a / *b ...`.
        assert accepts("vexpr_entry", "a /*b */ + c")
        assert not accepts("vexpr_entry", "a /*b")
        assert not accepts("vexpr_entry", "a/*b")

    def test_division_by_deref_needs_a_space(self):
        assert accepts("vexpr_entry", "a / *b")

    def test_comment_between_clauses(self):
        assert accepts("specs", "requires true; // first\n/* second */ ensures true;")
