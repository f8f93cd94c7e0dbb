# vspec/grammar.py
"""
PEG grammar of the specification language (parsimonious).

Entry rules:

    func_specs    a sequence of ``fun NAME { ... }`` blocks
    func_spec     exactly one block
    specs         a sequence of bare clauses
    bexpr_entry   one boolean expression
    vexpr_entry   one value expression

Precedence, loosest first: ``|| && ==>`` (one level, right-associative),
prefix ``!`` and quantifiers, comparisons, ``+ - ^ & |``,
``/ * >> >>> << ++``, postfix ``[hi:lo] [e] .f``, atoms.
"""

from __future__ import annotations

from parsimonious.grammar import Grammar

KEYWORDS = (
    "fun", "ensures", "requires", "modifies", "track",
    "forall", "exists", "true", "false", "old", "sext", "uext",
)

SPEC_GRAMMAR = Grammar(r'''
    # ─────────────────────────────────────────────────────────────
    # Entry points
    # ─────────────────────────────────────────────────────────────

    func_specs      = _ func_spec* eof
    func_spec_entry = _ func_spec eof
    specs           = _ spec* eof
    bexpr_entry     = _ bexpr _ eof
    vexpr_entry     = _ vexpr _ eof

    # ─────────────────────────────────────────────────────────────
    # Specifications
    # ─────────────────────────────────────────────────────────────

    func_spec       = kw_fun _ name _ "{" _ spec* "}" _
    spec            = requires_spec / ensures_spec / modifies_spec / track_spec
    requires_spec   = kw_requires _ bexpr _ ";" _
    ensures_spec    = kw_ensures _ bexpr _ ";" _
    modifies_spec   = kw_modifies _ location more_locations _ ";" _
    more_locations  = (_ "," _ location)*
    location        = system_name / name
    track_spec      = kw_track _ "[" _ name _ "]" _ vexpr _ ";" _

    # ─────────────────────────────────────────────────────────────
    # Boolean expressions
    # ─────────────────────────────────────────────────────────────

    bexpr           = bexpr2 bool_tail?
    bool_tail       = _ bool_op _ bexpr
    bool_op         = "||" / "&&" / "==>"
    bexpr2          = negation / quantified / comparison / bool_lit / paren_bexpr
    negation        = "!" !"=" _ bexpr2
    quantified      = quantifier _ bexpr2
    quantifier      = quant_kw _ "(" _ name _ ":" _ bv_type _ ")" _ "::"
    quant_kw        = kw_forall / kw_exists
    comparison      = vexpr _ comp_op _ vexpr
    comp_op         = ">=_u" / "<=_u" / ">_u" / "<_u"
                    / ">=" / "<=" / "==" / "!=" / ">" / "<"
    paren_bexpr     = "(" _ bexpr _ ")"

    # ─────────────────────────────────────────────────────────────
    # Value expressions
    # ─────────────────────────────────────────────────────────────

    vexpr           = vexpr2 add_tail*
    add_tail        = _ add_op _ vexpr2
    add_op          = plus / "-" / "^" / amp / bar
    plus            = "+" !"+"
    amp             = "&" !"&"
    bar             = "|" !"|"
    slash           = "/" !"*"

    vexpr2          = postfix mul_tail*
    mul_tail        = _ mul_op _ postfix
    mul_op          = slash / "*" / ">>>" / ">>" / "<<" / "++"

    postfix         = term selector*
    selector        = _ (slice / index / field)
    slice           = "[" _ nat _ ":" _ nat _ "]"
    index           = "[" _ vexpr _ "]"
    field           = "." _ field_name

    term            = bool_lit / bv_lit / int_lit / func_app / deref
                    / system_name / name / paren_vexpr
    func_app        = builtin _ "(" _ vexpr more_args _ ")"
    more_args       = (_ "," _ vexpr)*
    builtin         = kw_old / kw_sext / kw_uext
    deref           = "*" _ (system_name / name)
    paren_vexpr     = "(" _ vexpr _ ")"

    # ─────────────────────────────────────────────────────────────
    # Lexical
    # ─────────────────────────────────────────────────────────────

    bv_lit          = minus? ~r"(0[xX][0-9a-fA-F]+|[0-9]+)bv([0-9]+)\b"
    int_lit         = minus? ~r"(0[xX][0-9a-fA-F]+|[0-9]+)\b"
    minus           = "-" _
    bool_lit        = kw_true / kw_false
    bv_type         = ~r"bv([0-9]+)\b"
    nat             = ~r"[0-9]+\b"

    system_name     = ~r"\$[A-Za-z_][A-Za-z0-9_]*"
    name            = !keyword ~r"[A-Za-z_][A-Za-z0-9_]*"
    field_name      = ~r"[A-Za-z_][A-Za-z0-9_]*"
    keyword         = ~r"(fun|ensures|requires|modifies|track|forall|exists|true|false|old|sext|uext)\b"

    kw_fun          = ~r"fun\b"
    kw_requires     = ~r"requires\b"
    kw_ensures      = ~r"ensures\b"
    kw_modifies     = ~r"modifies\b"
    kw_track        = ~r"track\b"
    kw_forall       = ~r"forall\b"
    kw_exists       = ~r"exists\b"
    kw_true         = ~r"true\b"
    kw_false        = ~r"false\b"
    kw_old          = ~r"old\b"
    kw_sext         = ~r"sext\b"
    kw_uext         = ~r"uext\b"

    _               = ~r"(?:\s+|//[^\n]*|/\*[\s\S]*?\*/)*"
    eof             = !~r"[\s\S]"
''')

# Characters that can appear outside comments.
ALPHABET = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
    "_$(){}[];:,.+-*/^&|!<>= \t\r\n\f\v"
)
