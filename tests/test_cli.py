# tests/test_cli.py
"""
Tests for the command-line interface (vspec.main).
"""

import json
import logging

import pytest

from vspec import __version__
from vspec.main import EXIT_ERROR, EXIT_INFRA, EXIT_OK, main

GOOD_SPEC = """
fun f {
    requires x >_u 0bv64;
    ensures $a0 == old(x) && g == 0bv32;
    modifies $a0, g;
}
"""

BAD_SPEC = """
fun f {
    requires nope == 0bv64;
}
"""


@pytest.fixture(autouse=True)
def _reset_cli_logging():
    yield
    logger = logging.getLogger("vspec")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


class TestMainBasics:

    def test_no_command_prints_help(self, capsys):
        assert main([]) == EXIT_INFRA
        assert "usage:" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--version"])
        assert info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_missing_spec_file(self, tmp_path, capsys):
        assert main(["check", str(tmp_path / "absent.spec")]) == EXIT_INFRA
        assert "not found" in capsys.readouterr().err


class TestCheck:

    def test_ok_with_catalogue(self, write_spec, catalogue_file, capsys):
        spec = write_spec(GOOD_SPEC)
        assert main(["check", str(spec), "--catalogue", str(catalogue_file)]) == EXIT_OK
        assert "OK: 1 function block(s) in 1 file(s)" in capsys.readouterr().out

    def test_syntax_only(self, write_spec, capsys):
        spec = write_spec(BAD_SPEC)
        assert main(["check", str(spec)]) == EXIT_OK

    def test_resolution_error(self, write_spec, catalogue_file, capsys):
        spec = write_spec(BAD_SPEC)
        code = main(["check", str(spec), "-c", str(catalogue_file)])
        assert code == EXIT_ERROR
        err = capsys.readouterr().err
        assert "VSPEC-3001" in err
        assert "requires nope == 0bv64;" in err

    def test_deferred_reports_same_error(self, write_spec, catalogue_file, capsys):
        spec = write_spec(BAD_SPEC)
        code = main(["check", str(spec), "-c", str(catalogue_file), "--deferred"])
        assert code == EXIT_ERROR
        assert "VSPEC-3001" in capsys.readouterr().err

    def test_json_format(self, write_spec, catalogue_file, capsys):
        spec = write_spec("fun f { requires true }")
        code = main(["check", str(spec), "-c", str(catalogue_file), "--format", "json"])
        assert code == EXIT_ERROR
        data = json.loads(capsys.readouterr().err)
        assert data[0]["code"] == "VSPEC-1000"
        assert data[0]["location"]["file"].endswith("prog.spec")

    def test_multiple_files(self, write_spec, catalogue_file, capsys):
        good = write_spec(GOOD_SPEC, "good.spec")
        bad = write_spec(BAD_SPEC, "bad.spec")
        code = main(["check", str(good), str(bad), "-c", str(catalogue_file)])
        assert code == EXIT_ERROR
        assert "bad.spec" in capsys.readouterr().err

    def test_bad_catalogue(self, write_spec, tmp_path, capsys):
        spec = write_spec(GOOD_SPEC)
        cat = tmp_path / "broken.json"
        cat.write_text("[]", encoding="utf-8")
        assert main(["check", str(spec), "-c", str(cat)]) == EXIT_INFRA
        assert "VSPEC-8000" in capsys.readouterr().err

    def test_bad_xlen(self, write_spec, capsys):
        spec = write_spec(GOOD_SPEC)
        assert main(["check", str(spec), "--xlen", "0"]) == EXIT_INFRA


class TestDumpSexp:

    def test_typed_dump(self, write_spec, catalogue_file, capsys):
        spec = write_spec("fun h { requires g == 1bv32; }")
        assert main(["dump-sexp", str(spec), "-c", str(catalogue_file)]) == EXIT_OK
        out = capsys.readouterr().out
        assert out == (
            "(fun h (requires (== (deref (bv 32) (ident g (bv 32))) (bv 1 32))))\n"
        )

    def test_deferred_dump_matches_typed(self, write_spec, catalogue_file, capsys):
        spec = write_spec(GOOD_SPEC)
        assert main(["dump-sexp", str(spec), "-c", str(catalogue_file)]) == EXIT_OK
        typed = capsys.readouterr().out
        code = main(["dump-sexp", str(spec), "-c", str(catalogue_file), "--deferred"])
        assert code == EXIT_OK
        assert capsys.readouterr().out == typed
        assert "unknown" not in typed

    def test_deferred_dump_resolves_names(self, write_spec, catalogue_file, capsys):
        spec = write_spec(BAD_SPEC)
        code = main(["dump-sexp", str(spec), "-c", str(catalogue_file), "--deferred"])
        assert code == EXIT_ERROR
        assert "VSPEC-3001" in capsys.readouterr().err

    def test_rewrite(self, write_spec, catalogue_file, capsys):
        spec = write_spec("fun h { requires g == 1bv32; }")
        code = main(["dump-sexp", str(spec), "-c", str(catalogue_file), "--rewrite"])
        assert code == EXIT_OK
        out = capsys.readouterr().out
        assert out == "(fun h (requires (== (ident mem_access_4096 (bv 32)) (bv 1 32))))\n"

    def test_rewrite_needs_catalogue(self, write_spec, capsys):
        spec = write_spec("fun h { }")
        assert main(["dump-sexp", str(spec), "--rewrite"]) == EXIT_INFRA

    def test_output_file(self, write_spec, tmp_path, capsys):
        spec = write_spec("fun h { }")
        out = tmp_path / "out.sexp"
        assert main(["dump-sexp", str(spec), "-o", str(out)]) == EXIT_OK
        assert out.read_text(encoding="utf-8") == "(fun h)\n"

    def test_error_exit(self, write_spec, catalogue_file, capsys):
        spec = write_spec(BAD_SPEC)
        assert main(["dump-sexp", str(spec), "-c", str(catalogue_file)]) == EXIT_ERROR
        assert "VSPEC-3001" in capsys.readouterr().err


class TestTemplate:

    def test_all_functions(self, catalogue_file, capsys):
        assert main(["template", "-c", str(catalogue_file)]) == EXIT_OK
        out = capsys.readouterr().out
        assert "fun f {" in out
        assert "fun h {" in out

    def test_selected_function_to_file(self, catalogue_file, tmp_path, capsys):
        out = tmp_path / "skeleton.spec"
        code = main([
            "template", "-c", str(catalogue_file), "--function", "f", "-o", str(out),
        ])
        assert code == EXIT_OK
        assert out.read_text(encoding="utf-8").startswith("fun f {\n    // arguments: x, y")

    def test_needs_catalogue(self, capsys):
        assert main(["template"]) == EXIT_INFRA

    def test_template_round_trip(self, catalogue_file, tmp_path, capsys):
        out = tmp_path / "skeleton.spec"
        assert main(["template", "-c", str(catalogue_file), "-o", str(out)]) == EXIT_OK
        assert main(["check", str(out), "-c", str(catalogue_file)]) == EXIT_OK
        assert "OK: 2 function block(s)" in capsys.readouterr().out
