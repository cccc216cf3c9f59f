"""CLI tests: the REPL loop and file runner, driven in-process."""

import io
import subprocess
import sys
from pathlib import Path

import pytest

from monkey import cli
from monkey.cli import USAGE, main, start

ROOT_DIR = Path(__file__).parent.parent


def _repl(lines: str, engine: str = "vm") -> str:
    out = io.StringIO()
    assert start(io.StringIO(lines), out, engine) == 0
    return out.getvalue()


# ── REPL ────────────────────────────────────────────────────


def test_repl_prints_numbered_results():
    assert _repl("1 + 2\n3 + 4\n") == ">> [1] 3\n>> [2] 7\n>> "


def test_repl_quit():
    assert _repl("quit\n1 + 2\n") == ">> Exiting...\n"


def test_repl_eof_without_newline():
    assert _repl("1") == ">> [1] 1\n>> "


def test_repl_empty_line_prints_nothing():
    assert _repl("\n") == ">> >> "


def test_repl_parser_errors():
    assert _repl("let = 1\n") == (
        ">> Parser Errors:\n"
        "\texpected next token to be IDENT, got = instead\n"
        "\tno prefix parse function for = found\n"
        ">> "
    )


def test_repl_compilation_failure():
    assert _repl("true\n") == (
        ">> Woops! Compilation failed:\nunsupported node: Boolean\n>> "
    )


def test_repl_execution_failure():
    line = " ".join(["1;"] * 2049) + "\n"
    assert _repl(line) == (
        ">> Woops! Executing bytecode failed:\nstack overflow\n>> "
    )


def test_repl_result_numbering_skips_failures():
    assert _repl("1\ntrue\n2\n") == (
        ">> [1] 1\n>> Woops! Compilation failed:\nunsupported node: Boolean\n"
        ">> [2] 2\n>> "
    )


def test_repl_eval_engine_keeps_bindings():
    out = _repl("let x = 5;\nx * 2\nlet f = fn(n) { n + x };\nf(1)\n", "eval")
    assert out == ">> >> [1] 10\n>> >> [2] 6\n>> "


def test_repl_eval_engine_shows_errors():
    out = _repl("foo\n", "eval")
    assert out == ">> [1] ERROR: identifier not found: foo\n>> "


def test_repl_eval_engine_shows_null():
    out = _repl("if (false) { 1 }\n", "eval")
    assert out == ">> [1] null\n>> "


def test_repl_eval_engine_skips_empty_lines():
    assert _repl("\n   \n", "eval") == ">> >> >> "


# ── Command line ────────────────────────────────────────────


def test_help(capsys):
    assert main(["--help"]) == 0
    assert capsys.readouterr().out == USAGE


@pytest.mark.parametrize(
    "argv,message",
    [
        (["--bogus"], "monkey: unknown flag '--bogus'"),
        (["--engine"], "monkey: --engine requires a value"),
        (["--engine", "jit"], "monkey: unknown engine 'jit'"),
        (["--engine=jit"], "monkey: unknown engine 'jit'"),
        (["a.monkey", "b.monkey"], "monkey: unexpected argument 'b.monkey'"),
    ],
)
def test_usage_errors(capsys, argv: list[str], message: str):
    assert main(argv) == 2
    assert capsys.readouterr().err == message + "\n"


def test_repl_banner(monkeypatch, capsys):
    monkeypatch.setattr(cli, "_username", lambda: "tester")
    monkeypatch.setattr("sys.stdin", io.StringIO("quit\n"))
    assert main([]) == 0
    assert capsys.readouterr().out == (
        "Hello tester! This is the Monkey programming language REPL!\n"
        "Try out my language by typing in commands\n"
        ">> Exiting...\n"
    )


@pytest.mark.parametrize(
    "argv,source,stdout",
    [
        ([], "1 + 2 + 3", "6\n"),
        (["--engine", "vm"], "1; 2", "2\n"),
        (["--engine", "eval"], "let double = fn(x) { x * 2 }; double(21)", "42\n"),
        (["--engine=eval"], 'let s = "mon" + "key"; s', "monkey\n"),
        (["--engine=eval"], "let x = 1;", ""),
        (["--engine=eval"], 'puts("hi")', "hi\n"),
        ([], "", ""),
    ],
)
def test_run_file(tmp_path, capsys, argv: list[str], source: str, stdout: str):
    path = tmp_path / "prog.monkey"
    path.write_text(source)
    assert main(argv + [str(path)]) == 0
    captured = capsys.readouterr()
    assert captured.out == stdout
    assert captured.err == ""


@pytest.mark.parametrize(
    "argv,source,stderr",
    [
        (
            [],
            "let = 1",
            "monkey: parse error: expected next token to be IDENT, got = instead\n"
            "monkey: parse error: no prefix parse function for = found\n",
        ),
        ([], "true", "monkey: compile error: unsupported node: Boolean\n"),
        (
            ["--engine", "eval"],
            "1 + x",
            "monkey: runtime error: identifier not found: x\n",
        ),
    ],
)
def test_run_file_errors(tmp_path, capsys, argv: list[str], source: str, stderr: str):
    path = tmp_path / "prog.monkey"
    path.write_text(source)
    assert main(argv + [str(path)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == stderr


def test_run_file_vm_runtime_error(tmp_path, capsys):
    path = tmp_path / "prog.monkey"
    path.write_text(" ".join(["1;"] * 2049))
    assert main([str(path)]) == 1
    assert capsys.readouterr().err == "monkey: runtime error: stack overflow\n"


def test_missing_file(tmp_path, capsys):
    path = tmp_path / "missing.monkey"
    assert main([str(path)]) == 1
    err = capsys.readouterr().err
    assert err == "monkey: " + str(path) + ": No such file or directory\n"


def test_invalid_utf8(tmp_path, capsys):
    path = tmp_path / "bad.monkey"
    path.write_bytes(b"\xff\xfe")
    assert main([str(path)]) == 1
    assert capsys.readouterr().err == "monkey: " + str(path) + ": invalid utf-8\n"


def test_module_entry_point():
    result = subprocess.run(
        [sys.executable, "-m", "monkey.cli", "--engine", "vm"],
        input="1 + 41\nquit\n",
        capture_output=True,
        text=True,
        cwd=ROOT_DIR,
    )
    assert result.returncode == 0
    assert result.stdout.endswith(">> [1] 42\n>> Exiting...\n")
    assert "This is the Monkey programming language REPL!" in result.stdout


def test_repl_too_many_constants():
    line = " ".join(["1;"] * 65537) + "\n"
    assert _repl(line) == (
        ">> Woops! Compilation failed:\ntoo many constants\n>> "
    )


def test_repl_long_sum_on_vm():
    line = " + ".join(["1"] * 1500) + "\n"
    assert _repl(line) == ">> [1] 1500\n>> "


def test_repl_deep_grouping_on_eval():
    line = "(" * 600 + "1" + ")" * 600 + "\n"
    assert _repl(line, "eval") == ">> [1] 1\n>> "


def test_repl_nesting_too_deep():
    line = "(" * 6000 + "1" + ")" * 6000 + "\n"
    assert _repl(line) == (
        ">> Parser Errors:\n\texpression nested too deeply\n>> "
    )
