"""Monkey CLI — interactive REPL, or run a .monkey file."""

from __future__ import annotations

import getpass
import logging
import os
import sys
from typing import TextIO

from .ast import LetStatement, Program
from .compiler import CompileError, Compiler
from .evaluator import evaluate
from .objects import NULL, Environment, Error, Value
from .parse import parse_program
from .vm import VM, VMError

PROMPT: str = ">> "

ENGINES: tuple[str, ...] = ("vm", "eval")

USAGE: str = """\
monkey [OPTIONS] [FILE]

Run a Monkey program, or start the REPL when no FILE is given.

Options:
  --engine ENGINE    Execution engine: vm (default) or eval
  --help             Show this help message

Set TRACE_PARSER in the environment to log parser activity to stderr.
"""


def _username() -> str:
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        return "there"


def _print_parser_errors(out: TextIO, errors: list[str]) -> None:
    out.write("Parser Errors:\n")
    for msg in errors:
        out.write("\t" + msg + "\n")


def _run_vm(program: Program) -> Value | None:
    """Compile and execute; CompileError and VMError propagate."""
    compiler = Compiler()
    compiler.compile(program)
    machine = VM(compiler.bytecode())
    machine.run()
    return machine.stack_top()


def start(in_: TextIO, out: TextIO, engine: str = "vm") -> int:
    """Read-eval-print loop until `quit` or end of input."""
    env = Environment()
    num = 0
    while True:
        out.write(PROMPT)
        out.flush()
        line = in_.readline()
        if line == "":
            return 0
        line = line.rstrip("\r\n")
        if line == "quit":
            out.write("Exiting...\n")
            return 0

        program, errors = parse_program(line)
        if errors:
            _print_parser_errors(out, errors)
            continue

        result: Value | None
        if engine == "vm":
            try:
                result = _run_vm(program)
            except CompileError as e:
                out.write("Woops! Compilation failed:\n" + str(e) + "\n")
                continue
            except VMError as e:
                out.write("Woops! Executing bytecode failed:\n" + str(e) + "\n")
                continue
        else:
            if not program.statements:
                continue
            result = evaluate(program, env)
            if result is NULL and isinstance(program.statements[-1], LetStatement):
                result = None

        if result is not None:
            num += 1
            out.write("[" + str(num) + "] " + result.inspect() + "\n")


def run_file(filepath: str, engine: str) -> int:
    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("monkey: " + filepath + ": No such file or directory", file=sys.stderr)
        return 1
    except OSError as e:
        print("monkey: " + filepath + ": " + str(e), file=sys.stderr)
        return 1
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("monkey: " + filepath + ": invalid utf-8", file=sys.stderr)
        return 1

    program, errors = parse_program(source)
    if errors:
        for msg in errors:
            print("monkey: parse error: " + msg, file=sys.stderr)
        return 1

    result: Value | None
    if engine == "vm":
        try:
            result = _run_vm(program)
        except CompileError as e:
            print("monkey: compile error: " + str(e), file=sys.stderr)
            return 1
        except VMError as e:
            print("monkey: runtime error: " + str(e), file=sys.stderr)
            return 1
    else:
        result = evaluate(program)
        if isinstance(result, Error):
            print("monkey: runtime error: " + result.message, file=sys.stderr)
            return 1

    if result is not None and result is not NULL:
        print(result.inspect())
    return 0


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    engine: str = "vm"
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--engine" or arg.startswith("--engine="):
            if arg == "--engine":
                if i + 1 >= len(args):
                    print("monkey: --engine requires a value", file=sys.stderr)
                    return 2
                engine = args[i + 1]
                i += 2
            else:
                engine = arg[len("--engine=") :]
                i += 1
            if engine not in ENGINES:
                print("monkey: unknown engine '" + engine + "'", file=sys.stderr)
                return 2
        elif arg.startswith("-"):
            print("monkey: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("monkey: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2

    if "TRACE_PARSER" in os.environ:
        logging.basicConfig(
            level=logging.DEBUG, stream=sys.stderr, format="%(message)s"
        )

    if filepath != "":
        return run_file(filepath, engine)

    print("Hello " + _username() + "! This is the Monkey programming language REPL!")
    print("Try out my language by typing in commands")
    return start(sys.stdin, sys.stdout, engine)


if __name__ == "__main__":
    sys.exit(main())
