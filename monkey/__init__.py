"""Monkey parser, evaluator and bytecode VM — public API."""

from __future__ import annotations

from .ast import Program
from .compiler import Bytecode, CompileError as CompileError, Compiler
from .errors import MonkeyError as MonkeyError
from .evaluator import evaluate as evaluate_node
from .objects import Environment, Value
from .parse import ParseError as ParseError, parse_program
from .tokens import Lexer as Lexer, tokenize as tokenize
from .vm import VM, VMError as VMError


def parse(source: str) -> Program:
    """Parse Monkey source code into a Program AST.

    Raises ParseError carrying every collected message if parsing failed.
    """
    program, errors = parse_program(source)
    if errors:
        raise ParseError(errors)
    return program


def evaluate(source: str, env: Environment | None = None) -> Value:
    """Parse and evaluate source with the tree-walking evaluator."""
    return evaluate_node(parse(source), env)


def compile_program(source: str) -> Bytecode:
    """Parse and compile source to bytecode."""
    compiler = Compiler()
    compiler.compile(parse(source))
    return compiler.bytecode()


def execute(source: str) -> Value | None:
    """Compile source and run it on the VM; returns the top of the stack."""
    machine = VM(compile_program(source))
    machine.run()
    return machine.stack_top()
