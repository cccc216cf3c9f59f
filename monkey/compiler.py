"""Monkey compiler — lowers the AST to bytecode plus a constant pool."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .ast import (
    ExpressionStatement,
    InfixExpression,
    IntegerLiteral,
    Node,
    Program,
)
from .code import Opcode, make
from .errors import MonkeyError, recursion_limit
from .objects import Integer, Value

logger = logging.getLogger(__name__)

MAX_CONSTANTS = 0xFFFF + 1  # OP_CONSTANT indexes the pool with a u16


class CompileError(MonkeyError):
    """The AST uses something the compiler cannot lower."""


@dataclass(frozen=True)
class Bytecode:
    instructions: bytes
    constants: tuple[Value, ...]


class Compiler:
    def __init__(self) -> None:
        self.instructions: bytearray = bytearray()
        self.constants: list[Value] = []

    def compile(self, node: Node) -> None:
        try:
            with recursion_limit():
                self._compile(node)
        except RecursionError:
            raise CompileError("expression nested too deeply") from None

    def _compile(self, node: Node) -> None:
        if isinstance(node, Program):
            for st in node.statements:
                self._compile(st)
            return

        if isinstance(node, ExpressionStatement):
            self._compile(node.expression)
            return

        if isinstance(node, InfixExpression):
            self._compile(node.left)
            self._compile(node.right)
            if node.operator == "+":
                self.emit(Opcode.OP_ADD)
                return
            raise CompileError("unknown operator: " + node.operator)

        if isinstance(node, IntegerLiteral):
            self.emit(Opcode.OP_CONSTANT, self.add_constant(Integer(node.value)))
            return

        raise CompileError("unsupported node: " + type(node).__name__)

    def add_constant(self, value: Value) -> int:
        if len(self.constants) >= MAX_CONSTANTS:
            raise CompileError("too many constants")
        self.constants.append(value)
        return len(self.constants) - 1

    def emit(self, op: Opcode, *operands: int) -> int:
        """Append one instruction; returns its byte offset."""
        pos = len(self.instructions)
        self.instructions += make(op, *operands)
        logger.debug("%04d emit %s %s", pos, op.name, list(operands))
        return pos

    def bytecode(self) -> Bytecode:
        return Bytecode(bytes(self.instructions), tuple(self.constants))
