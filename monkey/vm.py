"""Monkey virtual machine — executes bytecode on a fixed-size value stack."""

from __future__ import annotations

import logging
from typing import cast

from .code import Opcode, read_uint16
from .compiler import Bytecode
from .errors import MonkeyError
from .objects import Integer, Value, wrap_int64

logger = logging.getLogger(__name__)

STACK_SIZE = 2048


class VMError(MonkeyError):
    """Execution stopped on a fault; the stack is left as it was."""


class VM:
    def __init__(self, bytecode: Bytecode):
        self.constants: tuple[Value, ...] = bytecode.constants
        self.instructions: bytes = bytecode.instructions
        self.stack: list[Value | None] = [None] * STACK_SIZE
        self.sp: int = 0  # next free slot; top of stack is stack[sp - 1]

    def stack_top(self) -> Value | None:
        if self.sp == 0:
            return None
        return self.stack[self.sp - 1]

    def run(self) -> None:
        ip = 0
        ins = self.instructions
        while ip < len(ins):
            op = ins[ip]
            if op == Opcode.OP_CONSTANT:
                const_index = read_uint16(ins, ip + 1)
                ip += 3
                if const_index >= len(self.constants):
                    raise VMError("constant " + str(const_index) + " out of range")
                self.push(self.constants[const_index])
            elif op == Opcode.OP_ADD:
                ip += 1
                right = self.pop()
                left = self.pop()
                if not isinstance(left, Integer) or not isinstance(right, Integer):
                    raise VMError(
                        "unsupported types for binary operation: "
                        + left.type()
                        + " "
                        + right.type()
                    )
                self.push(Integer(wrap_int64(left.value + right.value)))
            else:
                raise VMError("opcode " + str(op) + " undefined")
            logger.debug("ip=%04d sp=%d", ip, self.sp)

    def push(self, value: Value) -> None:
        if self.sp >= STACK_SIZE:
            raise VMError("stack overflow")
        self.stack[self.sp] = value
        self.sp += 1

    def pop(self) -> Value:
        if self.sp == 0:
            raise VMError("stack underflow")
        self.sp -= 1
        return cast(Value, self.stack[self.sp])
