"""Monkey bytecode — opcodes, operand layout, encoding and disassembly.

An instruction is one opcode byte followed by its operands; operand widths
come from DEFINITIONS. Multi-byte operands are big-endian.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Opcode(IntEnum):
    OP_CONSTANT = 0  # OP_CONSTANT const_index:u16
    OP_ADD = 1  # pop b, pop a, push a + b


@dataclass(frozen=True)
class Definition:
    name: str
    operand_widths: tuple[int, ...]


DEFINITIONS: dict[int, Definition] = {
    Opcode.OP_CONSTANT: Definition("OpConstant", (2,)),
    Opcode.OP_ADD: Definition("OpAdd", ()),
}


def lookup(op: int) -> Definition:
    """Definition for opcode byte `op`; LookupError when undefined."""
    defn = DEFINITIONS.get(op)
    if defn is None:
        raise LookupError("opcode " + str(op) + " undefined")
    return defn


def make(op: int, *operands: int) -> bytes:
    """Encode one instruction. Unknown opcodes encode to nothing."""
    defn = DEFINITIONS.get(op)
    if defn is None:
        return b""
    out = bytearray([op])
    for width, operand in zip(defn.operand_widths, operands):
        out += operand.to_bytes(width, "big")
    return bytes(out)


def read_uint16(ins: bytes, offset: int = 0) -> int:
    return int.from_bytes(ins[offset : offset + 2], "big")


def read_operands(
    defn: Definition, ins: bytes, offset: int = 0
) -> tuple[list[int], int]:
    """Decode the operands of `defn` starting at `offset`.

    Returns the operands and the number of bytes they occupied.
    """
    operands: list[int] = []
    read = 0
    for width in defn.operand_widths:
        start = offset + read
        operands.append(int.from_bytes(ins[start : start + width], "big"))
        read += width
    return operands, read


def _format_instruction(defn: Definition, operands: list[int]) -> str:
    if not operands:
        return defn.name
    return defn.name + " " + " ".join(str(o) for o in operands)


def disassemble(ins: bytes) -> str:
    """One `NNNN OpName operands` line per instruction."""
    lines: list[str] = []
    i = 0
    while i < len(ins):
        try:
            defn = lookup(ins[i])
        except LookupError as e:
            lines.append("ERROR: " + str(e))
            break
        operands, read = read_operands(defn, ins, i + 1)
        lines.append(f"{i:04d} " + _format_instruction(defn, operands))
        i += 1 + read
    return "".join(line + "\n" for line in lines)
