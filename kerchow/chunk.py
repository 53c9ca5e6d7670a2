"""Byte-code chunks: a flat list of opcodes and operand bytes."""

from __future__ import annotations

from dataclasses import dataclass, field

from .opcodes import OpCode, opcode_from_byte

_OPERAND_COUNTS = {
    OpCode.FUNCTION_CALL: 2,
    OpCode.CONSTRUCT_ARRAY: 2,
    OpCode.DROP_LOCAL_ARR: 2,
    OpCode.STACK_LOAD_LOCAL_VAR_ARR: 2,
    OpCode.CONSTANT: 1,
    OpCode.STACK_LOAD_LOCAL_VAR: 1,
    OpCode.STACK_LOAD_LOCAL_VAR_STR: 1,
    OpCode.DROP_LOCAL_STR: 1,
    OpCode.ADVANCE: 1,
    OpCode.ADVANCE_IF_FALSE: 1,
}


def _decode(raw: int) -> OpCode:
    try:
        return OpCode(raw)
    except ValueError:
        return OpCode.NULL_CODE


def _listing_name(op: OpCode) -> str:
    return "".join(part.capitalize() for part in op.name.split("_"))


@dataclass(repr=False)
class Chunk:
    """Compiled code of one function, with a read position."""

    data: list[int] = field(default_factory=list)
    pointer: int = 0

    def add_opcode(self, opcode: OpCode) -> None:
        self.data.append(int(opcode))

    def add_byte(self, byte: int) -> None:
        if not 0 <= byte <= 0xFF:
            raise ValueError(f"operand {byte} does not fit in a byte")
        self.data.append(byte)

    def extend(self, other: Chunk) -> None:
        """Move all of ``other``'s code to the end of this chunk."""
        self.data.extend(other.data)
        other.data.clear()

    def __len__(self) -> int:
        return len(self.data)

    def next_instruction(self) -> tuple[OpCode, tuple[int, ...]]:
        """Read the instruction at the pointer and its operands, advancing past them."""
        if not 0 <= self.pointer < len(self.data):
            raise IndexError(f"instruction pointer {self.pointer} out of range")
        opcode = _decode(self.data[self.pointer])
        start = self.pointer + 1
        end = start + _OPERAND_COUNTS.get(opcode, 0)
        if end > len(self.data):
            raise IndexError(f"truncated operands for {opcode.name}")
        self.pointer = end
        return opcode, tuple(self.data[start:end])

    def __repr__(self) -> str:
        items = ", ".join(
            f"{_listing_name(opcode_from_byte(byte))}{byte}" for byte in self.data
        )
        return f"Chunk {{ data: [{items}], pointer: {self.pointer} }}"