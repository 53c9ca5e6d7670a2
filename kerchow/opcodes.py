"""Instruction set of the bytecode virtual machine."""

from __future__ import annotations

from enum import IntEnum


class OpCode(IntEnum):
    """A single VM instruction."""

    RETURN = 0
    CONSTANT = 1

    ADD_I = 2
    SUBTRACT_I = 3
    MULTIPLY_I = 4
    DIVIDE_I = 5

    ADD_F = 6
    SUBTRACT_F = 7
    MULTIPLY_F = 8
    DIVIDE_F = 9

    TRUE = 10
    FALSE = 11

    EQUAL_I = 12
    EQUAL_F = 13
    EQUAL_S = 14
    EQUAL_B = 15

    GREATER_THAN_I = 16
    LESS_THAN_I = 17
    GREATER_THAN_OR_EQUAL_I = 18
    LESS_THAN_OR_EQUAL_I = 19

    GREATER_THAN_F = 20
    LESS_THAN_F = 21
    GREATER_THAN_OR_EQUAL_F = 22
    LESS_THAN_OR_EQUAL_F = 23

    ADVANCE = 24
    ADVANCE_IF_FALSE = 25

    NOT = 26

    STACK_LOAD_LOCAL_VAR = 27
    STACK_LOAD_LOCAL_VAR_ARR = 28
    STACK_LOAD_LOCAL_VAR_STR = 29
    DROP_LOCAL_ARR = 30
    DROP_LOCAL_STR = 31
    FUNCTION_CALL = 32

    CONSTRUCT_ARRAY = 33

    CONCAT_ARR = 34
    CONCAT_STR = 35

    LEN_ARR = 36
    LEN_STR = 37

    INDEX = 38

    AND = 39
    OR = 40

    MOD = 41

    NULL_CODE = 42


_LISTING_CODES = {
    28: OpCode.FUNCTION_CALL,
    29: OpCode.CONSTRUCT_ARRAY,
    30: OpCode.CONCAT_ARR,
    31: OpCode.CONCAT_STR,
    32: OpCode.LEN_ARR,
    33: OpCode.LEN_STR,
    34: OpCode.INDEX,
    35: OpCode.AND,
    36: OpCode.OR,
    37: OpCode.MOD,
}


def opcode_from_byte(value: int) -> OpCode:
    """Decode a raw byte using the numbering of chunk listings.

    Bytes up to STACK_LOAD_LOCAL_VAR map directly; a fixed table covers
    28 to 37, and anything else decodes as NULL_CODE.
    """
    if 0 <= value <= OpCode.STACK_LOAD_LOCAL_VAR:
        return OpCode(value)
    return _LISTING_CODES.get(value, OpCode.NULL_CODE)