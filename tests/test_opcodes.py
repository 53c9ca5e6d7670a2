import pytest

from kerchow.opcodes import OpCode, opcode_from_byte


def test_low_bytes_decode_to_matching_members():
    for op in OpCode:
        if op.value <= OpCode.STACK_LOAD_LOCAL_VAR:
            assert opcode_from_byte(op.value) is op


@pytest.mark.parametrize(
    "byte, expected",
    [
        (28, OpCode.FUNCTION_CALL),
        (29, OpCode.CONSTRUCT_ARRAY),
        (30, OpCode.CONCAT_ARR),
        (31, OpCode.CONCAT_STR),
        (32, OpCode.LEN_ARR),
        (33, OpCode.LEN_STR),
        (34, OpCode.INDEX),
        (35, OpCode.AND),
        (36, OpCode.OR),
        (37, OpCode.MOD),
    ],
)
def test_listing_table(byte, expected):
    assert opcode_from_byte(byte) is expected


@pytest.mark.parametrize("byte", [38, 42, 100, 255])
def test_unknown_bytes_are_null_code(byte):
    assert opcode_from_byte(byte) is OpCode.NULL_CODE


def test_enum_numbering_is_declaration_order():
    decoded = [opcode_from_byte(byte) for byte in range(28)]
    assert [op.value for op in decoded] == list(range(28))
    assert opcode_from_byte(0) is OpCode.RETURN
    assert opcode_from_byte(OpCode.NULL_CODE.value) is OpCode.NULL_CODE
    assert OpCode.NULL_CODE.value == len(OpCode) - 1