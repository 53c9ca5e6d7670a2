import pytest

from kerchow.compiler import compile_definition, compile_function_args, compile_program
from kerchow.expressions import CompileError, FunctionSignature
from kerchow.opcodes import OpCode
from kerchow.parser import Symbol, parse_line
from kerchow.tokenizer import Keyword, Marker
from kerchow.values import Type


def stream(*lines):
    tokens = []
    for line in lines:
        tokens.extend(parse_line(line))
    tokens.reverse()
    return tokens


def compile_source(*lines):
    signatures = []
    constants = []
    result = compile_program(stream(*lines), signatures, constants)
    return result, signatures, constants


def test_main_without_arguments():
    (chunks, main, main_type), signatures, constants = compile_source("int main := + 1 2")
    assert len(chunks) == 1
    assert chunks[0].data == [
        OpCode.CONSTANT, 0, OpCode.CONSTANT, 1, OpCode.ADD_I, OpCode.RETURN
    ]
    assert constants == [1, 2]
    assert main == 0
    assert main_type == Type.INT
    assert signatures == [FunctionSignature("main", (), Type.INT)]


def test_function_with_int_arguments():
    (chunks, main, main_type), signatures, _ = compile_source(
        "int add := a : int b : int => + a b"
    )
    assert chunks[0].data == [
        OpCode.STACK_LOAD_LOCAL_VAR, 0,
        OpCode.STACK_LOAD_LOCAL_VAR, 1,
        OpCode.ADD_I,
        OpCode.RETURN,
    ]
    assert main is None
    assert main_type is None
    assert signatures[0].params == (Type.INT, Type.INT)


def test_string_argument_is_dropped():
    (chunks, _, _), _, _ = compile_source("string echo := s : string => s")
    assert chunks[0].data == [
        OpCode.STACK_LOAD_LOCAL_VAR_STR, 0,
        OpCode.DROP_LOCAL_STR, 0,
        OpCode.RETURN,
    ]


def test_array_argument_is_dropped_with_depth():
    (chunks, _, _), signatures, constants = compile_source(
        "int first := xs : [int] => @ xs 0"
    )
    assert signatures[0].params == (Type.array_of(Type.INT),)
    assert constants == [0]
    assert chunks[0].data == [
        OpCode.STACK_LOAD_LOCAL_VAR_ARR, 0, 1,
        OpCode.CONSTANT, 0,
        OpCode.INDEX,
        OpCode.DROP_LOCAL_ARR, 0, 1,
        OpCode.RETURN,
    ]


def test_call_of_earlier_function():
    (chunks, main, main_type), signatures, constants = compile_source(
        "int double := x : int => + x x",
        "int main := double 21",
    )
    assert len(chunks) == 2
    assert main == 1
    assert main_type == Type.INT
    assert [s.name for s in signatures] == ["double", "main"]
    assert constants == [21]
    assert chunks[1].data == [
        OpCode.CONSTANT, 0, OpCode.FUNCTION_CALL, 0, 1, OpCode.RETURN
    ]


def test_recursive_reference_compiles():
    (chunks, _, _), _, _ = compile_source("int f := n : int => f n")
    assert chunks[0].data == [
        OpCode.STACK_LOAD_LOCAL_VAR, 0,
        OpCode.FUNCTION_CALL, 0, 1,
        OpCode.RETURN,
    ]


def test_program_consumes_all_tokens():
    tokens = stream("int main := 5", "", "")
    compile_program(tokens, [], [])
    assert tokens == []


def test_definition_on_end_of_line():
    tokens = [Marker.EOL]
    assert compile_definition(tokens, [], []) == (None, False)
    assert tokens == []


def test_definition_reports_main():
    tokens = stream("bool main := true")
    chunk, is_main = compile_definition(tokens, [], [])
    assert is_main is True
    assert chunk.data[-1] == OpCode.RETURN
    assert tokens == [Marker.EOL]


def test_function_args_collects_locals():
    tokens = stream("a : int b : float => a")
    local_variables = []
    compile_function_args(tokens, local_variables)
    assert local_variables == [("a", Type.INT), ("b", Type.FLOAT)]
    assert tokens[-1] is Keyword.KERCHOW


@pytest.mark.parametrize(
    "source, message",
    [
        ("a int =>", "Expected colon"),
        ("a : b =>", "Expected type"),
        (": int =>", "Expected argument name"),
    ],
)
def test_function_args_errors(source, message):
    with pytest.raises(CompileError, match=message):
        compile_function_args(stream(source), [])


@pytest.mark.parametrize(
    "source, message",
    [
        ("main := 1", "Expected type"),
        ("int := 1", "Expected function name"),
        ("int main 1", "Expected define"),
        ("bool main := + 1 2", "Type mismatch"),
        ("int main := + 1 2.5", "Type mismatch"),
        ("int main := nothing", "Unknown symbol"),
    ],
)
def test_definition_errors(source, message):
    with pytest.raises(CompileError, match=message):
        compile_program(stream(source), [], [])


def test_empty_stream_definition_error():
    with pytest.raises(CompileError, match="Expected type"):
        compile_definition([], [], [])


def test_symbol_tokens_are_names():
    tokens = [Keyword.KERCHOW, Type.INT, Symbol("x")]
    tokens.insert(2, parse_line(":")[0])
    local_variables = []
    compile_function_args(tokens, local_variables)
    assert local_variables == [("x", Type.INT)]