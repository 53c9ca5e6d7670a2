"""Compiling function definitions and whole programs into chunks."""

from __future__ import annotations

from typing import MutableSequence, Optional

from .chunk import Chunk
from .expressions import (
    CompileError,
    FunctionSignature,
    LocalVariable,
    compile_expression,
    peek,
    peek_second,
)
from .opcodes import OpCode
from .parser import Symbol, Token
from .tokenizer import Delimiter, Keyword, Marker
from .values import Type, TypeKind, Value


def _describe(token: Optional[Token]) -> str:
    return "end of input" if token is None else repr(token)


def _emit_byte(chunk: Chunk, value: int, what: str) -> None:
    if not 0 <= value <= 0xFF:
        raise CompileError(f"{what} {value} does not fit in a byte")
    chunk.add_byte(value)


def compile_function_args(
    token_stream: MutableSequence[Token],
    local_variables: MutableSequence[LocalVariable],
) -> None:
    """Read ``name : type`` pairs up to ``=>`` and append them to ``local_variables``."""
    while peek(token_stream) is not Keyword.KERCHOW:
        name_token = peek(token_stream)
        if not isinstance(name_token, Symbol):
            raise CompileError("Expected argument name")
        token_stream.pop()
        if peek(token_stream) is not Delimiter.COLON:
            raise CompileError("Expected colon")
        token_stream.pop()
        arg_type = peek(token_stream)
        if not isinstance(arg_type, Type):
            raise CompileError("Expected type")
        token_stream.pop()
        local_variables.append((name_token.name, arg_type))


def compile_definition(
    token_stream: MutableSequence[Token],
    signatures: MutableSequence[FunctionSignature],
    constants: MutableSequence[Value],
) -> tuple[Optional[Chunk], bool]:
    """Compile one ``type name := [args =>] expression`` definition.

    Returns the function's chunk and whether it is ``main``. A bare end of
    line is consumed and gives ``(None, False)``.
    """
    if peek(token_stream) is Marker.EOL:
        token_stream.pop()
        return None, False

    return_type = peek(token_stream)
    if not isinstance(return_type, Type):
        raise CompileError(f"Expected type, got {_describe(return_type)}")
    token_stream.pop()

    name_token = peek(token_stream)
    if not isinstance(name_token, Symbol):
        raise CompileError(f"Expected function name, got {_describe(name_token)}")
    token_stream.pop()
    is_main = name_token.name == "main"

    if peek(token_stream) is not Keyword.DEFINE:
        raise CompileError("Expected define")
    token_stream.pop()

    local_variables: list[LocalVariable] = []
    if peek_second(token_stream) is Delimiter.COLON:
        compile_function_args(token_stream, local_variables)
        if peek(token_stream) is not Keyword.KERCHOW:
            raise CompileError("Expected kerchow")
        token_stream.pop()

    signatures.append(
        FunctionSignature(
            name_token.name,
            tuple(var_type for _, var_type in local_variables),
            return_type,
        )
    )

    chunk = Chunk()
    body_type = compile_expression(
        chunk, token_stream, local_variables, signatures, constants
    )
    if return_type != body_type:
        raise CompileError(
            f"Type mismatch, expected {return_type} got {body_type}"
        )

    for index, (_, var_type) in enumerate(local_variables):
        if var_type.kind is TypeKind.STRING:
            chunk.add_opcode(OpCode.DROP_LOCAL_STR)
            _emit_byte(chunk, index, "local index")
        elif var_type.kind is TypeKind.ARRAY:
            chunk.add_opcode(OpCode.DROP_LOCAL_ARR)
            _emit_byte(chunk, index, "local index")
            _emit_byte(chunk, var_type.array_depth(), "array depth")

    chunk.add_opcode(OpCode.RETURN)
    return chunk, is_main


def compile_program(
    token_stream: MutableSequence[Token],
    signatures: MutableSequence[FunctionSignature],
    constants: MutableSequence[Value],
) -> tuple[list[Chunk], Optional[int], Optional[Type]]:
    """Compile every definition in a reversed token stream.

    Returns the chunks in order, the position of ``main`` among them and
    its return type; the last two are None when no ``main`` was defined.
    """
    chunks: list[Chunk] = []
    main: Optional[int] = None
    main_type: Optional[Type] = None
    while token_stream:
        chunk, is_main = compile_definition(token_stream, signatures, constants)
        if chunk is None:
            continue
        position = len(chunks)
        chunks.append(chunk)
        if is_main:
            main = position
            main_type = signatures[position].return_type
    return chunks, main, main_type