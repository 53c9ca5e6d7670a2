"""Compiling a single prefix expression into byte code, with type checking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import MutableSequence, Optional, Sequence

from .chunk import Chunk
from .opcodes import OpCode
from .parser import Literal, Symbol, Token
from .tokenizer import Delimiter, Operator
from .values import Type, TypeKind, Value, value_from_literal

LocalVariable = tuple[str, Type]


class CompileError(Exception):
    """Source that is well formed as tokens but cannot be compiled."""


@dataclass(frozen=True)
class FunctionSignature:
    """Name, parameter types and return type of a defined function."""

    name: str
    params: tuple[Type, ...]
    return_type: Type


def peek(token_stream: Sequence[Token]) -> Optional[Token]:
    """The next token of a reversed token stream, or None when it is empty."""
    return token_stream[-1] if token_stream else None


def peek_second(token_stream: Sequence[Token]) -> Optional[Token]:
    """The token after the next one, or None when there is none."""
    return token_stream[-2] if len(token_stream) >= 2 else None


_ORDERINGS = {
    Operator.GT: (OpCode.GREATER_THAN_I, OpCode.GREATER_THAN_F),
    Operator.LT: (OpCode.LESS_THAN_I, OpCode.LESS_THAN_F),
    Operator.GEQ: (OpCode.GREATER_THAN_OR_EQUAL_I, OpCode.GREATER_THAN_OR_EQUAL_F),
    Operator.LEQ: (OpCode.LESS_THAN_OR_EQUAL_I, OpCode.LESS_THAN_OR_EQUAL_F),
}

_ARITHMETIC = {
    Operator.PLUS: (OpCode.ADD_I, OpCode.ADD_F),
    Operator.MINUS: (OpCode.SUBTRACT_I, OpCode.SUBTRACT_F),
    Operator.MULT: (OpCode.MULTIPLY_I, OpCode.MULTIPLY_F),
    Operator.DIV: (OpCode.DIVIDE_I, OpCode.DIVIDE_F),
}

_LOGICAL = {Operator.AND: OpCode.AND, Operator.OR: OpCode.OR}

_EQUALITY = {
    TypeKind.INT: OpCode.EQUAL_I,
    TypeKind.FLOAT: OpCode.EQUAL_F,
    TypeKind.BOOL: OpCode.EQUAL_B,
    TypeKind.STRING: OpCode.EQUAL_S,
}


def _emit_byte(chunk: Chunk, value: int, what: str) -> None:
    if not 0 <= value <= 0xFF:
        raise CompileError(f"{what} {value} does not fit in a byte")
    chunk.add_byte(value)


class _ExpressionCompiler:
    def __init__(
        self,
        token_stream: MutableSequence[Token],
        local_variables: Sequence[LocalVariable],
        signatures: Sequence[FunctionSignature],
        constants: MutableSequence[Value],
    ) -> None:
        self.tokens = token_stream
        self.locals = local_variables
        self.signatures = signatures
        self.constants = constants

    def compile(self, chunk: Chunk) -> Type:
        token = peek(self.tokens)
        if isinstance(token, Literal):
            return self._literal(chunk, token)
        if token is Delimiter.LBRACKET:
            return self._array(chunk)
        if isinstance(token, Symbol):
            return self._symbol(chunk, token)
        if isinstance(token, Operator):
            self.tokens.pop()
            return self._operator(chunk, token)
        raise CompileError("Expected expression")

    def _literal(self, chunk: Chunk, literal: Literal) -> Type:
        chunk.add_opcode(OpCode.CONSTANT)
        _emit_byte(chunk, len(self.constants), "constant index")
        self.constants.append(value_from_literal(literal))
        self.tokens.pop()
        return literal.value_type

    def _array(self, chunk: Chunk) -> Type:
        self.tokens.pop()
        element: Optional[Type] = None
        count = 0
        while peek(self.tokens) is not Delimiter.RBRACKET:
            item_type = self.compile(chunk)
            if element is None:
                element = item_type
            elif element != item_type:
                raise CompileError(
                    f"Type mismatch, expected {element}, got {item_type}"
                )
            count += 1
        chunk.add_opcode(OpCode.CONSTRUCT_ARRAY)
        _emit_byte(chunk, count, "array length")
        self.tokens.pop()
        if element is None:
            chunk.add_byte(0)
            return Type.array_of(Type.ANY)
        array_type = Type.array_of(element)
        _emit_byte(chunk, array_type.array_depth(), "array depth")
        return array_type

    def _symbol(self, chunk: Chunk, symbol: Symbol) -> Type:
        for index, (name, var_type) in enumerate(self.locals):
            if name != symbol.name:
                continue
            if var_type.kind is TypeKind.STRING:
                chunk.add_opcode(OpCode.STACK_LOAD_LOCAL_VAR_STR)
                _emit_byte(chunk, index, "local index")
            elif var_type.kind is TypeKind.ARRAY:
                chunk.add_opcode(OpCode.STACK_LOAD_LOCAL_VAR_ARR)
                _emit_byte(chunk, index, "local index")
                _emit_byte(chunk, var_type.array_depth(), "array depth")
            else:
                chunk.add_opcode(OpCode.STACK_LOAD_LOCAL_VAR)
                _emit_byte(chunk, index, "local index")
            self.tokens.pop()
            return var_type

        for index, signature in enumerate(self.signatures):
            if signature.name != symbol.name:
                continue
            self.tokens.pop()
            for expected in signature.params:
                actual = self.compile(chunk)
                if actual != expected:
                    raise CompileError(
                        f"Type mismatch, expected {expected}, got {actual}"
                    )
            chunk.add_opcode(OpCode.FUNCTION_CALL)
            _emit_byte(chunk, index, "function index")
            _emit_byte(chunk, len(signature.params), "argument count")
            return signature.return_type

        raise CompileError(f"Unknown symbol {symbol.name}")

    def _operands(self, chunk: Chunk) -> tuple[Type, Type]:
        first = self.compile(chunk)
        second = self.compile(chunk)
        return first, second

    def _operator(self, chunk: Chunk, op: Operator) -> Type:
        if op in _LOGICAL:
            first, second = self._operands(chunk)
            for operand in (first, second):
                if operand != Type.BOOL:
                    raise CompileError(
                        f"Type mismatch, expected bool, got {operand}"
                    )
            chunk.add_opcode(_LOGICAL[op])
            return Type.BOOL
        if op in _ORDERINGS or op in _ARITHMETIC:
            return self._numeric(chunk, op)
        if op is Operator.MOD:
            first, second = self._operands(chunk)
            if first != Type.INT or second != Type.INT:
                raise CompileError(
                    f"Type mismatch, expected ints, got {first}, {second}"
                )
            chunk.add_opcode(OpCode.MOD)
            return Type.INT
        if op is Operator.COND:
            return self._conditional(chunk)
        if op is Operator.EQ:
            first, second = self._operands(chunk)
            if first != second:
                raise CompileError(f"Type mismatch, got {first} and {second}")
            opcode = _EQUALITY.get(first.kind)
            if opcode is None:
                raise CompileError(f"Type mismatch, cannot compare {first}")
            chunk.add_opcode(opcode)
            return Type.BOOL
        if op is Operator.CONCAT:
            first, second = self._operands(chunk)
            if first == Type.STRING and second == Type.STRING:
                chunk.add_opcode(OpCode.CONCAT_STR)
                return Type.STRING
            if first.kind is TypeKind.ARRAY and first == second:
                chunk.add_opcode(OpCode.CONCAT_ARR)
                return first
            raise CompileError(f"Type mismatch, cannot concatenate {first} and {second}")
        if op is Operator.INDEX:
            first, second = self._operands(chunk)
            if first.kind is TypeKind.ARRAY and second == Type.INT:
                chunk.add_opcode(OpCode.INDEX)
                return first.element
            raise CompileError(f"Type mismatch, cannot index {first} with {second}")
        if op is Operator.LENGTH:
            operand = self.compile(chunk)
            if operand.kind is TypeKind.ARRAY:
                chunk.add_opcode(OpCode.LEN_ARR)
                return Type.INT
            if operand.kind is TypeKind.STRING:
                chunk.add_opcode(OpCode.LEN_STR)
                return Type.INT
            raise CompileError(f"Type mismatch, cannot take length of {operand}")
        raise CompileError(f"Unsupported operator {op.name.lower()}")

    def _numeric(self, chunk: Chunk, op: Operator) -> Type:
        first, second = self._operands(chunk)
        if first != second:
            raise CompileError(f"Type mismatch, expected {first}, got {second}")
        int_code, float_code = _ORDERINGS.get(op) or _ARITHMETIC[op]
        if first == Type.INT:
            chunk.add_opcode(int_code)
        elif first == Type.FLOAT:
            chunk.add_opcode(float_code)
        else:
            raise CompileError(f"Type mismatch, expected a number, got {first}")
        return Type.BOOL if op in _ORDERINGS else first

    def _conditional(self, chunk: Chunk) -> Type:
        condition = self.compile(chunk)
        if condition != Type.BOOL:
            raise CompileError(f"Type mismatch, expected bool, got {condition}")
        then_chunk = Chunk()
        then_type = self.compile(then_chunk)
        else_chunk = Chunk()
        else_type = self.compile(else_chunk)
        if then_type != else_type:
            raise CompileError(
                f"Type mismatch, branches give {then_type} and {else_type}"
            )
        chunk.add_opcode(OpCode.ADVANCE_IF_FALSE)
        _emit_byte(chunk, len(then_chunk) + 2, "jump distance")
        chunk.extend(then_chunk)
        chunk.add_opcode(OpCode.ADVANCE)
        _emit_byte(chunk, len(else_chunk), "jump distance")
        chunk.extend(else_chunk)
        return then_type


def compile_expression(
    chunk: Chunk,
    token_stream: MutableSequence[Token],
    local_variables: Sequence[LocalVariable],
    signatures: Sequence[FunctionSignature],
    constants: MutableSequence[Value],
) -> Type:
    """Compile the expression at the end of ``token_stream`` into ``chunk``.

    Tokens are consumed from the end of the stream, literals are appended to
    ``constants``, and the static type of the expression is returned.
    """
    compiler = _ExpressionCompiler(token_stream, local_variables, signatures, constants)
    return compiler.compile(chunk)