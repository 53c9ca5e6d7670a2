"""Stack-based virtual machine that executes compiled chunks."""

from __future__ import annotations

import math
import operator
import sys
from typing import Callable, Optional, TextIO

from .chunk import Chunk
from .opcodes import OpCode
from .values import Type, Value, format_value

_INT_SPAN = 2**64
_INT_OFFSET = 2**63


class VMError(Exception):
    """A program that fails while it runs."""


def _wrap(number: int) -> int:
    """Reduce an integer to the signed 64-bit range, wrapping on overflow."""
    return (number + _INT_OFFSET) % _INT_SPAN - _INT_OFFSET


def _divide_int(a: int, b: int) -> int:
    if b == 0:
        raise VMError("attempt to divide by zero")
    quotient = abs(a) // abs(b)
    return _wrap(quotient if (a < 0) == (b < 0) else -quotient)


def _remainder_int(a: int, b: int) -> int:
    if b == 0:
        raise VMError("attempt to calculate the remainder with a divisor of zero")
    quotient = abs(a) // abs(b)
    truncated = quotient if (a < 0) == (b < 0) else -quotient
    return _wrap(a - b * truncated)


def _divide_float(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


_BINARY: dict[OpCode, Callable[[Value, Value], Value]] = {
    OpCode.ADD_I: lambda a, b: _wrap(a + b),
    OpCode.SUBTRACT_I: lambda a, b: _wrap(a - b),
    OpCode.MULTIPLY_I: lambda a, b: _wrap(a * b),
    OpCode.DIVIDE_I: _divide_int,
    OpCode.MOD: _remainder_int,
    OpCode.ADD_F: operator.add,
    OpCode.SUBTRACT_F: operator.sub,
    OpCode.MULTIPLY_F: operator.mul,
    OpCode.DIVIDE_F: _divide_float,
    OpCode.EQUAL_I: operator.eq,
    OpCode.EQUAL_F: operator.eq,
    OpCode.EQUAL_B: operator.eq,
    OpCode.EQUAL_S: operator.eq,
    OpCode.GREATER_THAN_I: operator.gt,
    OpCode.LESS_THAN_I: operator.lt,
    OpCode.GREATER_THAN_OR_EQUAL_I: operator.ge,
    OpCode.LESS_THAN_OR_EQUAL_I: operator.le,
    OpCode.GREATER_THAN_F: operator.gt,
    OpCode.LESS_THAN_F: operator.lt,
    OpCode.GREATER_THAN_OR_EQUAL_F: operator.ge,
    OpCode.LESS_THAN_OR_EQUAL_F: operator.le,
    OpCode.AND: lambda a, b: bool(a) and bool(b),
    OpCode.OR: lambda a, b: bool(a) or bool(b),
    OpCode.CONCAT_STR: operator.add,
    OpCode.CONCAT_ARR: lambda a, b: list(a) + list(b),
}


def _index(array: list, position: int) -> Value:
    if not 0 <= position < len(array):
        raise VMError(
            f"index out of bounds: the len is {len(array)} but the index is {position}"
        )
    return array[position]


class VM:
    """Runs chunks starting from the ``main`` function and prints its result."""

    def __init__(self, output: Optional[TextIO] = None) -> None:
        self._output = output
        self._chunks: list[Chunk] = []
        self._constants: list[Value] = []
        self._stack: list[Value] = []
        self._frames: list[tuple[int, list[Value]]] = []
        self._return_positions: list[int] = []
        self._main: Optional[int] = None
        self._main_type: Optional[Type] = None

    @property
    def output(self) -> TextIO:
        return sys.stdout if self._output is None else self._output

    def load_chunk(self, chunk: Chunk) -> None:
        self._chunks.append(chunk)

    def update_constants(self, constants: list[Value]) -> None:
        self._constants = list(constants)

    def set_main(self, offset: int, main_type: Type) -> None:
        """Select the main chunk; later calls count past the previous main."""
        self._main = offset if self._main is None else self._main + offset + 1
        self._main_type = main_type

    def _pop(self) -> Value:
        if not self._stack:
            raise VMError("value stack is empty")
        return self._stack.pop()

    def _top(self) -> Value:
        if not self._stack:
            raise VMError("value stack is empty")
        return self._stack[-1]

    def _chunk(self, index: int) -> Chunk:
        if not 0 <= index < len(self._chunks):
            raise VMError(f"no chunk at position {index}")
        return self._chunks[index]

    @staticmethod
    def _local(args: list[Value], index: int) -> Value:
        if not 0 <= index < len(args):
            raise VMError(f"no local variable at position {index}")
        return args[index]

    def run(self) -> Value:
        """Execute ``main`` to its return, print the result and return it."""
        if self._main is None or self._main_type is None:
            raise VMError("no main function has been set")
        main = self._main
        self._chunk(main)
        self._stack.clear()
        self._frames.clear()
        self._return_positions.clear()
        self._frames.append((main, []))
        for chunk in self._chunks:
            chunk.pointer = 0

        while True:
            index, args = self._frames[-1]
            chunk = self._chunks[index]
            try:
                op, operands = chunk.next_instruction()
            except IndexError as error:
                raise VMError(str(error)) from error

            binary = _BINARY.get(op)
            if binary is not None:
                right = self._pop()
                self._stack[-1] = binary(self._top(), right)
                continue

            match op:
                case OpCode.RETURN:
                    if index == main:
                        self._frames.pop()
                        result = self._top()
                        print(format_value(result, self._main_type) + "\n", file=self.output)
                        return result
                    self._frames.pop()
                    caller = self._chunks[self._frames[-1][0]]
                    caller.pointer = self._return_positions.pop()
                case OpCode.CONSTANT:
                    position = operands[0]
                    if position >= len(self._constants):
                        raise VMError(f"no constant at position {position}")
                    self._stack.append(self._constants[position])
                case OpCode.TRUE:
                    self._stack.append(True)
                case OpCode.FALSE:
                    self._stack.append(False)
                case OpCode.NOT:
                    self._stack[-1] = not self._top()
                case OpCode.FUNCTION_CALL:
                    target, count = operands
                    self._chunk(target)
                    call_args = [self._pop() for _ in range(count)]
                    call_args.reverse()
                    self._return_positions.append(chunk.pointer)
                    self._frames.append((target, call_args))
                    self._chunks[target].pointer = 0
                case OpCode.STACK_LOAD_LOCAL_VAR | OpCode.STACK_LOAD_LOCAL_VAR_STR:
                    self._stack.append(self._local(args, operands[0]))
                case OpCode.STACK_LOAD_LOCAL_VAR_ARR:
                    self._stack.append(list(self._local(args, operands[0])))
                case OpCode.DROP_LOCAL_ARR | OpCode.DROP_LOCAL_STR:
                    self._local(args, operands[0])
                case OpCode.ADVANCE:
                    chunk.pointer += operands[0]
                case OpCode.ADVANCE_IF_FALSE:
                    if not self._pop():
                        chunk.pointer += operands[0]
                case OpCode.CONSTRUCT_ARRAY:
                    size = operands[0]
                    if size > len(self._stack):
                        raise VMError("value stack is empty")
                    items = self._stack[len(self._stack) - size:]
                    del self._stack[len(self._stack) - size:]
                    items.reverse()
                    self._stack.append(items)
                case OpCode.LEN_ARR:
                    self._stack[-1] = len(self._top())
                case OpCode.LEN_STR:
                    self._stack[-1] = len(self._top().encode("utf-8"))
                case OpCode.INDEX:
                    position = self._pop()
                    self._stack[-1] = _index(self._top(), position)
                case _:
                    raise VMError(f"cannot execute {op.name}")