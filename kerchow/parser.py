"""Turning pre-tokens into language tokens: symbols, literals and collapsed array types."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .tokenizer import Delimiter, Keyword, Marker, PreToken, Scanner, tokenize_line
from .values import Type, format_value

_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1
_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)
_LITERAL_STARTS = ('"', "0", "1", "2", "3", "4", "5", "6", "7", "8", "9", ".")


@dataclass(frozen=True)
class Symbol:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False)
class Literal:
    """A constant written in source: int, float, string or bool."""

    value: Union[int, float, str, bool]

    @property
    def value_type(self) -> Type:
        if isinstance(self.value, bool):
            return Type.BOOL
        if isinstance(self.value, int):
            return Type.INT
        if isinstance(self.value, float):
            return Type.FLOAT
        return Type.STRING

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        if type(self.value) is not type(other.value):
            return False
        if isinstance(self.value, float) and math.isnan(self.value):
            return math.isnan(other.value)
        return self.value == other.value

    def __hash__(self) -> int:
        if isinstance(self.value, float) and math.isnan(self.value):
            return hash((float, "nan"))
        return hash((type(self.value), self.value))

    def __str__(self) -> str:
        if isinstance(self.value, str):
            return self.value
        return format_value(self.value, self.value_type)


Token = Union[PreToken, Symbol, Literal]


class ParsingError(Exception):
    """Source text that cannot be turned into tokens."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"Error on line {self.line}:\n\t{self.message}"


def parse_literal(text: str) -> Literal:
    if len(text) >= 2 and text.startswith("'") and text.endswith("'"):
        return Literal(text[1:-1])
    if _INTEGER.fullmatch(text):
        number = int(text)
        if _INT_MIN <= number <= _INT_MAX:
            return Literal(number)
    if _FLOAT.fullmatch(text):
        return Literal(float(text))
    if text == "true":
        return Literal(True)
    if text == "false":
        return Literal(False)
    raise ParsingError(f"unrecognised literal {text!r}")


def parse_word(word: str) -> Union[Symbol, Literal]:
    if word.startswith(_LITERAL_STARTS) or word in ("true", "false"):
        return parse_literal(word)
    return Symbol(word)


def collapse_array_types(tokens: Sequence[Union[PreToken, str]]) -> list[Union[PreToken, str]]:
    """Fold bracketed type annotations such as ``[[int]]`` into array types.

    Brackets after ``=>`` are left alone until the end of the line.
    """
    out: list[Union[PreToken, str]] = []
    index = 0
    check = True
    while index < len(tokens):
        token = tokens[index]
        if token is Marker.EOL:
            check = True
        elif token is Keyword.KERCHOW:
            check = False
        elif token is Delimiter.LBRACKET and check:
            collapsed, index = _collapse_at(tokens, index)
            out.append(collapsed)
            continue
        out.append(token)
        index += 1
    return out


def _collapse_at(
    tokens: Sequence[Union[PreToken, str]], start: int
) -> tuple[Union[PreToken, str], int]:
    count = 1
    depth = 1
    end = start + 1
    while count != 0 and end < len(tokens):
        token = tokens[end]
        if token is Delimiter.LBRACKET:
            count += 1
            depth += 1
        elif token is Delimiter.RBRACKET:
            count -= 1
        elif not isinstance(token, Type):
            count = -1
            break
        end += 1

    opening = tokens[start]
    if count == -1:
        return opening, start + 1
    if count != 0:
        raise ParsingError("unclosed array")
    if end == start + 2:
        return opening, start + 1
    inner = tokens[start + depth]
    if not isinstance(inner, Type):
        return opening, start + 1
    array_type = inner
    for _ in range(depth):
        array_type = Type.array_of(array_type)
    return array_type, end


def parse_line(line: str) -> list[Token]:
    """Tokens of one line, in reading order, ending with an EOL marker."""
    return [
        parse_word(token) if isinstance(token, str) else token
        for token in collapse_array_types(tokenize_line(line))
    ]


def parse(path: str) -> list[Token]:
    """Tokens of a whole file, in reverse order so the next token is last."""
    scanner = Scanner()
    scanner.load_file(path)
    tokens: list[Token] = []
    for number, line in enumerate(scanner, start=1):
        try:
            tokens.extend(parse_line(line))
        except ParsingError as error:
            raise ParsingError(error.message, line=number) from error
    tokens.reverse()
    return tokens