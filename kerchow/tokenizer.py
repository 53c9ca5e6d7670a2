"""Splitting source lines into pre-tokens, and reading source files."""

from __future__ import annotations

import re
from enum import Enum, auto
from typing import Iterator, Optional, Union

from .values import Type


class Delimiter(Enum):
    COMMA = auto()
    LPAR = auto()
    RPAR = auto()
    DOT = auto()
    COLON = auto()
    SEMICOLON = auto()
    LBRACKET = auto()
    RBRACKET = auto()


class Keyword(Enum):
    KERCHOW = auto()
    BAR = auto()
    DEFINE = auto()
    PUNCH = auto()
    KICK = auto()


class Operator(Enum):
    PLUS = auto()
    MINUS = auto()
    MULT = auto()
    DIV = auto()
    MOD = auto()
    EQ = auto()
    NEQ = auto()
    GEQ = auto()
    GT = auto()
    LEQ = auto()
    LT = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    COND = auto()
    CONCAT = auto()
    INDEX = auto()
    LENGTH = auto()


class Marker(Enum):
    EOL = auto()
    COMMENT = auto()


PreToken = Union[Delimiter, Keyword, Operator, Type, Marker]

_TOKENS: dict[str, PreToken] = {
    ",": Delimiter.COMMA,
    "(": Delimiter.LPAR,
    ")": Delimiter.RPAR,
    "[": Delimiter.LBRACKET,
    "]": Delimiter.RBRACKET,
    ".": Delimiter.DOT,
    ":": Delimiter.COLON,
    ";": Delimiter.SEMICOLON,
    "+": Operator.PLUS,
    "-": Operator.MINUS,
    "*": Operator.MULT,
    "/": Operator.DIV,
    "%": Operator.MOD,
    "==": Operator.EQ,
    "!=": Operator.NEQ,
    ">=": Operator.GEQ,
    ">": Operator.GT,
    "<=": Operator.LEQ,
    "<": Operator.LT,
    "&&": Operator.AND,
    "||": Operator.OR,
    "!": Operator.NOT,
    "len": Operator.LENGTH,
    "cond": Operator.COND,
    "++": Operator.CONCAT,
    "@": Operator.INDEX,
    "|": Keyword.BAR,
    "punch": Keyword.PUNCH,
    "kick": Keyword.KICK,
    "=>": Keyword.KERCHOW,
    ":=": Keyword.DEFINE,
    "int": Type.INT,
    "float": Type.FLOAT,
    "string": Type.STRING,
    "bool": Type.BOOL,
    "#": Marker.COMMENT,
}

_DROPPED = (
    Marker.COMMENT,
    Delimiter.SEMICOLON,
    Delimiter.COMMA,
    Delimiter.LPAR,
    Delimiter.RPAR,
)

_SEPARATOR = re.compile(r'(".*"|\(|\)|\|\+|-|\*|/|,|:=|=>|;|\[|\])')
_INCLUDE = re.compile(r"(include )(.+)")


def lookup_token(text: str) -> Union[PreToken, str]:
    """The language token spelled by ``text``, or ``text`` itself if it is a plain word."""
    return _TOKENS.get(text, text)


def _pieces(line: str) -> Iterator[str]:
    position = 0
    for match in _SEPARATOR.finditer(line):
        yield from line[position:match.start()].split()
        yield match.group()
        position = match.end()
    yield from line[position:].split()


def tokenize_line(line: str) -> list[Union[PreToken, str]]:
    """Split a line into pre-tokens and words, ending with an EOL marker."""
    tokens: list[Union[PreToken, str]] = []
    for piece in _pieces(line):
        token = lookup_token(piece)
        if any(token is dropped for dropped in _DROPPED):
            continue
        tokens.append(token)
    tokens.append(Marker.EOL)
    return tokens


def _split_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class Scanner:
    """Hands out source lines in order, with ``include`` lines expanded in place."""

    def __init__(self) -> None:
        self._pending: list[str] = []

    def load_file(self, path: str) -> None:
        with open(path, encoding="utf-8", newline="") as source:
            contents = source.read()
        for line in reversed(_split_lines(contents)):
            if line.startswith("include"):
                match = _INCLUDE.search(line)
                if match is None:
                    raise ValueError(f"malformed include line: {line!r}")
                self.load_file(match.group(2))
            else:
                self._pending.append(line)

    def next_line(self) -> Optional[str]:
        return self._pending.pop() if self._pending else None

    def __iter__(self) -> Iterator[str]:
        while self._pending:
            yield self._pending.pop()