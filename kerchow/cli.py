"""Command line entry point: run a source file, or read definitions from standard input."""

from __future__ import annotations

import argparse
import sys
import time
from typing import Iterable, Optional, Sequence

from .compiler import compile_program
from .expressions import CompileError, FunctionSignature
from .parser import ParsingError, Token, parse, parse_line
from .values import Value
from .vm import VM, VMError


def _run_file(vm: VM, path: str) -> None:
    tokens = parse(path)
    signatures: list[FunctionSignature] = []
    constants: list[Value] = []
    chunks, main_index, main_type = compile_program(tokens, signatures, constants)
    for chunk in chunks:
        print(repr(chunk))
        vm.load_chunk(chunk)
    vm.update_constants(constants)
    if main_index is None or main_type is None:
        raise CompileError("no main function defined")
    vm.set_main(main_index, main_type)

    print("Executing")
    start = time.perf_counter()
    vm.run()
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    print(f"\nExecuted in: {elapsed_ms}ms\n")


def _execute_block(
    vm: VM,
    text: str,
    signatures: list[FunctionSignature],
    constants: list[Value],
) -> None:
    tokens: list[Token] = parse_line(text)
    tokens.reverse()
    chunks, main_index, main_type = compile_program(tokens, signatures, constants)
    for chunk in chunks:
        vm.load_chunk(chunk)
    vm.update_constants(constants)
    if main_index is not None and main_type is not None:
        vm.set_main(main_index, main_type)
        vm.run()


def _interactive(vm: VM, lines: Iterable[str]) -> None:
    """Collect lines until a blank one, then compile and run what was collected."""
    signatures: list[FunctionSignature] = []
    constants: list[Value] = []
    buffer = ""
    for line in lines:
        if line == "exit\n":
            return
        if line.strip():
            buffer += line
        elif buffer.strip():
            _execute_block(vm, buffer, signatures, constants)
            buffer = ""
    if buffer.strip():
        _execute_block(vm, buffer, signatures, constants)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="kerchow",
        description="Run a program file, or read definitions from standard input.",
    )
    parser.add_argument("path", nargs="?", help="source file to run")
    args = parser.parse_args(argv)

    vm = VM()
    try:
        if args.path is None:
            _interactive(vm, sys.stdin)
        else:
            _run_file(vm, args.path)
    except (ParsingError, CompileError, VMError, OSError, ValueError) as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())