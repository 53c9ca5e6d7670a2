# kerchow

kerchow is a small, statically typed language written in prefix notation.
Each line of source is tokenized, type-checked and compiled to bytecode,
one chunk per function. A stack-based virtual machine then runs the
function named `main` and prints the value it returns.

## Installation

```
pip install .
```

## Running programs

Run a source file:

```
kerchow program.kc
```

In file mode the compiled chunks are listed, then the line `Executing`,
then the result of `main`, then the execution time in milliseconds. A file
without a `main` function is an error. A line of the form
`include other.kc` is replaced by the lines of that file.

Start an interactive session by running the command with no arguments:

```
kerchow
```

Type one or more definitions and finish with an empty line. The entered
lines are compiled together; if they define `main`, it is run straight
away and its result is printed. Functions defined earlier stay available.
Type `exit` on a line of its own to leave; at the end of input any lines
still collected are compiled and run.

Parse, type and runtime errors (for example integer division by zero or
an index out of bounds) are printed as `Error: ...` on standard error and
the command exits with status 1.

## The language

Every line defines one function:

```
<type> <name> := <expression>
<type> <name> := <arg> : <type> <arg> : <type> => <expression>
```

Types are `int`, `float`, `bool`, `string` and arrays written with
brackets, such as `[int]` or `[[float]]`.

Literals are integers such as `42`, floats such as `1.5` or `.5`, and
`true` and `false`. Ints are 64-bit and wrap on overflow; integer division
and `%` truncate towards zero.

Expressions are written operator first:

| Operator                  | Meaning                                   |
|---------------------------|-------------------------------------------|
| `+ - * /`                 | arithmetic on two ints or two floats      |
| `%`                       | remainder of two ints                     |
| `== < > <= >=`            | comparison, yielding `bool`               |
| `&& \|\|`                 | logical and / or on bools                 |
| `cond c a b`              | `a` if `c` is true, otherwise `b`         |
| `++ a b`                  | concatenate two arrays or two strings     |
| `@ xs i`                  | element `i` of array `xs`                 |
| `len x`                   | length of an array or string              |
| `[a b c]`                 | array literal; all elements share a type  |

An array literal holds its elements in the reverse of the order written:
`[1 2 3]` evaluates to `[3 2 1]`.

A function is called by writing its name followed by its arguments. A
function must be defined before the lines that call it, but it may call
itself.

### Examples

```
int square := x : int => * x x
int fact := n : int => cond <= n 1 1 * n fact - n 1
int main := + square 7 fact 5
```

prints `169`.

```
[int] main := ++ [1 2] [3 4]
```

prints `[2 1 4 3]`, and

```
int main := @ [10 20 30] 1
```

prints `20`.

Type errors, such as adding an `int` to a `float` or returning a value of
the wrong type from a function, are reported at compile time.

## Limitations

- There is no way to write a string literal; `string` values can only be
  declared as types.
- `-` always splits a word, so negative number literals cannot be written;
  use `- 0 n` instead.
- `!` and `!=` are recognised as tokens but are rejected by the compiler.
- `#` does not start a comment.

## Library use

The stages are available as modules: `kerchow.parser` (`parse`,
`parse_line`), `kerchow.compiler` (`compile_program`) and `kerchow.vm`
(`VM`, whose `run` prints the result of `main` and returns it).

## Running the tests

```
pip install .[test]
pytest
```