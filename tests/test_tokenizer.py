import pytest

from kerchow.tokenizer import (
    Delimiter,
    Keyword,
    Marker,
    Operator,
    Scanner,
    lookup_token,
    tokenize_line,
)
from kerchow.values import Type


def test_definition_line():
    assert tokenize_line("int main := 1") == [
        Type.INT,
        "main",
        Keyword.DEFINE,
        "1",
        Marker.EOL,
    ]


def test_separators_split_without_spaces():
    assert tokenize_line("x:=y") == ["x", Keyword.DEFINE, "y", Marker.EOL]
    assert tokenize_line("a=>b") == ["a", Keyword.KERCHOW, "b", Marker.EOL]


def test_brackets_are_separators():
    assert tokenize_line("[int]") == [
        Delimiter.LBRACKET,
        Type.INT,
        Delimiter.RBRACKET,
        Marker.EOL,
    ]


def test_punctuation_is_dropped():
    assert tokenize_line("( , ; ) #") == [Marker.EOL]


def test_comment_marker_only_drops_itself():
    assert tokenize_line("# note") == ["note", Marker.EOL]


def test_operators_as_words():
    assert tokenize_line("+ 1 2") == [Operator.PLUS, "1", "2", Marker.EOL]
    assert tokenize_line("cond len") == [Operator.COND, Operator.LENGTH, Marker.EOL]


def test_bar_plus_is_one_piece():
    assert tokenize_line("a|+b") == ["a", "|+", "b", Marker.EOL]


def test_double_quoted_text_stays_whole():
    assert tokenize_line('f "a b"') == ["f", '"a b"', Marker.EOL]


def test_blank_line_is_just_eol():
    assert tokenize_line("   \n") == [Marker.EOL]


def test_lookup_token():
    assert lookup_token("=>") is Keyword.KERCHOW
    assert lookup_token("@") is Operator.INDEX
    assert lookup_token("hello") == "hello"


def test_scanner_expands_includes(tmp_path):
    included = tmp_path / "b.kw"
    included.write_text("b1\nb2\n", encoding="utf-8")
    main = tmp_path / "a.kw"
    main.write_text(f"first\ninclude {included}\nlast\n", encoding="utf-8")
    scanner = Scanner()
    scanner.load_file(str(main))
    assert list(scanner) == ["first", "b1", "b2", "last"]
    assert scanner.next_line() is None


def test_scanner_next_line_and_crlf(tmp_path):
    source = tmp_path / "c.kw"
    source.write_bytes(b"one\r\n\r\ntwo")
    scanner = Scanner()
    scanner.load_file(str(source))
    assert scanner.next_line() == "one"
    assert scanner.next_line() == ""
    assert scanner.next_line() == "two"
    assert scanner.next_line() is None


def test_scanner_malformed_include(tmp_path):
    source = tmp_path / "d.kw"
    source.write_text("include\n", encoding="utf-8")
    with pytest.raises(ValueError):
        Scanner().load_file(str(source))


def test_scanner_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Scanner().load_file(str(tmp_path / "missing.kw"))