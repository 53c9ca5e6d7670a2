import io
import sys

from kerchow.cli import main


def test_file_mode_runs_main(tmp_path, capsys):
    source = tmp_path / "program.txt"
    source.write_text("int main := 42\n", encoding="utf-8")
    assert main([str(source)]) == 0
    out = capsys.readouterr().out
    assert "Chunk {" in out
    assert "Executing\n42\n\n" in out
    assert "Executed in:" in out


def test_file_mode_with_function(tmp_path, capsys):
    source = tmp_path / "program.txt"
    source.write_text("int id := x : int => x\nint main := id 5\n", encoding="utf-8")
    assert main([str(source)]) == 0
    assert "Executing\n5\n\n" in capsys.readouterr().out


def test_missing_file_reports_error(tmp_path, capsys):
    assert main([str(tmp_path / "absent.txt")]) == 1
    assert "Error" in capsys.readouterr().err


def test_type_error_reports_error(tmp_path, capsys):
    source = tmp_path / "program.txt"
    source.write_text("int main := true\n", encoding="utf-8")
    assert main([str(source)]) == 1
    assert "Type mismatch" in capsys.readouterr().err


def test_file_without_main_is_an_error(tmp_path, capsys):
    source = tmp_path / "program.txt"
    source.write_text("int f := 1\n", encoding="utf-8")
    assert main([str(source)]) == 1
    assert "main" in capsys.readouterr().err


def test_interactive_runs_block_on_blank_line(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("int main := 7\n\nexit\n"))
    assert main([]) == 0
    assert capsys.readouterr().out == "7\n\n"


def test_interactive_exit_discards_pending_block(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("int main := 7\nexit\n"))
    assert main([]) == 0
    assert capsys.readouterr().out == ""


def test_interactive_runs_pending_block_at_end_of_input(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("int main := 8\n"))
    assert main([]) == 0
    assert capsys.readouterr().out == "8\n\n"


def test_interactive_multi_line_block(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("int f := 3\nint main := f\n\n"))
    assert main([]) == 0
    assert capsys.readouterr().out == "3\n\n"


def test_interactive_error_stops(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("int main := true\n\nint main := 1\n\n"))
    assert main([]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error" in captured.err