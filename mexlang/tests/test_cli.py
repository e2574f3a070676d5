"""Tests for the ``mexico`` command line entry point."""
import io
import sys

import mexico

from mexlang.tests.utils import COUNTDOWN, ECHO, run_source


def _write_script(tmp_path, source, name="prog.mxc"):
    path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return path


def test_runs_script_and_writes_obfuscated_copy(tmp_path, capsys):
    script = _write_script(tmp_path, COUNTDOWN)
    out_path = tmp_path / "out.mxc"
    code = mexico.main(["mexico", str(script), "-o", str(out_path), "--seed", "5"])
    assert code == mexico.EXIT_OK
    out = capsys.readouterr().out
    assert out.startswith("321")
    assert out.endswith("\nProgram terminated with tape state:\n\n[0]\n")
    assert run_source(out_path.read_text(encoding="utf-8"))[0] == "321"


def test_default_output_path(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    script = _write_script(tmp_path, "push 65\nprint\n")
    assert mexico.main(["mexico", str(script)]) == mexico.EXIT_OK
    assert (tmp_path / "fuxxor.mxc").exists()
    assert capsys.readouterr().out.startswith("A")


def test_no_obfuscate(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    script = _write_script(tmp_path, "push 65\nprint\n")
    assert mexico.main(["mexico", str(script), "--no-obfuscate"]) == mexico.EXIT_OK
    assert not (tmp_path / "fuxxor.mxc").exists()


def test_fault_exit_code_release(tmp_path, capsys):
    script = _write_script(tmp_path, "push 1\ndel\ndel\n")
    code = mexico.main(["mexico", str(script), "--no-obfuscate"])
    assert code == mexico.EXIT_FAULT
    err = capsys.readouterr().err
    assert "Program crashed. Error code: StackUnderflow" in err
    assert "--debug" in err


def test_fault_report_debug(tmp_path, capsys):
    script = _write_script(tmp_path, "push 4\npop\nleft\n")
    code = mexico.main(["mexico", str(script), "--no-obfuscate", "--debug"])
    assert code == mexico.EXIT_FAULT
    err = capsys.readouterr().err
    assert "TapeHeadUnderflow" in err
    assert "Program counter: 2" in err
    assert "Tape length: 1" in err
    assert "Command: left" in err
    assert "[4]" in err


def test_malformed_lines_do_not_change_exit_code(tmp_path, capsys):
    script = _write_script(tmp_path, "garbage here\npush nowhere\npush 66\nprint\n")
    assert mexico.main(["mexico", str(script), "--no-obfuscate"]) == mexico.EXIT_OK
    assert capsys.readouterr().out.startswith("B")


def test_missing_file(tmp_path, capsys):
    code = mexico.main(["mexico", str(tmp_path / "missing.mxc")])
    assert code == mexico.EXIT_USAGE
    assert "FileNotFoundError" in capsys.readouterr().err


def test_usage_errors(capsys):
    assert mexico.main(["mexico"]) == mexico.EXIT_USAGE
    assert mexico.main(["mexico", "--help"]) == mexico.EXIT_OK
    assert "usage: mexico" in capsys.readouterr().out


def test_debug_env_dumps_ir(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("MEXICODEBUG", "1")
    script = _write_script(tmp_path, "push 65\nprint\n")
    assert mexico.main(["mexico", str(script), "--no-obfuscate"]) == mexico.EXIT_OK
    err = capsys.readouterr().err
    assert "Tokens:" in err
    assert "0 PUSH 65" in err


def test_unwritable_output_path(tmp_path, capsys):
    script = _write_script(tmp_path, "push 65\nprint\n")
    out_path = tmp_path / "nodir" / "x.mxc"
    code = mexico.main(["mexico", str(script), "-o", str(out_path)])
    assert code == mexico.EXIT_USAGE
    captured = capsys.readouterr()
    assert "FileNotFoundError" in captured.err
    # Nothing runs when the copy cannot be written.
    assert captured.out == ""


def test_script_with_invalid_utf8(tmp_path, capsys):
    script = tmp_path / "bad.mxc"
    script.write_bytes(b"push 65\nprint\n\xff\xfe\n")
    code = mexico.main(["mexico", str(script), "--no-obfuscate"])
    assert code == mexico.EXIT_USAGE
    assert "UnicodeDecodeError" in capsys.readouterr().err


def test_negative_jump_exits_with_fault(tmp_path, capsys):
    script = _write_script(tmp_path, "push -1\njmp\n")
    assert mexico.main(["mexico", str(script), "--no-obfuscate"]) == mexico.EXIT_FAULT
    assert "InvalidJump" in capsys.readouterr().err


def test_reads_program_input_from_stdin(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"hola")))
    script = _write_script(tmp_path, ECHO)
    assert mexico.main(["mexico", str(script), "--no-obfuscate"]) == mexico.EXIT_OK
    out = capsys.readouterr().out
    assert out.startswith("hola\nProgram terminated")
