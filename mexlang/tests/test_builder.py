"""
Tests for the IR builder.
"""
import dataclasses

import pytest

from mexlang.builder import Builder, Instruction, build_program, disassemble
from mexlang.builder import main as builder_main
from mexlang.lexer import tokenize
from mexlang.operations import Op

from mexlang.tests.utils import COUNTDOWN, ECHO, HELLO


def test_one_instruction_per_line():
    """Instruction indices match zero-based source lines."""
    program = build_program("push 1\n\n# note\nprint\nnonsense\n")
    assert [instr.op for instr in program] == [Op.PUSH, Op.NOP, Op.NOP, Op.PRINT, Op.NOP]
    assert [instr.line for instr in program] == [1, 2, 3, 4, 5]
    assert program[0] == Instruction(Op.PUSH, 1, None, 1)


def test_forward_label_is_resolved():
    program = build_program("push end\njmp\npush 65\nprint\nend:\n")
    assert program[0].op is Op.PUSH
    assert program[0].arg == 4
    assert program[0].label == 'end'
    assert program.labels == {'end': 4}
    assert program[4] == Instruction(Op.LABEL, None, 'end', 5)


def test_backward_label_is_resolved():
    program = build_program(COUNTDOWN)
    assert program.labels['loop'] == 2
    push_loop = [i for i in program if i.label == 'loop' and i.op is Op.PUSH]
    assert [i.arg for i in push_loop] == [2]


def test_redefined_label_uses_last_definition():
    program = build_program("a:\na:\npush a\n")
    assert program[2].arg == 1


def test_undefined_label_is_dropped():
    program = build_program("push nowhere\njmp\n")
    assert program[0] == Instruction(Op.NOP, line=1)
    assert program[1].op is Op.JMP
    assert len(program.anomalies) == 1
    anomaly = program.anomalies[0]
    assert anomaly.kind == 'structural'
    assert anomaly.line == 1
    assert anomaly.text == 'push nowhere'


def test_push_without_argument_is_dropped():
    program = build_program("push\nprint\n")
    assert program[0].op is Op.NOP
    assert program.anomalies[0].text == 'push'


def test_lexical_anomalies_are_kept():
    tokens, anomalies = tokenize("bogus\npush ghost\n")
    program = Builder(tokens, anomalies).build()
    assert [a.kind for a in program.anomalies] == ['lexical', 'structural']


def test_empty_source():
    program = build_program("")
    assert len(program) == 0
    assert program.labels == {}


@pytest.mark.parametrize("source", [COUNTDOWN, ECHO, HELLO])
def test_unmatched_marker_anywhere_still_builds(source):
    """An undefined label reference inserted at any line leaves no dangling target."""
    lines = source.splitlines()
    for position in range(len(lines) + 1):
        damaged = "\n".join(lines[:position] + ["push ghost"] + lines[position:]) + "\n"
        program = build_program(damaged)
        assert len(program) == len(lines) + 1
        assert program[position].op is Op.NOP
        for instr in program:
            if instr.op is Op.PUSH:
                assert instr.arg is not None
            if instr.label is not None and instr.op is Op.PUSH:
                assert 0 <= instr.arg < len(program)
                assert program[instr.arg].op is Op.LABEL


def test_program_is_immutable():
    program = build_program(COUNTDOWN)
    with pytest.raises(TypeError):
        program.labels['loop'] = 0
    with pytest.raises(dataclasses.FrozenInstanceError):
        program.code = ()
    with pytest.raises(dataclasses.FrozenInstanceError):
        program[0].arg = 9


def test_render_round_trips_source_lines():
    program = build_program("Loop:\nPUSH loop\npush -3\njmp\n\n")
    assert [instr.render() for instr in program] == ["loop:", "push loop", "push -3", "jmp", ""]


def test_disassemble():
    listing = disassemble(build_program("push end\njmp\n\nend:\n")).splitlines()
    assert listing == ["0 PUSH 3 (end)", "1 JMP", "2 NOP", "3 LABEL end"]


def test_module_cli_lists_instructions(tmp_path, capsys):
    script = tmp_path / "prog.mxc"
    script.write_text("push 65\nprint\npush nowhere\n", encoding="utf-8")
    assert builder_main([str(script)]) == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines()[:2] == ["0 PUSH 65", "1 PRINT"]
    assert "undefined label 'nowhere'" in captured.err
    assert builder_main([]) == 1
