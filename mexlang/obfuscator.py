"""mexico obfuscator.

Rewrites a built :class:`~mexlang.builder.Program` as new mexico source that
behaves the same but reads nothing like the original:

1. blank and comment lines are removed, then blank lines are scattered back
   in at random positions;
2. stack-neutral dead code (``push 3 / del``, ``push 2 / dup / add / del`` …)
   is inserted at random positions;
3. labels are replaced by the integer index they now resolve to, and the
   label lines themselves become blank;
4. every line gets a drifting indentation of spaces and tabs and the odd
   trailing space.

Because step 3 hardcodes jump addresses, the output only survives a single
pass: obfuscating it again shifts those addresses and may change what the
program does.

Usage:
    python -m mexlang.obfuscator path/to/script.mxc [output.mxc]


File: obfuscator.py
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional, TextIO

from mexlang.builder import Instruction, Program, build_program
from mexlang.operations import Op

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "fuxxor.mxc"

DeadCode = Callable[[random.Random], List[Instruction]]


def _push(value: int) -> Instruction:
    return Instruction(Op.PUSH, value)


def _small(rng: random.Random) -> int:
    return rng.randint(-3, 9)


def _divisor(rng: random.Random) -> int:
    # Never zero, so the division cannot fault.
    return rng.randint(3, 9)


# Each generator returns instructions with no net effect on stack or tape.
DEAD_CODE: list[tuple[DeadCode, int]] = [
    (lambda rng: [_push(_small(rng)), Instruction(Op.DEL)], 200),
    (lambda rng: [_push(_small(rng)), _push(_small(rng)), Instruction(Op.ADD), Instruction(Op.DEL)], 200),
    (lambda rng: [_push(_small(rng)), _push(_small(rng)), Instruction(Op.SUB), Instruction(Op.DEL)], 200),
    (lambda rng: [_push(_small(rng)), Instruction(Op.DUP), Instruction(Op.ADD), Instruction(Op.DEL)], 200),
    (lambda rng: [
        _push(_divisor(rng)), _push(_divisor(rng)), Instruction(Op.DIV),
        _push(_divisor(rng)), Instruction(Op.MULT), Instruction(Op.DEL),
    ], 20),
    (lambda rng: [
        _push(_small(rng)), Instruction(Op.DUP), Instruction(Op.MULT),
        _push(_divisor(rng)), Instruction(Op.MULT), Instruction(Op.DEL),
    ], 20),
    (lambda rng: [Instruction(Op.NOP)], 100),
]

BLANK_ROUNDS = 100


class Obfuscator:
    """Semantics preserving, randomized re-encoding of a program."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random()

    def _position(self, lines: List[Instruction]) -> int:
        return self.rng.randrange(len(lines)) if lines else 0

    def scatter_blanks(self, lines: List[Instruction]) -> None:
        """
        Insert one to three blank lines at random positions, ``BLANK_ROUNDS`` times.
        """
        for _ in range(BLANK_ROUNDS):
            for _ in range(self.rng.randint(1, 3)):
                lines.insert(self._position(lines), Instruction(Op.NOP))

    def insert_dead_code(self, lines: List[Instruction], generate: DeadCode, quantity: int) -> None:
        """
        Insert ``quantity`` snippets from ``generate`` at random positions.
        """
        for _ in range(quantity):
            index = self._position(lines)
            lines[index:index] = generate(self.rng)

    @staticmethod
    def resolve_labels(lines: List[Instruction]) -> List[Instruction]:
        """
        Replace label references by their index and label lines by blanks.
        """
        labels = {
            instr.label: idx for idx, instr in enumerate(lines) if instr.op is Op.LABEL
        }
        resolved: List[Instruction] = []
        for instr in lines:
            if instr.op is Op.PUSH and instr.label is not None:
                resolved.append(_push(labels[instr.label]))
            elif instr.op is Op.LABEL:
                resolved.append(Instruction(Op.NOP))
            else:
                resolved.append(instr)
        return resolved

    def render(self, lines: List[Instruction]) -> str:
        """
        Render instructions one per line with random indentation.
        """
        rng = self.rng
        indent = ""
        out: List[str] = []
        for instr in lines:
            line = indent + instr.render()
            if rng.randrange(50) == 0:
                line += " "
            if rng.randrange(20) == 0:
                indent += " "
            if rng.randrange(20) == 0:
                indent += "\t"
            if rng.randrange(8) == 0:
                indent = indent[:-1]
            out.append(line + "\n")
        return "".join(out)

    def obfuscate(self, program: Program, sink: Optional[TextIO] = None) -> str:
        """
        Return the obfuscated source of ``program``.

        Parameters:
            program (Program): A program built from unobfuscated source.
            sink (TextIO | None): Where to write the text, if anywhere.

        Returns:
            str: The obfuscated source.
        """
        lines = [instr for instr in program if instr.op is not Op.NOP]
        self.scatter_blanks(lines)
        for generate, quantity in DEAD_CODE:
            self.insert_dead_code(lines, generate, quantity)
        lines = self.resolve_labels(lines)
        text = self.render(lines)
        logger.debug("obfuscated %d instructions into %d lines", len(program), len(lines))
        if sink is not None:
            sink.write(text)
        return text


def obfuscate_program(program: Program, sink: Optional[TextIO] = None, seed: Optional[int] = None) -> str:
    """Obfuscate ``program`` with a generator seeded by ``seed``."""
    return Obfuscator(random.Random(seed)).obfuscate(program, sink)


def write_obfuscated(program: Program, path: str = DEFAULT_OUTPUT, seed: Optional[int] = None) -> str:
    """Obfuscate ``program`` into ``path``, overwriting it."""
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        return obfuscate_program(program, f, seed)


def main(argv: List[str]) -> int:
    if not argv:
        print("Usage: python -m mexlang.obfuscator <script.mxc> [output.mxc]")
        return 1
    path = argv[0]
    out_path = argv[1] if len(argv) > 1 else DEFAULT_OUTPUT
    with open(path, "r", encoding="utf-8") as f:
        src = f.read()
    write_obfuscated(build_program(src), out_path)
    print(f"Obfuscated {path} -> {out_path}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    import sys

    raise SystemExit(main(sys.argv[1:]))
