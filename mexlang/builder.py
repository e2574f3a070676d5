"""mexico IR builder.

This module lowers the token stream produced by :mod:`mexlang.lexer` into a
:class:`Program`: a flat, indexable sequence of :class:`Instruction` objects
with every label reference resolved to an instruction index.

Each source line becomes exactly one instruction, so an instruction's index
is also its zero-based line number and jump addresses computed by a script
(``push 4`` followed by ``jmp``) keep working.  Blank, comment and dropped
lines become ``NOP``.

Label references may point forward.  They are emitted as placeholders and
patched once the whole script has been seen, the same way loop exits are
back-patched by a compiler.  A reference to a label that is never defined is
dropped to ``NOP`` and recorded as a structural anomaly, so the interpreter
never meets an unresolved target.

Usage:
    python -m mexlang.builder path/to/script.mxc


File: builder.py
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional, Tuple

from mexlang.lexer import Anomaly, Token, tokenize
from mexlang.operations import Op

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Instruction:
    """One IR node."""
    op: Op
    arg: Optional[int] = None
    # Label name for LABEL, and for a PUSH that came from a label reference.
    label: Optional[str] = None
    line: int = 0

    def render(self) -> str:
        """Return the instruction as a line of mexico source."""
        if self.op is Op.NOP:
            return ""
        if self.op is Op.LABEL:
            return f"{self.label}:"
        if self.op is Op.PUSH:
            return f"push {self.label if self.label is not None else self.arg}"
        return self.op.value


@dataclass(frozen=True)
class Program:
    """A fully linked, immutable instruction sequence."""
    code: Tuple[Instruction, ...]
    labels: Mapping[str, int] = field(default_factory=dict)
    anomalies: Tuple[Anomaly, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", tuple(self.code))
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))
        object.__setattr__(self, "anomalies", tuple(self.anomalies))

    def __len__(self) -> int:
        return len(self.code)

    def __getitem__(self, index: int) -> Instruction:
        return self.code[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.code)


class Builder:
    """Build a :class:`Program` from mexico tokens."""

    def __init__(self, tokens: List[Token], anomalies: Optional[List[Anomaly]] = None) -> None:
        """
        Initialize the builder state.
        """
        self.tokens = tokens
        self.pos = 0
        self.code: List[Instruction] = []
        self.labels: dict[str, int] = {}
        # Label pushes waiting for the label table: (index, label name).
        self.pending: List[Tuple[int, str]] = []
        self.anomalies: List[Anomaly] = list(anomalies or [])

    # ------------------------------------------------------------------
    # Helper utilities
    # ------------------------------------------------------------------
    def emit(self, op: Op, arg: Optional[int] = None, label: Optional[str] = None, line: int = 0) -> None:
        """
        Emit an instruction.
        """
        self.code.append(Instruction(op, arg, label, line))

    def emit_placeholder(self, op: Op, label: str, line: int) -> int:
        """
        Emit an instruction whose operand is the index of a label.
        """
        idx = len(self.code)
        self.code.append(Instruction(op, None, label, line))
        self.pending.append((idx, label))
        return idx

    def patch(self, idx: int, target: int) -> None:
        """
        Patch a placeholder instruction with a target address.
        """
        instr = self.code[idx]
        self.code[idx] = Instruction(instr.op, target, instr.label, instr.line)

    def drop(self, idx: int, reason: str, text: Optional[str] = None) -> None:
        """
        Replace an instruction with ``NOP`` and record why.
        """
        instr = self.code[idx]
        anomaly = Anomaly("structural", instr.line, text or instr.render(), reason)
        logger.debug("%s", anomaly)
        self.anomalies.append(anomaly)
        self.code[idx] = Instruction(Op.NOP, line=instr.line)

    def _line_tokens(self) -> List[Token]:
        """
        Consume the tokens of one source line, up to and including ``NEWLINE``.
        """
        line: List[Token] = []
        while self.pos < len(self.tokens) and self.tokens[self.pos].type not in ("NEWLINE", "EOF"):
            line.append(self.tokens[self.pos])
            self.pos += 1
        if self.pos < len(self.tokens) and self.tokens[self.pos].type == "NEWLINE":
            line.append(self.tokens[self.pos])
            self.pos += 1
        return line

    # ------------------------------------------------------------------
    # Build entry points
    # ------------------------------------------------------------------
    def build(self) -> Program:
        """
        Build the token stream into a linked program.
        """
        while self.pos < len(self.tokens) and self.tokens[self.pos].type != "EOF":
            self.build_line(self._line_tokens())

        for idx, label in self.pending:
            if label in self.labels:
                self.patch(idx, self.labels[label])
            else:
                self.drop(idx, f"undefined label {label!r}")

        return Program(self.code, self.labels, self.anomalies)

    def build_line(self, line: List[Token]) -> None:
        """
        Build a single source line into exactly one instruction.
        """
        lineno = line[-1].line if line else 0
        head = line[0] if line else None
        arg = line[1] if len(line) > 1 and line[1].type in ("NUMBER", "IDENT") else None

        if head is None or head.type == "NEWLINE":
            self.emit(Op.NOP, line=lineno)
        elif head.type == "LABEL":
            # A redefinition overrides the earlier one.
            self.labels[head.value] = len(self.code)
            self.emit(Op.LABEL, label=head.value, line=lineno)
        elif head.value == Op.PUSH.value:
            if arg is None:
                self.emit(Op.PUSH, line=lineno)
                self.drop(len(self.code) - 1, "push without an argument", text="push")
            elif arg.type == "NUMBER":
                self.emit(Op.PUSH, arg.value, line=lineno)
            else:
                self.emit_placeholder(Op.PUSH, arg.value, lineno)
        else:
            self.emit(Op(head.value), line=lineno)


def build_program(source: str) -> Program:
    """Tokenize and build mexico source text."""
    tokens, anomalies = tokenize(source)
    return Builder(tokens, anomalies).build()


def disassemble(program: Program) -> str:
    """Return a human readable listing of ``program``."""
    lines: List[str] = []
    width = len(str(max(len(program) - 1, 0)))
    for idx, instr in enumerate(program):
        if instr.op is Op.NOP:
            text = "NOP"
        elif instr.op is Op.LABEL:
            text = f"LABEL {instr.label}"
        elif instr.op is Op.PUSH and instr.label is not None:
            text = f"PUSH {instr.arg} ({instr.label})"
        elif instr.op is Op.PUSH:
            text = f"PUSH {instr.arg}"
        else:
            text = instr.op.name
        lines.append(f"{idx:>{width}} {text}")
    return "\n".join(lines)


def main(argv: List[str]) -> int:
    import sys

    if not argv:
        print("Usage: python -m mexlang.builder <script.mxc>")
        return 1
    path = argv[0]
    with open(path, "r", encoding="utf-8") as f:
        src = f.read()
    program = build_program(src)
    sys.stdout.write(disassemble(program) + "\n")
    for anomaly in program.anomalies:
        sys.stderr.write(f"{anomaly}\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    import sys

    raise SystemExit(main(sys.argv[1:]))
