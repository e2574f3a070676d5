"""Shared definitions for mexico opcodes.

This module centralizes the opcode names used by the lexer, the IR builder,
the interpreter and the obfuscator.  The value of each member is the command
word that spells it in a script, so rendering an instruction back to source
text is a lookup rather than a table kept in sync by hand.


File: operations.py
Version: 0.1.0
License: MIT
"""

from enum import Enum


class Op(str, Enum):
    """
    Enumeration of mexico opcodes.
    """

    # Tape
    LEFT = "left"
    RIGHT = "right"
    PUSHT = "pusht"
    POP = "pop"

    # Stack
    PUSH = "push"
    DUP = "dup"
    DEL = "del"

    # Comparison
    EQ = "eq"
    NOT = "not"
    GT = "gt"
    LT = "lt"

    # Arithmetic
    ADD = "add"
    SUB = "sub"
    MULT = "mult"
    DIV = "div"
    MOD = "mod"

    # I/O
    READ = "read"
    PRINT = "print"

    # Control flow
    JMP = "jmp"
    JMPC = "jmpc"

    # Pseudo instructions, never spelled as a command word
    LABEL = "label"
    NOP = "nop"

    def __str__(self) -> str:  # pragma: no cover - trivial
        """
        Return the underlying string value for nicer debug output.
        """
        return self.value


# Command words recognised at the start of a line.
COMMANDS: dict[str, Op] = {
    op.value: op for op in Op if op not in (Op.LABEL, Op.NOP)
}


__all__ = ["Op", "COMMANDS"]
