"""Errors.

Malformed source never raises: the lexer and the IR builder record anomalies
instead.  The exceptions here are runtime faults, raised by the interpreter
when a program breaks an invariant of the machine.


File: exceptions.py
Version: 0.1.0
License: MIT
"""


class MexicoError(Exception):
    """
    Base class for mexico errors.
    """
    pass


class ExecutionFault(MexicoError):
    """
    A runtime fault.  Execution halts and is not resumed.
    """
    kind = "Fault"

    def __init__(self, detail=None, program_counter=None, line=None, state=None):
        self.detail = detail
        self.program_counter = program_counter
        self.line = line
        # Machine state to report; filled in by the interpreter.
        self.state = state
        message = self.kind
        if detail:
            message += f": {detail}"
        if line is not None:
            message += f" on line {line}"
        super().__init__(message)


class StackUnderflowError(ExecutionFault):
    """
    Error for popping from an empty stack.
    """
    kind = "StackUnderflow"


class TapeHeadUnderflowError(ExecutionFault):
    """
    Error for moving the tape head left of the first cell.
    """
    kind = "TapeHeadUnderflow"


class DivisionByZeroError(ExecutionFault):
    """
    Error for ``div`` or ``mod`` with a zero divisor.
    """
    kind = "DivisionByZero"


class InvalidJumpError(ExecutionFault):
    """
    Error for jumping to a negative address.

    Addresses past the end still halt normally, but a negative one is a
    fault rather than an exit, so ``push -1 / jmp`` does not end a program.
    """
    kind = "InvalidJump"
