"""Interpreter.

This is a stepping virtual machine for programs built by
:mod:`mexlang.builder`.

1. Execution Model
The machine fetches the instruction at the program counter, applies it to the
machine state and advances the program counter, unless the instruction was a
taken jump.  :meth:`Interpreter.step` executes one instruction and
:meth:`Interpreter.run` steps until the machine halts.

2. Machine State
A tape of cells, a tape head, a stack and a program counter.  Values are
32-bit signed integers and every arithmetic result wraps.  The tape grows to
the right on demand and reads as ``0`` where nothing was stored.  Booleans are
pushed as ``1`` and ``0``.  Binary operations pop their first operand from
the top of the stack, so ``push 1 / push 5 / sub`` leaves ``4``.

3. Termination
The machine halts normally when the program counter runs past the last
instruction; a jump to any address beyond the end does the same.  A runtime
fault (stack underflow, tape head underflow, division by zero, jump to a
negative address) halts it with status ``FAULTED`` and raises the matching
:class:`~mexlang.exceptions.ExecutionFault`.

4. Modes
Debug mode snapshots the state before every instruction, so a fault reports
the state the failing instruction started from, and logs each step.  It is
slower but behaves exactly like release mode.


File: interpreter.py
Version: 0.1.0
License: MIT
"""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from mexlang.builder import Instruction, Program
from mexlang.exceptions import (
    DivisionByZeroError,
    ExecutionFault,
    InvalidJumpError,
    StackUnderflowError,
    TapeHeadUnderflowError,
)
from mexlang.interfaces import ConsoleIO, IOHandler
from mexlang.operations import Op

logger = logging.getLogger(__name__)


def wrap(value: int) -> int:
    """Wrap ``value`` to a 32-bit signed integer."""
    return ((value + 0x80000000) & 0xFFFFFFFF) - 0x80000000


def trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


class Status(Enum):
    RUNNING = "running"
    HALTED = "halted"
    FAULTED = "faulted"


@dataclass
class MachineState:
    """Mutable execution context of one run."""
    program_counter: int = 0
    tape_head: int = 0
    tape: List[int] = field(default_factory=list)
    stack: List[int] = field(default_factory=list)
    status: Status = Status.RUNNING


class Interpreter:
    """Stepping interpreter for mexico programs."""

    def __init__(self, program: Program, io: Optional[IOHandler] = None, debug: bool = False):
        """Initialize the interpreter."""
        self.program = program
        self.io = io if io is not None else ConsoleIO()
        self.debug = debug
        self.state = MachineState()
        self._instr: Optional[Instruction] = None
        if not len(program):
            self.state.status = Status.HALTED

    # ------------------------------------------------------------------
    # Driving the machine
    # ------------------------------------------------------------------

    def step(self) -> bool:
        """
        Execute one instruction.

        Returns:
            bool: ``True`` while the machine is still running.

        Raises:
            ExecutionFault: If the instruction violates a machine invariant.
        """
        state = self.state
        if state.status is not Status.RUNNING:
            return False

        snapshot = copy.deepcopy(state) if self.debug else None
        instr = self.program[state.program_counter]
        self._instr = instr
        if self.debug:
            logger.debug(
                "%d: %s head=%d stack=%s",
                state.program_counter, instr.render() or instr.op.name, state.tape_head, state.stack,
            )

        try:
            state.program_counter = self.execute(instr, state.program_counter + 1)
        except ExecutionFault as fault:
            state.status = Status.FAULTED
            if snapshot is not None:
                snapshot.status = Status.FAULTED
            fault.state = snapshot if snapshot is not None else state
            logger.debug("halted on %s", fault)
            raise

        if state.program_counter >= len(self.program):
            state.status = Status.HALTED
        return state.status is Status.RUNNING

    def run(self) -> MachineState:
        """
        Run until the machine halts and return the final state.

        Raises:
            ExecutionFault: If the program faults.
        """
        while self.step():
            pass
        return self.state

    # ------------------------------------------------------------------
    # Stack and tape helpers
    # ------------------------------------------------------------------

    def _fault(self, cls, detail=None):
        return cls(
            detail,
            program_counter=self.state.program_counter,
            line=self._instr.line if self._instr is not None else None,
        )

    def pop(self) -> int:
        if not self.state.stack:
            raise self._fault(StackUnderflowError, "pop from an empty stack")
        return self.state.stack.pop()

    def push(self, value: int) -> None:
        self.state.stack.append(wrap(value))

    def read_cell(self) -> int:
        state = self.state
        if state.tape_head < len(state.tape):
            return state.tape[state.tape_head]
        return 0

    def write_cell(self, value: int) -> None:
        state = self.state
        if state.tape_head >= len(state.tape):
            state.tape.extend([0] * (state.tape_head + 1 - len(state.tape)))
        state.tape[state.tape_head] = value

    def jump(self, address: int) -> int:
        if address < 0:
            raise self._fault(InvalidJumpError, f"address {address}")
        return address

    # ------------------------------------------------------------------
    # Instruction semantics
    # ------------------------------------------------------------------

    def execute(self, instr: Instruction, next_pc: int) -> int:
        """
        Apply ``instr`` to the machine state.

        Parameters:
            instr (Instruction): The instruction to execute.
            next_pc (int): The address of the following instruction.

        Returns:
            int: The new program counter.
        """
        state = self.state
        match instr.op:
            case Op.NOP | Op.LABEL:
                pass
            case Op.LEFT:
                if state.tape_head == 0:
                    raise self._fault(TapeHeadUnderflowError, "left of cell 0")
                state.tape_head -= 1
            case Op.RIGHT:
                state.tape_head += 1
            case Op.PUSHT:
                self.push(self.read_cell())
            case Op.PUSH:
                self.push(instr.arg)
            case Op.POP:
                self.write_cell(self.pop())
            case Op.DUP:
                value = self.pop()
                self.push(value)
                self.push(value)
            case Op.DEL:
                self.pop()
            case Op.EQ:
                a, b = self.pop(), self.pop()
                self.push(int(a == b))
            case Op.NOT:
                self.push(int(self.pop() == 0))
            case Op.GT:
                a, b = self.pop(), self.pop()
                self.push(int(a > b))
            case Op.LT:
                a, b = self.pop(), self.pop()
                self.push(int(a < b))
            case Op.ADD:
                a, b = self.pop(), self.pop()
                self.push(a + b)
            case Op.SUB:
                a, b = self.pop(), self.pop()
                self.push(a - b)
            case Op.MULT:
                a, b = self.pop(), self.pop()
                self.push(a * b)
            case Op.DIV:
                a, b = self.pop(), self.pop()
                if b == 0:
                    raise self._fault(DivisionByZeroError, "div by zero")
                self.push(trunc_div(a, b))
            case Op.MOD:
                a, b = self.pop(), self.pop()
                if b == 0:
                    raise self._fault(DivisionByZeroError, "mod by zero")
                self.push(a - b * trunc_div(a, b))
            case Op.READ:
                value = self.io.read_byte()
                self.push(-1 if value is None else value)
            case Op.PRINT:
                self.io.write(chr(self.pop() & 0xFF))
            case Op.JMP:
                return self.jump(self.pop())
            case Op.JMPC:
                address = self.pop()
                if self.pop() != 0:
                    return self.jump(address)
        return next_pc


def run_program(program: Program, io: Optional[IOHandler] = None, debug: bool = False) -> MachineState:
    """Execute ``program`` to completion and return the final state."""
    return Interpreter(program, io, debug).run()
