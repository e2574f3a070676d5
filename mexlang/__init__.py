"""mexico language package.

Lexer, IR builder, interpreter and obfuscator for the mexico scripting
language. The most used names are exposed at the package level for
convenience.


File: __init__.py
Version: 0.1.0
License: MIT
"""

from .operations import Op
from .lexer import Anomaly, Token, tokenize
from .builder import Builder, Instruction, Program, build_program, disassemble
from .exceptions import (
    MexicoError,
    ExecutionFault,
    StackUnderflowError,
    TapeHeadUnderflowError,
    DivisionByZeroError,
    InvalidJumpError,
)
from .interfaces import IOHandler, ConsoleIO, BufferedIO
from .interpreter import Interpreter, MachineState, Status, run_program
from .obfuscator import Obfuscator, obfuscate_program, write_obfuscated

__all__ = [
    "Op",
    "Anomaly",
    "Token",
    "tokenize",
    "Builder",
    "Instruction",
    "Program",
    "build_program",
    "disassemble",
    "MexicoError",
    "ExecutionFault",
    "StackUnderflowError",
    "TapeHeadUnderflowError",
    "DivisionByZeroError",
    "InvalidJumpError",
    "IOHandler",
    "ConsoleIO",
    "BufferedIO",
    "Interpreter",
    "MachineState",
    "Status",
    "run_program",
    "Obfuscator",
    "obfuscate_program",
    "write_obfuscated",
]
