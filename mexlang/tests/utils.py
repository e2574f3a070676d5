"""
Utility functions and sample scripts shared across mexico tests.
"""
from mexlang.builder import build_program
from mexlang.interfaces import BufferedIO
from mexlang.interpreter import Interpreter


# Prints the counter cell while counting it down from 3 to 0.
COUNTDOWN = (
    "push 3\n"
    "pop\n"
    "loop:\n"
    "pusht\n"
    "push 48\n"
    "add\n"
    "print\n"
    "push 1\n"
    "pusht\n"
    "sub\n"
    "pop\n"
    "pusht\n"
    "push loop\n"
    "jmpc\n"
)

# Copies stdin to stdout until end of input.
ECHO = (
    "; echo\n"
    "loop:\n"
    "    read\n"
    "    dup\n"
    "    push -1\n"
    "    eq\n"
    "    push end\n"
    "    jmpc\n"
    "    print\n"
    "    push loop\n"
    "    jmp\n"
    "end:\n"
    "    del\n"
)

# Prints "Hi!" with a forward jump over code that must not run.
HELLO = (
    "# greet\n"
    "push 72\n"
    "print\n"
    "push skip\n"
    "jmp\n"
    "push 88\n"
    "print\n"
    "skip:\n"
    "push 105\n"
    "print\n"
    "right\n"
    "push 33\n"
    "pop\n"
    "pusht\n"
    "print\n"
)


def run_source(source: str, stdin: bytes | str = b"", debug: bool = False):
    """
    Build and run source code and return the output and the final state.
    """
    io = BufferedIO(stdin)
    state = Interpreter(build_program(source), io, debug=debug).run()
    return io.output, state
