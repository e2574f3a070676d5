"""
mexico Language Interpreter

This is the main entry point for the mexico interpreter.

Workflow:
1. The source script is read from the file given on the command line.
2. The Lexer tokenizes the source, silently dropping lines it cannot read.
3. The Builder turns the tokens into a linked instruction sequence.
4. The Obfuscator writes a scrambled but equivalent copy of the script.
5. The Interpreter runs the instructions against stdin/stdout.

Set ``MEXICODEBUG`` in the environment to log every recovery the lexer and
builder make and to dump the tokens and the instruction listing.
"""
import argparse
import logging
import os
import sys

from mexlang.builder import Builder, disassemble
from mexlang.exceptions import ExecutionFault
from mexlang.interpreter import Interpreter
from mexlang.lexer import tokenize
from mexlang.obfuscator import DEFAULT_OUTPUT, write_obfuscated

logger = logging.getLogger("mexico")

EXIT_OK = 0
EXIT_FAULT = 1
EXIT_USAGE = 2


def build_arg_parser() -> argparse.ArgumentParser:
    """
    Build the command line parser.
    """
    parser = argparse.ArgumentParser(
        prog="mexico",
        description="Run a mexico script and write an obfuscated copy of it.",
    )
    parser.add_argument("script", help="Path to a mexico source file.")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Diagnostic execution mode: slower, with a full crash report.",
    )
    parser.add_argument(
        "-o", "--output",
        default=DEFAULT_OUTPUT,
        help=f"Where to write the obfuscated script (default: {DEFAULT_OUTPUT}).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the obfuscator; random when omitted.",
    )
    parser.add_argument(
        "--no-obfuscate",
        action="store_true",
        help="Do not write the obfuscated script.",
    )
    return parser


def configure_logging() -> None:
    """
    Route library logging to stderr; verbose when ``MEXICODEBUG`` is set.
    """
    level = logging.DEBUG if os.environ.get("MEXICODEBUG") else logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def debug_print_tokens_ir(tokens, program):
    """
    Print tokenized source and the instruction listing.
    """
    print("\nTokens:\n", file=sys.stderr)
    print(tokens, file=sys.stderr)
    print("\nIR:\n", file=sys.stderr)
    print(disassemble(program), file=sys.stderr)
    print(" ", file=sys.stderr)


def report_fault(fault: ExecutionFault, interpreter: Interpreter) -> None:
    """
    Print a crash report for ``fault``: short in release mode, full in debug mode.
    """
    state = fault.state if fault.state is not None else interpreter.state
    if not interpreter.debug:
        print(
            f"\nProgram crashed. Error code: {fault}\n"
            "Use --debug for a more detailed crash report.",
            file=sys.stderr,
        )
        return
    instr = interpreter.program[state.program_counter]
    print(
        f"\n\nProgram crashed, error: {fault}\n\n"
        f"State before failed execution: \n"
        f"Program counter: {state.program_counter}\n"
        f"Tape head: {state.tape_head}\n"
        f"Tape length: {len(state.tape)}\n"
        f"Stack size: {len(state.stack)} Command: {instr.render() or instr.op.name}\n",
        file=sys.stderr,
    )
    print(f"\nProgram crashed with tape state:\n\n{state.tape}", file=sys.stderr)
    print(f"stack = {state.stack}", file=sys.stderr)


def run_script(script_name: str, debug: bool = False, output: str | None = DEFAULT_OUTPUT,
               seed: int | None = None) -> int:
    """
    Run a mexico script and return the process exit code.
    """
    try:
        with open(script_name, "r", encoding="utf-8") as f:
            code = f.read()
    except (OSError, UnicodeDecodeError) as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return EXIT_USAGE

    tokens, anomalies = tokenize(code)
    program = Builder(tokens, anomalies).build()

    if os.environ.get("MEXICODEBUG"):
        debug_print_tokens_ir(tokens, program)

    if output:
        try:
            write_obfuscated(program, output, seed)
        except OSError as e:
            print(f"{type(e).__name__}: {e}", file=sys.stderr)
            return EXIT_USAGE
        logger.debug("wrote obfuscated script to %s", output)

    interpreter = Interpreter(program, debug=debug)
    try:
        state = interpreter.run()
    except ExecutionFault as fault:
        report_fault(fault, interpreter)
        return EXIT_FAULT

    print(f"\nProgram terminated with tape state:\n\n{state.tape}")
    return EXIT_OK


def main(argv: list[str]) -> int:
    """
    Entry point for the CLI.

    Returns 0 after normal termination, 1 when the program faults and 2 when
    the script cannot be read, the obfuscated copy cannot be written or the
    arguments are wrong.
    """
    parser = build_arg_parser()
    try:
        args = parser.parse_args(argv[1:])
    except SystemExit as e:
        return EXIT_OK if e.code == 0 else EXIT_USAGE
    configure_logging()
    return run_script(
        args.script,
        debug=args.debug,
        output=None if args.no_obfuscate else args.output,
        seed=args.seed,
    )


def run() -> None:
    """Console script entry point."""
    sys.exit(main(sys.argv))


if __name__ == "__main__":
    run()
