"""Lexer for mexico.

mexico is line oriented: every source line carries at most one command word
and one argument word, and each line becomes exactly one instruction later
on.  The lexer therefore works line by line, classifying the first two words
of each trimmed, lower-cased line with a small table of regular expressions.

The lexer never fails.  A line whose command word is not recognised is
dropped and recorded as a lexical :class:`Anomaly` instead of raising, so a
damaged script still runs as far as it can.  Every source line, kept or
dropped, produces a ``NEWLINE`` token so line numbers stay aligned with
instruction indices.


File: lexer.py
Version: 0.1.0
License: MIT
"""

import logging
import re
from dataclasses import dataclass

from mexlang.operations import COMMANDS

logger = logging.getLogger(__name__)

# Literal operands are 32-bit signed integers.
INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1

COMMENT_PREFIXES = ("#", "//", ";")


class Token:
    """
    Represents a lexical token with a type and value.
    """
    def __init__(self, type_, value, line):
        """
        Initialize a new token.

        Parameters:
            type_ (str): The token type.
            value (Any): The token value.
            line (int): The one-based source line.
        """
        self.type = type_
        self.value = value
        self.line = line

    def __repr__(self) -> str:
        """
        Return a string representation of the token.
        """
        return f"Token({self.type}, {self.value}, line={self.line})"

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Token)
            and (self.type, self.value, self.line) == (other.type, other.value, other.line)
        )


@dataclass(frozen=True)
class Anomaly:
    """A malformed fragment that was dropped instead of reported."""
    kind: str
    line: int
    text: str
    reason: str

    def __str__(self) -> str:
        return f"{self.kind} anomaly on line {self.line}: {self.reason} ({self.text!r})"


# Word classes, tried in order against a whole word.
token_specification: list[tuple[str, str]] = [
    ('NUMBER',    r'[+-]?[0-9]+'),
    ('LABEL',     r'[^:]*:.*'),
    ('WORD',      r'\S+'),
]

_word_regex = re.compile(
    '|'.join(f'(?P<{name}>{pattern})' for name, pattern in token_specification)
)


def _classify(word: str) -> str:
    return _word_regex.fullmatch(word).lastgroup


def split_lines(code: str) -> list[str]:
    """
    Split source text into lines.

    Only ``\\n`` ends a line and a trailing ``\\r`` is removed.  A final
    newline does not open an extra empty line.
    """
    if not code:
        return []
    lines = code.split('\n')
    if lines[-1] == '':
        lines.pop()
    return [line[:-1] if line.endswith('\r') else line for line in lines]


def is_comment(line: str) -> bool:
    """Return ``True`` for a trimmed line that is a comment."""
    return line.startswith(COMMENT_PREFIXES)


def tokenize(code) -> tuple[list[Token], list[Anomaly]]:
    """
    Convert a string of source code into a list of tokens.

    Parameters:
        code (str): The source code to tokenize.

    Returns:
        list[Token]: A list of Token instances, ending with ``EOF``.
        list[Anomaly]: Fragments that were silently dropped.
    """
    tokens: list[Token] = []
    anomalies: list[Anomaly] = []
    line_num = 0

    for line_num, raw in enumerate(split_lines(code), start=1):
        line = raw.strip().lower()
        words = line.split()
        if is_comment(line) or not words:
            tokens.append(Token('NEWLINE', '\n', line_num))
            continue

        command = words[0]
        kind = _classify(command)
        if command in COMMANDS:
            tokens.append(Token('COMMAND', command, line_num))
        elif kind == 'LABEL':
            tokens.append(Token('LABEL', command.split(':', 1)[0], line_num))
        else:
            anomaly = Anomaly('lexical', line_num, raw, f"unknown command {command!r}")
            logger.debug("%s", anomaly)
            anomalies.append(anomaly)
            tokens.append(Token('NEWLINE', '\n', line_num))
            continue

        if len(words) > 1:
            arg = words[1]
            if _classify(arg) == 'NUMBER' and INT_MIN <= int(arg) <= INT_MAX:
                tokens.append(Token('NUMBER', int(arg), line_num))
            else:
                tokens.append(Token('IDENT', arg, line_num))

        tokens.append(Token('NEWLINE', '\n', line_num))

    tokens.append(Token('EOF', None, line_num + 1))
    return tokens, anomalies
