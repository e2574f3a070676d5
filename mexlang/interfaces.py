"""Program I/O for the interpreter.

``read`` and ``print`` go through an :class:`IOHandler` so the interpreter
can run against the process streams or against in-memory buffers.


File: interfaces.py
Version: 0.1.0
License: MIT
"""

import sys
from abc import ABC, abstractmethod
from typing import List, Optional


class IOHandler(ABC):
    """Abstracts I/O so interpreters can be hosted in different frontends."""

    @abstractmethod
    def read_byte(self) -> Optional[int]:
        """Return the next input byte, or ``None`` at end of input."""

    @abstractmethod
    def write(self, text: str) -> None: ...


class ConsoleIO(IOHandler):
    """Process stdin/stdout, used by the CLI."""

    def read_byte(self) -> Optional[int]:
        sys.stdout.flush()
        data = sys.stdin.buffer.read(1)
        return data[0] if data else None

    def write(self, text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()


class BufferedIO(IOHandler):
    """In-memory I/O for tests and embedding."""

    def __init__(self, data: bytes | str = b"") -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.input = data
        self.offset = 0
        self.chunks: List[str] = []

    def read_byte(self) -> Optional[int]:
        if self.offset >= len(self.input):
            return None
        value = self.input[self.offset]
        self.offset += 1
        return value

    def write(self, text: str) -> None:
        self.chunks.append(text)

    @property
    def output(self) -> str:
        return "".join(self.chunks)
