"""
mexico Language Server entry point.

This server provides basic language features for mexico source files using
`pygls`. It reuses the lexer and IR builder to index labels, supporting
definition lookup, hover information and document symbols, and it publishes
every line the builder silently dropped as a warning diagnostic.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from pygls.server import LanguageServer
from lsprotocol.types import (
    TEXT_DOCUMENT_DEFINITION,
    TEXT_DOCUMENT_HOVER,
    TEXT_DOCUMENT_DOCUMENT_SYMBOL,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DID_CHANGE,
    DefinitionParams,
    Diagnostic,
    DiagnosticSeverity,
    DidOpenTextDocumentParams,
    DidChangeTextDocumentParams,
    DocumentSymbol,
    DocumentSymbolParams,
    Hover,
    HoverParams,
    Location,
    MarkupContent,
    MarkupKind,
    Position,
    Range,
    SymbolKind,
)

from mexlang.builder import Program, build_program
from mexlang.lexer import split_lines
from mexlang.operations import COMMANDS, Op


COMMAND_DOCS: Dict[Op, str] = {
    Op.LEFT: "left: move the tape head one cell left",
    Op.RIGHT: "right: move the tape head one cell right",
    Op.PUSHT: "pusht: push the cell under the tape head",
    Op.PUSH: "push <int|label>: push a literal or a label's address",
    Op.POP: "pop: pop into the cell under the tape head",
    Op.DUP: "dup: duplicate the top of the stack",
    Op.DEL: "del: discard the top of the stack",
    Op.EQ: "eq: a == b",
    Op.NOT: "not: a == 0",
    Op.GT: "gt: a > b",
    Op.LT: "lt: a < b",
    Op.ADD: "add: a + b",
    Op.SUB: "sub: a - b",
    Op.MULT: "mult: a * b",
    Op.DIV: "div: a / b, truncating",
    Op.MOD: "mod: a % b, sign of a",
    Op.READ: "read: push the next input byte, -1 at end of input",
    Op.PRINT: "print: pop and write one character",
    Op.JMP: "jmp: pop an address and jump to it",
    Op.JMPC: "jmpc: pop an address, pop a condition, jump if non-zero",
}


@dataclass
class LabelSymbol:
    """A label defined in a mexico file."""

    name: str
    uri: str
    line: int
    detail: str


class MexicoLanguageServer(LanguageServer):
    """Language server for mexico source files."""

    def __init__(self) -> None:
        super().__init__("mexico-ls", "v0.1")
        self.symbols_by_uri: Dict[str, List[LabelSymbol]] = {}
        self.programs: Dict[str, Program] = {}

    def update_index(self, uri: str, text: str) -> List[Diagnostic]:
        """Build ``text``, update the label index for ``uri`` and return its diagnostics."""
        program = build_program(text)
        self.programs[uri] = program
        self.symbols_by_uri[uri] = self._label_symbols(uri, program)
        return self.diagnostics(program, split_lines(text))

    @staticmethod
    def _label_symbols(uri: str, program: Program) -> List[LabelSymbol]:
        symbols: List[LabelSymbol] = []
        for idx, instr in enumerate(program):
            if instr.op is Op.LABEL:
                detail = f"label {instr.label} -> instruction {program.labels[instr.label]}"
                symbols.append(LabelSymbol(instr.label, uri, idx, detail))
        return symbols

    @staticmethod
    def diagnostics(program: Program, lines: List[str]) -> List[Diagnostic]:
        """Turn the builder's recorded anomalies into warnings over their source ``lines``."""
        result: List[Diagnostic] = []
        for anomaly in program.anomalies:
            line = max(anomaly.line - 1, 0)
            raw = lines[line] if line < len(lines) else anomaly.text
            start = len(raw) - len(raw.lstrip())
            rng = Range(Position(line, start), Position(line, len(raw.rstrip())))
            result.append(
                Diagnostic(
                    range=rng,
                    message=f"ignored: {anomaly.reason}",
                    severity=DiagnosticSeverity.Warning,
                    source="mexico",
                )
            )
        return result

    def find_label(self, uri: str, word: str) -> Optional[LabelSymbol]:
        """Return the definition of label ``word`` that ``push`` would resolve to."""
        program = self.programs.get(uri)
        if program is None or word.lower() not in program.labels:
            return None
        target = program.labels[word.lower()]
        for sym in self.symbols_by_uri.get(uri, []):
            if sym.line == target:
                return sym
        return None

    def hover_text(self, uri: str, word: str) -> Optional[str]:
        """Describe a command word or label."""
        op = COMMANDS.get(word.lower())
        if op is not None:
            return COMMAND_DOCS[op]
        sym = self.find_label(uri, word)
        return sym.detail if sym else None


lang_server = MexicoLanguageServer()


def _refresh(ls: MexicoLanguageServer, uri: str, text: str) -> None:
    diagnostics = ls.update_index(uri, text)
    ls.publish_diagnostics(uri, diagnostics)


@lang_server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: MexicoLanguageServer, params: DidOpenTextDocumentParams) -> None:
    """Index a document when it is opened."""
    _refresh(ls, params.text_document.uri, params.text_document.text)


@lang_server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: MexicoLanguageServer, params: DidChangeTextDocumentParams) -> None:
    """Re-index a document when it changes."""
    if params.content_changes:
        _refresh(ls, params.text_document.uri, params.content_changes[0].text)


@lang_server.feature(TEXT_DOCUMENT_DEFINITION)
def definition(ls: MexicoLanguageServer, params: DefinitionParams):
    """Return the definition location for the label under the cursor."""
    doc = ls.workspace.get_text_document(params.text_document.uri)
    word = doc.word_at_position(params.position)
    if not word:
        return None
    sym = ls.find_label(params.text_document.uri, word)
    if sym is None:
        return None
    rng = Range(Position(sym.line, 0), Position(sym.line, len(sym.name) + 1))
    return Location(uri=sym.uri, range=rng)


@lang_server.feature(TEXT_DOCUMENT_HOVER)
def hover(ls: MexicoLanguageServer, params: HoverParams) -> Optional[Hover]:
    """Return hover information for the word under the cursor."""
    doc = ls.workspace.get_text_document(params.text_document.uri)
    word = doc.word_at_position(params.position)
    if not word:
        return None
    text = ls.hover_text(params.text_document.uri, word)
    if text is None:
        return None
    return Hover(contents=MarkupContent(kind=MarkupKind.PlainText, value=text))


@lang_server.feature(TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbols(ls: MexicoLanguageServer, params: DocumentSymbolParams):
    """Return the labels of the given document."""
    symbols = ls.symbols_by_uri.get(params.text_document.uri, [])
    result: List[DocumentSymbol] = []
    for sym in symbols:
        rng = Range(Position(sym.line, 0), Position(sym.line, len(sym.name) + 1))
        result.append(
            DocumentSymbol(
                name=sym.name,
                kind=SymbolKind.Key,
                range=rng,
                selection_range=rng,
                detail=sym.detail,
            )
        )
    return result


def main() -> None:
    """Start the language server."""
    lang_server.start_io()


if __name__ == "__main__":
    main()
