"""Minimal LSP server for pymode: indentation, symbols and folding."""

from __future__ import annotations

import logging

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DOCUMENT_SYMBOL,
    TEXT_DOCUMENT_FOLDING_RANGE,
    TEXT_DOCUMENT_FORMATTING,
    TEXT_DOCUMENT_ON_TYPE_FORMATTING,
    TEXT_DOCUMENT_RANGE_FORMATTING,
    DidCloseTextDocumentParams,
    DocumentFormattingParams,
    DocumentOnTypeFormattingOptions,
    DocumentOnTypeFormattingParams,
    DocumentRangeFormattingParams,
    DocumentSymbol,
    DocumentSymbolParams,
    FoldingRange,
    FoldingRangeKind,
    FoldingRangeParams,
    Position,
    Range,
    SymbolKind,
    TextDocumentSyncKind,
    TextEdit,
)
from pygls.lsp.server import LanguageServer

from pymode.buffer import Buffer
from pymode.config import IndentConfig
from pymode.editing import electric_colon_indentation, indent_region
from pymode.indent import compute_indentation
from pymode.navigation import iter_blocks, iter_defuns

logger = logging.getLogger(__name__)

server = LanguageServer("pymode-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)

_buffers: dict[str, Buffer] = {}


def _buffer(ls: LanguageServer, uri: str) -> Buffer:
    """The buffer for a document, synced to the workspace text."""
    source = ls.workspace.get_text_document(uri).source
    buffer = _buffers.get(uri)
    if buffer is None:
        buffer = Buffer(source, IndentConfig(guess_indent=True))
        _buffers[uri] = buffer
    elif source != buffer.text:
        buffer.set_text(source)
        buffer.guess_indent_unit()
    return buffer


def _position(buffer: Buffer, offset: int) -> Position:
    line = buffer.line_at(offset)
    return Position(line=line, character=offset - buffer.line_start(line))


def _indentation_edit(buffer: Buffer, line: int, column: int) -> TextEdit | None:
    """Edit replacing the line's leading whitespace with ``column`` spaces."""
    start = buffer.line_start(line)
    end = buffer.indentation_end(line)
    new = " " * column
    if buffer.text[start:end] == new:
        return None
    return TextEdit(
        range=Range(
            start=Position(line=line, character=0),
            end=Position(line=line, character=end - start),
        ),
        new_text=new,
    )


# ------------------------------------------------------------------
# Formatting
# ------------------------------------------------------------------


def on_type_edits(ls: LanguageServer, uri: str, position: Position, ch: str) -> list[TextEdit]:
    """Indent a fresh line after Enter, or dedent a block-closing line after ``:``."""
    buffer = _buffer(ls, uri)
    line = min(position.line, buffer.last_line)
    if ch == "\n":
        column = compute_indentation(buffer, line)
    elif ch == ":":
        column = electric_colon_indentation(buffer, line)
        if column is None:
            return []
    else:
        return []
    edit = _indentation_edit(buffer, line, column)
    return [] if edit is None else [edit]


def format_edits(
    ls: LanguageServer,
    uri: str,
    start_line: int | None = None,
    end_line: int | None = None,
    indent_unit: int | None = None,
) -> list[TextEdit]:
    """Re-indent a copy of the document and return the per-line edits."""
    buffer = _buffer(ls, uri)
    scratch = Buffer(buffer.text, buffer.config)
    # Clients may send a zero tab size
    if indent_unit is None or indent_unit <= 0:
        indent_unit = buffer.indent_unit
    scratch.indent_unit = indent_unit
    first = 0 if start_line is None else start_line
    last = buffer.last_line if end_line is None else end_line

    edits = []
    for line in indent_region(scratch, first, last):
        edit = _indentation_edit(buffer, line, scratch.indentation(line))
        if edit is not None:
            edits.append(edit)
    logger.debug("%s: %d formatting edit(s)", uri, len(edits))
    return edits


# ------------------------------------------------------------------
# Structure
# ------------------------------------------------------------------


def document_symbols(ls: LanguageServer, uri: str) -> list[DocumentSymbol]:
    """Definitions as a symbol tree, nested by qualified path."""
    buffer = _buffer(ls, uri)
    roots: list[DocumentSymbol] = []
    by_path: dict[tuple[str, ...], DocumentSymbol] = {}

    for defun in iter_defuns(buffer):
        parent = by_path.get(defun.path[:-1])
        if defun.kind == "class":
            kind = SymbolKind.Class
        elif parent is not None and parent.kind == SymbolKind.Class:
            kind = SymbolKind.Method
        else:
            kind = SymbolKind.Function
        symbol = DocumentSymbol(
            name=defun.name,
            kind=kind,
            range=Range(start=_position(buffer, defun.start), end=_position(buffer, defun.end)),
            selection_range=Range(
                start=_position(buffer, defun.name_start),
                end=_position(buffer, defun.name_start + len(defun.name)),
            ),
            children=[],
        )
        if parent is None:
            roots.append(symbol)
        else:
            assert parent.children is not None
            parent.children.append(symbol)
        by_path[defun.path] = symbol
    return roots


def folding_ranges(ls: LanguageServer, uri: str) -> list[FoldingRange]:
    """One folding range per multi-line block."""
    buffer = _buffer(ls, uri)
    return [
        FoldingRange(start_line=block.line, end_line=block.end_line, kind=FoldingRangeKind.Region)
        for block in iter_blocks(buffer)
        if block.end_line > block.line
    ]


# ------------------------------------------------------------------
# Features
# ------------------------------------------------------------------


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: LanguageServer, params: DidCloseTextDocumentParams) -> None:
    _buffers.pop(params.text_document.uri, None)


@server.feature(
    TEXT_DOCUMENT_ON_TYPE_FORMATTING,
    DocumentOnTypeFormattingOptions(first_trigger_character="\n", more_trigger_character=[":"]),
)
def on_type_formatting(
    ls: LanguageServer, params: DocumentOnTypeFormattingParams
) -> list[TextEdit]:
    return on_type_edits(ls, params.text_document.uri, params.position, params.ch)


@server.feature(TEXT_DOCUMENT_FORMATTING)
def formatting(ls: LanguageServer, params: DocumentFormattingParams) -> list[TextEdit]:
    return format_edits(ls, params.text_document.uri, indent_unit=params.options.tab_size)


@server.feature(TEXT_DOCUMENT_RANGE_FORMATTING)
def range_formatting(ls: LanguageServer, params: DocumentRangeFormattingParams) -> list[TextEdit]:
    return format_edits(
        ls,
        params.text_document.uri,
        params.range.start.line,
        params.range.end.line,
        indent_unit=params.options.tab_size,
    )


@server.feature(TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def symbols(ls: LanguageServer, params: DocumentSymbolParams) -> list[DocumentSymbol]:
    return document_symbols(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_FOLDING_RANGE)
def folding(ls: LanguageServer, params: FoldingRangeParams) -> list[FoldingRange]:
    return folding_ranges(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
