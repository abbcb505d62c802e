"""Minimal LSP server for duoparse, diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from duoparse import analyze
from duoparse.tokens import LanguageProfile, Span, profile_for_filename

server = LanguageServer("duoparse-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)


def _range(span: Span | None) -> Range:
    """Convert a 1-based source span into a 0-based LSP range."""
    if span is None:
        return Range(
            start=Position(line=0, character=0),
            end=Position(line=0, character=1),
        )
    start_line = span.start.line - 1
    start_col = span.start.column - 1
    end_line = span.end.line - 1
    end_col = span.end.column - 1
    # Zero-width spans (e.g. at end of input) still need a visible marker
    if (end_line, end_col) <= (start_line, start_col):
        end_line, end_col = start_line, start_col + 1
    return Range(
        start=Position(line=start_line, character=start_col),
        end=Position(line=end_line, character=end_col),
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Tokenize and parse the document and publish every diagnostic."""
    doc = ls.workspace.get_text_document(uri)
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    profile = profile_for_filename(filename) or LanguageProfile.BOOLEAN

    result = analyze(doc.source, profile)

    diagnostics = [
        Diagnostic(
            range=_range(error.span),
            message=error.message,
            severity=DiagnosticSeverity.Error,
            source="duoparse",
        )
        for error in (*result.lex_errors, *result.parse_errors)
    ]

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
