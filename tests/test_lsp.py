"""Tests for the LSP server: diagnostic generation."""

from __future__ import annotations

import pytest
from lsprotocol.types import (
    DiagnosticSeverity,
    PublishDiagnosticsParams,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import Workspace

from duoparse.lsp import _range, _validate
from duoparse.parser import Parser


@pytest.fixture
def lsp_env():
    """Create a LanguageServer with an initialized workspace and captured diagnostics."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def put(source: str, uri: str) -> None:
        ws.put_text_document(
            TextDocumentItem(uri=uri, language_id="duoparse", version=0, text=source)
        )

    return ls, published, put


# ---------------------------------------------------------------------------
# Lexical diagnostics
# ---------------------------------------------------------------------------


class TestLexErrors:
    def test_unknown_character(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("int x = 1 @ 2;", "file:///test.cpp")
        _validate(ls, "file:///test.cpp")

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 2
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Error
        assert d.message == "unknown character '@'"
        assert d.source == "duoparse"
        # '@' is at column 11 (1-based) → character 10 (0-based)
        assert d.range.start.line == 0
        assert d.range.start.character == 10
        assert d.range.end.character == 11


# ---------------------------------------------------------------------------
# Syntactic diagnostics
# ---------------------------------------------------------------------------


class TestParseErrors:
    def test_boolean_profile_by_default(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("x := 'T';\ny := ;", "file:///rules.txt")
        _validate(ls, "file:///rules.txt")

        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.message == "expected boolean expression, found ';'"
        assert d.range.start.line == 1
        assert d.range.start.character == 5

    def test_all_diagnostics_lexical_first(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("a = ;\nb = $;", "file:///x.hpp")
        _validate(ls, "file:///x.hpp")

        messages = [d.message for d in published[0].diagnostics]
        assert messages[0] == "unknown character '$'"
        assert messages[1] == "expected expression, found ';'"
        assert messages[2] == "unexpected token '$'"

    def test_end_of_input_gets_visible_range(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("x := a", "file:///r.bool")
        _validate(ls, "file:///r.bool")

        d = published[0].diagnostics[0]
        assert d.range.start.character == 6
        assert d.range.end.character == 7


# ---------------------------------------------------------------------------
# Internal fault and clean documents
# ---------------------------------------------------------------------------


class TestInternalFault:
    def test_fault_maps_to_document_start(self, lsp_env, monkeypatch) -> None:
        def boom(self):
            raise RuntimeError("boom")

        monkeypatch.setattr(Parser, "_parse_cpp_program", boom)
        ls, published, put = lsp_env
        put("int x;", "file:///a.cpp")
        _validate(ls, "file:///a.cpp")

        (d,) = published[0].diagnostics
        assert d.message == "internal parser error: boom"
        assert (d.range.start.line, d.range.start.character) == (0, 0)

    def test_range_helper_for_missing_span(self) -> None:
        r = _range(None)
        assert (r.end.line, r.end.character) == (0, 1)


class TestNoDiagnostics:
    def test_valid_document(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("int main() { return 0; }", "file:///main.cpp")
        _validate(ls, "file:///main.cpp")

        assert len(published) == 1
        assert published[0].diagnostics == []
        assert published[0].uri == "file:///main.cpp"
