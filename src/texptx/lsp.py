"""Minimal LSP server for texptx JSON AST documents, diagnostics only."""

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

from texptx import __version__
from texptx.ast import Span
from texptx.codec import loads
from texptx.convert import convert
from texptx.errors import CodecError

server = LanguageServer("texptx-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _range(span: Span | None) -> Range:
    """Convert a 1-based span to a 0-based LSP range."""
    if span is None:
        return Range(start=Position(line=0, character=0), end=Position(line=0, character=0))
    return Range(
        start=Position(line=span.start.line - 1, character=span.start.column - 1),
        end=Position(line=span.end.line - 1, character=span.end.column - 1),
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the conversion and publish its diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    diagnostics: list[Diagnostic] = []

    try:
        root = loads(doc.source)
    except CodecError as exc:
        diagnostics.append(
            Diagnostic(
                range=_range(exc.span),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="texptx",
            )
        )
    else:
        result = convert(root, filename)
        for item in result.diagnostics:
            diagnostics.append(
                Diagnostic(
                    range=_range(item.span),
                    message=item.message,
                    severity=DiagnosticSeverity.Warning,
                    source="texptx",
                    code=item.origin or None,
                )
            )

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
