"""Sculp Language Server: pygls-based LSP for .sculp files.

Provides diagnostics, hover, completion and formatting via stdio transport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote, urlparse

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from sculp import __version__
from sculp.ast_nodes import Expression
from sculp.config import config_for
from sculp.errors import Diagnostic, SculpError, Severity
from sculp.parser import parse
from sculp.signatures import DEFAULT_SIGNATURES, SignatureTable
from sculp.source import Span
from sculp.tokens import KEYWORDS

logger = logging.getLogger(__name__)

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
    Severity.NOTE: lsp.DiagnosticSeverity.Information,
}

_KEYWORD_COMPLETIONS = sorted(KEYWORDS.keys())


def span_to_range(span: Span) -> lsp.Range:
    """Convert a 1-indexed Sculp Span to a 0-indexed LSP Range."""
    return lsp.Range(
        start=lsp.Position(line=span.start_line - 1, character=span.start_col - 1),
        end=lsp.Position(line=span.end_line - 1, character=span.end_col),
    )


def to_lsp_diagnostic(diag: Diagnostic) -> lsp.Diagnostic:
    """Convert a Sculp Diagnostic to an LSP Diagnostic."""
    span_range = lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0))
    if diag.labels:
        span_range = span_to_range(diag.labels[0].span)
    return lsp.Diagnostic(
        range=span_range,
        severity=_SEVERITY_MAP.get(diag.severity, lsp.DiagnosticSeverity.Error),
        source="sculp",
        code=diag.code,
        message=f"[{diag.code}] {diag.message}",
    )


def _signatures_for(uri: str) -> SignatureTable:
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        return DEFAULT_SIGNATURES
    try:
        return config_for(Path(unquote(parsed.path))).procedures
    except ValueError as e:
        logger.warning("%s: invalid sculp.toml, using default procedures: %s", uri, e)
        return DEFAULT_SIGNATURES


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    tree: Expression | None = None
    signatures: SignatureTable = field(default_factory=lambda: DEFAULT_SIGNATURES)
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


server = LanguageServer(
    "sculp-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _analyze(uri: str, source: str, signatures: SignatureTable | None = None) -> DocumentState:
    """Parse ``source``, cache the result for ``uri`` and return it."""
    ds = DocumentState(source=source, signatures=signatures or _signatures_for(uri))
    try:
        ds.tree = parse(source, ds.signatures, filename=uri)
    except SculpError as e:
        logger.debug("%s: %s", uri, e)
        ds.diagnostics = [to_lsp_diagnostic(e.diagnostic)]
    _state[uri] = ds
    return ds


def _get_word_at(source: str, line: int, character: int) -> str:
    """Extract the word (letters, digits, `_`, `-`) at a 0-indexed position."""
    lines = source.splitlines()
    if line < 0 or line >= len(lines):
        return ""
    text = lines[line]
    if character < 0 or character > len(text):
        return ""

    def is_word(ch: str) -> bool:
        return ch.isalnum() or ch in "_-"

    start = character
    while start > 0 and is_word(text[start - 1]):
        start -= 1
    end = character
    while end < len(text) and is_word(text[end]):
        end += 1
    return text[start:end]


# ── LSP Feature Handlers ─────────────────────────────────────────


def _publish(uri: str, ds: DocumentState) -> None:
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    _publish(uri, _analyze(uri, params.text_document.text))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: the last change holds the whole document
    source = params.content_changes[-1].text if params.content_changes else ""
    _publish(uri, _analyze(uri, source))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


def hover_text(ds: DocumentState, word: str) -> str | None:
    """Markdown describing ``word``, or None when it means nothing to Sculp."""
    folded = word.lower()
    if folded in KEYWORDS:
        return f"**keyword** `{folded}`"
    sig = ds.signatures.lookup(folded)
    if sig is not None:
        return f"**procedure** `{sig}`"
    return None


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None
    word = _get_word_at(ds.source, params.position.line, params.position.character)
    content = hover_text(ds, word) if word else None
    if content is None:
        return None
    return lsp.Hover(contents=lsp.MarkupContent(
        kind=lsp.MarkupKind.Markdown,
        value=content,
    ))


def completion_items(ds: DocumentState | None) -> list[lsp.CompletionItem]:
    items = [
        lsp.CompletionItem(label=kw, kind=lsp.CompletionItemKind.Keyword)
        for kw in _KEYWORD_COMPLETIONS
    ]
    signatures = ds.signatures if ds is not None else DEFAULT_SIGNATURES
    for sig in signatures:
        items.append(lsp.CompletionItem(
            label=sig.name,
            kind=lsp.CompletionItemKind.Function,
            detail=str(sig),
        ))
    return items


@server.feature(
    lsp.TEXT_DOCUMENT_COMPLETION,
    lsp.CompletionOptions(trigger_characters=["(", "{", "@"]),
)
def completion(params: lsp.CompletionParams) -> lsp.CompletionList:
    ds = _state.get(params.text_document.uri)
    return lsp.CompletionList(is_incomplete=False, items=completion_items(ds))


def format_edits(ds: DocumentState) -> list[lsp.TextEdit] | None:
    """Edits replacing the document with its canonical form, if it differs."""
    if ds.tree is None:
        return None
    formatted = f"{ds.tree}\n"
    if formatted == ds.source:
        return None

    # Replace entire document
    end_line = len(ds.source.splitlines()) + 1
    return [lsp.TextEdit(
        range=lsp.Range(
            start=lsp.Position(0, 0),
            end=lsp.Position(end_line, 0),
        ),
        new_text=formatted,
    )]


@server.feature(lsp.TEXT_DOCUMENT_FORMATTING)
def formatting(params: lsp.DocumentFormattingParams) -> list[lsp.TextEdit] | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None
    return format_edits(ds)


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the Sculp language server on stdio."""
    server.start_io()
