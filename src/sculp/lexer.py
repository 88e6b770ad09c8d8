"""Lexer for the Sculp language.

Produces a lazy stream of tokens from source text. String literals are
scanned verbatim between double quotes; in template mode ``$name`` yields a
placeholder token followed by the raw name.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, Sequence

from sculp.errors import SculpSyntaxError
from sculp.signatures import SignatureTable, as_signature_table
from sculp.source import LineIndex
from sculp.tokens import KEYWORDS, OPERATORS, Token, TokenKind

# `||`, a word (letters, digits, `_`, `-`) or any other single character.
_TOKEN_RE = re.compile(r"\s*(\|\||[\w-]+|[^\w\s])")
_WORD_RE = re.compile(r"[\w-]+")
_NUMBER_RE = re.compile(r"[0-9]+")
# A word followed by a colon names a match-list field.
_FIELD_SUFFIX_RE = re.compile(r"[^\S\n]*:")

_LEXER_ERROR = "E100"


class Lexer:
    """Tokenizes Sculp source code."""

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        signatures: SignatureTable | Mapping[str, Sequence[str]] | None = None,
        *,
        template: bool = False,
    ) -> None:
        self.source = source
        self.filename = filename
        self.signatures = as_signature_table(signatures)
        self.template = template
        self._index = LineIndex(source)

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        return list(self.tokens())

    def tokens(self) -> Iterator[Token]:
        """Yield tokens one at a time, ending with EOF."""
        pos = 0
        raw_word_next = False
        while True:
            m = _TOKEN_RE.match(self.source, pos)
            if m is None:
                break
            text = m.group(1)
            start, end = m.span(1)
            pos = end
            is_word = _WORD_RE.fullmatch(text) is not None

            # Names after `$` and `def` are taken verbatim.
            if raw_word_next and is_word:
                raw_word_next = False
                yield self._token(TokenKind.IDENTIFIER, text, start, end)
                continue
            raw_word_next = False

            if text == '"':
                close = self._closing_quote(start)
                yield self._token(TokenKind.STRING_LIT, self.source[end:close], start, close + 1)
                pos = close + 1
                continue

            if text == "$" and self.template:
                raw_word_next = True
                yield self._token(TokenKind.PLACEHOLDER, text, start, end)
                continue

            if is_word and _FIELD_SUFFIX_RE.match(self.source, end):
                yield self._token(TokenKind.FIELD, text.lower(), start, end)
                continue

            if _NUMBER_RE.fullmatch(text):
                yield self._token(TokenKind.NUMBER_LIT, text, start, end)
                continue

            folded = text.lower()
            kind = KEYWORDS.get(folded) or OPERATORS.get(folded)
            if kind is not None:
                raw_word_next = kind == TokenKind.DEF
                yield self._token(kind, folded, start, end)
            elif folded in self.signatures:
                yield self._token(TokenKind.IDENTIFIER, folded, start, end)
            else:
                raise SculpSyntaxError(
                    f"unknown token '{text}'",
                    self._index.span(self.filename, start, end),
                    code=_LEXER_ERROR,
                )

        end = len(self.source)
        yield self._token(TokenKind.EOF, "", end, end)

    # ── Helpers ───────────────────────────────────────────────────

    def _token(self, kind: TokenKind, value: str, start: int, end: int) -> Token:
        return Token(kind, value, self._index.span(self.filename, start, end))

    def _closing_quote(self, opening: int) -> int:
        """Return the offset of the quote closing the string opened at ``opening``."""
        i = opening + 1
        while i < len(self.source):
            ch = self.source[i]
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                return i
            i += 1
        raise SculpSyntaxError(
            "unexpected end of input inside string literal",
            self._index.span(self.filename, opening, opening + 1),
            code=_LEXER_ERROR,
        )
