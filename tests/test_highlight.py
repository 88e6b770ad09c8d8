"""Tests for the Sculp pygments lexer."""

from __future__ import annotations

from pygments.token import Keyword, Name, Number, Operator, Punctuation, String

from sculp.highlight import SculpLexer


def tokens(source: str) -> list[tuple[object, str]]:
    """Helper: non-whitespace (token type, text) pairs."""
    return [(t, v) for t, v in SculpLexer().get_tokens(source) if v.strip()]


class TestSculpLexer:
    def test_metadata(self):
        assert SculpLexer.aliases == ["sculp"]
        assert SculpLexer.filenames == ["*.sculp"]

    def test_keywords(self):
        result = tokens("when * do skip")
        assert result[0] == (Keyword, "when")
        assert (Keyword, "do") in result
        assert (Keyword, "skip") in result

    def test_keywords_ignore_case(self):
        assert tokens("WHEN")[0] == (Keyword, "WHEN")

    def test_define(self):
        result = tokens("def greet as skip")
        assert result[:3] == [
            (Keyword.Declaration, "def"),
            (Name.Function, "greet"),
            (Keyword.Namespace, "as"),
        ]

    def test_call(self):
        result = tokens('post("hi")')
        assert result[0] == (Name.Function, "post")
        assert result[1] == (Punctuation, "(")
        assert (String, "hi") in result

    def test_string_escape(self):
        assert (String.Escape, r"\"") in tokens(r'"a\"b"')

    def test_match_list(self):
        result = tokens('{usr: "frank"}')
        assert (Name.Attribute, "usr") in result
        assert (Punctuation, ":") in result

    def test_operators(self):
        result = tokens('"a" v "b" & * . "c" || skip')
        assert (Operator.Word, "v") in result
        assert (Operator, "&") in result
        assert (Operator, ".") in result
        assert (Operator, "||") in result

    def test_space_path_and_placeholder(self):
        result = tokens("enter @ $room do skip")
        assert result[0] == (Keyword.Namespace, "enter")
        assert (Name.Decorator, "@") in result
        assert (Name.Variable, "room") in result

    def test_number(self):
        assert tokens("enter 6")[1] == (Number.Integer, "6")

    def test_hyphenated_name_is_not_keyword(self):
        assert tokens("do-it")[0] == (Name, "do-it")
