"""Tests for the Sculp lexer."""

from __future__ import annotations

import pytest

from sculp.errors import SculpSyntaxError
from sculp.lexer import Lexer
from sculp.tokens import TokenKind


def lex(source: str, **kwargs) -> list[tuple[TokenKind, str]]:
    """Helper: lex source and return (kind, value) pairs, excluding EOF."""
    tokens = Lexer(source, **kwargs).lex()
    return [(t.kind, t.value) for t in tokens if t.kind != TokenKind.EOF]


def kinds(source: str, **kwargs) -> list[TokenKind]:
    """Helper: lex source and return just the token kinds, excluding EOF."""
    tokens = Lexer(source, **kwargs).lex()
    return [t.kind for t in tokens if t.kind != TokenKind.EOF]


class TestLexerBasic:
    def test_empty_source(self):
        tokens = Lexer("").lex()
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.EOF

    def test_whitespace_only(self):
        tokens = Lexer("  \n\t ").lex()
        assert [t.kind for t in tokens] == [TokenKind.EOF]

    def test_eof_is_last(self):
        tokens = Lexer("skip").lex()
        assert tokens[-1].kind == TokenKind.EOF
        assert tokens[-1].value == ""

    def test_keywords(self):
        for kw in ["skip", "next", "enter", "exit", "def", "as", "if", "then",
                   "unless", "while", "when", "whenever", "do", "until", "repeat"]:
            result = lex(kw)
            assert len(result) == 1, f"keyword {kw} should lex to one token"
            assert result[0][1] == kw
            assert result[0][0] == TokenKind[kw.upper()]

    def test_keywords_are_case_folded(self):
        assert lex("SKIP Next wHeN") == [
            (TokenKind.SKIP, "skip"),
            (TokenKind.NEXT, "next"),
            (TokenKind.WHEN, "when"),
        ]

    def test_v_is_or(self):
        assert lex("v") == [(TokenKind.OR, "v")]
        assert lex("V") == [(TokenKind.OR, "v")]


class TestLexerOperators:
    def test_parallel(self):
        assert kinds("skip || skip") == [TokenKind.SKIP, TokenKind.PARALLEL, TokenKind.SKIP]

    def test_parallel_without_spaces(self):
        assert kinds("skip||skip") == [TokenKind.SKIP, TokenKind.PARALLEL, TokenKind.SKIP]

    def test_single_chars(self):
        assert kinds("* . & @ ( ) { } , :") == [
            TokenKind.STAR, TokenKind.DOT, TokenKind.AND, TokenKind.AT,
            TokenKind.LPAREN, TokenKind.RPAREN, TokenKind.LBRACE, TokenKind.RBRACE,
            TokenKind.COMMA, TokenKind.COLON,
        ]

    def test_single_pipe_is_unknown(self):
        with pytest.raises(SculpSyntaxError, match="unknown token '\\|'"):
            Lexer("skip | skip").lex()

    def test_binding_power(self):
        tokens = Lexer("* . *").lex()
        assert tokens[1].binding_power == 120
        assert tokens[-1].binding_power == -1


class TestLexerLiterals:
    def test_string(self):
        assert lex('"hello world"') == [(TokenKind.STRING_LIT, "hello world")]

    def test_empty_string(self):
        assert lex('""') == [(TokenKind.STRING_LIT, "")]

    def test_string_keeps_case_and_keywords(self):
        assert lex('"Skip NEXT"') == [(TokenKind.STRING_LIT, "Skip NEXT")]

    def test_string_with_escaped_quote(self):
        assert lex(r'"say \"hi\""') == [(TokenKind.STRING_LIT, r'say \"hi\"')]

    def test_string_with_escaped_backslash(self):
        assert lex(r'"a\\" *') == [
            (TokenKind.STRING_LIT, r"a\\"),
            (TokenKind.STAR, "*"),
        ]

    def test_string_spans_punctuation(self):
        assert lex('"?" . "stop!"') == [
            (TokenKind.STRING_LIT, "?"),
            (TokenKind.DOT, "."),
            (TokenKind.STRING_LIT, "stop!"),
        ]

    def test_unterminated_string(self):
        with pytest.raises(SculpSyntaxError) as info:
            Lexer('post("abc').lex()
        assert "unexpected end of input inside string literal" in str(info.value)
        assert info.value.diagnostic.code == "E100"
        assert info.value.span.start_col == 6

    def test_number(self):
        assert lex("42") == [(TokenKind.NUMBER_LIT, "42")]


class TestLexerNames:
    def test_procedure_name(self):
        assert lex("post") == [(TokenKind.IDENTIFIER, "post")]

    def test_procedure_name_is_case_folded(self):
        assert lex("POST") == [(TokenKind.IDENTIFIER, "post")]

    def test_hyphenated_procedure_name(self):
        assert lex("create-poll") == [(TokenKind.IDENTIFIER, "create-poll")]

    def test_custom_signatures(self):
        assert lex("abort", signatures={"abort": []}) == [(TokenKind.IDENTIFIER, "abort")]

    def test_default_procedure_unknown_with_custom_table(self):
        with pytest.raises(SculpSyntaxError, match="unknown token 'post'"):
            Lexer("post", signatures={"abort": []}).lex()

    def test_unknown_word(self):
        with pytest.raises(SculpSyntaxError) as info:
            Lexer("skip || Frobnicate").lex()
        assert "unknown token 'Frobnicate'" in str(info.value)
        assert info.value.diagnostic.code == "E100"
        assert info.value.span.start_col == 9

    def test_field(self):
        assert lex('{usr:"frank"}') == [
            (TokenKind.LBRACE, "{"),
            (TokenKind.FIELD, "usr"),
            (TokenKind.COLON, ":"),
            (TokenKind.STRING_LIT, "frank"),
            (TokenKind.RBRACE, "}"),
        ]

    def test_field_with_space_before_colon(self):
        assert kinds("{ body : * }") == [
            TokenKind.LBRACE, TokenKind.FIELD, TokenKind.COLON,
            TokenKind.STAR, TokenKind.RBRACE,
        ]

    def test_keyword_as_field(self):
        assert lex("do:")[0] == (TokenKind.FIELD, "do")

    def test_field_is_case_folded(self):
        assert lex("USR:")[0] == (TokenKind.FIELD, "usr")

    def test_def_name_is_raw(self):
        assert lex("def Greeter as skip") == [
            (TokenKind.DEF, "def"),
            (TokenKind.IDENTIFIER, "Greeter"),
            (TokenKind.AS, "as"),
            (TokenKind.SKIP, "skip"),
        ]


class TestLexerTemplate:
    def test_placeholder(self):
        assert lex("post($Msg)", template=True) == [
            (TokenKind.IDENTIFIER, "post"),
            (TokenKind.LPAREN, "("),
            (TokenKind.PLACEHOLDER, "$"),
            (TokenKind.IDENTIFIER, "Msg"),
            (TokenKind.RPAREN, ")"),
        ]

    def test_placeholder_name_may_be_keyword(self):
        assert lex("$skip", template=True) == [
            (TokenKind.PLACEHOLDER, "$"),
            (TokenKind.IDENTIFIER, "skip"),
        ]

    def test_dollar_outside_template(self):
        with pytest.raises(SculpSyntaxError, match="unknown token"):
            Lexer("post($m)").lex()


class TestLexerSpans:
    def test_columns(self):
        tokens = Lexer("skip || skip").lex()
        assert (tokens[1].span.start_col, tokens[1].span.end_col) == (6, 7)
        assert (tokens[2].span.start_col, tokens[2].span.end_col) == (9, 12)

    def test_lines(self):
        tokens = Lexer("skip\n  || skip", "bots.sculp").lex()
        assert tokens[1].span.start_line == 2
        assert tokens[1].span.start_col == 3
        assert tokens[1].span.file == "bots.sculp"

    def test_string_span_covers_quotes(self):
        tokens = Lexer('"ab"').lex()
        assert (tokens[0].span.start_col, tokens[0].span.end_col) == (1, 4)


class TestLexerLaziness:
    def test_tokens_is_lazy(self):
        stream = Lexer("skip || frobnicate").tokens()
        assert next(stream).kind == TokenKind.SKIP
        assert next(stream).kind == TokenKind.PARALLEL
        with pytest.raises(SculpSyntaxError):
            next(stream)

    def test_stream_ends_after_eof(self):
        stream = Lexer("skip").tokens()
        assert [t.kind for t in stream] == [TokenKind.SKIP, TokenKind.EOF]
