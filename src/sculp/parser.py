"""Parser for the Sculp language.

Transforms a token stream into an AST with a Pratt (top-down operator
precedence) loop. Every token kind may own a prefix rule, used when it
starts an expression, and an infix rule, used when it follows an
already-parsed left operand. Procedure calls are checked against the
signature table and ``$name`` placeholders are resolved against the insert
table while parsing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence

from sculp.ast_nodes import (
    Constraint,
    Define,
    Enter,
    Exit,
    Expression,
    Identifier,
    If,
    LogicalAnd,
    LogicalOr,
    Match,
    MatchList,
    Number,
    ParallelExecution,
    Pattern,
    PatternAnd,
    PatternConcat,
    PatternOr,
    Procedure,
    Repeat,
    SequentialExecution,
    Skip,
    SpacePath,
    Statement,
    StringLiteral,
    Unless,
    Until,
    When,
    Whenever,
    While,
    Wildcard,
)
from sculp.errors import SculpReferenceError, SculpSyntaxError
from sculp.lexer import Lexer
from sculp.signatures import SignatureTable, as_signature_table
from sculp.source import Span
from sculp.tokens import BINDING_POWER, BODY_BP, CONDITION_BP, GROUP_BP, Token, TokenKind

logger = logging.getLogger(__name__)

Accepted = tuple[type[Expression], ...]

_STATEMENT: Accepted = (Statement,)
_PATTERN: Accepted = (Pattern,)
_CONDITION: Accepted = (Pattern, Constraint)

# Loop bodies stop in front of `until`.
_LOOP_BODY_BP = BINDING_POWER[TokenKind.UNTIL] + 1

_CONDITIONALS: dict[TokenKind, type[Expression]] = {
    TokenKind.WHEN: When,
    TokenKind.WHENEVER: Whenever,
    TokenKind.WHILE: While,
}


class Parser:
    """Parses a stream of tokens into a Sculp AST."""

    def __init__(
        self,
        tokens: Iterable[Token],
        filename: str = "<input>",
        signatures: SignatureTable | Mapping[str, Sequence[str]] | None = None,
        inserts: Mapping[str, Expression] | None = None,
    ) -> None:
        self._tokens = iter(tokens)
        self.filename = filename
        self.signatures = as_signature_table(signatures)
        self.inserts = inserts
        self._current: Token | None = None
        self._previous: Token | None = None

        self._prefix_rules: dict[TokenKind, Callable[[Token], Expression]] = {
            TokenKind.SKIP: self._parse_skip,
            TokenKind.NEXT: self._parse_next_prefix,
            TokenKind.ENTER: self._parse_space_instruction,
            TokenKind.EXIT: self._parse_space_instruction,
            TokenKind.AT: self._parse_space_path,
            TokenKind.DEF: self._parse_define,
            TokenKind.IF: self._parse_if,
            TokenKind.WHEN: self._parse_conditional,
            TokenKind.WHENEVER: self._parse_conditional,
            TokenKind.WHILE: self._parse_conditional,
            TokenKind.UNLESS: self._parse_unless,
            TokenKind.DO: self._parse_until,
            TokenKind.REPEAT: self._parse_repeat,
            TokenKind.STAR: self._parse_wildcard,
            TokenKind.STRING_LIT: self._parse_string,
            TokenKind.NUMBER_LIT: self._parse_number,
            TokenKind.LPAREN: self._parse_group,
            TokenKind.LBRACE: self._parse_match_list,
            TokenKind.IDENTIFIER: self._parse_identifier,
            TokenKind.PLACEHOLDER: self._parse_placeholder,
        }
        self._infix_rules: dict[TokenKind, Callable[[Token, Expression], Expression]] = {
            TokenKind.PARALLEL: self._parse_parallel,
            TokenKind.NEXT: self._parse_next_infix,
            TokenKind.DOT: self._parse_concat,
            TokenKind.AND: self._parse_and_or,
            TokenKind.OR: self._parse_and_or,
            TokenKind.LPAREN: self._parse_call,
        }

    @property
    def template(self) -> bool:
        return self.inserts is not None

    # ── Token access ─────────────────────────────────────────────

    def _advance(self) -> Token:
        tok = self._current
        if tok is None or tok.kind != TokenKind.EOF:
            self._current = next(self._tokens)
        self._previous = tok
        return tok  # type: ignore[return-value]

    def _at(self, kind: TokenKind) -> bool:
        return self._current is not None and self._current.kind == kind

    def _expect(self, kind: TokenKind) -> Token:
        """Consume the current token if it is of ``kind``, fail otherwise."""
        tok = self._current
        if tok is not None and tok.kind == kind:
            return self._advance()
        found = f"{tok.kind.name} ({tok.value!r})" if tok is not None else "nothing"
        raise SculpSyntaxError(
            f"expected {kind.name}, got {found}",
            tok.span if tok is not None else None,
        )

    def _span(self, start: Span) -> Span:
        """Span from ``start`` to the end of the last consumed token."""
        end = self._previous.span if self._previous is not None else start
        return Span(
            self.filename,
            start.start_line, start.start_col,
            end.end_line, end.end_col,
        )

    def _unexpected(self, tok: Token) -> SculpSyntaxError:
        if tok.kind == TokenKind.EOF:
            return SculpSyntaxError("unexpected end of input", tok.span)
        return SculpSyntaxError(f"unexpected token '{tok.value}'", tok.span)

    # ── Pratt loop ───────────────────────────────────────────────

    def parse(self) -> Expression:
        """Parse the whole token stream into one expression."""
        logger.debug(
            "parsing %s in %s mode", self.filename,
            "template" if self.template else "normal",
        )
        if self._current is None:
            self._advance()
        result = self.parse_expression(0, None if self.template else _STATEMENT)
        logger.debug("parsed %s: %s", self.filename, type(result).__name__)
        return result

    def parse_expression(self, min_bp: int = 0, accepted: Accepted | None = None) -> Expression:
        """Parse tokens until one binds looser than ``min_bp``.

        When ``accepted`` is given the result must be an instance of one of
        those classes.
        """
        tok = self._advance()
        prefix = self._prefix_rules.get(tok.kind)
        if prefix is None:
            raise self._unexpected(tok)
        left = prefix(tok)

        while self._current.binding_power >= min_bp:
            tok = self._advance()
            infix = self._infix_rules.get(tok.kind)
            if infix is None:
                raise self._unexpected(tok)
            left = infix(tok, left)

        if accepted is not None:
            self._check_variant(left, accepted, tok.span)
        return left

    def _check_variant(self, expr: Expression, accepted: Accepted, fallback: Span) -> None:
        if isinstance(expr, accepted):
            return
        names = " or ".join(cls.__name__ for cls in accepted)
        raise SculpSyntaxError(
            f"expecting {names} but found {type(expr).__name__}",
            expr.span or fallback,
        )

    # ── Prefix rules ─────────────────────────────────────────────

    def _parse_skip(self, tok: Token) -> Expression:
        return Skip(span=tok.span)

    def _parse_next_prefix(self, tok: Token) -> Expression:
        body = self.parse_expression(tok.binding_power, _STATEMENT)
        return self._joined(SequentialExecution, tok, Skip(span=tok.span), body)

    def _parse_space_instruction(self, tok: Token) -> Expression:
        space = self.parse_expression(tok.binding_power, (SpacePath,))
        self._expect(TokenKind.DO)
        body = self.parse_expression(BODY_BP, _STATEMENT)
        node_type = Enter if tok.kind == TokenKind.ENTER else Exit
        return node_type(space, body, span=self._span(tok.span))

    def _parse_space_path(self, tok: Token) -> Expression:
        path = self.parse_expression(tok.binding_power, _PATTERN)
        return SpacePath(path, span=self._span(tok.span))

    def _parse_define(self, tok: Token) -> Expression:
        name = self._expect(TokenKind.IDENTIFIER).value
        self._expect(TokenKind.AS)
        body = self.parse_expression(BODY_BP, _STATEMENT)
        return Define(name, body, span=self._span(tok.span))

    def _parse_if(self, tok: Token) -> Expression:
        condition = self.parse_expression(CONDITION_BP, _CONDITION)
        self._expect(TokenKind.THEN)
        body = self.parse_expression(BODY_BP, _STATEMENT)
        return If(condition, body, span=self._span(tok.span))

    def _parse_conditional(self, tok: Token) -> Expression:
        condition = self.parse_expression(CONDITION_BP, _CONDITION)
        self._expect(TokenKind.DO)
        body = self.parse_expression(BODY_BP, _STATEMENT)
        return _CONDITIONALS[tok.kind](condition, body, span=self._span(tok.span))

    def _parse_unless(self, tok: Token) -> Expression:
        condition = self.parse_expression(CONDITION_BP, _CONDITION)
        self._expect(TokenKind.NEXT)
        body = self.parse_expression(BODY_BP, _STATEMENT)
        return Unless(condition, body, span=self._span(tok.span))

    def _parse_until(self, tok: Token) -> Expression:
        body = self.parse_expression(_LOOP_BODY_BP, _STATEMENT)
        self._expect(TokenKind.UNTIL)
        condition = self.parse_expression(CONDITION_BP, _CONDITION)
        return Until(body, condition, span=self._span(tok.span))

    def _parse_repeat(self, tok: Token) -> Expression:
        body = self.parse_expression(_LOOP_BODY_BP, _STATEMENT)
        return Repeat(body, span=self._span(tok.span))

    def _parse_wildcard(self, tok: Token) -> Expression:
        return Wildcard(span=tok.span)

    def _parse_string(self, tok: Token) -> Expression:
        return StringLiteral(tok.value, span=tok.span)

    def _parse_number(self, tok: Token) -> Expression:
        return Number(int(tok.value), span=tok.span)

    def _parse_group(self, tok: Token) -> Expression:
        expr = self.parse_expression(GROUP_BP)
        self._expect(TokenKind.RPAREN)
        return expr

    def _parse_match_list(self, tok: Token) -> Expression:
        matches: list[Match] = []
        if self._at(TokenKind.RBRACE):
            self._advance()
            return MatchList(span=self._span(tok.span))
        while True:
            field_tok = self._expect(TokenKind.FIELD)
            self._expect(TokenKind.COLON)
            pattern = self.parse_expression(CONDITION_BP, _PATTERN)
            matches.append(Match(field_tok.value, pattern, span=self._span(field_tok.span)))
            if self._at(TokenKind.COMMA):
                self._advance()
                continue
            self._expect(TokenKind.RBRACE)
            break
        return MatchList.of(matches, span=self._span(tok.span))

    def _parse_identifier(self, tok: Token) -> Expression:
        sig = self.signatures.lookup(tok.value)
        if sig is not None and sig.arity == 0 and not self._at(TokenKind.LPAREN):
            return Procedure(sig.name, [], span=tok.span)
        return Identifier(tok.value, span=tok.span)

    def _parse_placeholder(self, tok: Token) -> Expression:
        name_tok = self._expect(TokenKind.IDENTIFIER)
        inserts = self.inserts or {}
        if name_tok.value not in inserts:
            raise SculpReferenceError(
                f"insert for placeholder '{name_tok.value}' not found",
                self._span(tok.span),
            )
        logger.debug("substituting placeholder %r", name_tok.value)
        return inserts[name_tok.value]

    # ── Infix rules ──────────────────────────────────────────────

    def _parse_parallel(self, tok: Token, left: Expression) -> Expression:
        self._check_variant(left, _STATEMENT, tok.span)
        right = self.parse_expression(tok.binding_power, _STATEMENT)
        return self._joined(ParallelExecution, tok, left, right)

    def _parse_next_infix(self, tok: Token, left: Expression) -> Expression:
        self._check_variant(left, _STATEMENT, tok.span)
        right = self.parse_expression(tok.binding_power, _STATEMENT)
        return self._joined(SequentialExecution, tok, left, right)

    def _parse_concat(self, tok: Token, left: Expression) -> Expression:
        self._check_variant(left, _PATTERN, tok.span)
        right = self.parse_expression(tok.binding_power + 1, _PATTERN)
        return self._joined(PatternConcat, tok, left, right)

    def _parse_and_or(self, tok: Token, left: Expression) -> Expression:
        self._check_variant(left, _CONDITION, tok.span)
        right = self.parse_expression(tok.binding_power + 1, _CONDITION)
        both_patterns = isinstance(left, Pattern) and isinstance(right, Pattern)
        if tok.kind == TokenKind.AND:
            node_type = PatternAnd if both_patterns else LogicalAnd
        else:
            node_type = PatternOr if both_patterns else LogicalOr
        return self._joined(node_type, tok, left, right)

    def _joined(
        self, node_type: type, tok: Token, left: Expression, right: Expression,
    ) -> Expression:
        node = node_type.join(left, right)
        node.span = self._span(left.span or tok.span)
        return node

    def _parse_call(self, tok: Token, left: Expression) -> Expression:
        if not isinstance(left, Identifier) or left.name not in self.signatures:
            raise SculpSyntaxError(
                f"'(' must follow a procedure name, found {type(left).__name__}",
                left.span or tok.span,
            )
        params: list[Expression] = []
        if self._at(TokenKind.RPAREN):
            self._advance()
        else:
            while True:
                params.append(self.parse_expression(GROUP_BP))
                if self._at(TokenKind.COMMA):
                    self._advance()
                    continue
                self._expect(TokenKind.RPAREN)
                break
        start = left.span or tok.span
        span = self._span(start)
        sig = self.signatures.check_call(left.name, params, span)
        return Procedure(sig.name, params, span=span)


def parse(
    source: str,
    signatures: SignatureTable | Mapping[str, Sequence[str]] | None = None,
    inserts: Mapping[str, Expression] | None = None,
    filename: str = "<input>",
) -> Expression:
    """Parse Sculp source text into an AST.

    Without ``inserts`` the result must be a statement. With ``inserts``
    the source is a template: ``$name`` placeholders are replaced by the
    corresponding insert and any expression is accepted.
    """
    table = as_signature_table(signatures)
    lexer = Lexer(source, filename, table, template=inserts is not None)
    return Parser(lexer.tokens(), filename, table, inserts).parse()
