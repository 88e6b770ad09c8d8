"""Token kinds, token representation and the operator table for the Sculp lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sculp.source import Span


class TokenKind(Enum):
    # Statements and instructions
    SKIP = auto()
    NEXT = auto()
    ENTER = auto()
    EXIT = auto()
    DEF = auto()
    AS = auto()
    IF = auto()
    THEN = auto()
    UNLESS = auto()
    WHILE = auto()
    WHEN = auto()
    WHENEVER = auto()
    DO = auto()
    UNTIL = auto()
    REPEAT = auto()

    # Literals
    STRING_LIT = auto()
    NUMBER_LIT = auto()

    # Operators
    PARALLEL = auto()
    STAR = auto()
    DOT = auto()
    AND = auto()
    OR = auto()
    AT = auto()
    PLACEHOLDER = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    COLON = auto()

    # Names
    IDENTIFIER = auto()
    FIELD = auto()

    # Special
    EOF = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    span: Span

    @property
    def binding_power(self) -> int:
        return BINDING_POWER[self.kind]


KEYWORDS: dict[str, TokenKind] = {
    "skip": TokenKind.SKIP,
    "next": TokenKind.NEXT,
    "enter": TokenKind.ENTER,
    "exit": TokenKind.EXIT,
    "def": TokenKind.DEF,
    "as": TokenKind.AS,
    "if": TokenKind.IF,
    "then": TokenKind.THEN,
    "unless": TokenKind.UNLESS,
    "while": TokenKind.WHILE,
    "when": TokenKind.WHEN,
    "whenever": TokenKind.WHENEVER,
    "do": TokenKind.DO,
    "until": TokenKind.UNTIL,
    "repeat": TokenKind.REPEAT,
    "v": TokenKind.OR,
}

OPERATORS: dict[str, TokenKind] = {
    "||": TokenKind.PARALLEL,
    "*": TokenKind.STAR,
    ".": TokenKind.DOT,
    "&": TokenKind.AND,
    "@": TokenKind.AT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    ",": TokenKind.COMMA,
    ":": TokenKind.COLON,
}

# Higher binds tighter. Only the relative order matters.
BINDING_POWER: dict[TokenKind, int] = {
    TokenKind.PLACEHOLDER: 999,
    TokenKind.DOT: 120,
    TokenKind.LPAREN: 110,
    TokenKind.COMMA: 0,
    TokenKind.OR: 95,
    TokenKind.SKIP: 90,
    TokenKind.DEF: 90,
    TokenKind.IF: 90,
    TokenKind.UNLESS: 90,
    TokenKind.WHILE: 90,
    TokenKind.WHEN: 90,
    TokenKind.WHENEVER: 90,
    TokenKind.AND: 40,
    TokenKind.AT: 25,
    TokenKind.PARALLEL: 20,
    TokenKind.NEXT: 17,
    TokenKind.UNTIL: 15,
    TokenKind.ENTER: 10,
    TokenKind.EXIT: 10,
    TokenKind.REPEAT: 10,
    TokenKind.AS: 10,
    TokenKind.DO: 0,
    TokenKind.THEN: 0,
    TokenKind.STAR: 0,
    TokenKind.STRING_LIT: 0,
    TokenKind.NUMBER_LIT: 0,
    TokenKind.RPAREN: 0,
    TokenKind.LBRACE: 0,
    TokenKind.RBRACE: 0,
    TokenKind.COLON: 0,
    TokenKind.IDENTIFIER: 0,
    TokenKind.FIELD: 0,
    TokenKind.EOF: -1,
}

# Entry powers for sub-expressions parsed by prefix rules.
BODY_BP = 30
CONDITION_BP = 30
GROUP_BP = 1
