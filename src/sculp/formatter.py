"""AST-walking pretty-printer producing canonical Sculp source text.

The output is the compatibility form of every node: re-parsing it yields a
structurally equal tree. A child is parenthesized when it binds looser than
the slot it sits in.
"""

from __future__ import annotations

from sculp.ast_nodes import (
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
    PatternAnd,
    PatternConcat,
    PatternOr,
    Procedure,
    Repeat,
    SequentialExecution,
    Skip,
    SpacePath,
    StringLiteral,
    Unless,
    Until,
    When,
    Whenever,
    While,
    Wildcard,
)
from sculp.tokens import BINDING_POWER, BODY_BP, CONDITION_BP, GROUP_BP, TokenKind

# Precedence of nodes that need grouping in tighter slots; others are atomic.
_PRECEDENCE: dict[type[Expression], int] = {
    Repeat: BINDING_POWER[TokenKind.REPEAT],
    SequentialExecution: BINDING_POWER[TokenKind.NEXT],
    PatternAnd: BINDING_POWER[TokenKind.AND],
    LogicalAnd: BINDING_POWER[TokenKind.AND],
    PatternOr: BINDING_POWER[TokenKind.OR],
    LogicalOr: BINDING_POWER[TokenKind.OR],
    PatternConcat: BINDING_POWER[TokenKind.DOT],
}
_ATOMIC = 1000

_PARALLEL_BP = BINDING_POWER[TokenKind.PARALLEL]
_NEXT_BP = BINDING_POWER[TokenKind.NEXT]
_LOOP_BODY_BP = BINDING_POWER[TokenKind.UNTIL] + 1
_SPACE_BP = BINDING_POWER[TokenKind.ENTER]
_PATH_BP = BINDING_POWER[TokenKind.AT]

_CONDITIONAL_KEYWORDS: dict[type[Expression], str] = {
    When: "when",
    Whenever: "whenever",
    While: "while",
}


class SculpFormatter:
    """Format any Sculp AST node to canonical source text."""

    def format(self, node: Expression) -> str:
        if isinstance(node, Skip):
            return "skip"
        if isinstance(node, Wildcard):
            return "*"
        if isinstance(node, StringLiteral):
            return f'"{node.value}"'
        if isinstance(node, Identifier):
            return node.name
        if isinstance(node, Number):
            return str(node.value)
        if isinstance(node, PatternConcat):
            return self._join(node.parts, " . ", BINDING_POWER[TokenKind.DOT] + 1)
        if isinstance(node, (PatternAnd, LogicalAnd)):
            members = node.patterns if isinstance(node, PatternAnd) else node.conditions
            return self._join(members, " & ", BINDING_POWER[TokenKind.AND] + 1)
        if isinstance(node, (PatternOr, LogicalOr)):
            members = node.patterns if isinstance(node, PatternOr) else node.conditions
            return self._join(members, " v ", BINDING_POWER[TokenKind.OR] + 1)
        if isinstance(node, Match):
            return f"{node.name}: {self._operand(node.pattern, CONDITION_BP)}"
        if isinstance(node, MatchList):
            if not node.matches:
                return "{}"
            return "{ " + ", ".join(self.format(m) for m in node.matches.values()) + " }"
        if isinstance(node, Procedure):
            if not node.params:
                return node.name
            return f"{node.name}({self._join(node.params, ', ', GROUP_BP)})"
        if isinstance(node, ParallelExecution):
            return f"({self._join(node.statements, ' || ', _PARALLEL_BP)})"
        if isinstance(node, SequentialExecution):
            return self._join(node.statements, " next ", _NEXT_BP)
        if isinstance(node, SpacePath):
            return f"@ {self._operand(node.path, _PATH_BP)}"
        if isinstance(node, (Enter, Exit)):
            keyword = "enter" if isinstance(node, Enter) else "exit"
            return (
                f"{keyword} {self._operand(node.space, _SPACE_BP)}"
                f" do {self._operand(node.body, BODY_BP)}"
            )
        if isinstance(node, Define):
            return f"def {node.name} as {self._operand(node.body, BODY_BP)}"
        if isinstance(node, If):
            return (
                f"if {self._operand(node.condition, CONDITION_BP)}"
                f" then {self._operand(node.body, BODY_BP)}"
            )
        if isinstance(node, (When, Whenever, While)):
            keyword = _CONDITIONAL_KEYWORDS[type(node)]
            return (
                f"{keyword} {self._operand(node.condition, CONDITION_BP)}"
                f" do {self._operand(node.body, BODY_BP)}"
            )
        if isinstance(node, Unless):
            return (
                f"unless {self._operand(node.condition, CONDITION_BP)}"
                f" next {self._operand(node.body, BODY_BP)}"
            )
        if isinstance(node, Until):
            return (
                f"do {self._operand(node.body, _LOOP_BODY_BP)}"
                f" until {self._operand(node.condition, CONDITION_BP)}"
            )
        if isinstance(node, Repeat):
            return f"repeat {self._operand(node.body, _LOOP_BODY_BP)}"
        raise TypeError(f"cannot format {type(node).__name__}")

    # ── Helpers ────────────────────────────────────────────────

    def _operand(self, node: Expression, min_bp: int) -> str:
        text = self.format(node)
        if _PRECEDENCE.get(type(node), _ATOMIC) < min_bp:
            return f"({text})"
        return text

    def _join(self, nodes: list[Expression], sep: str, min_bp: int) -> str:
        return sep.join(self._operand(n, min_bp) for n in nodes)
