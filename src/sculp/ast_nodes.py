"""AST node definitions for the Sculp language.

Every node is a mutable dataclass deriving from :class:`Expression`. Nodes
compare structurally; the optional ``span`` is ignored by equality so a
re-parsed tree equals the original. Each class lists its child fields in
``children``, which is all that :meth:`Expression.traverse` and
:meth:`Expression.patch` look at.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union, get_args

from sculp.source import Span


class _Stop:
    """Sentinel returned by a traverse callback to prune a subtree."""

    def __repr__(self) -> str:
        return "STOP"


STOP = _Stop()


@dataclass
class Expression:
    children: ClassVar[tuple[str, ...]] = ()
    span: Span | None = field(default=None, compare=False, repr=False, kw_only=True)

    def __str__(self) -> str:
        from sculp.formatter import SculpFormatter

        return SculpFormatter().format(self)

    def iter_children(self) -> Iterator[Expression]:
        """Yield direct children in declaration order."""
        for name in self.children:
            value = getattr(self, name)
            if isinstance(value, Expression):
                yield value
            elif isinstance(value, dict):
                yield from value.values()
            else:
                yield from value

    def traverse(self, fn: Callable[[Expression, Any], Any], context: Any = None) -> None:
        """Pre-order walk calling ``fn(node, context)``.

        The value returned by ``fn`` becomes the context of every direct
        child. Returning :data:`STOP` skips the children of that node.
        """
        new_context = fn(self, context)
        if new_context is STOP:
            return
        for child in list(self.iter_children()):
            child.traverse(fn, new_context)

    def apply_to(
        self,
        variants: type[Expression] | Iterable[type[Expression]],
        fn: Callable[[Expression], object],
    ) -> None:
        """Call ``fn`` on every node that is an instance of ``variants``.

        ``variants`` is a single class or any collection of classes.
        """
        if not isinstance(variants, type):
            variants = tuple(variants)

        def visit(node: Expression, context: Any) -> Any:
            if isinstance(node, variants):
                fn(node)
            return context

        self.traverse(visit)

    def patch(self, fn: Callable[[Expression], Expression]) -> Expression:
        """Rewrite the tree: ``fn`` runs first, then the children of its result."""
        node = fn(self)
        for name in node.children:
            value = getattr(node, name)
            if isinstance(value, Expression):
                setattr(node, name, value.patch(fn))
            elif isinstance(value, dict):
                setattr(node, name, {k: v.patch(fn) for k, v in value.items()})
            else:
                setattr(node, name, [v.patch(fn) for v in value])
        return node


def _flatten(cls: type, attr: str, operands: tuple[Expression, ...]) -> list[Expression]:
    members: list[Expression] = []
    for operand in operands:
        if type(operand) is cls:
            members.extend(getattr(operand, attr))
        else:
            members.append(operand)
    return members


def _require_members(node: Expression, attr: str) -> None:
    if len(getattr(node, attr)) < 2:
        raise ValueError(f"{type(node).__name__} needs at least two {attr}")


# ── Families ─────────────────────────────────────────────────────


class Pattern(Expression):
    """Matches message content."""


class Constraint(Expression):
    """Boolean condition over a message."""


class Statement(Expression):
    """Executable process."""


class Instruction(Statement):
    """Statement introduced by a keyword."""


# ── Patterns ─────────────────────────────────────────────────────


@dataclass
class Wildcard(Pattern):
    pass


@dataclass
class StringLiteral(Pattern):
    value: str


@dataclass
class PatternConcat(Pattern):
    parts: list[Expression]

    children = ("parts",)

    def __post_init__(self) -> None:
        _require_members(self, "parts")

    @classmethod
    def join(cls, *operands: Expression) -> PatternConcat:
        return cls(_flatten(cls, "parts", operands))


@dataclass
class PatternAnd(Pattern):
    patterns: list[Expression]

    children = ("patterns",)

    def __post_init__(self) -> None:
        _require_members(self, "patterns")

    @classmethod
    def join(cls, *operands: Expression) -> PatternAnd:
        return cls(_flatten(cls, "patterns", operands))


@dataclass
class PatternOr(Pattern):
    patterns: list[Expression]

    children = ("patterns",)

    def __post_init__(self) -> None:
        _require_members(self, "patterns")

    @classmethod
    def join(cls, *operands: Expression) -> PatternOr:
        return cls(_flatten(cls, "patterns", operands))


# ── Constraints ──────────────────────────────────────────────────


@dataclass
class Match(Constraint):
    name: str
    pattern: Expression

    children = ("pattern",)


@dataclass
class MatchList(Constraint):
    matches: dict[str, Expression] = field(default_factory=dict)

    children = ("matches",)

    def __eq__(self, other: object) -> bool:
        # Field order is rendered, so it takes part in equality
        if not isinstance(other, MatchList):
            return NotImplemented
        return list(self.matches.items()) == list(other.matches.items())

    @classmethod
    def of(cls, matches: list[Match], span: Span | None = None) -> MatchList:
        """Build from matches in order; a repeated field keeps the last one."""
        result = cls(span=span)
        for match in matches:
            result.matches[match.name] = match
        return result


@dataclass
class LogicalAnd(Constraint):
    conditions: list[Expression]

    children = ("conditions",)

    def __post_init__(self) -> None:
        _require_members(self, "conditions")

    @classmethod
    def join(cls, *operands: Expression) -> LogicalAnd:
        return cls(_flatten(cls, "conditions", operands))


@dataclass
class LogicalOr(Constraint):
    conditions: list[Expression]

    children = ("conditions",)

    def __post_init__(self) -> None:
        _require_members(self, "conditions")

    @classmethod
    def join(cls, *operands: Expression) -> LogicalOr:
        return cls(_flatten(cls, "conditions", operands))


# ── Statements ───────────────────────────────────────────────────


@dataclass
class Skip(Statement):
    pass


@dataclass
class Procedure(Statement):
    name: str
    params: list[Expression] = field(default_factory=list)

    children = ("params",)

    def append_param(self, param: str | Expression) -> None:
        """Append a parameter; plain strings become string literals."""
        if isinstance(param, str):
            self.params.append(StringLiteral(param))
        elif isinstance(param, Expression):
            self.params.append(param)
        else:
            raise TypeError(
                f"param type {type(param).__name__} is not str or Expression"
            )


@dataclass
class ParallelExecution(Statement):
    statements: list[Expression]

    children = ("statements",)

    def __post_init__(self) -> None:
        _require_members(self, "statements")

    @classmethod
    def join(cls, *operands: Expression) -> ParallelExecution:
        return cls(_flatten(cls, "statements", operands))


@dataclass
class SequentialExecution(Statement):
    statements: list[Expression]

    children = ("statements",)

    def __post_init__(self) -> None:
        _require_members(self, "statements")

    @classmethod
    def join(cls, *operands: Expression) -> SequentialExecution:
        return cls(_flatten(cls, "statements", operands))


# ── Instructions ─────────────────────────────────────────────────


@dataclass
class Enter(Instruction):
    space: Expression
    body: Expression

    children = ("space", "body")


@dataclass
class Exit(Instruction):
    space: Expression
    body: Expression

    children = ("space", "body")


@dataclass
class Define(Instruction):
    name: str
    body: Expression

    children = ("body",)


@dataclass
class If(Instruction):
    condition: Expression
    body: Expression

    children = ("condition", "body")


@dataclass
class When(Instruction):
    condition: Expression
    body: Expression

    children = ("condition", "body")


@dataclass
class Whenever(Instruction):
    condition: Expression
    body: Expression

    children = ("condition", "body")


@dataclass
class While(Instruction):
    condition: Expression
    body: Expression

    children = ("condition", "body")


@dataclass
class Until(Instruction):
    body: Expression
    condition: Expression

    children = ("body", "condition")


@dataclass
class Unless(Instruction):
    condition: Expression
    body: Expression

    children = ("condition", "body")


@dataclass
class Repeat(Instruction):
    body: Expression

    children = ("body",)


# ── Leaf helpers ─────────────────────────────────────────────────


@dataclass
class SpacePath(Expression):
    path: Expression

    children = ("path",)


@dataclass
class Identifier(Expression):
    name: str


@dataclass
class Number(Expression):
    value: int


Node = Union[
    Wildcard, StringLiteral, PatternConcat, PatternAnd, PatternOr,
    Match, MatchList, LogicalAnd, LogicalOr,
    Skip, Procedure, ParallelExecution, SequentialExecution,
    Enter, Exit, Define, If, When, Whenever, While, Until, Unless, Repeat,
    SpacePath, Identifier, Number,
]

NODE_TYPES: tuple[type[Expression], ...] = get_args(Node)

# Names usable as parameter tags in a signature table.
VARIANTS: dict[str, type[Expression]] = {
    "Expression": Expression,
    "Pattern": Pattern,
    "Constraint": Constraint,
    "Statement": Statement,
    "Instruction": Instruction,
    "String": StringLiteral,
    **{cls.__name__: cls for cls in NODE_TYPES},
}
