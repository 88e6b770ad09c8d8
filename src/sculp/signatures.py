"""Procedure signature table and call validation."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from sculp.ast_nodes import VARIANTS, Expression
from sculp.errors import SculpSyntaxError, SculpTypeError

if TYPE_CHECKING:
    from sculp.source import Span

ParamTag = Union[str, type[Expression]]


@dataclass(frozen=True)
class Signature:
    name: str
    param_tags: tuple[str, ...]
    param_types: tuple[type[Expression], ...]

    @property
    def arity(self) -> int:
        return len(self.param_types)

    def __str__(self) -> str:
        if not self.param_tags:
            return self.name
        return f"{self.name}({', '.join(self.param_tags)})"


def _resolve_tag(name: str, tag: ParamTag) -> tuple[str, type[Expression]]:
    if isinstance(tag, type) and issubclass(tag, Expression):
        return tag.__name__, tag
    if isinstance(tag, str) and tag in VARIANTS:
        return tag, VARIANTS[tag]
    raise ValueError(f"unknown parameter type {tag!r} for procedure {name!r}")


class SignatureTable:
    """Maps procedure names to the parameter variants they require.

    Names are case-folded, matching how the lexer folds source words.
    """

    def __init__(self, signatures: Mapping[str, Sequence[ParamTag]] | None = None) -> None:
        self._signatures: dict[str, Signature] = {}
        for name, tags in (signatures or {}).items():
            self.define(name, tags)

    def define(self, name: str, tags: Sequence[ParamTag]) -> Signature:
        """Register (or replace) the signature of ``name``."""
        if isinstance(tags, str):
            raise ValueError(f"parameters of {name!r} must be a list, not a string")
        key = name.lower()
        resolved = [_resolve_tag(key, tag) for tag in tags]
        sig = Signature(
            key,
            tuple(t for t, _ in resolved),
            tuple(cls for _, cls in resolved),
        )
        self._signatures[key] = sig
        return sig

    def lookup(self, name: str) -> Signature | None:
        return self._signatures.get(name.lower())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._signatures

    def __iter__(self) -> Iterator[Signature]:
        return iter(self._signatures.values())

    def __len__(self) -> int:
        return len(self._signatures)

    def check_call(
        self, name: str, params: Sequence[Expression], span: Span | None = None,
    ) -> Signature:
        """Validate a call's arity and argument variants, return its signature."""
        sig = self.lookup(name)
        if sig is None:
            raise SculpSyntaxError(f"'{name}' is not a known procedure", span)
        if len(params) != sig.arity:
            raise SculpSyntaxError(
                f"procedure '{sig.name}' expects {sig.arity} parameter(s)"
                f" but {len(params)} were given",
                span,
                code="E210",
                notes=[f"signature: {sig}"],
            )
        for position, (param, tag, cls) in enumerate(
            zip(params, sig.param_tags, sig.param_types), start=1,
        ):
            if not isinstance(param, cls):
                raise SculpTypeError(
                    f"parameter at position {position} of {sig.name} must be of type"
                    f" {tag} instead of {type(param).__name__}",
                    param.span or span,
                )
        return sig


def as_signature_table(
    signatures: SignatureTable | Mapping[str, Sequence[ParamTag]] | None,
) -> SignatureTable:
    """Coerce a mapping (or ``None`` for the defaults) into a table."""
    if signatures is None:
        return DEFAULT_SIGNATURES
    if isinstance(signatures, SignatureTable):
        return signatures
    return SignatureTable(signatures)


DEFAULT_SIGNATURES = SignatureTable({
    "clock": ["String"],
    "create-poll": ["String"],
    "close-poll": [],
    "kill": ["Pattern"],
    "notify": ["String"],
    "post": ["String"],
    "rm": ["Pattern", "Pattern", "Pattern"],
    "say": ["String"],
    "signal": ["String"],
    "vote": ["String"],
})
