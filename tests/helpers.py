"""Shared test helpers for the Sculp test suite."""

from __future__ import annotations

import pytest

from sculp.ast_nodes import Expression
from sculp.errors import SculpError
from sculp.parser import parse


def render(source: str, signatures=None, inserts=None) -> str:
    """Parse source and return its canonical text."""
    return str(parse(source, signatures, inserts, filename="<test>"))


def round_trip(source: str, signatures=None) -> Expression:
    """Parse, re-parse the canonical text and assert both trees are equal."""
    tree = parse(source, signatures, filename="<test>")
    again = parse(str(tree), signatures, filename="<test>")
    assert again == tree, f"{source!r} -> {str(tree)!r} -> {str(again)!r}"
    return tree


def parse_fails(source: str, error: type[SculpError], code: str | None = None,
                signatures=None, inserts=None) -> SculpError:
    """Parse source, asserting it raises ``error`` (with ``code`` if given)."""
    with pytest.raises(error) as info:
        parse(source, signatures, inserts, filename="<test>")
    if code is not None:
        assert info.value.diagnostic.code == code, info.value.diagnostic
    return info.value
