"""Tests for the Sculp formatter (AST pretty-printer)."""

from __future__ import annotations

import pytest

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
from sculp.formatter import SculpFormatter
from sculp.parser import parse


def fmt(node: Expression) -> str:
    return SculpFormatter().format(node)


def s(value: str) -> StringLiteral:
    return StringLiteral(value)


class TestFormatterLeaves:
    def test_skip(self):
        assert fmt(Skip()) == "skip"

    def test_wildcard(self):
        assert fmt(Wildcard()) == "*"

    def test_string(self):
        assert fmt(s("Hi!")) == '"Hi!"'

    def test_identifier_and_number(self):
        assert fmt(Identifier("post")) == "post"
        assert fmt(Number(6)) == "6"

    def test_procedure_without_params(self):
        assert fmt(Procedure("abort")) == "abort"

    def test_procedure_params(self):
        node = Procedure("rm", [Wildcard(), s("a"), s("b")])
        assert fmt(node) == 'rm(*, "a", "b")'

    def test_unknown_node(self):
        with pytest.raises(TypeError, match="cannot format Expression"):
            fmt(Expression())


class TestFormatterComposites:
    def test_parallel(self):
        assert fmt(ParallelExecution([Skip(), Skip(), Skip()])) == "(skip || skip || skip)"

    def test_sequence(self):
        assert fmt(SequentialExecution([Skip(), Procedure("abort")])) == "skip next abort"

    def test_concat(self):
        assert fmt(PatternConcat([Wildcard(), s("?")])) == '* . "?"'

    def test_and_or(self):
        assert fmt(PatternAnd([s("a"), s("b")])) == '"a" & "b"'
        assert fmt(PatternOr([s("a"), s("b")])) == '"a" v "b"'
        assert fmt(LogicalAnd([MatchList(), s("b")])) == '{} & "b"'
        assert fmt(LogicalOr([MatchList(), s("b")])) == '{} v "b"'

    def test_match(self):
        assert fmt(Match("usr", s("frank"))) == 'usr: "frank"'

    def test_match_list(self):
        node = MatchList.of([Match("usr", s("frank")), Match("body", Wildcard())])
        assert fmt(node) == '{ usr: "frank", body: * }'

    def test_empty_match_list(self):
        assert fmt(MatchList()) == "{}"


class TestFormatterInstructions:
    def test_enter_exit(self):
        path = SpacePath(s("clock"))
        assert fmt(Enter(path, Skip())) == 'enter @ "clock" do skip'
        assert fmt(Exit(path, Skip())) == 'exit @ "clock" do skip'

    def test_define(self):
        assert fmt(Define("greet", Skip())) == "def greet as skip"

    def test_if(self):
        assert fmt(If(s("a"), Skip())) == 'if "a" then skip'

    def test_conditionals(self):
        assert fmt(When(s("a"), Skip())) == 'when "a" do skip'
        assert fmt(Whenever(s("a"), Skip())) == 'whenever "a" do skip'
        assert fmt(While(s("a"), Skip())) == 'while "a" do skip'

    def test_unless(self):
        assert fmt(Unless(s("a"), Skip())) == 'unless "a" next skip'

    def test_until(self):
        assert fmt(Until(Skip(), s("stop"))) == 'do skip until "stop"'

    def test_repeat(self):
        assert fmt(Repeat(Skip())) == "repeat skip"


class TestFormatterGrouping:
    def test_sequence_in_body(self):
        node = When(s("a"), SequentialExecution([Skip(), Skip()]))
        assert fmt(node) == 'when "a" do (skip next skip)'

    def test_sequence_in_parallel(self):
        node = ParallelExecution([SequentialExecution([Skip(), Skip()]), Skip()])
        assert fmt(node) == "((skip next skip) || skip)"

    def test_sequence_in_until_body_not_grouped(self):
        node = Until(SequentialExecution([Skip(), Skip()]), s("x"))
        assert fmt(node) == 'do skip next skip until "x"'

    def test_repeat_in_sequence(self):
        node = SequentialExecution([Repeat(Skip()), Skip()])
        assert fmt(node) == "(repeat skip) next skip"

    def test_repeat_body_sequence(self):
        assert fmt(Repeat(SequentialExecution([Skip(), Skip()]))) == "repeat skip next skip"

    def test_or_inside_concat(self):
        node = PatternConcat([s("a"), PatternOr([s("b"), s("c")])])
        assert fmt(node) == '"a" . ("b" v "c")'

    def test_and_inside_or(self):
        node = PatternOr([PatternAnd([s("a"), s("b")]), s("c")])
        assert fmt(node) == '("a" & "b") v "c"'

    def test_or_inside_and(self):
        node = PatternAnd([PatternOr([s("a"), s("b")]), s("c")])
        assert fmt(node) == '"a" v "b" & "c"'

    def test_nested_same_kind_is_grouped(self):
        node = PatternAnd([PatternAnd([s("a"), s("b")]), s("c")])
        assert fmt(node) == '("a" & "b") & "c"'

    def test_pattern_arguments_never_grouped(self):
        node = Procedure("kill", [PatternOr([s("a"), s("b")])])
        assert fmt(node) == 'kill("a" v "b")'


class TestFormatterRoundTrip:
    @pytest.mark.parametrize("node", [
        When(s("a"), SequentialExecution([Skip(), Skip()])),
        SequentialExecution([Repeat(Skip()), Skip()]),
        ParallelExecution([SequentialExecution([Skip(), Skip()]), Skip()]),
        If(PatternOr([PatternAnd([s("a"), s("b")]), s("c")]), Skip()),
        Whenever(PatternConcat([s("a"), PatternOr([s("b"), s("c")])]), Skip()),
        Enter(SpacePath(PatternConcat([s("rooms"), Wildcard()])), Procedure("abort")),
    ])
    def test_reparses_to_equal_tree(self, node):
        assert parse(fmt(node), {"abort": []}) == node
