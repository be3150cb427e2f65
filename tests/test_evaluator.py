"""Tests for deriving a single input symbol from a token."""

import pytest

from cfgpda.errors import (
    DerivationError,
    ExpansionLimitExceeded,
    MatchError,
    MisplacedEndVariable,
    NoAlternativeMatched,
    SymbolMismatch,
    UndefinedVariable,
)
from cfgpda.evaluator import evaluate
from cfgpda.grammar import GrammarRegistry
from cfgpda.tokens import EndVariable, Terminal, Variable, concat, terminal, union, variable


class TestTerminal:

    def test_match_pushes_nothing(self):
        assert evaluate("a", terminal("a"), {}) == []

    def test_mismatch(self):
        with pytest.raises(SymbolMismatch) as exc_info:
            evaluate("b", terminal("a"), {})
        assert exc_info.value.expected == ("a",)
        assert exc_info.value.got == "b"
        assert isinstance(exc_info.value, DerivationError)


class TestConcat:

    def test_rest_is_scheduled(self):
        token = concat(terminal("0"), variable("A"), terminal("1"))
        assert evaluate("0", token, {}) == [Variable("A"), Terminal("1")]

    def test_head_expansion_comes_first(self):
        registry = {"A": union(concat(terminal("x"), terminal("y")))}
        token = concat(variable("A"), terminal("z"))
        assert evaluate("x", token, registry) == [Terminal("y"), Terminal("z")]

    def test_failure_propagates_unchanged(self):
        with pytest.raises(SymbolMismatch) as exc_info:
            evaluate("9", concat(terminal("0"), terminal("1")), {})
        assert exc_info.value.expected == ("0",)


class TestUnion:

    def test_first_matching_alternative_wins(self):
        token = union(terminal("a"), concat(terminal("a"), terminal("b")))
        assert evaluate("a", token, {}) == []

    def test_declaration_order_decides(self):
        token = union(concat(terminal("a"), terminal("b")), concat(terminal("a"), terminal("c")))
        assert evaluate("a", token, {}) == [Terminal("b")]

    def test_later_alternative_tried_after_failure(self):
        token = union(terminal("x"), concat(terminal("y"), terminal("z")))
        assert evaluate("y", token, {}) == [Terminal("z")]

    def test_all_alternatives_fail(self):
        token = union(terminal("0"), concat(terminal("2"), terminal("1")))
        with pytest.raises(NoAlternativeMatched) as exc_info:
            evaluate("3", token, {})
        error = exc_info.value
        assert error.symbol == "3"
        assert error.tried_count == 2
        assert error.alternatives == token.children
        assert error.expected == ("0", "2")
        assert isinstance(error, SymbolMismatch)

    def test_undefined_variable_is_not_swallowed(self):
        token = union(variable("Missing"), terminal("a"))
        with pytest.raises(UndefinedVariable):
            evaluate("a", token, {})


class TestVariable:

    def test_variable_is_transparent(self, example_grammar):
        assert evaluate("0", Variable("A"), example_grammar) == [Variable("A"), Terminal("1")]
        assert evaluate("2", Variable("A"), example_grammar) == []

    def test_failure_names_the_variable(self, example_grammar):
        with pytest.raises(NoAlternativeMatched) as exc_info:
            evaluate("3", Variable("A"), example_grammar)
        assert exc_info.value.variable == "A"
        assert "variable('A')" in exc_info.value.message

    def test_undefined(self):
        with pytest.raises(UndefinedVariable) as exc_info:
            evaluate("a", variable("X"), {})
        assert exc_info.value.name == "X"

    def test_left_recursion_hits_depth_ceiling(self):
        registry = GrammarRegistry.from_productions(
            {"$": ["A"], "A": ["Ab", "c"]}, validate=False
        )
        with pytest.raises(ExpansionLimitExceeded) as exc_info:
            evaluate("c", Variable("A"), registry, max_depth=20)
        assert exc_info.value.limit == 20


class TestEndVariable:

    def test_end_marker_cannot_derive_a_symbol(self):
        with pytest.raises(MisplacedEndVariable) as exc_info:
            evaluate("a", EndVariable("A"), {})
        assert exc_info.value.name == "A"
        assert exc_info.value.symbol == "a"

    def test_variable_defined_as_end_marker_is_a_rejection(self):
        registry = GrammarRegistry({"$": variable("E"), "E": EndVariable("E")}, validate=False)
        with pytest.raises(MatchError) as exc_info:
            evaluate("a", Variable("E"), registry)
        assert exc_info.value.code == "MISPLACED_END_VARIABLE"
        assert not isinstance(exc_info.value, DerivationError)
