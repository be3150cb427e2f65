"""End-to-end recognition runs and their traces."""

import logging

import pytest

from cfgpda.config import RecognizerConfig
from cfgpda.driver import as_symbols, accepts, initial_obligations, run
from cfgpda.errors import (
    ExpansionLimitExceeded,
    MisplacedEndVariable,
    NoAlternativeMatched,
    StackEmpty,
    SymbolMismatch,
    UnconsumedStack,
    UndefinedVariable,
)
from cfgpda.grammar import GrammarRegistry
from cfgpda.samples import EXAMPLE_INPUT
from cfgpda.tokens import (
    Concat,
    EndVariable,
    Terminal,
    Variable,
    concat,
    end_variable,
    join_tokens,
    terminal,
    union,
    variable,
)
from cfgpda.trace import format_step, outcome_message, render_trace


EXPECTED_STACKS = ["AB", "A1B", "1B", "B", "A", "A1", "A11", "11", "1", ""]


class TestAcceptance:

    def test_worked_example(self, example_grammar):
        result = run(example_grammar, "$", EXAMPLE_INPUT)
        assert result.accepted
        assert result.error is None
        assert result.stack == ()
        assert result.reason == "accepted"
        assert [step.index for step in result.trace] == [None] + list(range(9))
        assert [join_tokens(step.stack) for step in result.trace] == EXPECTED_STACKS
        assert [step.symbol for step in result.trace[1:]] == list(EXAMPLE_INPUT)

    def test_start_defaults_to_registry_start(self, example_grammar):
        assert run(example_grammar, None, EXAMPLE_INPUT).accepted
        assert accepts(example_grammar, "232")

    def test_sequence_input(self):
        grammar = GrammarRegistry.from_productions({"$": [["let", "x", "be", "N"]], "N": [["1"], ["2"]]})
        assert run(grammar, None, ["let", "x", "be", "2"]).accepted
        assert not run(grammar, None, ["let", "x", "be", "3"]).accepted

    def test_trace_can_be_disabled(self, example_grammar):
        result = run(example_grammar, None, EXAMPLE_INPUT, config=RecognizerConfig(record_trace=False))
        assert result.accepted
        assert result.trace == []


class TestRejection:

    def test_mismatch_on_second_symbol(self, example_grammar):
        result = run(example_grammar, "$", "031300211")
        assert not result.accepted
        assert isinstance(result.error, SymbolMismatch)
        assert isinstance(result.error, NoAlternativeMatched)
        assert result.failed_step == 1
        assert result.error.got == "3"
        assert result.error.expected == ("0", "2")
        # only the failing pop of A is consumed
        assert result.stack == (Terminal("1"), Variable("B"))
        assert len(result.trace) == 2

    def test_terminal_mismatch(self, example_grammar):
        result = run(example_grammar, "$", "0223")
        assert type(result.error) is SymbolMismatch
        assert result.failed_step == 2
        assert result.error.expected == ("1",)
        assert result.reason == "SYMBOL_MISMATCH"

    def test_premature_end(self, example_grammar):
        result = run(example_grammar, "$", "0213")
        assert not result.accepted
        assert isinstance(result.error, UnconsumedStack)
        assert result.stack == (Variable("A"),)
        assert result.error.remaining == result.stack
        assert result.failed_step == 4

    def test_empty_input(self, example_grammar):
        result = run(example_grammar, "$", "")
        assert isinstance(result.error, UnconsumedStack)
        assert result.stack == (Variable("A"), Variable("B"))

    def test_stack_underflow(self, example_grammar):
        result = run(example_grammar, "$", EXAMPLE_INPUT + "1")
        assert isinstance(result.error, StackEmpty)
        assert result.failed_step == len(EXAMPLE_INPUT)
        assert result.error.symbol == "1"
        assert result.stack == ()

    def test_missing_start_variable(self):
        registry = GrammarRegistry({"A": terminal("a")}, validate=False)
        result = run(registry, "$", "a")
        assert isinstance(result.error, UndefinedVariable)
        assert result.error.name == "$"
        assert result.trace == []

    def test_unknown_start_override(self, example_grammar):
        result = run(example_grammar, "Q", "0")
        assert isinstance(result.error, UndefinedVariable)
        assert result.error.name == "Q"

    def test_left_recursion_in_unvalidated_grammar(self):
        registry = GrammarRegistry.from_productions({"$": ["A"], "A": ["Ab", "c"]}, validate=False)
        result = run(registry, None, "cb", config=RecognizerConfig(max_depth=30))
        assert isinstance(result.error, ExpansionLimitExceeded)
        assert result.failed_step == 0

    def test_variable_defined_as_end_marker(self):
        registry = GrammarRegistry(
            {"$": concat(terminal("a"), variable("E")), "E": end_variable("E")}, validate=False
        )
        result = run(registry, None, "ab")
        assert not result.accepted
        assert isinstance(result.error, MisplacedEndVariable)
        assert result.failed_step == 1
        assert result.reason == "MISPLACED_END_VARIABLE"


def _unit_chain(levels):
    rules = {"$": [["V1"]]}
    for level in range(1, levels):
        rules[f"V{level}"] = [[f"V{level + 1}"]]
    rules[f"V{levels}"] = [["x"]]
    return rules


class TestDepthCeiling:
    """Validated grammars are bounded by their own size, not the configured ceiling."""

    def test_deep_chain_accepted_when_validated(self):
        grammar = GrammarRegistry.from_productions(_unit_chain(51))
        assert run(grammar, None, ["x"]).accepted
        assert run(grammar, None, ["x"], config=RecognizerConfig(max_depth=3)).accepted

    def test_deep_chain_hits_ceiling_when_unvalidated(self):
        grammar = GrammarRegistry.from_productions(_unit_chain(51), validate=False)
        result = run(grammar, None, ["x"])
        assert isinstance(result.error, ExpansionLimitExceeded)
        assert result.error.limit == 100


class TestUnionOrder:
    """Unions commit to the first alternative that derives the current symbol."""

    def test_first_alternative_chosen(self, shared_prefix_grammar):
        result = run(shared_prefix_grammar, None, "ab")
        assert result.accepted
        assert result.trace[1].stack == (Terminal("b"),)

    def test_no_backtracking_into_second_alternative(self, shared_prefix_grammar):
        # "ac" is in the language but alternative 0 ("ab") was already taken
        result = run(shared_prefix_grammar, None, "ac")
        assert not result.accepted
        assert isinstance(result.error, SymbolMismatch)
        assert result.error.expected == ("b",)
        assert result.failed_step == 1


class TestEndMarkers:

    def test_end_marker_closed_mid_input(self):
        registry = GrammarRegistry({"$": concat(terminal("a"), end_variable("S"), terminal("b"))})
        result = run(registry, None, "ab")
        assert result.accepted
        assert result.trace[1].stack == (EndVariable("S"), Terminal("b"))
        assert result.trace[2].closed == ("S",)

    def test_trailing_end_marker(self):
        registry = GrammarRegistry({"$": union(concat(terminal("a"), end_variable("S")))})
        result = run(registry, None, "a")
        assert result.accepted
        assert result.final_closed == ("S",)

    def test_end_marker_inside_variable(self):
        registry = GrammarRegistry(
            {
                "$": concat(variable("P"), terminal(";")),
                "P": union(concat(terminal("x"), end_variable("P"))),
            }
        )
        result = run(registry, None, "x;")
        assert result.accepted
        assert result.trace[2].closed == ("P",)


class TestInitialObligations:

    def test_single_alternative_concat_is_unpacked(self, example_grammar):
        assert initial_obligations(example_grammar["$"]) == [Variable("A"), Variable("B")]

    def test_multi_alternative_union_is_pushed_whole(self, example_grammar):
        assert initial_obligations(example_grammar["A"]) == [example_grammar["A"]]

    def test_single_terminal(self):
        assert initial_obligations(Terminal("x")) == [Terminal("x")]


class TestTraceRendering:

    def test_render_accepted_run(self, example_grammar):
        lines = render_trace(run(example_grammar, "$", EXAMPLE_INPUT))
        assert lines[0] == "- '$' ⊢ AB"
        assert lines[1] == "0 '0' ⊢ A1B"
        assert lines[9] == "8 '1' ⊢"
        assert lines[-1] == "string accepted!"

    def test_render_unconsumed(self, example_grammar):
        result = run(example_grammar, "$", "0213")
        assert outcome_message(result) == "Unexpected End: stack should be empty."

    def test_render_failure_names_step(self, example_grammar):
        result = run(example_grammar, "$", "031300211")
        assert outcome_message(result).startswith("step 1: variable('A')")

    def test_closed_markers_in_step(self):
        registry = GrammarRegistry({"$": concat(terminal("a"), end_variable("S"), terminal("b"))})
        result = run(registry, None, "ab")
        assert format_step(result.trace[2]) == "1 'b' ⊢  (closed S)"

    def test_to_dict(self, example_grammar):
        data = run(example_grammar, "$", "0213").to_dict()
        assert data["accepted"] is False
        assert data["reason"] == "UNCONSUMED_STACK"
        assert data["stack"] == ["A"]
        assert data["trace"][0] == {"index": None, "symbol": "$", "stack": ["A", "B"], "closed": []}


class TestHelpers:

    def test_as_symbols(self):
        assert as_symbols("0A") == ("0", "A")
        assert as_symbols("if x then", " ") == ("if", "x", "then")
        assert as_symbols(["ab", "c"]) == ("ab", "c")

    def test_run_logs_outcome(self, example_grammar, caplog):
        with caplog.at_level(logging.INFO, logger="cfgpda"):
            run(example_grammar, "$", "0213")
        assert any("obligation" in record.getMessage() for record in caplog.records)
