"""Shared pytest fixtures for the recognizer tests."""

import logging
import textwrap

import pytest

from cfgpda.grammar import GrammarRegistry
from cfgpda.samples import EXAMPLE_RULES


NESTED_GRAMMAR_YAML = textwrap.dedent(
    """
    name: nested
    description: "$ -> AB, A -> 0A1 | 2, B -> 1B | 3A"
    start: "$"
    rules:
      $: [AB]
      A: ["0A1", "2"]
      B: ["1B", "3A"]
    cases:
      - input: "021300211"
        accepted: true
      - input: "0213"
        accepted: false
        error: UNCONSUMED_STACK
    """
)


@pytest.fixture
def example_grammar():
    """Registry for {$ -> AB, A -> 0A1 | 2, B -> 1B | 3A}."""
    return GrammarRegistry.from_productions(EXAMPLE_RULES)


@pytest.fixture
def shared_prefix_grammar():
    """Two alternatives of S share the first symbol and diverge on the second."""
    return GrammarRegistry.from_productions({"$": ["S"], "S": ["ab", "ac"]})


@pytest.fixture
def nested_grammar_file(tmp_path):
    path = tmp_path / "nested.yaml"
    path.write_text(NESTED_GRAMMAR_YAML, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handler and propagation changes made by the CLI's logging setup."""
    logger = logging.getLogger("cfgpda")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)
    logger.propagate = True
