"""Example grammar over the input alphabet {0, 1, 2, 3} with variables {A, B}."""

from __future__ import annotations

from typing import Dict, List

from .grammar import GrammarRegistry

EXAMPLE_RULES: Dict[str, List[str]] = {
    "$": ["AB"],
    "A": ["0A1", "2"],
    "B": ["1B", "3A"],
}

EXAMPLE_INPUT = "021300211"


def example_grammar() -> GrammarRegistry:
    return GrammarRegistry.from_productions(EXAMPLE_RULES)
