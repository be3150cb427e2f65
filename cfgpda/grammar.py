"""Grammar registry: variable name to defining token expression.

The registry is built once and read-only afterwards.  Building it runs
these load-time checks unless ``validate=False`` is passed:

* the start variable and every ``Variable`` referenced by a definition
  have definitions;
* no variable is defined as a bare ``EndVariable``;
* no variable can reach itself in head position without consuming an
  input symbol (left recursion), which would make the evaluator recurse
  on the same symbol forever.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Set, Union as TypingUnion

from .errors import (
    GrammarError,
    GrammarValidationError,
    LeftRecursionError,
    UndefinedVariable,
)
from .tokens import Concat, EndVariable, Terminal, Token, Union, Variable

DEFAULT_START = "$"

# An alternative in minimal form: "0A1" or ["if", "E", "then", "S"].
Production = TypingUnion[str, Sequence[str]]


class GrammarRegistry(Mapping[str, Token]):
    """Immutable mapping from variable name to its definition."""

    def __init__(
        self,
        definitions: Mapping[str, Token],
        *,
        start: str = DEFAULT_START,
        validate: bool = True,
    ) -> None:
        rules: Dict[str, Token] = {}
        for name, definition in definitions.items():
            if not isinstance(name, str) or not name:
                raise GrammarError(f"Variable names must be non-empty strings, got {name!r}")
            if not isinstance(definition, Token):
                raise GrammarError(
                    f"Definition of {name!r} must be a token, got {type(definition).__name__}"
                )
            rules[name] = definition
        self._rules = rules
        self.start = start
        self.validated = False
        if validate:
            self.validate()

    @classmethod
    def from_productions(
        cls,
        productions: Mapping[str, Sequence[Production]],
        *,
        start: str = DEFAULT_START,
        validate: bool = True,
    ) -> "GrammarRegistry":
        """Build a registry from ``{name: [alternative, ...]}``.

        A symbol that is itself a key of ``productions`` becomes a
        ``Variable``; every other symbol is a ``Terminal``.  Each
        definition is a ``Union`` of its alternatives, in the order given.
        """
        names = set(productions)
        definitions: Dict[str, Token] = {}
        for name, alternatives in productions.items():
            if isinstance(alternatives, str):
                alternatives = [alternatives]
            if not alternatives:
                raise GrammarError(f"Variable {name!r} has no alternatives")
            tokens = [_production_token(name, alt, names) for alt in alternatives]
            definitions[name] = Union(tuple(tokens))
        return cls(definitions, start=start, validate=validate)

    # Mapping protocol -------------------------------------------------

    def __getitem__(self, name: str) -> Token:
        return self._rules[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"GrammarRegistry(start={self.start!r}, variables={list(self._rules)!r})"

    def resolve(self, name: str) -> Token:
        """Return the definition of ``name`` or raise ``UndefinedVariable``."""
        try:
            return self._rules[name]
        except KeyError:
            raise UndefinedVariable(name) from None

    # Validation -------------------------------------------------------

    def validate(self) -> None:
        if self.start not in self._rules:
            raise UndefinedVariable(self.start, referenced_by="start")
        for name, definition in self._rules.items():
            if isinstance(definition, EndVariable):
                raise GrammarValidationError(
                    f"Variable {name!r} is defined as a bare end marker",
                    hint="An end marker must follow at least one symbol inside a sequence.",
                )
            for ref in referenced_variables(definition):
                if ref not in self._rules:
                    raise UndefinedVariable(ref, referenced_by=name)
        cycle = self.find_left_recursion()
        if cycle:
            raise LeftRecursionError(cycle)
        self.validated = True

    def expansion_bound(self) -> int:
        """Deepest nesting the evaluator can reach on a validated registry.

        Without left recursion a single symbol's resolution visits each
        token of the grammar at most once, so the total token count bounds it.
        """
        return sum(token_count(definition) for definition in self._rules.values()) + 1

    def find_left_recursion(self) -> Optional[List[str]]:
        """Return the first head-position cycle found, or ``None``."""
        graph = {name: head_variables(definition) for name, definition in self._rules.items()}
        done: Set[str] = set()

        def visit(name: str, path: List[str]) -> Optional[List[str]]:
            if name in path:
                return path[path.index(name):] + [name]
            if name in done or name not in graph:
                return None
            path.append(name)
            for nxt in sorted(graph[name]):
                found = visit(nxt, path)
                if found:
                    return found
            path.pop()
            done.add(name)
            return None

        for name in self._rules:
            found = visit(name, [])
            if found:
                return found
        return None


def referenced_variables(token: Token) -> Set[str]:
    """Names of every ``Variable`` appearing anywhere inside ``token``."""
    if isinstance(token, Variable):
        return {token.name}
    if isinstance(token, (Concat, Union)):
        names: Set[str] = set()
        for child in token.children:
            names |= referenced_variables(child)
        return names
    return set()


def token_count(token: Token) -> int:
    if isinstance(token, (Concat, Union)):
        return 1 + sum(token_count(child) for child in token.children)
    return 1


def head_variables(token: Token) -> Set[str]:
    """Variables the evaluator may resolve before consuming the current symbol."""
    if isinstance(token, Variable):
        return {token.name}
    if isinstance(token, Concat):
        return head_variables(token.head)
    if isinstance(token, Union):
        names: Set[str] = set()
        for child in token.children:
            names |= head_variables(child)
        return names
    return set()


def _production_token(owner: str, production: Production, names: Set[str]) -> Token:
    symbols = list(production) if isinstance(production, str) else [str(s) for s in production]
    if not symbols:
        raise GrammarError(
            f"Variable {owner!r} has an empty alternative",
            hint="Empty (epsilon) productions are not supported.",
        )
    tokens: List[Token] = [
        Variable(symbol) if symbol in names else Terminal(symbol) for symbol in symbols
    ]
    if len(tokens) == 1:
        return tokens[0]
    return Concat(tuple(tokens))


def definition_summary(registry: GrammarRegistry) -> Dict[str, str]:
    """Printable ``name -> rule`` view, used by the CLI."""
    return {name: str(definition) for name, definition in registry.items()}


__all__ = [
    "DEFAULT_START",
    "GrammarRegistry",
    "referenced_variables",
    "head_variables",
    "token_count",
    "definition_summary",
]
