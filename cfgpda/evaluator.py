"""Token evaluator: can this token derive the current input symbol?

``evaluate`` is a pure function of one input symbol, one token and the
grammar registry.  On success it returns the list of tokens the caller
must push (first element ends up on top of the stack).  On failure it
raises a ``MatchError``.

The grammar's own expression tree is the stack alphabet, so there is no
separate table-building phase: resolving ``Concat``/``Union``/``Variable``
nodes here is the whole automaton.

Known limitation: a ``Union`` commits to the first alternative that can
derive the current symbol.  If that choice fails on a later symbol the
run rejects; alternatives are never revisited across symbols.
"""

from __future__ import annotations

from typing import List, Mapping, Optional

from .errors import (
    DerivationError,
    ExpansionLimitExceeded,
    MisplacedEndVariable,
    NoAlternativeMatched,
    SymbolMismatch,
    UndefinedVariable,
)
from .tokens import Concat, EndVariable, Terminal, Token, Union, Variable

DEFAULT_MAX_DEPTH = 100


def evaluate(
    symbol: str,
    token: Token,
    registry: Mapping[str, Token],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[Token]:
    """Derive ``symbol`` from ``token`` and return the tokens left to match.

    Raises:
        SymbolMismatch: a terminal does not match ``symbol``.
        NoAlternativeMatched: every alternative of a union failed.
        UndefinedVariable: a variable has no definition in ``registry``.
        MisplacedEndVariable: a variable of an unvalidated registry is
            defined as a bare end marker.
        ExpansionLimitExceeded: resolution nested deeper than ``max_depth``
            without consuming ``symbol`` (left recursion in an unvalidated
            grammar).
    """
    return _evaluate(symbol, token, registry, max_depth, 0, None)


def _evaluate(
    symbol: str,
    token: Token,
    registry: Mapping[str, Token],
    max_depth: int,
    depth: int,
    owner: Optional[str],
) -> List[Token]:
    if depth > max_depth:
        raise ExpansionLimitExceeded(max_depth)

    if isinstance(token, Terminal):
        if token.symbol == symbol:
            return []
        raise SymbolMismatch(token.symbol, symbol)

    if isinstance(token, Concat):
        expansion = _evaluate(symbol, token.head, registry, max_depth, depth + 1, None)
        return expansion + list(token.rest)

    if isinstance(token, Union):
        failures: List[DerivationError] = []
        for child in token.children:
            try:
                return _evaluate(symbol, child, registry, max_depth, depth + 1, None)
            except DerivationError as exc:
                failures.append(exc)
        raise NoAlternativeMatched(symbol, token.children, failures, variable=owner)

    if isinstance(token, Variable):
        definition = registry.get(token.name)
        if definition is None:
            raise UndefinedVariable(token.name)
        return _evaluate(symbol, definition, registry, max_depth, depth + 1, token.name)

    if isinstance(token, EndVariable):
        # Reachable only through a variable defined as a bare end marker
        raise MisplacedEndVariable(token.name, symbol=symbol)

    raise TypeError(f"Unsupported token type: {type(token).__name__}")


__all__ = ["evaluate", "DEFAULT_MAX_DEPTH"]
