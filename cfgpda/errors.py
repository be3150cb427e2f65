"""Unified error model for cfgpda.

Grammar problems (bad token shapes, undefined references, unreadable
grammar files) are ``GrammarError`` subclasses and are raised while a
grammar is being built.  Rejections found while recognising an input are
``MatchError`` subclasses; the driver catches them and attaches them to
the ``RunResult`` instead of letting them escape.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple


class CFGPDAError(Exception):
    """Base class for all errors surfaced to users."""

    code: str = "CFGPDA_ERROR"
    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if hint is not None:
            self.hint = hint

    def format(self) -> str:
        text = f"{self.message} ({self.code})"
        if self.hint:
            text = f"{text} Hint: {self.hint}"
        return text


# ============================================================================
# Grammar construction
# ============================================================================

class GrammarError(CFGPDAError):
    """Raised when a grammar or one of its tokens is malformed."""

    code = "GRAMMAR_ERROR"


class TokenConstructionError(GrammarError):
    """Raised when a token is built with an invalid shape."""

    code = "TOKEN_CONSTRUCTION"


class GrammarValidationError(GrammarError):
    """Raised when a registry fails its load-time checks."""

    code = "GRAMMAR_VALIDATION"


class LeftRecursionError(GrammarValidationError):
    """A variable can reach itself in head position without consuming input."""

    code = "LEFT_RECURSION"

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = tuple(cycle)
        path = " -> ".join(self.cycle)
        super().__init__(
            f"Variable {self.cycle[0]!r} is left recursive: {path}",
            hint="Rewrite the rule so a terminal comes before the recursive reference.",
        )


class GrammarLoadError(GrammarError):
    """Raised when a grammar document cannot be read or is malformed."""

    code = "GRAMMAR_LOAD"

    def __init__(self, message: str, *, path: Optional[str] = None, **kwargs: Any) -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message, **kwargs)


# ============================================================================
# Recognition
# ============================================================================

class MatchError(CFGPDAError):
    """Base class for rejections raised during a recognition run.

    ``step`` is the index of the input symbol being processed when the
    error was raised; the driver fills it in.
    """

    code = "MATCH_ERROR"

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.step: Optional[int] = None


class StackEmpty(MatchError):
    """An input symbol arrived but no obligation was left to derive it."""

    code = "STACK_EMPTY"

    def __init__(self, symbol: Optional[str] = None) -> None:
        self.symbol = symbol
        if symbol is None:
            message = "Stack empty."
        else:
            message = f"Stack empty: no obligation left for symbol {symbol!r}."
        super().__init__(message)


class DerivationError(MatchError):
    """A token cannot derive the current input symbol.

    This is the only family a ``Union`` recovers from while trying its
    next alternative.
    """

    code = "DERIVATION_ERROR"


class SymbolMismatch(DerivationError):
    """A terminal did not match the input symbol."""

    code = "SYMBOL_MISMATCH"

    def __init__(self, expected: Any, got: str, *, message: Optional[str] = None) -> None:
        if isinstance(expected, str):
            self.expected: Tuple[str, ...] = (expected,)
        else:
            self.expected = tuple(expected)
        self.got = got
        if message is None:
            message = f"Invalid symbol. expected({_describe(self.expected)}), got:({got!r})"
        super().__init__(message)


class NoAlternativeMatched(SymbolMismatch):
    """Every alternative of a union failed on the input symbol."""

    code = "NO_ALTERNATIVE_MATCHED"

    def __init__(
        self,
        symbol: str,
        alternatives: Sequence[Any],
        failures: Sequence[DerivationError],
        *,
        variable: Optional[str] = None,
    ) -> None:
        self.symbol = symbol
        self.alternatives = tuple(alternatives)
        self.failures = tuple(failures)
        self.variable = variable
        expected = []
        for failure in self.failures:
            for item in getattr(failure, "expected", ()):
                if item not in expected:
                    expected.append(item)
        owner = f"variable({variable!r})" if variable else "union"
        message = (
            f"{owner} wasn't expected symbol({symbol!r}); "
            f"tried {len(self.alternatives)} alternative(s), "
            f"expected one of: {_describe(expected)}"
        )
        super().__init__(expected, symbol, message=message)

    @property
    def tried_count(self) -> int:
        return len(self.failures)


class UndefinedVariable(MatchError):
    """A variable name has no definition in the grammar registry."""

    code = "UNDEFINED_VARIABLE"

    def __init__(self, name: str, *, referenced_by: Optional[str] = None) -> None:
        self.name = name
        self.referenced_by = referenced_by
        message = f"Variable {name!r} is not defined in the grammar"
        if referenced_by is not None:
            message = f"{message} (referenced by {referenced_by!r})"
        super().__init__(message, hint=f"Add a rule for {name!r} or fix the reference.")


class MisplacedEndVariable(MatchError):
    """An end marker was reached where an input symbol had to be derived.

    Only an unvalidated registry can get here, through a variable defined
    as a bare ``EndVariable``.
    """

    code = "MISPLACED_END_VARIABLE"

    def __init__(self, name: Optional[str], *, symbol: Optional[str] = None) -> None:
        self.name = name
        self.symbol = symbol
        super().__init__(
            f"End marker </{name or ''}> cannot derive symbol {symbol!r}",
            hint="End markers may only follow other tokens inside a sequence.",
        )


class UnconsumedStack(MatchError):
    """Input was exhausted while obligations remained on the stack."""

    code = "UNCONSUMED_STACK"

    def __init__(self, remaining: Sequence[Any]) -> None:
        self.remaining = tuple(remaining)
        super().__init__("Unexpected End: stack should be empty.")


class ExpansionLimitExceeded(MatchError):
    """A configured safety ceiling was hit while expanding tokens."""

    code = "EXPANSION_LIMIT"

    def __init__(self, limit: int, *, what: str = "expansion depth") -> None:
        self.limit = limit
        self.what = what
        super().__init__(
            f"{what} limit of {limit} exceeded",
            hint="The grammar likely derives a variable from itself without consuming input.",
        )


def _describe(symbols: Sequence[str]) -> str:
    return ", ".join(repr(symbol) for symbol in symbols) or "nothing"


__all__ = [
    "CFGPDAError",
    "GrammarError",
    "TokenConstructionError",
    "GrammarValidationError",
    "LeftRecursionError",
    "GrammarLoadError",
    "MatchError",
    "StackEmpty",
    "DerivationError",
    "SymbolMismatch",
    "NoAlternativeMatched",
    "UndefinedVariable",
    "MisplacedEndVariable",
    "UnconsumedStack",
    "ExpansionLimitExceeded",
]
