"""Token expressions: the tree-shaped representation of grammar rules.

A grammar rule is built from five kinds of token:

* ``Terminal`` matches exactly one input symbol.
* ``Concat`` matches its first child now and schedules the rest.
* ``Union`` tries its children in declaration order.
* ``Variable`` names another rule in the grammar registry.
* ``EndVariable`` marks the end of a variable's expansion and consumes
  nothing.

Tokens are immutable data.  Shape is validated when a token is built so
that the evaluator never sees an empty ``Concat`` or ``Union``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterable, Optional, Tuple

from .errors import TokenConstructionError


class TokenKind(str, Enum):
    """Discriminant of a token expression."""

    TERMINAL = "terminal"
    CONCAT = "concat"
    UNION = "union"
    VARIABLE = "variable"
    END_VARIABLE = "end_variable"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    """Base class for all token expressions."""

    kind: ClassVar[TokenKind]


@dataclass(frozen=True)
class Terminal(Token):
    """Matches one input symbol equal to ``symbol``."""

    symbol: str
    kind: ClassVar[TokenKind] = TokenKind.TERMINAL

    def __post_init__(self) -> None:
        if not isinstance(self.symbol, str) or not self.symbol:
            raise TokenConstructionError(
                f"Terminal symbol must be a non-empty string, got {self.symbol!r}"
            )

    def __str__(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class Variable(Token):
    """Reference by name to a definition held in the grammar registry."""

    name: str
    kind: ClassVar[TokenKind] = TokenKind.VARIABLE

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise TokenConstructionError(
                f"Variable name must be a non-empty string, got {self.name!r}"
            )

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class EndVariable(Token):
    """Closing marker; popping it consumes no input."""

    name: Optional[str] = None
    kind: ClassVar[TokenKind] = TokenKind.END_VARIABLE

    def __str__(self) -> str:
        return f"</{self.name or ''}>"


@dataclass(frozen=True)
class Concat(Token):
    """Sequence of tokens matched one after another."""

    children: Tuple[Token, ...]
    kind: ClassVar[TokenKind] = TokenKind.CONCAT

    def __post_init__(self) -> None:
        children = _freeze_children(self.children, "Concat")
        if isinstance(children[0], EndVariable):
            raise TokenConstructionError(
                "Concat cannot start with an EndVariable",
                hint="An end marker closes a sequence; place it after at least one symbol.",
            )
        object.__setattr__(self, "children", children)

    @property
    def head(self) -> Token:
        return self.children[0]

    @property
    def rest(self) -> Tuple[Token, ...]:
        return self.children[1:]

    def __str__(self) -> str:
        return join_tokens(self.children)


@dataclass(frozen=True)
class Union(Token):
    """Ordered choice between alternatives; the first that matches wins."""

    children: Tuple[Token, ...]
    kind: ClassVar[TokenKind] = TokenKind.UNION

    def __post_init__(self) -> None:
        children = _freeze_children(self.children, "Union")
        for child in children:
            if isinstance(child, EndVariable):
                raise TokenConstructionError("Union alternatives cannot be EndVariable markers")
        object.__setattr__(self, "children", children)

    def __str__(self) -> str:
        return "(" + " | ".join(str(child) for child in self.children) + ")"


def _freeze_children(children: Iterable[Token], owner: str) -> Tuple[Token, ...]:
    if isinstance(children, (str, Token)):
        raise TokenConstructionError(f"{owner} children must be a sequence of tokens")
    frozen = tuple(children)
    if not frozen:
        raise TokenConstructionError(f"{owner} requires at least one child")
    for child in frozen:
        if not isinstance(child, Token):
            raise TokenConstructionError(
                f"{owner} children must be tokens, got {type(child).__name__}"
            )
    return frozen


def join_tokens(tokens: Iterable[Token]) -> str:
    """Render tokens side by side, spacing them only when a symbol is longer than one character."""
    parts = [str(token) for token in tokens]
    if all(len(part) == 1 for part in parts):
        return "".join(parts)
    return " ".join(parts)


# ============================================================================
# Construction helpers
# ============================================================================

def terminal(symbol: str) -> Terminal:
    return Terminal(symbol)


def variable(name: str) -> Variable:
    return Variable(name)


def end_variable(name: Optional[str] = None) -> EndVariable:
    return EndVariable(name)


def concat(*children: Token) -> Concat:
    return Concat(children)


def union(*children: Token) -> Union:
    return Union(children)


__all__ = [
    "TokenKind",
    "Token",
    "Terminal",
    "Variable",
    "EndVariable",
    "Concat",
    "Union",
    "join_tokens",
    "terminal",
    "variable",
    "end_variable",
    "concat",
    "union",
]
