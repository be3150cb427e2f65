"""LIFO storage of pending token obligations."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import StackEmpty
from .tokens import Token, join_tokens


class TokenStack:
    """Stack of tokens still to be matched.

    Storage is a Python list whose tail is the top of the stack.
    ``push`` takes tokens in reading order, so the first token given ends
    up on top; ``snapshot`` returns them top first.
    """

    def __init__(self, tokens: Optional[Iterable[Token]] = None) -> None:
        self._items: List[Token] = []
        if tokens is not None:
            self.push(tokens)

    def push(self, tokens: Iterable[Token]) -> None:
        self._items.extend(reversed(list(tokens)))

    def pop(self) -> Token:
        if not self._items:
            raise StackEmpty()
        return self._items.pop()

    def peek(self) -> Optional[Token]:
        return self._items[-1] if self._items else None

    def snapshot(self) -> Tuple[Token, ...]:
        return tuple(reversed(self._items))

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Token]:
        return iter(self.snapshot())

    def __str__(self) -> str:
        return join_tokens(self.snapshot())

    def __repr__(self) -> str:
        return f"TokenStack({list(self.snapshot())!r})"


__all__ = ["TokenStack"]
