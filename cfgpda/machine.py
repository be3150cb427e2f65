"""Stack machine: feeds one input symbol at a time through the evaluator."""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Tuple

from .config import RecognizerConfig
from .errors import ExpansionLimitExceeded, StackEmpty
from .evaluator import evaluate
from .stack import TokenStack
from .tokens import EndVariable, Token

logger = logging.getLogger(__name__)


class StackMachine:
    """Owns the stack of one recognition run over a shared, read-only registry.

    Each thread must use its own machine; the registry may be shared.
    """

    def __init__(
        self,
        registry: Mapping[str, Token],
        *,
        stack: Optional[TokenStack] = None,
        config: Optional[RecognizerConfig] = None,
    ) -> None:
        self.registry = registry
        self.stack = stack if stack is not None else TokenStack()
        self.config = config or RecognizerConfig()
        self.max_depth = _depth_limit(registry, self.config)

    def push(self, tokens: Iterable[Token]) -> None:
        self.stack.push(tokens)

    def pop(self) -> Token:
        return self.stack.pop()

    def process(self, symbol: str) -> Tuple[Optional[str], ...]:
        """Consume ``symbol`` against the top of the stack.

        End markers popped on the way are closed without consuming the
        symbol; their variable names are returned in the order they were
        closed.

        Raises:
            StackEmpty: nothing was left on the stack for ``symbol``.
            ExpansionLimitExceeded: more than ``max_epsilon_steps`` end
                markers were popped for one symbol.
            MatchError: any evaluator rejection, unchanged.
        """
        closed: List[Optional[str]] = []
        while True:
            try:
                token = self.stack.pop()
            except StackEmpty:
                raise StackEmpty(symbol) from None

            if isinstance(token, EndVariable):
                closed.append(token.name)
                if len(closed) > self.config.max_epsilon_steps:
                    raise ExpansionLimitExceeded(
                        self.config.max_epsilon_steps, what="end marker"
                    )
                logger.debug("Closed %s before %r", token, symbol)
                continue

            expansion = evaluate(symbol, token, self.registry, max_depth=self.max_depth)
            self.stack.push(expansion)
            return tuple(closed)

    def drain_end_markers(self) -> Tuple[Optional[str], ...]:
        """Pop end markers left on top once input is exhausted."""
        closed: List[Optional[str]] = []
        while isinstance(self.stack.peek(), EndVariable):
            marker = self.stack.pop()
            closed.append(marker.name)
            logger.debug("Closed %s at end of input", marker)
        return tuple(closed)


def _depth_limit(registry: Mapping[str, Token], config: RecognizerConfig) -> int:
    # Without left recursion the grammar size bounds the nesting
    if getattr(registry, "validated", False):
        return max(config.max_depth, registry.expansion_bound())
    return config.max_depth


__all__ = ["StackMachine"]
