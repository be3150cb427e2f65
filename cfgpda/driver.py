"""Driver: runs a whole input through a fresh stack machine.

Every ``MatchError`` raised while consuming input ends the run at once;
it is caught here and returned on the ``RunResult`` together with the
trace recorded so far.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import RecognizerConfig
from .errors import MatchError, UnconsumedStack, UndefinedVariable
from .grammar import GrammarRegistry
from .machine import StackMachine
from .tokens import Concat, Token, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceStep:
    """Stack contents after one step; ``index`` is ``None`` for the initial push."""

    index: Optional[int]
    symbol: str
    stack: Tuple[Token, ...]
    closed: Tuple[Optional[str], ...] = ()


@dataclass
class RunResult:
    """Outcome of one recognition run."""

    accepted: bool
    start: str
    symbols: Tuple[str, ...]
    trace: List[TraceStep] = field(default_factory=list)
    error: Optional[MatchError] = None
    stack: Tuple[Token, ...] = ()
    final_closed: Tuple[Optional[str], ...] = ()

    @property
    def reason(self) -> str:
        if self.accepted:
            return "accepted"
        return self.error.code if self.error is not None else "rejected"

    @property
    def failed_step(self) -> Optional[int]:
        return self.error.step if self.error is not None else None

    def to_dict(self) -> dict:
        return {
            "accepted": self.accepted,
            "reason": self.reason,
            "start": self.start,
            "symbols": list(self.symbols),
            "failed_step": self.failed_step,
            "error": self.error.message if self.error is not None else None,
            "stack": [str(token) for token in self.stack],
            "trace": [
                {
                    "index": step.index,
                    "symbol": step.symbol,
                    "stack": [str(token) for token in step.stack],
                    "closed": list(step.closed),
                }
                for step in self.trace
            ],
        }


def initial_obligations(definition: Token) -> List[Token]:
    """Tokens pushed for the start variable before any input is read.

    A single-alternative union is its alternative, and a concatenation
    pushed child by child is matched exactly as the concatenation itself.
    """
    if isinstance(definition, Union) and len(definition.children) == 1:
        definition = definition.children[0]
    if isinstance(definition, Concat):
        return list(definition.children)
    return [definition]


def as_symbols(text: Iterable[str], separator: Optional[str] = None) -> Tuple[str, ...]:
    """Single characters for a plain string, or split on ``separator``."""
    if isinstance(text, str):
        if separator:
            return tuple(part for part in text.split(separator) if part)
        return tuple(text)
    return tuple(text)


def run(
    grammar: GrammarRegistry,
    start: Optional[str],
    symbols: Iterable[str],
    *,
    config: Optional[RecognizerConfig] = None,
) -> RunResult:
    """Recognise ``symbols`` against ``grammar`` starting from ``start``.

    ``start`` defaults to the registry's start variable.  The result is
    accepted iff the stack is empty exactly when input runs out.
    """
    config = config or RecognizerConfig()
    start_name = start or getattr(grammar, "start", None) or config.start
    input_symbols = as_symbols(symbols)
    result = RunResult(accepted=False, start=start_name, symbols=input_symbols)
    machine = StackMachine(grammar, config=config)

    definition = grammar.get(start_name)
    if definition is None:
        result.error = UndefinedVariable(start_name)
        logger.info("Rejected: %s", result.error.message)
        return result

    machine.push(initial_obligations(definition))
    _record(result, config, None, start_name, machine, ())

    for index, symbol in enumerate(input_symbols):
        try:
            closed = machine.process(symbol)
        except MatchError as exc:
            exc.step = index
            result.error = exc
            result.stack = machine.stack.snapshot()
            logger.info("Rejected at step %d (%r): %s", index, symbol, exc.message)
            return result
        _record(result, config, index, symbol, machine, closed)
        logger.debug("%d %r |- %s", index, symbol, machine.stack)

    result.final_closed = machine.drain_end_markers()
    result.stack = machine.stack.snapshot()
    if result.stack:
        result.error = UnconsumedStack(result.stack)
        result.error.step = len(input_symbols)
        logger.info("Rejected: input exhausted with %d obligation(s) left", len(result.stack))
        return result

    result.accepted = True
    logger.info("Accepted %d symbol(s)", len(input_symbols))
    return result


def accepts(grammar: GrammarRegistry, symbols: Iterable[str], **kwargs) -> bool:
    return run(grammar, None, symbols, **kwargs).accepted


def _record(
    result: RunResult,
    config: RecognizerConfig,
    index: Optional[int],
    symbol: str,
    machine: StackMachine,
    closed: Sequence[Optional[str]],
) -> None:
    if config.record_trace:
        result.trace.append(TraceStep(index, symbol, machine.stack.snapshot(), tuple(closed)))


__all__ = ["TraceStep", "RunResult", "run", "accepts", "as_symbols", "initial_obligations"]
