"""Text rendering of a run's trace in pushdown-automaton style."""

from __future__ import annotations

from typing import List

from .driver import RunResult, TraceStep
from .errors import UnconsumedStack
from .tokens import join_tokens

TURNSTILE = "⊢"
ACCEPTED_MESSAGE = "string accepted!"


def format_step(step: TraceStep) -> str:
    label = "-" if step.index is None else str(step.index)
    line = f"{label} {step.symbol!r} {TURNSTILE} {join_tokens(step.stack)}".rstrip()
    if step.closed:
        names = ", ".join(name or "?" for name in step.closed)
        line = f"{line}  (closed {names})"
    return line


def outcome_message(result: RunResult) -> str:
    if result.accepted:
        return ACCEPTED_MESSAGE
    if isinstance(result.error, UnconsumedStack):
        return result.error.message
    if result.error is None:
        return "string rejected"
    if result.failed_step is not None:
        return f"step {result.failed_step}: {result.error.message}"
    return result.error.message


def render_trace(result: RunResult) -> List[str]:
    """One line per recorded step followed by the outcome line."""
    lines = [format_step(step) for step in result.trace]
    lines.append(outcome_message(result))
    return lines


__all__ = ["format_step", "outcome_message", "render_trace", "ACCEPTED_MESSAGE", "TURNSTILE"]
