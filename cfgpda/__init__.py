"""
Context-free grammar recognition by direct pushdown-automaton simulation.

A grammar is held as a tree of token expressions and the automaton's
stack alphabet is that tree itself: no transition table is built.  For
each input symbol the top of the stack is popped and asked to derive the
symbol; whatever is left of it is pushed back.  The input is accepted
when the stack runs out exactly as the input does.

The code is organised into several modules:

* ``tokens`` – the five token kinds (terminal, concatenation, union,
  variable reference, end marker).
* ``grammar`` – the registry mapping variable names to definitions,
  with load-time checks for undefined references and left recursion.
* ``evaluator`` – derives one input symbol from one token.
* ``stack`` and ``machine`` – the stack of pending obligations and the
  per-symbol step, including non-consuming end-marker pops.
* ``driver`` – runs a whole input and returns a ``RunResult`` with the
  trace of stack contents.
* ``loader`` and ``cases`` – grammar documents in YAML, JSON or TOML,
  with embedded example cases.
* ``cli`` – the ``cfgpda`` command.
"""

import re
from pathlib import Path
from importlib import metadata as _metadata
from typing import Optional

from .driver import RunResult, TraceStep, accepts, run
from .errors import (
    CFGPDAError,
    ExpansionLimitExceeded,
    GrammarError,
    MatchError,
    NoAlternativeMatched,
    StackEmpty,
    SymbolMismatch,
    UnconsumedStack,
    MisplacedEndVariable,
    UndefinedVariable,
)
from .grammar import GrammarRegistry
from .tokens import Concat, EndVariable, Terminal, Token, Union, Variable


def _local_version() -> Optional[str]:
    root = Path(__file__).resolve().parents[1]
    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return None
    try:
        text = pyproject.read_text(encoding="utf-8")
    except OSError:  # pragma: no cover - IO errors should not break imports
        return None
    match = re.search(r"^version\s*=\s*\"([^\"]+)\"", text, flags=re.MULTILINE)
    if match:
        return match.group(1)
    return None


try:  # pragma: no cover - metadata fallback for editable installs
    __version__ = _metadata.version("cfgpda")
except _metadata.PackageNotFoundError:  # pragma: no cover - source tree
    __version__ = _local_version() or "0.1.0"

__all__ = [
    "__version__",
    "Token",
    "Terminal",
    "Concat",
    "Union",
    "Variable",
    "EndVariable",
    "GrammarRegistry",
    "run",
    "accepts",
    "RunResult",
    "TraceStep",
    "CFGPDAError",
    "GrammarError",
    "MatchError",
    "StackEmpty",
    "SymbolMismatch",
    "NoAlternativeMatched",
    "UndefinedVariable",
    "MisplacedEndVariable",
    "UnconsumedStack",
    "ExpansionLimitExceeded",
]
