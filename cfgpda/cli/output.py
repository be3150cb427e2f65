"""
Output formatting for CLI operations.

Plain-text rendering goes through ``cfgpda.trace``; ``--json`` prints the
same data as a JSON document instead.
"""

import json
from typing import Dict, List, TextIO

from cfgpda.cases import CaseResult
from cfgpda.driver import RunResult
from cfgpda.grammar import GrammarRegistry, definition_summary
from cfgpda.trace import outcome_message, render_trace


def print_run_result(result: RunResult, out: TextIO, *, show_trace: bool = True, as_json: bool = False) -> None:
    if as_json:
        out.write(json.dumps(result.to_dict(), indent=2, ensure_ascii=False) + "\n")
        return
    lines = render_trace(result) if show_trace else [outcome_message(result)]
    for line in lines:
        out.write(line + "\n")
    if result.error is not None and result.error.hint:
        out.write(f"Hint: {result.error.hint}\n")


def print_grammar(grammar: GrammarRegistry, out: TextIO) -> None:
    """Print ``name -> rule`` lines with the start variable first."""
    summary: Dict[str, str] = definition_summary(grammar)
    names = sorted(summary, key=lambda name: (name != grammar.start, name))
    for name in names:
        out.write(f"{name} -> {summary[name]}\n")


def print_case_results(results: List[CaseResult], out: TextIO, *, as_json: bool = False) -> None:
    if as_json:
        out.write(json.dumps([r.to_dict() for r in results], indent=2) + "\n")
        return
    for result in results:
        marker = "ok  " if result.passed else "FAIL"
        line = f"[{marker}] {result.case.input!r}"
        if result.message:
            line = f"{line}: {result.message}"
        out.write(line + "\n")
    passed = sum(1 for r in results if r.passed)
    out.write(f"{passed}/{len(results)} cases passed\n")
