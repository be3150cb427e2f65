"""Runs the example cases embedded in a grammar document."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import RecognizerConfig
from .driver import RunResult, run
from .grammar import GrammarRegistry
from .loader import GrammarCase, GrammarDocument


class CaseStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"


@dataclass
class CaseResult:
    """Result of checking one case against its expectation."""

    case: GrammarCase
    status: CaseStatus
    run: RunResult
    message: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status is CaseStatus.PASS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input": self.case.input,
            "status": self.status.value,
            "expected_accepted": self.case.accepted,
            "actual_accepted": self.run.accepted,
            "reason": self.run.reason,
            "message": self.message,
        }


def check_case(
    grammar: GrammarRegistry,
    document: GrammarDocument,
    case: GrammarCase,
    config: Optional[RecognizerConfig] = None,
) -> CaseResult:
    result = run(grammar, grammar.start, document.split(case.input), config=config)
    if result.accepted != case.accepted:
        expected = "accept" if case.accepted else "reject"
        return CaseResult(
            case,
            CaseStatus.FAIL,
            result,
            f"expected {expected}, got {result.reason}",
        )
    if case.error and not _error_matches(result, case.error):
        return CaseResult(
            case,
            CaseStatus.FAIL,
            result,
            f"expected error {case.error}, got {result.reason}",
        )
    return CaseResult(case, CaseStatus.PASS, result)


def run_cases(
    document: GrammarDocument,
    config: Optional[RecognizerConfig] = None,
) -> List[CaseResult]:
    """Build the document's grammar once and check every case against it."""
    config = config or RecognizerConfig()
    grammar = document.build(default_start=config.start)
    return [check_case(grammar, document, case, config) for case in document.cases]


def _error_matches(result: RunResult, expected_code: str) -> bool:
    # A subclass satisfies the code of any of its parents
    if result.error is None:
        return False
    return any(
        getattr(cls, "code", None) == expected_code for cls in type(result.error).__mro__
    )


__all__ = ["CaseStatus", "CaseResult", "check_case", "run_cases"]
