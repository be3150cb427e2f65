"""Grammar documents: rules plus optional example cases, read from disk.

A document looks like this in YAML (JSON and TOML carry the same keys)::

    name: nested
    start: "$"
    rules:
      $: [AB]
      A: ["0A1", "2"]
      B: ["1B", "3A"]
    cases:
      - input: "021300211"
        accepted: true
      - input: "0213"
        accepted: false
        error: UNCONSUMED_STACK

An alternative written as a string is split into single-character
symbols; written as a list, each item is one symbol.  ``separator``
controls how case inputs are split the same way.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    tomllib = None  # type: ignore

from .errors import CFGPDAError, GrammarLoadError
from .grammar import DEFAULT_START, GrammarRegistry

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}
QUOTE_HINT = "Quote numbers and other bare scalars, for example \"0211\"."
Alternative = Union[str, List[str]]


@dataclass
class GrammarCase:
    """Expected outcome of recognising one input."""

    input: str
    accepted: bool
    error: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> GrammarCase:
        error = data.get("error")
        raw_input = data.get("input", "")
        if not isinstance(raw_input, str):
            raise GrammarLoadError(
                f"case input must be a string, got {type(raw_input).__name__} {raw_input!r}",
                hint=QUOTE_HINT,
            )
        return cls(
            input=raw_input,
            accepted=bool(data.get("accepted", True)),
            error=str(error).upper() if error else None,
            description=data.get("description"),
        )


@dataclass
class GrammarDocument:
    """A grammar as written in a file, before it becomes a registry."""

    rules: Dict[str, List[Alternative]]
    start: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    separator: Optional[str] = None
    cases: List[GrammarCase] = field(default_factory=list)

    _file_path: Optional[Path] = field(default=None, repr=False)

    @classmethod
    def from_file(cls, path: Path) -> GrammarDocument:
        """Load a document from YAML, JSON or TOML depending on the suffix."""
        path = Path(path)
        try:
            data = _read_document(path)
        except OSError as exc:
            raise GrammarLoadError(f"cannot read grammar file: {exc}", path=str(path)) from exc
        except (ValueError, yaml.YAMLError) as exc:
            raise GrammarLoadError(f"malformed grammar file: {exc}", path=str(path)) from exc
        if not isinstance(data, dict):
            raise GrammarLoadError("grammar file must contain a mapping", path=str(path))

        try:
            document = cls.from_dict(data)
        except GrammarLoadError as exc:
            raise GrammarLoadError(exc.message, path=str(path), hint=exc.hint) from exc
        document._file_path = path
        if document.name is None:
            document.name = path.stem
        logger.debug("Loaded grammar %r from %s", document.name, path)
        return document

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> GrammarDocument:
        raw_rules = data.get("rules")
        if not isinstance(raw_rules, dict):
            raise GrammarLoadError("'rules' must be a mapping of variable to alternatives")
        rules = {
            _rule_name(name): _normalise_alternatives(name, value)
            for name, value in raw_rules.items()
        }
        raw_cases = data.get("cases") or []
        if not isinstance(raw_cases, list):
            raise GrammarLoadError("'cases' must be a list")
        return cls(
            rules=rules,
            start=str(data["start"]) if data.get("start") else None,
            name=data.get("name"),
            description=data.get("description"),
            separator=data.get("separator"),
            cases=[GrammarCase.from_dict(case) for case in raw_cases if isinstance(case, dict)],
        )

    def validate(self, *, default_start: str = DEFAULT_START) -> List[str]:
        """Return a list of problems; empty when the document builds cleanly."""
        errors: List[str] = []
        if not self.rules:
            errors.append("At least one rule must be defined")
        for name, alternatives in self.rules.items():
            if not alternatives:
                errors.append(f"Rule {name!r} has no alternatives")
            for index, alternative in enumerate(alternatives):
                if not alternative:
                    errors.append(f"Rule {name!r} alternative {index} is empty")
        for index, case in enumerate(self.cases):
            if case.accepted and case.error:
                errors.append(f"Case {index}: an accepted case cannot expect an error")
        if errors:
            return errors
        try:
            self.build(default_start=default_start)
        except CFGPDAError as exc:
            errors.append(exc.message)
        return errors

    def build(
        self, *, validate: bool = True, default_start: str = DEFAULT_START
    ) -> GrammarRegistry:
        """Build the registry; ``default_start`` applies when the document names no start."""
        return GrammarRegistry.from_productions(
            self.rules, start=self.start or default_start, validate=validate
        )

    def split(self, text: str) -> List[str]:
        if self.separator:
            return [part for part in text.split(self.separator) if part]
        return list(text)


def load_grammar(path: Path) -> GrammarRegistry:
    """Read a grammar file and build its registry."""
    return GrammarDocument.from_file(path).build()


def _read_document(path: Path) -> Any:
    suffix = path.suffix.lower()
    if suffix in YAML_SUFFIXES:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    if suffix == ".toml":
        if tomllib is None:
            raise GrammarLoadError("TOML grammars require Python 3.11 or later", path=str(path))
        with path.open("rb") as handle:
            return tomllib.load(handle)
    return json.loads(path.read_text(encoding="utf-8"))


def _rule_name(name: Any) -> str:
    if not isinstance(name, str):
        raise GrammarLoadError(
            f"rule name must be a string, got {type(name).__name__} {name!r}", hint=QUOTE_HINT
        )
    return name


def _normalise_alternatives(name: str, value: Any) -> List[Alternative]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise GrammarLoadError(
            f"alternatives of {name!r} must be a list, got {type(value).__name__}", hint=QUOTE_HINT
        )
    alternatives: List[Alternative] = []
    for item in value:
        if isinstance(item, list):
            alternatives.append([_symbol(name, symbol) for symbol in item])
        else:
            alternatives.append(_symbol(name, item))
    return alternatives


def _symbol(name: str, value: Any) -> str:
    # YAML reads a bare 0211 as the integer 137
    if not isinstance(value, str):
        raise GrammarLoadError(
            f"symbols of {name!r} must be strings, got {type(value).__name__} {value!r}",
            hint=QUOTE_HINT,
        )
    return value


__all__ = ["GrammarCase", "GrammarDocument", "load_grammar"]
