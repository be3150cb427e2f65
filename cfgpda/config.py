"""Workspace configuration support for cfgpda."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    tomllib = None  # type: ignore

from .errors import CFGPDAError
from .evaluator import DEFAULT_MAX_DEPTH
from .grammar import DEFAULT_START

CONFIG_CANDIDATES = ("cfgpda.toml", ".cfgpdarc")
LOG_LEVEL_ENV = "CFGPDA_LOG_LEVEL"


class ConfigError(CFGPDAError):
    """Raised when a configuration file cannot be read or holds bad values."""

    code = "CONFIG_ERROR"


@dataclass(frozen=True)
class RecognizerConfig:
    """Limits and switches applied to one recognition run."""

    start: str = DEFAULT_START
    # Nesting ceiling while resolving a single symbol
    max_depth: int = DEFAULT_MAX_DEPTH
    # Consecutive non-consuming pops allowed for a single symbol
    max_epsilon_steps: int = 10000
    record_trace: bool = True

    def __post_init__(self) -> None:
        if self.max_depth < 1 or self.max_epsilon_steps < 1:
            raise ConfigError(
                "Recognizer limits must be positive integers",
                hint="Set max_depth and max_epsilon_steps to 1 or more.",
            )

    def with_overrides(self, **overrides: Any) -> "RecognizerConfig":
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)


@dataclass
class WorkspaceConfig:
    """Resolved workspace configuration."""

    root: Path
    recognizer: RecognizerConfig = field(default_factory=RecognizerConfig)
    grammars: Dict[str, Path] = field(default_factory=dict)
    log_level: Optional[str] = None
    source: Optional[Path] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    def grammar_path(self, name_or_path: str) -> Path:
        """Map a configured grammar name to its file, else treat it as a path."""
        if name_or_path in self.grammars:
            return self.grammars[name_or_path]
        path = Path(name_or_path)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path


def _read_json_config(path: Path) -> Dict[str, Any]:
    content = path.read_text(encoding="utf-8")
    return json.loads(content)


def _read_toml_config(path: Path) -> Dict[str, Any]:
    if tomllib is None:
        raise ConfigError("TOML parsing requires Python 3.11 or later.")
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _parse_recognizer(data: Dict[str, Any]) -> RecognizerConfig:
    section = data.get("recognizer") or {}
    if not isinstance(section, dict):
        raise ConfigError("[recognizer] must be a table")
    defaults = RecognizerConfig()
    try:
        config = RecognizerConfig(
            start=str(section.get("start") or defaults.start),
            max_depth=int(section.get("max_depth", defaults.max_depth)),
            max_epsilon_steps=int(section.get("max_epsilon_steps", defaults.max_epsilon_steps)),
            record_trace=bool(section.get("record_trace", defaults.record_trace)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid [recognizer] value: {exc}") from exc
    return config


def _parse_grammars(data: Dict[str, Any], root: Path) -> Dict[str, Path]:
    section = data.get("grammars") or {}
    grammars: Dict[str, Path] = {}
    for name, raw in section.items():
        path = Path(str(raw))
        if not path.is_absolute():
            path = (root / path).resolve()
        grammars[str(name)] = path
    return grammars


def locate_config_file(root: Path, explicit: Optional[Path] = None) -> Optional[Path]:
    if explicit is not None:
        return explicit if explicit.exists() else None
    for candidate in CONFIG_CANDIDATES:
        path = root / candidate
        if path.exists():
            return path
    return None


def load_workspace_config(root: Path, explicit: Optional[Path] = None) -> WorkspaceConfig:
    root = root.resolve()
    config_path = locate_config_file(root, explicit)
    if config_path is None:
        if explicit is not None:
            raise ConfigError(f"Configuration file not found: {explicit}")
        return WorkspaceConfig(root=root, log_level=os.getenv(LOG_LEVEL_ENV))

    try:
        if config_path.suffix == ".toml":
            data = _read_toml_config(config_path)
        else:
            data = _read_json_config(config_path)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Could not read {config_path}: {exc}") from exc

    log_section = data.get("logging") or {}
    log_level = os.getenv(LOG_LEVEL_ENV) or log_section.get("level")

    return WorkspaceConfig(
        root=root,
        recognizer=_parse_recognizer(data),
        grammars=_parse_grammars(data, root),
        log_level=str(log_level).lower() if log_level else None,
        source=config_path,
        raw=data,
    )


__all__ = [
    "ConfigError",
    "RecognizerConfig",
    "WorkspaceConfig",
    "locate_config_file",
    "load_workspace_config",
    "LOG_LEVEL_ENV",
]
