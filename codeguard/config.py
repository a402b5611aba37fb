"""Configuration models for CodeGuard analysis."""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Any

import toml
from pydantic import BaseModel, Field, ValidationError

from .constants import (
    DEFAULT_ANALYSIS_TIMEOUT,
    DEFAULT_EXCLUDED_FOLDERS,
    INCREMENTAL_CHANGE_THRESHOLD,
    INCREMENTAL_CONTEXT_LINES,
    MAX_BUFFER_SIZE,
    RESULT_CACHE_MAX_ENTRIES,
    RESULT_CACHE_TTL_SECONDS,
    SUPPORTED_EXTENSIONS,
    SUPPORTED_LANGUAGES,
)
from .core.exceptions import InvalidConfigError
from .rules.models import Severity

logger = logging.getLogger(__name__)

ENV_PREFIX = "CODEGUARD_"

# Environment variable suffix -> settings field
_ENV_FIELDS = {
    "ENABLED": "enabled",
    "MAX_FILE_SIZE": "max_file_size",
    "ANALYSIS_TIMEOUT": "analysis_timeout",
    "ENABLE_TIMEOUT": "enable_timeout",
    "CACHE_TTL": "cache_ttl_seconds",
    "CACHE_MAX_ENTRIES": "cache_max_entries",
    "INCREMENTAL_THRESHOLD": "incremental_threshold",
    "CONTEXT_LINES": "context_lines",
    "SUPPORTED_LANGUAGES": "supported_languages",
    "EXCLUDED_FOLDERS": "excluded_folders",
    "DISABLED_RULES": "disabled_rules",
}

_LIST_FIELDS = {"supported_languages", "excluded_folders", "disabled_rules"}

# File names that carry no useful extension
_SPECIAL_FILENAMES = {
    "dockerfile": "dockerfile",
    "containerfile": "dockerfile",
    "makefile": "plaintext",
}


class AnalysisSettings(BaseModel):
    """Settings for an analysis session."""

    enabled: bool = True
    max_file_size: int = Field(default=MAX_BUFFER_SIZE, gt=0, description="Byte ceiling for a buffer")
    analysis_timeout: float = Field(
        default=DEFAULT_ANALYSIS_TIMEOUT, gt=0, description="Seconds allowed for a full pass"
    )
    enable_timeout: bool = True
    cache_ttl_seconds: float = Field(default=RESULT_CACHE_TTL_SECONDS, gt=0)
    cache_max_entries: int = Field(default=RESULT_CACHE_MAX_ENTRIES, gt=0)
    incremental_threshold: float = Field(
        default=INCREMENTAL_CHANGE_THRESHOLD,
        gt=0,
        le=1,
        description="Changed-character ratio that forces a full re-scan",
    )
    context_lines: int = Field(default=INCREMENTAL_CONTEXT_LINES, ge=0)
    supported_languages: list[str] = Field(
        default_factory=lambda: list(SUPPORTED_LANGUAGES),
        description="Languages analyzed; an empty list accepts every language",
    )
    excluded_folders: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDED_FOLDERS))
    severity_levels: dict[Severity, bool] = Field(
        default_factory=lambda: {severity: True for severity in Severity}
    )
    disabled_rules: list[str] = Field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "AnalysisSettings":
        """Build settings from a plain mapping, raising InvalidConfigError."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid analysis settings: {e}") from e

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "AnalysisSettings":
        """Load settings from CODEGUARD_* environment variables.

        List values are comma separated. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        for suffix, field_name in _ENV_FIELDS.items():
            raw = env.get(f"{ENV_PREFIX}{suffix}")
            if raw is None:
                continue
            if field_name in _LIST_FIELDS:
                data[field_name] = [item.strip() for item in raw.split(",") if item.strip()]
            else:
                data[field_name] = raw.strip()
        return cls.from_mapping(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "AnalysisSettings":
        """Load settings from ``codeguard.toml`` or the ``[tool.codeguard]`` table of ``pyproject.toml``."""
        config_path = Path(path)
        if not config_path.exists():
            raise InvalidConfigError(f"Config file not found: {config_path}")

        try:
            document = toml.loads(config_path.read_text(encoding="utf-8"))
        except toml.TomlDecodeError as e:
            raise InvalidConfigError(f"Malformed config file {config_path}: {e}") from e

        if config_path.name == "pyproject.toml":
            document = document.get("tool", {}).get("codeguard", {})
        elif "codeguard" in document and isinstance(document["codeguard"], dict):
            document = document["codeguard"]

        logger.debug(f"Loaded settings from {config_path}")
        return cls.from_mapping(document)

    def is_language_supported(self, language: str) -> bool:
        return not self.supported_languages or language in self.supported_languages

    def is_path_excluded(self, path: str | None) -> bool:
        """Check whether any path segment is an excluded folder."""
        if not path:
            return False
        parts = PurePosixPath(path.replace("\\", "/")).parts
        return any(part in self.excluded_folders for part in parts[:-1])

    def severity_enabled(self, severity: Severity) -> bool:
        return self.severity_levels.get(severity, True)


def language_from_path(path: str) -> str | None:
    """Detect a language identifier from a file path.

    Returns:
        The language identifier, or None when the extension is unknown.
    """
    name = PurePosixPath(path.replace("\\", "/")).name.lower()
    if name in _SPECIAL_FILENAMES:
        return _SPECIAL_FILENAMES[name]
    if name == ".env" or name.startswith(".env."):
        return "dotenv"

    suffix = PurePosixPath(name).suffix
    for language, extensions in SUPPORTED_EXTENSIONS.items():
        if suffix in extensions:
            return language
    return None
