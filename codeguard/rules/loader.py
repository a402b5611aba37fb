"""
Load custom rules from TOML or JSON files.

TOML files hold an array of ``[[rules]]`` tables; JSON files hold a list of
objects (or an object with a ``rules`` list). Each record needs ``id``,
``category``, ``severity``, ``pattern`` and ``message``.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

import toml

from ..core.exceptions import RuleLoadError
from .models import ANY_LANGUAGE, FixTemplate, MatchMode, Rule, SecurityCategory, Severity

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("id", "category", "severity", "pattern", "message")


def _read_records(path: Path) -> list[Any]:
    content = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".toml":
            data: Any = toml.loads(content)
        else:
            data = json.loads(content)
    except (toml.TomlDecodeError, json.JSONDecodeError) as e:
        raise RuleLoadError(f"Malformed rules file {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("rules")
    if not isinstance(data, list) or not data:
        raise RuleLoadError(f"Rules file {path} must contain a non-empty list of rules")
    return data


def _flags(record: dict[str, Any]) -> int:
    flags = 0
    if record.get("ignore_case", False):
        flags |= re.IGNORECASE
    if record.get("multiline", False):
        flags |= re.MULTILINE
    return flags


def rule_from_record(record: dict[str, Any]) -> Rule:
    """Build a Rule from a plain mapping.

    Raises:
        RuleLoadError: If a required key is missing or a value is invalid.
    """
    if not isinstance(record, dict):
        raise RuleLoadError("Each rule must be a table/object")
    for key in REQUIRED_KEYS:
        if key not in record:
            raise RuleLoadError(f"Rule missing key: {key}")

    rule_id = str(record["id"])
    try:
        category = SecurityCategory(record["category"])
        severity = Severity(str(record["severity"]).lower())
        match_mode = MatchMode(record.get("match_mode", MatchMode.GLOBAL.value))
    except ValueError as e:
        raise RuleLoadError(f"Rule {rule_id}: {e}") from e

    try:
        pattern = re.compile(str(record["pattern"]), _flags(record))
    except re.error as e:
        raise RuleLoadError(f"Rule {rule_id}: invalid pattern: {e}") from e

    languages = record.get("languages", [ANY_LANGUAGE])
    if not isinstance(languages, list) or not languages:
        raise RuleLoadError(f"Rule {rule_id}: languages must be a non-empty list")

    fix = None
    if "fix" in record:
        fix_data = record["fix"]
        if not isinstance(fix_data, dict):
            raise RuleLoadError(f"Rule {rule_id}: fix must be a table/object")
        fix = FixTemplate(
            title=str(fix_data.get("title", "Apply fix")),
            replacement=str(fix_data.get("replacement", "")),
            description=str(fix_data.get("description", "")),
        )

    return Rule(
        id=rule_id,
        category=category,
        severity=severity,
        pattern=pattern,
        message=str(record["message"]),
        languages=frozenset(str(lang) for lang in languages),
        enabled=bool(record.get("enabled", True)),
        match_mode=match_mode,
        whitelist=tuple(str(w) for w in record.get("whitelist", [])),
        fix=fix,
        tags=tuple(str(t) for t in record.get("tags", [])),
        vendor_format=bool(record.get("vendor_format", False)),
    )


def load_rules_file(path: str | Path) -> list[Rule]:
    """Load rules from a TOML or JSON file.

    Args:
        path: Path to the rules file.

    Returns:
        Parsed rules, in file order.

    Raises:
        RuleLoadError: If the file is missing, malformed, or a rule is invalid.
    """
    rules_path = Path(path)
    if not rules_path.exists():
        raise RuleLoadError(f"Rules file not found: {rules_path}")

    rules = [rule_from_record(record) for record in _read_records(rules_path)]
    logger.info(f"Loaded {len(rules)} custom rules from {rules_path}")
    return rules
