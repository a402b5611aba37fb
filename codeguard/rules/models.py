"""
Rule model for text-pattern security detection.

A rule is an immutable descriptor holding a compiled regular expression and
the metadata needed to turn a match into a finding. Rules are plain data:
they are grouped into named rule sets by category and selected per language
by the rule engine.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum


class Severity(str, Enum):
    """Severity levels for findings."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Ordinal used for comparisons (higher is more severe)."""
        return _SEVERITY_RANK[self]

    def downgrade(self) -> Severity:
        """Return the next lower severity (info stays info)."""
        if self is Severity.ERROR:
            return Severity.WARNING
        return Severity.INFO


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}


class SecurityCategory(str, Enum):
    """Categories of security rules."""

    SECRET_EXPOSURE = "secret-exposure"
    SQL_DANGER = "sql-danger"
    CODE_INJECTION = "code-injection"
    FRAMEWORK_RISK = "framework-risk"
    CONFIG_ERROR = "config-error"


class MatchMode(str, Enum):
    """How many matches a rule collects per line."""

    GLOBAL = "global"
    FIRST = "first"


ANY_LANGUAGE = "*"

FixReplacement = str | Callable[[re.Match[str]], str]


@dataclass(frozen=True)
class FixTemplate:
    """A quick-fix attached to a rule.

    Attributes:
        title: Short action label shown to the user.
        replacement: Literal replacement text, or a callable that computes
            the replacement from the regex match at detection time.
        description: Longer explanation of what the fix does.
    """

    title: str
    replacement: FixReplacement
    description: str = ""

    def materialize(self, match: re.Match[str]) -> str:
        """Produce the concrete replacement text for a match."""
        if callable(self.replacement):
            return self.replacement(match)
        return self.replacement


@dataclass(frozen=True)
class Rule:
    """A detectable security pattern.

    Attributes:
        id: Unique identifier (e.g., "SQL_DELETE_NO_WHERE").
        category: The security category the rule belongs to.
        severity: Severity assigned before file-context adjustment.
        pattern: Compiled regular expression applied line by line.
        message: Human-readable description of the issue.
        languages: Language identifiers the rule applies to ("*" for any).
        enabled: Whether the rule participates in analysis.
        match_mode: Collect every match on a line, or only the first.
        whitelist: Regex strings that suppress a match when they match the
            matched text or its line (case-insensitive).
        fix: Optional quick-fix template.
        tags: Additional classification tags.
        vendor_format: True for rules anchored on a vendor-issued token
            prefix; such matches are exempt from the repeated-character
            placeholder heuristic.
    """

    id: str
    category: SecurityCategory
    severity: Severity
    pattern: re.Pattern[str]
    message: str
    languages: frozenset[str] = frozenset({ANY_LANGUAGE})
    enabled: bool = True
    match_mode: MatchMode = MatchMode.GLOBAL
    whitelist: tuple[str, ...] = ()
    fix: FixTemplate | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    vendor_format: bool = False

    def applies_to(self, language: str) -> bool:
        """Check whether the rule targets the given language."""
        return ANY_LANGUAGE in self.languages or language in self.languages


def make_rule(
    id: str,
    category: SecurityCategory,
    severity: Severity,
    pattern: str,
    message: str,
    *,
    flags: int = 0,
    languages: tuple[str, ...] = (ANY_LANGUAGE,),
    match_mode: MatchMode = MatchMode.GLOBAL,
    whitelist: tuple[str, ...] = (),
    fix: FixTemplate | None = None,
    tags: tuple[str, ...] = (),
    vendor_format: bool = False,
    enabled: bool = True,
) -> Rule:
    """Build a Rule from a pattern string, compiling it once."""
    return Rule(
        id=id,
        category=category,
        severity=severity,
        pattern=re.compile(pattern, flags),
        message=message,
        languages=frozenset(languages),
        enabled=enabled,
        match_mode=match_mode,
        whitelist=tuple(whitelist),
        fix=fix,
        tags=tuple(tags),
        vendor_format=vendor_format,
    )
