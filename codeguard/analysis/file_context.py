"""
File context classification and context-aware severity adjustment.

The same raw match means different things in production code, a unit test,
a README or an example project. This module infers the role of a buffer
from its path alone and softens findings accordingly.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import PurePosixPath

from ..constants import TEST_SECRET_MIN_LENGTH
from ..rules.models import SecurityCategory, Severity

logger = logging.getLogger(__name__)


class ContextKind(str, Enum):
    """Buffer roles that influence how findings are reported."""

    DOCUMENTATION = "documentation"
    EXAMPLE = "example"
    TEST = "test"
    CONFIG = "config"


# =============================================================================
# Path patterns (matched against the lowercased, slash-normalized path)
# =============================================================================

_TEST_PATTERNS = [
    re.compile(r"(?:^|/)(?:test|tests|__tests__|__mocks__|spec|specs|e2e|cypress|fixtures)/"),
    re.compile(r"\.(?:test|spec|e2e|cy)\.[a-z0-9]+$"),
    re.compile(r"(?:^|/)test_[^/]+\.py$"),
    re.compile(r"_(?:test|spec)\.[a-z0-9]+$"),
    re.compile(r"(?:^|/)conftest\.py$"),
]

_DOCUMENTATION_PATTERNS = [
    re.compile(r"(?:^|/)(?:readme|changelog|changes|history|license|licence|contributing|authors|code_of_conduct)(?:\.[a-z0-9]+)?$"),
    re.compile(r"\.(?:md|markdown|mdx|rst|adoc|asciidoc)$"),
    re.compile(r"(?:^|/)(?:docs?|documentation|wiki|guides?)/"),
    re.compile(r"(?:^|/)(?:swagger|openapi)\.(?:ya?ml|json)$"),
]

_EXAMPLE_PATTERNS = [
    re.compile(r"(?:^|/)(?:examples?|demos?|samples?|tutorials?|templates?|playground|sandbox)/"),
    re.compile(r"(?:^|/)[^/]*(?:example|demo|sample|tutorial|template)[^/]*$"),
]

_CONFIG_PATTERNS = [
    re.compile(r"\.(?:json|jsonc|ya?ml|toml|ini|cfg|conf|properties|env)$"),
    re.compile(r"(?:^|/)\.env(?:\.[^/]+)?$"),
    re.compile(r"(?:^|/)(?:dockerfile|containerfile)(?:\.[^/]+)?$"),
    re.compile(r"(?:^|/)docker-compose[^/]*$"),
    re.compile(r"(?:^|/)\.[a-z0-9_-]+rc(?:\.[a-z]+)?$"),
    re.compile(r"(?:^|/)[^/]+\.config\.[a-z]+$"),
    re.compile(r"(?:^|/)(?:config|configs|configuration|settings|\.github|\.circleci)/"),
]

# =============================================================================
# Context whitelist patterns
# =============================================================================

# Markers must start a word: "sk-testkey" is a fixture, "sk-projtest1a2b" is not
_TEST_VALUE_MARKERS = re.compile(r"(?<![a-z])(?:test|mock|fake|dummy|stub|fixture)", re.IGNORECASE)

_DOC_INDICATORS = [
    re.compile(r"\bexample\b", re.IGNORECASE),
    re.compile(r"\bsample\b", re.IGNORECASE),
    re.compile(r"\byour\s+(?:\w+\s+)?(?:key|token|secret|password)\s+here\b", re.IGNORECASE),
    re.compile(r"\bTODO\b", re.IGNORECASE),
]

_CONFIG_TEMPLATES = [
    re.compile(r"\$\{[^}]+\}"),
    re.compile(r"\{\{[^}]+\}\}"),
    re.compile(r"[\"']\[[^\]\"']+\][\"']"),
    re.compile(r"[\"']<[^>\"']+>[\"']"),
    re.compile(r"replace[_-]?me", re.IGNORECASE),
    re.compile(r"change[_-]?me", re.IGNORECASE),
]

_MESSAGE_PREFIXES = {
    ContextKind.TEST: "Found in test file: ",
    ContextKind.DOCUMENTATION: "Found in documentation: ",
    ContextKind.EXAMPLE: "Found in example file: ",
    ContextKind.CONFIG: "Found in config file: ",
}

_CONTEXT_TAGS = {
    ContextKind.TEST: "test-file",
    ContextKind.DOCUMENTATION: "documentation",
    ContextKind.EXAMPLE: "example",
    ContextKind.CONFIG: "config",
}

# (confidence penalty, floor)
_CONFIDENCE_RULES = {
    ContextKind.TEST: (0.4, 0.3),
    ContextKind.DOCUMENTATION: (0.6, 0.2),
    ContextKind.EXAMPLE: (0.6, 0.2),
    ContextKind.CONFIG: (0.2, 0.5),
}


@dataclass(frozen=True)
class FileContext:
    """Role of the analyzed buffer, derived from its path only.

    Attributes:
        is_test: Path follows a test directory or naming convention.
        is_documentation: README/CHANGELOG/LICENSE, doc extensions or doc directories.
        is_example: Example, demo, sample, tutorial or template naming.
        is_config: Config extensions, well-known config files or config directories.
        path: The original path, if one was given.
        extension: Lowercased extension without the dot ("" when unknown).
    """

    is_test: bool = False
    is_documentation: bool = False
    is_example: bool = False
    is_config: bool = False
    path: str | None = None
    extension: str = ""

    @property
    def kinds(self) -> list[ContextKind]:
        """All applicable contexts, strongest first."""
        flags = [
            (ContextKind.DOCUMENTATION, self.is_documentation),
            (ContextKind.EXAMPLE, self.is_example),
            (ContextKind.TEST, self.is_test),
            (ContextKind.CONFIG, self.is_config),
        ]
        return [kind for kind, enabled in flags if enabled]

    @property
    def primary(self) -> ContextKind | None:
        """The context that drives severity, confidence and message."""
        kinds = self.kinds
        return kinds[0] if kinds else None


NO_CONTEXT = FileContext()


@lru_cache(maxsize=512)
def classify_path(path: str | None) -> FileContext:
    """Classify a buffer from its path.

    Args:
        path: Opaque path string (may use either slash style), or None.

    Returns:
        FileContext with every matching predicate set. An absent path
        yields a context with all flags False.
    """
    if not path:
        return NO_CONTEXT

    normalized = path.replace("\\", "/").lower()
    suffix = PurePosixPath(normalized).suffix

    context = FileContext(
        is_test=any(p.search(normalized) for p in _TEST_PATTERNS),
        is_documentation=any(p.search(normalized) for p in _DOCUMENTATION_PATTERNS),
        is_example=any(p.search(normalized) for p in _EXAMPLE_PATTERNS),
        is_config=any(p.search(normalized) for p in _CONFIG_PATTERNS),
        path=path,
        extension=suffix.lstrip("."),
    )
    logger.debug(f"Classified {path} as {[k.value for k in context.kinds] or 'source'}")
    return context


def is_context_whitelisted(
    category: SecurityCategory, match_text: str, line: str, context: FileContext
) -> bool:
    """Check whether the file context alone suppresses a match.

    Documentation+SQL, example+secret and example+SQL are suppressed
    outright. Secrets in test files are suppressed when short or when
    they carry a fixture marker. Secrets on documentation lines that look
    like worked examples, and templated secrets in config files, are
    suppressed as well.
    """
    if category is SecurityCategory.SQL_DANGER and (context.is_documentation or context.is_example):
        return True

    if category is not SecurityCategory.SECRET_EXPOSURE:
        return False

    if context.is_example:
        return True

    if context.is_test:
        if len(match_text) < TEST_SECRET_MIN_LENGTH or _TEST_VALUE_MARKERS.search(match_text):
            return True

    if context.is_documentation and any(p.search(line) for p in _DOC_INDICATORS):
        return True

    if context.is_config and any(p.search(line) for p in _CONFIG_TEMPLATES):
        return True

    return False


@dataclass(frozen=True)
class Adjustment:
    """Result of applying file context to a raw finding."""

    severity: Severity
    confidence: float
    message: str
    tags: list[str] = field(default_factory=list)


def adjust_severity(severity: Severity, category: SecurityCategory, kind: ContextKind | None) -> Severity:
    """Soften a severity for the given context."""
    if kind is ContextKind.TEST:
        return severity.downgrade()
    if kind in (ContextKind.DOCUMENTATION, ContextKind.EXAMPLE):
        return Severity.INFO
    if kind is ContextKind.CONFIG and category is SecurityCategory.SECRET_EXPOSURE:
        # Only error drops a step; templates that slipped past the whitelist
        if severity is Severity.ERROR:
            return Severity.WARNING
    return severity


def adjust_confidence(confidence: float, kind: ContextKind | None) -> float:
    """Lower a confidence score for the given context, respecting its floor."""
    if kind is None:
        return confidence
    penalty, floor = _CONFIDENCE_RULES[kind]
    return round(max(floor, confidence - penalty), 4)


def adjust_for_context(
    severity: Severity,
    confidence: float,
    message: str,
    tags: list[str],
    category: SecurityCategory,
    context: FileContext,
) -> Adjustment:
    """Rewrite severity, confidence, message and tags based on file context.

    The strongest applicable context (documentation > example > test >
    config) decides severity, confidence and message prefix. Tags record
    every applicable context plus an ``ext-<extension>`` tag.
    """
    kind = context.primary
    new_tags = list(tags)
    for applicable in context.kinds:
        tag = _CONTEXT_TAGS[applicable]
        if tag not in new_tags:
            new_tags.append(tag)
    if context.extension:
        new_tags.append(f"ext-{context.extension}")

    if kind is None:
        return Adjustment(severity=severity, confidence=confidence, message=message, tags=new_tags)

    return Adjustment(
        severity=adjust_severity(severity, category, kind),
        confidence=adjust_confidence(confidence, kind),
        message=_MESSAGE_PREFIXES[kind] + message,
        tags=new_tags,
    )
