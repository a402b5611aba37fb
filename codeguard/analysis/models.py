"""Pydantic models for analysis findings.

This module defines the data models used to represent security findings
produced by the rule engine and the edits consumed by incremental analysis.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..rules.models import SecurityCategory, Severity


class ImpactLevel(str, Enum):
    """How bad it is if the finding is real."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EffortLevel(str, Enum):
    """How much work the fix takes."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class FindingLocation(BaseModel):
    """Where a finding sits in the buffer.

    Attributes:
        line: 0-based line index.
        column: 0-based column within the line.
        length: Length of the matched text.
        start_offset: Absolute offset of the match start.
        end_offset: Absolute offset just past the match.
    """

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=0)
    column: int = Field(ge=0)
    length: int = Field(ge=0)
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)


class FindingFix(BaseModel):
    """A materialized quick-fix."""

    model_config = ConfigDict(frozen=True)

    title: str
    replacement: str
    description: str = ""


class FindingMetadata(BaseModel):
    """Scoring and classification data for a finding.

    Attributes:
        rule_id: Identifier of the rule that produced the finding.
        language: Language identifier of the analyzed buffer.
        confidence: Confidence in [0, 1] after file-context adjustment.
        impact: Impact level derived from the rule category.
        effort: Estimated effort to apply the fix.
        tags: Category, language, file-context and extension tags.
    """

    model_config = ConfigDict(frozen=True)

    rule_id: str
    language: str
    confidence: float = Field(ge=0.0, le=1.0)
    impact: ImpactLevel
    effort: EffortLevel = EffortLevel.EASY
    tags: tuple[str, ...] = ()


class Finding(BaseModel):
    """A reported potential security issue.

    Findings are immutable. Each analysis pass creates new findings that
    supersede the previous pass for the same buffer.

    Attributes:
        id: ``<rule_id>_<line>_<column>``, stable for a given buffer state.
        rule_id: Identifier of the rule that matched.
        category: Security category of the rule.
        severity: Severity after file-context adjustment.
        message: Message after file-context adjustment.
        location: Position of the match in the buffer.
        fix: Optional materialized quick-fix.
        metadata: Confidence, impact, effort and tags.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    rule_id: str
    category: SecurityCategory
    severity: Severity
    message: str
    location: FindingLocation
    fix: FindingFix | None = None
    metadata: FindingMetadata

    @property
    def dedup_key(self) -> tuple[str, int, int, str]:
        """Composite key used to de-duplicate merged result sets."""
        return (self.rule_id, self.location.line, self.location.column, self.message)

    def relocated(self, line_delta: int = 0, offset_delta: int = 0) -> Finding:
        """Return a copy moved by ``line_delta`` lines and ``offset_delta`` characters."""
        line = self.location.line + line_delta
        location = self.location.model_copy(
            update={
                "line": line,
                "start_offset": self.location.start_offset + offset_delta,
                "end_offset": self.location.end_offset + offset_delta,
            }
        )
        return self.model_copy(
            update={
                "id": make_finding_id(self.rule_id, line, self.location.column),
                "location": location,
            }
        )


class TextEdit(BaseModel):
    """A single replacement applied to a buffer.

    Positions are 0-based and refer to the buffer before the edit.

    Attributes:
        range_length: Number of characters the edit removed, when the
            editor reports it. Otherwise it is estimated from the range.
    """

    start_line: int = Field(ge=0)
    start_col: int = Field(ge=0)
    end_line: int = Field(ge=0)
    end_col: int = Field(ge=0)
    replacement_text: str = ""
    range_length: int | None = Field(default=None, ge=0)

    @property
    def inserted_line_count(self) -> int:
        return self.replacement_text.count("\n") + 1

    @property
    def line_delta(self) -> int:
        """Net number of lines the edit adds (negative when it removes lines)."""
        return self.inserted_line_count - 1 - (self.end_line - self.start_line)

    def removed_length(self) -> int:
        if self.range_length is not None:
            return self.range_length
        if self.start_line == self.end_line:
            return max(self.end_col - self.start_col, 0)
        # Lower bound: the removed line breaks plus the tail of the last line
        return (self.end_line - self.start_line) + self.end_col

    def changed_length(self) -> int:
        """Characters touched by the edit, inserted plus removed."""
        return len(self.replacement_text) + self.removed_length()


def make_finding_id(rule_id: str, line: int, column: int) -> str:
    """Build the stable finding identifier."""
    return f"{rule_id}_{line}_{column}"


def sort_for_display(findings: list[Finding]) -> list[Finding]:
    """Order findings by line, then column."""
    return sorted(findings, key=lambda f: (f.location.line, f.location.column))
