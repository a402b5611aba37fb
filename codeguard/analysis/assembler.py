"""Turns surviving raw matches into findings."""

from __future__ import annotations

from ..constants import BASE_CONFIDENCE
from ..rules.models import Rule, SecurityCategory
from .file_context import FileContext, adjust_for_context
from .matcher import RawMatch
from .models import (
    EffortLevel,
    Finding,
    FindingFix,
    FindingLocation,
    FindingMetadata,
    ImpactLevel,
    make_finding_id,
)

CATEGORY_IMPACT = {
    SecurityCategory.SECRET_EXPOSURE: ImpactLevel.CRITICAL,
    SecurityCategory.SQL_DANGER: ImpactLevel.CRITICAL,
    SecurityCategory.CODE_INJECTION: ImpactLevel.HIGH,
    SecurityCategory.FRAMEWORK_RISK: ImpactLevel.MEDIUM,
    SecurityCategory.CONFIG_ERROR: ImpactLevel.MEDIUM,
}


def impact_for(category: SecurityCategory) -> ImpactLevel:
    """Map a rule category to its impact level."""
    return CATEGORY_IMPACT.get(category, ImpactLevel.LOW)


def build_fix(rule: Rule, raw: RawMatch) -> FindingFix | None:
    """Materialize a rule's fix template for a concrete match."""
    if rule.fix is None:
        return None
    return FindingFix(
        title=rule.fix.title,
        replacement=rule.fix.materialize(raw.match),
        description=rule.fix.description,
    )


def assemble_finding(rule: Rule, raw: RawMatch, language: str, context: FileContext) -> Finding:
    """Build a finding from a rule match, applying file-context adjustment."""
    adjustment = adjust_for_context(
        severity=rule.severity,
        confidence=BASE_CONFIDENCE,
        message=rule.message,
        tags=[rule.category.value, language, *rule.tags],
        category=rule.category,
        context=context,
    )
    return Finding(
        id=make_finding_id(rule.id, raw.line, raw.column),
        rule_id=rule.id,
        category=rule.category,
        severity=adjustment.severity,
        message=adjustment.message,
        location=FindingLocation(
            line=raw.line,
            column=raw.column,
            length=raw.length,
            start_offset=raw.start_offset,
            end_offset=raw.end_offset,
        ),
        fix=build_fix(rule, raw),
        metadata=FindingMetadata(
            rule_id=rule.id,
            language=language,
            confidence=adjustment.confidence,
            impact=impact_for(rule.category),
            effort=EffortLevel.EASY,
            tags=tuple(adjustment.tags),
        ),
    )
