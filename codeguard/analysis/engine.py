"""
Rule engine: owns the rule table and runs rules over a buffer.

The engine holds its rules, rule sets and language mapping as instance
state, so independent engines (one per workspace, one per test) never share
a registry.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any

from ..constants import MAX_RULES_PER_ANALYSIS
from ..core.exceptions import RuleExecutionError, RuleRegistrationError, WhitelistPatternError
from ..rules import LANGUAGE_RULE_SETS, RULE_SETS
from ..rules.models import MatchMode, Rule, SecurityCategory, Severity
from .assembler import assemble_finding
from .file_context import classify_path
from .matcher import find_matches
from .models import Finding
from .whitelist import WhitelistFilter

logger = logging.getLogger(__name__)


class RuleEngine:
    """Registry of rules plus the per-buffer execution pipeline."""

    def __init__(
        self,
        rules: Iterable[Rule] | None = None,
        rule_sets: Mapping[str, Iterable[Rule]] | None = None,
        language_rule_sets: Mapping[str, list[str]] | None = None,
        whitelist: WhitelistFilter | None = None,
        max_rules: int = MAX_RULES_PER_ANALYSIS,
    ):
        """Initialize the rule engine.

        Args:
            rules: Rules to register up front (invalid ones are skipped)
            rule_sets: Named rule sets; their rules are registered as well
            language_rule_sets: Language -> names of rule sets unioned into
                that language's candidate list
            whitelist: Whitelist filter (default predicate chain if omitted)
            max_rules: Upper bound on rules applied in one pass
        """
        self._rules: dict[str, Rule] = {}
        self._rule_sets: dict[str, list[str]] = {}
        self.language_rule_sets: dict[str, list[str]] = dict(language_rule_sets or {})
        self.whitelist = whitelist or WhitelistFilter()
        self.max_rules = max_rules

        if rules is not None:
            self.register_rules(rules)
        for name, members in (rule_sets or {}).items():
            self.register_rules(members, rule_set=name)

    @classmethod
    def with_default_rules(cls) -> RuleEngine:
        """Create an engine with every built-in rule set and the default language mapping."""
        return cls(rule_sets=RULE_SETS, language_rule_sets=LANGUAGE_RULE_SETS)

    # =========================================================================
    # Registration
    # =========================================================================

    def _validate(self, rule: Rule) -> None:
        rule_id = getattr(rule, "id", None)
        if not isinstance(rule_id, str) or not rule_id.strip():
            raise RuleRegistrationError("Rule id must be a non-empty string", rule_id=str(rule_id))
        if rule_id in self._rules:
            raise RuleRegistrationError(f"Duplicate rule id: {rule_id}", rule_id=rule_id)
        if not isinstance(rule.pattern, re.Pattern):
            raise RuleRegistrationError(f"Rule {rule_id}: pattern must be a compiled regex", rule_id=rule_id)
        if not isinstance(rule.message, str) or not rule.message.strip():
            raise RuleRegistrationError(f"Rule {rule_id}: message is required", rule_id=rule_id)
        if not isinstance(rule.category, SecurityCategory):
            raise RuleRegistrationError(f"Rule {rule_id}: unknown category {rule.category!r}", rule_id=rule_id)
        if not isinstance(rule.severity, Severity):
            raise RuleRegistrationError(f"Rule {rule_id}: invalid severity {rule.severity!r}", rule_id=rule_id)
        if not isinstance(rule.match_mode, MatchMode):
            raise RuleRegistrationError(f"Rule {rule_id}: invalid match mode {rule.match_mode!r}", rule_id=rule_id)
        languages = rule.languages
        if (
            isinstance(languages, str)
            or not isinstance(languages, (frozenset, set, tuple, list))
            or not languages
            or not all(isinstance(lang, str) and lang for lang in languages)
        ):
            raise RuleRegistrationError(
                f"Rule {rule_id}: languages must be a non-empty collection of strings", rule_id=rule_id
            )

    def register_rule(self, rule: Rule, rule_set: str | None = None) -> None:
        """Register a single rule.

        Args:
            rule: The rule to add
            rule_set: Optional rule-set name the rule belongs to

        Raises:
            RuleRegistrationError: If the rule is malformed or its id is taken.
        """
        self._validate(rule)
        self._rules[rule.id] = rule
        if rule_set is not None:
            self._rule_sets.setdefault(rule_set, []).append(rule.id)

    def register_rules(self, rules: Iterable[Rule], rule_set: str | None = None) -> int:
        """Register a batch of rules, skipping the ones that fail validation.

        Returns:
            Number of rules registered.
        """
        registered = 0
        for rule in rules:
            try:
                self.register_rule(rule, rule_set=rule_set)
                registered += 1
            except RuleRegistrationError as e:
                logger.warning(f"Skipping rule {e.rule_id}: {e}")
        if rule_set is not None:
            logger.debug(f"Registered {registered} rules in set {rule_set}")
        return registered

    def unregister_rule(self, rule_id: str) -> bool:
        """Remove a rule. Returns False if it was not registered."""
        if self._rules.pop(rule_id, None) is None:
            return False
        for members in self._rule_sets.values():
            if rule_id in members:
                members.remove(rule_id)
        return True

    def clear_rules(self) -> None:
        self._rules.clear()
        self._rule_sets.clear()

    # =========================================================================
    # Queries
    # =========================================================================

    def get_rule(self, rule_id: str) -> Rule | None:
        return self._rules.get(rule_id)

    def get_all_rules(self) -> list[Rule]:
        return list(self._rules.values())

    def get_enabled_rules(self) -> list[Rule]:
        return [rule for rule in self._rules.values() if rule.enabled]

    def get_rules_by_category(self, category: SecurityCategory) -> list[Rule]:
        return [rule for rule in self._rules.values() if rule.category is category]

    def get_rule_set_names(self) -> list[str]:
        return list(self._rule_sets)

    def get_rules_for_language(self, language: str) -> list[Rule]:
        """Select the candidate rules for a language.

        Enabled rules that declare the language (or "*") come first, then the
        enabled rules of every rule set mapped to the language. The result is
        de-duplicated by id, keeping the first occurrence.
        """
        candidates = [rule for rule in self._rules.values() if rule.enabled and rule.applies_to(language)]
        for set_name in self.language_rule_sets.get(language, []):
            for rule_id in self._rule_sets.get(set_name, []):
                rule = self._rules.get(rule_id)
                if rule is not None and rule.enabled:
                    candidates.append(rule)

        seen: set[str] = set()
        unique: list[Rule] = []
        for rule in candidates:
            if rule.id not in seen:
                seen.add(rule.id)
                unique.append(rule)
        return unique

    def get_statistics(self) -> dict[str, Any]:
        """Get rule table statistics.

        Returns:
            Dictionary with total and enabled counts, plus per-category and
            per-severity breakdowns
        """
        rules = list(self._rules.values())
        return {
            "total": len(rules),
            "enabled": sum(1 for rule in rules if rule.enabled),
            "by_category": dict(Counter(rule.category.value for rule in rules)),
            "by_severity": dict(Counter(rule.severity.value for rule in rules)),
            "rule_sets": {name: len(members) for name, members in self._rule_sets.items()},
        }

    # =========================================================================
    # Mutation
    # =========================================================================

    def _replace_rule(self, rule_id: str, **changes: Any) -> bool:
        rule = self._rules.get(rule_id)
        if rule is None:
            return False
        self._rules[rule_id] = replace(rule, **changes)
        return True

    def set_rule_enabled(self, rule_id: str, enabled: bool) -> bool:
        """Enable or disable a rule. Returns False for an unknown id."""
        return self._replace_rule(rule_id, enabled=enabled)

    def set_rule_severity(self, rule_id: str, severity: Severity) -> bool:
        """Override a rule's base severity. Returns False for an unknown id."""
        return self._replace_rule(rule_id, severity=Severity(severity))

    # =========================================================================
    # Execution
    # =========================================================================

    def _execute_rule(self, rule: Rule, text: str, language: str, path: str | None) -> list[Finding]:
        context = classify_path(path)
        findings = []
        try:
            for raw in find_matches(rule, text):
                if self.whitelist.is_whitelisted(raw.line_text, raw.text, rule, context):
                    continue
                findings.append(assemble_finding(rule, raw, language, context))
        except WhitelistPatternError:
            raise
        except Exception as e:
            raise RuleExecutionError(f"Rule {rule.id} failed: {e}", rule_id=rule.id) from e
        return findings

    def execute_rules(self, text: str, language: str, path: str | None = None) -> list[Finding]:
        """Run every candidate rule for ``language`` over ``text``.

        A rule that fails is logged and skipped for this pass; the other
        rules still run. Findings are returned unsorted.

        Args:
            text: Buffer content
            language: Language identifier of the buffer
            path: Optional path, used only to classify the file context

        Returns:
            Findings that survived whitelisting, after context adjustment.
        """
        rules = self.get_rules_for_language(language)
        if len(rules) > self.max_rules:
            logger.warning(f"{len(rules)} rules apply to {language}; only the first {self.max_rules} run")
            rules = rules[: self.max_rules]

        findings: list[Finding] = []
        for rule in rules:
            try:
                findings.extend(self._execute_rule(rule, text, language, path))
            except (WhitelistPatternError, RuleExecutionError) as e:
                logger.warning(
                    f"Skipping rule {rule.id}: {e}",
                    extra={"event": "rule_failed", "rule_id": rule.id, "language": language, "error": str(e)},
                )
        return findings

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules
