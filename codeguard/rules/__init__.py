"""
Rule model, built-in rule sets and the language to rule-set mapping.

Rule sets are plain data: a name mapped to a list of rules. The language
mapping names extra rule sets that are unioned into the candidate list for a
language on top of the rules that declare the language themselves.
"""

from ..constants import SCRIPT_LANGUAGES
from .definitions import (
    CODE_INJECTION_RULES,
    CONFIG_RULES,
    FRAMEWORK_RULES,
    PYTHON_RUNTIME_RULES,
    SECRET_RULES,
    SERVER_RUNTIME_RULES,
    SQL_RULES,
)
from .loader import load_rules_file
from .models import (
    ANY_LANGUAGE,
    FixTemplate,
    MatchMode,
    Rule,
    SecurityCategory,
    Severity,
    make_rule,
)

SERVER_RUNTIME = "server-runtime"
PYTHON_RUNTIME = "python-runtime"

RULE_SETS: dict[str, list[Rule]] = {
    SecurityCategory.SECRET_EXPOSURE.value: SECRET_RULES,
    SecurityCategory.SQL_DANGER.value: SQL_RULES,
    SecurityCategory.CODE_INJECTION.value: CODE_INJECTION_RULES,
    SecurityCategory.FRAMEWORK_RISK.value: FRAMEWORK_RULES,
    SecurityCategory.CONFIG_ERROR.value: CONFIG_RULES,
    SERVER_RUNTIME: SERVER_RUNTIME_RULES,
    PYTHON_RUNTIME: PYTHON_RUNTIME_RULES,
}

LANGUAGE_RULE_SETS: dict[str, list[str]] = {
    **{language: [SERVER_RUNTIME] for language in sorted(SCRIPT_LANGUAGES)},
    "python": [PYTHON_RUNTIME],
}


def get_rule_set(name: str) -> list[Rule]:
    """Get a built-in rule set by name."""
    if name not in RULE_SETS:
        raise KeyError(f"Unknown rule set: {name}")
    return list(RULE_SETS[name])


def default_rules() -> list[Rule]:
    """All built-in rules, in rule-set order."""
    return [rule for rules in RULE_SETS.values() for rule in rules]


__all__ = [
    "ANY_LANGUAGE",
    "FixTemplate",
    "LANGUAGE_RULE_SETS",
    "MatchMode",
    "PYTHON_RUNTIME",
    "RULE_SETS",
    "Rule",
    "SERVER_RUNTIME",
    "SecurityCategory",
    "Severity",
    "default_rules",
    "get_rule_set",
    "load_rules_file",
    "make_rule",
]
