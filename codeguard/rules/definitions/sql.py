"""
Destructive and injectable SQL detection rules.
"""

import re

from ..models import FixTemplate, SecurityCategory, Severity, make_rule

_SQL_FLAGS = re.IGNORECASE | re.MULTILINE


def _comment_markers(keyword: str) -> tuple[str, ...]:
    return (
        rf"--.*{keyword}",
        rf"/\*.*{keyword}.*\*/",
        rf"//.*{keyword}",
        rf"#.*{keyword}",
    )


def _add_where_clause(match: re.Match[str]) -> str:
    statement = match.group(0).strip().rstrip(";")
    return f"{statement} WHERE id = ?; -- replace with the intended condition"


def _last_word(text: str) -> str:
    return text.split()[-1]


def _guard_drop_table(match: re.Match[str]) -> str:
    table = _last_word(match.group(0))
    return (
        f"-- DANGER: this permanently removes table {table}.\n"
        f"-- Confirm a backup exists before running it.\n"
        f"-- {match.group(0)}"
    )


def _guard_drop_database(match: re.Match[str]) -> str:
    database = _last_word(match.group(0))
    return (
        f"-- DANGER: this removes database {database} and everything in it.\n"
        "-- [ ] full backup taken\n"
        "-- [ ] team notified\n"
        "-- [ ] recovery plan ready\n"
        f"-- {match.group(0)}"
    )


def _truncate_to_delete(match: re.Match[str]) -> str:
    table = _last_word(match.group(0))
    return f"DELETE FROM {table}; -- was: {match.group(0)}"


def _parameterize_hint(match: re.Match[str]) -> str:
    return (
        "-- use a parameterized query, e.g. db.query('SELECT * FROM users WHERE id = ?', [userId])\n"
        f"{match.group(0)}"
    )


DELETE_NO_WHERE_RULE = make_rule(
    "SQL_DELETE_NO_WHERE",
    SecurityCategory.SQL_DANGER,
    Severity.ERROR,
    r"DELETE\s+FROM\s+\w+\s*(?:;|$)",
    "DELETE without a WHERE clause removes every row in the table.",
    flags=_SQL_FLAGS,
    fix=FixTemplate(
        title="Add a WHERE clause",
        replacement=_add_where_clause,
        description="Restrict the DELETE to the rows that should actually be removed.",
    ),
    whitelist=_comment_markers("DELETE")
    + (r"DELETE\s+FROM\s+test", r"DELETE\s+FROM\s+example", r"DELETE\s+FROM\s+dummy"),
)

UPDATE_NO_WHERE_RULE = make_rule(
    "SQL_UPDATE_NO_WHERE",
    SecurityCategory.SQL_DANGER,
    Severity.ERROR,
    r"UPDATE\s+\w+\s+SET\s+(?:(?!\bWHERE\b)[^;])+(?:;|$)",
    "UPDATE without a WHERE clause modifies every row in the table.",
    flags=_SQL_FLAGS,
    fix=FixTemplate(
        title="Add a WHERE clause",
        replacement=_add_where_clause,
        description="Restrict the UPDATE to the rows that should actually change.",
    ),
    whitelist=_comment_markers("UPDATE")
    + (r"UPDATE\s+test", r"UPDATE\s+example", r"UPDATE\s+dummy"),
)

DROP_TABLE_RULE = make_rule(
    "SQL_DROP_TABLE",
    SecurityCategory.SQL_DANGER,
    Severity.ERROR,
    r"DROP\s+TABLE\s+(?:IF\s+EXISTS\s+)?\w+",
    "DROP TABLE permanently deletes the table structure and all of its data.",
    flags=_SQL_FLAGS,
    fix=FixTemplate(
        title="Comment out and add a backup reminder",
        replacement=_guard_drop_table,
        description="Disable the statement until a backup has been confirmed.",
    ),
    whitelist=_comment_markers("DROP")
    + (
        r"DROP\s+TABLE\s+(?:IF\s+EXISTS\s+)?(?:test|temp|tmp|example|dummy)",
        r"DROP\s+TABLE\s+(?:IF\s+EXISTS\s+)?\w*_(?:temp|backup)\b",
    ),
)

DROP_DATABASE_RULE = make_rule(
    "SQL_DROP_DATABASE",
    SecurityCategory.SQL_DANGER,
    Severity.ERROR,
    r"DROP\s+(?:DATABASE|SCHEMA)\s+(?:IF\s+EXISTS\s+)?\w+",
    "DROP DATABASE deletes every table, row, user and grant in the database.",
    flags=_SQL_FLAGS,
    fix=FixTemplate(
        title="Comment out and add a safety checklist",
        replacement=_guard_drop_database,
        description="Disable the statement behind an explicit checklist.",
    ),
    whitelist=_comment_markers("DROP")
    + (r"DROP\s+(?:DATABASE|SCHEMA)\s+(?:IF\s+EXISTS\s+)?(?:test|temp|tmp|example|dummy)",),
)

TRUNCATE_TABLE_RULE = make_rule(
    "SQL_TRUNCATE_TABLE",
    SecurityCategory.SQL_DANGER,
    Severity.ERROR,
    r"TRUNCATE\s+(?:TABLE\s+)?\w+",
    "TRUNCATE removes all rows and cannot be rolled back in most databases.",
    flags=_SQL_FLAGS,
    fix=FixTemplate(
        title="Use a DELETE that can be rolled back",
        replacement=_truncate_to_delete,
        description="Replace TRUNCATE with DELETE so the change can be rolled back.",
    ),
    whitelist=_comment_markers("TRUNCATE")
    + (r"TRUNCATE\s+(?:TABLE\s+)?(?:test|temp|tmp|example|dummy)",),
)

INJECTION_CONCAT_RULE = make_rule(
    "SQL_INJECTION_CONCAT",
    SecurityCategory.SQL_DANGER,
    Severity.WARNING,
    r"(?:SELECT|INSERT|UPDATE|DELETE)\b.*\+.*(?:input|param|request|user|form)",
    "SQL built by concatenating user input is open to SQL injection.",
    flags=_SQL_FLAGS,
    fix=FixTemplate(
        title="Use a parameterized query",
        replacement=_parameterize_hint,
        description="Pass user input as query parameters instead of string concatenation.",
    ),
    whitelist=_comment_markers("(?:SELECT|INSERT|UPDATE|DELETE)")
    + (r"console\.log", r"\bprint\s*\(", r"\becho\b", r"\blogger\."),
)

SQL_RULES = [
    DELETE_NO_WHERE_RULE,
    UPDATE_NO_WHERE_RULE,
    DROP_TABLE_RULE,
    DROP_DATABASE_RULE,
    TRUNCATE_TABLE_RULE,
    INJECTION_CONCAT_RULE,
]
