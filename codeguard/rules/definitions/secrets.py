"""
Hardcoded credential detection rules.

Covers vendor API tokens, generic key/secret assignments, database
connection strings with embedded passwords and JWT signing secrets.
"""

import re

from ..models import FixTemplate, SecurityCategory, Severity, make_rule

_ENV_REFERENCE = (r"process\.env", r"\$\{[A-Z_][A-Z0-9_]*\}")

# Vendor-formatted values are reported by their own rule
_VENDOR_PREFIXES = (r"[\"']sk-", r"[\"']AKIA", r"[\"']ghp_")


def _env_name(assignment: str) -> str:
    key = re.split(r"[:=]", assignment, maxsplit=1)[0].strip()
    key = re.sub(r"^(const|let|var)\s+", "", key)
    return re.sub(r"[-\s]", "_", key).upper()


def _replace_generic_value(match: re.Match[str]) -> str:
    text = match.group(0)
    return re.sub(r"[\"'][^\"']+[\"']", f"process.env.{_env_name(text)}", text, count=1)


def _replace_jwt_value(match: re.Match[str]) -> str:
    return re.sub(r"[\"'][^\"']+[\"']", "process.env.JWT_SECRET", match.group(0), count=1)


OPENAI_API_KEY_RULE = make_rule(
    "API_KEY_OPENAI",
    SecurityCategory.SECRET_EXPOSURE,
    Severity.ERROR,
    r"sk-(?:proj-)?[a-zA-Z0-9]{20,}",
    "OpenAI API key exposed in source. Anyone with this key can bill usage to "
    "your account; move it to an environment variable.",
    fix=FixTemplate(
        title="Replace with environment variable",
        replacement="process.env.OPENAI_API_KEY",
        description="Reference the key through an environment variable instead of hardcoding it.",
    ),
    whitelist=_ENV_REFERENCE + (r"your[_-]?api[_-]?key", r"sk-proj-your", r"sk-your"),
    vendor_format=True,
)

AWS_ACCESS_KEY_RULE = make_rule(
    "API_KEY_AWS",
    SecurityCategory.SECRET_EXPOSURE,
    Severity.ERROR,
    r"AKIA[0-9A-Z]{16}",
    "AWS access key ID exposed in source. Leaked cloud credentials can be used "
    "to run resources on your account.",
    fix=FixTemplate(
        title="Replace with environment variable",
        replacement="process.env.AWS_ACCESS_KEY_ID",
        description="Reference the access key through an environment variable.",
    ),
    whitelist=_ENV_REFERENCE + (r"your[_-]?aws[_-]?key", r"AKIA[X]{16}", r"AKIA[0]{16}"),
    vendor_format=True,
)

GITHUB_TOKEN_RULE = make_rule(
    "API_KEY_GITHUB",
    SecurityCategory.SECRET_EXPOSURE,
    Severity.ERROR,
    r"ghp_[a-zA-Z0-9]{36}",
    "GitHub personal access token exposed in source. It grants access to your "
    "repositories, including private ones.",
    fix=FixTemplate(
        title="Replace with environment variable",
        replacement="process.env.GITHUB_TOKEN",
        description="Reference the token through an environment variable.",
    ),
    whitelist=_ENV_REFERENCE + (r"your[_-]?github[_-]?token", r"ghp_x{36}"),
    vendor_format=True,
)

GENERIC_API_KEY_RULE = make_rule(
    "API_KEY_GENERIC",
    SecurityCategory.SECRET_EXPOSURE,
    Severity.ERROR,
    r"(?:api[_-]?key|secret|password|token)\s*[:=]\s*[\"'][^\"'\s]{8,}[\"']",
    "Possible hardcoded credential. Store keys, passwords and tokens in "
    "environment variables or a secret manager.",
    flags=re.IGNORECASE,
    fix=FixTemplate(
        title="Replace with environment variable",
        replacement=_replace_generic_value,
        description="Replace the hardcoded value with an environment variable reference.",
    ),
    whitelist=_ENV_REFERENCE
    + _VENDOR_PREFIXES
    + (
        r"your[_-]?api[_-]?key",
        r"example[_-]?key",
        r"test[_-]?key",
        r"demo[_-]?key",
        r"placeholder",
    ),
)

DATABASE_CONNECTION_RULE = make_rule(
    "API_KEY_DATABASE",
    SecurityCategory.SECRET_EXPOSURE,
    Severity.ERROR,
    r"(?:mongodb|mysql|postgres|postgresql)://[^:\s/]+:[^@\s/]+@[^/\s]+",
    "Database connection string contains a password. Load the connection URL "
    "from the environment.",
    flags=re.IGNORECASE,
    fix=FixTemplate(
        title="Replace with environment variable",
        replacement="process.env.DATABASE_URL",
        description="Reference the connection string through an environment variable.",
    ),
    whitelist=_ENV_REFERENCE
    + (r"username:password", r"user:pass", r"admin:admin", r"root:root", r"test:test"),
)

JWT_SECRET_RULE = make_rule(
    "API_KEY_JWT_SECRET",
    SecurityCategory.SECRET_EXPOSURE,
    Severity.ERROR,
    r"(?:jwt[_-]?secret|secret[_-]?key)\s*[:=]\s*[\"'][^\"'\s]{8,}[\"']",
    "Hardcoded JWT signing secret. Anyone who reads it can forge tokens for "
    "any user.",
    flags=re.IGNORECASE,
    fix=FixTemplate(
        title="Replace with environment variable",
        replacement=_replace_jwt_value,
        description="Load the signing secret from an environment variable.",
    ),
    whitelist=_ENV_REFERENCE
    + (r"your[_-]?secret", r"test[_-]?secret", r"demo[_-]?secret", r"example[_-]?secret"),
)

SECRET_RULES = [
    OPENAI_API_KEY_RULE,
    AWS_ACCESS_KEY_RULE,
    GITHUB_TOKEN_RULE,
    GENERIC_API_KEY_RULE,
    DATABASE_CONNECTION_RULE,
    JWT_SECRET_RULE,
]
