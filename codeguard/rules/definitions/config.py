"""
Risky configuration rules for config files (JSON, YAML, .env, Dockerfile, ...).
"""

import re

from ...constants import CONFIG_LANGUAGES
from ..models import FixTemplate, MatchMode, SecurityCategory, Severity, make_rule

_CONFIG = tuple(sorted(CONFIG_LANGUAGES))
_ENV_STYLE = ("dotenv", "properties", "ini", "plaintext")
_DOCKER = ("dockerfile", "plaintext")

CONFIG_RULES = [
    make_rule(
        "CFG001",
        SecurityCategory.CONFIG_ERROR,
        Severity.ERROR,
        r"(?:postgres|mysql|mongodb|redis|mssql|oracle)://[^:\s]+:[^@\s]+@",
        "Database password stored in plain text in a connection URL.",
        flags=re.IGNORECASE,
        languages=_CONFIG,
        fix=FixTemplate(title="Use an environment variable", replacement="${DATABASE_URL}"),
        whitelist=(r"username:password", r"user:pass"),
    ),
    make_rule(
        "CFG002",
        SecurityCategory.CONFIG_ERROR,
        Severity.ERROR,
        r"(?:aws[_-]?(?:access[_-]?key[_-]?id|secret[_-]?access[_-]?key)"
        r"|azure[_-]?storage[_-]?account[_-]?key|gcp[_-]?api[_-]?key)\s*[:=]\s*[\"'][^\"']+[\"']",
        "Cloud provider credential stored in a config file.",
        flags=re.IGNORECASE,
        languages=_CONFIG,
        fix=FixTemplate(title="Use an environment variable", replacement="${CLOUD_CREDENTIAL}"),
    ),
    make_rule(
        "CFG003",
        SecurityCategory.CONFIG_ERROR,
        Severity.WARNING,
        r"redis://(?![^/\s]*@)[^/\s\"']+",
        "Redis connection without a password.",
        languages=_CONFIG,
        whitelist=(r"redis://(?:localhost|127\.0\.0\.1)",),
    ),
    make_rule(
        "CFG004",
        SecurityCategory.CONFIG_ERROR,
        Severity.ERROR,
        r"EXPOSE\s+(?:22|3306|5432|27017|6379|1433|1521)\b",
        "Container exposes an SSH or database port.",
        languages=_DOCKER,
    ),
    make_rule(
        "CFG005",
        SecurityCategory.CONFIG_ERROR,
        Severity.ERROR,
        r"\"(?:preinstall|postinstall|preuninstall)\"\s*:\s*\"[^\"]*\b(?:rm\s+-rf|curl|wget|eval|node\s+-e)",
        "npm lifecycle script downloads or executes code at install time.",
        languages=("json", "jsonc"),
    ),
    make_rule(
        "CFG006",
        SecurityCategory.CONFIG_ERROR,
        Severity.ERROR,
        r"(?:jwt[_-]?secret|secret[_-]?key)\s*[:=]\s*[\"'][^\"']+[\"']",
        "JWT secret hardcoded in configuration.",
        flags=re.IGNORECASE,
        languages=_CONFIG,
        fix=FixTemplate(title="Use an environment variable", replacement="${JWT_SECRET}"),
    ),
    make_rule(
        "CFG007",
        SecurityCategory.CONFIG_ERROR,
        Severity.ERROR,
        r"(?:api[_-]?key|apikey)\s*[:=]\s*[\"'][A-Za-z0-9_\-]{20,}[\"']",
        "API key stored in a config file.",
        flags=re.IGNORECASE,
        languages=_CONFIG,
        fix=FixTemplate(title="Use an environment variable", replacement="${API_KEY}"),
    ),
    make_rule(
        "CFG008",
        SecurityCategory.CONFIG_ERROR,
        Severity.ERROR,
        r"^\s*USER\s+root\b",
        "Container runs as root.",
        languages=_DOCKER,
        fix=FixTemplate(title="Run as an unprivileged user", replacement="USER node"),
    ),
    make_rule(
        "CFG009",
        SecurityCategory.CONFIG_ERROR,
        Severity.WARNING,
        r"registry\s*=\s*[\"']?http://",
        "Package registry configured over plain HTTP.",
        languages=_CONFIG,
        fix=FixTemplate(title="Use HTTPS", replacement="registry=https://registry.npmjs.org/"),
    ),
    make_rule(
        "CFG010",
        SecurityCategory.CONFIG_ERROR,
        Severity.ERROR,
        r"^\s*\w*(?:PASSWORD|SECRET|PRIVATE[_-]?KEY|TOKEN|CREDENTIAL)\w*\s*=\s*\S.*",
        "Sensitive value stored in an environment file. Make sure it is not committed.",
        flags=re.IGNORECASE,
        languages=_ENV_STYLE,
        match_mode=MatchMode.FIRST,
    ),
    make_rule(
        "CFG011",
        SecurityCategory.CONFIG_ERROR,
        Severity.ERROR,
        r"(?:Access-Control-Allow-Origin|cors\.origin|\borigin)[\"']?\s*[:=]\s*[\"']?\*[\"']?",
        "CORS allows requests from any origin.",
        flags=re.IGNORECASE,
        languages=_CONFIG,
        fix=FixTemplate(title="Restrict allowed origins", replacement="https://your-domain.example"),
    ),
    make_rule(
        "CFG012",
        SecurityCategory.CONFIG_ERROR,
        Severity.WARNING,
        r"(?:verify[_-]?ssl|ssl[_-]?verify|reject[_-]?unauthorized|strict[_-]?ssl)\s*[:=]\s*[\"']?(?:false|0|no)\b",
        "SSL/TLS certificate verification is disabled.",
        flags=re.IGNORECASE,
        languages=_CONFIG,
        fix=FixTemplate(title="Enable certificate verification", replacement="true"),
    ),
]
