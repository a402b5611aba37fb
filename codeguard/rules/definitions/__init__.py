"""Built-in rule tables, grouped by category."""

from .code_injection import CODE_INJECTION_RULES
from .config import CONFIG_RULES
from .framework import FRAMEWORK_RULES
from .runtime import PYTHON_RUNTIME_RULES, SERVER_RUNTIME_RULES
from .secrets import SECRET_RULES
from .sql import SQL_RULES

__all__ = [
    "CODE_INJECTION_RULES",
    "CONFIG_RULES",
    "FRAMEWORK_RULES",
    "PYTHON_RUNTIME_RULES",
    "SECRET_RULES",
    "SERVER_RUNTIME_RULES",
    "SQL_RULES",
]
