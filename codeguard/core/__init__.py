"""Core infrastructure shared by the CodeGuard analysis pipeline."""

from .cache import ResultCache
from .exceptions import (
    AnalysisError,
    AnalysisTimeoutError,
    BufferTooLargeError,
    CodeGuardError,
    ConfigurationError,
    IncrementalAnalysisError,
    InvalidConfigError,
    RuleError,
    RuleExecutionError,
    RuleLoadError,
    RuleRegistrationError,
    WhitelistPatternError,
)

__all__ = [
    "AnalysisError",
    "AnalysisTimeoutError",
    "BufferTooLargeError",
    "CodeGuardError",
    "ConfigurationError",
    "IncrementalAnalysisError",
    "InvalidConfigError",
    "ResultCache",
    "RuleError",
    "RuleExecutionError",
    "RuleLoadError",
    "RuleRegistrationError",
    "WhitelistPatternError",
]
