"""Custom exception hierarchy for CodeGuard.

This module provides a structured exception hierarchy so callers can
distinguish rule-definition problems from analysis-time failures.
"""


class CodeGuardError(Exception):
    """Base exception for all CodeGuard errors.

    All custom exceptions inherit from this class so that the analysis
    boundary can catch every CodeGuard-specific error with a single
    except clause.

    Attributes:
        code: Optional machine-readable error code.
        recoverable: Whether the caller can retry or continue after the error.
    """

    def __init__(self, message: str, code: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.code = code
        self.recoverable = recoverable


# =============================================================================
# Rule Errors
# =============================================================================

class RuleError(CodeGuardError):
    """Base exception for rule-related errors."""
    pass


class RuleRegistrationError(RuleError):
    """A rule failed structural validation and was rejected at registration."""

    def __init__(self, message: str, rule_id: str | None = None):
        super().__init__(message, code="RULE_REGISTRATION_FAILED", recoverable=False)
        self.rule_id = rule_id


class RuleLoadError(RuleError):
    """A rule definition file is missing or malformed."""
    pass


class WhitelistPatternError(RuleError):
    """A rule's custom whitelist pattern is not a valid regular expression."""

    def __init__(self, message: str, rule_id: str | None = None, pattern: str | None = None):
        super().__init__(message, code="INVALID_WHITELIST_PATTERN")
        self.rule_id = rule_id
        self.pattern = pattern


class RuleExecutionError(RuleError):
    """A single rule raised while being applied to a buffer."""

    def __init__(self, message: str, rule_id: str | None = None):
        super().__init__(message, code="RULE_EXECUTION_FAILED")
        self.rule_id = rule_id


# =============================================================================
# Analysis Errors
# =============================================================================

class AnalysisError(CodeGuardError):
    """Base exception for analysis pass errors."""
    pass


class AnalysisTimeoutError(AnalysisError):
    """An analysis pass exceeded its time budget."""

    def __init__(self, message: str, timeout: float | None = None):
        super().__init__(message, code="ANALYSIS_TIMEOUT")
        self.timeout = timeout


class BufferTooLargeError(AnalysisError):
    """Buffer exceeds the maximum size accepted for analysis."""

    def __init__(self, message: str, size: int | None = None, limit: int | None = None):
        super().__init__(message, code="BUFFER_TOO_LARGE")
        self.size = size
        self.limit = limit


class IncrementalAnalysisError(AnalysisError):
    """Incremental re-analysis could not reconcile the edit batch."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(CodeGuardError):
    """Base exception for configuration errors."""
    pass


class InvalidConfigError(ConfigurationError):
    """Configuration value is invalid or settings file is malformed."""
    pass
