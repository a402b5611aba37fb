"""Shared fixtures for CodeGuard tests."""

import logging

import pytest

from codeguard.analysis import AnalysisEngine, RuleEngine
from codeguard.config import AnalysisSettings
from codeguard.logging_config import ANALYSIS_LOGGER_NAME
from codeguard.rules import SecurityCategory, Severity, make_rule


@pytest.fixture(autouse=True)
def reset_codeguard_logger():
    """Undo configure_logging() so caplog keeps receiving codeguard records."""
    yield
    logger = logging.getLogger(ANALYSIS_LOGGER_NAME)
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def rule_engine():
    """Create a rule engine with every built-in rule."""
    return RuleEngine.with_default_rules()


@pytest.fixture
def analysis_engine(rule_engine):
    """Create an analysis engine over the built-in rules."""
    return AnalysisEngine(rule_engine, settings=AnalysisSettings())


@pytest.fixture
def danger_rule():
    """A minimal code-injection rule that matches ``danger(``."""
    return make_rule(
        "TEST_DANGER",
        SecurityCategory.CODE_INJECTION,
        Severity.ERROR,
        r"\bdanger\s*\(",
        "danger() called",
    )
