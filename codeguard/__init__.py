"""CodeGuard: pattern-based security scanning for source buffers."""

from .analysis import AnalysisEngine, Finding, RuleEngine, TextEdit
from .config import AnalysisSettings

__version__ = "0.1.0"

__all__ = [
    "AnalysisEngine",
    "AnalysisSettings",
    "Finding",
    "RuleEngine",
    "TextEdit",
    "__version__",
]
