"""Rule execution, false-positive filtering and incremental analysis."""

from .analyzer import AnalysisEngine, BufferState, deduplicate
from .engine import RuleEngine
from .file_context import FileContext, classify_path
from .matcher import RawMatch, find_matches
from .models import Finding, FindingFix, FindingLocation, FindingMetadata, TextEdit, sort_for_display
from .whitelist import WhitelistFilter

__all__ = [
    "AnalysisEngine",
    "BufferState",
    "FileContext",
    "Finding",
    "FindingFix",
    "FindingLocation",
    "FindingMetadata",
    "RawMatch",
    "RuleEngine",
    "TextEdit",
    "WhitelistFilter",
    "classify_path",
    "deduplicate",
    "find_matches",
    "sort_for_display",
]
