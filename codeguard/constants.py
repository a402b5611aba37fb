"""Constants and configuration values for CodeGuard.

This module centralizes magic numbers and configuration values
that are used across the codebase for easier maintenance. Environment
overrides are applied by ``AnalysisSettings.from_env``, not at import time.
"""

# =============================================================================
# Result Cache
# =============================================================================

# Findings are only reused while the editor is actively typing, so keep it short
RESULT_CACHE_TTL_SECONDS = 30.0

# Maximum number of cached buffer snapshots
RESULT_CACHE_MAX_ENTRIES = 100


# =============================================================================
# Performance Guard
# =============================================================================

# Budget for a full analysis pass in seconds
DEFAULT_ANALYSIS_TIMEOUT = 5.0

# Buffers larger than this (UTF-8 bytes) are rejected before matching (1MB)
MAX_BUFFER_SIZE = 1024 * 1024

# Upper bound on rules applied in a single pass
MAX_RULES_PER_ANALYSIS = 100


# =============================================================================
# Incremental Analysis
# =============================================================================

# Changed-character ratio at which incremental analysis gives up
INCREMENTAL_CHANGE_THRESHOLD = 0.3

# Lines of context added above and below each edited range
INCREMENTAL_CONTEXT_LINES = 2


# =============================================================================
# Findings
# =============================================================================

# Confidence assigned to a raw pattern match before context adjustment
BASE_CONFIDENCE = 0.9

# Entropy proxy: matched text longer than this with a unique-character
# ratio below the threshold is treated as a placeholder
PLACEHOLDER_MIN_LENGTH = 8
PLACEHOLDER_UNIQUE_RATIO = 0.3

# Secret matches shorter than this are ignored in test files
TEST_SECRET_MIN_LENGTH = 20


# =============================================================================
# Languages
# =============================================================================

SUPPORTED_EXTENSIONS: dict[str, list[str]] = {
    "javascript": [".js", ".jsx", ".mjs", ".cjs"],
    "typescript": [".ts", ".tsx", ".mts", ".cts"],
    "vue": [".vue"],
    "html": [".html", ".htm"],
    "sql": [".sql"],
    "json": [".json"],
    "yaml": [".yml", ".yaml"],
    "toml": [".toml"],
    "ini": [".ini", ".cfg", ".conf"],
    "properties": [".properties"],
    "dotenv": [".env"],
    "dockerfile": [".dockerfile"],
    "python": [".py"],
    "java": [".java"],
    "csharp": [".cs"],
    "php": [".php"],
    "ruby": [".rb"],
    "go": [".go"],
    "rust": [".rs"],
    "cpp": [".cpp", ".cc", ".cxx", ".hpp"],
    "c": [".c", ".h"],
    "shellscript": [".sh", ".bash"],
    "markdown": [".md", ".markdown"],
    "plaintext": [".txt"],
}

# Languages that pull in the server-runtime rule set
SCRIPT_LANGUAGES = frozenset(
    {"javascript", "typescript", "javascriptreact", "typescriptreact", "vue"}
)

# Languages the configuration rules apply to
CONFIG_LANGUAGES = frozenset(
    {"json", "jsonc", "yaml", "toml", "ini", "properties", "dotenv", "dockerfile", "plaintext"}
)

DEFAULT_EXCLUDED_FOLDERS = ["node_modules", ".git", "dist", "build", "out", "__pycache__", ".venv"]

# Language identifiers analyzed by default
SUPPORTED_LANGUAGES = sorted(set(SUPPORTED_EXTENSIONS) | SCRIPT_LANGUAGES | CONFIG_LANGUAGES | {"handlebars"})
