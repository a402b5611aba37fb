"""
Code and command injection sink detection rules.
"""

import re
from collections.abc import Callable

from ..models import FixTemplate, SecurityCategory, Severity, make_rule

# Identifiers that usually carry request or user-controlled data
_USER_INPUT = r"(?:input|param|request|req\.|user|form|query|body|filename)"


def _comment_out(advice: str) -> Callable[[re.Match[str]], str]:
    def replacement(match: re.Match[str]) -> str:
        return f"// {advice}\n// {match.group(0)}"

    return replacement


def _innerhtml_to_textcontent(match: re.Match[str]) -> str:
    return re.sub(r"\.innerHTML\s*=", ".textContent =", match.group(0), count=1)


EVAL_RULE = make_rule(
    "CODE_INJECTION_EVAL",
    SecurityCategory.CODE_INJECTION,
    Severity.ERROR,
    r"\beval\s*\(",
    "eval() executes arbitrary code. Any attacker-controlled input reaching it "
    "leads to full code execution.",
    flags=re.IGNORECASE,
    fix=FixTemplate(
        title="Comment out eval()",
        replacement=_comment_out(
            "eval() disabled: use JSON.parse() for data or a dedicated expression parser"
        ),
        description="Disable eval() and point to a safe alternative.",
    ),
    whitelist=(
        r"[\"'`][^\"'`]*\beval\b[^\"'`]*[\"'`]",
        r"console\.\w+\(.*eval",
        r"\blogger?\.\w+\(.*eval",
    ),
)

INNERHTML_RULE = make_rule(
    "CODE_INJECTION_INNERHTML",
    SecurityCategory.CODE_INJECTION,
    Severity.ERROR,
    r"\.innerHTML\s*=\s*[^;]+",
    "Assigning to innerHTML renders markup as HTML and is a common XSS vector.",
    fix=FixTemplate(
        title="Use textContent",
        replacement=_innerhtml_to_textcontent,
        description="Use textContent for plain text, or sanitize HTML with DOMPurify first.",
    ),
    whitelist=(
        r"\.innerHTML\s*=\s*[\"'`]\s*[\"'`]",
        r"\.innerHTML\s*=\s*[\"'`]<[^\"'`+$]*>[^\"'`+$]*</[^\"'`+$]*>[\"'`]\s*;?\s*$",
        r"DOMPurify\.sanitize",
    ),
)

CHILD_PROCESS_RULE = make_rule(
    "CODE_INJECTION_CHILD_PROCESS",
    SecurityCategory.CODE_INJECTION,
    Severity.ERROR,
    rf"(?:child_process\.)?\bexec\s*\([^)]*{_USER_INPUT}[^)]*\)",
    "Running a shell command built from user input allows command injection.",
    flags=re.IGNORECASE,
    fix=FixTemplate(
        title="Use execFile with an argument list",
        replacement=_comment_out("use execFile()/spawn() with a validated argument array"),
        description="execFile and spawn do not pass arguments through a shell.",
    ),
    whitelist=(
        r"\brequire\s*\(.*exec",
        r"\bimport\b.*exec",
        r"console\.\w+\(.*exec",
    ),
)

DOCUMENT_WRITE_RULE = make_rule(
    "CODE_INJECTION_DOCUMENT_WRITE",
    SecurityCategory.CODE_INJECTION,
    Severity.WARNING,
    r"document\.write(?:ln)?\s*\(",
    "document.write() injects raw HTML into the page and can enable XSS.",
    fix=FixTemplate(
        title="Use DOM APIs",
        replacement="document.body.appendChild(document.createTextNode(",
        description="Create nodes with the DOM API instead of writing markup.",
    ),
    whitelist=(r"document\.write\s*\(\s*[\"'`][^\"'`+$]*[\"'`]\s*\)",),
)

FUNCTION_CONSTRUCTOR_RULE = make_rule(
    "CODE_INJECTION_FUNCTION_CONSTRUCTOR",
    SecurityCategory.CODE_INJECTION,
    Severity.WARNING,
    r"new\s+Function\s*\(",
    "The Function constructor compiles strings into code, much like eval().",
    fix=FixTemplate(
        title="Comment out Function constructor",
        replacement=_comment_out("avoid compiling code from strings"),
        description="Replace dynamic code generation with a regular function.",
    ),
)

SETTIMEOUT_STRING_RULE = make_rule(
    "CODE_INJECTION_SETTIMEOUT_STRING",
    SecurityCategory.CODE_INJECTION,
    Severity.WARNING,
    rf"(?:setTimeout|setInterval)\s*\(\s*[\"'`][^\"'`]*{_USER_INPUT}[^\"'`]*[\"'`]",
    "Passing a string to setTimeout/setInterval evaluates it as code.",
    flags=re.IGNORECASE,
    fix=FixTemplate(
        title="Pass a function instead of a string",
        replacement=_comment_out("pass a callback function, not a code string"),
        description="A callback is not evaluated as code.",
    ),
)

SCRIPT_TAG_RULE = make_rule(
    "CODE_INJECTION_SCRIPT_TAG",
    SecurityCategory.CODE_INJECTION,
    Severity.ERROR,
    rf"<script[^>]*>.*{_USER_INPUT}.*</script>",
    "Script tag built from user input allows script injection.",
    flags=re.IGNORECASE,
    fix=FixTemplate(
        title="Remove dynamic script content",
        replacement=_comment_out("load scripts from static files and pass data as JSON"),
        description="Never interpolate user data into a script element.",
    ),
)

CODE_INJECTION_RULES = [
    EVAL_RULE,
    INNERHTML_RULE,
    CHILD_PROCESS_RULE,
    DOCUMENT_WRITE_RULE,
    FUNCTION_CONSTRUCTOR_RULE,
    SETTIMEOUT_STRING_RULE,
    SCRIPT_TAG_RULE,
]
