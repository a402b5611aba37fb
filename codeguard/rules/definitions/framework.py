"""
Framework-specific XSS and rendering-risk rules (React, Vue, Angular).
"""

import re

from ..models import FixTemplate, SecurityCategory, Severity, make_rule

_USER_DATA = r"(?:props|state|input|param|user|form|query|request|data)"


def _sanitize_dangerous_html(match: re.Match[str]) -> str:
    return re.sub(
        r"__html\s*:\s*([^}]+?)\s*\}",
        r"__html: DOMPurify.sanitize(\1) }",
        match.group(0),
        count=1,
    )


def _vhtml_to_text(match: re.Match[str]) -> str:
    return re.sub(r"v-html", "v-text", match.group(0), count=1)


def _sanitize_bypass(match: re.Match[str]) -> str:
    return re.sub(r"\(([^)]*)\)", r"(this.sanitizer.sanitize(SecurityContext.HTML, \1))", match.group(0), count=1)


REACT_DANGEROUS_INNERHTML_RULE = make_rule(
    "FRAMEWORK_REACT_DANGEROUS_INNERHTML",
    SecurityCategory.FRAMEWORK_RISK,
    Severity.WARNING,
    rf"dangerouslySetInnerHTML\s*=\s*\{{\s*\{{\s*__html\s*:\s*[^}}]*{_USER_DATA}[^}}]*\}}\s*\}}",
    "dangerouslySetInnerHTML with dynamic data renders unsanitized HTML.",
    flags=re.IGNORECASE,
    fix=FixTemplate(
        title="Sanitize with DOMPurify",
        replacement=_sanitize_dangerous_html,
        description="Run the HTML through DOMPurify.sanitize() before rendering.",
    ),
    whitelist=(r"DOMPurify\.sanitize", r"sanitizeHtml", r"\bxss\("),
)

VUE_V_HTML_RULE = make_rule(
    "FRAMEWORK_VUE_V_HTML",
    SecurityCategory.FRAMEWORK_RISK,
    Severity.WARNING,
    rf"v-html\s*=\s*[\"']?[^\"'>]*(?:{_USER_DATA}|\$data|\$props)[^\"'>]*[\"']?",
    "v-html with dynamic data renders unsanitized HTML.",
    flags=re.IGNORECASE,
    fix=FixTemplate(
        title="Use v-text",
        replacement=_vhtml_to_text,
        description="Render the value as text, or sanitize it in a computed property.",
    ),
    whitelist=(r"sanitize", r"DOMPurify", r"\bxss\("),
)

REACT_USEEFFECT_LOOP_RULE = make_rule(
    "FRAMEWORK_REACT_USEEFFECT_LOOP",
    SecurityCategory.FRAMEWORK_RISK,
    Severity.WARNING,
    r"useEffect\s*\(\s*\(\s*\)\s*=>\s*\{[^}]*(?:setState|set[A-Z]\w*|dispatch)[^}]*\}\s*,\s*\[\s*\]\s*\)",
    "State update inside a useEffect with an empty dependency list may hide "
    "stale state or cause render loops when the list changes.",
    fix=FixTemplate(
        title="Declare effect dependencies",
        replacement="// list the values this effect reads in the dependency array",
        description="Add the variables the effect depends on to its dependency array.",
    ),
    whitelist=(r"//.*\bonce\b", r"/\*.*\bonce\b.*\*/"),
)

ANGULAR_BYPASS_SECURITY_RULE = make_rule(
    "FRAMEWORK_ANGULAR_BYPASS_SECURITY",
    SecurityCategory.FRAMEWORK_RISK,
    Severity.WARNING,
    rf"bypassSecurityTrust(?:Html|Script|Style|Url|ResourceUrl)\s*\([^)]*(?:{_USER_DATA}|Content)[^)]*\)",
    "bypassSecurityTrust* disables Angular's built-in sanitization for dynamic data.",
    flags=re.IGNORECASE,
    fix=FixTemplate(
        title="Sanitize before trusting",
        replacement=_sanitize_bypass,
        description="Sanitize the value with DomSanitizer.sanitize() instead of bypassing it.",
    ),
    whitelist=(r"DOMPurify\.sanitize", r"\.sanitize\("),
)

REACT_PROPS_XSS_RULE = make_rule(
    "FRAMEWORK_REACT_PROPS_XSS",
    SecurityCategory.FRAMEWORK_RISK,
    Severity.WARNING,
    r"<\w+[^>]*(?:href|src|action|formAction)\s*=\s*\{[^}]*(?:props|state|input|param|user|form|query|request)[^}]*\}",
    "URL attribute bound to user data can carry a javascript: URL.",
    flags=re.IGNORECASE,
    fix=FixTemplate(
        title="Validate the URL scheme",
        replacement="// allow only http(s) URLs before binding them to href/src",
        description="Reject javascript: and data: URLs before rendering.",
    ),
    whitelist=(
        r"(?:href|src)\s*=\s*\{[^}]*[\"'`]/[^\"'`]*[\"'`][^}]*\}",
        r"(?:href|src)\s*=\s*\{[^}]*[\"'`]#[^\"'`]*[\"'`][^}]*\}",
        r"href\s*=\s*\{[^}]*[\"'`]mailto:",
    ),
)

VUE_TEMPLATE_INJECTION_RULE = make_rule(
    "FRAMEWORK_VUE_TEMPLATE_INJECTION",
    SecurityCategory.FRAMEWORK_RISK,
    Severity.WARNING,
    rf"\{{\{{[^}}]*(?:{_USER_DATA}|\$data|\$props)[^}}]*\}}\}}",
    "Template interpolation of user data; make sure it is never compiled as a template.",
    flags=re.IGNORECASE,
    languages=("vue",),
    fix=FixTemplate(
        title="Use a filter or computed property",
        replacement="<!-- move formatting into a computed property -->",
        description="Keep user data out of dynamically compiled templates.",
    ),
    whitelist=(
        r"\{\{\s*\w+\.(?:length|id|index|key)\s*\}\}",
        r"\{\{\s*\d+\s*\}\}",
        r"\{\{\s*(?:true|false)\s*\}\}",
        r"\{\{[^}]*\|[^}]*\}\}",
    ),
)

ANGULAR_TEMPLATE_INJECTION_RULE = make_rule(
    "FRAMEWORK_ANGULAR_TEMPLATE_INJECTION",
    SecurityCategory.FRAMEWORK_RISK,
    Severity.WARNING,
    rf"\{{\{{[^}}]*{_USER_DATA}[^}}]*\}}\}}",
    "Template interpolation of user data; make sure it is never compiled as a template.",
    flags=re.IGNORECASE,
    languages=("html", "handlebars"),
    fix=FixTemplate(
        title="Use a pipe or component method",
        replacement="<!-- format the value with a pipe -->",
        description="Keep user data out of dynamically compiled templates.",
    ),
    whitelist=(
        r"\{\{\s*\w+\.(?:length|id|index|key)\s*\}\}",
        r"\{\{\s*\d+\s*\}\}",
        r"\{\{[^}]*\|[^}]*\}\}",
    ),
)

FRAMEWORK_RULES = [
    REACT_DANGEROUS_INNERHTML_RULE,
    VUE_V_HTML_RULE,
    REACT_USEEFFECT_LOOP_RULE,
    ANGULAR_BYPASS_SECURITY_RULE,
    REACT_PROPS_XSS_RULE,
    VUE_TEMPLATE_INJECTION_RULE,
    ANGULAR_TEMPLATE_INJECTION_RULE,
]
