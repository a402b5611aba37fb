"""
Cross-cutting runtime rules.

These sets are not tied to a category. They are unioned into the candidate
list through the language mapping: the server-runtime set for script-like
languages, the python-runtime set for Python.
"""

import re

from ..models import FixTemplate, SecurityCategory, Severity, make_rule

NODE_RUNTIME = ("node",)
PYTHON_RUNTIME = ("python",)

SERVER_RUNTIME_RULES = [
    make_rule(
        "NODE001",
        SecurityCategory.CODE_INJECTION,
        Severity.ERROR,
        r"child_process\.(?:exec|spawn)\s*\(",
        "child_process.exec/spawn runs system commands; validate every argument.",
        languages=NODE_RUNTIME,
        fix=FixTemplate(title="Use execFile", replacement="child_process.execFile("),
    ),
    make_rule(
        "NODE003",
        SecurityCategory.CODE_INJECTION,
        Severity.WARNING,
        r"__dirname\s*\+[^)]*req\.(?:params|query|body)",
        "Path built from request data allows path traversal.",
        languages=NODE_RUNTIME,
        fix=FixTemplate(
            title="Resolve and validate the path",
            replacement="path.resolve(__dirname, path.basename(",
            description="Normalize the path and keep it inside the base directory.",
        ),
    ),
    make_rule(
        "NODE005",
        SecurityCategory.CODE_INJECTION,
        Severity.ERROR,
        r"rm\s+-rf\s+/",
        "rm -rf on an absolute path can wipe the file system.",
        languages=NODE_RUNTIME,
    ),
    make_rule(
        "NODE008",
        SecurityCategory.CONFIG_ERROR,
        Severity.ERROR,
        r"listen\s*\([^)]*[\"']0\.0\.0\.0[\"']",
        "Listening on 0.0.0.0 exposes the service on every network interface.",
        languages=NODE_RUNTIME,
        fix=FixTemplate(title="Bind to localhost", replacement="'127.0.0.1'"),
    ),
    make_rule(
        "NODE011",
        SecurityCategory.SECRET_EXPOSURE,
        Severity.ERROR,
        r"jwt\.(?:sign|verify)\s*\([^,]+,\s*[\"'][^\"']+[\"']",
        "JWT signed or verified with a hardcoded secret.",
        languages=NODE_RUNTIME,
        fix=FixTemplate(
            title="Load the secret from the environment",
            replacement=lambda m: re.sub(r"[\"'][^\"']+[\"']$", "process.env.JWT_SECRET", m.group(0)),
        ),
    ),
]

PYTHON_RUNTIME_RULES = [
    make_rule(
        "PY001",
        SecurityCategory.CODE_INJECTION,
        Severity.ERROR,
        r"\bos\.(?:remove|unlink|rmdir)\s*\(",
        "os.remove/unlink/rmdir permanently deletes files; validate the path.",
        languages=PYTHON_RUNTIME,
    ),
    make_rule(
        "PY002",
        SecurityCategory.CODE_INJECTION,
        Severity.ERROR,
        r"\bpickle\.loads?\s*\(",
        "Unpickling untrusted data executes arbitrary code.",
        languages=PYTHON_RUNTIME,
        fix=FixTemplate(title="Use json", replacement="json.loads("),
    ),
    make_rule(
        "PY003",
        SecurityCategory.CODE_INJECTION,
        Severity.ERROR,
        r"(?<![\w.])(?:eval|exec|compile)\s*\(",
        "eval/exec/compile execute arbitrary code.",
        languages=PYTHON_RUNTIME,
        fix=FixTemplate(title="Use ast.literal_eval", replacement="ast.literal_eval("),
    ),
    make_rule(
        "PY004",
        SecurityCategory.CODE_INJECTION,
        Severity.ERROR,
        r"\bos\.(?:system|popen)\s*\(",
        "os.system/popen runs commands through the shell.",
        languages=PYTHON_RUNTIME,
        fix=FixTemplate(title="Use subprocess.run", replacement="subprocess.run(["),
    ),
    make_rule(
        "PY005",
        SecurityCategory.CONFIG_ERROR,
        Severity.ERROR,
        r"\bdebug\s*=\s*True\b",
        "debug=True leaks stack traces and internals in production.",
        languages=PYTHON_RUNTIME,
        fix=FixTemplate(title="Read debug flag from the environment", replacement="debug=False"),
    ),
    make_rule(
        "PY008",
        SecurityCategory.CODE_INJECTION,
        Severity.ERROR,
        r"(?:SELECT|INSERT|UPDATE|DELETE)\b[^\"']*[\"']\s*\.\s*format\s*\(",
        "SQL built with str.format() is open to SQL injection.",
        flags=re.IGNORECASE,
        languages=PYTHON_RUNTIME,
        tags=("sql-injection",),
    ),
    make_rule(
        "PY011",
        SecurityCategory.CODE_INJECTION,
        Severity.ERROR,
        r"\bshutil\.rmtree\s*\(",
        "shutil.rmtree recursively deletes a directory tree.",
        languages=PYTHON_RUNTIME,
    ),
]
