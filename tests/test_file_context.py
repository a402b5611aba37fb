"""Tests for file-context classification and severity adjustment."""

import pytest

from codeguard.analysis.file_context import (
    NO_CONTEXT,
    ContextKind,
    adjust_confidence,
    adjust_for_context,
    adjust_severity,
    classify_path,
    is_context_whitelisted,
)
from codeguard.rules import SecurityCategory, Severity


class TestClassifyPath:
    """Test path classification."""

    @pytest.mark.parametrize(
        "path",
        [
            "tests/test_app.py",
            "src/components/Button.test.tsx",
            "src/__tests__/app.js",
            "pkg/handler_test.go",
            "C:\\proj\\tests\\client.js",
        ],
    )
    def test_test_paths(self, path: str) -> None:
        """Test common test conventions are recognised."""
        assert classify_path(path).is_test is True

    @pytest.mark.parametrize("path", ["README.md", "docs/guide.txt", "CHANGELOG", "notes/setup.rst"])
    def test_documentation_paths(self, path: str) -> None:
        """Test documentation files are recognised."""
        assert classify_path(path).is_documentation is True

    @pytest.mark.parametrize("path", ["examples/demo.js", "src/sample_config.py", "templates/base.html"])
    def test_example_paths(self, path: str) -> None:
        """Test example, sample and template files are recognised."""
        assert classify_path(path).is_example is True

    @pytest.mark.parametrize(
        "path", ["config/settings.js", "app.json", ".env.production", "Dockerfile", "docker-compose.yml"]
    )
    def test_config_paths(self, path: str) -> None:
        """Test config files are recognised."""
        assert classify_path(path).is_config is True

    def test_plain_source(self) -> None:
        """Test an ordinary source file has no context."""
        context = classify_path("src/app.js")

        assert context.kinds == []
        assert context.primary is None
        assert context.extension == "js"

    def test_missing_path(self) -> None:
        """Test a missing path yields the empty context."""
        assert classify_path(None) is NO_CONTEXT
        assert classify_path("") is NO_CONTEXT

    def test_primary_prefers_documentation(self) -> None:
        """Test documentation outranks example, test and config."""
        context = classify_path("examples/README.md")

        assert context.is_documentation and context.is_example
        assert context.primary is ContextKind.DOCUMENTATION
        assert context.kinds[:2] == [ContextKind.DOCUMENTATION, ContextKind.EXAMPLE]


class TestContextWhitelist:
    """Test category/context suppression."""

    def test_example_suppresses_secrets(self) -> None:
        """Test secrets are fully suppressed in example files."""
        context = classify_path("examples/demo.js")
        assert is_context_whitelisted(SecurityCategory.SECRET_EXPOSURE, "sk-proj-abc", "", context) is True

    def test_example_suppresses_sql(self) -> None:
        """Test SQL findings are fully suppressed in example files."""
        context = classify_path("examples/seed.sql")
        assert is_context_whitelisted(SecurityCategory.SQL_DANGER, "DROP TABLE x", "", context) is True

    def test_example_keeps_injection(self) -> None:
        """Test code-injection findings still fire in example files."""
        context = classify_path("examples/demo.js")
        assert is_context_whitelisted(SecurityCategory.CODE_INJECTION, "eval(", "", context) is False

    def test_short_secret_in_test_file(self) -> None:
        """Test short secret matches are suppressed in test files."""
        context = classify_path("tests/test_auth.py")
        assert is_context_whitelisted(SecurityCategory.SECRET_EXPOSURE, "abc123", "", context) is True

    def test_marked_secret_in_test_file(self) -> None:
        """Test fixture-marked secrets are suppressed in test files."""
        context = classify_path("tests/test_auth.py")
        value = "sk-testkey1234567890abcdef"
        assert is_context_whitelisted(SecurityCategory.SECRET_EXPOSURE, value, "", context) is True

    def test_realistic_secret_in_test_file(self) -> None:
        """Test a long unmarked secret in a test file is still reported."""
        context = classify_path("tests/test_auth.py")
        value = "sk-proj-AbCdEfGhIjKlMnOpQrStUvWx"
        assert is_context_whitelisted(SecurityCategory.SECRET_EXPOSURE, value, "", context) is False

    def test_config_template(self) -> None:
        """Test templated secrets in config files are suppressed."""
        context = classify_path("config/app.yaml")
        line = 'api_key: "{{ vault_api_key }}"'
        assert is_context_whitelisted(SecurityCategory.SECRET_EXPOSURE, "x" * 20, line, context) is True


class TestAdjustment:
    """Test severity, confidence, message and tag adjustment."""

    def test_no_context(self) -> None:
        """Test findings in plain source are unchanged apart from the ext tag."""
        adjustment = adjust_for_context(
            Severity.ERROR, 0.9, "msg", ["secret-exposure"], SecurityCategory.SECRET_EXPOSURE,
            classify_path("src/app.js"),
        )

        assert adjustment.severity is Severity.ERROR
        assert adjustment.confidence == 0.9
        assert adjustment.message == "msg"
        assert adjustment.tags == ["secret-exposure", "ext-js"]

    def test_test_file(self) -> None:
        """Test test files downgrade one step and lose 0.4 confidence."""
        adjustment = adjust_for_context(
            Severity.ERROR, 0.9, "msg", [], SecurityCategory.CODE_INJECTION, classify_path("tests/test_app.py")
        )

        assert adjustment.severity is Severity.WARNING
        assert adjustment.confidence == 0.5
        assert adjustment.message == "Found in test file: msg"
        assert "test-file" in adjustment.tags
        assert "ext-py" in adjustment.tags

    def test_documentation(self) -> None:
        """Test documentation drops to info with a 0.6 penalty."""
        adjustment = adjust_for_context(
            Severity.WARNING, 0.9, "msg", [], SecurityCategory.CODE_INJECTION, classify_path("docs/usage.md")
        )

        assert adjustment.severity is Severity.INFO
        assert adjustment.confidence == 0.3
        assert adjustment.message.startswith("Found in documentation: ")

    def test_config_downgrades_only_secrets(self) -> None:
        """Test config files soften secret severity but not other categories."""
        context = classify_path("config/app.yaml")

        secret = adjust_for_context(Severity.ERROR, 0.9, "msg", [], SecurityCategory.SECRET_EXPOSURE, context)
        cors = adjust_for_context(Severity.ERROR, 0.9, "msg", [], SecurityCategory.CONFIG_ERROR, context)

        assert secret.severity is Severity.WARNING
        assert cors.severity is Severity.ERROR
        assert secret.confidence == cors.confidence == 0.7
        assert cors.message == "Found in config file: msg"

    @pytest.mark.parametrize(
        "kind, expected",
        [(ContextKind.TEST, 0.3), (ContextKind.DOCUMENTATION, 0.2), (ContextKind.CONFIG, 0.5)],
    )
    def test_confidence_floor(self, kind: ContextKind, expected: float) -> None:
        """Test the confidence never drops below the context floor."""
        assert adjust_confidence(0.5, kind) == expected

    def test_severity_monotonic(self) -> None:
        """Test documentation is never more severe than test, nor test than no context."""
        for severity in Severity:
            doc = adjust_severity(severity, SecurityCategory.SQL_DANGER, ContextKind.DOCUMENTATION)
            test = adjust_severity(severity, SecurityCategory.SQL_DANGER, ContextKind.TEST)
            assert doc.rank <= test.rank <= severity.rank
