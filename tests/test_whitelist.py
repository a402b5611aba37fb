"""Tests for the whitelist predicate chain."""

import pytest

from codeguard.analysis.file_context import NO_CONTEXT, classify_path
from codeguard.analysis.whitelist import (
    DEFAULT_PREDICATES,
    WhitelistFilter,
    comment_whitelisted,
    env_reference_whitelisted,
    file_context_whitelisted,
    interpolation_whitelisted,
    placeholder_whitelisted,
    rule_whitelisted,
)
from codeguard.core.exceptions import WhitelistPatternError
from codeguard.rules import SecurityCategory, Severity, make_rule
from codeguard.rules.definitions.code_injection import INNERHTML_RULE
from codeguard.rules.definitions.secrets import GENERIC_API_KEY_RULE, OPENAI_API_KEY_RULE
from codeguard.rules.definitions.sql import DELETE_NO_WHERE_RULE


class TestEnvReferenceWhitelist:
    """Test environment-variable reference detection."""

    @pytest.mark.parametrize(
        "line",
        [
            "const k = process.env.API_KEY;",
            "const k = import.meta.env.VITE_KEY;",
            "api_key = os.environ['API_KEY']",
            "token = os.getenv('TOKEN')",
            "key = ENV['SECRET_KEY']",
            "password: ${{ secrets.DB_PASSWORD }}",
            'export TOKEN="${GITHUB_TOKEN}"',
            'String k = System.getenv("KEY");',
            'k := os.Getenv("KEY")',
            "$env:API_KEY",
            "headers: { Authorization: config.apiToken }",
        ],
    )
    def test_env_references(self, line: str) -> None:
        """Test lines that read from the environment are whitelisted."""
        assert env_reference_whitelisted(line, "", GENERIC_API_KEY_RULE, NO_CONTEXT) is True

    @pytest.mark.parametrize(
        "line",
        [
            'const apiKey = "sk-proj-abc";',
            "const message = `Hello ${name}`;",
            "price = total * 2",
        ],
    )
    def test_non_env_lines(self, line: str) -> None:
        """Test ordinary lines are not mistaken for env references."""
        assert env_reference_whitelisted(line, "", GENERIC_API_KEY_RULE, NO_CONTEXT) is False


class TestCommentWhitelist:
    """Test comment detection."""

    @pytest.mark.parametrize(
        "line",
        [
            "// const key = 'abc'",
            "# password = 'hunter22'",
            "-- DELETE FROM users;",
            "  * @param token the token",
            "/* eval(code) */",
            "<!-- innerHTML = x -->",
            "```js",
            "| API_KEY | sk-proj-xyz |",
            "eval(code)  // eslint-disable-line",
            "x = eval(y)  # noqa",
        ],
    )
    def test_comment_lines(self, line: str) -> None:
        """Test comments, fences, tables and lint markers are whitelisted."""
        assert comment_whitelisted(line, "", GENERIC_API_KEY_RULE, NO_CONTEXT) is True

    def test_code_line(self) -> None:
        """Test a plain code line is not a comment."""
        assert comment_whitelisted("eval(code);", "eval(", GENERIC_API_KEY_RULE, NO_CONTEXT) is False

    def test_next_line_marker_does_not_suppress_its_own_line(self) -> None:
        """Test eslint-disable-next-line only targets the following line."""
        line = "eval(code); /* eslint-disable-next-line */"
        assert comment_whitelisted(line, "eval(", GENERIC_API_KEY_RULE, NO_CONTEXT) is False


class TestInterpolationWhitelist:
    """Test template and interpolation detection."""

    def test_interpolation_suppresses_non_injection_rules(self) -> None:
        """Test any interpolation whitelists secret rules."""
        line = "const url = `${baseUrl}/api`;"
        assert interpolation_whitelisted(line, "", GENERIC_API_KEY_RULE, NO_CONTEXT) is True

    def test_safe_identifier_whitelists_injection_rule(self, danger_rule) -> None:
        """Test a plain identifier interpolation away from the sink is considered safe."""
        line = "const label = `${prefix}-x`; danger(label)"
        assert interpolation_whitelisted(line, "danger(", danger_rule, NO_CONTEXT) is True

    @pytest.mark.parametrize(
        "line",
        [
            "danger(`ls ${directory}`)",
            "danger( `ls ${directory}`)",
            'danger(f"ls {directory}")',
            'danger("ls {}".format(directory))',
            "danger('ls %s' % directory)",
        ],
    )
    def test_template_passed_to_sink_is_kept(self, line: str, danger_rule) -> None:
        """Test a template handed straight to the sink is reported even over safe names."""
        assert interpolation_whitelisted(line, "danger(", danger_rule, NO_CONTEXT) is False

    def test_template_inside_match_is_kept(self) -> None:
        """Test an interpolation inside the matched assignment is not whitelisted."""
        line = "el.innerHTML = `<b>${html}</b>`;"
        match_text = ".innerHTML = `<b>${html}</b>`"
        assert interpolation_whitelisted(line, match_text, INNERHTML_RULE, NO_CONTEXT) is False

    @pytest.mark.parametrize(
        "line",
        [
            "danger(`rm ${formData.filename}`)",
            "danger(`ls ${req.body.cmd}`)",
            'danger(f"{user_input}")',
            "danger(`x ${a + b}`)",
        ],
    )
    def test_untrusted_interpolation_keeps_injection_findings(self, line: str, danger_rule) -> None:
        """Test request-like or computed expressions are not whitelisted for injection rules."""
        assert interpolation_whitelisted(line, "danger(", danger_rule, NO_CONTEXT) is False

    def test_no_interpolation(self, danger_rule) -> None:
        """Test lines without interpolation are left alone."""
        assert interpolation_whitelisted("danger(x)", "danger(", danger_rule, NO_CONTEXT) is False

    def test_mustache_is_not_interpolation(self) -> None:
        """Test template braces stay visible to template rules."""
        line = "<p>{{ userInput }}</p>"
        assert interpolation_whitelisted(line, "", GENERIC_API_KEY_RULE, NO_CONTEXT) is False


class TestPlaceholderWhitelist:
    """Test placeholder and low-diversity detection."""

    def test_placeholder_value(self) -> None:
        """Test a your_password style value is whitelisted."""
        text = 'password = "your_password_here"'
        assert placeholder_whitelisted(text, text, GENERIC_API_KEY_RULE, NO_CONTEXT) is True

    def test_low_diversity_generic_secret(self) -> None:
        """Test repeated-character secrets are treated as placeholders."""
        assert placeholder_whitelisted("", "aaaaaaaaaaaaaaaa", GENERIC_API_KEY_RULE, NO_CONTEXT) is True

    def test_short_text_is_not_low_diversity(self) -> None:
        """Test the entropy proxy ignores short matches."""
        assert placeholder_whitelisted("", "aaaaaaaa", GENERIC_API_KEY_RULE, NO_CONTEXT) is False

    def test_vendor_format_exempt_from_low_diversity(self) -> None:
        """Test vendor-anchored tokens are not dismissed for repeated characters."""
        value = "sk-proj-" + "A" * 40
        line = f'const apiKey = "{value}";'
        assert placeholder_whitelisted(line, value, OPENAI_API_KEY_RULE, NO_CONTEXT) is False

    def test_line_indicator_applies_to_secret_rules(self) -> None:
        """Test a TODO on the line whitelists a secret match."""
        line = 'token = "abcd1234efgh" // TODO rotate'
        assert placeholder_whitelisted(line, 'token = "abcd1234efgh"', GENERIC_API_KEY_RULE, NO_CONTEXT) is True

    def test_line_indicator_ignored_for_injection_rules(self, danger_rule) -> None:
        """Test a TODO elsewhere on the line does not hide an injection sink."""
        assert placeholder_whitelisted("danger(x) // TODO", "danger(", danger_rule, NO_CONTEXT) is False


class TestRuleWhitelist:
    """Test rule-specific whitelist patterns."""

    def test_matches_line(self) -> None:
        """Test a rule pattern matching the line whitelists it."""
        line = "DELETE FROM test_users;"
        assert rule_whitelisted(line, line, DELETE_NO_WHERE_RULE, NO_CONTEXT) is True

    def test_no_match(self) -> None:
        """Test an unrelated line passes."""
        line = "DELETE FROM users;"
        assert rule_whitelisted(line, line, DELETE_NO_WHERE_RULE, NO_CONTEXT) is False

    def test_invalid_pattern_raises(self) -> None:
        """Test a malformed whitelist regex raises WhitelistPatternError."""
        rule = make_rule(
            "TEST_BAD_WHITELIST",
            SecurityCategory.CODE_INJECTION,
            Severity.ERROR,
            r"danger",
            "bad whitelist",
            whitelist=("(unclosed",),
        )
        with pytest.raises(WhitelistPatternError) as exc_info:
            rule_whitelisted("danger", "danger", rule, NO_CONTEXT)

        assert exc_info.value.rule_id == "TEST_BAD_WHITELIST"
        assert exc_info.value.pattern == "(unclosed"


class TestFileContextWhitelist:
    """Test the file-context predicate."""

    def test_sql_in_documentation(self) -> None:
        """Test SQL findings are suppressed in documentation."""
        line = "DELETE FROM users;"
        context = classify_path("docs/schema.md")
        assert file_context_whitelisted(line, line, DELETE_NO_WHERE_RULE, context) is True

    def test_sql_in_source(self) -> None:
        """Test SQL findings are kept in regular source files."""
        line = "DELETE FROM users;"
        context = classify_path("src/db.sql")
        assert file_context_whitelisted(line, line, DELETE_NO_WHERE_RULE, context) is False


class TestWhitelistFilter:
    """Test the ordered predicate chain."""

    def test_default_chain_order(self) -> None:
        """Test the default chain runs file context first and placeholders last."""
        names = [p.__name__ for p in DEFAULT_PREDICATES]
        assert names == [
            "file_context_whitelisted",
            "rule_whitelisted",
            "env_reference_whitelisted",
            "comment_whitelisted",
            "interpolation_whitelisted",
            "placeholder_whitelisted",
        ]

    def test_short_circuits_on_first_hit(self, danger_rule) -> None:
        """Test predicates after the first hit are not evaluated."""
        calls = []

        def first(line, match_text, rule, context):
            calls.append("first")
            return True

        def second(line, match_text, rule, context):
            calls.append("second")
            return True

        whitelist = WhitelistFilter([first, second])
        assert whitelist.is_whitelisted("danger()", "danger(", danger_rule, NO_CONTEXT) is True
        assert calls == ["first"]

    def test_not_whitelisted(self, danger_rule) -> None:
        """Test a plain sink call passes the default chain."""
        whitelist = WhitelistFilter()
        assert whitelist.is_whitelisted("danger(x);", "danger(", danger_rule, NO_CONTEXT) is False
