"""Tests for line-based pattern matching."""

import re

from codeguard.analysis.matcher import find_matches, iter_line_matches
from codeguard.rules import MatchMode, SecurityCategory, Severity, make_rule


def _rule(pattern: str, match_mode: MatchMode = MatchMode.GLOBAL):
    return make_rule(
        "TEST_MATCH",
        SecurityCategory.CODE_INJECTION,
        Severity.WARNING,
        pattern,
        "match",
        match_mode=match_mode,
    )


class TestFindMatches:
    """Test find_matches over whole buffers."""

    def test_global_collects_every_match_per_line(self) -> None:
        """Test global mode reports all non-overlapping matches."""
        matches = find_matches(_rule(r"ab"), "ab ab\nxx ab")

        assert [(m.line, m.column) for m in matches] == [(0, 0), (0, 3), (1, 3)]
        assert all(m.length == 2 and m.text == "ab" for m in matches)

    def test_first_mode_stops_after_first_match_per_line(self) -> None:
        """Test first mode reports at most one match per line."""
        matches = find_matches(_rule(r"ab", MatchMode.FIRST), "ab ab\nab ab ab")

        assert [(m.line, m.column) for m in matches] == [(0, 0), (1, 0)]

    def test_absolute_offsets(self) -> None:
        """Test offsets sum the previous line lengths plus one newline each."""
        matches = find_matches(_rule(r"ab"), "ab ab\nxx ab")

        assert [m.start_offset for m in matches] == [0, 3, 9]
        assert [m.end_offset for m in matches] == [2, 5, 11]

    def test_carriage_return_stays_in_line(self) -> None:
        """Test CRLF buffers keep the CR as part of the line."""
        matches = find_matches(_rule(r"b"), "a\r\nb")

        assert len(matches) == 1
        assert matches[0].line == 1
        assert matches[0].start_offset == 3
        assert matches[0].line_text == "b"

    def test_no_match(self) -> None:
        """Test a buffer without matches yields nothing."""
        assert find_matches(_rule(r"zzz"), "abc\ndef") == []

    def test_patterns_do_not_span_lines(self) -> None:
        """Test a pattern split by a line break is not detected."""
        assert find_matches(_rule(r"DELETE\s+FROM"), "DELETE\nFROM users") == []

    def test_match_object_is_kept(self) -> None:
        """Test the underlying regex match is available for fixes."""
        matches = find_matches(_rule(r"(\w+)=(\w+)"), "key=value")

        assert matches[0].match.group(2) == "value"


class TestIterLineMatches:
    """Test the per-line match loop."""

    def test_zero_width_matches_terminate(self) -> None:
        """Test an empty-matching pattern advances and terminates."""
        matches = list(iter_line_matches(re.compile(r"x*"), "ab", MatchMode.GLOBAL))

        assert [m.start() for m in matches] == [0, 1, 2]
        assert all(m.group(0) == "" for m in matches)

    def test_matches_are_non_overlapping(self) -> None:
        """Test the search resumes at the end of the previous match."""
        matches = list(iter_line_matches(re.compile(r"aa"), "aaaa", MatchMode.GLOBAL))

        assert [m.start() for m in matches] == [0, 2]
