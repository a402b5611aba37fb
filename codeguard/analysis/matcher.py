"""
Line-based pattern matching.

Rules are applied one line at a time. Matching never spans a line break,
which keeps offset arithmetic trivial and bounds the cost of a bad pattern
to a single line.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from ..rules.models import MatchMode, Rule


@dataclass(frozen=True)
class RawMatch:
    """A pattern match before whitelisting and assembly.

    Attributes:
        line: 0-based line index.
        column: 0-based column within the line.
        length: Length of the matched text.
        text: The matched substring.
        line_text: The full line containing the match.
        start_offset: Absolute offset of the match within the buffer.
        end_offset: Absolute offset just past the match.
        match: Underlying regex match, used to materialize fixes.
    """

    line: int
    column: int
    length: int
    text: str
    line_text: str
    start_offset: int
    end_offset: int
    match: re.Match[str]


def iter_line_matches(pattern: re.Pattern[str], line: str, mode: MatchMode) -> Iterator[re.Match[str]]:
    """Yield non-overlapping matches of ``pattern`` in ``line``.

    The search position is threaded explicitly through the loop. A
    zero-width match advances the position by one so the loop always
    terminates.
    """
    pos = 0
    while pos <= len(line):
        match = pattern.search(line, pos)
        if match is None:
            return
        yield match
        if mode is MatchMode.FIRST:
            return
        pos = match.end() if match.end() > match.start() else match.end() + 1


def find_matches(rule: Rule, text: str) -> list[RawMatch]:
    """Run a rule's pattern over every line of ``text``.

    Lines are split on ``"\\n"`` only. The absolute offset of a match is the
    sum of the preceding line lengths plus one newline each, plus its column.
    """
    matches: list[RawMatch] = []
    line_start = 0
    for line_index, line in enumerate(text.split("\n")):
        for match in iter_line_matches(rule.pattern, line, rule.match_mode):
            column = match.start()
            matched = match.group(0)
            matches.append(
                RawMatch(
                    line=line_index,
                    column=column,
                    length=len(matched),
                    text=matched,
                    line_text=line,
                    start_offset=line_start + column,
                    end_offset=line_start + column + len(matched),
                    match=match,
                )
            )
        line_start += len(line) + 1
    return matches
