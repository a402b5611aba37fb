"""
Analysis engine: validated, cached, time-boxed analysis passes.

Wraps a RuleEngine with input validation, the result cache, the timeout
guard and incremental re-analysis of edited regions. No exception escapes
the public ``analyze*`` methods; the worst outcome of a failed pass is an
empty result.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any

from ..config import AnalysisSettings
from ..core.cache import ResultCache
from ..core.exceptions import AnalysisTimeoutError, BufferTooLargeError, IncrementalAnalysisError
from .engine import RuleEngine
from .models import Finding, TextEdit, sort_for_display

logger = logging.getLogger(__name__)


class BufferState(str, Enum):
    """Per-buffer analysis state."""

    CLEAN = "clean"
    DIRTY = "dirty"
    REANALYZING = "reanalyzing"


def deduplicate(findings: Iterable[Finding]) -> list[Finding]:
    """Drop findings sharing (rule_id, line, column, message), keeping the first."""
    seen: set[tuple[str, int, int, str]] = set()
    unique = []
    for finding in findings:
        key = finding.dedup_key
        if key not in seen:
            seen.add(key)
            unique.append(finding)
    return unique


def _line_starts(lines: list[str]) -> list[int]:
    starts = []
    offset = 0
    for line in lines:
        starts.append(offset)
        offset += len(line) + 1
    return starts


class AnalysisEngine:
    """Runs analysis passes for editor buffers."""

    def __init__(
        self,
        rule_engine: RuleEngine | None = None,
        settings: AnalysisSettings | None = None,
        cache: ResultCache | None = None,
    ):
        """Initialize the analysis engine.

        Args:
            rule_engine: Rule engine to run (built-in rules if omitted)
            settings: Analysis settings (defaults if omitted)
            cache: Result cache (sized from settings if omitted)
        """
        self.rule_engine = rule_engine or RuleEngine.with_default_rules()
        self.settings = settings or AnalysisSettings()
        self.cache = cache or ResultCache(
            max_entries=self.settings.cache_max_entries,
            ttl_seconds=self.settings.cache_ttl_seconds,
        )
        self._buffer_states: dict[str, BufferState] = {}
        self._disposed = False

    @staticmethod
    def buffer_identity(language: str, path: str | None = None) -> str:
        return path or f"text-{language}"

    def get_buffer_state(self, identity: str) -> BufferState:
        return self._buffer_states.get(identity, BufferState.CLEAN)

    # =========================================================================
    # Input validation
    # =========================================================================

    def _accepts(self, text: str, language: str, path: str | None) -> bool:
        if self._disposed or not self.settings.enabled:
            return False
        if not text or not text.strip():
            return False
        if not self.settings.is_language_supported(language):
            logger.debug(f"Language {language} is not supported, skipping")
            return False
        if self.settings.is_path_excluded(path):
            logger.debug(f"{path} is in an excluded folder, skipping")
            return False
        return True

    def _check_size(self, text: str, identity: str) -> None:
        size = len(text.encode("utf-8"))
        limit = self.settings.max_file_size
        if size > limit:
            raise BufferTooLargeError(
                f"Buffer too large for analysis: {identity} ({size} bytes, limit {limit})",
                size=size,
                limit=limit,
            )

    # =========================================================================
    # Passes
    # =========================================================================

    def _reportable(self, finding: Finding) -> bool:
        return finding.rule_id not in self.settings.disabled_rules and self.settings.severity_enabled(
            finding.severity
        )

    def _scan(self, text: str, language: str, path: str | None) -> list[Finding]:
        findings = self.rule_engine.execute_rules(text, language, path)
        return [finding for finding in findings if self._reportable(finding)]

    def _scan_with_timeout(self, text: str, language: str, path: str | None) -> list[Finding]:
        if not self.settings.enable_timeout:
            return self._scan(text, language, path)

        timeout = self.settings.analysis_timeout
        # The worker is not cancelled on timeout; regex matching cannot be interrupted
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="codeguard-analysis")
        try:
            future = executor.submit(self._scan, text, language, path)
            try:
                return future.result(timeout=timeout)
            except concurrent.futures.TimeoutError as e:
                raise AnalysisTimeoutError(f"Analysis exceeded {timeout}s", timeout=timeout) from e
        finally:
            executor.shutdown(wait=False)

    def _log_failure(self, error: Exception, identity: str, language: str) -> None:
        extra: dict[str, Any] = {"buffer": identity, "language": language, "error": str(error)}
        if isinstance(error, BufferTooLargeError):
            logger.warning(str(error), extra={**extra, "event": "buffer_too_large"})
        elif isinstance(error, AnalysisTimeoutError):
            logger.warning(f"Analysis timed out for {identity}: {error}", extra={**extra, "event": "timeout"})
        else:
            logger.error(
                f"Analysis failed for {identity}: {error}",
                exc_info=True,
                extra={**extra, "event": "analysis_failed"},
            )

    def analyze(self, text: str, language: str, path: str | None = None) -> list[Finding]:
        """Analyze a whole buffer.

        Args:
            text: Buffer content
            language: Language identifier
            path: Optional path, used for file-context classification and
                as the buffer identity

        Returns:
            Findings for the buffer, or an empty list when the buffer is
            rejected or the pass fails.
        """
        if not self._accepts(text, language, path):
            return []

        identity = self.buffer_identity(language, path)
        try:
            self._check_size(text, identity)

            key = ResultCache.make_key(identity, text)
            found, cached = self.cache.get(key)
            if found:
                logger.debug(f"Cache hit for {identity}")
                return cached

            start = time.perf_counter()
            findings = self._scan_with_timeout(text, language, path)
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
        except Exception as e:
            self._log_failure(e, identity, language)
            return []

        self.cache.set(key, findings)
        logger.info(
            f"Analyzed {identity}: {len(findings)} findings in {duration_ms}ms",
            extra={
                "event": "analysis_completed",
                "buffer": identity,
                "language": language,
                "findings": len(findings),
                "duration_ms": duration_ms,
                "cache_size": len(self.cache),
            },
        )
        return findings

    async def analyze_async(self, text: str, language: str, path: str | None = None) -> list[Finding]:
        """Awaitable version of :meth:`analyze`; the scan runs in the default executor."""
        if not self._accepts(text, language, path):
            return []

        identity = self.buffer_identity(language, path)
        try:
            self._check_size(text, identity)

            key = ResultCache.make_key(identity, text)
            found, cached = self.cache.get(key)
            if found:
                return cached

            loop = asyncio.get_running_loop()
            scan = loop.run_in_executor(None, self._scan, text, language, path)
            if self.settings.enable_timeout:
                timeout = self.settings.analysis_timeout
                try:
                    findings = await asyncio.wait_for(scan, timeout=timeout)
                except asyncio.TimeoutError as e:
                    raise AnalysisTimeoutError(f"Analysis exceeded {timeout}s", timeout=timeout) from e
            else:
                findings = await scan
        except Exception as e:
            self._log_failure(e, identity, language)
            return []

        self.cache.set(key, findings)
        return findings

    # =========================================================================
    # Incremental analysis
    # =========================================================================

    def _full_rescan(self, identity: str, text: str, language: str, path: str | None) -> list[Finding]:
        self._buffer_states[identity] = BufferState.REANALYZING
        try:
            return self.analyze(text, language, path)
        finally:
            self._buffer_states[identity] = BufferState.CLEAN

    def _merge_edits(
        self,
        previous_findings: list[Finding],
        edits: list[TextEdit],
        full_text: str,
        language: str,
        path: str | None,
    ) -> list[Finding]:
        lines = full_text.split("\n")
        last_line = len(lines) - 1
        line_starts = _line_starts(lines)

        # Walk the edits top-down. Coordinates above the current edit are final;
        # everything below is moved by the accumulated line delta.
        carried = list(previous_findings)
        edited_ranges: list[tuple[int, int]] = []
        line_shift = 0
        for edit in sorted(edits, key=lambda e: (e.start_line, e.start_col)):
            if (edit.end_line, edit.end_col) < (edit.start_line, edit.start_col):
                raise IncrementalAnalysisError(f"Edit range ends before it starts: {edit}")

            old_start = edit.start_line + line_shift
            old_end = edit.end_line + line_shift
            new_end = old_start + edit.inserted_line_count - 1
            if edited_ranges and old_start < edited_ranges[-1][1]:
                raise IncrementalAnalysisError("Overlapping edits in one batch")
            if new_end > last_line:
                raise IncrementalAnalysisError("Edit extends past the end of the buffer")

            delta = edit.line_delta
            kept = []
            for finding in carried:
                line = finding.location.line
                if old_start <= line <= old_end:
                    continue
                kept.append(finding.relocated(line_delta=delta) if line > old_end else finding)
            carried = kept
            edited_ranges.append((old_start, new_end))
            line_shift += delta

        merged = []
        for finding in carried:
            line = finding.location.line
            if line > last_line:
                raise IncrementalAnalysisError(f"Finding {finding.id} lies past the end of the buffer")
            offset = line_starts[line] + finding.location.column
            merged.append(finding.relocated(offset_delta=offset - finding.location.start_offset))

        context = self.settings.context_lines
        for start, end in edited_ranges:
            region_start = max(0, start - context)
            region_end = min(last_line, end + context)
            region_text = "\n".join(lines[region_start : region_end + 1])
            for finding in self._scan_with_timeout(region_text, language, path):
                line = finding.location.line + region_start
                if start <= line <= end:
                    merged.append(
                        finding.relocated(line_delta=region_start, offset_delta=line_starts[region_start])
                    )

        return sort_for_display(deduplicate(merged))

    def analyze_incremental(
        self,
        previous_findings: list[Finding],
        edits: list[TextEdit],
        full_text: str,
        language: str,
        path: str | None = None,
    ) -> list[Finding]:
        """Re-analyze only the regions touched by an edit batch.

        Args:
            previous_findings: Findings for the buffer before the edits
            edits: Edits, with positions in the pre-edit buffer
            full_text: Buffer content after the edits
            language: Language identifier
            path: Optional path of the buffer

        Returns:
            Findings for the post-edit buffer. A batch that changes at least
            ``incremental_threshold`` of the buffer, or any failure while
            merging, produces a full re-scan instead.
        """
        if not self._accepts(full_text, language, path):
            return []

        identity = self.buffer_identity(language, path)
        if not edits:
            return sort_for_display(deduplicate(previous_findings))

        self._buffer_states[identity] = BufferState.DIRTY
        try:
            self._check_size(full_text, identity)

            changed = sum(edit.changed_length() for edit in edits)
            ratio = changed / max(len(full_text), 1)
            if ratio >= self.settings.incremental_threshold:
                logger.info(
                    f"Extensive changes in {identity} ({ratio:.0%}), performing full analysis",
                    extra={"event": "incremental_fallback", "buffer": identity, "changed_ratio": round(ratio, 4)},
                )
                return self._full_rescan(identity, full_text, language, path)

            self._buffer_states[identity] = BufferState.REANALYZING
            findings = self._merge_edits(previous_findings, edits, full_text, language, path)
        except BufferTooLargeError as e:
            self._buffer_states[identity] = BufferState.CLEAN
            self._log_failure(e, identity, language)
            return []
        except Exception as e:
            logger.warning(
                f"Incremental analysis failed for {identity}, falling back to full analysis: {e}",
                exc_info=True,
                extra={"event": "incremental_fallback", "buffer": identity, "error": str(e)},
            )
            return self._full_rescan(identity, full_text, language, path)

        self._buffer_states[identity] = BufferState.CLEAN
        self.cache.set(ResultCache.make_key(identity, full_text), findings)
        logger.debug(f"Incremental analysis of {identity}: {len(findings)} findings after {len(edits)} edits")
        return findings

    # =========================================================================
    # Housekeeping
    # =========================================================================

    def clear_cache(self) -> None:
        self.cache.clear()

    def get_cache_stats(self) -> dict[str, int | float]:
        return self.cache.stats()

    def dispose(self) -> None:
        """Release cached state. Later calls return no findings."""
        self.cache.clear()
        self._buffer_states.clear()
        self._disposed = True
