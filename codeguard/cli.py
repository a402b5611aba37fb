"""Command-line entry point: scan files and folders, list built-in rules."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from codeguard.analysis import AnalysisEngine, Finding, RuleEngine, sort_for_display
from codeguard.config import AnalysisSettings, language_from_path
from codeguard.core.exceptions import ConfigurationError, RuleLoadError
from codeguard.logging_config import configure_logging
from codeguard.rules import SecurityCategory, Severity, load_rules_file

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codeguard",
        description="Pattern-based security scanner for source files",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="Scan files or folders")
    scan_parser.add_argument("paths", nargs="+", help="Files or folders to scan")
    scan_parser.add_argument("--language", default=None, help="Force a language instead of detecting it")
    scan_parser.add_argument("--format", choices=["text", "json"], default="text")
    scan_parser.add_argument(
        "--min-severity",
        choices=[severity.value for severity in Severity],
        default=Severity.INFO.value,
        help="Hide findings below this severity",
    )
    scan_parser.add_argument("--log-level", default="WARNING")
    scan_parser.add_argument("--config", default=None, help="codeguard.toml or pyproject.toml with settings")
    scan_parser.add_argument("--rules", default=None, help="Extra rules file (TOML or JSON)")

    rules_parser = subparsers.add_parser("rules", help="List registered rules")
    rules_parser.add_argument(
        "--category",
        choices=[category.value for category in SecurityCategory],
        default=None,
    )
    rules_parser.add_argument("--rules", default=None, help="Extra rules file (TOML or JSON)")

    return parser


def _build_rule_engine(rules_path: str | None) -> RuleEngine:
    engine = RuleEngine.with_default_rules()
    if rules_path:
        engine.register_rules(load_rules_file(rules_path), rule_set="custom")
    return engine


def _iter_files(paths: list[str], settings: AnalysisSettings) -> list[tuple[Path, str]]:
    """Expand folders into (file, path relative to the scanned folder) pairs."""
    files: list[tuple[Path, str]] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for candidate in sorted(path.rglob("*")):
                relative = candidate.relative_to(path).as_posix()
                if candidate.is_file() and not settings.is_path_excluded(relative):
                    files.append((candidate, relative))
        elif path.is_file():
            files.append((path, path.as_posix()))
        else:
            logger.warning(f"Path not found: {raw}")
    return files


def _format_text(path: str, finding: Finding) -> str:
    location = finding.location
    return (
        f"{path}:{location.line + 1}:{location.column + 1}: "
        f"{finding.severity.value} [{finding.rule_id}] {finding.message}"
    )


def _scan(args: argparse.Namespace) -> int:
    settings = AnalysisSettings.from_file(args.config) if args.config else AnalysisSettings.from_env()
    engine = AnalysisEngine(_build_rule_engine(args.rules), settings=settings)
    min_rank = Severity(args.min_severity).rank

    report: list[dict[str, Any]] = []
    has_errors = False
    for file_path, path in _iter_files(args.paths, settings):
        language = args.language or language_from_path(str(file_path))
        if language is None:
            logger.debug(f"Skipping {file_path}: unknown language")
            continue
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read {file_path}: {e}")
            continue

        findings = [
            finding
            for finding in sort_for_display(engine.analyze(text, language, path))
            if finding.severity.rank >= min_rank
        ]
        if not findings:
            continue

        has_errors = has_errors or any(f.severity is Severity.ERROR for f in findings)
        if args.format == "json":
            report.append({"path": path, "language": language, "findings": [f.model_dump(mode="json") for f in findings]})
        else:
            for finding in findings:
                print(_format_text(path, finding))

    if args.format == "json":
        print(json.dumps(report, indent=2))

    engine.dispose()
    return 1 if has_errors else 0


def _list_rules(args: argparse.Namespace) -> int:
    engine = _build_rule_engine(args.rules)
    rules = engine.get_all_rules()
    if args.category:
        rules = engine.get_rules_by_category(SecurityCategory(args.category))

    for rule in rules:
        languages = ",".join(sorted(rule.languages))
        state = "" if rule.enabled else " (disabled)"
        print(f"{rule.id:<28} {rule.category.value:<16} {rule.severity.value:<8} {languages}{state}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(log_level=getattr(args, "log_level", "WARNING"))

    try:
        if args.command == "scan":
            return _scan(args)
        if args.command == "rules":
            return _list_rules(args)
    except (ConfigurationError, RuleLoadError) as e:
        print(f"codeguard: {e}", file=sys.stderr)
        return 2

    parser.error(f"Unsupported command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
