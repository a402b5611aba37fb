"""
Logging configuration for analysis events.

This module provides structured JSON logging for analysis passes, including
rule failures, timeouts, cache activity, and incremental fallbacks.
"""

import json
import logging
from logging.handlers import TimedRotatingFileHandler
from typing import Any

ANALYSIS_LOGGER_NAME = "codeguard"


class AnalysisEventFormatter(logging.Formatter):
    """Custom formatter for analysis event logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log records with structured data."""
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "event"):
            log_entry["event"] = record.event

        # Where the event happened
        for field in ["rule_id", "language", "path", "buffer"]:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        # Pass outcome
        for field in ["duration_ms", "findings", "changed_ratio", "cache_size"]:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if hasattr(record, "error"):
            log_entry["error"] = record.error

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def configure_logging(
    log_file: str | None = None,
    log_level: str = "INFO",
    enable_console: bool = True,
) -> None:
    """
    Configure logging for the analysis pipeline.

    Args:
        log_file: Path to log file for analysis events (optional)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_console: Whether to also log to console
    """
    logger = logging.getLogger(ANALYSIS_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.propagate = False

    logger.handlers.clear()

    formatter = AnalysisEventFormatter()

    if log_file:
        # Rotate daily, keep a week
        file_handler = TimedRotatingFileHandler(
            log_file,
            when="D",
            interval=1,
            backupCount=7,
            encoding="utf-8",
            utc=False,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)


def get_analysis_logger() -> logging.Logger:
    """Get the configured analysis logger."""
    return logging.getLogger(ANALYSIS_LOGGER_NAME)
