"""
Structured logging utility.
Single responsibility: provide consistent logging across application.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
import json


LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARN": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


class StructuredLogger:
    """
    Structured logger for consistent application logging.
    """

    def __init__(self, name: str = "csvrecon",
                 log_file: Optional[Path] = None,
                 min_level: str = "INFO"):
        """
        Initialize logger.

        Args:
            name: Logger name
            log_file: Optional file path for logging
            min_level: Lowest level written to the console
        """
        self.name = name
        self.log_file = log_file
        self.set_level(min_level)

    def set_level(self, level: str):
        """
        Change the minimum console level.

        Raises:
            ValueError: If the level name is unknown
        """
        level = level.upper()
        if level == "WARNING":
            level = "WARN"
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        self.min_level = level

    def _format_message(self, level: str, message: str,
                       **kwargs) -> Dict[str, Any]:
        """
        Format log message with metadata.

        Args:
            level: Log level (INFO, DEBUG, ERROR, etc.)
            message: Log message
            **kwargs: Additional context fields

        Returns:
            Formatted log entry
        """
        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "logger": self.name,
            "message": message
        }

        if kwargs:
            entry["context"] = kwargs

        return entry

    def _output(self, entry: Dict[str, Any]):
        """
        Output log entry to console and optionally file.

        Args:
            entry: Log entry dictionary
        """
        level = entry["level"]

        # Console output - human readable
        if LEVELS[level] >= LEVELS[self.min_level]:
            timestamp = entry["timestamp"].split("T")[1][:8]
            msg = entry["message"]

            print(f"[{timestamp}] {level:5} | {msg}", file=sys.stderr)

            if "context" in entry:
                for key, value in entry["context"].items():
                    print(f"  {key}={value}", file=sys.stderr)

        # File output - JSON for parsing, every level
        if self.log_file:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")

    def _log(self, level: str, message: str, **kwargs):
        entry = self._format_message(level, message, **kwargs)
        self._output(entry)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._log("INFO", message, **kwargs)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._log("DEBUG", message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._log("WARN", message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message."""
        self._log("ERROR", message, **kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self._log("CRITICAL", message, **kwargs)


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "csvrecon") -> StructuredLogger:
    """
    Get or create logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    global _logger
    if _logger is None:
        _logger = StructuredLogger(name)
    return _logger


def configure_logging(level: str = "INFO",
                      log_file: Optional[Path] = None) -> StructuredLogger:
    """
    Configure the shared logger in place.

    Modules bind ``logger = get_logger()`` at import time, so the global
    instance is updated rather than replaced.

    Args:
        level: Minimum console level
        log_file: Optional JSON-lines log file

    Returns:
        The shared logger
    """
    logger = get_logger()
    logger.set_level(level)
    logger.log_file = Path(log_file) if log_file else None
    return logger
