"""Utility functions and helpers."""

from .logger import get_logger, configure_logging, StructuredLogger
from .converters import (
    to_text,
    normalize_value,
    is_blank
)

__all__ = [
    "get_logger",
    "configure_logging",
    "StructuredLogger",
    "to_text",
    "normalize_value",
    "is_blank",
]
