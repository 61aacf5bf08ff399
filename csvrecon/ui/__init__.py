"""Terminal rendering."""

from .display import ResultDisplay, display_header, paginate

__all__ = ["ResultDisplay", "display_header", "paginate"]
