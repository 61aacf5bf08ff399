"""Input file adapters."""

from .file_reader import FileReader, load_table

__all__ = ["FileReader", "load_table"]
