"""studynotes - lecture metadata and study-guide extraction for course notes."""

__version__ = "0.3.0"
