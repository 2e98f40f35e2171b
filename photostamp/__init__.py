"""Template-based batch photo compositing."""

__version__ = "0.1.0"
