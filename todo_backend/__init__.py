"""REST backend for a todo list with pluggable storage."""

__version__ = "1.0.0"
