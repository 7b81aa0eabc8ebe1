"""Domain models."""

from .todo import Todo

__all__ = ["Todo"]
