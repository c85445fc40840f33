"""Command line interface for the book catalog."""

from .commands import app

__all__ = ["app"]
