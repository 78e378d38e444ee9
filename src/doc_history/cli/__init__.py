"""
Command-line interface for doc-history.
"""

from .app import app

__all__ = ["app"]
