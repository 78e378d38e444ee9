"""
doc-history: version history and structural diffs for text documents.
"""

from .core.models import Snapshot, Version, VersionMetadata
from .errors import (
    ComparisonCancelled,
    ConflictError,
    DocHistoryError,
    InvalidInputError,
    NotFoundError,
    SizeExceededError,
)
from .history import VersionHistory
from .version.diff_engine import DiffOptions, DiffResult
from .version.version_control import VersionStore

__version__ = "0.1.0"

__all__ = [
    "Snapshot",
    "Version",
    "VersionMetadata",
    "ComparisonCancelled",
    "ConflictError",
    "DocHistoryError",
    "InvalidInputError",
    "NotFoundError",
    "SizeExceededError",
    "VersionHistory",
    "DiffOptions",
    "DiffResult",
    "VersionStore",
]
