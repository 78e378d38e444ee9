"""
Document versioning and change tracking modules.
"""

from .version_control import VersionStore
from .diff_engine import DiffEngine, DiffOptions, DiffResult, DiffStats
from .hunks import Change, ChangeKind, ElidedRange, Hunk, WordDiff
from .myers import EditKind, EditOp, diff_sequences
from .scheduler import ComparisonScheduler

__all__ = [
    "VersionStore",
    "DiffEngine",
    "DiffOptions",
    "DiffResult",
    "DiffStats",
    "Change",
    "ChangeKind",
    "ElidedRange",
    "Hunk",
    "WordDiff",
    "EditKind",
    "EditOp",
    "diff_sequences",
    "ComparisonScheduler",
]
