"""
Core document representation: snapshots, versions and line normalization.
"""

from .models import Snapshot, Version, VersionMetadata
from .providers import FixedClock, SequentialIds, system_clock, uuid_factory
from .text import NormalizedText, normalize

__all__ = [
    "Snapshot",
    "Version",
    "VersionMetadata",
    "FixedClock",
    "SequentialIds",
    "system_clock",
    "uuid_factory",
    "NormalizedText",
    "normalize",
]
