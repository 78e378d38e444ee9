"""
Clock and identifier providers.

The store and history service take these as constructor arguments so tests can
supply deterministic timestamps and document ids.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import uuid4

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def system_clock() -> datetime:
    """Current UTC time."""
    return datetime.now(timezone.utc)


def uuid_factory() -> str:
    return str(uuid4())


class FixedClock:
    """Clock that starts at a fixed instant and advances by a step per call."""

    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + self.step
        return now


class SequentialIds:
    """Id factory producing ``prefix-1``, ``prefix-2``, ..."""

    def __init__(self, prefix: str = "doc"):
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}-{self.count}"
