"""
Asynchronous comparison scheduling.

Comparisons are CPU bound, so they run in a thread pool. Requests are keyed
(for example by UI view); a new request under a key supersedes the one still
in flight, whose result is discarded.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

from ..errors import ComparisonCancelled
from .diff_engine import DiffOptions, DiffResult

if TYPE_CHECKING:
    from ..history import VersionHistory


@dataclass
class _InFlight:
    cancel_event: threading.Event
    future: asyncio.Future


class ComparisonScheduler:
    """Runs comparisons on a worker pool with supersede-by-key cancellation."""

    def __init__(self, history: VersionHistory, max_workers: int = 4):
        self.history = history
        self.logger = logging.getLogger(__name__)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="compare")
        self._in_flight: Dict[str, _InFlight] = {}

    async def submit(
        self,
        key: str,
        document_id: str,
        seq_a: int,
        seq_b: int,
        options: Optional[DiffOptions] = None,
    ) -> DiffResult:
        """
        Compare two versions in the worker pool.

        Any comparison still running under ``key`` is cancelled first.

        Raises:
            ComparisonCancelled: if this request is superseded or cancelled
        """
        self.cancel(key)

        cancel_event = threading.Event()
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(
            self._executor,
            functools.partial(
                self.history.compare_versions,
                document_id,
                seq_a,
                seq_b,
                options,
                should_cancel=cancel_event.is_set,
            ),
        )
        entry = _InFlight(cancel_event, future)
        self._in_flight[key] = entry

        try:
            result = await future
            if cancel_event.is_set():
                raise ComparisonCancelled(f"Comparison {key} was superseded")
            return result
        except asyncio.CancelledError:
            if cancel_event.is_set():
                raise ComparisonCancelled(f"Comparison {key} was superseded") from None
            raise
        finally:
            if self._in_flight.get(key) is entry:
                del self._in_flight[key]

    def cancel(self, key: str) -> bool:
        """Cancel the in-flight comparison under ``key``; True if there was one."""
        entry = self._in_flight.pop(key, None)
        if entry is None:
            return False

        entry.cancel_event.set()
        entry.future.cancel()
        self.logger.debug(f"Cancelled comparison {key}")
        return True

    def shutdown(self) -> None:
        for key in list(self._in_flight):
            self.cancel(key)
        self._executor.shutdown(wait=False)
