"""
Version history service.

Ties the version store and the diff engine together behind the operations
callers use: committing, listing, comparing, restoring and expanding elided
ranges.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .config import DocHistoryConfig
from .core.models import Snapshot, Version, VersionMetadata
from .core.providers import Clock, IdFactory, system_clock, uuid_factory
from .errors import InvalidInputError
from .version.diff_engine import DiffEngine, DiffOptions, DiffResult
from .version.hunks import Change
from .version.myers import CancelCheck
from .version.scheduler import ComparisonScheduler
from .version.version_control import CommitListener, VersionStore


class VersionHistory:
    """
    Entry point for document history operations.

    ``compare_versions`` and ``expand_elided_range`` only read from the store,
    so they may run concurrently from worker threads.
    """

    def __init__(
        self,
        store: Optional[VersionStore] = None,
        engine: Optional[DiffEngine] = None,
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
        default_options: Optional[DiffOptions] = None,
        compare_workers: int = 4,
    ):
        self.store = store or VersionStore()
        self.engine = engine or DiffEngine()
        self.clock = clock or system_clock
        self.id_factory = id_factory or uuid_factory
        self.default_options = default_options or DiffOptions()
        self.compare_workers = compare_workers
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: DocHistoryConfig, **kwargs: Any) -> VersionHistory:
        """Build a history service from loaded configuration."""
        storage_path = config.store.storage_path
        return cls(
            store=VersionStore(Path(storage_path) if storage_path else None),
            engine=DiffEngine(
                max_lines=config.diff.max_lines,
                max_bytes=config.diff.max_bytes,
                max_edit_distance=config.diff.max_edit_distance,
            ),
            default_options=DiffOptions(
                context_lines=config.diff.context_lines,
                word_diff=config.diff.word_diff,
                collapse_unchanged=config.diff.collapse_unchanged,
            ),
            compare_workers=config.diff.compare_workers,
            **kwargs,
        )

    def create_scheduler(self) -> ComparisonScheduler:
        """Worker pool for asynchronous, cancellable comparisons."""
        return ComparisonScheduler(self, max_workers=self.compare_workers)

    def new_snapshot(
        self,
        content: Any,
        author: str = "",
        message: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Snapshot:
        """Create a snapshot stamped with this service's clock."""
        return Snapshot.create(content, author=author, message=message, metadata=metadata, clock=self.clock)

    def commit_version(
        self,
        document_id: str,
        snapshot: Snapshot,
        expected_parent_sequence: Optional[int],
        actor: str,
    ) -> Version:
        return self.store.commit(document_id, snapshot, expected_parent_sequence, actor)

    def create_document(self, snapshot: Snapshot, actor: str) -> Version:
        """Commit the first version of a document under a freshly generated id."""
        return self.store.commit(self.id_factory(), snapshot, None, actor)

    def list_versions(self, document_id: str) -> List[VersionMetadata]:
        return self.store.list(document_id)

    def get_version(self, document_id: str, sequence: int) -> Version:
        return self.store.get(document_id, sequence)

    def head(self, document_id: str) -> Optional[int]:
        return self.store.head(document_id)

    def subscribe(self, listener: CommitListener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    def compare_versions(
        self,
        document_id: str,
        seq_a: int,
        seq_b: int,
        options: Optional[DiffOptions] = None,
        should_cancel: Optional[CancelCheck] = None,
    ) -> DiffResult:
        """
        Diff two versions of a document.

        The lower sequence is always the old side, whatever the argument
        order. Comparing a version with itself yields no hunks.

        Raises:
            NotFoundError: if either version is missing
            SizeExceededError: if either version is too large to diff
            ComparisonCancelled: if ``should_cancel`` fires mid-diff
        """
        old_seq, new_seq = sorted((seq_a, seq_b))
        old_version = self.store.get(document_id, old_seq)
        new_version = self.store.get(document_id, new_seq)

        return self.engine.diff_contents(
            old_version.content,
            new_version.content,
            old_seq=old_seq,
            new_seq=new_seq,
            options=options or self.default_options,
            should_cancel=should_cancel,
        )

    def expand_elided_range(
        self,
        document_id: str,
        seq_a: int,
        seq_b: int,
        range_start: int,
        range_end: int,
    ) -> List[Change]:
        """
        Materialize an elided span of a comparison.

        ``range_start`` and ``range_end`` are 1-based, inclusive old-side line
        numbers, as reported by an ElidedRange.
        """
        old_seq, new_seq = sorted((seq_a, seq_b))
        old_version = self.store.get(document_id, old_seq)
        new_version = self.store.get(document_id, new_seq)
        return self.engine.expand_range(old_version.content, new_version.content, range_start, range_end)

    def restore_version(
        self,
        document_id: str,
        target_sequence: int,
        actor: str,
        expected_head_sequence: Optional[int] = None,
    ) -> Version:
        """
        Append a new version whose content equals ``target_sequence``'s.

        Existing versions are never touched. When ``expected_head_sequence`` is
        given, the restore only succeeds if the head is still that version;
        otherwise it builds on the head observed at call time.

        Raises:
            NotFoundError: if the target version does not exist
            ConflictError: if another commit moved the head first
        """
        target = self.store.get(document_id, target_sequence)
        if expected_head_sequence is not None and not isinstance(expected_head_sequence, int):
            raise InvalidInputError("expected_head_sequence must be an integer")

        parent = expected_head_sequence if expected_head_sequence is not None else self.store.head(document_id)
        snapshot = Snapshot.create(
            target.content,
            author=actor,
            message=f"Restore version {target_sequence}",
            metadata=target.snapshot.metadata,
            clock=self.clock,
        )

        version = self.store.commit(document_id, snapshot, parent, actor)
        self.logger.info(f"Restored {document_id} version {target_sequence} as version {version.sequence}")
        return version
