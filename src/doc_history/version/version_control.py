"""
Append-only version store with optimistic-concurrency commits.

Each document owns an ordered log of immutable versions. A commit succeeds only
when the caller's expected parent is still the head, so two writers racing on
the same head cannot both append.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from ..core.models import Snapshot, Version, VersionMetadata
from ..errors import ConflictError, InvalidInputError, NotFoundError

CommitListener = Callable[[Version], None]


class _DocumentLog:
    """Versions of one document; ``versions`` is replaced, never mutated."""

    def __init__(self, document_id: str, versions: Tuple[Version, ...] = ()):
        self.document_id = document_id
        self.lock = threading.Lock()
        self.versions: Tuple[Version, ...] = versions

    @property
    def head(self) -> Optional[int]:
        versions = self.versions
        return versions[-1].sequence if versions else None


class VersionStore:
    """
    Per-document ordered log of committed versions.

    Writes to one document are serialized by that document's lock; writes to
    different documents proceed in parallel. Reads take the current immutable
    tuple and never wait on writers.
    """

    def __init__(self, storage_path: Optional[Path] = None):
        self.storage_path = Path(storage_path) if storage_path else None
        self.logger = logging.getLogger(__name__)

        self._logs: Dict[str, _DocumentLog] = {}
        self._logs_lock = threading.Lock()
        self._listeners: List[CommitListener] = []

        if self.storage_path is not None:
            self.storage_path.mkdir(parents=True, exist_ok=True)
            self._load_logs()

    def commit(
        self,
        document_id: str,
        snapshot: Snapshot,
        expected_parent_sequence: Optional[int],
        actor: str,
    ) -> Version:
        """
        Append a new version if ``expected_parent_sequence`` is the current head.

        Args:
            document_id: Document to append to (created on its first commit)
            snapshot: Content to store
            expected_parent_sequence: Head the caller built on, None for a new document
            actor: Who performs the commit

        Returns:
            The committed Version

        Raises:
            ConflictError: if the head moved
            InvalidInputError: if the arguments are malformed
        """
        if not isinstance(snapshot, Snapshot):
            raise InvalidInputError(f"Expected a Snapshot, got {type(snapshot).__name__}")
        if not isinstance(document_id, str) or not document_id:
            raise InvalidInputError("document_id must be a non-empty string")

        log = self._log_for_write(document_id)
        with log.lock:
            head = log.head
            if head != expected_parent_sequence:
                self.logger.info(
                    f"Rejected commit on {document_id}: expected parent "
                    f"{expected_parent_sequence}, head is {head}"
                )
                raise ConflictError(document_id, expected_parent_sequence, head)

            version = Version(
                document_id=document_id,
                sequence=(head or 0) + 1,
                snapshot=snapshot,
                parent_sequence=head,
                committed_by=actor,
            )
            # Persist before publishing so a failed write leaves the store as it was.
            if self.storage_path is not None:
                self._append_to_log(version)
            log.versions = log.versions + (version,)

        self.logger.info(f"Committed {document_id} version {version.sequence} by {actor}")
        self._notify(version)
        return version

    def get(self, document_id: str, sequence: int) -> Version:
        """Get one version; raises NotFoundError if it does not exist."""
        versions = self._versions(document_id)
        if not isinstance(sequence, int) or not 1 <= sequence <= len(versions):
            raise NotFoundError(f"Version {sequence} of document {document_id} not found")
        return versions[sequence - 1]

    def list(self, document_id: str) -> List[VersionMetadata]:
        """Metadata of every version, oldest first."""
        return [v.summary() for v in self._versions(document_id)]

    def head(self, document_id: str) -> Optional[int]:
        """Current head sequence, or None for an unknown document."""
        log = self._logs.get(document_id)
        return log.head if log else None

    def documents(self) -> List[str]:
        return sorted(doc_id for doc_id, log in self._logs.items() if log.versions)

    def subscribe(self, listener: CommitListener) -> Callable[[], None]:
        """
        Register a callback fired after every successful commit.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _versions(self, document_id: str) -> Tuple[Version, ...]:
        log = self._logs.get(document_id)
        if log is None or not log.versions:
            raise NotFoundError(f"Document {document_id} not found")
        return log.versions

    def _log_for_write(self, document_id: str) -> _DocumentLog:
        log = self._logs.get(document_id)
        if log is None:
            with self._logs_lock:
                log = self._logs.setdefault(document_id, _DocumentLog(document_id))
        return log

    def _notify(self, version: Version) -> None:
        for listener in list(self._listeners):
            try:
                listener(version)
            except Exception as e:
                self.logger.error(f"Commit listener failed for {version.document_id}: {e}", exc_info=True)

    def _log_file(self, document_id: str) -> Path:
        digest = hashlib.sha256(document_id.encode()).hexdigest()[:32]
        return self.storage_path / f"{digest}.jsonl"

    def _append_to_log(self, version: Version) -> None:
        """Append one version as a JSON line; a failed write is rolled back."""
        line = (json.dumps(version.to_dict()) + "\n").encode("utf-8")
        with open(self._log_file(version.document_id), "ab") as f:
            start = f.tell()
            try:
                f.write(line)
                f.flush()
                os.fsync(f.fileno())
            except OSError:
                f.truncate(start)
                raise

    def _load_logs(self) -> None:
        """Load every document log found under the storage path."""
        for log_file in sorted(self.storage_path.glob("*.jsonl")):
            try:
                with open(log_file, "r", encoding="utf-8") as f:
                    versions = tuple(Version.from_dict(json.loads(line)) for line in f if line.strip())
            except (json.JSONDecodeError, KeyError, TypeError, InvalidInputError) as e:
                self.logger.warning(f"Skipping unreadable version log {log_file}: {e}")
                continue
            if not versions:
                continue

            document_id = versions[0].document_id
            expected = list(range(1, len(versions) + 1))
            if [v.sequence for v in versions] != expected:
                self.logger.warning(f"Skipping version log {log_file}: sequence has gaps")
                continue
            if any(v.document_id != document_id for v in versions):
                self.logger.warning(f"Skipping version log {log_file}: mixed document ids")
                continue

            self._logs[document_id] = _DocumentLog(document_id, versions)
            self.logger.debug(f"Loaded {len(versions)} versions of {document_id}")
