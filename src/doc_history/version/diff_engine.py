"""
Diff engine for comparing two document snapshots.

Runs line normalization, the Myers line diff, word-level refinement and hunk
building, and packages the outcome as a :class:`DiffResult`. The engine holds
no mutable state, so one instance can serve concurrent comparisons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..core.text import NormalizedText, normalize
from ..errors import InvalidInputError, SizeExceededError
from .hunks import Change, ChangeKind, ElidedRange, Hunk, build_hunks, materialize
from .myers import CancelCheck, EditKind, EditOp, diff_sequences
from .word_diff import refine_hunks

DEFAULT_MAX_LINES = 20_000
DEFAULT_MAX_BYTES = 2_000_000
DEFAULT_MAX_EDIT_DISTANCE = 2_000


@dataclass(frozen=True)
class DiffOptions:
    """Caller options for a comparison."""

    context_lines: int = 3
    word_diff: bool = True
    collapse_unchanged: bool = True


@dataclass(frozen=True)
class DiffStats:
    """Line counts for a diff."""

    additions: int = 0
    deletions: int = 0

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions

    def to_dict(self) -> Dict[str, int]:
        return {
            "additions": self.additions,
            "deletions": self.deletions,
            "total_changes": self.total_changes,
        }


@dataclass
class DiffResult:
    """The complete diff between an old and a new version."""

    old_version_seq: Optional[int]
    new_version_seq: Optional[int]
    hunks: List[Hunk] = field(default_factory=list)
    stats: DiffStats = field(default_factory=DiffStats)
    elided: List[ElidedRange] = field(default_factory=list)
    old_trailing_newline: bool = False
    new_trailing_newline: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.hunks

    def change_indices(self) -> List[Tuple[int, int]]:
        """(hunk index, change index) of every added or deleted line, for navigation."""
        return [
            (hunk_index, change_index)
            for hunk_index, hunk in enumerate(self.hunks)
            for change_index, change in enumerate(hunk.changes)
            if change.kind is not ChangeKind.CONTEXT
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "old_version_seq": self.old_version_seq,
            "new_version_seq": self.new_version_seq,
            "hunks": [h.to_dict() for h in self.hunks],
            "stats": self.stats.to_dict(),
            "elided": [e.to_dict() for e in self.elided],
            "old_trailing_newline": self.old_trailing_newline,
            "new_trailing_newline": self.new_trailing_newline,
        }


class DiffEngine:
    """
    Engine for calculating line and word level diffs between snapshots.

    Inputs larger than ``max_lines`` lines or ``max_bytes`` UTF-8 bytes are
    rejected before the algorithm runs. Pairs needing more than
    ``max_edit_distance`` line edits are abandoned once the search passes it.
    """

    def __init__(
        self,
        max_lines: int = DEFAULT_MAX_LINES,
        max_bytes: int = DEFAULT_MAX_BYTES,
        max_edit_distance: int = DEFAULT_MAX_EDIT_DISTANCE,
    ):
        self.max_lines = max_lines
        self.max_bytes = max_bytes
        self.max_edit_distance = max_edit_distance
        self.logger = logging.getLogger(__name__)

    def diff_contents(
        self,
        old_content: str,
        new_content: str,
        old_seq: Optional[int] = None,
        new_seq: Optional[int] = None,
        options: Optional[DiffOptions] = None,
        should_cancel: Optional[CancelCheck] = None,
    ) -> DiffResult:
        """
        Calculate the diff from ``old_content`` to ``new_content``.

        Args:
            old_content: Text of the old snapshot
            new_content: Text of the new snapshot
            old_seq: Sequence number recorded as the old side
            new_seq: Sequence number recorded as the new side
            options: Context, word diff and elision settings
            should_cancel: Polled while the diff runs

        Returns:
            DiffResult with hunks, stats and elided markers

        Raises:
            InvalidInputError: on non-text content or negative context
            SizeExceededError: when either side is over the size bound
            ComparisonCancelled: when ``should_cancel`` fires
        """
        options = options or DiffOptions()
        if options.context_lines < 0:
            raise InvalidInputError("context_lines must be non-negative")

        old_text, new_text = self._prepare(old_content), self._prepare(new_content)
        script = self._diff_lines(old_text, new_text, should_cancel)

        layout = build_hunks(
            script,
            old_text.lines,
            new_text.lines,
            context_lines=options.context_lines,
            collapse_unchanged=options.collapse_unchanged,
        )
        hunks = refine_hunks(layout.hunks) if options.word_diff else layout.hunks

        stats = DiffStats(
            additions=sum(1 for op in script if op.kind is EditKind.INSERT),
            deletions=sum(1 for op in script if op.kind is EditKind.DELETE),
        )
        self.logger.debug(
            f"Diffed {old_seq} -> {new_seq}: {len(hunks)} hunks, "
            f"+{stats.additions} -{stats.deletions}"
        )

        return DiffResult(
            old_version_seq=old_seq,
            new_version_seq=new_seq,
            hunks=hunks,
            stats=stats,
            elided=layout.elided,
            old_trailing_newline=old_text.trailing_newline,
            new_trailing_newline=new_text.trailing_newline,
        )

    def expand_range(
        self,
        old_content: str,
        new_content: str,
        range_start: int,
        range_end: int,
    ) -> List[Change]:
        """
        Materialize the changes for an old-side line range, typically an
        elided span reported by :meth:`diff_contents`.
        """
        old_text, new_text = self._prepare(old_content), self._prepare(new_content)
        if range_start < 1 or range_end < range_start or range_end > len(old_text):
            raise InvalidInputError(
                f"Invalid range {range_start}-{range_end} for a document of {len(old_text)} lines"
            )

        script = self._diff_lines(old_text, new_text)
        return materialize(script, old_text.lines, new_text.lines, range_start, range_end)

    def _prepare(self, content: str) -> NormalizedText:
        text = normalize(content)
        if len(text) > self.max_lines:
            self.logger.warning(f"Refusing to diff {len(text)} lines (limit {self.max_lines})")
            raise SizeExceededError(self.max_lines, len(text), "lines")

        size = len(content.encode("utf-8"))
        if size > self.max_bytes:
            self.logger.warning(f"Refusing to diff {size} bytes (limit {self.max_bytes})")
            raise SizeExceededError(self.max_bytes, size, "bytes")

        return text

    def _diff_lines(
        self,
        old_text: NormalizedText,
        new_text: NormalizedText,
        should_cancel: Optional[CancelCheck] = None,
    ) -> List[EditOp]:
        try:
            return diff_sequences(
                old_text.lines, new_text.lines, should_cancel, max_edit_distance=self.max_edit_distance
            )
        except SizeExceededError:
            self.logger.warning(f"Refusing to diff: more than {self.max_edit_distance} line edits")
            raise

    def summarize_changes(self, diff: DiffResult) -> Dict[str, Any]:
        """
        Generate a human-readable summary of changes.

        Args:
            diff: DiffResult to summarize

        Returns:
            Dictionary with change summary
        """
        summary: Dict[str, Any] = {
            "overview": (
                f"Found {diff.stats.total_changes} changed lines in {len(diff.hunks)} hunks "
                f"between versions {diff.old_version_seq} and {diff.new_version_seq}"
            ),
            "content_changes": [],
            "hidden_lines": sum(e.line_count for e in diff.elided),
        }

        if diff.stats.additions:
            summary["content_changes"].append(f"Added {diff.stats.additions} lines")
        if diff.stats.deletions:
            summary["content_changes"].append(f"Removed {diff.stats.deletions} lines")

        modified = sum(
            1 for h in diff.hunks for c in h.changes
            if c.kind is ChangeKind.ADDED and c.word_diff is not None
        )
        if modified:
            summary["content_changes"].append(f"Modified {modified} lines")

        if diff.old_trailing_newline != diff.new_trailing_newline:
            summary["content_changes"].append("Changed newline at end of document")

        return summary
