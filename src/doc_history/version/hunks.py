"""
Hunk building: groups an edit script into context-bounded hunks.

Long unchanged runs between, before and after changes are hidden. When
``collapse_unchanged`` is set, each hidden span is reported as an
:class:`ElidedRange` the caller can expand later.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .myers import EditKind, EditOp


class ChangeKind(Enum):
    """Classification of a line (or word segment) within a diff."""
    CONTEXT = "context"
    ADDED = "added"
    DELETED = "deleted"


@dataclass(frozen=True)
class WordDiff:
    """A run of tokens inside a modified line."""

    kind: ChangeKind
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "text": self.text}


@dataclass(frozen=True)
class Change:
    """One line of a hunk."""

    kind: ChangeKind
    text: str
    old_line_number: Optional[int] = None
    new_line_number: Optional[int] = None
    word_diff: Optional[Tuple[WordDiff, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: Dict[str, Any] = {
            "kind": self.kind.value,
            "text": self.text,
            "old_line_number": self.old_line_number,
            "new_line_number": self.new_line_number,
        }
        if self.word_diff is not None:
            data["word_diff"] = [w.to_dict() for w in self.word_diff]
        return data


@dataclass(frozen=True)
class Hunk:
    """A contiguous, context-bounded region of a diff."""

    old_start: int
    old_line_count: int
    new_start: int
    new_line_count: int
    changes: Tuple[Change, ...] = ()

    @property
    def header(self) -> str:
        return (
            f"@@ -{self.old_start},{self.old_line_count} "
            f"+{self.new_start},{self.new_line_count} @@"
        )

    def old_lines(self) -> List[str]:
        return [c.text for c in self.changes if c.kind is not ChangeKind.ADDED]

    def new_lines(self) -> List[str]:
        return [c.text for c in self.changes if c.kind is not ChangeKind.DELETED]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "old_start": self.old_start,
            "old_line_count": self.old_line_count,
            "new_start": self.new_start,
            "new_line_count": self.new_line_count,
            "header": self.header,
            "changes": [c.to_dict() for c in self.changes],
        }


@dataclass(frozen=True)
class ElidedRange:
    """
    Unchanged lines left out of the materialized hunks.

    ``hunk_index`` is the index of the hunk that follows the hidden span, or
    the number of hunks when the span trails the last one.
    """

    old_start: int
    new_start: int
    line_count: int
    hunk_index: int

    @property
    def old_end(self) -> int:
        return self.old_start + self.line_count - 1

    @property
    def new_end(self) -> int:
        return self.new_start + self.line_count - 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "old_start": self.old_start,
            "old_end": self.old_end,
            "new_start": self.new_start,
            "new_end": self.new_end,
            "line_count": self.line_count,
            "hunk_index": self.hunk_index,
        }


@dataclass
class HunkLayout:
    """Hunks plus the elided markers between them."""

    hunks: List[Hunk] = field(default_factory=list)
    elided: List[ElidedRange] = field(default_factory=list)


# Position of an op: (op, old lines consumed before it, new lines consumed before it)
_Placed = Tuple[EditOp, int, int]


def build_hunks(
    script: Sequence[EditOp],
    old_lines: Sequence[str],
    new_lines: Sequence[str],
    context_lines: int = 3,
    collapse_unchanged: bool = True,
) -> HunkLayout:
    """
    Group an edit script into hunks.

    An interior unchanged run shorter than ``2 * context_lines`` stays inside
    the surrounding hunk. A longer one ends the hunk after ``context_lines``
    lines and starts the next hunk ``context_lines`` lines before the next
    change; the lines in between are hidden.

    Args:
        script: Edit script from :func:`diff_sequences`
        old_lines: Lines of the old document
        new_lines: Lines of the new document
        context_lines: Unchanged lines kept around each change
        collapse_unchanged: Report hidden spans as elided markers; when False
            nothing is hidden and a changed document becomes a single hunk

    Returns:
        HunkLayout with hunks and elided markers in document order
    """
    if context_lines < 0:
        raise ValueError("context_lines must be non-negative")

    layout = HunkLayout()
    placed = _place(script)
    if all(op.kind is EditKind.EQUAL for op, _, _ in placed):
        return layout

    if not collapse_unchanged:
        layout.hunks.append(_make_hunk(placed, old_lines, new_lines))
        return layout

    runs = _split_runs(placed)
    current: List[_Placed] = []

    for index, (is_equal, ops) in enumerate(runs):
        if not is_equal:
            current.extend(ops)
            continue

        size = len(ops)
        if index == 0:
            keep = ops[max(size - context_lines, 0):] if context_lines else []
            _elide(layout, ops[:size - len(keep)])
            current = list(keep)
        elif index == len(runs) - 1:
            current.extend(ops[:context_lines])
            layout.hunks.append(_make_hunk(current, old_lines, new_lines))
            current = []
            _elide(layout, ops[context_lines:])
        elif size < 2 * context_lines:
            current.extend(ops)
        else:
            current.extend(ops[:context_lines])
            layout.hunks.append(_make_hunk(current, old_lines, new_lines))
            _elide(layout, ops[context_lines:size - context_lines])
            current = list(ops[size - context_lines:])

    if current:
        layout.hunks.append(_make_hunk(current, old_lines, new_lines))

    return layout


def materialize(
    script: Sequence[EditOp],
    old_lines: Sequence[str],
    new_lines: Sequence[str],
    old_start: int,
    old_end: int,
) -> List[Change]:
    """
    Changes for the old-side line range ``old_start..old_end`` (1-based, inclusive).

    Lines inserted between two lines of the range are included; insertions
    before its first line or after its last belong to the neighbouring span.
    """
    changes: List[Change] = []
    for op, old_pos, _ in _place(script):
        if op.kind is EditKind.INSERT:
            inside = old_start <= old_pos < old_end
        else:
            inside = old_start <= old_pos + 1 <= old_end
        if inside:
            changes.append(_make_change(op, old_lines, new_lines))
    return changes


def _place(script: Sequence[EditOp]) -> List[_Placed]:
    placed: List[_Placed] = []
    old_pos = new_pos = 0
    for op in script:
        placed.append((op, old_pos, new_pos))
        if op.kind is not EditKind.INSERT:
            old_pos += 1
        if op.kind is not EditKind.DELETE:
            new_pos += 1
    return placed


def _split_runs(placed: List[_Placed]) -> List[Tuple[bool, List[_Placed]]]:
    """Split into alternating runs of equal and non-equal operations."""
    runs: List[Tuple[bool, List[_Placed]]] = []
    for item in placed:
        is_equal = item[0].kind is EditKind.EQUAL
        if runs and runs[-1][0] == is_equal:
            runs[-1][1].append(item)
        else:
            runs.append((is_equal, [item]))
    return runs


def _elide(layout: HunkLayout, hidden: List[_Placed]) -> None:
    if not hidden:
        return
    _, old_pos, new_pos = hidden[0]
    layout.elided.append(ElidedRange(
        old_start=old_pos + 1,
        new_start=new_pos + 1,
        line_count=len(hidden),
        hunk_index=len(layout.hunks),
    ))


def _make_change(op: EditOp, old_lines: Sequence[str], new_lines: Sequence[str]) -> Change:
    if op.kind is EditKind.EQUAL:
        return Change(
            kind=ChangeKind.CONTEXT,
            text=old_lines[op.old_index],
            old_line_number=op.old_index + 1,
            new_line_number=op.new_index + 1,
        )
    if op.kind is EditKind.DELETE:
        return Change(
            kind=ChangeKind.DELETED,
            text=old_lines[op.old_index],
            old_line_number=op.old_index + 1,
        )
    return Change(
        kind=ChangeKind.ADDED,
        text=new_lines[op.new_index],
        new_line_number=op.new_index + 1,
    )


def _make_hunk(ops: List[_Placed], old_lines: Sequence[str], new_lines: Sequence[str]) -> Hunk:
    changes = tuple(_make_change(op, old_lines, new_lines) for op, _, _ in ops)
    old_count = sum(1 for c in changes if c.kind is not ChangeKind.ADDED)
    new_count = sum(1 for c in changes if c.kind is not ChangeKind.DELETED)
    _, old_pos, new_pos = ops[0]

    # An empty side starts at the line before the hunk, as in unified diffs.
    return Hunk(
        old_start=old_pos + 1 if old_count else old_pos,
        old_line_count=old_count,
        new_start=new_pos + 1 if new_count else new_pos,
        new_line_count=new_count,
        changes=changes,
    )
