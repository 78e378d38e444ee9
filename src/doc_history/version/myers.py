"""
Myers shortest-edit-script diff over sequences of hashable items.

Used at line level for document comparison and at token level for word
refinement. Runs in O((N + M) * D) time and O(D * D) memory, D being the
edit distance.

Ties between equal-cost scripts are broken the same way every time:

1. the longest common prefix and suffix are matched up front,
2. equal runs are extended greedily forward along each diagonal,
3. inside every maximal block of changes, deletes come before inserts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Hashable, List, Optional, Sequence, Tuple

from ..errors import ComparisonCancelled, SizeExceededError


class EditKind(Enum):
    """Operations in an edit script."""
    EQUAL = "equal"
    DELETE = "delete"
    INSERT = "insert"


@dataclass(frozen=True)
class EditOp:
    """One step of an edit script; indices are 0-based."""

    kind: EditKind
    old_index: Optional[int] = None
    new_index: Optional[int] = None


CancelCheck = Callable[[], bool]


def diff_sequences(
    old: Sequence[Hashable],
    new: Sequence[Hashable],
    should_cancel: Optional[CancelCheck] = None,
    max_edit_distance: Optional[int] = None,
) -> List[EditOp]:
    """
    Compute a minimal edit script turning ``old`` into ``new``.

    Every old element appears exactly once as EQUAL or DELETE and every new
    element exactly once as EQUAL or INSERT. Neither input is modified.
    Memory grows with the square of the edit distance, which
    ``max_edit_distance`` caps.

    Args:
        old: Original sequence
        new: Target sequence
        should_cancel: Polled once per edit-distance round
        max_edit_distance: Give up once more edits than this are needed

    Returns:
        Ordered list of EditOp

    Raises:
        ComparisonCancelled: if ``should_cancel`` returned True
        SizeExceededError: if the edit distance is over ``max_edit_distance``
    """
    n, m = len(old), len(new)

    prefix = 0
    while prefix < n and prefix < m and old[prefix] == new[prefix]:
        prefix += 1

    suffix = 0
    while (
        suffix < n - prefix
        and suffix < m - prefix
        and old[n - 1 - suffix] == new[m - 1 - suffix]
    ):
        suffix += 1

    script = [EditOp(EditKind.EQUAL, i, i) for i in range(prefix)]

    middle = _shortest_edit(
        old[prefix:n - suffix], new[prefix:m - suffix], should_cancel, max_edit_distance
    )
    for kind, x, y in middle:
        script.append(EditOp(
            kind,
            None if x is None else x + prefix,
            None if y is None else y + prefix,
        ))

    for i in range(suffix):
        script.append(EditOp(EditKind.EQUAL, n - suffix + i, m - suffix + i))

    return _deletes_first(script)


def _shortest_edit(
    a: Sequence[Hashable],
    b: Sequence[Hashable],
    should_cancel: Optional[CancelCheck],
    max_edit_distance: Optional[int],
) -> List[Tuple[EditKind, Optional[int], Optional[int]]]:
    n, m = len(a), len(b)
    if (n == 0 or m == 0) and max_edit_distance is not None and n + m > max_edit_distance:
        raise SizeExceededError(max_edit_distance, n + m, "edits")
    if n == 0:
        return [(EditKind.INSERT, None, j) for j in range(m)]
    if m == 0:
        return [(EditKind.DELETE, i, None) for i in range(n)]

    max_d = n + m
    if max_edit_distance is not None:
        max_d = min(max_d, max_edit_distance)
    offset = max_d + 1
    v = [0] * (2 * max_d + 3)
    # trace[d] holds the frontier before round d, for diagonals -d..d only.
    trace: List[List[int]] = []

    for d in range(max_d + 1):
        if should_cancel is not None and should_cancel():
            raise ComparisonCancelled("Comparison cancelled")

        trace.append(v[offset - d:offset + d + 1])
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                x = v[offset + k + 1]
            else:
                x = v[offset + k - 1] + 1
            y = x - k

            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1

            v[offset + k] = x
            if x >= n and y >= m:
                return _backtrack(trace, n, m)

    raise SizeExceededError(max_d, max_d + 1, "edits")


def _backtrack(
    trace: List[List[int]], n: int, m: int
) -> List[Tuple[EditKind, Optional[int], Optional[int]]]:
    """Walk the recorded frontiers from (n, m) back to the origin."""
    x, y = n, m
    steps: List[Tuple[EditKind, Optional[int], Optional[int]]] = []

    for d in range(len(trace) - 1, 0, -1):
        v = trace[d]
        k = x - y

        if k == -d or (k != d and v[d + k - 1] < v[d + k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1

        prev_x = v[d + prev_k]
        prev_y = prev_x - prev_k

        while x > prev_x and y > prev_y:
            steps.append((EditKind.EQUAL, x - 1, y - 1))
            x -= 1
            y -= 1

        if x == prev_x:
            steps.append((EditKind.INSERT, None, prev_y))
        else:
            steps.append((EditKind.DELETE, prev_x, None))
        x, y = prev_x, prev_y

    # The first snake, before any edit.
    while x > 0 and y > 0:
        steps.append((EditKind.EQUAL, x - 1, y - 1))
        x -= 1
        y -= 1

    steps.reverse()
    return steps


def _deletes_first(script: List[EditOp]) -> List[EditOp]:
    """Reorder each maximal change block so its deletes precede its inserts."""
    result: List[EditOp] = []
    deletes: List[EditOp] = []
    inserts: List[EditOp] = []

    for op in script:
        if op.kind is EditKind.EQUAL:
            result.extend(deletes)
            result.extend(inserts)
            deletes, inserts = [], []
            result.append(op)
        elif op.kind is EditKind.DELETE:
            deletes.append(op)
        else:
            inserts.append(op)

    result.extend(deletes)
    result.extend(inserts)
    return result
