"""
Word-level refinement of modified lines.

A block of deleted lines next to a block of added lines is read as a set of
modified lines. Lines are paired by position and each pair gets a token-level
diff so renderers can highlight what changed inside the line.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import List, Tuple

from .hunks import ChangeKind, Hunk, WordDiff
from .myers import EditKind, diff_sequences

# A token is a maximal run of word characters or of non-word characters.
_TOKEN_RE = re.compile(r"\w+|\W+")

# Blocks whose sizes differ by more than this factor are not read as edits.
_MAX_PAIR_RATIO = 2


def tokenize(line: str) -> List[str]:
    return _TOKEN_RE.findall(line)


def word_diff(old_line: str, new_line: str) -> Tuple[WordDiff, ...]:
    """
    Token-level diff of two lines.

    Consecutive tokens of the same kind are merged into one segment. The
    result always starts with a context segment, empty when the lines share
    no leading tokens.
    """
    old_tokens = tokenize(old_line)
    new_tokens = tokenize(new_line)

    segments: List[WordDiff] = []
    for op in diff_sequences(old_tokens, new_tokens):
        if op.kind is EditKind.EQUAL:
            kind, text = ChangeKind.CONTEXT, old_tokens[op.old_index]
        elif op.kind is EditKind.DELETE:
            kind, text = ChangeKind.DELETED, old_tokens[op.old_index]
        else:
            kind, text = ChangeKind.ADDED, new_tokens[op.new_index]

        if segments and segments[-1].kind is kind:
            segments[-1] = WordDiff(kind, segments[-1].text + text)
        else:
            segments.append(WordDiff(kind, text))

    if not segments or segments[0].kind is not ChangeKind.CONTEXT:
        segments.insert(0, WordDiff(ChangeKind.CONTEXT, ""))

    return tuple(segments)


def refine_hunk(hunk: Hunk) -> Hunk:
    """Attach word diffs to the deleted/added line pairs of each comparably sized block."""
    changes = list(hunk.changes)
    index = 0

    while index < len(changes):
        if changes[index].kind is ChangeKind.CONTEXT:
            index += 1
            continue

        end = index
        while end < len(changes) and changes[end].kind is not ChangeKind.CONTEXT:
            end += 1

        deleted = [i for i in range(index, end) if changes[i].kind is ChangeKind.DELETED]
        added = [i for i in range(index, end) if changes[i].kind is ChangeKind.ADDED]

        if not _comparable(len(deleted), len(added)):
            index = end
            continue

        for old_pos, new_pos in zip(deleted, added):
            words = word_diff(changes[old_pos].text, changes[new_pos].text)
            changes[old_pos] = replace(changes[old_pos], word_diff=words)
            changes[new_pos] = replace(changes[new_pos], word_diff=words)

        index = end

    return replace(hunk, changes=tuple(changes))


def _comparable(deleted: int, added: int) -> bool:
    return bool(deleted and added) and max(deleted, added) <= _MAX_PAIR_RATIO * min(deleted, added)


def refine_hunks(hunks: List[Hunk]) -> List[Hunk]:
    return [refine_hunk(h) for h in hunks]
