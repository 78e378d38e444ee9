from doc_history.version.hunks import Change, ChangeKind, Hunk, WordDiff
from doc_history.version.word_diff import refine_hunk, tokenize, word_diff

C, A, D = ChangeKind.CONTEXT, ChangeKind.ADDED, ChangeKind.DELETED


def test_tokenize_splits_word_and_non_word_runs():
    assert tokenize("hello, world") == ["hello", ", ", "world"]
    assert tokenize("  a") == ["  ", "a"]
    assert tokenize("") == []


def test_single_word_change_starts_with_empty_context():
    assert word_diff("b", "x") == (WordDiff(C, ""), WordDiff(D, "b"), WordDiff(A, "x"))


def test_middle_word_change():
    assert word_diff("the quick fox", "the slow fox") == (
        WordDiff(C, "the "),
        WordDiff(D, "quick"),
        WordDiff(A, "slow"),
        WordDiff(C, " fox"),
    )


def test_whitespace_change_stays_visible():
    assert word_diff("a b", "a  b") == (
        WordDiff(C, "a"),
        WordDiff(D, " "),
        WordDiff(A, "  "),
        WordDiff(C, "b"),
    )


def test_appended_words():
    assert word_diff("one", "one two") == (WordDiff(C, "one"), WordDiff(A, " two"))


def _hunk(*changes):
    return Hunk(old_start=1, old_line_count=0, new_start=1, new_line_count=0, changes=tuple(changes))


def test_refine_pairs_lines_by_position():
    hunk = _hunk(
        Change(C, "a", 1, 1),
        Change(D, "b one", 2),
        Change(D, "c", 3),
        Change(A, "b two", new_line_number=2),
        Change(C, "d", 4, 3),
    )
    refined = refine_hunk(hunk)
    context_a, deleted_b, deleted_c, added_b, context_d = refined.changes

    expected = (WordDiff(C, "b "), WordDiff(D, "one"), WordDiff(A, "two"))
    assert deleted_b.word_diff == expected
    assert added_b.word_diff == expected
    assert deleted_c.word_diff is None
    assert context_a.word_diff is None
    assert context_d.word_diff is None


def test_refine_leaves_unpaired_blocks_alone():
    hunk = _hunk(Change(C, "a", 1, 1), Change(A, "new", new_line_number=2))
    assert refine_hunk(hunk) == hunk


def test_refine_handles_insert_before_delete():
    hunk = _hunk(Change(A, "x", new_line_number=1), Change(D, "y", 1))
    refined = refine_hunk(hunk)
    assert all(c.word_diff is not None for c in refined.changes)


def test_refine_skips_blocks_of_very_different_size():
    hunk = _hunk(
        Change(D, "one", 1),
        Change(A, "two", new_line_number=1),
        Change(A, "three", new_line_number=2),
        Change(A, "four", new_line_number=3),
    )
    assert all(c.word_diff is None for c in refine_hunk(hunk).changes)


def test_refine_pairs_blocks_within_twice_the_size():
    hunk = _hunk(
        Change(D, "one", 1),
        Change(A, "one!", new_line_number=1),
        Change(A, "two", new_line_number=2),
    )
    first_deleted, first_added, second_added = refine_hunk(hunk).changes
    assert first_deleted.word_diff == first_added.word_diff
    assert first_deleted.word_diff is not None
    assert second_added.word_diff is None
