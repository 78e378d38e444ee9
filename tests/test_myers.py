import random

import pytest

from doc_history.errors import ComparisonCancelled, SizeExceededError
from doc_history.version.myers import EditKind, EditOp, diff_sequences


def _apply(script, old, new):
    """Rebuild (old, new) from a script to check it covers both sides."""
    rebuilt_old = [old[op.old_index] for op in script if op.kind is not EditKind.INSERT]
    rebuilt_new = [new[op.new_index] for op in script if op.kind is not EditKind.DELETE]
    return rebuilt_old, rebuilt_new


def _edit_count(script):
    return sum(1 for op in script if op.kind is not EditKind.EQUAL)


def _lcs_length(a, b):
    table = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for i in range(len(a) - 1, -1, -1):
        for j in range(len(b) - 1, -1, -1):
            if a[i] == b[j]:
                table[i][j] = table[i + 1][j + 1] + 1
            else:
                table[i][j] = max(table[i + 1][j], table[i][j + 1])
    return table[0][0]


def test_identical_sequences_are_all_equal():
    lines = ["a", "b", "c"]
    script = diff_sequences(lines, list(lines))
    assert script == [EditOp(EditKind.EQUAL, i, i) for i in range(3)]


def test_disjoint_sequences_delete_then_insert():
    script = diff_sequences(["a", "b"], ["c", "d"])
    assert script == [
        EditOp(EditKind.DELETE, 0, None),
        EditOp(EditKind.DELETE, 1, None),
        EditOp(EditKind.INSERT, None, 0),
        EditOp(EditKind.INSERT, None, 1),
    ]


def test_empty_sides():
    assert diff_sequences([], []) == []
    assert diff_sequences([], ["x"]) == [EditOp(EditKind.INSERT, None, 0)]
    assert diff_sequences(["x"], []) == [EditOp(EditKind.DELETE, 0, None)]


def test_single_replacement():
    script = diff_sequences(["a", "b", "c"], ["a", "x", "c"])
    assert [op.kind for op in script] == [
        EditKind.EQUAL, EditKind.DELETE, EditKind.INSERT, EditKind.EQUAL,
    ]


def test_classic_example_is_minimal():
    old, new = list("ABCABBA"), list("CBABAC")
    script = diff_sequences(old, new)

    assert _edit_count(script) == 5
    assert _apply(script, old, new) == (old, new)


def test_matches_earliest_prefix():
    script = diff_sequences(["a", "b", "a"], ["a"])
    assert script == [
        EditOp(EditKind.EQUAL, 0, 0),
        EditOp(EditKind.DELETE, 1, None),
        EditOp(EditKind.DELETE, 2, None),
    ]


def test_deletes_precede_inserts_in_each_block():
    script = diff_sequences(list("axbyc"), list("apbqc"))
    kinds = [op.kind for op in script]
    for before, after in zip(kinds, kinds[1:]):
        assert not (before is EditKind.INSERT and after is EditKind.DELETE)


def test_random_scripts_are_minimal_and_complete():
    rng = random.Random(1234)
    for _ in range(200):
        old = [rng.choice("abc") for _ in range(rng.randint(0, 12))]
        new = [rng.choice("abc") for _ in range(rng.randint(0, 12))]
        script = diff_sequences(old, new)

        assert _apply(script, old, new) == (old, new)
        assert _edit_count(script) == len(old) + len(new) - 2 * _lcs_length(old, new)


def test_same_input_gives_same_script():
    old = ["x", "a", "b", "x", "a"]
    new = ["a", "x", "b", "a", "x"]
    assert diff_sequences(old, new) == diff_sequences(old, new)


def test_inputs_are_not_modified():
    old, new = ["a", "b", "c"], ["c", "b", "a"]
    diff_sequences(old, new)
    assert old == ["a", "b", "c"]
    assert new == ["c", "b", "a"]


def test_works_on_tuples_of_tokens():
    script = diff_sequences(("the", " ", "cat"), ("the", " ", "dog"))
    assert _edit_count(script) == 2


def test_cancellation_stops_the_search():
    with pytest.raises(ComparisonCancelled):
        diff_sequences(["a", "b"], ["c", "d"], should_cancel=lambda: True)


def test_edit_distance_bound():
    old = [f"a{i}" for i in range(50)]
    new = [f"b{i}" for i in range(50)]

    with pytest.raises(SizeExceededError) as exc_info:
        diff_sequences(old, new, max_edit_distance=99)
    assert exc_info.value.unit == "edits"
    assert exc_info.value.limit == 99

    assert _edit_count(diff_sequences(old, new, max_edit_distance=100)) == 100


def test_edit_distance_bound_for_pure_insertions():
    with pytest.raises(SizeExceededError):
        diff_sequences(["x"], ["x", "y", "z"], max_edit_distance=1)
    assert _edit_count(diff_sequences(["x"], ["x", "y", "z"], max_edit_distance=2)) == 2


def test_long_shared_runs_do_not_count_towards_the_bound():
    old = [f"l{i}" for i in range(5000)]
    new = list(old)
    new[100] = "changed"
    new[4000] = "changed too"

    assert _edit_count(diff_sequences(old, new, max_edit_distance=4)) == 4
