import pytest

from splitdb.dataset import planners
from splitdb.dataset.spec import PartitionState
from splitdb.errors import FoldRangeError, NoFoldsDefinedError

IDS = [str(i) for i in range(1, 11)]


def test_sample_universe_keeps_prefix_in_order():
    assert planners.sample_universe(IDS, 1.0) == IDS
    assert planners.sample_universe(IDS, 0.5) == ["1", "2", "3", "4", "5"]
    assert planners.sample_universe(IDS, 0.25) == ["1", "2"]
    assert planners.sample_universe([], 0.5) == []


def test_make_folds_drops_remainder():
    folds = planners.make_folds(IDS, 3)

    assert folds == [["1", "2", "3"], ["4", "5", "6"], ["7", "8", "9"]]


def test_make_folds_removes_empty_folds():
    assert planners.make_folds(["a", "b"], 5) == []
    assert planners.make_folds(["a", "b", "c", "d"], 4) == [["a"], ["b"], ["c"], ["d"]]


def test_make_folds_rejects_non_positive_count():
    with pytest.raises(ValueError):
        planners.make_folds(IDS, 0)


@pytest.mark.parametrize("k", range(1, 13))
def test_make_folds_partition_a_subset(k):
    ids = [f"id-{i}" for i in range(11)]
    folds = planners.make_folds(ids, k)
    flat = [id for fold in folds for id in fold]

    assert len(flat) == len(set(flat))
    assert set(flat) <= set(ids)
    assert len(flat) <= len(ids)
    if folds:
        sizes = [len(fold) for fold in folds]
        assert max(sizes) - min(sizes) <= 1


def test_rotate_every_fold_is_disjoint_and_complete():
    folds = planners.make_folds(IDS, 3)
    flat = [id for fold in folds for id in fold]

    for i in range(len(folds)):
        train, test = planners.rotate(folds, i)
        assert not set(train) & set(test)
        assert sorted(train + test) == sorted(flat)
        assert test == folds[i]


def test_rotate_keeps_order_of_remaining_folds():
    folds = [["a"], ["b"], ["c"]]

    assert planners.rotate(folds, 1) == (["a", "c"], ["b"])


def test_rotate_single_fold_is_all_train():
    assert planners.rotate([["a", "b"]], 0) == (["a", "b"], [])
    assert planners.rotate([], 0) == ([], [])


def test_fold_state_starts_at_first_fold():
    state = planners.fold_state(IDS, 3)

    assert state.current_fold == 0
    assert len(state.folds) == 3
    assert state.test == ("1", "2", "3")
    assert state.train == ("4", "5", "6", "7", "8", "9")


def test_advance_fold_moves_test_bucket():
    state = planners.advance_fold(planners.fold_state(IDS, 3), 1)

    assert state.current_fold == 1
    assert state.test == ("4", "5", "6")
    assert state.train == ("1", "2", "3", "7", "8", "9")


def test_advance_fold_out_of_range():
    state = planners.fold_state(IDS, 3)

    with pytest.raises(FoldRangeError) as exc_info:
        planners.advance_fold(state, 5)
    assert exc_info.value.fold == 5
    assert exc_info.value.fold_count == 3

    with pytest.raises(FoldRangeError):
        planners.advance_fold(state, 3)
    with pytest.raises(FoldRangeError):
        planners.advance_fold(state, -1)


def test_advance_fold_requires_folds():
    with pytest.raises(NoFoldsDefinedError):
        planners.advance_fold(PartitionState(train=("1",), test=()), 0)


def test_split_without_shuffle():
    train, test = planners.split(IDS, 0.7)

    assert train == ["1", "2", "3", "4", "5", "6", "7"]
    assert test == ["8", "9", "10"]


def test_split_rounds_half_up():
    train, test = planners.split(["a", "b", "c", "d", "e"], 0.5)

    assert train == ["a", "b", "c"]
    assert test == ["d", "e"]


@pytest.mark.parametrize(
    "ratio, expected_train",
    [(0.0, 0), (1.0, 10), (1.5, 10), (-0.5, 0)],
)
def test_split_degenerate_ratios(ratio, expected_train):
    train, test = planners.split(IDS, ratio)

    assert len(train) == expected_train
    assert train + test == IDS


def test_split_shuffle_is_seeded():
    first = planners.split(IDS, 0.5, shuffle=True, rng=planners.make_rng(7))
    second = planners.split(IDS, 0.5, shuffle=True, rng=planners.make_rng(7))

    assert first == second
    assert sorted(first[0] + first[1]) == sorted(IDS)


def test_shuffled_is_a_permutation():
    result = planners.shuffled(IDS, planners.make_rng(1))

    assert sorted(result) == sorted(IDS)
    assert len(result) == len(IDS)
