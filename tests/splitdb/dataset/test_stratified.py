from collections import Counter

from splitdb.database import MemoryDocumentStore
from splitdb.dataset.planners import make_rng
from splitdb.dataset.stratified import even_split, group_by_label, preset_split

GROUPS = {"A": ["1", "2", "3", "4"], "B": ["5", "6"]}
LABELS = {id: label for label, ids in GROUPS.items() for id in ids}


def test_group_by_label_uses_store_aggregation():
    store = MemoryDocumentStore("labels")
    for id, label in LABELS.items():
        store.put({"class_label": label, "instance": {"text": id}}, id)
    store.put({"instance": {"text": "unlabeled"}}, "7")

    assert group_by_label(store) == GROUPS


def test_even_split_without_shuffle_keeps_label_order():
    train, test = even_split(GROUPS, 0.5, shuffle=False)

    assert train == ["1", "2", "5"]
    assert test == ["3", "4", "6"]


def test_even_split_keeps_label_proportions_when_shuffled():
    train, test = even_split(GROUPS, 0.5, rng=make_rng(11))

    assert Counter(LABELS[id] for id in train) == {"A": 2, "B": 1}
    assert Counter(LABELS[id] for id in test) == {"A": 2, "B": 1}
    assert sorted(train + test) == sorted(LABELS)


def test_even_split_applies_population_per_label():
    train, test = even_split(GROUPS, 0.5, shuffle=False, population_use=0.5)

    assert train == ["1", "5"]
    assert test == ["2"]


def test_even_split_caps_each_label():
    train, test = even_split(GROUPS, 0.5, shuffle=False, max_instances=2)

    assert train == ["1", "5"]
    assert test == ["2", "6"]


def test_preset_split_sends_unknown_set_types_to_test():
    documents = [
        ("1", {"set_type": "train"}),
        ("2", {"set_type": "test"}),
        ("3", {}),
        ("4", {"set_type": "dev"}),
        ("5", {"set_type": "train"}),
    ]

    train, test = preset_split(documents)

    assert train == ["1", "5"]
    assert test == ["2", "3", "4"]


def test_preset_split_custom_field():
    train, test = preset_split([("1", {"split": "train"}), ("2", {"set_type": "train"})], "split")

    assert train == ["1"]
    assert test == ["2"]
