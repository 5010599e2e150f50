import pytest

from splitdb.database import DocumentStore, MemoryDocumentStore, MemorySnapshotStore, SnapshotStore
from splitdb.errors import StoreUnavailableError


def test_put_get_delete():
    store = MemoryDocumentStore("docs")

    assert store.put({"class_label": "a", "instance": {"x": 1}}, "k1") == "k1"
    assert store.get("k1") == {"class_label": "a", "instance": {"x": 1}}
    assert store.count() == 1

    store.delete("k1")
    store.delete("k1")
    assert store.get("k1") is None
    assert store.count() == 0


def test_generated_ids_skip_taken_keys():
    store = MemoryDocumentStore()
    store.put({"n": 0}, "1")

    assert store.put({"n": 1}) == "2"
    assert store.put({"n": 2}) == "3"
    assert store.list_ids() == ["1", "2", "3"]


def test_records_are_copied():
    store = MemoryDocumentStore()
    record = {"instance": {"tokens": ["a"]}}
    store.put(record, "1")

    record["instance"]["tokens"].append("b")
    fetched = store.get("1")
    fetched["instance"]["tokens"].append("c")

    assert store.get("1") == {"instance": {"tokens": ["a"]}}


def test_aggregate_and_documents_follow_insertion_order():
    store = MemoryDocumentStore()
    for id, label in [("3", "b"), ("1", "a"), ("2", "b")]:
        store.put({"class_label": label}, id)
    store.put({"other": True}, "4")

    assert store.aggregate_by_field("class_label") == {"b": ["3", "2"], "a": ["1"]}
    assert [id for id, _ in store.documents()] == ["3", "1", "2", "4"]


def test_missing_store_raises():
    store = MemoryDocumentStore("absent", create=False)

    assert not store.exists()
    for call in (
        store.count,
        store.list_ids,
        lambda: store.get("1"),
        lambda: store.put({}),
        lambda: store.aggregate_by_field("class_label"),
        store.documents,
    ):
        with pytest.raises(StoreUnavailableError):
            call()


def test_drop_and_recreate():
    store = MemoryDocumentStore()
    store.put({"n": 1})
    store.drop()

    assert not store.exists()

    store.recreate()
    assert store.exists()
    assert store.count() == 0
    assert store.put({"n": 2}) == "1"


def test_snapshot_store():
    snapshots = MemoryDocumentStore().snapshots()
    document = {"train_test": {"train": ["1"], "test": []}}

    assert snapshots.get("id-state") is None
    snapshots.put("id-state", document)
    document["train_test"]["train"].append("2")
    assert snapshots.get("id-state") == {"train_test": {"train": ["1"], "test": []}}

    snapshots.delete("id-state")
    snapshots.delete("id-state")
    assert snapshots.get("id-state") is None


def test_protocols():
    store = MemoryDocumentStore()

    assert isinstance(store, DocumentStore)
    assert isinstance(store.snapshots(), SnapshotStore)
    assert isinstance(MemorySnapshotStore(), SnapshotStore)
