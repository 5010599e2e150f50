import pytest

from splitdb.database.arango.arango_store import (
    AGGREGATE_QUERY,
    DOCUMENTS_QUERY,
    IDS_QUERY,
    MAX_SEQUENCE_QUERY,
    SEQUENCE_ATTRIBUTE,
)


class DummyCollection:
    def __init__(self, name):
        self.name = name
        self.docs = {}
        self._next_key = 100

    def count(self):
        return len(self.docs)

    def get(self, key):
        doc = self.docs.get(key)
        return dict(doc) if doc is not None else None

    def insert(self, document, overwrite=False):
        key = document.get("_key")
        if key is None:
            self._next_key += 1
            key = str(self._next_key)
        if " " in key or "/" in key:
            raise ValueError(f"illegal document key: {key!r}")
        if key in self.docs and not overwrite:
            raise KeyError(key)
        meta = {"_key": key, "_id": f"{self.name}/{key}", "_rev": "_rev1"}
        self.docs[key] = {**document, **meta}
        return meta

    def delete(self, key, ignore_missing=False):
        if key not in self.docs and not ignore_missing:
            raise KeyError(key)
        self.docs.pop(key, None)


class DummyAQL:
    def __init__(self, database):
        self.database = database
        self.calls = []

    def execute(self, query, bind_vars=None, batch_size=None):
        self.calls.append((query, bind_vars, batch_size))
        collection = self.database.collections[bind_vars["@collection"]]
        docs = sorted(
            collection.docs.values(),
            key=lambda doc: (doc.get(SEQUENCE_ATTRIBUTE) or 0, doc["_key"]),
        )
        if query == IDS_QUERY:
            return iter([doc["_key"] for doc in docs])
        if query == DOCUMENTS_QUERY:
            return iter(docs)
        if query == MAX_SEQUENCE_QUERY:
            return iter([max((doc[SEQUENCE_ATTRIBUTE] for doc in docs if SEQUENCE_ATTRIBUTE in doc), default=None)])
        if query == AGGREGATE_QUERY:
            field = bind_vars["field"]
            groups = {}
            for doc in docs:
                if field in doc:
                    groups.setdefault(doc[field], []).append(doc["_key"])
            return iter([{"value": value, "ids": keys} for value, keys in sorted(groups.items())])
        raise AssertionError(f"unexpected query: {query}")


class DummyDatabase:
    """Stand-in for a python-arango StandardDatabase."""

    def __init__(self):
        self.collections = {}
        self.aql = DummyAQL(self)

    def has_collection(self, name):
        return name in self.collections

    def create_collection(self, name):
        self.collections[name] = DummyCollection(name)
        return self.collections[name]

    def delete_collection(self, name):
        del self.collections[name]

    def collection(self, name):
        return self.collections[name]


@pytest.fixture
def arango_database():
    return DummyDatabase()
