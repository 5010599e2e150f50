"""Document store contracts consumed by the dataset split engine."""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Protocol, runtime_checkable

INSTANCE_KEY = "instance"
CLASS_LABEL_KEY = "class_label"
SET_TYPE_KEY = "set_type"


@runtime_checkable
class DocumentStore(Protocol):
    """Per-id record storage for data instances."""

    name: str

    def exists(self) -> bool:
        ...

    def recreate(self) -> None:
        ...

    def count(self) -> int:
        ...

    def list_ids(self) -> list[str]:
        """Return every id; order is stable for the life of the store."""
        ...

    def get(self, id: str) -> dict[str, Any] | None:
        ...

    def put(self, record: Mapping[str, Any], id: str | None = None) -> str:
        ...

    def delete(self, id: str) -> None:
        ...

    def aggregate_by_field(self, field: str) -> dict[Any, list[str]]:
        """Return each distinct value of ``field`` with the ids carrying it."""
        ...

    def documents(self) -> Iterator[tuple[str, dict[str, Any]]]:
        ...

    def snapshots(self) -> SnapshotStore:
        """Return the sub-store where partition state of this store is kept."""
        ...


@runtime_checkable
class SnapshotStore(Protocol):
    """Keyed storage for persisted partition state."""

    def get(self, key: str) -> dict[str, Any] | None:
        ...

    def put(self, key: str, document: Mapping[str, Any]) -> None:
        ...

    def delete(self, key: str) -> None:
        ...
