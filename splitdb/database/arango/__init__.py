"""
ArangoDB Database Interface

Provides the ArangoDB backed document and snapshot stores.
"""

from .arango_store import ArangoDocumentStore, ArangoSnapshotStore, from_key, strip_system, to_key

__all__ = [
    'ArangoDocumentStore',
    'ArangoSnapshotStore',
    'from_key',
    'strip_system',
    'to_key',
]
