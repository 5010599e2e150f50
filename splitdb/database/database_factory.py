#!/usr/bin/env python3
"""
Database Factory

Factory pattern for creating document stores and dataset connections.
Supports configuration driven backend selection.
"""

import logging
import os
from typing import Any, Optional, Tuple

from splitdb.framework.config import Config, ConfigManager

from .memory_store import MemoryDocumentStore
from .store import DocumentStore, SnapshotStore

logger = logging.getLogger(__name__)


class DatabaseFactory:
    """
    Factory for creating document stores.

    Manages the instantiation of the configured backend and hands back
    the store together with its partition snapshot store.
    """

    @classmethod
    def get_arango(cls,
                   database: str = "datasets",
                   username: str = "root",
                   password: Optional[str] = None,
                   host: str = "localhost",
                   port: int = 8529,
                   **kwargs) -> Any:
        """
        Get ArangoDB connection.

        Args:
            database: Database name (created when missing)
            username: Username
            password: Password (or from env)
            host: Database host
            port: Database port
            **kwargs: Additional ArangoClient options

        Returns:
            ArangoDB database handle
        """
        # Get password from environment if not provided
        if not password:
            password = os.environ.get('ARANGO_PASSWORD')
            if not password:
                raise ValueError("ArangoDB password required (set ARANGO_PASSWORD env var)")

        from arango import ArangoClient

        try:
            client = ArangoClient(hosts=f'http://{host}:{port}', **kwargs)
            sys_db = client.db('_system', username=username, password=password)
            if not sys_db.has_database(database):
                sys_db.create_database(database)
                logger.info(f"Created database: {database}")
            db = client.db(database, username=username, password=password)
            logger.info(f"✓ Connected to ArangoDB at {host}:{port}/{database}")
            return db
        except Exception as e:
            logger.error(f"Failed to connect to ArangoDB: {e}")
            raise

    @classmethod
    def get_store(cls, config: Optional[Config] = None) -> Tuple[DocumentStore, SnapshotStore]:
        """
        Get the document store selected by configuration.

        Args:
            config: Loaded configuration (defaults to ConfigManager.load())

        Returns:
            Document store and the snapshot store holding its partition state
        """
        config = config or ConfigManager.load()
        name = config.dataset.name

        if config.backend == "memory":
            store = MemoryDocumentStore(name)
            logger.info(f"Using in-memory document store '{name}'")
            return store, store.snapshots()

        if config.backend == "arango":
            from .arango import ArangoDocumentStore

            db = cls.get_arango(
                database=config.database.database,
                username=config.database.username,
                password=config.database.password or None,
                host=config.database.host,
                port=config.database.port,
            )
            store = ArangoDocumentStore(db, name)
            return store, store.snapshots()

        raise ValueError(f"Unknown store backend: {config.backend}")

    @classmethod
    def connect(cls, config: Optional[Config] = None, **kwargs):
        """
        Create a dataset connection from configuration.

        Args:
            config: Loaded configuration (defaults to ConfigManager.load())
            **kwargs: Passed on to create_connection (e.g. create_instances_fn)

        Returns:
            Connection using the configured population use and default bucket
        """
        from splitdb.dataset.connection import create_connection

        config = config or ConfigManager.load()
        store, snapshots = cls.get_store(config)
        return create_connection(
            store,
            population_use=config.dataset.population_use,
            default_bucket=config.dataset.default_bucket,
            snapshots=snapshots,
            **kwargs,
        )
