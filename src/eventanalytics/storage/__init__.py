"""Metadata access, SQL execution and physical table lifecycle."""

from eventanalytics.storage.executor import (
    QueryExecutor,
    SqlAlchemyQueryExecutor,
    create_database_engine,
)
from eventanalytics.storage.lifecycle import TableLifecycle
from eventanalytics.storage.memory import InMemoryMetadataStore
from eventanalytics.storage.repository import MetadataStore

__all__ = [
    "InMemoryMetadataStore",
    "MetadataStore",
    "QueryExecutor",
    "SqlAlchemyQueryExecutor",
    "TableLifecycle",
    "create_database_engine",
]
