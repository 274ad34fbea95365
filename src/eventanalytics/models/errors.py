"""Exceptions raised while planning, populating and querying analytics tables."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from eventanalytics.models.table import AnalyticsTablePartition


class IllegalQueryError(Exception):
    """Raised when an analytics query request is invalid (bad request)."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SchemaInconsistencyError(Exception):
    """Raised when a table's column list contains duplicate column names."""

    def __init__(self, table_name: str, duplicates: list[str]) -> None:
        self.table_name = table_name
        self.duplicates = duplicates
        super().__init__(
            f"Analytics table '{table_name}' has duplicate columns: {', '.join(duplicates)}"
        )


class InvalidIdentifierError(ValueError):
    """Raised when a metadata-derived identifier contains disallowed characters."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Invalid SQL identifier: '{identifier}'")


class QueryExecutionError(Exception):
    """Raised by a query executor when the database rejects a statement."""

    def __init__(self, message: str, sql: str | None = None) -> None:
        super().__init__(message)
        self.sql = sql


class PartitionLoadError(Exception):
    """Raised when populating one partition fails; other partitions are unaffected."""

    def __init__(self, partition: AnalyticsTablePartition, cause: Exception) -> None:
        self.partition = partition
        self.cause = cause
        super().__init__(f"Failed to populate '{partition.temp_table_name}': {cause}")
