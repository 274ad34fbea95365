"""Blocking SQL executors used to discover years, populate partitions and run reports."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from eventanalytics.models.errors import QueryExecutionError

logger = logging.getLogger("eventanalytics.storage")


class QueryExecutor(ABC):
    """Executes rendered SQL. Implementations must be safe to share across threads."""

    @abstractmethod
    def query_for_list(self, sql: str) -> list[Any]:
        """Run a query and return the first column of every row."""

    @abstractmethod
    def query_for_rows(self, sql: str) -> list[tuple[Any, ...]]:
        """Run a query and return every row as a tuple."""

    @abstractmethod
    def update(self, sql: str) -> int:
        """Run a data-modifying statement and return the affected row count."""

    @abstractmethod
    def execute(self, sql: str) -> None:
        """Run a statement with no result (DDL)."""


def create_database_engine(
    database_url: str,
    pool_size: int = 10,
    max_overflow: int = 20,
    pool_recycle: int = 1800,
    echo: bool = False,
) -> Engine:
    """Create a pooled SQLAlchemy engine for the analytics database."""
    logger.info("Creating database engine for: %s", database_url.split("@")[-1])
    kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        kwargs.update(pool_size=pool_size, max_overflow=max_overflow, pool_recycle=pool_recycle)
    return create_engine(database_url, **kwargs)


class SqlAlchemyQueryExecutor(QueryExecutor):
    """Runs each statement in its own transaction on a pooled SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def query_for_list(self, sql: str) -> list[Any]:
        return [row[0] for row in self.query_for_rows(sql)]

    def query_for_rows(self, sql: str) -> list[tuple[Any, ...]]:
        try:
            with self._engine.connect() as conn:
                result = conn.execute(text(sql))
                return [tuple(row) for row in result]
        except SQLAlchemyError as exc:
            raise QueryExecutionError(str(exc), sql=sql) from exc

    def update(self, sql: str) -> int:
        start = time.monotonic()
        try:
            with self._engine.begin() as conn:
                result = conn.execute(text(sql))
                rows = result.rowcount
        except SQLAlchemyError as exc:
            raise QueryExecutionError(str(exc), sql=sql) from exc
        logger.debug("Statement affected %d rows in %.1f ms", rows, (time.monotonic() - start) * 1000)
        return rows

    def execute(self, sql: str) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(text(sql))
        except SQLAlchemyError as exc:
            raise QueryExecutionError(str(exc), sql=sql) from exc
