"""Tabular query result: headers, rows and metadata."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from eventanalytics.models.metadata import ValueType


class GridHeader(BaseModel):
    name: str
    column: str
    value_type: ValueType = ValueType.TEXT
    hidden: bool = False
    meta: bool = False


class MetadataItem(BaseModel):
    name: str


class Grid(BaseModel):
    """Headers, rows of values and a free-form metadata map."""

    headers: list[GridHeader] = []
    rows: list[list[Any]] = []
    metadata: dict[str, Any] = {}

    def add_header(self, header: GridHeader) -> Grid:
        self.headers.append(header)
        return self

    def add_row(self, row: list[Any]) -> Grid:
        if len(row) != len(self.headers):
            raise ValueError(f"Row width {len(row)} does not match {len(self.headers)} headers")
        self.rows.append(row)
        return self

    def set_metadata(self, metadata: dict[str, Any]) -> Grid:
        self.metadata = metadata
        return self

    @property
    def width(self) -> int:
        return len(self.headers)

    @property
    def height(self) -> int:
        return len(self.rows)
