"""Tests for Pydantic and dataclass domain models."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from eventanalytics.ast.builder import col
from eventanalytics.models.errors import (
    IllegalQueryError,
    InvalidIdentifierError,
    SchemaInconsistencyError,
)
from eventanalytics.models.grid import Grid, GridHeader
from eventanalytics.models.metadata import (
    CategoryCombo,
    DataElement,
    IdentifiableObject,
    Program,
    TrackedEntityAttribute,
    ValueType,
)
from eventanalytics.models.table import (
    AnalyticsTable,
    AnalyticsTableColumn,
    AnalyticsTableType,
    AnalyticsTableUpdateParams,
    ColumnDataType,
)


class TestValueType:
    def test_classification(self) -> None:
        assert ValueType.INTEGER_POSITIVE.is_integer
        assert ValueType.PERCENTAGE.is_decimal
        assert ValueType.NUMBER.is_numeric
        assert ValueType.TRUE_ONLY.is_boolean
        assert ValueType.AGE.is_date
        assert ValueType.LONG_TEXT.is_text
        assert ValueType.COORDINATE.is_geo
        assert not ValueType.TEXT.is_numeric


class TestMetadata:
    def test_display_name_falls_back_to_name(self) -> None:
        assert IdentifiableObject(uid="abc", name="Name").display_name == "Name"
        assert IdentifiableObject(uid="abc", name="Name", displayName="Shown").display_name == "Shown"

    def test_aliases_and_field_names(self) -> None:
        by_alias = DataElement.model_validate({"uid": "DataElemA01", "valueType": "NUMBER"})
        by_name = DataElement(uid="DataElemA01", value_type=ValueType.NUMBER)
        assert by_alias == by_name

    def test_program_helpers(self) -> None:
        program = Program(
            uid="ProgramA001",
            category_combo=CategoryCombo(uid="default"),
            tracked_entity_attributes=[
                TrackedEntityAttribute(uid="AttrA000001", value_type=ValueType.TEXT),
                TrackedEntityAttribute(
                    uid="AttrB000001", value_type=ValueType.TEXT, confidential=True
                ),
            ],
        )
        assert program.has_category_combo is False
        assert [a.uid for a in program.non_confidential_attributes] == ["AttrA000001"]
        assert program.data_elements_with_legend_set == []


class TestAnalyticsTable:
    def test_names(self) -> None:
        table = AnalyticsTable(
            table_type=AnalyticsTableType.EVENT, columns=[], program=Program(uid="ProgramAbC1")
        )
        assert table.table_name == "analytics_event_programabc1"
        assert table.temp_table_name == "analytics_temp_event_programabc1"
        assert table.has_partitions is False
        partition = table.add_partition(2022, date(2022, 1, 1), date(2023, 1, 1))
        assert partition.table_name == "analytics_event_programabc1_2022"
        assert table.has_partitions is True

    def test_geometry_types(self) -> None:
        assert ColumnDataType.GEOMETRY.is_geometry
        assert ColumnDataType.GEOMETRY_POINT.is_geometry
        assert not ColumnDataType.TEXT.is_geometry

    def test_column_defaults(self) -> None:
        column = AnalyticsTableColumn("ou", ColumnDataType.CHARACTER_11, col("uid", "ou"))
        assert column.not_null is False
        assert column.skip_index is False


class TestUpdateParams:
    def test_full_update_has_no_from_date(self) -> None:
        assert AnalyticsTableUpdateParams().from_date is None

    @pytest.mark.parametrize(("last_years", "expected"), [(1, 2024), (2, 2023), (5, 2020)])
    def test_from_date(self, last_years: int, expected: int) -> None:
        params = AnalyticsTableUpdateParams(
            start_time=datetime(2024, 6, 30), last_years=last_years
        )
        assert params.from_date == date(expected, 1, 1)


class TestGrid:
    def test_rows_must_match_header_width(self) -> None:
        grid = Grid().add_header(GridHeader(name="a", column="A"))
        grid.add_row(["x"])
        assert (grid.width, grid.height) == (1, 1)
        with pytest.raises(ValueError, match="does not match"):
            grid.add_row(["x", "y"])

    def test_serializes(self) -> None:
        grid = Grid().add_header(GridHeader(name="count", column="Count"))
        data = grid.model_dump(mode="json")
        assert data["headers"][0]["value_type"] == "TEXT"


class TestErrors:
    def test_messages(self) -> None:
        assert IllegalQueryError("bad").message == "bad"
        assert "x, y" in str(SchemaInconsistencyError("t", ["x", "y"]))
        assert InvalidIdentifierError("a b").identifier == "a b"
