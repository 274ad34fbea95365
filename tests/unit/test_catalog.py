"""Tests for the dimension catalog column list."""

from __future__ import annotations

import pytest

from eventanalytics.ast.nodes import SubqueryExpr
from eventanalytics.dialect.postgres import PostgresDialect
from eventanalytics.models.errors import SchemaInconsistencyError
from eventanalytics.models.metadata import (
    Category,
    CategoryCombo,
    DataElement,
    LegendSet,
    Program,
    ValueType,
)
from eventanalytics.models.table import AnalyticsTableColumn, ColumnDataType, IndexType
from eventanalytics.storage.memory import InMemoryMetadataStore
from eventanalytics.tables.catalog import DimensionCatalog, validate_dimension_columns
from eventanalytics.tables.sql import LEGEND_SEP

SYSTEM_TAIL = [
    "psi", "pi", "ps", "ao", "enrollmentdate", "incidentdate", "executiondate", "duedate",
    "completeddate", "created", "lastupdated", "pistatus", "psistatus", "psigeometry",
    "longitude", "latitude", "ou", "ouname", "oucode",
]


def _by_name(columns: list[AnalyticsTableColumn]) -> dict[str, AnalyticsTableColumn]:
    return {c.name: c for c in columns}


def _render(column: AnalyticsTableColumn) -> str:
    return PostgresDialect().compile_expr(column.expression)


class TestColumnOrder:
    def test_full_order(self, catalog: DimensionCatalog, anc_program: Program) -> None:
        names = [c.name for c in catalog.get_dimension_columns(anc_program)]
        assert names[:6] == [
            "CategoryLoc", "CategoryAge", "uidlevel1", "uidlevel2", "GroupSetTyp", "CogsFunding",
        ]
        periods = names[6:24]
        assert periods[0] == "daily"
        assert "monthly" in periods
        assert "yearly" in periods
        assert names[24:30] == [
            "DataElemHb1", "DataElemNot", "DataElemRsk", "DataElemDue", "DataElemFlg", "DataElemGps",
        ]
        assert names[30] == f"DataElemHb1{LEGEND_SEP}LegendHbLvl"
        assert names[31:33] == ["AttrAgeYrs1", "AttrFirstNm"]
        assert names[33] == f"AttrAgeYrs1{LEGEND_SEP}LegendAgeGr"
        assert names[34:] == SYSTEM_TAIL + ["tei", "pigeometry"]

    def test_categories_before_org_units_in_category_order(
        self, catalog: DimensionCatalog, anc_program: Program
    ) -> None:
        names = [c.name for c in catalog.get_dimension_columns(anc_program)]
        assert names.index("CategoryLoc") < names.index("CategoryAge") < names.index("uidlevel1")
        assert "CategoryHid" not in names

    def test_deterministic(self, catalog: DimensionCatalog, anc_program: Program) -> None:
        assert catalog.get_dimension_columns(anc_program) == catalog.get_dimension_columns(
            anc_program
        )

    def test_event_program_has_no_registration_columns(
        self, catalog: DimensionCatalog, event_program: Program
    ) -> None:
        names = [c.name for c in catalog.get_dimension_columns(event_program)]
        assert names[-len(SYSTEM_TAIL):] == SYSTEM_TAIL
        assert "tei" not in names
        assert "pigeometry" not in names
        assert names[0] == "uidlevel1"

    def test_names_are_unique(self, catalog: DimensionCatalog, anc_program: Program) -> None:
        names = [c.name for c in catalog.get_dimension_columns(anc_program)]
        assert len(names) == len(set(names))


class TestStructureColumns:
    def test_sources(self, catalog: DimensionCatalog, anc_program: Program) -> None:
        cols = _by_name(catalog.get_dimension_columns(anc_program))
        assert _render(cols["CategoryLoc"]) == '"acs"."CategoryLoc"'
        assert _render(cols["uidlevel2"]) == '"ous"."uidlevel2"'
        assert _render(cols["GroupSetTyp"]) == '"ougs"."GroupSetTyp"'
        assert _render(cols["CogsFunding"]) == '"acs"."CogsFunding"'
        assert _render(cols["monthly"]) == '"dps"."monthly"'
        assert cols["CategoryLoc"].data_type == ColumnDataType.CHARACTER_11
        assert cols["monthly"].data_type == ColumnDataType.TEXT


class TestDataElementColumns:
    def test_skip_index(self, catalog: DimensionCatalog, anc_program: Program) -> None:
        cols = _by_name(catalog.get_dimension_columns(anc_program))
        assert cols["DataElemNot"].skip_index is True
        assert cols["DataElemRsk"].skip_index is False
        assert cols["DataElemHb1"].skip_index is False

    def test_types(self, catalog: DimensionCatalog, anc_program: Program) -> None:
        cols = _by_name(catalog.get_dimension_columns(anc_program))
        assert cols["DataElemHb1"].data_type == ColumnDataType.DOUBLE
        assert cols["DataElemNot"].data_type == ColumnDataType.TEXT
        assert cols["DataElemDue"].data_type == ColumnDataType.TIMESTAMP
        assert cols["DataElemFlg"].data_type == ColumnDataType.INTEGER
        assert cols["DataElemGps"].data_type == ColumnDataType.GEOMETRY_POINT

    def test_numeric_subquery_reads_event_value_with_shape_filter(
        self, catalog: DimensionCatalog, anc_program: Program
    ) -> None:
        column = _by_name(catalog.get_dimension_columns(anc_program))["DataElemHb1"]
        assert isinstance(column.expression, SubqueryExpr)
        sql = _render(column)
        assert "CAST(\"eventdatavalues\" #>> '{DataElemHb1,value}' AS double precision)" in sql
        assert "FROM programstageinstance" in sql
        assert '("programstageinstanceid" = "psi"."programstageinstanceid")' in sql
        assert "~* '^(-?[0-9]+)(\\.[0-9]+)?(e[-+]?[0-9]+)?$'" in sql

    def test_date_subquery_uses_date_filter(
        self, catalog: DimensionCatalog, anc_program: Program
    ) -> None:
        sql = _render(_by_name(catalog.get_dimension_columns(anc_program))["DataElemDue"])
        assert "AS timestamp)" in sql
        assert "\\d{4}-\\d{2}-\\d{2}" in sql

    def test_text_subquery_has_no_shape_filter(
        self, catalog: DimensionCatalog, anc_program: Program
    ) -> None:
        sql = _render(_by_name(catalog.get_dimension_columns(anc_program))["DataElemNot"])
        assert "~*" not in sql
        assert "\"eventdatavalues\" #>> '{DataElemNot,value}'" in sql

    def test_legend_column(self, catalog: DimensionCatalog, anc_program: Program) -> None:
        column = _by_name(catalog.get_dimension_columns(anc_program))["DataElemHb1__LegendHbLvl"]
        assert column.data_type == ColumnDataType.CHARACTER_11
        sql = _render(column)
        assert sql.startswith('(\nSELECT "l"."uid"\nFROM maplegend AS "l"')
        assert '"l"."startvalue" <= CAST(' in sql
        assert '"l"."endvalue" > CAST(' in sql
        assert '("l"."maplegendsetid" = 7)' in sql
        assert "~* '^(-?[0-9]+)" in sql

    def test_one_legend_column_per_legend_set(self, metadata: InMemoryMetadataStore) -> None:
        program = Program(
            uid="ProgramLegd",
            registration=False,
            data_elements=[
                DataElement(
                    uid="DataElemWgt",
                    value_type=ValueType.NUMBER,
                    legend_sets=[LegendSet(id=1, uid="LegendSetA1"), LegendSet(id=2, uid="LegendSetB2")],
                )
            ],
        )
        names = [c.name for c in DimensionCatalog(metadata).get_dimension_columns(program)]
        assert names.count("DataElemWgt__LegendSetA1") == 1
        assert names.count("DataElemWgt__LegendSetB2") == 1


class TestAttributeColumns:
    def test_confidential_attributes_excluded(
        self, catalog: DimensionCatalog, anc_program: Program
    ) -> None:
        names = [c.name for c in catalog.get_dimension_columns(anc_program)]
        assert "AttrNational" not in names

    def test_attribute_subquery(self, catalog: DimensionCatalog, anc_program: Program) -> None:
        sql = _render(_by_name(catalog.get_dimension_columns(anc_program))["AttrAgeYrs1"])
        assert 'CAST("value" AS bigint)' in sql
        assert "FROM trackedentityattributevalue" in sql
        assert '("trackedentityinstanceid" = "pi"."trackedentityinstanceid")' in sql
        assert '("trackedentityattributeid" = 55)' in sql

    def test_attribute_legend_subquery(
        self, catalog: DimensionCatalog, anc_program: Program
    ) -> None:
        sql = _render(_by_name(catalog.get_dimension_columns(anc_program))["AttrAgeYrs1__LegendAgeGr"])
        assert 'INNER JOIN trackedentityattributevalue AS "av"' in sql
        assert '("l"."maplegendsetid" = 8)' in sql
        assert '("av"."trackedentityattributeid" = 55)' in sql


class TestSystemColumns:
    def test_not_null_and_index_types(self, catalog: DimensionCatalog, anc_program: Program) -> None:
        cols = _by_name(catalog.get_dimension_columns(anc_program))
        for name in ("psi", "pi", "ps", "ao", "ou", "ouname"):
            assert cols[name].not_null is True
        assert cols["oucode"].not_null is False
        assert cols["psigeometry"].index_type == IndexType.GIST
        assert cols["pistatus"].data_type == ColumnDataType.CHARACTER_50

    def test_longitude_only_for_points(self, catalog: DimensionCatalog, anc_program: Program) -> None:
        sql = _render(_by_name(catalog.get_dimension_columns(anc_program))["longitude"])
        assert sql == (
            "CASE WHEN ('POINT' = GeometryType(\"psi\".\"geometry\")) "
            'THEN ST_X("psi"."geometry") ELSE NULL END'
        )


class TestSpatialFilter:
    def test_spatial_columns_dropped_without_spatial_support(
        self, metadata: InMemoryMetadataStore, anc_program: Program
    ) -> None:
        cols = _by_name(DimensionCatalog(metadata, spatial_support=False).get_dimension_columns(anc_program))
        for name in ("psigeometry", "pigeometry", "longitude", "latitude"):
            assert name not in cols
        # Coordinates fall back to text and survive the filter
        assert cols["DataElemGps"].data_type == ColumnDataType.TEXT


class TestValidateDimensionColumns:
    def test_duplicates_raise(self, metadata: InMemoryMetadataStore) -> None:
        program = Program(
            uid="ProgramDupl",
            registration=False,
            category_combo=CategoryCombo(uid="CatComboDup", categories=[Category(uid="GroupSetTyp")]),
        )
        columns = DimensionCatalog(metadata).get_dimension_columns(program)
        with pytest.raises(SchemaInconsistencyError) as exc_info:
            validate_dimension_columns("analytics_event_programdupl", columns)
        assert exc_info.value.duplicates == ["GroupSetTyp"]
        assert "analytics_event_programdupl" in str(exc_info.value)

    def test_unique_columns_pass(self, catalog: DimensionCatalog, anc_program: Program) -> None:
        validate_dimension_columns("t", catalog.get_dimension_columns(anc_program))
