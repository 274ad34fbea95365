"""Dimension catalog: the ordered column list of a program's analytics table."""

from __future__ import annotations

from collections import Counter

from eventanalytics.ast.builder import QueryBuilder, and_, col, eq, func, gt, lit, lte, regex_match
from eventanalytics.ast.nodes import CaseExpr, Expr, JsonPathText, Literal, SubqueryExpr
from eventanalytics.models.errors import SchemaInconsistencyError
from eventanalytics.models.metadata import (
    DataElement,
    LegendSet,
    Program,
    TrackedEntityAttribute,
    ValueType,
)
from eventanalytics.models.table import AnalyticsTableColumn, ColumnDataType, IndexType
from eventanalytics.storage.repository import MetadataStore
from eventanalytics.tables import sql
from eventanalytics.tables.value_types import (
    NUMERIC_LENIENT_REGEXP,
    get_column_type,
    get_select_expression,
    get_value_filter,
    skip_index,
)

# Derived from the event geometry; meaningless without spatial support.
_SPATIAL_DERIVED_COLUMNS = frozenset({"longitude", "latitude"})


def validate_dimension_columns(table_name: str, columns: list[AnalyticsTableColumn]) -> None:
    """Raise ``SchemaInconsistencyError`` if any column name occurs more than once."""
    counts = Counter(c.name for c in columns)
    duplicates = [name for name, n in counts.items() if n > 1]
    if duplicates:
        raise SchemaInconsistencyError(table_name, duplicates)


def _event_value(uid: str) -> Expr:
    return JsonPathText(expr=col("eventdatavalues"), path=[uid, "value"])


def _point_coordinate(function: str) -> Expr:
    geometry = col("geometry", sql.EVENT)
    return CaseExpr(
        when_clauses=[
            (eq(lit("POINT"), func("GeometryType", geometry)), func(function, geometry))
        ],
        else_clause=Literal.null(),
    )


class DimensionCatalog:
    """Resolves the dimension columns to materialise for a program.

    Column order is significant: it is the physical column order of the
    table and the positional order of the population insert.
    """

    def __init__(self, metadata: MetadataStore, spatial_support: bool = True) -> None:
        self._metadata = metadata
        self._spatial_support = spatial_support

    def get_dimension_columns(self, program: Program) -> list[AnalyticsTableColumn]:
        columns: list[AnalyticsTableColumn] = []
        columns.extend(self._category_columns(program))
        columns.extend(self._org_unit_level_columns())
        columns.extend(self._org_unit_group_set_columns())
        columns.extend(self._attribute_category_option_group_set_columns())
        columns.extend(self._period_type_columns())
        columns.extend(self._data_element_columns(de) for de in program.data_elements)
        for de in program.data_elements_with_legend_set:
            columns.extend(self._data_element_legend_column(de, ls) for ls in de.legend_sets)
        columns.extend(self._attribute_column(a) for a in program.non_confidential_attributes)
        for attribute in program.non_confidential_attributes_with_legend_set:
            columns.extend(
                self._attribute_legend_column(attribute, ls) for ls in attribute.legend_sets
            )
        columns.extend(self._system_columns(program))
        return self.filter_dimension_columns(columns)

    def filter_dimension_columns(
        self, columns: list[AnalyticsTableColumn]
    ) -> list[AnalyticsTableColumn]:
        """Drop columns the target database cannot hold."""
        if self._spatial_support:
            return columns
        return [
            c
            for c in columns
            if not c.data_type.is_geometry and c.name not in _SPATIAL_DERIVED_COLUMNS
        ]

    # -- structure dimensions ------------------------------------------------

    def _category_columns(self, program: Program) -> list[AnalyticsTableColumn]:
        if not program.has_category_combo or program.category_combo is None:
            return []
        return [
            AnalyticsTableColumn(
                name=category.uid,
                data_type=ColumnDataType.CHARACTER_11,
                expression=col(category.uid, sql.CATEGORY_STRUCTURE),
                created=category.created,
            )
            for category in program.category_combo.categories
            if category.data_dimension
        ]

    def _org_unit_level_columns(self) -> list[AnalyticsTableColumn]:
        columns = []
        for level in self._metadata.get_filled_organisation_unit_levels():
            name = sql.org_unit_level_column(level.level)
            columns.append(
                AnalyticsTableColumn(
                    name=name,
                    data_type=ColumnDataType.CHARACTER_11,
                    expression=col(name, sql.ORG_UNIT_STRUCTURE),
                    created=level.created,
                )
            )
        return columns

    def _org_unit_group_set_columns(self) -> list[AnalyticsTableColumn]:
        return [
            AnalyticsTableColumn(
                name=group_set.uid,
                data_type=ColumnDataType.CHARACTER_11,
                expression=col(group_set.uid, sql.ORG_UNIT_GROUP_SET_STRUCTURE),
                created=group_set.created,
            )
            for group_set in self._metadata.get_data_dimension_org_unit_group_sets()
        ]

    def _attribute_category_option_group_set_columns(self) -> list[AnalyticsTableColumn]:
        return [
            AnalyticsTableColumn(
                name=group_set.uid,
                data_type=ColumnDataType.CHARACTER_11,
                expression=col(group_set.uid, sql.CATEGORY_STRUCTURE),
                created=group_set.created,
            )
            for group_set in self._metadata.get_attribute_category_option_group_sets()
        ]

    def _period_type_columns(self) -> list[AnalyticsTableColumn]:
        return [
            AnalyticsTableColumn(
                name=period_type.column_name,
                data_type=ColumnDataType.TEXT,
                expression=col(period_type.column_name, sql.DATE_PERIOD_STRUCTURE),
            )
            for period_type in self._metadata.get_available_period_types()
        ]

    # -- data values ---------------------------------------------------------

    def _data_element_columns(self, data_element: DataElement) -> AnalyticsTableColumn:
        value_type = data_element.value_type
        value = _event_value(data_element.uid)
        query = (
            QueryBuilder()
            .select(get_select_expression(value_type, value, self._spatial_support))
            .from_("programstageinstance")
            .where(eq(col("programstageinstanceid"), col("programstageinstanceid", sql.EVENT)))
        )
        value_filter = get_value_filter(value_type, value)
        if value_filter is not None:
            query.where(value_filter)
        return AnalyticsTableColumn(
            name=data_element.uid,
            data_type=get_column_type(value_type, self._spatial_support),
            expression=SubqueryExpr(query=query.build()),
            skip_index=skip_index(value_type, data_element.has_option_set),
            created=data_element.created,
        )

    def _data_element_legend_column(
        self, data_element: DataElement, legend_set: LegendSet
    ) -> AnalyticsTableColumn:
        value = _event_value(data_element.uid)
        numeric = get_select_expression(ValueType.NUMBER, value)
        on = and_(
            lte(col("startvalue", "l"), numeric),
            gt(col("endvalue", "l"), numeric),
            eq(col("maplegendsetid", "l"), lit(legend_set.id)),
            eq(col("programstageinstanceid"), col("programstageinstanceid", sql.EVENT)),
            regex_match(value, NUMERIC_LENIENT_REGEXP),
        )
        query = (
            QueryBuilder()
            .select(col("uid", "l"))
            .from_("maplegend", alias="l")
            .inner_join("programstageinstance", on=on)
        )
        return AnalyticsTableColumn(
            name=sql.legend_column(data_element.uid, legend_set.uid),
            data_type=ColumnDataType.CHARACTER_11,
            expression=SubqueryExpr(query=query.build()),
            created=legend_set.created,
        )

    def _attribute_column(self, attribute: TrackedEntityAttribute) -> AnalyticsTableColumn:
        value_type = attribute.value_type
        value = col("value")
        query = (
            QueryBuilder()
            .select(get_select_expression(value_type, value, self._spatial_support))
            .from_("trackedentityattributevalue")
            .where(
                eq(col("trackedentityinstanceid"), col("trackedentityinstanceid", sql.ENROLLMENT))
            )
            .where(eq(col("trackedentityattributeid"), lit(attribute.id)))
        )
        value_filter = get_value_filter(value_type, value)
        if value_filter is not None:
            query.where(value_filter)
        return AnalyticsTableColumn(
            name=attribute.uid,
            data_type=get_column_type(value_type, self._spatial_support),
            expression=SubqueryExpr(query=query.build()),
            skip_index=skip_index(value_type, attribute.has_option_set),
            created=attribute.created,
        )

    def _attribute_legend_column(
        self, attribute: TrackedEntityAttribute, legend_set: LegendSet
    ) -> AnalyticsTableColumn:
        value = col("value", "av")
        numeric = get_select_expression(ValueType.NUMBER, value)
        on = and_(
            lte(col("startvalue", "l"), numeric),
            gt(col("endvalue", "l"), numeric),
            eq(col("maplegendsetid", "l"), lit(legend_set.id)),
            eq(col("trackedentityinstanceid", "av"), col("trackedentityinstanceid", sql.ENROLLMENT)),
            eq(col("trackedentityattributeid", "av"), lit(attribute.id)),
            regex_match(value, NUMERIC_LENIENT_REGEXP),
        )
        query = (
            QueryBuilder()
            .select(col("uid", "l"))
            .from_("maplegend", alias="l")
            .inner_join("trackedentityattributevalue", on=on, alias="av")
        )
        return AnalyticsTableColumn(
            name=sql.legend_column(attribute.uid, legend_set.uid),
            data_type=ColumnDataType.CHARACTER_11,
            expression=SubqueryExpr(query=query.build()),
            created=legend_set.created,
        )

    # -- system columns ------------------------------------------------------

    def _system_columns(self, program: Program) -> list[AnalyticsTableColumn]:
        char11 = ColumnDataType.CHARACTER_11
        timestamp = ColumnDataType.TIMESTAMP
        columns = [
            AnalyticsTableColumn("psi", char11, col("uid", sql.EVENT), not_null=True),
            AnalyticsTableColumn("pi", char11, col("uid", sql.ENROLLMENT), not_null=True),
            AnalyticsTableColumn("ps", char11, col("uid", sql.PROGRAM_STAGE), not_null=True),
            AnalyticsTableColumn(
                "ao", char11, col("uid", sql.ATTRIBUTE_OPTION_COMBO), not_null=True
            ),
            AnalyticsTableColumn("enrollmentdate", timestamp, col("enrollmentdate", sql.ENROLLMENT)),
            AnalyticsTableColumn("incidentdate", timestamp, col("incidentdate", sql.ENROLLMENT)),
            AnalyticsTableColumn("executiondate", timestamp, col("executiondate", sql.EVENT)),
            AnalyticsTableColumn("duedate", timestamp, col("duedate", sql.EVENT)),
            AnalyticsTableColumn("completeddate", timestamp, col("completeddate", sql.EVENT)),
            AnalyticsTableColumn("created", timestamp, col("created", sql.EVENT)),
            AnalyticsTableColumn("lastupdated", timestamp, col("lastupdated", sql.EVENT)),
            AnalyticsTableColumn(
                "pistatus", ColumnDataType.CHARACTER_50, col("status", sql.ENROLLMENT)
            ),
            AnalyticsTableColumn("psistatus", ColumnDataType.CHARACTER_50, col("status", sql.EVENT)),
            AnalyticsTableColumn(
                "psigeometry",
                ColumnDataType.GEOMETRY,
                col("geometry", sql.EVENT),
                index_type=IndexType.GIST,
            ),
            AnalyticsTableColumn("longitude", ColumnDataType.DOUBLE, _point_coordinate("ST_X")),
            AnalyticsTableColumn("latitude", ColumnDataType.DOUBLE, _point_coordinate("ST_Y")),
            AnalyticsTableColumn("ou", char11, col("uid", sql.ORG_UNIT), not_null=True),
            AnalyticsTableColumn(
                "ouname", ColumnDataType.TEXT, col("name", sql.ORG_UNIT), not_null=True
            ),
            AnalyticsTableColumn("oucode", ColumnDataType.TEXT, col("code", sql.ORG_UNIT)),
        ]
        if program.registration:
            columns.append(
                AnalyticsTableColumn("tei", char11, col("uid", sql.TRACKED_ENTITY_INSTANCE))
            )
            columns.append(
                AnalyticsTableColumn(
                    "pigeometry", ColumnDataType.GEOMETRY, col("geometry", sql.ENROLLMENT)
                )
            )
        return columns
