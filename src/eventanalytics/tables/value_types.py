"""Maps metadata value types to storage column types and value-extraction expressions."""

from __future__ import annotations

from collections.abc import Callable

from eventanalytics.ast.builder import eq, lit, regex_match
from eventanalytics.ast.nodes import BinaryOp, CaseExpr, Cast, Expr, FunctionCall, Literal
from eventanalytics.models.metadata import ValueType
from eventanalytics.models.table import ColumnDataType

NUMERIC_LENIENT_REGEXP = r"^(-?[0-9]+)(\.[0-9]+)?(e[-+]?[0-9]+)?$"
DATE_REGEXP = r"^\d{4}-\d{2}-\d{2}(\s|T)?(\d{2}:\d{2}:\d{2})?$"

# Free text is too wide to index unless an option set constrains it.
NO_INDEX_VALUE_TYPES = frozenset({ValueType.TEXT, ValueType.LONG_TEXT})

SelectBuilder = Callable[[Expr], Expr]


def get_column_type(value_type: ValueType, spatial_support: bool = True) -> ColumnDataType:
    if value_type.is_decimal:
        return ColumnDataType.DOUBLE
    if value_type.is_integer:
        return ColumnDataType.BIGINT
    if value_type.is_boolean:
        return ColumnDataType.INTEGER
    if value_type.is_date:
        return ColumnDataType.TIMESTAMP
    if value_type.is_geo and spatial_support:
        return ColumnDataType.GEOMETRY_POINT
    return ColumnDataType.TEXT


def _geojson_point(expr: Expr) -> Expr:
    prefix = Literal.string('{"type":"Point", "coordinates":')
    suffix = Literal.string(', "crs":{"type":"name", "properties":{"name":"EPSG:4326"}}}')
    document = BinaryOp(left=BinaryOp(left=prefix, op="||", right=expr), op="||", right=suffix)
    return FunctionCall(name="ST_GeomFromGeoJSON", args=[document])


def get_select_expression(value_type: ValueType, expr: Expr, spatial_support: bool = True) -> Expr:
    """Expression converting a raw stored text value into the column's storage type."""
    if value_type.is_decimal:
        return Cast(expr=expr, type_name=ColumnDataType.DOUBLE.value)
    if value_type.is_integer:
        return Cast(expr=expr, type_name=ColumnDataType.BIGINT.value)
    if value_type.is_boolean:
        return CaseExpr(
            when_clauses=[(eq(expr, lit("true")), lit(1)), (eq(expr, lit("false")), lit(0))],
            else_clause=Literal.null(),
        )
    if value_type.is_date:
        return Cast(expr=expr, type_name=ColumnDataType.TIMESTAMP.value)
    if value_type.is_geo and spatial_support:
        return _geojson_point(expr)
    return expr


def get_value_filter(value_type: ValueType, expr: Expr) -> Expr | None:
    """Shape check excluding malformed stored values, or None when any text is acceptable."""
    if value_type.is_numeric:
        return regex_match(expr, NUMERIC_LENIENT_REGEXP)
    if value_type.is_date:
        return regex_match(expr, DATE_REGEXP)
    return None


def skip_index(value_type: ValueType, has_option_set: bool) -> bool:
    return value_type in NO_INDEX_VALUE_TYPES and not has_option_set


def resolve(
    value_type: ValueType, spatial_support: bool = True
) -> tuple[ColumnDataType, SelectBuilder]:
    """Storage type and select-expression builder for a value type."""
    return (
        get_column_type(value_type, spatial_support),
        lambda expr: get_select_expression(value_type, expr, spatial_support),
    )
