"""Pydantic and dataclass domain models for event analytics tables."""

from eventanalytics.models.errors import (
    IllegalQueryError,
    InvalidIdentifierError,
    PartitionLoadError,
    QueryExecutionError,
    SchemaInconsistencyError,
)
from eventanalytics.models.grid import Grid, GridHeader, MetadataItem
from eventanalytics.models.metadata import (
    Category,
    CategoryCombo,
    CategoryOptionGroupSet,
    DataElement,
    LegendSet,
    MetadataSnapshot,
    OrganisationUnit,
    OrganisationUnitGroup,
    OrganisationUnitGroupSet,
    OrganisationUnitLevel,
    PeriodType,
    Program,
    TrackedEntityAttribute,
    ValueType,
)
from eventanalytics.models.query import OrgUnitQueryParams
from eventanalytics.models.table import (
    AnalyticsTable,
    AnalyticsTableColumn,
    AnalyticsTablePartition,
    AnalyticsTableType,
    AnalyticsTableUpdateParams,
    ColumnDataType,
    IndexType,
)

__all__ = [
    "AnalyticsTable",
    "AnalyticsTableColumn",
    "AnalyticsTablePartition",
    "AnalyticsTableType",
    "AnalyticsTableUpdateParams",
    "Category",
    "CategoryCombo",
    "CategoryOptionGroupSet",
    "ColumnDataType",
    "DataElement",
    "Grid",
    "GridHeader",
    "IllegalQueryError",
    "IndexType",
    "InvalidIdentifierError",
    "LegendSet",
    "MetadataItem",
    "MetadataSnapshot",
    "OrgUnitQueryParams",
    "OrganisationUnit",
    "OrganisationUnitGroup",
    "OrganisationUnitGroupSet",
    "OrganisationUnitLevel",
    "PartitionLoadError",
    "PeriodType",
    "Program",
    "QueryExecutionError",
    "SchemaInconsistencyError",
    "TrackedEntityAttribute",
    "ValueType",
]
