"""Analytics table planning and population: catalog, planner, populator, manager."""

from eventanalytics.tables.catalog import DimensionCatalog, validate_dimension_columns
from eventanalytics.tables.manager import EventAnalyticsTableManager
from eventanalytics.tables.planner import TablePartitionPlanner
from eventanalytics.tables.population import PartitionPopulator
from eventanalytics.tables.update import (
    AnalyticsTableUpdateService,
    TableUpdateResult,
    UpdateResult,
)

__all__ = [
    "AnalyticsTableUpdateService",
    "DimensionCatalog",
    "EventAnalyticsTableManager",
    "PartitionPopulator",
    "TablePartitionPlanner",
    "TableUpdateResult",
    "UpdateResult",
    "validate_dimension_columns",
]
