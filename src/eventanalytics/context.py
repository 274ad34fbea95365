"""Wires metadata, executor, dialect and calendar into the table and reporting services."""

from __future__ import annotations

from dataclasses import dataclass

from eventanalytics.calendar import Calendar, CalendarRegistry
from eventanalytics.dialect import Dialect, DialectRegistry
from eventanalytics.service import (
    OrgUnitAnalyticsManager,
    OrgUnitAnalyticsService,
    OrgUnitQueryPlanner,
)
from eventanalytics.settings import Settings
from eventanalytics.storage import (
    MetadataStore,
    QueryExecutor,
    SqlAlchemyQueryExecutor,
    TableLifecycle,
    create_database_engine,
)
from eventanalytics.storage.loader import load_metadata_store
from eventanalytics.tables import (
    AnalyticsTableUpdateService,
    DimensionCatalog,
    EventAnalyticsTableManager,
    PartitionPopulator,
    TablePartitionPlanner,
)


@dataclass
class AnalyticsContext:
    metadata: MetadataStore
    executor: QueryExecutor
    dialect: Dialect
    calendar: Calendar
    table_manager: EventAnalyticsTableManager
    update_service: AnalyticsTableUpdateService
    org_unit_service: OrgUnitAnalyticsService


def build_context(
    settings: Settings,
    metadata: MetadataStore | None = None,
    executor: QueryExecutor | None = None,
) -> AnalyticsContext:
    """Build every service from settings; ``metadata``/``executor`` override the defaults."""
    if metadata is None:
        metadata = load_metadata_store(settings.metadata_path)
    if executor is None:
        engine = create_database_engine(
            settings.database_url,
            pool_size=settings.database_pool_size,
            echo=settings.database_echo,
        )
        executor = SqlAlchemyQueryExecutor(engine)
    dialect = DialectRegistry.get(settings.dialect)
    calendar = CalendarRegistry.get(settings.calendar)

    catalog = DimensionCatalog(metadata, spatial_support=settings.spatial_support)
    planner = TablePartitionPlanner(executor, catalog, calendar, dialect)
    populator = PartitionPopulator(executor, dialect)
    table_manager = EventAnalyticsTableManager(
        metadata, executor, planner, populator, dialect, max_workers=settings.table_workers
    )
    update_service = AnalyticsTableUpdateService(
        table_manager, TableLifecycle(executor, dialect), max_workers=settings.table_workers
    )
    org_unit_service = OrgUnitAnalyticsService(
        metadata,
        OrgUnitAnalyticsManager(executor, dialect),
        OrgUnitQueryPlanner(),
        max_workers=settings.query_workers,
    )
    return AnalyticsContext(
        metadata=metadata,
        executor=executor,
        dialect=dialect,
        calendar=calendar,
        table_manager=table_manager,
        update_service=update_service,
        org_unit_service=org_unit_service,
    )
