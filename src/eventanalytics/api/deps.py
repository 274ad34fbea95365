"""Dependency injection for FastAPI: AnalyticsContext singleton."""

from __future__ import annotations

from eventanalytics.context import AnalyticsContext
from eventanalytics.service import OrgUnitAnalyticsService
from eventanalytics.tables import EventAnalyticsTableManager

_context: AnalyticsContext | None = None


def init_context(context: AnalyticsContext) -> None:
    """Set the global AnalyticsContext (called at app startup)."""
    global _context  # noqa: PLW0603
    _context = context


def get_context() -> AnalyticsContext:
    """FastAPI ``Depends`` provider for AnalyticsContext."""
    if _context is None:
        raise RuntimeError("AnalyticsContext not initialised, call init_context() first")
    return _context


def get_table_manager() -> EventAnalyticsTableManager:
    return get_context().table_manager


def get_org_unit_service() -> OrgUnitAnalyticsService:
    return get_context().org_unit_service


def reset_context() -> None:
    """Clear the global AnalyticsContext (for tests)."""
    global _context  # noqa: PLW0603
    _context = None
