"""Reporting services over the analytics tables."""

from eventanalytics.service.orgunit_analytics import OrgUnitAnalyticsService
from eventanalytics.service.orgunit_manager import OrgUnitAnalyticsManager
from eventanalytics.service.orgunit_planner import OrgUnitQueryPlanner

__all__ = ["OrgUnitAnalyticsManager", "OrgUnitAnalyticsService", "OrgUnitQueryPlanner"]
