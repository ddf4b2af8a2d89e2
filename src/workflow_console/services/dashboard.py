"""Monitoring views: dashboard summary and analytics report."""

from __future__ import annotations

from workflow_console.analytics import (
    AnalyticsReport,
    DashboardSummary,
    InstanceTrendSource,
    TrendPoint,
    analytics_report,
    dashboard_summary,
)
from workflow_console.services.definitions import DefinitionService
from workflow_console.services.instances import InstanceService


class DashboardService:
    """Reloads both collections and reduces them to report models.

    Without a trend source the trend is empty; no placeholder series is made up.
    """

    def __init__(
        self,
        definitions: DefinitionService,
        instances: InstanceService,
        trend_source: InstanceTrendSource | None = None,
    ) -> None:
        self._definitions = definitions
        self._instances = instances
        self._trend_source = trend_source

    def summary(self) -> DashboardSummary:
        definitions = self._definitions.reload()
        instances = self._instances.reload()
        return dashboard_summary(definitions, instances, self._trend())

    def analytics(self) -> AnalyticsReport:
        definitions = self._definitions.reload()
        instances = self._instances.reload()
        return analytics_report(definitions, instances, self._trend())

    def _trend(self) -> list[TrendPoint]:
        if self._trend_source is None:
            return []
        return self._trend_source.instance_trend()
