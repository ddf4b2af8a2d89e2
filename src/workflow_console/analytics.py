"""Dashboard statistics derived from definition and instance snapshots.

Every function here is a pure reducer: no store access, no clock, no caching.
Rounding is half-up to the nearest integer (2.5 -> 3), not Python's
banker's rounding.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from workflow_console.lifecycle.instance import InstanceStatus
from workflow_console.store.models import WorkflowDefinition, WorkflowInstance

RECENT_INSTANCE_LIMIT = 10

_SECONDS_PER_HOUR = 3600.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def count_by_status(instances: Iterable[WorkflowInstance]) -> dict[InstanceStatus, int]:
    """Count instances per status; every status is present, defaulting to 0."""

    counts = {status: 0 for status in InstanceStatus}
    for instance in instances:
        counts[instance.status] += 1
    return counts


def completion_rate(
    definition: WorkflowDefinition, instances: Iterable[WorkflowInstance]
) -> int:
    """Percentage of the definition's instances that are COMPLETED (0 when it has none)."""

    total, completed = _completion_counts(definition.id, instances)
    if total == 0:
        return 0
    return round_half_up(100.0 * completed / total)


def _completion_counts(
    definition_id: str, instances: Iterable[WorkflowInstance]
) -> tuple[int, int]:
    total = 0
    completed = 0
    for instance in instances:
        if instance.definition_ref != definition_id:
            continue
        total += 1
        if instance.status == InstanceStatus.COMPLETED:
            completed += 1
    return total, completed


def average_completion_time_hours(instances: Iterable[WorkflowInstance]) -> int:
    """Mean wall-clock duration of completed instances, in whole hours.

    Only COMPLETED instances carrying both `started_at` and `completed_at`
    count. Returns 0 when there are none.
    """

    durations = [
        (i.completed_at - i.started_at).total_seconds()
        for i in instances
        if i.status == InstanceStatus.COMPLETED
        and i.started_at is not None
        and i.completed_at is not None
    ]
    if not durations:
        return 0
    return round_half_up(sum(durations) / len(durations) / _SECONDS_PER_HOUR)


class ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class StatusCount(ReportModel):
    status: InstanceStatus
    count: int = 0


def status_distribution(instances: Iterable[WorkflowInstance]) -> list[StatusCount]:
    counts = count_by_status(instances)
    return [StatusCount(status=status, count=counts[status]) for status in InstanceStatus]


class DefinitionCompletion(ReportModel):
    definition_id: str
    name: str
    version: int
    completion_rate: int
    total_instances: int
    completed_instances: int


def completion_rates(
    definitions: Iterable[WorkflowDefinition], instances: Sequence[WorkflowInstance]
) -> list[DefinitionCompletion]:
    rates: list[DefinitionCompletion] = []
    for definition in definitions:
        total, completed = _completion_counts(definition.id, instances)
        rates.append(
            DefinitionCompletion(
                definition_id=definition.id,
                name=definition.name,
                version=definition.version,
                completion_rate=completion_rate(definition, instances),
                total_instances=total,
                completed_instances=completed,
            )
        )
    return rates


class PerformanceMetrics(ReportModel):
    total_instances: int
    running_instances: int
    completed_instances: int
    failed_instances: int
    average_completion_time_hours: int


def performance_metrics(instances: Sequence[WorkflowInstance]) -> PerformanceMetrics:
    counts = count_by_status(instances)
    return PerformanceMetrics(
        total_instances=len(instances),
        running_instances=counts[InstanceStatus.RUNNING],
        completed_instances=counts[InstanceStatus.COMPLETED],
        failed_instances=counts[InstanceStatus.FAILED],
        average_completion_time_hours=average_completion_time_hours(instances),
    )


def recent_instances(
    instances: Sequence[WorkflowInstance], limit: int = RECENT_INSTANCE_LIMIT
) -> list[WorkflowInstance]:
    """The first `limit` instances in the order the store listed them."""

    return list(instances[:limit])


class TrendPoint(ReportModel):
    """One bucket of the historical instance trend (e.g. one day)."""

    label: str
    instances: int = Field(ge=0)
    completed: int = Field(default=0, ge=0)


class InstanceTrendSource(Protocol):
    """Provider of historical instance counts over time."""

    def instance_trend(self) -> list[TrendPoint]: ...


class DashboardSummary(ReportModel):
    total_definitions: int
    total_instances: int
    running_instances: int
    completed_instances: int
    recent_instances: list[dict[str, object]] = Field(default_factory=list)
    trend: list[TrendPoint] = Field(default_factory=list)


class AnalyticsReport(ReportModel):
    performance: PerformanceMetrics
    completion_rates: list[DefinitionCompletion] = Field(default_factory=list)
    status_distribution: list[StatusCount] = Field(default_factory=list)
    trend: list[TrendPoint] = Field(default_factory=list)


def dashboard_summary(
    definitions: Sequence[WorkflowDefinition],
    instances: Sequence[WorkflowInstance],
    trend: Sequence[TrendPoint] = (),
) -> DashboardSummary:
    counts = count_by_status(instances)
    return DashboardSummary(
        total_definitions=len(definitions),
        total_instances=len(instances),
        running_instances=counts[InstanceStatus.RUNNING],
        completed_instances=counts[InstanceStatus.COMPLETED],
        recent_instances=[i.to_wire() for i in recent_instances(instances)],
        trend=list(trend),
    )


def analytics_report(
    definitions: Sequence[WorkflowDefinition],
    instances: Sequence[WorkflowInstance],
    trend: Sequence[TrendPoint] = (),
) -> AnalyticsReport:
    return AnalyticsReport(
        performance=performance_metrics(instances),
        completion_rates=completion_rates(definitions, instances),
        status_distribution=status_distribution(instances),
        trend=list(trend),
    )
