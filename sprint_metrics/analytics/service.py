# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""Analytics service - main entry point for sprint metrics."""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Union

from sprint_metrics.analytics import charts
from sprint_metrics.analytics.adapters.snapshot import load_snapshot
from sprint_metrics.analytics.adapters.timestamps import normalize_timestamp, utc_now
from sprint_metrics.analytics.calculators.burndown import BurndownCalculator
from sprint_metrics.analytics.calculators.capacity import CapacityCalculator
from sprint_metrics.analytics.calculators.completion_trend import calculate_completion_trend
from sprint_metrics.analytics.calculators.contributors import aggregate_contributors
from sprint_metrics.analytics.calculators.cycle_time import calculate_cycle_times
from sprint_metrics.analytics.calculators.sprint_summary import SprintSummaryCalculator
from sprint_metrics.analytics.calculators.team_health import calculate_team_health
from sprint_metrics.analytics.calculators.velocity import (
    TimeRange,
    VelocityCalculator,
    parse_time_range,
)
from sprint_metrics.analytics.calculators.work_distribution import calculate_work_distribution
from sprint_metrics.analytics.models import (
    CapacityPlan,
    ChartResponse,
    MetricsSnapshot,
    SprintMetricsReport,
    WorkDistribution,
)
from sprint_metrics.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

SnapshotInput = Union[MetricsSnapshot, Dict[str, Any]]


class AnalyticsService:
    """Runs the sprint metrics pipeline over a snapshot."""

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize analytics service.

        Args:
            settings: Engine settings; the cached process settings when None
        """
        self.settings = settings or get_settings()

    def load(self, snapshot: SnapshotInput) -> MetricsSnapshot:
        """Normalize a raw snapshot document into models"""
        return load_snapshot(snapshot, self.settings)

    def compute(
        self,
        snapshot: SnapshotInput,
        time_range: Optional[TimeRange] = None,
        as_of: Optional[datetime] = None,
    ) -> SprintMetricsReport:
        """
        Compute every metric for a snapshot.

        Args:
            snapshot: MetricsSnapshot or a raw snapshot document
            time_range: Trailing window for velocity, contributors and trend
                (defaults to the configured range)
            as_of: Reference instant; defaults to now

        Returns:
            SprintMetricsReport with all sections

        Raises:
            ValidationError: if the time range is not supported
        """
        time_range = time_range if time_range is not None else self.settings.default_time_range
        days = parse_time_range(time_range)
        as_of = normalize_timestamp(as_of, default=None) or utc_now()
        snapshot = self.load(snapshot)
        tasks = snapshot.tasks

        logger.info(
            "Computing sprint metrics: %d tasks, range=%dd, as_of=%s",
            len(tasks), days, as_of.isoformat(),
        )

        burndown = []
        status = None
        if snapshot.sprint is not None:
            burndown = BurndownCalculator.calculate(tasks, snapshot.sprint, snapshot.entries, as_of)
            status = BurndownCalculator.status(
                burndown, BurndownCalculator.total_points(tasks), as_of, self.settings
            )
        else:
            logger.info("Snapshot has no sprint configuration; skipping burndown")

        velocity = VelocityCalculator.calculate(
            tasks, days, collaborators=snapshot.collaborators, as_of=as_of, settings=self.settings
        )
        cycle_times = calculate_cycle_times(tasks, as_of)
        contributors = aggregate_contributors(tasks, snapshot.collaborators, days, as_of)
        trend = calculate_completion_trend(tasks, days, as_of)
        summary = SprintSummaryCalculator.calculate(tasks, velocity, contributors, self.settings)

        return SprintMetricsReport(
            as_of=as_of,
            time_range_days=days,
            burndown=tuple(burndown),
            burndown_status=status,
            velocity=tuple(velocity),
            cycle_time=cycle_times,
            contributors=tuple(contributors),
            completion_trend=tuple(trend),
            summary=summary,
            team_health=calculate_team_health(velocity, contributors, cycle_times, summary),
            status_distribution=calculate_work_distribution(tasks, "status"),
        )

    def work_distribution(self, snapshot: SnapshotInput, dimension: str = "status") -> WorkDistribution:
        """Distribution of a snapshot's tasks along one dimension"""
        return calculate_work_distribution(self.load(snapshot).tasks, dimension)

    def capacity(
        self,
        snapshot: SnapshotInput,
        team_capacity_per_week: Optional[float] = None,
    ) -> Optional[CapacityPlan]:
        """Capacity plan for the snapshot's sprint, or None without a sprint"""
        snapshot = self.load(snapshot)
        if snapshot.sprint is None:
            return None
        return CapacityCalculator.calculate(snapshot.sprint, snapshot.tasks, team_capacity_per_week)

    def get_charts(self, report: SprintMetricsReport) -> Dict[str, ChartResponse]:
        """Adapt a report to chart responses, keyed by chart type"""
        generated_at = report.as_of
        return {
            "burndown": charts.burndown_chart(report.burndown, generated_at, report.burndown_status),
            "velocity": charts.velocity_chart(report.velocity, generated_at),
            "cycle_time": charts.cycle_time_chart(report.cycle_time, generated_at),
            "contributors": charts.contributor_chart(report.contributors, generated_at),
            "trend": charts.completion_trend_chart(report.completion_trend, generated_at),
        }
