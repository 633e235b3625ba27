"""
Analytics module for sprint metrics.

Stateless calculators over immutable task snapshots, plus a service that runs
the whole pipeline and adapts the results to chart responses.
"""

from sprint_metrics.analytics.models import (
    ChartDataPoint,
    ChartResponse,
    ChartSeries,
    ChartType,
    MetricsSnapshot,
    SprintConfig,
    SprintMetricsReport,
    Task,
)
from sprint_metrics.analytics.service import AnalyticsService

__all__ = [
    'ChartDataPoint',
    'ChartSeries',
    'ChartResponse',
    'ChartType',
    'MetricsSnapshot',
    'SprintConfig',
    'SprintMetricsReport',
    'Task',
    'AnalyticsService'
]
