# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Chart adapters.

Reshape computed metrics into ChartResponse objects for rendering clients.
``generated_at`` is always the instant the metrics were computed for, so the
same inputs produce the same charts.
"""

from datetime import date, datetime, time, timezone
from typing import Optional, Sequence

from sprint_metrics.analytics.models import (
    BurndownPoint,
    BurndownStatus,
    ChartDataPoint,
    ChartResponse,
    ChartSeries,
    ChartType,
    CompletionTrendPoint,
    ContributorMetric,
    CycleTimeReport,
    VelocityBucket,
)


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def burndown_chart(
    series: Sequence[BurndownPoint],
    generated_at: datetime,
    status: Optional[BurndownStatus] = None,
) -> ChartResponse:
    """Ideal vs actual remaining points per day"""
    ideal = ChartSeries(
        name="Ideal",
        data=[
            ChartDataPoint(date=_midnight(point.date), value=point.ideal_remaining)
            for point in series
        ],
        color="#94a3b8",  # Gray
        type="line",
    )
    actual = ChartSeries(
        name="Actual",
        data=[
            ChartDataPoint(
                date=_midnight(point.date),
                value=point.actual_remaining,
                metadata={
                    "completed_points": point.completed_points,
                    "is_today": point.is_today,
                    "is_working_day": point.is_working_day,
                    "is_manual": point.is_manual,
                    "note": point.note,
                },
            )
            for point in series
        ],
        color="#3b82f6",  # Blue
        type="line",
    )

    metadata = {"days": len(series)}
    if series:
        metadata["start_date"] = series[0].date.isoformat()
        metadata["end_date"] = series[-1].date.isoformat()
    if status is not None:
        metadata.update(status.model_dump(mode="json"))

    return ChartResponse(
        chart_type=ChartType.BURNDOWN,
        title="Sprint Burndown",
        series=[ideal, actual],
        metadata=metadata,
        generated_at=generated_at,
    )


def velocity_chart(buckets: Sequence[VelocityBucket], generated_at: datetime) -> ChartResponse:
    """Completed points per week against capacity"""
    completed = ChartSeries(
        name="Completed",
        data=[
            ChartDataPoint(
                date=bucket.period_start,
                value=bucket.completed,
                label=bucket.period,
                metadata={"utilization": bucket.utilization, "trend": bucket.trend},
            )
            for bucket in buckets
        ],
        color="#10b981",  # Green
        type="bar",
    )
    capacity = ChartSeries(
        name="Capacity",
        data=[
            ChartDataPoint(date=bucket.period_start, value=bucket.capacity, label=bucket.period)
            for bucket in buckets
        ],
        color="#94a3b8",
        type="line",
    )

    values = [bucket.completed for bucket in buckets]
    return ChartResponse(
        chart_type=ChartType.VELOCITY,
        title=f"Team Velocity (Last {len(buckets)} Weeks)",
        series=[completed, capacity],
        metadata={
            "bucket_count": len(buckets),
            "latest_velocity": values[-1] if values else 0,
            "velocity_range": {
                "min": min(values) if values else 0,
                "max": max(values) if values else 0,
            },
        },
        generated_at=generated_at,
    )


def cycle_time_chart(report: CycleTimeReport, generated_at: datetime) -> ChartResponse:
    """Per-task cycle time scatter plus the bucketed distribution"""
    scatter = ChartSeries(
        name="Cycle Time",
        data=[
            ChartDataPoint(
                date=item.completed_at,
                value=item.cycle_time_days,
                label=item.title[:30],
                metadata={"id": item.task_id, "full_title": item.title},
            )
            for item in report.items
        ],
        color="#3b82f6",
        type="scatter",
    )
    distribution = ChartSeries(
        name="Distribution",
        data=[
            ChartDataPoint(
                value=bucket.count,
                label=bucket.bucket,
                metadata={"percentage": bucket.percentage},
            )
            for bucket in report.distribution
        ],
        color="#f59e0b",  # Orange
        type="bar",
    )
    return ChartResponse(
        chart_type=ChartType.CYCLE_TIME,
        title="Cycle Time",
        series=[scatter, distribution],
        metadata={
            "total_items": report.sample_size,
            "avg_cycle_time": report.average,
            "median_cycle_time": report.median,
            "percentile_85": report.percentile_85,
        },
        generated_at=generated_at,
    )


def contributor_chart(contributors: Sequence[ContributorMetric], generated_at: datetime) -> ChartResponse:
    """Completed vs open points per contributor"""
    completed = ChartSeries(
        name="Completed",
        data=[
            ChartDataPoint(
                value=c.points_completed,
                label=c.name,
                metadata={"efficiency": c.efficiency, "velocity": c.velocity},
            )
            for c in contributors
        ],
        color="#10b981",
        type="bar",
    )
    open_points = ChartSeries(
        name="Open",
        data=[ChartDataPoint(value=c.workload, label=c.name) for c in contributors],
        color="#f59e0b",
        type="bar",
    )
    return ChartResponse(
        chart_type=ChartType.CONTRIBUTORS,
        title="Contributor Performance",
        series=[completed, open_points],
        metadata={"contributor_count": len(contributors)},
        generated_at=generated_at,
    )


def completion_trend_chart(trend: Sequence[CompletionTrendPoint], generated_at: datetime) -> ChartResponse:
    """Created vs completed tasks per day, with the cumulative net"""
    def _series(name: str, attr: str, color: str, chart_type: str) -> ChartSeries:
        return ChartSeries(
            name=name,
            data=[
                ChartDataPoint(
                    date=_midnight(point.date),
                    value=getattr(point, attr),
                    label=point.date.strftime("%b %d"),
                )
                for point in trend
            ],
            color=color,
            type=chart_type,
        )

    return ChartResponse(
        chart_type=ChartType.TREND,
        title="Completion Trend",
        series=[
            _series("Created", "created", "#ef4444", "bar"),  # Red
            _series("Completed", "completed", "#10b981", "bar"),
            _series("Cumulative Net", "cumulative", "#3b82f6", "line"),
        ],
        metadata={
            "total_created": sum(point.created for point in trend),
            "total_completed": sum(point.completed for point in trend),
            "net": trend[-1].cumulative if trend else 0,
        },
        generated_at=generated_at,
    )
