# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Velocity calculator.

Partitions a trailing time window into weekly buckets and reports the points
completed in each, against the team's nominal capacity.
"""

import logging
import math
from datetime import datetime, time, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, Union

from sprint_metrics.analytics.adapters.event_log import completion_instant
from sprint_metrics.analytics.adapters.timestamps import normalize_timestamp, utc_now
from sprint_metrics.analytics.models import Collaborator, Task, VelocityBucket
from sprint_metrics.utils.config import Settings, get_settings
from sprint_metrics.utils.errors import ValidationError
from sprint_metrics.utils.numeric import finite_or_zero, percentage

logger = logging.getLogger(__name__)

TimeRange = Union[str, int]

SUPPORTED_TIME_RANGES = {"7d": 7, "30d": 30, "90d": 90}


def parse_time_range(time_range: TimeRange) -> int:
    """
    Convert a time range ("7d", "30d", "90d" or a positive day count) to days.

    Raises:
        ValidationError: if the range is not supported
    """
    if isinstance(time_range, int) and not isinstance(time_range, bool):
        if time_range < 1:
            raise ValidationError(
                f"Time range must be at least 1 day, got {time_range}",
                details={"time_range": time_range},
            )
        return time_range
    if isinstance(time_range, str):
        days = SUPPORTED_TIME_RANGES.get(time_range.strip().lower())
        if days is not None:
            return days
    raise ValidationError(
        f"Unsupported time range: {time_range!r}",
        details={"time_range": repr(time_range), "supported": sorted(SUPPORTED_TIME_RANGES)},
    )


def period_weeks(days: int) -> int:
    """Whole weeks covered by a window, never less than one"""
    return max(1, math.ceil(days / 7))


def resolve_team_size(
    tasks: Sequence[Task],
    collaborators: Iterable[Collaborator] = (),
) -> int:
    """Distinct board members, else distinct assignees, else 1"""
    keys = {c.key for c in collaborators if c.key}
    if not keys:
        keys = {t.assigned_to.key for t in tasks if t.assigned_to is not None and t.assigned_to.key}
    return max(1, len(keys))


class VelocityCalculator:
    """Calculates weekly velocity buckets"""

    @staticmethod
    def calculate(
        tasks: Sequence[Task],
        time_range: TimeRange = "30d",
        team_size: Optional[int] = None,
        collaborators: Iterable[Collaborator] = (),
        as_of: Optional[datetime] = None,
        settings: Optional[Settings] = None,
    ) -> List[VelocityBucket]:
        """
        Calculate velocity over a trailing window.

        Args:
            tasks: Tasks to aggregate
            time_range: "7d", "30d", "90d" or a number of days
            team_size: Team size for capacity; resolved from the roster when None
            collaborators: Board roster used to resolve the team size
            as_of: End of the window; defaults to now
            settings: Engine settings

        Returns:
            Weekly buckets in chronological order, labeled "Week 1".."Week N"
        """
        settings = settings or get_settings()
        days = parse_time_range(time_range)
        as_of = normalize_timestamp(as_of, default=None) or utc_now()

        if team_size is None or team_size < 1:
            team_size = resolve_team_size(tasks, collaborators)
        capacity = team_size * settings.capacity_points_per_person

        bucket_count = min(settings.max_velocity_buckets, math.ceil(days / 7))
        anchor = datetime.combine(as_of.date() + timedelta(days=1), time.min, tzinfo=timezone.utc)

        completions = []
        for task in tasks:
            instant = completion_instant(task)
            if instant is not None:
                completions.append((instant, task.resolved_points))

        # Most recent bucket first
        windows = []
        for i in range(bucket_count):
            period_end = anchor - timedelta(days=7 * i)
            period_start = anchor - timedelta(days=7 * (i + 1))
            completed = sum(
                points for instant, points in completions
                if period_start <= instant < period_end
            )
            windows.append((period_start, period_end, finite_or_zero(completed)))
        windows.reverse()

        buckets = []
        previous = None
        for number, (period_start, period_end, completed) in enumerate(windows, start=1):
            completed = max(0.0, completed)
            buckets.append(VelocityBucket(
                period=f"Week {number}",
                period_start=period_start,
                period_end=period_end,
                completed=completed,
                velocity=completed,
                capacity=capacity,
                utilization=percentage(completed, capacity),
                trend=0.0 if previous is None else completed - previous,
            ))
            previous = completed

        logger.debug(
            "Velocity over %d days: %d buckets, team_size=%d, completed=%s",
            days, len(buckets), team_size, [b.completed for b in buckets],
        )
        return buckets


def aggregate_velocity(
    tasks: Sequence[Task],
    time_range: TimeRange = "30d",
    team_size: Optional[int] = None,
    collaborators: Iterable[Collaborator] = (),
    as_of: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> List[VelocityBucket]:
    """Functional entry point for :meth:`VelocityCalculator.calculate`"""
    return VelocityCalculator.calculate(tasks, time_range, team_size, collaborators, as_of, settings)
