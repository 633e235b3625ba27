# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Completion Trend Calculator

Tracks how many tasks are created and completed each day. A positive
cumulative value means the backlog is shrinking.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from sprint_metrics.analytics.adapters.event_log import completion_instant
from sprint_metrics.analytics.adapters.timestamps import normalize_timestamp, utc_now
from sprint_metrics.analytics.calculators.velocity import TimeRange, parse_time_range
from sprint_metrics.analytics.calculators.working_calendar import date_range
from sprint_metrics.analytics.models import CompletionTrendPoint, Task

logger = logging.getLogger(__name__)


def calculate_completion_trend(
    tasks: Sequence[Task],
    time_range: TimeRange = "30d",
    as_of: Optional[datetime] = None,
) -> List[CompletionTrendPoint]:
    """
    Calculate created vs completed counts per day.

    Args:
        tasks: Tasks to count
        time_range: Number of calendar days, ending on the ``as_of`` date inclusive
        as_of: Last day of the window; defaults to now

    Returns:
        One CompletionTrendPoint per day, oldest first
    """
    days = parse_time_range(time_range)
    as_of = normalize_timestamp(as_of, default=None) or utc_now()
    last_day = as_of.date()
    first_day = last_day - timedelta(days=days - 1)

    created_by_date: Dict[date, int] = defaultdict(int)
    completed_by_date: Dict[date, int] = defaultdict(int)

    for task in tasks:
        if task.created_at is not None:
            created_by_date[task.created_at.date()] += 1
        completed_at = completion_instant(task)
        if completed_at is not None:
            completed_by_date[completed_at.date()] += 1

    trend = []
    cumulative = 0
    for day in date_range(first_day, last_day):
        created = created_by_date[day]
        completed = completed_by_date[day]
        net = completed - created
        cumulative += net
        trend.append(CompletionTrendPoint(
            date=day,
            created=created,
            completed=completed,
            net=net,
            cumulative=cumulative,
        ))

    logger.debug("Completion trend %s..%s: cumulative=%d", first_day, last_day, cumulative)
    return trend
