# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Cycle Time Calculator

Measures how long completed tasks took from first entering progress to first
reaching done, and buckets the results into a distribution. Useful for spotting
bottlenecks and predicting delivery times.
"""

import logging
import math
import statistics
from decimal import Decimal
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sprint_metrics.analytics.adapters.event_log import done_marker, in_progress_marker
from sprint_metrics.analytics.adapters.timestamps import normalize_timestamp, utc_now
from sprint_metrics.analytics.models import (
    CycleTimeBucket,
    CycleTimeItem,
    CycleTimeReport,
    Task,
)
from sprint_metrics.utils.numeric import mean, round_half_up, safe_div

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400

# (label, inclusive upper bound in days); the last bucket is open-ended
CYCLE_TIME_BUCKETS: Tuple[Tuple[str, Optional[int]], ...] = (
    ("≤1 day", 1),
    ("2-3 days", 3),
    ("4-7 days", 7),
    ("1-2 weeks", 14),
    (">2 weeks", None),
)


def _markers(task: Task, as_of: datetime) -> Optional[Tuple[datetime, datetime]]:
    started = in_progress_marker(task)
    finished = done_marker(task)
    if started is None or finished is None:
        return None
    return started.timestamp or as_of, finished.timestamp or as_of


def task_cycle_time(task: Task, as_of: Optional[datetime] = None) -> Optional[int]:
    """
    Whole days from the first in-progress event to the first done event.

    Partial days round up; a done event logged before the in-progress event
    yields 0. Returns None when either event is missing.
    """
    as_of = normalize_timestamp(as_of, default=None) or utc_now()
    markers = _markers(task, as_of)
    if markers is None:
        return None
    started_at, completed_at = markers
    seconds = (completed_at - started_at).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


def bucket_label(days: int) -> str:
    """Distribution bucket a cycle time falls into"""
    for label, upper in CYCLE_TIME_BUCKETS:
        if upper is None or days <= upper:
            return label
    return CYCLE_TIME_BUCKETS[-1][0]


def _percentile(sorted_values: List[int], p: float) -> float:
    """Linear-interpolated percentile of an already sorted list"""
    n = len(sorted_values)
    if n == 0:
        return 0.0
    # exact arithmetic so halves like 5.85 round up
    k = (n - 1) * Decimal(str(p))
    f = int(k)
    c = k - f
    if f + 1 < n:
        return float(sorted_values[f] + c * (sorted_values[f + 1] - sorted_values[f]))
    return float(sorted_values[f])


def calculate_cycle_times(tasks: Sequence[Task], as_of: Optional[datetime] = None) -> CycleTimeReport:
    """
    Calculate cycle time statistics for done tasks.

    Args:
        tasks: Tasks to measure; only done tasks with both markers count
        as_of: Fallback instant for markers without a usable timestamp

    Returns:
        CycleTimeReport with per-task items, summary statistics and distribution
    """
    as_of = normalize_timestamp(as_of, default=None) or utc_now()

    items: List[CycleTimeItem] = []
    for task in tasks:
        if not task.is_done:
            continue
        markers = _markers(task, as_of)
        if markers is None:
            continue
        started_at, completed_at = markers
        items.append(CycleTimeItem(
            task_id=task.id,
            title=task.title,
            started_at=started_at,
            completed_at=completed_at,
            cycle_time_days=task_cycle_time(task, as_of),
        ))

    items.sort(key=lambda item: item.completed_at)
    cycle_times = [item.cycle_time_days for item in items]
    total = len(cycle_times)

    counts = {label: 0 for label, _ in CYCLE_TIME_BUCKETS}
    for days in cycle_times:
        counts[bucket_label(days)] += 1

    distribution = tuple(
        CycleTimeBucket(
            bucket=label,
            count=counts[label],
            percentage=int(round_half_up(safe_div(counts[label], total) * 100)),
        )
        for label, _ in CYCLE_TIME_BUCKETS
    )

    logger.debug("Cycle time over %d done tasks: %s", total, cycle_times)

    if not cycle_times:
        return CycleTimeReport(distribution=distribution)

    return CycleTimeReport(
        items=tuple(items),
        distribution=distribution,
        sample_size=total,
        average=round_half_up(mean(cycle_times), 1),
        median=round_half_up(statistics.median(cycle_times), 1),
        percentile_85=round_half_up(_percentile(sorted(cycle_times), 0.85), 1),
    )
