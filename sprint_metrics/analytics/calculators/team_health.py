# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Team health indicators.

Combines velocity, contributor, cycle-time and summary figures into a handful
of team-level numbers with coarse grades.
"""

import logging
import statistics
from typing import Dict, Sequence

from sprint_metrics.analytics.models import (
    ContributorMetric,
    CycleTimeReport,
    SprintSummary,
    TeamHealthMetrics,
    VelocityBucket,
)
from sprint_metrics.utils.numeric import mean, round_half_up, safe_div

logger = logging.getLogger(__name__)

EXCELLENT = "excellent"
GOOD = "good"
NEEDS_ATTENTION = "needs_attention"

CYCLE_TIME_THRESHOLDS = (3, 7)  # days, lower is better
EFFICIENCY_THRESHOLDS = (80, 60)  # percent, higher is better
COMPLETION_THRESHOLDS = (80, 60)


def _grade_lower_better(value: float, thresholds) -> str:
    excellent, good = thresholds
    if value <= excellent:
        return EXCELLENT
    if value <= good:
        return GOOD
    return NEEDS_ATTENTION


def _grade_higher_better(value: float, thresholds) -> str:
    excellent, good = thresholds
    if value >= excellent:
        return EXCELLENT
    if value >= good:
        return GOOD
    return NEEDS_ATTENTION


def workload_balance(contributors: Sequence[ContributorMetric]) -> float:
    """
    100 minus the coefficient of variation of per-person points, as a percentage.

    100 means perfectly even; a single contributor (or none) is trivially
    balanced.
    """
    loads = [c.points_total for c in contributors]
    if len(loads) <= 1:
        return 100.0
    average = mean(loads)
    variation = safe_div(statistics.pstdev(loads), average)
    return round_half_up(min(100.0, max(0.0, 100 - variation * 100)), 1)


def calculate_team_health(
    velocity: Sequence[VelocityBucket],
    contributors: Sequence[ContributorMetric],
    cycle_times: CycleTimeReport,
    summary: SprintSummary,
) -> TeamHealthMetrics:
    """Team-level indicators and their grades"""
    velocity_trend = velocity[-1].completed - velocity[0].completed if velocity else 0.0

    grades: Dict[str, str] = {
        "cycle_time": _grade_lower_better(cycle_times.average, CYCLE_TIME_THRESHOLDS),
        "efficiency": _grade_higher_better(summary.team_efficiency, EFFICIENCY_THRESHOLDS),
        "completion": _grade_higher_better(summary.completion_rate, COMPLETION_THRESHOLDS),
    }

    health = TeamHealthMetrics(
        velocity_trend=round_half_up(velocity_trend, 1),
        team_efficiency=summary.team_efficiency,
        workload_balance=workload_balance(contributors),
        avg_cycle_time=cycle_times.average,
        completion_rate=summary.completion_rate,
        grades=grades,
    )
    logger.debug("Team health grades: %s", grades)
    return health
