# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Sprint Capacity Planner

Compares the points planned into a sprint against the team's capacity for the
sprint window, after removing holidays.
"""

import logging
from typing import Optional, Sequence

from sprint_metrics.analytics.calculators.working_calendar import total_working_days
from sprint_metrics.analytics.models import CapacityPlan, SprintConfig, Task
from sprint_metrics.utils.numeric import percentage, round_half_up

logger = logging.getLogger(__name__)


class CapacityCalculator:
    """Calculates sprint capacity after holidays"""

    DEFAULT_WEEKLY_CAPACITY = 200.0  # team points per week

    @classmethod
    def calculate(
        cls,
        sprint: SprintConfig,
        tasks: Sequence[Task],
        team_capacity_per_week: Optional[float] = None,
    ) -> CapacityPlan:
        """
        Calculate the capacity plan for a sprint.

        Args:
            sprint: Sprint window, working days and holidays
            tasks: Tasks planned into the sprint
            team_capacity_per_week: Team points per week (default: 200)

        Returns:
            CapacityPlan with estimated and finalized capacity and utilization
        """
        per_week = cls.DEFAULT_WEEKLY_CAPACITY if team_capacity_per_week is None else team_capacity_per_week
        per_week = max(0.0, float(per_week))

        duration = max(0, (sprint.end_date - sprint.start_date).days)
        holidays = len(sprint.holidays)

        estimated = per_week * duration / 7
        finalized = max(0.0, estimated - holidays * per_week / 7)
        planned = sum(task.resolved_points for task in tasks)

        plan = CapacityPlan(
            duration_days=duration,
            working_days=total_working_days(
                sprint.start_date, sprint.end_date, sprint.working_days, sprint.holidays
            ),
            holidays=holidays,
            estimated_capacity=round_half_up(estimated),
            finalized_capacity=round_half_up(finalized),
            planned_points=planned,
            utilization=percentage(planned, finalized),
        )
        logger.debug(
            "Capacity %s..%s: finalized=%s, planned=%s, utilization=%s%%",
            sprint.start_date, sprint.end_date, plan.finalized_capacity, planned, plan.utilization,
        )
        return plan


def plan_capacity(
    sprint: SprintConfig,
    tasks: Sequence[Task],
    team_capacity_per_week: Optional[float] = None,
) -> CapacityPlan:
    """Functional entry point for :meth:`CapacityCalculator.calculate`"""
    return CapacityCalculator.calculate(sprint, tasks, team_capacity_per_week)
