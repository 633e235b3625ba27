# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Sprint summary calculator.

Rolls tasks, velocity buckets and contributor metrics up into the headline
numbers of a sprint.
"""

import logging
import math
from typing import Optional, Sequence

from sprint_metrics.analytics.adapters.task_status_resolver import TaskState
from sprint_metrics.analytics.models import (
    ContributorMetric,
    ProjectedCompletion,
    SprintSummary,
    Task,
    VelocityBucket,
)
from sprint_metrics.utils.config import Settings, get_settings
from sprint_metrics.utils.numeric import finite_or_zero, mean, percentage, round_half_up, safe_div

logger = logging.getLogger(__name__)


def project_completion(remaining: float, velocity: float) -> ProjectedCompletion:
    """Periods needed to burn ``remaining`` at ``velocity``; unknown when the pace is zero"""
    if velocity > 0:
        return ProjectedCompletion.known(math.ceil(safe_div(remaining, velocity)))
    if remaining > 0:
        return ProjectedCompletion.unknown()
    return ProjectedCompletion.known(0)


class SprintSummaryCalculator:
    """Generates the sprint rollup"""

    @staticmethod
    def calculate(
        tasks: Sequence[Task],
        velocity: Sequence[VelocityBucket],
        contributors: Sequence[ContributorMetric],
        settings: Optional[Settings] = None,
    ) -> SprintSummary:
        """
        Summarize a sprint.

        Args:
            tasks: Sprint tasks
            velocity: Velocity buckets, oldest first
            contributors: Contributor metrics
            settings: Engine settings (prediction window)

        Returns:
            SprintSummary with totals, rates and the projected completion
        """
        settings = settings or get_settings()

        done = [task for task in tasks if task.state == TaskState.DONE]
        total_points = finite_or_zero(sum(task.resolved_points for task in tasks))
        completed_points = finite_or_zero(sum(task.resolved_points for task in done))
        remaining_points = total_points - completed_points

        completed_per_bucket = [bucket.completed for bucket in velocity]
        avg_velocity = mean(completed_per_bucket)
        if len(completed_per_bucket) >= settings.prediction_window:
            predicted_velocity = mean(completed_per_bucket[-settings.prediction_window:])
        else:
            predicted_velocity = avg_velocity

        summary = SprintSummary(
            total_points=total_points,
            completed_points=completed_points,
            remaining_points=remaining_points,
            completion_rate=percentage(completed_points, total_points),
            total_tasks=len(tasks),
            completed_tasks=len(done),
            in_progress_tasks=sum(1 for task in tasks if task.state == TaskState.IN_PROGRESS),
            avg_velocity=round_half_up(avg_velocity, 1),
            predicted_velocity=round_half_up(predicted_velocity, 1),
            projected_completion=project_completion(remaining_points, avg_velocity),
            team_efficiency=round_half_up(mean(c.efficiency for c in contributors), 1),
        )
        logger.debug(
            "Sprint summary: %s/%s points, avg_velocity=%s, projection=%s",
            completed_points, total_points, summary.avg_velocity, summary.projected_completion.status,
        )
        return summary


def summarize_sprint(
    tasks: Sequence[Task],
    velocity: Sequence[VelocityBucket],
    contributors: Sequence[ContributorMetric],
    settings: Optional[Settings] = None,
) -> SprintSummary:
    """Functional entry point for :meth:`SprintSummaryCalculator.calculate`"""
    return SprintSummaryCalculator.calculate(tasks, velocity, contributors, settings)
