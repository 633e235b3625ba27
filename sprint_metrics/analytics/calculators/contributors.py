# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Contributor metrics aggregator.

Per-person task counts, points, cycle time, efficiency and velocity.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from sprint_metrics.analytics.adapters.task_status_resolver import TaskState
from sprint_metrics.analytics.adapters.timestamps import normalize_timestamp, utc_now
from sprint_metrics.analytics.calculators.cycle_time import task_cycle_time
from sprint_metrics.analytics.calculators.velocity import TimeRange, parse_time_range, period_weeks
from sprint_metrics.analytics.models import Collaborator, ContributorMetric, Task
from sprint_metrics.utils.numeric import mean, percentage, round_half_up, safe_div

logger = logging.getLogger(__name__)


def resolve_roster(tasks: Sequence[Task], collaborators: Iterable[Collaborator] = ()) -> List[Collaborator]:
    """Board collaborators when provided, else the distinct task assignees in first-seen order"""
    roster = [c for c in collaborators if c.key]
    if roster:
        return roster

    for task in tasks:
        assignee = task.assigned_to
        if assignee is None or not assignee.key:
            continue
        for index, existing in enumerate(roster):
            if existing.matches(assignee) or existing.key == assignee.key:
                # same person; keep the reference that carries an email
                if not existing.email and assignee.email:
                    roster[index] = assignee
                break
        else:
            roster.append(assignee)
    return roster


def contributor_metric(
    collaborator: Collaborator,
    tasks: Sequence[Task],
    weeks: int,
    as_of: datetime,
) -> ContributorMetric:
    """Metrics for one collaborator over the tasks assigned to them"""
    assigned = [task for task in tasks if collaborator.matches(task.assigned_to)]
    done = [task for task in assigned if task.state == TaskState.DONE]
    in_progress = [task for task in assigned if task.state == TaskState.IN_PROGRESS]
    todo = [task for task in assigned if task.state == TaskState.TODO]

    points_total = sum(task.resolved_points for task in assigned)
    points_completed = sum(task.resolved_points for task in done)

    cycle_times = [task_cycle_time(task, as_of) for task in done]
    cycle_times = [days for days in cycle_times if days is not None]

    return ContributorMetric(
        name=collaborator.name or collaborator.email or "",
        email=collaborator.email,
        task_count=len(assigned),
        completed_tasks=len(done),
        in_progress_tasks=len(in_progress),
        todo_tasks=len(todo),
        points_total=points_total,
        points_completed=points_completed,
        points_in_progress=sum(task.resolved_points for task in in_progress),
        average_cycle_time=round_half_up(mean(cycle_times), 1),
        efficiency=int(percentage(len(done), len(assigned), digits=0)),
        workload=points_total - points_completed,
        velocity=round_half_up(safe_div(points_completed, weeks), 1),
    )


def aggregate_contributors(
    tasks: Sequence[Task],
    collaborators: Iterable[Collaborator] = (),
    time_range: TimeRange = "30d",
    as_of: Optional[datetime] = None,
) -> List[ContributorMetric]:
    """
    Aggregate contributor metrics.

    Args:
        tasks: Tasks to attribute
        collaborators: Board roster; distinct assignees are used when empty
        time_range: Window whose length (in weeks) divides completed points
        as_of: Fallback instant for cycle-time markers

    Returns:
        ContributorMetric list sorted by completed points, highest first
    """
    weeks = period_weeks(parse_time_range(time_range))
    as_of = normalize_timestamp(as_of, default=None) or utc_now()

    roster = resolve_roster(tasks, collaborators)
    metrics = [contributor_metric(person, tasks, weeks, as_of) for person in roster]
    metrics.sort(key=lambda m: m.points_completed, reverse=True)

    logger.debug("Aggregated %d contributors over %d week(s)", len(metrics), weeks)
    return metrics
