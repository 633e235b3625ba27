# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Work Distribution Calculator

Calculates how work is distributed across different dimensions:
- By Status (normalized todo/in_progress/done)
- By Assignee (who is working on what)
- By Priority (high/medium/low priority breakdown)
"""

import logging
from collections import defaultdict
from typing import Any, Dict, Sequence

from sprint_metrics.analytics.models import DistributionEntry, Task, WorkDistribution
from sprint_metrics.utils.errors import ValidationError
from sprint_metrics.utils.numeric import percentage

logger = logging.getLogger(__name__)

DIMENSIONS = ("status", "assignee", "priority")
UNASSIGNED = "Unassigned"
UNKNOWN = "Unknown"


def _dimension_key(task: Task, dimension: str) -> str:
    if dimension == "status":
        return task.state.value
    if dimension == "assignee":
        assignee = task.assigned_to
        if assignee is None:
            return UNASSIGNED
        return assignee.name or assignee.email or UNASSIGNED
    return task.priority.value if task.priority is not None else UNKNOWN


def calculate_work_distribution(tasks: Sequence[Task], dimension: str = "status") -> WorkDistribution:
    """
    Calculate work distribution across a dimension.

    Args:
        tasks: Tasks to group
        dimension: One of 'status', 'assignee', 'priority'

    Returns:
        WorkDistribution with one entry per key, largest first

    Raises:
        ValidationError: for an unknown dimension
    """
    if dimension not in DIMENSIONS:
        raise ValidationError(
            f"Invalid dimension: {dimension}. Must be one of: {', '.join(DIMENSIONS)}",
            details={"dimension": dimension, "supported": list(DIMENSIONS)},
        )

    distribution: Dict[str, Dict[str, Any]] = defaultdict(lambda: {
        "count": 0,
        "points": 0.0,
        "completed": 0,
    })
    for task in tasks:
        bucket = distribution[_dimension_key(task, dimension)]
        bucket["count"] += 1
        bucket["points"] += task.resolved_points
        if task.is_done:
            bucket["completed"] += 1

    total = len(tasks)
    entries = [
        DistributionEntry(
            key=key,
            count=data["count"],
            points=data["points"],
            completed=data["completed"],
            percentage=percentage(data["count"], total),
        )
        for key, data in distribution.items()
    ]
    entries.sort(key=lambda entry: entry.count, reverse=True)

    logger.debug("Work distribution by %s: %d keys over %d tasks", dimension, len(entries), total)
    return WorkDistribution(dimension=dimension, total=total, entries=tuple(entries))
