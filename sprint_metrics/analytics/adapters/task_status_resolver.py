# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Task Status Resolver

Boards let users name their columns freely, so the same state shows up as
"Done", "done", "In Progress", "inprogress", "in-progress" and so on. This
module collapses those spellings into a closed set of states once, at
ingestion, so the calculators never match on raw strings.

It also resolves story points: explicit points win, otherwise the priority
maps to a point estimate (High=8, Medium=5, Low=3 by default).
"""

import logging
import math
import re
from enum import Enum
from typing import Any, Optional

from sprint_metrics.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


class TaskState(str, Enum):
    """Normalized task states"""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class Priority(str, Enum):
    """Normalized priority levels"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Keys are status strings lowercased with spaces, dashes and underscores removed
DONE_KEYWORDS = frozenset({"done", "completed", "complete", "closed", "resolved", "finished"})
IN_PROGRESS_KEYWORDS = frozenset({"inprogress", "doing", "started", "wip", "inreview", "review"})

PRIORITY_SYNONYMS = {
    "high": Priority.HIGH,
    "highest": Priority.HIGH,
    "critical": Priority.HIGH,
    "urgent": Priority.HIGH,
    "medium": Priority.MEDIUM,
    "normal": Priority.MEDIUM,
    "low": Priority.LOW,
    "lowest": Priority.LOW,
    "minor": Priority.LOW,
}

_SEPARATORS = re.compile(r"[\s_\-]+")


def status_key(status: Any) -> str:
    """Lowercase a status and strip separators: "In Progress" -> "inprogress" """
    if status is None:
        return ""
    return _SEPARATORS.sub("", str(status)).lower()


def resolve_state(status: Any) -> TaskState:
    """
    Categorize a free-form status into todo / in_progress / done.

    Unknown or empty statuses are treated as todo.
    """
    if isinstance(status, TaskState):
        return status
    key = status_key(status)
    if key in DONE_KEYWORDS:
        return TaskState.DONE
    if key in IN_PROGRESS_KEYWORDS:
        return TaskState.IN_PROGRESS
    return TaskState.TODO


def resolve_priority(priority: Any) -> Optional[Priority]:
    """Map a free-form priority onto High / Medium / Low, or None if unknown"""
    if isinstance(priority, Priority):
        return priority
    if priority is None:
        return None
    return PRIORITY_SYNONYMS.get(str(priority).strip().lower())


def coerce_points(points: Any) -> Optional[float]:
    """
    Read an explicit point estimate.

    Returns None for anything that is not a finite, non-negative number so the
    caller falls back to the priority estimate.
    """
    if points is None or isinstance(points, bool):
        return None
    try:
        value = float(points)
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric points value %r", points)
        return None
    if not math.isfinite(value) or value < 0:
        logger.debug("Ignoring invalid points value %r", points)
        return None
    return value


def resolve_points(
    points: Any,
    priority: Any = None,
    settings: Optional[Settings] = None,
) -> float:
    """
    Resolve the points a task contributes to every aggregate.

    Args:
        points: Explicit estimate, may be absent or malformed
        priority: Priority used for the fallback estimate
        settings: Supplies the priority-to-points table

    Returns:
        Explicit points when valid, else the priority estimate, else the default
    """
    explicit = coerce_points(points)
    if explicit is not None:
        return explicit

    settings = settings or get_settings()
    resolved_priority = resolve_priority(priority)
    if resolved_priority is None:
        return float(settings.default_points)
    return float(settings.priority_points.get(resolved_priority.value, settings.default_points))
