# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Event log projection.

Reads "entered in-progress" and "entered done" markers out of a task's
progress log. Selection is first-match in log order: a task that went
done -> reopened -> done is measured from its first done event.
"""

from datetime import datetime
from typing import Callable, Iterable, Optional

from sprint_metrics.analytics.adapters.task_status_resolver import TaskState, resolve_state
from sprint_metrics.analytics.models import ProgressEvent, Task

STATUS_CHANGE = "status-change"

EventPredicate = Callable[[ProgressEvent], bool]


def first_event_matching(
    log: Iterable[ProgressEvent],
    predicate: EventPredicate,
) -> Optional[ProgressEvent]:
    """Return the first entry in log order satisfying ``predicate``, or None"""
    for event in log:
        if predicate(event):
            return event
    return None


def _is_status_change(event: ProgressEvent) -> bool:
    return event.type.strip().lower() == STATUS_CHANGE


def entered_in_progress(event: ProgressEvent) -> bool:
    """Status change into progress; the recorded target wins over the description"""
    if not _is_status_change(event):
        return False
    if event.to is not None:
        return resolve_state(event.to) == TaskState.IN_PROGRESS
    desc = event.desc.lower()
    return "in progress" in desc or "inprogress" in desc


def entered_done(event: ProgressEvent) -> bool:
    """Status change into done; the recorded target wins over the description"""
    if not _is_status_change(event):
        return False
    if event.to is not None:
        return resolve_state(event.to) == TaskState.DONE
    return "done" in event.desc.lower()


def in_progress_marker(task: Task) -> Optional[ProgressEvent]:
    """First event that moved the task into progress"""
    return first_event_matching(task.progress_log, entered_in_progress)


def done_marker(task: Task) -> Optional[ProgressEvent]:
    """First event that moved the task to done"""
    return first_event_matching(task.progress_log, entered_done)


def completion_instant(task: Task) -> Optional[datetime]:
    """
    When a done task was completed.

    Uses the first done event's timestamp, falling back to the task's creation
    instant. Tasks that are not currently done have no completion instant.
    """
    if not task.is_done:
        return None
    marker = done_marker(task)
    if marker is not None and marker.timestamp is not None:
        return marker.timestamp
    return task.created_at
