"""
Ingestion adapters.

Normalize raw board data (timestamps, statuses, priorities, points, event
logs) before any calculator sees it. ``event_log`` and ``snapshot`` depend on
the models and are imported from their modules directly.
"""

from sprint_metrics.analytics.adapters.task_status_resolver import (
    Priority,
    TaskState,
    resolve_points,
    resolve_priority,
    resolve_state,
)
from sprint_metrics.analytics.adapters.timestamps import normalize_date, normalize_timestamp

__all__ = [
    'Priority',
    'TaskState',
    'resolve_points',
    'resolve_priority',
    'resolve_state',
    'normalize_date',
    'normalize_timestamp',
]
