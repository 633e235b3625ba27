"""
Metric calculators.

Each calculator is a pure function (or a class of static methods) over
immutable task snapshots.
"""

from sprint_metrics.analytics.calculators.burndown import (
    BurndownCalculator,
    burndown_status,
    generate_burndown,
    index_entries,
    make_manual_entry,
    upsert_entry,
)
from sprint_metrics.analytics.calculators.capacity import CapacityCalculator, plan_capacity
from sprint_metrics.analytics.calculators.completion_trend import calculate_completion_trend
from sprint_metrics.analytics.calculators.contributors import aggregate_contributors
from sprint_metrics.analytics.calculators.cycle_time import calculate_cycle_times, task_cycle_time
from sprint_metrics.analytics.calculators.sprint_summary import SprintSummaryCalculator, summarize_sprint
from sprint_metrics.analytics.calculators.team_health import calculate_team_health
from sprint_metrics.analytics.calculators.velocity import (
    VelocityCalculator,
    aggregate_velocity,
    parse_time_range,
)
from sprint_metrics.analytics.calculators.work_distribution import calculate_work_distribution

__all__ = [
    'BurndownCalculator',
    'CapacityCalculator',
    'SprintSummaryCalculator',
    'VelocityCalculator',
    'aggregate_contributors',
    'aggregate_velocity',
    'burndown_status',
    'calculate_completion_trend',
    'calculate_cycle_times',
    'calculate_team_health',
    'calculate_work_distribution',
    'generate_burndown',
    'index_entries',
    'make_manual_entry',
    'parse_time_range',
    'plan_capacity',
    'summarize_sprint',
    'task_cycle_time',
    'upsert_entry',
]
