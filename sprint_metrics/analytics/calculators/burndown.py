# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Burndown chart calculator.

Generates the per-day ideal vs actual remaining-points series for a sprint,
reconciling computed values with manual overrides, and reads the sprint's
current standing off that series.
"""

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from sprint_metrics.analytics.adapters.event_log import completion_instant
from sprint_metrics.analytics.adapters.timestamps import normalize_timestamp, utc_now
from sprint_metrics.analytics.calculators.sprint_summary import project_completion
from sprint_metrics.analytics.calculators.working_calendar import (
    date_range,
    ideal_remaining,
    is_working_day,
    total_working_days,
)
from sprint_metrics.analytics.models import (
    BurndownEntry,
    BurndownPoint,
    BurndownStatus,
    SprintConfig,
    Task,
)
from sprint_metrics.utils.config import Settings, get_settings
from sprint_metrics.utils.numeric import finite_or_zero, percentage, safe_div

logger = logging.getLogger(__name__)


def index_entries(entries: Iterable[BurndownEntry]) -> Dict[str, BurndownEntry]:
    """Key overrides by ISO date; a later entry for the same date wins"""
    return {entry.key: entry for entry in entries}


def make_manual_entry(
    day: date,
    remaining_points: float,
    total_points: float,
    note: Optional[str] = None,
    updated_by: Optional[str] = None,
) -> BurndownEntry:
    """Build an override, deriving completed points from the scope at entry time"""
    return BurndownEntry(
        date=day,
        remaining_points=remaining_points,
        completed_points=total_points - remaining_points,
        note=note,
        is_manual=True,
        updated_by=updated_by,
    )


def upsert_entry(entries: Iterable[BurndownEntry], entry: BurndownEntry) -> List[BurndownEntry]:
    """Return a new date-sorted list with ``entry`` replacing any entry for its date"""
    kept = [existing for existing in entries if existing.key != entry.key]
    kept.append(entry)
    return sorted(kept, key=lambda e: e.date)


class BurndownCalculator:
    """Calculates burndown series and sprint standing"""

    @staticmethod
    def total_points(tasks: Sequence[Task]) -> float:
        """Sprint scope, always recomputed from the live task set"""
        return sum(task.resolved_points for task in tasks)

    @staticmethod
    def calculate(
        tasks: Sequence[Task],
        sprint: SprintConfig,
        entries: Iterable[BurndownEntry] = (),
        as_of: Optional[datetime] = None,
    ) -> List[BurndownPoint]:
        """
        Calculate the burndown series for a sprint.

        For every calendar day of the sprint the actual value comes from, in
        order: a manual override for that day; the points of done tasks
        completed on or before that day (past and current days); the ideal
        value (future days).

        Args:
            tasks: Sprint tasks
            sprint: Sprint window and working days
            entries: Manual overrides
            as_of: Reference instant for "today"; defaults to now

        Returns:
            One BurndownPoint per calendar day, in date order
        """
        as_of = normalize_timestamp(as_of, default=None) or utc_now()
        today = as_of.date()
        total_points = BurndownCalculator.total_points(tasks)
        overrides = index_entries(entries)

        working_days = set(sprint.working_days)
        holidays = set(sprint.holidays)
        sprint_working_days = total_working_days(
            sprint.start_date, sprint.end_date, working_days, holidays
        )

        completions = []
        for task in tasks:
            instant = completion_instant(task)
            if instant is not None:
                completions.append((instant.date(), task.resolved_points))

        logger.debug(
            "Burndown %s..%s: scope=%s, working_days=%d, completed_tasks=%d, overrides=%d",
            sprint.start_date, sprint.end_date, total_points,
            sprint_working_days, len(completions), len(overrides),
        )

        series = []
        elapsed = 0
        for day in date_range(sprint.start_date, sprint.end_date):
            working_day = is_working_day(day, working_days, holidays)
            if working_day:
                elapsed += 1
            ideal = ideal_remaining(total_points, elapsed, sprint_working_days)

            entry = overrides.get(day.isoformat())
            if entry is not None:
                actual = entry.remaining_points
                completed = entry.completed_points
            elif day <= today:
                completed = sum(points for done_on, points in completions if done_on <= day)
                actual = max(0.0, total_points - completed)
            else:
                actual = ideal
                completed = 0.0

            series.append(BurndownPoint(
                date=day,
                ideal_remaining=round(finite_or_zero(ideal), 2),
                actual_remaining=round(finite_or_zero(actual), 2),
                completed_points=round(finite_or_zero(completed), 2),
                is_today=day == today,
                is_working_day=working_day,
                is_manual=entry is not None,
                note=entry.note if entry is not None else None,
            ))

        return series

    @staticmethod
    def status(
        series: Sequence[BurndownPoint],
        total_points: float,
        as_of: Optional[datetime] = None,
        settings: Optional[Settings] = None,
    ) -> BurndownStatus:
        """
        Summarize where the sprint stands today.

        ``current_velocity`` is the average points burned per working day over
        the last few elapsed working days; ``velocity_needed`` is what each
        remaining working day has to burn to finish on time.
        """
        settings = settings or get_settings()
        as_of = normalize_timestamp(as_of, default=None) or utc_now()
        today = as_of.date()

        elapsed_points = [point for point in series if point.date <= today]
        latest = elapsed_points[-1] if elapsed_points else None
        remaining = latest.actual_remaining if latest else total_points
        completed = latest.completed_points if latest else 0.0

        days_remaining = sum(1 for point in series if point.date > today and point.is_working_day)
        velocity_needed = safe_div(remaining, days_remaining)

        # Cumulative completed points at sprint start and after each elapsed working day
        burned = [0.0] + [point.completed_points for point in elapsed_points if point.is_working_day]
        window = burned[-(settings.current_velocity_window + 1):]
        current_velocity = max(0.0, safe_div(window[-1] - window[0], len(window) - 1))

        return BurndownStatus(
            remaining_points=round(finite_or_zero(remaining), 2),
            completed_points=round(finite_or_zero(completed), 2),
            days_remaining=days_remaining,
            velocity_needed=round(velocity_needed, 1),
            current_velocity=round(current_velocity, 1),
            projected_completion=project_completion(remaining, current_velocity),
            is_on_track=velocity_needed <= current_velocity * settings.on_track_buffer,
            completion_percentage=percentage(completed, total_points),
        )


def generate_burndown(
    tasks: Sequence[Task],
    sprint: SprintConfig,
    entries: Iterable[BurndownEntry] = (),
    as_of: Optional[datetime] = None,
) -> List[BurndownPoint]:
    """Functional entry point for :meth:`BurndownCalculator.calculate`"""
    return BurndownCalculator.calculate(tasks, sprint, entries, as_of)


def burndown_status(
    series: Sequence[BurndownPoint],
    total_points: float,
    as_of: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> BurndownStatus:
    return BurndownCalculator.status(series, total_points, as_of, settings)
