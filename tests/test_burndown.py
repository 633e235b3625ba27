"""
Tests for the burndown calculator.

Tests cover:
- Ideal trajectory over working and non-working days
- Actual values from completions, overrides and projection
- Manual override helpers
- Burndown status
"""

from datetime import date, datetime, timezone

import pytest

from sprint_metrics.analytics.calculators.burndown import (
    BurndownCalculator,
    burndown_status,
    generate_burndown,
    index_entries,
    make_manual_entry,
    upsert_entry,
)
from sprint_metrics.analytics.models import SprintConfig

from conftest import build_task, utc


def _by_date(series):
    return {point.date: point for point in series}


class TestIdealLine:
    """Test the ideal trajectory"""

    def test_scenario_ten_working_days(self):
        """Test 50 points over 10 working days is 25 after the fifth working day"""
        sprint = SprintConfig(
            start_date=date(2025, 3, 10), end_date=date(2025, 3, 19), working_days=[0, 1, 2, 3, 4, 5, 6]
        )
        tasks = [build_task("t", points=50)]
        series = generate_burndown(tasks, sprint, as_of=utc(2025, 3, 10))

        assert len(series) == 10
        assert series[4].ideal_remaining == 25
        assert series[-1].ideal_remaining == 0

    def test_flat_on_non_working_days(self, sprint, sprint_tasks, as_of):
        """Test ideal is non-increasing and constant over the weekend"""
        series = generate_burndown(sprint_tasks, sprint, as_of=as_of)
        ideals = [point.ideal_remaining for point in series]

        assert all(later <= earlier for earlier, later in zip(ideals, ideals[1:]))
        points = _by_date(series)
        friday, saturday, sunday = date(2025, 3, 14), date(2025, 3, 15), date(2025, 3, 16)
        assert points[friday].ideal_remaining == points[saturday].ideal_remaining == points[sunday].ideal_remaining
        assert not points[saturday].is_working_day

    def test_holidays_are_not_working_days(self, sprint_tasks, as_of):
        """Test a holiday keeps the ideal line flat"""
        sprint = SprintConfig(start_date=date(2025, 3, 10), end_date=date(2025, 3, 21), holidays=["2025-03-13"])
        points = _by_date(generate_burndown(sprint_tasks, sprint, as_of=as_of))

        assert not points[date(2025, 3, 13)].is_working_day
        assert points[date(2025, 3, 13)].ideal_remaining == points[date(2025, 3, 12)].ideal_remaining


class TestActualLine:
    """Test actual remaining points"""

    def test_reference_sprint(self, sprint, sprint_tasks, as_of):
        """Test computed past days and projected future days"""
        series = generate_burndown(sprint_tasks, sprint, as_of=as_of)
        points = _by_date(series)

        assert len(series) == 12
        assert points[date(2025, 3, 10)].ideal_remaining == pytest.approx(18.9)
        assert points[date(2025, 3, 10)].actual_remaining == 21
        assert points[date(2025, 3, 11)].actual_remaining == 13
        assert points[date(2025, 3, 11)].completed_points == 8
        assert points[date(2025, 3, 12)].is_today
        assert sum(1 for point in series if point.is_today) == 1

        future = points[date(2025, 3, 13)]
        assert future.actual_remaining == future.ideal_remaining == pytest.approx(12.6)
        assert future.completed_points == 0

    def test_all_completed_by_end_reaches_zero(self, sprint):
        """Test the end date shows nothing remaining once everything is done"""
        tasks = [
            build_task("a", status="done", points=5, done_at=utc(2025, 3, 12)),
            build_task("b", status="done", points=3, done_at=utc(2025, 3, 20)),
            build_task("c", status="done", points=None, priority="High", done_at=utc(2025, 3, 21, 23)),
        ]
        series = generate_burndown(tasks, sprint, as_of=datetime(2025, 3, 25, tzinfo=timezone.utc))
        assert series[-1].actual_remaining == 0
        assert series[-1].completed_points == 16

    def test_reopened_task_does_not_count(self, sprint, as_of):
        """Test a task with a done event that is no longer done stays remaining"""
        tasks = [build_task("a", status="In Progress", points=5, done_at=utc(2025, 3, 11))]
        points = _by_date(generate_burndown(tasks, sprint, as_of=as_of))
        assert points[date(2025, 3, 12)].actual_remaining == 5

    def test_sprint_total_is_recomputed(self, as_of, sprint_tasks):
        """Test the stored total is advisory"""
        sprint = SprintConfig(start_date=date(2025, 3, 10), end_date=date(2025, 3, 21), total_points=999)
        series = generate_burndown(sprint_tasks, sprint, as_of=as_of)
        assert series[0].actual_remaining == 21

    def test_no_tasks(self, sprint, as_of):
        """Test an empty sprint is all zeros"""
        series = generate_burndown([], sprint, as_of=as_of)
        assert all(point.ideal_remaining == 0 and point.actual_remaining == 0 for point in series)

    def test_deterministic(self, sprint, sprint_tasks, as_of):
        """Test identical inputs give identical output"""
        first = [p.model_dump(mode="json") for p in generate_burndown(sprint_tasks, sprint, as_of=as_of)]
        second = [p.model_dump(mode="json") for p in generate_burndown(sprint_tasks, sprint, as_of=as_of)]
        assert first == second


class TestManualOverrides:
    """Test manual override reconciliation"""

    def test_scenario_override_affects_one_day(self):
        """Test an override on day 3 changes only day 3"""
        sprint = SprintConfig(start_date=date(2025, 3, 10), end_date=date(2025, 3, 21))
        tasks = [build_task("t", points=50)]
        as_of = utc(2025, 3, 14)
        entry = make_manual_entry(date(2025, 3, 12), 40, 50, note="standup sync", updated_by="alice")

        plain = generate_burndown(tasks, sprint, as_of=as_of)
        overridden = generate_burndown(tasks, sprint, [entry], as_of=as_of)

        for before, after in zip(plain, overridden):
            if before.date == date(2025, 3, 12):
                assert after.actual_remaining == 40
                assert after.completed_points == 10
                assert after.is_manual
                assert after.note == "standup sync"
                assert after.ideal_remaining == before.ideal_remaining
            else:
                assert after == before

    def test_override_is_trusted_verbatim(self, sprint, sprint_tasks, as_of):
        """Test overrides are not validated against the total, even in the future"""
        entry = make_manual_entry(date(2025, 3, 18), 500, 21)
        points = _by_date(generate_burndown(sprint_tasks, sprint, [entry], as_of=as_of))
        assert points[date(2025, 3, 18)].actual_remaining == 500
        assert points[date(2025, 3, 18)].completed_points == -479

    def test_make_manual_entry(self):
        """Test completed points are derived at entry time"""
        entry = make_manual_entry(date(2025, 3, 12), 30, 50)
        assert entry.completed_points == 20
        assert entry.is_manual
        assert entry.key == "2025-03-12"

    def test_upsert_replaces_same_date(self):
        """Test one entry per date, sorted, input untouched"""
        existing = [make_manual_entry(date(2025, 3, 14), 20, 50), make_manual_entry(date(2025, 3, 12), 40, 50)]
        updated = upsert_entry(existing, make_manual_entry(date(2025, 3, 12), 35, 50))

        assert [e.key for e in updated] == ["2025-03-12", "2025-03-14"]
        assert updated[0].remaining_points == 35
        assert existing[1].remaining_points == 40

    def test_index_last_wins(self):
        """Test duplicate dates resolve to the last entry"""
        entries = [make_manual_entry(date(2025, 3, 12), 40, 50), make_manual_entry(date(2025, 3, 12), 30, 50)]
        assert index_entries(entries)["2025-03-12"].remaining_points == 30


class TestBurndownStatus:
    """Test sprint standing"""

    def test_reference_sprint(self, sprint, sprint_tasks, as_of):
        """Test standing on the Wednesday of week one"""
        series = generate_burndown(sprint_tasks, sprint, as_of=as_of)
        status = burndown_status(series, 21, as_of)

        assert status.remaining_points == 13
        assert status.completed_points == 8
        assert status.days_remaining == 7
        assert status.velocity_needed == pytest.approx(1.9)
        assert status.current_velocity == pytest.approx(2.7)
        assert status.projected_completion.is_known
        assert status.projected_completion.days == 5
        assert status.is_on_track
        assert status.completion_percentage == pytest.approx(38.1)

    def test_before_sprint_start(self, sprint, sprint_tasks):
        """Test no elapsed days means no pace and an unknown projection"""
        as_of = utc(2025, 3, 1)
        series = BurndownCalculator.calculate(sprint_tasks, sprint, as_of=as_of)
        status = BurndownCalculator.status(series, 21, as_of)

        assert status.remaining_points == 21
        assert status.current_velocity == 0
        assert status.days_remaining == 10
        assert not status.projected_completion.is_known
        assert status.projected_completion.days is None
        assert not status.is_on_track

    def test_finished_sprint(self, sprint):
        """Test nothing remaining projects zero days"""
        tasks = [build_task("a", status="done", points=5, done_at=utc(2025, 3, 11))]
        as_of = utc(2025, 3, 24)
        status = burndown_status(generate_burndown(tasks, sprint, as_of=as_of), 5, as_of)

        assert status.remaining_points == 0
        assert status.days_remaining == 0
        assert status.velocity_needed == 0
        assert status.projected_completion.days == 0
        assert status.completion_percentage == 100

    def test_zero_scope(self, sprint, as_of):
        """Test an empty sprint never divides by zero"""
        status = burndown_status(generate_burndown([], sprint, as_of=as_of), 0, as_of)
        assert status.completion_percentage == 0
        assert status.projected_completion.days == 0
