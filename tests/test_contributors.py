"""
Tests for contributor metrics aggregation.
"""

from sprint_metrics.analytics.calculators.contributors import aggregate_contributors, resolve_roster
from sprint_metrics.analytics.models import Collaborator

from conftest import build_task, utc


class TestContributorMetrics:
    """Test per-person metrics"""

    def test_reference_sprint(self, sprint_tasks, as_of):
        """Test counts, points, efficiency and velocity"""
        alice, bob = aggregate_contributors(sprint_tasks, time_range="30d", as_of=as_of)

        assert alice.name == "Alice"
        assert alice.task_count == 2
        assert (alice.completed_tasks, alice.in_progress_tasks, alice.todo_tasks) == (1, 0, 1)
        assert alice.points_total == 16
        assert alice.points_completed == 8
        assert alice.workload == 8
        assert alice.efficiency == 50
        assert alice.velocity == 1.6
        assert alice.average_cycle_time == 2.0

        assert bob.name == "Bob"
        assert (bob.completed_tasks, bob.in_progress_tasks, bob.todo_tasks) == (0, 1, 0)
        assert bob.points_in_progress == 5
        assert bob.efficiency == 0
        assert bob.velocity == 0
        assert bob.average_cycle_time == 0

    def test_completed_never_exceeds_total(self, sprint_tasks, as_of):
        for metric in aggregate_contributors(sprint_tasks, as_of=as_of):
            assert metric.points_completed <= metric.points_total

    def test_velocity_uses_whole_weeks(self, sprint_tasks, as_of):
        """Test a one-week window divides by one"""
        alice = aggregate_contributors(sprint_tasks, time_range="7d", as_of=as_of)[0]
        assert alice.velocity == 8

    def test_board_roster_is_used(self, sprint_tasks, as_of):
        """Test collaborators without tasks still appear, sorted stably"""
        roster = [
            Collaborator(name="Bob", email="bob@example.com"),
            Collaborator(name="Carol"),
            Collaborator(name="Alice"),
        ]
        metrics = aggregate_contributors(sprint_tasks, roster, as_of=as_of)

        assert [m.name for m in metrics] == ["Alice", "Bob", "Carol"]
        carol = metrics[2]
        assert carol.task_count == 0
        assert carol.efficiency == 0
        assert carol.workload == 0

    def test_match_by_email_then_name(self, as_of):
        """Test tasks referencing a collaborator by email or by name"""
        tasks = [
            build_task("a", status="done", points=3, assigned_to="alice@example.com", done_at=utc(2025, 3, 11)),
            build_task("b", points=5, assigned_to={"name": "alice"}),
            build_task("c", points=8, assigned_to="mallory@example.com"),
        ]
        roster = [Collaborator(name="Alice", email="Alice@example.com")]
        alice = aggregate_contributors(tasks, roster, as_of=as_of)[0]
        assert alice.task_count == 2
        assert alice.points_total == 8

    def test_efficiency_rounds_half_up(self, as_of):
        """Test 1 of 8 done is 13%"""
        tasks = [build_task(f"t{i}", assigned_to="Dana") for i in range(7)]
        tasks.append(build_task("done", status="done", assigned_to="Dana", done_at=utc(2025, 3, 11)))
        assert aggregate_contributors(tasks, as_of=as_of)[0].efficiency == 13

    def test_no_contributors(self, as_of):
        """Test unassigned tasks produce no contributors"""
        assert aggregate_contributors([build_task("a")], as_of=as_of) == []

    def test_roster_from_assignees(self, sprint_tasks):
        """Test distinct assignees in first-seen order"""
        assert [c.name for c in resolve_roster(sprint_tasks)] == ["Alice", "Bob"]

    def test_same_assignee_by_name_and_email_is_one_contributor(self, as_of):
        """Test a plain name and a name with email collapse into one person"""
        tasks = [
            build_task("a", status="done", points=3, assigned_to="Alice", done_at=utc(2025, 3, 11)),
            build_task("b", points=5, assigned_to={"name": "Alice", "email": "alice@x.com"}),
        ]
        roster = resolve_roster(tasks)
        assert len(roster) == 1
        assert roster[0].email == "alice@x.com"

        metrics = aggregate_contributors(tasks, as_of=as_of)
        assert len(metrics) == 1
        assert sum(m.task_count for m in metrics) == 2
        assert metrics[0].points_total == 8

    def test_different_emails_stay_separate(self):
        tasks = [
            build_task("a", assigned_to={"name": "Sam", "email": "sam@a.com"}),
            build_task("b", assigned_to={"name": "Sam", "email": "sam@b.com"}),
        ]
        assert [c.email for c in resolve_roster(tasks)] == ["sam@a.com", "sam@b.com"]
