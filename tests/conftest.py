# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Pytest configuration and fixtures for all tests.

This file ensures the project root is in the Python path
so that imports work correctly for all test modules, and provides
task / sprint factories pinned to a fixed reference instant.
"""

import sys
from datetime import date, datetime, timezone
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Import pytest for fixtures
import pytest

from sprint_metrics.analytics.models import SprintConfig, Task
from sprint_metrics.utils.config import get_settings

# Wednesday of the first week of the reference sprint
AS_OF = datetime(2025, 3, 12, 15, 0, tzinfo=timezone.utc)
SPRINT_START = date(2025, 3, 10)  # Monday
SPRINT_END = date(2025, 3, 21)  # Friday of the following week


def utc(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def status_change(to: str, when: datetime, desc: str = None) -> dict:
    """A status-change progress log entry"""
    return {
        "type": "status-change",
        "desc": desc if desc is not None else f"Status changed to {to}",
        "to": to,
        "timestamp": when.isoformat(),
        "user": "alice@example.com",
    }


def build_task(
    task_id: str = "t1",
    status: str = "todo",
    points=5,
    priority: str = "medium",
    assigned_to=None,
    created_at: datetime = None,
    started_at: datetime = None,
    done_at: datetime = None,
    **extra,
) -> Task:
    """Build a task whose progress log enters progress/done at the given instants"""
    log = [{"type": "created", "desc": "Task created", "timestamp": (created_at or utc(2025, 3, 10, 9)).isoformat()}]
    if started_at is not None:
        log.append(status_change("In Progress", started_at))
    if done_at is not None:
        log.append(status_change("Done", done_at))
    data = {
        "id": task_id,
        "title": f"Task {task_id}",
        "status": status,
        "points": points,
        "priority": priority,
        "assignedTo": assigned_to,
        "createdAt": (created_at or utc(2025, 3, 10, 9)).isoformat(),
        "progressLog": log,
    }
    data.update(extra)
    return Task.model_validate(data)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test starts from settings read anew"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def project_root_path():
    """Return the project root path."""
    return project_root


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def sprint():
    """Two-week Monday..Friday sprint around AS_OF"""
    return SprintConfig(start_date=SPRINT_START, end_date=SPRINT_END)


@pytest.fixture
def make_task():
    return build_task


@pytest.fixture
def sprint_tasks():
    """Three tasks: one done on Tuesday, one in progress, one untouched"""
    return [
        build_task("t1", status="Done", points=8, assigned_to="Alice",
                   started_at=utc(2025, 3, 10, 10), done_at=utc(2025, 3, 11, 16)),
        build_task("t2", status="In Progress", points=5, assigned_to="Bob",
                   started_at=utc(2025, 3, 11, 9)),
        build_task("t3", status="To Do", points=None, priority="High", assigned_to="Alice"),
    ]


@pytest.fixture
def raw_snapshot():
    """Snapshot document as the board store hands it over"""
    return {
        "tasks": [
            {
                "id": "t1",
                "title": "Login page",
                "status": "Done",
                "points": 8,
                "priority": "High",
                "assignedTo": {"uid": "u1", "email": "alice@example.com", "name": "Alice"},
                "createdAt": {"seconds": 1741597200, "nanoseconds": 0},  # 2025-03-10T09:00Z
                "progressLog": [
                    status_change("In Progress", utc(2025, 3, 10, 10)),
                    status_change("Done", utc(2025, 3, 11, 16)),
                ],
            },
            {
                "id": "t2",
                "title": "Signup API",
                "status": "inprogress",
                "priority": "Medium",
                "assignedTo": "bob@example.com",
                "createdAt": "2025-03-10T09:30:00Z",
                "progressLog": [status_change("In Progress", utc(2025, 3, 11, 9))],
            },
            {
                "id": "t3",
                "title": "Password reset",
                "status": "todo",
                "priority": "Low",
                "createdAt": 1741683600000,  # 2025-03-11T09:00Z in epoch millis
            },
        ],
        "collaborators": [
            {"name": "Alice", "email": "alice@example.com", "role": "admin"},
            {"name": "Bob", "email": "bob@example.com", "role": "user"},
        ],
        "burndownData": {
            "sprintConfig": {
                "startDate": "2025-03-10",
                "endDate": "2025-03-21",
                "totalPoints": 99,
                "workingDays": [1, 2, 3, 4, 5],
                "sprintGoal": "Ship auth",
            },
            "entries": [],
        },
    }
