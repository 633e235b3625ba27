# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Data models for sprint metrics.

Input models (Task, SprintConfig, Collaborator, BurndownEntry) accept the
loosely-typed documents the board store produces, in camelCase or snake_case,
and normalize them on construction. Output models are plain frozen records
that serialize cleanly with ``model_dump(mode="json")``.
"""

import logging
import math
from enum import Enum
from datetime import date as date_type, datetime, timedelta
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from sprint_metrics.analytics.adapters.task_status_resolver import (
    Priority,
    TaskState,
    coerce_points,
    resolve_points,
    resolve_priority,
    resolve_state,
)
from sprint_metrics.analytics.adapters.timestamps import (
    normalize_date,
    normalize_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)

DEFAULT_WORKING_DAYS: Tuple[int, ...] = (1, 2, 3, 4, 5)  # Monday..Friday, 0 = Sunday
DEFAULT_SPRINT_LENGTH_DAYS = 14


def _coerce_number(value: Any, default: float = 0.0) -> float:
    """Finite float or ``default``"""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


class _InputModel(BaseModel):
    """Immutable input record accepting camelCase or snake_case keys"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True
        extra = "ignore"


class _Record(BaseModel):
    """Immutable output record"""

    class Config:
        frozen = True


# Input models

class Collaborator(_InputModel):
    """A board member; tasks reference collaborators by name or email"""
    name: str = Field(default="", description="Display name")
    email: Optional[str] = Field(None, description="Email address")
    role: Optional[str] = Field(None, description="Board role (admin, manager, user)")

    @model_validator(mode="before")
    @classmethod
    def _from_reference(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, str):
            text = data.strip()
            return {"name": text, "email": text if "@" in text else None}
        if isinstance(data, dict):
            data = dict(data)
            name = _first_present(data, "name", "displayName", "display_name", "email", "uid")
            data["name"] = str(name).strip() if name is not None else ""
            if data.get("email") is not None:
                data["email"] = str(data["email"]).strip() or None
        return data

    @property
    def key(self) -> str:
        """Identity used to de-duplicate contributors"""
        if self.email:
            return self.email.lower()
        return self.name.lower()

    def matches(self, other: Optional["Collaborator"]) -> bool:
        """True when ``other`` refers to the same person (email first, then name)"""
        if other is None:
            return False
        if self.email and other.email:
            return self.email.lower() == other.email.lower()
        if self.name and other.name:
            return self.name.lower() == other.name.lower()
        return False


class ProgressEvent(_InputModel):
    """One entry of a task's append-only progress log"""
    type: str = Field(default="", description="Event tag, e.g. 'status-change'")
    desc: str = Field(default="", description="Free-text description")
    to: Optional[str] = Field(None, description="Target value of the change, when recorded")
    timestamp: Optional[datetime] = Field(None, description="When the event happened (UTC)")
    user: Optional[str] = Field(None, description="Acting user")

    @field_validator("type", "desc", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("to", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("user", mode="before")
    @classmethod
    def _user(cls, value: Any) -> Optional[str]:
        if isinstance(value, dict):
            value = _first_present(value, "name", "displayName", "email", "uid")
        return None if value is None else str(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _timestamp(cls, value: Any) -> Optional[datetime]:
        return normalize_timestamp(value)


class Task(_InputModel):
    """
    A task snapshot.

    ``state`` and ``resolved_points`` are derived at construction from the
    free-form ``status``, ``points`` and ``priority`` fields.
    """
    id: str = Field(default="", description="Task identifier")
    title: str = Field(default="", description="Task title")
    status: str = Field(default="", description="Raw board status")
    state: TaskState = Field(default=TaskState.TODO, description="Normalized state")
    priority: Optional[Priority] = Field(None, description="Normalized priority")
    points: Optional[float] = Field(None, description="Explicit estimate, if any")
    resolved_points: float = Field(default=0.0, description="Points counted in aggregates")
    assigned_to: Optional[Collaborator] = Field(None, description="Assignee")
    created_at: Optional[datetime] = Field(None, description="Creation instant (UTC)")
    progress_log: Tuple[ProgressEvent, ...] = Field(default=(), description="Ordered event log")

    @model_validator(mode="before")
    @classmethod
    def _derive_state_and_points(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if _first_present(data, "state") is None:
            data["state"] = resolve_state(data.get("status"))
        if _first_present(data, "resolved_points", "resolvedPoints") is None:
            data["resolved_points"] = resolve_points(data.get("points"), data.get("priority"))
        return data

    @field_validator("id", "title", "status", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("state", mode="before")
    @classmethod
    def _state(cls, value: Any) -> TaskState:
        return resolve_state(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> Optional[Priority]:
        return resolve_priority(value)

    @field_validator("points", mode="before")
    @classmethod
    def _points(cls, value: Any) -> Optional[float]:
        return coerce_points(value)

    @field_validator("assigned_to", mode="before")
    @classmethod
    def _assignee(cls, value: Any) -> Any:
        if isinstance(value, (Collaborator, dict)):
            return value
        if isinstance(value, str):
            return value if value.strip() else None
        # bare user ids are kept by value; anything else leaves the task unassigned
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if value is not None:
            logger.debug("Ignoring unusable assignee %r", value)
        return None

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_at(cls, value: Any) -> Optional[datetime]:
        return normalize_timestamp(value)

    @field_validator("progress_log", mode="before")
    @classmethod
    def _progress_log(cls, value: Any) -> List[Any]:
        if not value:
            return []
        if isinstance(value, (str, bytes, dict)):
            logger.debug("Ignoring malformed progress log %r", value)
            return []
        entries = []
        for entry in value:
            if isinstance(entry, (dict, ProgressEvent)):
                entries.append(entry)
            else:
                logger.debug("Skipping malformed progress log entry %r", entry)
        return entries

    @property
    def is_done(self) -> bool:
        return self.state == TaskState.DONE


class SprintConfig(_InputModel):
    """Sprint window and planning targets"""
    start_date: date_type = Field(..., description="First day of the sprint")
    end_date: date_type = Field(..., description="Last day of the sprint (inclusive)")
    total_points: float = Field(default=0.0, description="Stored total; advisory only")
    working_days: Tuple[int, ...] = Field(
        default=DEFAULT_WORKING_DAYS, description="Weekday indices, 0 = Sunday"
    )
    sprint_goal: str = Field(default="", description="Sprint goal")
    velocity_target: float = Field(default=0.0, description="Target points per week")
    holidays: Tuple[date_type, ...] = Field(default=(), description="Non-working dates")

    @model_validator(mode="before")
    @classmethod
    def _default_window(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        start = normalize_date(_first_present(data, "start_date", "startDate"))
        if start is None:
            start = utc_now().date()
        end = normalize_date(_first_present(data, "end_date", "endDate"))
        if end is None:
            end = start + timedelta(days=DEFAULT_SPRINT_LENGTH_DAYS)
        for key in ("startDate", "endDate"):
            data.pop(key, None)
        data["start_date"] = start
        data["end_date"] = end
        return data

    @field_validator("total_points", "velocity_target", mode="before")
    @classmethod
    def _number(cls, value: Any) -> float:
        return _coerce_number(value)

    @field_validator("sprint_goal", mode="before")
    @classmethod
    def _goal(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("working_days", mode="before")
    @classmethod
    def _working_days(cls, value: Any) -> Tuple[int, ...]:
        if value is None:
            return DEFAULT_WORKING_DAYS
        days = set()
        for day in value:
            if isinstance(day, bool):
                continue
            try:
                index = int(day)
            except (TypeError, ValueError):
                logger.debug("Ignoring invalid weekday index %r", day)
                continue
            if 0 <= index <= 6:
                days.add(index)
        return tuple(sorted(days))

    @field_validator("holidays", mode="before")
    @classmethod
    def _holidays(cls, value: Any) -> Tuple[date_type, ...]:
        if not value:
            return ()
        parsed = (normalize_date(day) for day in value)
        return tuple(sorted({day for day in parsed if day is not None}))


class BurndownEntry(_InputModel):
    """A manual override of one day's remaining/completed points"""
    date: date_type = Field(..., description="Day being overridden")
    remaining_points: float = Field(..., description="Remaining points on that day")
    completed_points: float = Field(default=0.0, description="Completed points on that day")
    note: Optional[str] = Field(None, description="Why the value was entered")
    is_manual: bool = Field(default=True, description="Always true for overrides")
    updated_by: Optional[str] = Field(None, description="Who entered the value")

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, value: Any) -> Any:
        return normalize_date(value, default=value)

    @field_validator("remaining_points", "completed_points", mode="before")
    @classmethod
    def _number(cls, value: Any) -> float:
        return _coerce_number(value)

    @property
    def key(self) -> str:
        """Entries are keyed by ISO date"""
        return self.date.isoformat()


class MetricsSnapshot(_InputModel):
    """Everything one engine invocation reads"""
    tasks: Tuple[Task, ...] = Field(default=())
    sprint: Optional[SprintConfig] = Field(None)
    collaborators: Tuple[Collaborator, ...] = Field(default=())
    entries: Tuple[BurndownEntry, ...] = Field(default=())


# Output records

class BurndownPoint(_Record):
    """One day of the burndown series"""
    date: date_type
    ideal_remaining: float
    actual_remaining: float
    completed_points: float
    is_today: bool
    is_working_day: bool
    is_manual: bool
    note: Optional[str] = None


class ProjectedCompletion(_Record):
    """Days until completion, or explicitly unknown when the pace is zero"""
    status: Literal["known", "unknown"]
    days: Optional[int] = None

    @classmethod
    def known(cls, days: int) -> "ProjectedCompletion":
        return cls(status="known", days=max(0, int(days)))

    @classmethod
    def unknown(cls) -> "ProjectedCompletion":
        return cls(status="unknown", days=None)

    @property
    def is_known(self) -> bool:
        return self.status == "known"


class BurndownStatus(_Record):
    """Where the sprint stands today, read off the burndown series"""
    remaining_points: float
    completed_points: float
    days_remaining: int
    velocity_needed: float
    current_velocity: float
    projected_completion: ProjectedCompletion
    is_on_track: bool
    completion_percentage: float


class VelocityBucket(_Record):
    """Points completed in one weekly bucket"""
    period: str
    period_start: datetime
    period_end: datetime
    completed: float
    velocity: float
    capacity: float
    utilization: float
    trend: float


class CycleTimeItem(_Record):
    """Cycle time of one completed task"""
    task_id: str
    title: str
    started_at: datetime
    completed_at: datetime
    cycle_time_days: int


class CycleTimeBucket(_Record):
    bucket: str
    count: int
    percentage: int


class CycleTimeReport(_Record):
    """Aggregate cycle time plus its bucketed distribution"""
    items: Tuple[CycleTimeItem, ...] = ()
    distribution: Tuple[CycleTimeBucket, ...] = ()
    sample_size: int = 0
    average: float = 0.0
    median: float = 0.0
    percentile_85: float = 0.0


class ContributorMetric(_Record):
    """Workload and throughput of one contributor"""
    name: str
    email: Optional[str] = None
    task_count: int
    completed_tasks: int
    in_progress_tasks: int
    todo_tasks: int
    points_total: float
    points_completed: float
    points_in_progress: float
    average_cycle_time: float
    efficiency: int
    workload: float
    velocity: float


class CompletionTrendPoint(_Record):
    """Tasks created vs completed on one day"""
    date: date_type
    created: int
    completed: int
    net: int
    cumulative: int


class SprintSummary(_Record):
    """Top-level sprint rollup"""
    total_points: float
    completed_points: float
    remaining_points: float
    completion_rate: float
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    avg_velocity: float
    predicted_velocity: float
    projected_completion: ProjectedCompletion
    team_efficiency: float


class DistributionEntry(_Record):
    key: str
    count: int
    points: float
    completed: int
    percentage: float


class WorkDistribution(_Record):
    """Tasks grouped along one dimension (status, assignee or priority)"""
    dimension: str
    total: int
    entries: Tuple[DistributionEntry, ...] = ()


class TeamHealthMetrics(_Record):
    """Team-level health indicators with coarse grades"""
    velocity_trend: float
    team_efficiency: float
    workload_balance: float
    avg_cycle_time: float
    completion_rate: float
    grades: Dict[str, str] = Field(default_factory=dict)


class CapacityPlan(_Record):
    """Sprint capacity after holidays against the planned points"""
    duration_days: int
    working_days: int
    holidays: int
    estimated_capacity: float
    finalized_capacity: float
    planned_points: float
    utilization: float


class SprintMetricsReport(_Record):
    """Output of one full pipeline run"""
    as_of: datetime
    time_range_days: int
    burndown: Tuple[BurndownPoint, ...] = ()
    burndown_status: Optional[BurndownStatus] = None
    velocity: Tuple[VelocityBucket, ...] = ()
    cycle_time: CycleTimeReport
    contributors: Tuple[ContributorMetric, ...] = ()
    completion_trend: Tuple[CompletionTrendPoint, ...] = ()
    summary: SprintSummary
    team_health: TeamHealthMetrics
    status_distribution: WorkDistribution


# Chart models, for rendering collaborators


class ChartType(str, Enum):
    """Chart kinds produced by the chart adapters"""
    BURNDOWN = "burndown"
    VELOCITY = "velocity"
    CYCLE_TIME = "cycle_time"
    CONTRIBUTORS = "contributors"
    TREND = "trend"


class ChartDataPoint(BaseModel):
    """A single data point in a chart series"""
    date: Optional[datetime] = Field(None, description="Timestamp for time-series data")
    value: float = Field(..., description="Numeric value")
    label: Optional[str] = Field(None, description="Text label for categorical data")
    metadata: Optional[Dict[str, Any]] = Field(default_factory=dict, description="Additional metadata")


class ChartSeries(BaseModel):
    """A data series in a chart (e.g., 'Actual' line in burndown)"""
    name: str = Field(..., description="Series name")
    data: List[ChartDataPoint] = Field(default_factory=list, description="Data points")
    color: Optional[str] = Field(None, description="Hex color code")
    type: Optional[str] = Field(None, description="Chart type for this series (line, bar, area)")


class ChartResponse(BaseModel):
    """Standard response format for chart consumers"""
    chart_type: ChartType = Field(..., description="Type of chart")
    title: str = Field(..., description="Chart title")
    series: List[ChartSeries] = Field(default_factory=list, description="Data series")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Chart metadata and summary statistics")
    generated_at: datetime = Field(..., description="Instant the underlying metrics were computed for")
