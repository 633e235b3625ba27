# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Snapshot adapter.

Turns raw board documents (lists of dicts as the persistence layer hands them
over) into immutable models. Records that cannot be read at all are skipped
with a warning instead of failing the whole computation.
"""

import hashlib
import json
import logging
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from sprint_metrics.analytics.adapters.task_status_resolver import resolve_points
from sprint_metrics.analytics.models import (
    BurndownEntry,
    Collaborator,
    MetricsSnapshot,
    SprintConfig,
    Task,
)
from sprint_metrics.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


def _as_list(raw: Any, what: str) -> List[Any]:
    if raw is None:
        return []
    if isinstance(raw, dict):
        # Document stores often hand collections over keyed by id
        return list(raw.values())
    if isinstance(raw, (list, tuple)):
        return list(raw)
    logger.warning("Expected a list of %s, got %s; ignoring", what, type(raw).__name__)
    return []


def load_task(raw: Any, settings: Optional[Settings] = None, index: int = 0) -> Optional[Task]:
    """Build one Task, resolving its points with the configured priority table"""
    if isinstance(raw, Task):
        return raw
    if not isinstance(raw, dict):
        logger.warning("Skipping task #%d: expected a mapping, got %s", index, type(raw).__name__)
        return None

    settings = settings or get_settings()
    data = dict(raw)
    if not data.get("id"):
        data["id"] = f"task-{index}"
    data["resolved_points"] = resolve_points(data.get("points"), data.get("priority"), settings)
    try:
        return Task.model_validate(data)
    except PydanticValidationError as e:
        logger.warning("Skipping task %s: %s", data["id"], e)
        return None


def load_tasks(raw: Any, settings: Optional[Settings] = None) -> List[Task]:
    """Build tasks from raw documents, preserving order and skipping unreadable ones"""
    tasks = []
    for index, item in enumerate(_as_list(raw, "tasks")):
        task = load_task(item, settings, index)
        if task is not None:
            tasks.append(task)
    return tasks


def load_sprint_config(raw: Any, settings: Optional[Settings] = None) -> Optional[SprintConfig]:
    """Build the sprint configuration, or None when absent or unreadable"""
    if raw is None or isinstance(raw, SprintConfig):
        return raw
    if not isinstance(raw, dict):
        logger.warning("Ignoring sprint config of type %s", type(raw).__name__)
        return None
    data = dict(raw)
    if data.get("workingDays") is None and data.get("working_days") is None:
        data["working_days"] = (settings or get_settings()).default_working_days
    try:
        return SprintConfig.model_validate(data)
    except PydanticValidationError as e:
        logger.warning("Ignoring unreadable sprint config: %s", e)
        return None


def load_collaborators(raw: Any) -> List[Collaborator]:
    """Build the board roster; entries without a name or email are dropped"""
    roster = []
    for item in _as_list(raw, "collaborators"):
        try:
            collaborator = item if isinstance(item, Collaborator) else Collaborator.model_validate(item)
        except PydanticValidationError as e:
            logger.warning("Skipping collaborator %r: %s", item, e)
            continue
        if collaborator.key:
            roster.append(collaborator)
    return roster


def load_entries(raw: Any) -> List[BurndownEntry]:
    """Build manual burndown overrides; entries without a readable date are dropped"""
    entries = []
    for item in _as_list(raw, "burndown entries"):
        if isinstance(item, BurndownEntry):
            entries.append(item)
            continue
        try:
            entries.append(BurndownEntry.model_validate(item))
        except PydanticValidationError as e:
            logger.warning("Skipping burndown entry %r: %s", item, e)
    return entries


def _first_key(raw: dict, *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def load_snapshot(raw: Any, settings: Optional[Settings] = None) -> MetricsSnapshot:
    """
    Build a MetricsSnapshot from a raw document.

    Accepted top-level keys: ``tasks``, ``sprint`` / ``sprintConfig``,
    ``collaborators``, ``entries`` / ``burndownEntries``. A ``burndownData``
    block (``{"sprintConfig": ..., "entries": [...]}``) as stored on boards is
    also understood.
    """
    if isinstance(raw, MetricsSnapshot):
        return raw
    if not isinstance(raw, dict):
        logger.warning("Snapshot must be a mapping, got %s", type(raw).__name__)
        return MetricsSnapshot()

    burndown_data = raw.get("burndownData") or raw.get("burndown_data") or {}
    if not isinstance(burndown_data, dict):
        burndown_data = {}

    sprint_raw = _first_key(raw, "sprint", "sprintConfig", "sprint_config")
    if sprint_raw is None:
        sprint_raw = _first_key(burndown_data, "sprintConfig", "sprint_config")

    entries_raw = _first_key(raw, "entries", "burndownEntries", "burndown_entries")
    if entries_raw is None:
        entries_raw = burndown_data.get("entries")

    snapshot = MetricsSnapshot(
        tasks=load_tasks(raw.get("tasks"), settings),
        sprint=load_sprint_config(sprint_raw, settings),
        collaborators=load_collaborators(raw.get("collaborators")),
        entries=load_entries(entries_raw),
    )
    logger.debug(
        "Loaded snapshot: %d tasks, %d collaborators, %d manual entries",
        len(snapshot.tasks), len(snapshot.collaborators), len(snapshot.entries),
    )
    return snapshot


def snapshot_fingerprint(snapshot: MetricsSnapshot) -> str:
    """Stable SHA-256 of a snapshot, usable as a memoization key by callers"""
    payload = json.dumps(snapshot.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()

