# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Configuration management for the sprint metrics engine.

Settings come from environment variables (``SPRINT_METRICS_`` prefix), an
optional ``.env`` file, and an optional YAML overlay file.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator
from pydantic_settings import BaseSettings

from sprint_metrics.utils.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Sprint metrics engine settings."""

    # Logging
    log_level: str = "WARNING"
    debug: bool = False
    log_file: Optional[str] = None

    # Planning constants
    capacity_points_per_person: float = 40.0  # points per person per week
    max_velocity_buckets: int = 8
    default_time_range: str = "30d"
    default_working_days: List[int] = [1, 2, 3, 4, 5]  # 0 = Sunday

    # Point estimation when a task has no explicit points
    priority_points: Dict[str, int] = {"high": 8, "medium": 5, "low": 3}
    default_points: int = 3

    # Projection windows
    prediction_window: int = 3  # buckets averaged for predicted velocity
    current_velocity_window: int = 5  # working days for burndown pace
    on_track_buffer: float = 1.1

    class Config:
        env_prefix = "SPRINT_METRICS_"
        env_file = ".env"
        extra = "ignore"

    @field_validator("default_working_days")
    @classmethod
    def _check_working_days(cls, value: List[int]) -> List[int]:
        invalid = [day for day in value if day < 0 or day > 6]
        if invalid:
            raise ValueError(f"weekday indices must be within 0..6, got {invalid}")
        return sorted(set(value))

    @field_validator("priority_points")
    @classmethod
    def _lowercase_priorities(cls, value: Dict[str, int]) -> Dict[str, int]:
        return {key.strip().lower(): points for key, points in value.items()}

    @field_validator("capacity_points_per_person", "on_track_buffer")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("max_velocity_buckets", "prediction_window", "current_velocity_window")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value


def _read_yaml(config_file: str) -> Dict[str, Any]:
    """Read a YAML overlay file into a dict"""
    path = Path(config_file)
    if not path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_file}",
            details={"path": str(path)},
        )
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Could not parse YAML config {config_file}: {e}",
            details={"path": str(path)},
        ) from e
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"YAML config {config_file} must contain a mapping",
            details={"path": str(path), "type": type(data).__name__},
        )
    return data


def load_settings(config_file: Optional[str] = None, **overrides: Any) -> Settings:
    """
    Build settings from environment, optional YAML overlay and explicit overrides.

    Later sources win: environment < YAML file < keyword overrides.
    """
    values: Dict[str, Any] = {}
    if config_file:
        values.update(_read_yaml(config_file))
        logger.debug("Loaded settings overlay from %s", config_file)
    values.update(overrides)
    try:
        return Settings(**values)
    except PydanticValidationError as e:
        raise ConfigurationError(
            "Invalid sprint metrics settings",
            details={"errors": [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]},
        ) from e


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()


def reload_settings() -> Settings:
    """Drop the cached settings and load them again"""
    get_settings.cache_clear()
    return get_settings()
