"""
Shared utilities: settings, logging and error types.
"""

from sprint_metrics.utils.config import Settings, get_settings, load_settings, reload_settings
from sprint_metrics.utils.errors import (
    ErrorCode,
    SprintMetricsError,
    ValidationError,
    ConfigurationError,
    SnapshotError,
    error_handler,
)

__all__ = [
    'Settings',
    'get_settings',
    'load_settings',
    'reload_settings',
    'ErrorCode',
    'SprintMetricsError',
    'ValidationError',
    'ConfigurationError',
    'SnapshotError',
    'error_handler',
]
