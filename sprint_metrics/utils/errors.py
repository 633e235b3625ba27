# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Error handling for the sprint metrics engine
Provides custom exceptions and centralized error conversion

The calculators never raise for malformed task data; these exceptions are
reserved for caller mistakes (bad parameters, unreadable snapshots, invalid
settings).
"""

import logging
import traceback
from typing import Any, Dict, Optional
from enum import Enum

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Error codes for different types of errors"""
    VALIDATION_ERROR = "VAL_001"
    CONFIGURATION_ERROR = "CONFIG_001"
    SNAPSHOT_ERROR = "SNAP_001"
    UNKNOWN_ERROR = "UNKNOWN_001"


class SprintMetricsError(Exception):
    """Base exception for the sprint metrics engine"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary"""
        return {
            'error_code': self.error_code.value,
            'message': self.message,
            'details': self.details
        }


class ValidationError(SprintMetricsError):
    """Invalid parameters passed by a caller"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class ConfigurationError(SprintMetricsError):
    """Configuration related errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class SnapshotError(SprintMetricsError):
    """A snapshot file could not be read or decoded"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.SNAPSHOT_ERROR, details)


def error_handler(error: Exception) -> Dict[str, Any]:
    """
    Centralized error handler that converts exceptions to standardized format

    Args:
        error: Exception to handle

    Returns:
        Dictionary with error information
    """
    if isinstance(error, SprintMetricsError):
        return {
            'error': True,
            'error_code': error.error_code.value,
            'message': error.message,
            'details': error.details,
            'type': error.__class__.__name__
        }
    else:
        return {
            'error': True,
            'error_code': ErrorCode.UNKNOWN_ERROR.value,
            'message': str(error),
            'details': {
                'traceback': traceback.format_exc()
            },
            'type': error.__class__.__name__
        }


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None):
    """Log error with context information"""
    error_info = error_handler(error)
    if context:
        error_info['context'] = context

    logger.error(
        "%s [%s] %s",
        error_info['type'], error_info['error_code'], error_info['message']
    )
    if error_info.get('details'):
        logger.debug("Error details: %s", error_info['details'])
