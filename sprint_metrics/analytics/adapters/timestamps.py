# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Timestamp normalization.

Task fields and progress-log entries arrive in whatever shape the write path
produced: datetime objects, ISO strings, epoch milliseconds, document-store
timestamp objects, or serialized ``{"seconds": ..., "nanoseconds": ...}``
mappings. Everything downstream works on timezone-aware UTC datetimes, and
this module is the only place that knows about the other shapes.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Methods that structured time objects expose for conversion to a datetime
_CONVERTER_METHODS = ("to_datetime", "ToDatetime", "toDate", "to_pydatetime")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _from_epoch_millis(value: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _from_string(value: str) -> Optional[datetime]:
    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return _as_utc(datetime.fromisoformat(text))
    except ValueError:
        pass
    try:
        return datetime.combine(date.fromisoformat(text), time.min, tzinfo=timezone.utc)
    except ValueError:
        return None


def _from_mapping(value: dict) -> Optional[datetime]:
    seconds = value.get("seconds", value.get("_seconds"))
    if seconds is None:
        return None
    nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
    try:
        return datetime.fromtimestamp(float(seconds) + float(nanos) / 1e9, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _convert(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _from_epoch_millis(float(value))
    if isinstance(value, str):
        return _from_string(value)
    if isinstance(value, dict):
        return _from_mapping(value)

    for method_name in _CONVERTER_METHODS:
        converter = getattr(value, method_name, None)
        if callable(converter):
            converted = converter()
            if isinstance(converted, datetime):
                return _as_utc(converted)
    return None


def normalize_timestamp(value: Any, default: Optional[datetime] = None) -> Optional[datetime]:
    """
    Convert any supported timestamp representation into a UTC datetime.

    Args:
        value: datetime, date, ISO-8601 string, epoch milliseconds,
               ``{"seconds", "nanoseconds"}`` mapping, or an object exposing
               ``to_datetime()`` / ``ToDatetime()`` / ``toDate()``
        default: Returned when ``value`` is absent or cannot be parsed

    Returns:
        Timezone-aware UTC datetime, or ``default``
    """
    if value is None:
        return default
    try:
        converted = _convert(value)
    except Exception as e:  # structured-time converters are third-party code
        logger.debug("Timestamp converter failed for %r: %s", value, e)
        converted = None
    if converted is None:
        logger.debug("Unparsable timestamp %r, using default", value)
        return default
    return converted


def normalize_date(value: Any, default: Optional[date] = None) -> Optional[date]:
    """Like :func:`normalize_timestamp` but returns the UTC calendar date"""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    instant = normalize_timestamp(value)
    if instant is None:
        return default
    return instant.date()


def utc_now() -> datetime:
    """Current instant in UTC"""
    return datetime.now(timezone.utc)
