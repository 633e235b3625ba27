# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Working-day calendar arithmetic.

Weekday indices follow the board convention: 0 = Sunday, 1 = Monday, ...,
6 = Saturday. Holidays are dates removed from the working set even when their
weekday is a working day.
"""

from datetime import date, timedelta
from typing import Collection, List


def weekday_index(day: date) -> int:
    """Weekday with Sunday = 0"""
    return day.isoweekday() % 7


def date_range(start: date, end: date) -> List[date]:
    """Every date in ``[start, end]``; empty when ``end < start``"""
    if end < start:
        return []
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def is_working_day(
    day: date,
    working_days: Collection[int],
    holidays: Collection[date] = (),
) -> bool:
    return weekday_index(day) in working_days and day not in holidays


def _count_working_days(
    start: date,
    end: date,
    working_days: Collection[int],
    holidays: Collection[date],
) -> int:
    working = set(working_days)
    off = set(holidays)
    return sum(1 for day in date_range(start, end) if is_working_day(day, working, off))


def working_days_elapsed(
    start: date,
    as_of: date,
    working_days: Collection[int],
    holidays: Collection[date] = (),
) -> int:
    """Working days in ``[start, as_of]``, 0 when ``as_of`` precedes ``start``"""
    return _count_working_days(start, as_of, working_days, holidays)


def total_working_days(
    start: date,
    end: date,
    working_days: Collection[int],
    holidays: Collection[date] = (),
) -> int:
    """Working days in ``[start, end]``"""
    return _count_working_days(start, end, working_days, holidays)


def ideal_remaining(total_points: float, elapsed: int, total: int) -> float:
    """
    Linear decay of the sprint scope across working days.

    With no working days there is nothing to decay over, so the full scope is
    returned unchanged.
    """
    if total == 0:
        return total_points
    return max(0.0, total_points * (1 - elapsed / total))
