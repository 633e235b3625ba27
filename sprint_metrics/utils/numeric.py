# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Numeric guards shared by the calculators.

Every ratio the engine reports goes through these helpers so callers never
see NaN, Infinity or a ZeroDivisionError.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable


def finite_or_zero(value: float) -> float:
    """Coerce NaN and +/-Infinity to 0"""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` when the denominator is zero or the result is not finite"""
    if not denominator:
        return default
    result = numerator / denominator
    return result if math.isfinite(result) else default


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean, 0 for an empty input"""
    values = [finite_or_zero(v) for v in values]
    return safe_div(sum(values), len(values))


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero (2.5 -> 3), unlike the built-in banker's rounding"""
    value = finite_or_zero(value)
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: float, whole: float, digits: int = 1) -> float:
    """``part / whole * 100`` rounded, 0 when ``whole`` is 0"""
    return round_half_up(safe_div(part, whole) * 100, digits)
