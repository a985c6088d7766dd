"""Confidence score helpers.

Upstream models report confidence in whatever form they like: a float, an
int, a numeric string, ``null``, or nothing at all.  Everything formai hands
back to callers is a float in [0.0, 1.0].
"""

from __future__ import annotations

import math
from typing import Any

# Used when the upstream omits confidence or sends something non-numeric.
# Mid-range on purpose: neither "certain" nor "worthless".
NEUTRAL_CONFIDENCE = 0.5


def clamp_confidence(value: float) -> float:
    """Clamp *value* to [0.0, 1.0]."""
    return max(0.0, min(1.0, value))


def coerce_confidence(value: Any, default: float = NEUTRAL_CONFIDENCE) -> float:
    """Turn an arbitrary upstream confidence value into a clamped float.

    Args:
        value: Raw value from a provider response (may be missing or junk).
        default: Returned when *value* is ``None``, a bool, non-numeric, or NaN.

    Returns:
        A float in [0.0, 1.0]; ``1.5`` becomes ``1.0`` and ``-0.3`` becomes ``0.0``.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return clamp_confidence(number)
