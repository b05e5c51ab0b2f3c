"""Output rounding conventions.

Calculations run at full float precision; rounding happens only when a result
model is assembled. Rounding is half away from zero on the scaled value, so
``round_to(0.125, 2)`` gives 0.13 where the built-in ``round`` gives 0.12.
"""

from __future__ import annotations

import math


def round_half_away(value: float) -> float:
    """Round to the nearest integer, ties away from zero. NaN and infinities pass through."""
    if not math.isfinite(value):
        return value
    whole = math.trunc(value)
    if abs(value - whole) >= 0.5:
        whole += 1 if value > 0 else -1
    return float(whole)


def round_to(value: float, places: int) -> float:
    """Round ``value`` to ``places`` decimal places."""
    factor = 10.0 ** places
    return round_half_away(value * factor) / factor


def to_percent(fraction: float, places: int = 1) -> float:
    """Scale a fraction to a percentage rounded to ``places`` decimals.

    ``to_percent(0.0883, 2)`` is computed as ``round(0.0883 * 10000) / 100``.
    """
    return round_half_away(fraction * 10.0 ** (places + 2)) / 10.0 ** places


def to_basis_points(fraction: float) -> float:
    """Convert a fraction to whole basis points."""
    return round_half_away(fraction * 10000.0)
