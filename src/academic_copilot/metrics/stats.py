"""Small statistics helpers shared by the scoring engines and analyses."""

from __future__ import annotations

from collections.abc import Sequence
from statistics import mean, pstdev


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def safe_mean(values: Sequence[float]) -> float:
    return float(mean(values)) if values else 0.0


def safe_ratio(numerator: float, denominator: float) -> float:
    """Return numerator / denominator, or 0 when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    return float(numerator) / float(denominator)


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population std-dev over mean; 0 for empty input or a non-positive mean."""
    if not values:
        return 0.0
    avg = mean(values)
    if avg <= 0:
        return 0.0
    return float(pstdev(values)) / float(avg)


def ols_slope(values: Sequence[float]) -> float:
    """Least-squares slope of ``values`` against x = 0..n-1.

    slope = (n*Sxy - Sx*Sy) / (n*Sxx - Sx^2); a degenerate series yields 0.
    """
    n = len(values)
    if n < 2:
        return 0.0
    sum_x = sum_y = sum_xy = sum_xx = 0.0
    for x, y in enumerate(values):
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_xx += x * x
    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def direction(slope: float, *, rising: str, falling: str, threshold: float = 0.05) -> str:
    if slope > threshold:
        return rising
    if slope < -threshold:
        return falling
    return "stable"
