"""Robust aggregate statistics for health rollups."""

from typing import Optional, Sequence, Union

import numpy as np

Number = Union[int, float]


def lower_median(values: Sequence[Number]) -> Optional[Number]:
    """
    Median by floor index: sort ascending, take element ``n // 2``.

    Always returns an observed value (never an average of two), so a rolled-up
    score is reproducible for even counts and one outlier cannot drag it.

    Args:
        values: Scores to aggregate

    Returns:
        The selected value as a Python scalar, or None for empty input
    """
    if len(values) == 0:
        return None
    # index into the originals so mixed int/float input keeps each value's type
    order = np.argsort(np.asarray(values, dtype=float), kind="stable")
    return values[int(order[len(values) // 2])]


def safe_ratio(numerator: Number, denominator: Number) -> float:
    """numerator / denominator, 0.0 when the denominator is zero."""
    if not denominator:
        return 0.0
    return float(numerator) / float(denominator)


def percent(rate: float) -> int:
    """Rate in [0, 1] as a whole percentage, halves rounded up."""
    return int(np.floor(rate * 100 + 0.5))
