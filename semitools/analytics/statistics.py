"""
Statistics Engine.

Descriptive statistics and process-capability indices over a sequence of
values. Degenerate inputs (empty set, a single value, zero spread) yield 0
rather than NaN so results can be displayed directly.

Cpk uses the sample standard deviation (n-1), Ppk the population standard
deviation (n). Both reject specification limits with LSL >= USL.
"""
from typing import Sequence

import numpy as np

from semitools.io.validation import validate_limits
from semitools.analytics.models import DescriptiveStats, CapabilityResult


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def count(values: Sequence[float]) -> int:
    return len(values)


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(_as_array(values)))


def median(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.median(_as_array(values)))


def sample_variance(values: Sequence[float]) -> float:
    if len(values) <= 1:
        return 0.0
    return float(np.var(_as_array(values), ddof=1))


def sample_std_dev(values: Sequence[float]) -> float:
    if len(values) <= 1:
        return 0.0
    return float(np.std(_as_array(values), ddof=1))


def population_std_dev(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.std(_as_array(values), ddof=0))


def minimum(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.min(_as_array(values)))


def maximum(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.max(_as_array(values)))


def value_range(values: Sequence[float]) -> float:
    return maximum(values) - minimum(values)


def _capability(mu: float, sigma: float, lsl: float, usl: float) -> float:
    upper = (usl - mu) / (3 * sigma)
    lower = (mu - lsl) / (3 * sigma)
    return min(upper, lower)


def cpk(values: Sequence[float], lsl: float, usl: float) -> float:
    """
    Cpk = min((USL - mean) / 3s, (mean - LSL) / 3s) with s the sample std dev.
    Returns 0 for fewer than two values or zero spread.
    """
    validate_limits(lsl, usl)
    if len(values) <= 1:
        return 0.0
    sigma = sample_std_dev(values)
    if sigma == 0:
        return 0.0
    return _capability(mean(values), sigma, lsl, usl)


def ppk(values: Sequence[float], lsl: float, usl: float) -> float:
    """Same as cpk but with the population std dev. Returns 0 for an empty set or zero spread."""
    validate_limits(lsl, usl)
    if len(values) == 0:
        return 0.0
    sigma = population_std_dev(values)
    if sigma == 0:
        return 0.0
    return _capability(mean(values), sigma, lsl, usl)


def describe(values: Sequence[float]) -> DescriptiveStats:
    return DescriptiveStats(
        count=count(values),
        mean=mean(values),
        median=median(values),
        std_dev=sample_std_dev(values),
        variance=sample_variance(values),
        minimum=minimum(values),
        maximum=maximum(values),
        range=value_range(values),
    )


def capability(values: Sequence[float], lsl: float, usl: float) -> CapabilityResult:
    return CapabilityResult(lsl=lsl, usl=usl, cpk=cpk(values, lsl, usl), ppk=ppk(values, lsl, usl))


def histogram_bins(values: Sequence[float], max_bins: int = 20) -> int:
    """Bin count for a histogram of the values (square-root rule, capped)."""
    n = len(values)
    if n == 0:
        return 1
    return int(max(1, min(max_bins, np.ceil(np.sqrt(n)))))
