"""
Parametric Spec Engine.

Compares measured values against a spec's min/max limits. Measurements are
append-only and reference their spec by id; the most recent one by
measured_at decides a spec's current status.
"""
from typing import List, Optional

from semitools.core.models import ParametricSpec, MeasuredValue
from semitools.enums import TestStatus


def test_status(spec: ParametricSpec, value: float) -> TestStatus:
    """PASS when min_limit <= value <= max_limit, otherwise FAIL. Never MARGINAL."""
    if spec.min_limit <= value <= spec.max_limit:
        return TestStatus.PASS
    return TestStatus.FAIL


def measurements_for(measurements: List[MeasuredValue], spec_id: str) -> List[MeasuredValue]:
    """Measurements of one spec, newest first."""
    matching = [m for m in measurements if m.spec_id == spec_id]
    return sorted(matching, key=lambda m: m.measured_at, reverse=True)


def latest_measurement(measurements: List[MeasuredValue], spec_id: str) -> Optional[MeasuredValue]:
    ordered = measurements_for(measurements, spec_id)
    return ordered[0] if ordered else None


def latest_status(spec: ParametricSpec, measurements: List[MeasuredValue]) -> TestStatus:
    """Status of the newest measurement, or NO_DATA when the spec was never measured."""
    latest = latest_measurement(measurements, spec.id)
    if latest is None:
        return TestStatus.NO_DATA
    return test_status(spec, latest.value)


def margin(spec: ParametricSpec, value: float) -> float:
    """
    Signed distance from the limits as a percentage of the half-range.
    100 at the midpoint, 0 on a limit, negative outside the limits.
    Returns 0 for a degenerate spec with no width.
    """
    midpoint = (spec.min_limit + spec.max_limit) / 2.0
    half_range = (spec.max_limit - spec.min_limit) / 2.0
    if half_range <= 0:
        return 0.0
    deviation = abs(value - midpoint)
    return (half_range - deviation) / half_range * 100.0


def find_spec(specs: List[ParametricSpec], spec_id: str) -> Optional[ParametricSpec]:
    for spec in specs:
        if spec.id == spec_id:
            return spec
    return None


def is_value_in_spec(specs: List[ParametricSpec], spec_id: str, value: float) -> bool:
    """False when spec_id does not resolve."""
    spec = find_spec(specs, spec_id)
    if spec is None:
        return False
    return test_status(spec, value) is TestStatus.PASS
