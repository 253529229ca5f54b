"""
Period / Frequency Converter.

f = 1 / T, with the period scaled to seconds by its time unit and the
frequency scaled from Hz by its frequency unit. Inputs must be positive.
"""
from semitools.core.exceptions import ValidationError
from semitools.core.models import PeriodFrequencyCalculation
from semitools.enums import TimeUnit, FrequencyUnit


def _require_positive(value: float, label: str) -> None:
    if value <= 0:
        raise ValidationError(f"{label} must be greater than 0, got {value}.")


def period_to_frequency(value: float, time_unit: TimeUnit, freq_unit: FrequencyUnit) -> float:
    _require_positive(value, "Period")
    period_seconds = value * time_unit.to_seconds
    frequency_hz = 1.0 / period_seconds
    return frequency_hz / freq_unit.divisor


def frequency_to_period(value: float, freq_unit: FrequencyUnit, time_unit: TimeUnit) -> float:
    _require_positive(value, "Frequency")
    frequency_hz = value * freq_unit.divisor
    period_seconds = 1.0 / frequency_hz
    return period_seconds / time_unit.to_seconds


def build_calculation(value: float, time_unit: TimeUnit, freq_unit: FrequencyUnit) -> PeriodFrequencyCalculation:
    """Converts a period and captures the result as a storable calculation."""
    return PeriodFrequencyCalculation(
        input_value=value,
        input_unit=time_unit,
        frequency_value=period_to_frequency(value, time_unit, freq_unit),
        frequency_unit=freq_unit,
    )


def format_result(value: float) -> str:
    """Six significant digits, as shown next to the input field."""
    return f"{value:.6g}"
