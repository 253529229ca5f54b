import pytest

from semitools.analytics import conversion
from semitools.core.exceptions import ValidationError
from semitools.enums import TimeUnit, FrequencyUnit


def test_period_to_frequency():
    assert conversion.period_to_frequency(5, TimeUnit.NANOSECONDS, FrequencyUnit.MHZ) == pytest.approx(200.0)
    assert conversion.period_to_frequency(1, TimeUnit.MILLISECONDS, FrequencyUnit.KHZ) == pytest.approx(1.0)
    assert conversion.period_to_frequency(1, TimeUnit.SECONDS, FrequencyUnit.HZ) == pytest.approx(1.0)


def test_frequency_to_period():
    assert conversion.frequency_to_period(1, FrequencyUnit.GHZ, TimeUnit.NANOSECONDS) == pytest.approx(1.0)
    assert conversion.frequency_to_period(32.768, FrequencyUnit.KHZ, TimeUnit.MICROSECONDS) == pytest.approx(30.517578125)


def test_round_trip():
    freq = conversion.period_to_frequency(5, TimeUnit.NANOSECONDS, FrequencyUnit.MHZ)
    assert conversion.frequency_to_period(freq, FrequencyUnit.MHZ, TimeUnit.NANOSECONDS) == pytest.approx(5)


@pytest.mark.parametrize("value", [0, -1.5])
def test_non_positive_input_rejected(value):
    with pytest.raises(ValidationError):
        conversion.period_to_frequency(value, TimeUnit.NANOSECONDS, FrequencyUnit.MHZ)
    with pytest.raises(ValidationError):
        conversion.frequency_to_period(value, FrequencyUnit.MHZ, TimeUnit.NANOSECONDS)


def test_build_calculation():
    calc = conversion.build_calculation(10, TimeUnit.MICROSECONDS, FrequencyUnit.KHZ)
    assert calc.is_valid
    assert calc.period_seconds == pytest.approx(1e-5)
    assert calc.frequency_hz == pytest.approx(1e5)
    assert calc.frequency_value == pytest.approx(100.0)
    assert calc.display_frequency == pytest.approx(100.0)


def test_format_result():
    assert conversion.format_result(200.0) == "200"
    assert conversion.format_result(30.517578125) == "30.5176"
