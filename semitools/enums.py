"""
Enum Definitions Module.

This module contains Enumeration classes for defining constant sets of values,
such as measurement status outcomes, unit scales or the tool pages of the UI.
Using enums instead of raw strings improves code readability and reduces the
risk of typos.
"""
from enum import Enum

from semitools.core.config import TIME_UNIT_SECONDS, FREQUENCY_UNIT_DIVISORS, CPK_CAPABLE, CPK_MARGINAL


class TestStatus(Enum):
    """Outcome of comparing a measurement against a parametric spec."""
    __test__ = False  # not a pytest class

    PASS = "pass"
    FAIL = "fail"
    # Part of the taxonomy, never produced by the limit comparison.
    MARGINAL = "marginal"
    NO_DATA = "noData"


class TimeUnit(Enum):
    """Period units. The value is the display symbol."""
    NANOSECONDS = "ns"
    MICROSECONDS = "μs"
    MILLISECONDS = "ms"
    SECONDS = "s"

    @property
    def to_seconds(self) -> float:
        return TIME_UNIT_SECONDS[self.value]

    @property
    def display_name(self) -> str:
        return f"{self.name.capitalize()} ({self.value})"

    @classmethod
    def values(cls) -> list[str]:
        """Returns the string values of all enum members."""
        return [item.value for item in cls]


class FrequencyUnit(Enum):
    """Frequency units. The value is the display symbol."""
    HZ = "Hz"
    KHZ = "kHz"
    MHZ = "MHz"
    GHZ = "GHz"

    @property
    def divisor(self) -> float:
        return FREQUENCY_UNIT_DIVISORS[self.value]

    @property
    def display_name(self) -> str:
        return self.value

    @classmethod
    def values(cls) -> list[str]:
        """Returns the string values of all enum members."""
        return [item.value for item in cls]


class CapabilityRating(Enum):
    """Classification of a Cpk/Ppk value."""
    CAPABLE = "Capable"
    MARGINAL = "Marginal"
    NOT_CAPABLE = "Not Capable"

    @classmethod
    def from_index(cls, index: float) -> "CapabilityRating":
        if index >= CPK_CAPABLE:
            return cls.CAPABLE
        if index >= CPK_MARGINAL:
            return cls.MARGINAL
        return cls.NOT_CAPABLE


class ToolPage(Enum):
    """Enumeration for the calculator pages in the UI."""
    WAFER_DIE = "Wafer Die Calculator"
    YIELD = "Yield Calculator"
    PARAMETRIC = "Parametric Spec"
    STATISTICS = "Statistical Analysis"
    TEST_TIME = "Test Time Calculator"
    PERIOD_FREQUENCY = "Period / Frequency"
    REFERENCE = "Reference Tables"

    @classmethod
    def values(cls) -> list[str]:
        """Returns the string values of all enum members."""
        return [item.value for item in cls]
