from dataclasses import dataclass
from typing import Dict, Optional

from semitools.enums import CapabilityRating


@dataclass
class DescriptiveStats:
    """Container for the summary statistics of a data set."""
    count: int
    mean: float
    median: float
    std_dev: float       # sample (n-1)
    variance: float      # sample (n-1)
    minimum: float
    maximum: float
    range: float


@dataclass
class CapabilityResult:
    """Container for Cpk/Ppk against one pair of specification limits."""
    lsl: float
    usl: float
    cpk: float
    ppk: float

    @property
    def cpk_rating(self) -> CapabilityRating:
        return CapabilityRating.from_index(self.cpk)

    @property
    def ppk_rating(self) -> CapabilityRating:
        return CapabilityRating.from_index(self.ppk)


@dataclass
class YieldSummary:
    """Per-record yield KPIs. bin_percentages is keyed by bin id."""
    total_dies: int
    overall_yield: float
    bin_percentages: Dict[str, float]


@dataclass
class ThroughputSummary:
    """Container for a test-time projection."""
    devices: int
    time_per_device: float          # seconds
    total_test_time: float          # seconds, serial
    throughput: float               # devices/hour, serial
    parallel_slots: Optional[int] = None
    parallel_time: Optional[float] = None
    parallel_throughput: Optional[float] = None
