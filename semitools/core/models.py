"""
Domain Models for the Semiconductor Calculator Suite.
Plain records for every tool's persisted collection, with field-for-field
dict conversion used by the blob store.
"""
from dataclasses import dataclass, field
from datetime import datetime
import re
import uuid
from typing import Any, Dict, List, Optional, Tuple

import matplotlib.colors as mcolors

from semitools.core.config import DPM_SCALE
from semitools.core.exceptions import ValidationError
from semitools.enums import TimeUnit, FrequencyUnit


HEX_COLOR_PATTERN = re.compile(r"#[0-9A-Fa-f]{6}")


def new_id() -> str:
    return str(uuid.uuid4())


def _parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class HexColor:
    """
    Validated '#RRGGBB' colour. Engines only pass the string through;
    parsing is limited to this boundary type. Short '#RGB' and alpha
    '#RRGGBBAA' forms are rejected.
    """
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not HEX_COLOR_PATTERN.fullmatch(self.value) \
                or not mcolors.is_color_like(self.value):
            raise ValidationError(f"Invalid hex colour '{self.value}'. Expected '#RRGGBB'.")
        object.__setattr__(self, 'value', mcolors.to_hex(self.value).upper())

    @property
    def rgb(self) -> Tuple[int, int, int]:
        r, g, b = mcolors.to_rgb(self.value)
        return round(r * 255), round(g * 255), round(b * 255)

    def __str__(self) -> str:
        return self.value


# --- Bin / Yield ---

@dataclass
class BinDefinition:
    name: str
    color: str
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValidationError("Bin name must not be empty.")
        self.color = HexColor(self.color).value

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'color': self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BinDefinition":
        return cls(name=data['name'], color=data['color'], id=data['id'])


@dataclass
class BinCount:
    """Count of dies in one bin. bin_id is a foreign key with no integrity check."""
    bin_id: str
    count: int = 0
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        if self.count < 0:
            raise ValidationError(f"Bin count must be >= 0, got {self.count}.")

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'binId': self.bin_id, 'count': self.count}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BinCount":
        return cls(bin_id=data['binId'], count=int(data['count']), id=data['id'])


@dataclass
class YieldRecord:
    wafer_name: str
    lot_number: str
    bin_counts: List[BinCount] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not self.wafer_name or not self.wafer_name.strip():
            raise ValidationError("Please enter a wafer name.")
        if not self.lot_number or not self.lot_number.strip():
            raise ValidationError("Please enter a lot number.")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'waferName': self.wafer_name,
            'lotNumber': self.lot_number,
            'binCounts': [bc.to_dict() for bc in self.bin_counts],
            'createdAt': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "YieldRecord":
        return cls(
            wafer_name=data['waferName'],
            lot_number=data['lotNumber'],
            bin_counts=[BinCount.from_dict(bc) for bc in data['binCounts']],
            id=data['id'],
            created_at=_parse_time(data['createdAt']),
        )


@dataclass
class WaferDieCalculation:
    """Single-wafer good/defective die tally."""
    wafer_name: str
    lot_number: str
    total_dies: int
    good_dies: int
    defective_dies: int
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def yield_percentage(self) -> float:
        if self.total_dies <= 0:
            return 0.0
        return self.good_dies / self.total_dies * 100

    @property
    def defect_rate(self) -> float:
        if self.total_dies <= 0:
            return 0.0
        return self.defective_dies / self.total_dies * 100

    @property
    def dpm_value(self) -> float:
        if self.total_dies <= 0:
            return 0.0
        return self.defective_dies / self.total_dies * DPM_SCALE

    @property
    def is_valid(self) -> bool:
        return (self.total_dies > 0 and self.good_dies >= 0 and self.defective_dies >= 0
                and self.good_dies + self.defective_dies <= self.total_dies)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'waferName': self.wafer_name,
            'lotNumber': self.lot_number,
            'totalDies': self.total_dies,
            'goodDies': self.good_dies,
            'defectiveDies': self.defective_dies,
            'createdAt': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WaferDieCalculation":
        return cls(
            wafer_name=data['waferName'],
            lot_number=data['lotNumber'],
            total_dies=int(data['totalDies']),
            good_dies=int(data['goodDies']),
            defective_dies=int(data['defectiveDies']),
            id=data['id'],
            created_at=_parse_time(data['createdAt']),
        )


# --- Parametric ---

@dataclass
class ParametricSpec:
    name: str
    test_name: str
    min_limit: float
    max_limit: float
    unit: str
    description: str = ""
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if self.min_limit >= self.max_limit:
            raise ValidationError(
                f"Min limit ({self.min_limit}) must be less than max limit ({self.max_limit})."
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'testName': self.test_name,
            'minLimit': self.min_limit,
            'maxLimit': self.max_limit,
            'unit': self.unit,
            'description': self.description,
            'createdAt': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParametricSpec":
        return cls(
            name=data['name'],
            test_name=data['testName'],
            min_limit=float(data['minLimit']),
            max_limit=float(data['maxLimit']),
            unit=data['unit'],
            description=data.get('description', ""),
            id=data['id'],
            created_at=_parse_time(data['createdAt']),
        )


@dataclass
class MeasuredValue:
    spec_id: str
    value: float
    id: str = field(default_factory=new_id)
    measured_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'specId': self.spec_id,
            'value': self.value,
            'measuredAt': self.measured_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeasuredValue":
        return cls(
            spec_id=data['specId'],
            value=float(data['value']),
            id=data['id'],
            measured_at=_parse_time(data['measuredAt']),
        )


# --- Statistics ---

@dataclass
class DataSet:
    name: str
    description: str = ""
    values: List[float] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'values': list(self.values),
            'createdAt': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataSet":
        return cls(
            name=data['name'],
            description=data.get('description', ""),
            values=[float(v) for v in data['values']],
            id=data['id'],
            created_at=_parse_time(data['createdAt']),
        )


# --- Test Time ---

@dataclass
class TestStep:
    __test__ = False  # not a pytest class

    name: str
    duration: float = 0.0  # seconds
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        if self.duration < 0:
            raise ValidationError(f"Step duration must be >= 0, got {self.duration}.")

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'duration': self.duration}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestStep":
        return cls(name=data['name'], duration=float(data['duration']), id=data['id'])


@dataclass
class TestProfile:
    __test__ = False  # not a pytest class

    name: str
    steps: List[TestStep] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'testSteps': [step.to_dict() for step in self.steps],
            'createdAt': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestProfile":
        return cls(
            name=data['name'],
            steps=[TestStep.from_dict(s) for s in data['testSteps']],
            id=data['id'],
            created_at=_parse_time(data['createdAt']),
        )


# --- Period / Frequency ---

@dataclass
class PeriodFrequencyCalculation:
    input_value: float
    input_unit: TimeUnit
    frequency_value: float = 0.0
    frequency_unit: FrequencyUnit = FrequencyUnit.MHZ
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def period_seconds(self) -> float:
        return self.input_value * self.input_unit.to_seconds

    @property
    def frequency_hz(self) -> float:
        if self.period_seconds <= 0:
            return 0.0
        return 1.0 / self.period_seconds

    @property
    def display_frequency(self) -> float:
        return self.frequency_hz / self.frequency_unit.divisor

    @property
    def is_valid(self) -> bool:
        return self.input_value > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'inputValue': self.input_value,
            'inputUnit': self.input_unit.value,
            'frequencyValue': self.frequency_value,
            'frequencyUnit': self.frequency_unit.value,
            'createdAt': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PeriodFrequencyCalculation":
        return cls(
            input_value=float(data['inputValue']),
            input_unit=TimeUnit(data['inputUnit']),
            frequency_value=float(data['frequencyValue']),
            frequency_unit=FrequencyUnit(data['frequencyUnit']),
            id=data['id'],
            created_at=_parse_time(data['createdAt']),
        )


# --- Reference Data ---

@dataclass(frozen=True)
class ReferenceItem:
    name: str
    value: str
    unit: str
    description: Optional[str] = None


@dataclass(frozen=True)
class ReferenceTable:
    title: str
    category: str
    items: Tuple[ReferenceItem, ...]
