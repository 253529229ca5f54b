import pytest
from datetime import datetime, timedelta

from semitools.core.models import BinDefinition, BinCount, YieldRecord, ParametricSpec, MeasuredValue
from semitools.io.persistence import InMemoryBlobStore


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def bins() -> list[BinDefinition]:
    return [
        BinDefinition(name="Good", color="#34C759", id="bin-good"),
        BinDefinition(name="Fail", color="#FF3B30", id="bin-fail"),
        BinDefinition(name="Marginal", color="#FF9500", id="bin-marginal"),
    ]


@pytest.fixture
def yield_record() -> YieldRecord:
    """95 good, 3 fail, 2 marginal out of 100 dies."""
    return YieldRecord(
        wafer_name="W01",
        lot_number="LOT-A",
        bin_counts=[
            BinCount(bin_id="bin-good", count=95),
            BinCount(bin_id="bin-fail", count=3),
            BinCount(bin_id="bin-marginal", count=2),
        ],
    )


@pytest.fixture
def spec() -> ParametricSpec:
    return ParametricSpec(name="VDD", test_name="Supply", min_limit=1.0, max_limit=2.0, unit="V", id="spec-vdd")


@pytest.fixture
def measurements(spec) -> list[MeasuredValue]:
    """Three readings for the spec, newest one out of limits."""
    t0 = datetime(2025, 1, 1, 8, 0, 0)
    return [
        MeasuredValue(spec_id=spec.id, value=1.5, measured_at=t0),
        MeasuredValue(spec_id=spec.id, value=2.5, measured_at=t0 + timedelta(hours=2)),
        MeasuredValue(spec_id=spec.id, value=1.2, measured_at=t0 + timedelta(hours=1)),
        MeasuredValue(spec_id="other-spec", value=9.9, measured_at=t0 + timedelta(hours=3)),
    ]
