import logging

import pytest

from semitools.core.config import BINS_KEY, RECORDS_KEY, SPECS_KEY, DEFAULT_BINS
from semitools.core.exceptions import NotFoundError, ValidationError
from semitools.core.models import (
    BinCount, YieldRecord, ParametricSpec, DataSet, TestProfile, TestStep,
    WaferDieCalculation, PeriodFrequencyCalculation
)
from semitools.enums import TestStatus, TimeUnit
from semitools.io.persistence import InMemoryBlobStore, JsonFileBlobStore
from semitools.analytics import yield_analysis
from semitools.state import (
    YieldDataStore, WaferDieDataStore, ParametricSpecDataStore, StatisticsDataStore,
    TestTimeDataStore, PeriodFrequencyDataStore
)


# --- Yield ---

def test_default_bins_seeded_and_persisted(blob_store):
    store = YieldDataStore(blob_store)
    assert [b.name for b in store.bins] == [name for name, _ in DEFAULT_BINS]
    assert blob_store.load(BINS_KEY) is not None

    reopened = YieldDataStore(blob_store)
    assert [b.id for b in reopened.bins] == [b.id for b in store.bins]


def test_corrupt_bins_blob_falls_back_to_defaults(caplog):
    blob_store = InMemoryBlobStore({BINS_KEY: "{{not json"})
    with caplog.at_level(logging.WARNING):
        store = YieldDataStore(blob_store)
    assert len(store.bins) == len(DEFAULT_BINS)
    assert "yieldBins" in caplog.text


def test_bin_crud_persists(blob_store):
    store = YieldDataStore(blob_store)
    added = store.add_bin("  Open  ", "#5856d6")
    assert added.name == "Open"
    assert added.color == "#5856D6"

    assert store.update_bin(added.id, "Open/Short", "#000000")
    assert store.get_bin(added.id).name == "Open/Short"

    assert store.delete_bin(added.id)
    assert not store.delete_bin(added.id)
    with pytest.raises(NotFoundError):
        store.get_bin(added.id)

    reopened = YieldDataStore(blob_store)
    assert [b.name for b in reopened.bins] == [b.name for b in store.bins]


def test_add_bin_with_invalid_colour_leaves_collection_unchanged(blob_store):
    store = YieldDataStore(blob_store)
    with pytest.raises(ValidationError):
        store.add_bin("Open", "blue")
    assert len(store.bins) == len(DEFAULT_BINS)


def test_deleting_bin_keeps_record_counts(blob_store):
    store = YieldDataStore(blob_store)
    good, fail = store.bins[0], store.bins[1]
    record = store.add_record(YieldRecord("W01", "LOT-A", [
        BinCount(bin_id=good.id, count=90), BinCount(bin_id=fail.id, count=10)
    ]))
    store.delete_bin(fail.id)

    summary = store.summarize(record)
    assert summary.total_dies == 100
    assert store.overall_yield(record) == pytest.approx(90.0)
    assert yield_analysis.orphaned_bin_ids(record, store.bins) == [fail.id]


def test_record_update_and_delete(blob_store):
    store = YieldDataStore(blob_store)
    record = store.add_record(YieldRecord("W01", "LOT-A"))
    record.lot_number = "LOT-B"
    assert store.update_record(record)
    assert not store.update_record(YieldRecord("W99", "LOT-Z"))

    reopened = YieldDataStore(blob_store)
    assert reopened.records[0].lot_number == "LOT-B"

    with pytest.raises(IndexError):
        store.delete_record(5)
    assert store.delete_record(0).id == record.id
    assert YieldDataStore(blob_store).records == []
    assert blob_store.load(RECORDS_KEY) == "[]"


# --- Wafer Die ---

def test_wafer_die_store_average(blob_store):
    store = WaferDieDataStore(blob_store)
    assert store.average_yield() == 0.0
    store.add_calculation(WaferDieCalculation("W01", "L1", 100, 90, 10))
    store.add_calculation(WaferDieCalculation("W02", "L1", 100, 80, 20))
    assert store.average_yield() == pytest.approx(85.0)
    assert len(WaferDieDataStore(blob_store).calculations) == 2


# --- Parametric ---

def test_spec_store_rejects_inverted_limits(blob_store, spec):
    store = ParametricSpecDataStore(blob_store)
    store.add_spec(spec)
    spec.min_limit, spec.max_limit = 3.0, 2.0
    with pytest.raises(ValidationError):
        store.update_spec(spec)
    assert ParametricSpecDataStore(blob_store).specs[0].min_limit == 1.0


def test_spec_lookup_and_measurements(blob_store, spec):
    store = ParametricSpecDataStore(blob_store)
    store.add_spec(spec)
    assert store.get_spec(spec.id) is spec
    with pytest.raises(NotFoundError):
        store.get_spec("missing")

    assert store.test_status(spec) == TestStatus.NO_DATA
    assert store.latest_measurement(spec.id) is None

    store.add_measurement(spec.id, 1.5)
    assert store.test_status(spec) == TestStatus.PASS
    assert store.test_status(spec, 2.1) == TestStatus.FAIL
    assert store.is_value_in_spec(spec.id, 1.0)
    assert not store.is_value_in_spec("missing", 1.0)

    reopened = ParametricSpecDataStore(blob_store)
    assert [m.value for m in reopened.get_measurements(spec.id)] == [1.5]


def test_delete_spec_by_index(blob_store, spec):
    store = ParametricSpecDataStore(blob_store)
    store.add_spec(spec)
    with pytest.raises(IndexError):
        store.delete_spec(-1)
    store.delete_spec(0)
    assert blob_store.load(SPECS_KEY) == "[]"


# --- Statistics ---

def test_statistics_store(blob_store):
    store = StatisticsDataStore(blob_store)
    data_set = store.add_data_set(DataSet(name="Vth", values=[1.0, 2.0, 3.0, 4.0, 5.0]))
    assert store.describe(data_set).mean == pytest.approx(3.0)
    assert store.capability(data_set, -10.0, 16.0).cpk > 1.33

    data_set.values.append(6.0)
    assert store.update_data_set(data_set)
    assert StatisticsDataStore(blob_store).data_sets[0].values[-1] == 6.0


# --- Test Time ---

def test_test_time_store_projection(blob_store):
    store = TestTimeDataStore(blob_store)
    profile = store.add_profile(TestProfile("FT", [TestStep("Cont", 0.5), TestStep("Func", 1.5)]))
    summary = store.project(profile, devices=1000, slots=4)
    assert summary.total_test_time == pytest.approx(2000.0)
    assert summary.parallel_time == pytest.approx(500.0)

    reloaded = TestTimeDataStore(blob_store).profiles[0]
    assert [s.name for s in reloaded.steps] == ["Cont", "Func"]


# --- Period / Frequency ---

def test_period_frequency_store(blob_store):
    store = PeriodFrequencyDataStore(blob_store)
    calc = store.add_calculation(PeriodFrequencyCalculation(10, TimeUnit.NANOSECONDS))
    reloaded = PeriodFrequencyDataStore(blob_store).calculations[0]
    assert reloaded.input_unit == TimeUnit.NANOSECONDS
    assert reloaded.frequency_hz == pytest.approx(1e8)
    assert store.delete_calculation(0).id == calc.id


# --- Shared Storage File ---

def test_stores_sharing_a_file_keep_each_others_records(tmp_path):
    path = tmp_path / "storage.json"
    first = YieldDataStore(JsonFileBlobStore(path))
    second = YieldDataStore(JsonFileBlobStore(path))
    assert [b.id for b in second.bins] == [b.id for b in first.bins]

    first.add_record(YieldRecord("W01", "LOT-A"))
    second.add_record(YieldRecord("W02", "LOT-A"))
    first.add_bin("Open", "#5856D6")

    reloaded = YieldDataStore(JsonFileBlobStore(path))
    assert [r.wafer_name for r in reloaded.records] == ["W01", "W02"]
    assert "Open" in [b.name for b in reloaded.bins]


def test_refresh_picks_up_changes_from_another_store(tmp_path):
    path = tmp_path / "storage.json"
    first = StatisticsDataStore(JsonFileBlobStore(path))
    second = StatisticsDataStore(JsonFileBlobStore(path))
    second.add_data_set(DataSet(name="Vth", values=[0.4]))

    assert first.data_sets == []
    first.refresh()
    assert [d.name for d in first.data_sets] == ["Vth"]

    first.delete_data_set(0)
    second.refresh()
    assert second.data_sets == []
