"""
State Management Module.
Implements the 'Store' pattern for every calculator: each store owns its
collections in memory and flushes them to the injected blob store after
every mutation.

Every mutation re-reads its collection from the blob store while holding the
blob store's lock, so stores sharing one backend (two browser sessions on the
same storage file) never overwrite each other's changes.
"""
import logging
from typing import Callable, Dict, List, Optional, Tuple

from semitools.core.config import (
    BINS_KEY, RECORDS_KEY, SPECS_KEY, MEASUREMENTS_KEY, DATA_SETS_KEY,
    PROFILES_KEY, PERIOD_FREQUENCY_KEY, WAFER_DIE_KEY, DEFAULT_BINS
)
from semitools.core.exceptions import NotFoundError
from semitools.core.models import (
    BinDefinition, YieldRecord, ParametricSpec, MeasuredValue, DataSet,
    TestProfile, PeriodFrequencyCalculation, WaferDieCalculation
)
from semitools.enums import TestStatus
from semitools.io.persistence import BlobStore, load_collection, save_collection
from semitools.io.validation import validate_limits
from semitools.analytics import yield_analysis, parametric, statistics, test_time
from semitools.analytics.models import YieldSummary, DescriptiveStats, CapabilityResult, ThroughputSummary

logger = logging.getLogger(__name__)


class _CollectionStore:
    """
    Shared load/save plumbing. COLLECTIONS maps each list attribute to its
    storage key and decoder.
    """
    COLLECTIONS: Dict[str, Tuple[str, Callable]] = {}

    def __init__(self, blob_store: BlobStore):
        self._blob_store = blob_store
        self._lock = blob_store.lock
        for attr in self.COLLECTIONS:
            items = self._load(attr)
            if items is not None:
                logger.info(f"Loaded {len(items)} item(s) from '{self.COLLECTIONS[attr][0]}'.")
            setattr(self, attr, items or [])

    def _load(self, attr: str) -> Optional[List]:
        key, from_dict = self.COLLECTIONS[attr]
        return load_collection(self._blob_store, key, from_dict)

    def _refresh(self, attr: str) -> List:
        """Re-reads one collection from the blob store. Call with the lock held."""
        items = self._load(attr) or []
        setattr(self, attr, items)
        return items

    def _save(self, attr: str) -> None:
        save_collection(self._blob_store, self.COLLECTIONS[attr][0], getattr(self, attr))

    def refresh(self) -> None:
        """Picks up changes written through other stores on the same backend."""
        with self._lock:
            for attr in self.COLLECTIONS:
                self._refresh(attr)

    def _append(self, attr: str, item):
        with self._lock:
            self._refresh(attr).append(item)
            self._save(attr)
        return item

    def _replace(self, attr: str, item) -> bool:
        """Replaces the item with the same id. Unknown ids are ignored."""
        with self._lock:
            items = self._refresh(attr)
            for index, existing in enumerate(items):
                if existing.id == item.id:
                    items[index] = item
                    self._save(attr)
                    return True
        logger.warning(f"Update ignored: no item with id {item.id} in '{self.COLLECTIONS[attr][0]}'.")
        return False

    def _delete_at(self, attr: str, index: int):
        """Deletes by position. An invalid index raises IndexError."""
        key = self.COLLECTIONS[attr][0]
        with self._lock:
            items = self._refresh(attr)
            if not 0 <= index < len(items):
                raise IndexError(f"No item at position {index} in '{key}' ({len(items)} item(s)).")
            removed = items.pop(index)
            self._save(attr)
        logger.info(f"Deleted item {removed.id} from '{key}'.")
        return removed


class YieldDataStore(_CollectionStore):
    """Bin definitions and per-wafer yield records."""
    COLLECTIONS = {
        'bins': (BINS_KEY, BinDefinition.from_dict),
        'records': (RECORDS_KEY, YieldRecord.from_dict),
    }

    def __init__(self, blob_store: BlobStore):
        self.bins: List[BinDefinition] = []
        self.records: List[YieldRecord] = []
        super().__init__(blob_store)
        if not self.bins:
            self._seed_default_bins()

    def _seed_default_bins(self):
        with self._lock:
            # Another store on the same backend may have seeded first
            if self._refresh('bins'):
                return
            self.bins = [BinDefinition(name=name, color=color) for name, color in DEFAULT_BINS]
            self._save('bins')
        logger.info(f"Seeded {len(self.bins)} default bins.")

    # --- Bins ---

    def add_bin(self, name: str, color: str) -> BinDefinition:
        new_bin = self._append('bins', BinDefinition(name=name.strip(), color=color))
        logger.info(f"Added bin '{new_bin.name}' ({new_bin.color}).")
        return new_bin

    def update_bin(self, bin_id: str, name: str, color: str) -> bool:
        """Renames/recolours a bin. Existing records keep their counts by id."""
        updated = BinDefinition(name=name.strip(), color=color, id=bin_id)
        return self._replace('bins', updated)

    def delete_bin(self, bin_id: str) -> bool:
        """Removes a bin definition. Historical counts for it are left untouched."""
        with self._lock:
            before = len(self._refresh('bins'))
            self.bins = [b for b in self.bins if b.id != bin_id]
            if len(self.bins) == before:
                return False
            self._save('bins')
        logger.info(f"Deleted bin {bin_id}.")
        return True

    def get_bin(self, bin_id: str) -> BinDefinition:
        for b in self.bins:
            if b.id == bin_id:
                return b
        raise NotFoundError(f"No bin with id {bin_id}.")

    # --- Records ---

    def add_record(self, record: YieldRecord) -> YieldRecord:
        self._append('records', record)
        logger.info(f"Added yield record for wafer '{record.wafer_name}' (lot {record.lot_number}).")
        return record

    def update_record(self, record: YieldRecord) -> bool:
        return self._replace('records', record)

    def delete_record(self, index: int) -> YieldRecord:
        return self._delete_at('records', index)

    # --- Calculations ---

    def overall_yield(self, record: YieldRecord) -> float:
        return yield_analysis.overall_yield(record, self.bins)

    def summarize(self, record: YieldRecord) -> YieldSummary:
        return yield_analysis.summarize_record(record, self.bins)


class WaferDieDataStore(_CollectionStore):
    """Simple good/defective wafer tallies."""
    COLLECTIONS = {'calculations': (WAFER_DIE_KEY, WaferDieCalculation.from_dict)}

    def add_calculation(self, calc: WaferDieCalculation) -> WaferDieCalculation:
        return self._append('calculations', calc)

    def update_calculation(self, calc: WaferDieCalculation) -> bool:
        return self._replace('calculations', calc)

    def delete_calculation(self, index: int) -> WaferDieCalculation:
        return self._delete_at('calculations', index)

    def average_yield(self) -> float:
        return yield_analysis.average_yield(self.calculations)


class ParametricSpecDataStore(_CollectionStore):
    """Parametric specs and their append-only measurements."""
    COLLECTIONS = {
        'specs': (SPECS_KEY, ParametricSpec.from_dict),
        'measurements': (MEASUREMENTS_KEY, MeasuredValue.from_dict),
    }

    def add_spec(self, spec: ParametricSpec) -> ParametricSpec:
        validate_limits(spec.min_limit, spec.max_limit, "Min limit", "Max limit")
        self._append('specs', spec)
        logger.info(f"Added spec '{spec.name}' [{spec.min_limit}, {spec.max_limit}] {spec.unit}.")
        return spec

    def update_spec(self, spec: ParametricSpec) -> bool:
        validate_limits(spec.min_limit, spec.max_limit, "Min limit", "Max limit")
        return self._replace('specs', spec)

    def delete_spec(self, index: int) -> ParametricSpec:
        return self._delete_at('specs', index)

    def get_spec(self, spec_id: str) -> ParametricSpec:
        spec = parametric.find_spec(self.specs, spec_id)
        if spec is None:
            raise NotFoundError(f"No spec with id {spec_id}.")
        return spec

    def add_measurement(self, spec_id: str, value: float) -> MeasuredValue:
        return self._append('measurements', MeasuredValue(spec_id=spec_id, value=value))

    def get_measurements(self, spec_id: str) -> List[MeasuredValue]:
        return parametric.measurements_for(self.measurements, spec_id)

    def latest_measurement(self, spec_id: str) -> Optional[MeasuredValue]:
        return parametric.latest_measurement(self.measurements, spec_id)

    def test_status(self, spec: ParametricSpec, value: Optional[float] = None) -> TestStatus:
        """Status of an explicit value, or of the latest stored measurement."""
        if value is not None:
            return parametric.test_status(spec, value)
        return parametric.latest_status(spec, self.measurements)

    def is_value_in_spec(self, spec_id: str, value: float) -> bool:
        return parametric.is_value_in_spec(self.specs, spec_id, value)


class StatisticsDataStore(_CollectionStore):
    """Named data sets for descriptive statistics and capability analysis."""
    COLLECTIONS = {'data_sets': (DATA_SETS_KEY, DataSet.from_dict)}

    def add_data_set(self, data_set: DataSet) -> DataSet:
        self._append('data_sets', data_set)
        logger.info(f"Added data set '{data_set.name}' with {len(data_set.values)} value(s).")
        return data_set

    def update_data_set(self, data_set: DataSet) -> bool:
        return self._replace('data_sets', data_set)

    def delete_data_set(self, index: int) -> DataSet:
        return self._delete_at('data_sets', index)

    def describe(self, data_set: DataSet) -> DescriptiveStats:
        return statistics.describe(data_set.values)

    def capability(self, data_set: DataSet, lsl: float, usl: float) -> CapabilityResult:
        return statistics.capability(data_set.values, lsl, usl)


class TestTimeDataStore(_CollectionStore):
    """Test profiles (ordered step lists) for run-time projection."""
    __test__ = False  # not a pytest class
    COLLECTIONS = {'profiles': (PROFILES_KEY, TestProfile.from_dict)}

    def add_profile(self, profile: TestProfile) -> TestProfile:
        self._append('profiles', profile)
        logger.info(f"Added test profile '{profile.name}' with {len(profile.steps)} step(s).")
        return profile

    def update_profile(self, profile: TestProfile) -> bool:
        return self._replace('profiles', profile)

    def delete_profile(self, index: int) -> TestProfile:
        return self._delete_at('profiles', index)

    def project(self, profile: TestProfile, devices: int, slots: Optional[int] = None) -> ThroughputSummary:
        return test_time.project(profile, devices, slots)


class PeriodFrequencyDataStore(_CollectionStore):
    """Saved period-to-frequency conversions."""
    COLLECTIONS = {'calculations': (PERIOD_FREQUENCY_KEY, PeriodFrequencyCalculation.from_dict)}

    def add_calculation(self, calc: PeriodFrequencyCalculation) -> PeriodFrequencyCalculation:
        return self._append('calculations', calc)

    def update_calculation(self, calc: PeriodFrequencyCalculation) -> bool:
        return self._replace('calculations', calc)

    def delete_calculation(self, index: int) -> PeriodFrequencyCalculation:
        return self._delete_at('calculations', index)
