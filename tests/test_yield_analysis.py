import pytest

from semitools.analytics import yield_analysis
from semitools.core.exceptions import ValidationError
from semitools.core.models import BinDefinition, BinCount, YieldRecord, WaferDieCalculation


def test_totals_and_counts(yield_record):
    assert yield_analysis.total_dies(yield_record) == 100
    assert yield_analysis.bin_count(yield_record, "bin-good") == 95
    assert yield_analysis.bin_count(yield_record, "unknown") == 0


def test_bin_percentages_sum_to_100(yield_record, bins):
    total = sum(yield_analysis.bin_percentage(yield_record, b.id) for b in bins)
    assert total == pytest.approx(100.0)


def test_empty_record_guards_divide_by_zero(bins):
    record = YieldRecord(wafer_name="W02", lot_number="LOT-A")
    assert yield_analysis.total_dies(record) == 0
    assert all(yield_analysis.bin_percentage(record, b.id) == 0 for b in bins)
    assert yield_analysis.overall_yield(record, bins) == 0
    assert yield_analysis.dpm(record, "bin-fail") == 0


def test_overall_yield_uses_good_bin_case_insensitively(yield_record, bins):
    assert yield_analysis.overall_yield(yield_record, bins) == pytest.approx(95.0)

    renamed = [BinDefinition(name="GOOD", color="#34C759", id="bin-good")]
    assert yield_analysis.overall_yield(yield_record, renamed) == pytest.approx(95.0)


def test_overall_yield_without_good_bin_is_zero(yield_record, bins):
    no_good = [b for b in bins if b.name != "Good"]
    assert yield_analysis.overall_yield(yield_record, no_good) == 0


def test_dpm_is_percentage_times_ten_thousand(yield_record, bins):
    for b in bins:
        assert yield_analysis.dpm(yield_record, b.id) == pytest.approx(
            yield_analysis.bin_percentage(yield_record, b.id) * 10_000
        )
    assert yield_analysis.dpm(yield_record, "bin-fail") == pytest.approx(30_000)


def test_deleted_bin_counts_still_resolve_by_id(yield_record, bins):
    """Historical records keep counts for bins removed from the definition list."""
    remaining = [b for b in bins if b.id != "bin-marginal"]

    assert yield_analysis.total_dies(yield_record) == 100
    assert yield_analysis.bin_count(yield_record, "bin-marginal") == 2
    assert yield_analysis.orphaned_bin_ids(yield_record, remaining) == ["bin-marginal"]

    summary = yield_analysis.summarize_record(yield_record, remaining)
    assert set(summary.bin_percentages) == {"bin-good", "bin-fail"}
    assert summary.overall_yield == pytest.approx(95.0)


def test_wafer_die_scenario():
    calc = yield_analysis.build_wafer_die_calculation("W01", "LOT-A", total=100, good=95, defective=5)
    assert calc.yield_percentage == pytest.approx(95.0)
    assert calc.defect_rate == pytest.approx(5.0)
    assert calc.dpm_value == pytest.approx(50_000)
    assert calc.is_valid


@pytest.mark.parametrize("good, defective, expected", [
    (90, None, (90, 10)),
    (None, 7, (93, 7)),
])
def test_wafer_die_fills_missing_count(good, defective, expected):
    calc = yield_analysis.build_wafer_die_calculation("W01", "LOT-A", total=100, good=good, defective=defective)
    assert (calc.good_dies, calc.defective_dies) == expected


@pytest.mark.parametrize("kwargs", [
    dict(wafer_name="", lot_number="LOT-A", total=100, good=90),
    dict(wafer_name="W01", lot_number=" ", total=100, good=90),
    dict(wafer_name="W01", lot_number="LOT-A", total=0, good=0),
    dict(wafer_name="W01", lot_number="LOT-A", total=100),
    dict(wafer_name="W01", lot_number="LOT-A", total=100, good=120),
    dict(wafer_name="W01", lot_number="LOT-A", total=100, good=60, defective=50),
])
def test_wafer_die_rejects_invalid_input(kwargs):
    with pytest.raises(ValidationError):
        yield_analysis.build_wafer_die_calculation(**kwargs)


def test_wafer_die_zero_total_guards():
    calc = WaferDieCalculation("W01", "LOT-A", total_dies=0, good_dies=0, defective_dies=0)
    assert calc.yield_percentage == 0
    assert calc.defect_rate == 0
    assert calc.dpm_value == 0
    assert not calc.is_valid


def test_average_yield():
    calcs = [
        WaferDieCalculation("W01", "L", total_dies=100, good_dies=90, defective_dies=10),
        WaferDieCalculation("W02", "L", total_dies=200, good_dies=200, defective_dies=0),
    ]
    assert yield_analysis.average_yield(calcs) == pytest.approx(95.0)
    assert yield_analysis.average_yield([]) == 0


def test_negative_bin_count_rejected():
    with pytest.raises(ValidationError):
        BinCount(bin_id="bin-good", count=-1)
