"""
Bin / Yield Engine.

Aggregates the per-bin die counts of a yield record. Bin counts reference their
bin definition by id only; counts are resolved by that id whether or not the
bin still exists in the current definition list, so historical records keep
their totals after a bin is deleted.
"""
from typing import List, Optional

from semitools.core.config import GOOD_BIN_NAME, DPM_SCALE
from semitools.core.exceptions import ValidationError
from semitools.core.models import BinDefinition, YieldRecord, WaferDieCalculation
from semitools.analytics.models import YieldSummary


def total_dies(record: YieldRecord) -> int:
    """Sum of every bin count in the record, including bins no longer defined."""
    return sum(bc.count for bc in record.bin_counts)


def bin_count(record: YieldRecord, bin_id: str) -> int:
    """Count stored for bin_id, or 0 if the record has no entry for it."""
    for bc in record.bin_counts:
        if bc.bin_id == bin_id:
            return bc.count
    return 0


def bin_percentage(record: YieldRecord, bin_id: str) -> float:
    total = total_dies(record)
    if total == 0:
        return 0.0
    return bin_count(record, bin_id) / total * 100


def find_good_bin(bins: List[BinDefinition]) -> Optional[BinDefinition]:
    """First bin whose name is 'good', ignoring case."""
    for b in bins:
        if b.name.lower() == GOOD_BIN_NAME:
            return b
    return None


def overall_yield(record: YieldRecord, bins: List[BinDefinition]) -> float:
    """Percentage of the 'good' bin; 0 when no such bin is defined."""
    good_bin = find_good_bin(bins)
    if good_bin is None:
        return 0.0
    return bin_percentage(record, good_bin.id)


def dpm(record: YieldRecord, bin_id: str) -> float:
    """Defects per million for one bin."""
    return bin_percentage(record, bin_id) / 100 * DPM_SCALE


def orphaned_bin_ids(record: YieldRecord, bins: List[BinDefinition]) -> List[str]:
    """Bin ids counted in the record that no longer resolve to a definition."""
    known = {b.id for b in bins}
    return [bc.bin_id for bc in record.bin_counts if bc.bin_id not in known]


def summarize_record(record: YieldRecord, bins: List[BinDefinition]) -> YieldSummary:
    """Yield KPIs for the record, with percentages for the currently defined bins."""
    return YieldSummary(
        total_dies=total_dies(record),
        overall_yield=overall_yield(record, bins),
        bin_percentages={b.id: bin_percentage(record, b.id) for b in bins},
    )


# --- Wafer / Die Calculator ---

def build_wafer_die_calculation(
    wafer_name: str,
    lot_number: str,
    total: int,
    good: Optional[int] = None,
    defective: Optional[int] = None,
) -> WaferDieCalculation:
    """
    Builds a validated wafer tally. When only one of good/defective is given
    the other is filled in as the remainder of the total.
    """
    if not wafer_name or not wafer_name.strip():
        raise ValidationError("Please enter a wafer name.")
    if not lot_number or not lot_number.strip():
        raise ValidationError("Please enter a lot number.")
    if total <= 0:
        raise ValidationError("Total dies must be greater than 0")
    if good is None and defective is None:
        raise ValidationError("Enter good or defective dies.")

    final_good = total - defective if good is None else good
    final_defective = total - good if defective is None else defective

    if final_good < 0 or final_defective < 0:
        raise ValidationError("Good and defective dies cannot be negative")
    if final_good + final_defective > total:
        raise ValidationError("Good + defective dies cannot exceed total dies")

    return WaferDieCalculation(
        wafer_name=wafer_name.strip(),
        lot_number=lot_number.strip(),
        total_dies=total,
        good_dies=final_good,
        defective_dies=final_defective,
    )


def average_yield(calculations: List[WaferDieCalculation]) -> float:
    if not calculations:
        return 0.0
    return sum(c.yield_percentage for c in calculations) / len(calculations)
