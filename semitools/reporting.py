"""
Excel Reporting Module.

This module builds a multi-sheet Excel workbook from the calculator stores.
Each tool gets its own sheet with the stored inputs alongside the computed
metrics. It uses xlsxwriter through pandas to format headers and columns.
"""
import io
import logging
from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd

from semitools.core.config import REPORT_HEADER_COLOR
from semitools.core.models import BinDefinition, YieldRecord, WaferDieCalculation, ParametricSpec, MeasuredValue, DataSet, TestProfile
from semitools.analytics import yield_analysis, parametric, statistics, test_time

logger = logging.getLogger(__name__)

# ==============================================================================
# --- DataFrame Builders ---
# ==============================================================================

def yield_records_to_dataframe(records: List[YieldRecord], bins: List[BinDefinition]) -> pd.DataFrame:
    """One row per record, one count and percentage column per current bin."""
    rows = []
    for record in records:
        row = {
            'Wafer': record.wafer_name,
            'Lot': record.lot_number,
            'Created': record.created_at,
            'Total Dies': yield_analysis.total_dies(record),
            'Yield (%)': yield_analysis.overall_yield(record, bins),
        }
        for b in bins:
            row[f'{b.name} Count'] = yield_analysis.bin_count(record, b.id)
            row[f'{b.name} (%)'] = yield_analysis.bin_percentage(record, b.id)
            row[f'{b.name} DPM'] = yield_analysis.dpm(record, b.id)
        rows.append(row)
    return pd.DataFrame(rows)


def wafer_die_to_dataframe(calculations: List[WaferDieCalculation]) -> pd.DataFrame:
    return pd.DataFrame([{
        'Wafer': c.wafer_name,
        'Lot': c.lot_number,
        'Created': c.created_at,
        'Total Dies': c.total_dies,
        'Good Dies': c.good_dies,
        'Defective Dies': c.defective_dies,
        'Yield (%)': c.yield_percentage,
        'Defect Rate (%)': c.defect_rate,
        'DPM': c.dpm_value,
    } for c in calculations])


def specs_to_dataframe(specs: List[ParametricSpec], measurements: List[MeasuredValue]) -> pd.DataFrame:
    """Spec limits with the latest measurement, its status and margin."""
    rows = []
    for spec in specs:
        latest = parametric.latest_measurement(measurements, spec.id)
        rows.append({
            'Spec': spec.name,
            'Test': spec.test_name,
            'Min': spec.min_limit,
            'Max': spec.max_limit,
            'Unit': spec.unit,
            'Measurements': len(parametric.measurements_for(measurements, spec.id)),
            'Latest Value': latest.value if latest else None,
            'Status': parametric.latest_status(spec, measurements).value,
            'Margin (%)': parametric.margin(spec, latest.value) if latest else None,
        })
    return pd.DataFrame(rows)


def data_sets_to_dataframe(
    data_sets: List[DataSet],
    limits: Optional[Dict[str, tuple]] = None
) -> pd.DataFrame:
    """
    Descriptive statistics per data set. limits optionally maps a data-set id
    to (LSL, USL) to add Cpk/Ppk columns.
    """
    limits = limits or {}
    rows = []
    for ds in data_sets:
        stats = statistics.describe(ds.values)
        row = {
            'Data Set': ds.name,
            'Count': stats.count,
            'Mean': stats.mean,
            'Median': stats.median,
            'Std Dev': stats.std_dev,
            'Variance': stats.variance,
            'Min': stats.minimum,
            'Max': stats.maximum,
            'Range': stats.range,
        }
        if ds.id in limits:
            lsl, usl = limits[ds.id]
            result = statistics.capability(ds.values, lsl, usl)
            row.update({'LSL': lsl, 'USL': usl, 'Cpk': result.cpk, 'Ppk': result.ppk})
        rows.append(row)
    return pd.DataFrame(rows)


def profiles_to_dataframe(profiles: List[TestProfile]) -> pd.DataFrame:
    return pd.DataFrame([{
        'Profile': p.name,
        'Steps': len(p.steps),
        'Time / Device (s)': test_time.time_per_device(p),
        'Devices / Hour': test_time.throughput(1, test_time.time_per_device(p)),
    } for p in profiles])


# ==============================================================================
# --- Private Helper Functions for Report Generation ---
# ==============================================================================

def _write_sheet(writer: pd.ExcelWriter, df: pd.DataFrame, sheet_name: str, header_format) -> None:
    """Writes a DataFrame with a styled header row and auto-sized columns."""
    df.to_excel(writer, sheet_name=sheet_name, index=False)
    worksheet = writer.sheets[sheet_name]
    for col_num, value in enumerate(df.columns.values):
        worksheet.write(0, col_num, value, header_format)
        if df.empty:
            width = len(str(value)) + 2
        else:
            width = max(df[value].astype(str).map(len).max(), len(str(value))) + 2
        worksheet.set_column(col_num, col_num, min(width, 40))
    worksheet.freeze_panes(1, 0)


def generate_excel_report(
    sheets: Dict[str, pd.DataFrame],
    title: str = "Semiconductor Tools Report"
) -> bytes:
    """
    Generates a multi-sheet Excel report, one sheet per DataFrame, preceded
    by a cover sheet listing the contents.
    """
    output_buffer = io.BytesIO()

    with pd.ExcelWriter(output_buffer, engine='xlsxwriter', datetime_format='yyyy-mm-dd hh:mm:ss') as writer:
        workbook = writer.book
        header_format = workbook.add_format({
            'bold': True, 'text_wrap': True, 'valign': 'top',
            'fg_color': REPORT_HEADER_COLOR, 'font_color': 'white', 'border': 1
        })
        title_format = workbook.add_format({'bold': True, 'font_size': 18, 'font_color': REPORT_HEADER_COLOR})

        cover = writer.book.add_worksheet('Summary')
        cover.write('A1', title, title_format)
        cover.write('A2', 'Report Date:')
        cover.write('B2', datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
        cover.write('A4', 'Sheet', header_format)
        cover.write('B4', 'Rows', header_format)
        for i, (name, df) in enumerate(sheets.items()):
            cover.write(4 + i, 0, name)
            cover.write(4 + i, 1, len(df))
        cover.set_column(0, 0, 30)

        for name, df in sheets.items():
            _write_sheet(writer, df, name, header_format)

    logger.info(f"Generated Excel report with {len(sheets)} sheet(s).")
    return output_buffer.getvalue()
