"""
Main Application File for the Semiconductor Tools Streamlit Dashboard.
One page per calculator: wafer/die yield, bin yield, parametric specs,
statistical analysis, test time, period/frequency and reference tables.
"""
import streamlit as st
import pandas as pd

from semitools.core.config import DEFAULT_STORAGE_PATH
from semitools.core.exceptions import ValidationError
from semitools.core.models import BinCount, YieldRecord, ParametricSpec, DataSet, TestStep, TestProfile
from semitools.enums import ToolPage, TestStatus, TimeUnit, FrequencyUnit
from semitools.io.persistence import JsonFileBlobStore, SessionStateBlobStore
from semitools.io.validation import parse_float, parse_int, parse_positive, parse_value_list, require_text
from semitools.state import (
    YieldDataStore, WaferDieDataStore, ParametricSpecDataStore, StatisticsDataStore,
    TestTimeDataStore, PeriodFrequencyDataStore
)
from semitools.analytics import yield_analysis, parametric, test_time, conversion
from semitools.plotting import create_bin_distribution_figure, create_histogram_figure, create_yield_trend_figure
from semitools.reporting import (
    generate_excel_report, yield_records_to_dataframe, wafer_die_to_dataframe,
    specs_to_dataframe, data_sets_to_dataframe, profiles_to_dataframe
)
from semitools import reference
from semitools.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

STATUS_ICONS = {
    TestStatus.PASS: "🟢 Pass",
    TestStatus.FAIL: "🔴 Fail",
    TestStatus.MARGINAL: "🟠 Marginal",
    TestStatus.NO_DATA: "⚪ No Data",
}


def _build_stores(blob_store) -> dict:
    return {
        'yield': YieldDataStore(blob_store),
        'wafer': WaferDieDataStore(blob_store),
        'parametric': ParametricSpecDataStore(blob_store),
        'statistics': StatisticsDataStore(blob_store),
        'test_time': TestTimeDataStore(blob_store),
        'period': PeriodFrequencyDataStore(blob_store),
    }


@st.cache_resource(show_spinner="Loading saved data...")
def load_disk_stores(storage_path: str) -> dict:
    """One store set per storage file, shared by every session of this server."""
    logger.info(f"Opening storage file {storage_path}.")
    return _build_stores(JsonFileBlobStore(storage_path))


def get_stores(persist: bool) -> dict:
    """Disk-backed stores are process-wide; session stores live in this session only."""
    if persist:
        stores = load_disk_stores(str(DEFAULT_STORAGE_PATH))
        for store in stores.values():
            store.refresh()
        return stores
    if 'session_stores' not in st.session_state:
        st.session_state.session_stores = _build_stores(SessionStateBlobStore())
    return st.session_state.session_stores


def wafer_die_page(store: WaferDieDataStore) -> None:
    st.header(ToolPage.WAFER_DIE.value)
    with st.form("wafer_die_form", clear_on_submit=True):
        c1, c2 = st.columns(2)
        wafer_name = c1.text_input("Wafer Name")
        lot_number = c2.text_input("Lot Number")
        c3, c4, c5 = st.columns(3)
        total = c3.text_input("Total Dies")
        good = c4.text_input("Good Dies", help="Leave blank to derive from defective dies.")
        defective = c5.text_input("Defective Dies", help="Leave blank to derive from good dies.")
        if st.form_submit_button("Save Calculation"):
            try:
                calc = yield_analysis.build_wafer_die_calculation(
                    wafer_name, lot_number,
                    parse_int(total, "Total dies", minimum=1),
                    parse_int(good, "Good dies") if good.strip() else None,
                    parse_int(defective, "Defective dies") if defective.strip() else None,
                )
                store.add_calculation(calc)
                st.success(f"Saved {calc.wafer_name}: {calc.yield_percentage:.2f}% yield")
            except ValidationError as e:
                st.error(str(e))

    if store.calculations:
        st.metric("Average Yield", f"{store.average_yield():.2f}%")
        st.dataframe(wafer_die_to_dataframe(store.calculations), use_container_width=True, hide_index=True)
        st.plotly_chart(create_yield_trend_figure(store.calculations), use_container_width=True)
        index = st.selectbox("Delete calculation", range(len(store.calculations)),
                             format_func=lambda i: store.calculations[i].wafer_name)
        if st.button("Delete", key="delete_wafer"):
            store.delete_calculation(index)
            st.rerun()


def yield_page(store: YieldDataStore) -> None:
    st.header(ToolPage.YIELD.value)

    with st.expander("Bin Definitions"):
        for b in store.bins:
            cols = st.columns([3, 1, 1])
            cols[0].markdown(f"<span style='color:{b.color}'>■</span> {b.name}", unsafe_allow_html=True)
            cols[1].write(b.color)
            if cols[2].button("Delete", key=f"delete_bin_{b.id}"):
                store.delete_bin(b.id)
                st.rerun()
        with st.form("add_bin_form", clear_on_submit=True):
            name = st.text_input("Bin Name")
            color = st.color_picker("Color", "#007AFF")
            if st.form_submit_button("Add Bin"):
                try:
                    store.add_bin(name, color)
                    st.rerun()
                except ValidationError as e:
                    st.error(str(e))

    with st.form("yield_record_form", clear_on_submit=True):
        c1, c2 = st.columns(2)
        wafer_name = c1.text_input("Wafer Name")
        lot_number = c2.text_input("Lot Number")
        inputs = {b.id: st.text_input(f"{b.name} count", key=f"bin_input_{b.id}") for b in store.bins}
        if st.form_submit_button("Save Record"):
            try:
                counts = [BinCount(bin_id=bin_id, count=parse_int(text, "Bin count", minimum=0))
                          for bin_id, text in inputs.items() if text.strip()]
                record = YieldRecord(wafer_name=require_text(wafer_name, "Wafer name"),
                                     lot_number=require_text(lot_number, "Lot number"),
                                     bin_counts=[bc for bc in counts if bc.count > 0])
                store.add_record(record)
                st.success(f"Saved {record.wafer_name}: {store.overall_yield(record):.2f}% yield")
            except ValidationError as e:
                st.error(str(e))

    if store.records:
        st.dataframe(yield_records_to_dataframe(store.records, store.bins), use_container_width=True, hide_index=True)
        index = st.selectbox("Record", range(len(store.records)),
                             format_func=lambda i: f"{store.records[i].wafer_name} ({store.records[i].lot_number})")
        record = store.records[index]
        summary = store.summarize(record)
        c1, c2 = st.columns(2)
        c1.metric("Total Dies", f"{summary.total_dies:,}")
        c2.metric("Overall Yield", f"{summary.overall_yield:.2f}%")
        st.plotly_chart(create_bin_distribution_figure(record, store.bins), use_container_width=True)
        if st.button("Delete Record"):
            store.delete_record(index)
            st.rerun()


def parametric_page(store: ParametricSpecDataStore) -> None:
    st.header(ToolPage.PARAMETRIC.value)
    with st.form("spec_form", clear_on_submit=True):
        c1, c2 = st.columns(2)
        name = c1.text_input("Spec Name")
        test_name = c2.text_input("Test Name")
        c3, c4, c5 = st.columns(3)
        min_limit = c3.text_input("Min Limit")
        max_limit = c4.text_input("Max Limit")
        unit = c5.text_input("Unit")
        description = st.text_area("Description")
        if st.form_submit_button("Save Spec"):
            try:
                spec = ParametricSpec(
                    name=require_text(name, "Spec name"),
                    test_name=require_text(test_name, "Test name"),
                    min_limit=parse_float(min_limit, "Min limit"),
                    max_limit=parse_float(max_limit, "Max limit"),
                    unit=unit.strip(),
                    description=description.strip(),
                )
                store.add_spec(spec)
            except ValidationError as e:
                st.error(str(e))

    if not store.specs:
        st.info("No specs defined yet.")
        return

    st.dataframe(specs_to_dataframe(store.specs, store.measurements), use_container_width=True, hide_index=True)
    index = st.selectbox("Spec", range(len(store.specs)), format_func=lambda i: store.specs[i].name)
    spec = store.specs[index]
    st.subheader(f"{spec.name}: {STATUS_ICONS[store.test_status(spec)]}")

    value_text = st.text_input("Measured Value", key=f"measure_{spec.id}")
    if st.button("Add Measurement"):
        try:
            value = parse_float(value_text, "Measurement value")
            store.add_measurement(spec.id, value)
            st.rerun()
        except ValidationError as e:
            st.error(str(e))

    history = store.get_measurements(spec.id)
    if history:
        st.dataframe(pd.DataFrame([{
            'Measured': m.measured_at,
            'Value': m.value,
            'Status': STATUS_ICONS[parametric.test_status(spec, m.value)],
            'Margin (%)': round(parametric.margin(spec, m.value), 2),
        } for m in history]), use_container_width=True, hide_index=True)
    if st.button("Delete Spec"):
        store.delete_spec(index)
        st.rerun()


def statistics_page(store: StatisticsDataStore) -> None:
    st.header(ToolPage.STATISTICS.value)
    with st.form("data_set_form", clear_on_submit=True):
        name = st.text_input("Data Set Name")
        description = st.text_input("Description")
        values_text = st.text_area("Values", help="Separate values with commas, spaces or new lines.")
        if st.form_submit_button("Save Data Set"):
            try:
                data_set = DataSet(name=require_text(name, "Data set name"), description=description.strip(),
                                   values=parse_value_list(values_text))
                store.add_data_set(data_set)
            except ValidationError as e:
                st.error(str(e))

    if not store.data_sets:
        st.info("No data sets saved yet.")
        return

    index = st.selectbox("Data Set", range(len(store.data_sets)), format_func=lambda i: store.data_sets[i].name)
    data_set = store.data_sets[index]
    stats = store.describe(data_set)
    cols = st.columns(4)
    cols[0].metric("Count", stats.count)
    cols[1].metric("Mean", f"{stats.mean:.4f}")
    cols[2].metric("Median", f"{stats.median:.4f}")
    cols[3].metric("Std Dev", f"{stats.std_dev:.4f}")
    cols = st.columns(4)
    cols[0].metric("Variance", f"{stats.variance:.4f}")
    cols[1].metric("Min", f"{stats.minimum:.4f}")
    cols[2].metric("Max", f"{stats.maximum:.4f}")
    cols[3].metric("Range", f"{stats.range:.4f}")

    c1, c2 = st.columns(2)
    lsl_text = c1.text_input("LSL", key=f"lsl_{data_set.id}")
    usl_text = c2.text_input("USL", key=f"usl_{data_set.id}")
    lsl = usl = None
    if lsl_text.strip() and usl_text.strip():
        try:
            lsl, usl = parse_float(lsl_text, "LSL"), parse_float(usl_text, "USL")
            result = store.capability(data_set, lsl, usl)
            c1.metric("Cpk", f"{result.cpk:.3f}", result.cpk_rating.value, delta_color="off")
            c2.metric("Ppk", f"{result.ppk:.3f}", result.ppk_rating.value, delta_color="off")
        except ValidationError as e:
            st.error(str(e))
            lsl = usl = None
    st.plotly_chart(create_histogram_figure(data_set.values, lsl, usl, title=data_set.name), use_container_width=True)
    if st.button("Delete Data Set"):
        store.delete_data_set(index)
        st.rerun()


def test_time_page(store: TestTimeDataStore) -> None:
    st.header(ToolPage.TEST_TIME.value)
    if 'draft_steps' not in st.session_state:
        st.session_state.draft_steps = []

    with st.expander("New Profile", expanded=not store.profiles):
        c1, c2 = st.columns(2)
        step_name = c1.text_input("Step Name")
        step_duration = c2.text_input("Duration (s)")
        if st.button("Add Step"):
            try:
                st.session_state.draft_steps.append(
                    TestStep(name=require_text(step_name, "Step name"), duration=parse_float(step_duration, "Duration"))
                )
            except ValidationError as e:
                st.error(str(e))
        for step in st.session_state.draft_steps:
            st.write(f"• {step.name}: {test_time.format_time(step.duration)}")
        profile_name = st.text_input("Profile Name")
        if st.button("Save Profile", disabled=not st.session_state.draft_steps):
            try:
                store.add_profile(TestProfile(name=require_text(profile_name, "Profile name"),
                                              steps=list(st.session_state.draft_steps)))
                st.session_state.draft_steps = []
                st.rerun()
            except ValidationError as e:
                st.error(str(e))

    if not store.profiles:
        return

    index = st.selectbox("Profile", range(len(store.profiles)), format_func=lambda i: store.profiles[i].name)
    profile = store.profiles[index]
    c1, c2 = st.columns(2)
    devices = c1.number_input("Devices", min_value=1, value=100, step=1)
    slots = c2.number_input("Parallel Slots", min_value=1, value=1, step=1)
    summary = store.project(profile, int(devices), int(slots))
    cols = st.columns(3)
    cols[0].metric("Time / Device", test_time.format_time(summary.time_per_device))
    cols[1].metric("Total Time", test_time.format_long_time(summary.total_test_time))
    cols[2].metric("Throughput", f"{summary.throughput:.1f} dev/hr")
    cols = st.columns(2)
    cols[0].metric("Parallel Time", test_time.format_long_time(summary.parallel_time))
    cols[1].metric("Parallel Throughput", f"{summary.parallel_throughput:.1f} dev/hr")
    if st.button("Delete Profile"):
        store.delete_profile(index)
        st.rerun()


def period_frequency_page(store: PeriodFrequencyDataStore) -> None:
    st.header(ToolPage.PERIOD_FREQUENCY.value)
    mode = st.radio("Mode", ["Period → Frequency", "Frequency → Period"], horizontal=True)
    c1, c2, c3 = st.columns(3)
    value_text = c1.text_input("Value")
    time_unit = TimeUnit(c2.selectbox("Time Unit", TimeUnit.values()))
    freq_unit = FrequencyUnit(c3.selectbox("Frequency Unit", FrequencyUnit.values(), index=2))

    if not value_text.strip():
        st.metric("Result", "—")
    else:
        try:
            value = parse_positive(value_text, "Value")
            if mode == "Period → Frequency":
                result = conversion.period_to_frequency(value, time_unit, freq_unit)
                st.metric("Frequency", f"{conversion.format_result(result)} {freq_unit.value}")
                if st.button("Save Conversion"):
                    store.add_calculation(conversion.build_calculation(value, time_unit, freq_unit))
            else:
                result = conversion.frequency_to_period(value, freq_unit, time_unit)
                st.metric("Period", f"{conversion.format_result(result)} {time_unit.value}")
        except ValidationError as e:
            st.error(str(e))

    if store.calculations:
        st.dataframe(pd.DataFrame([{
            'Period': f"{c.input_value} {c.input_unit.value}",
            'Frequency': f"{conversion.format_result(c.display_frequency)} {c.frequency_unit.value}",
            'Saved': c.created_at,
        } for c in store.calculations]), use_container_width=True, hide_index=True)


def reference_page() -> None:
    st.header(ToolPage.REFERENCE.value)
    query = st.text_input("Search", placeholder="Search tables, names or values")
    tables = reference.search(query)
    if not tables:
        st.info("No results. Try searching for a different term.")
    for table in tables:
        with st.expander(f"{table.title} ({table.category})", expanded=bool(query)):
            st.dataframe(pd.DataFrame([{
                'Name': item.name, 'Value': item.value, 'Unit': item.unit, 'Description': item.description or ""
            } for item in table.items]), use_container_width=True, hide_index=True)


def main() -> None:
    """Main function to configure and run the Streamlit application."""
    st.set_page_config(layout="wide", page_title="Semiconductor Tools")
    configure_logging()

    with st.sidebar:
        st.title("🔬 Semiconductor Tools")
        page = st.radio("Tool", ToolPage.values())
        persist = st.toggle("Save to disk", value=True, help=f"Stores data in {DEFAULT_STORAGE_PATH}")
        stores = get_stores(persist)

        st.divider()
        if st.button("Generate Report for Download"):
            with st.spinner("Generating Excel report..."):
                st.session_state.report_bytes = generate_excel_report({
                    'Wafer Die': wafer_die_to_dataframe(stores['wafer'].calculations),
                    'Yield Records': yield_records_to_dataframe(stores['yield'].records, stores['yield'].bins),
                    'Parametric Specs': specs_to_dataframe(stores['parametric'].specs, stores['parametric'].measurements),
                    'Data Sets': data_sets_to_dataframe(stores['statistics'].data_sets),
                    'Test Profiles': profiles_to_dataframe(stores['test_time'].profiles),
                })
        st.download_button("Download Report", data=st.session_state.get('report_bytes') or b"",
                           file_name="semitools_report.xlsx",
                           mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                           disabled=not st.session_state.get('report_bytes'))

    if page == ToolPage.WAFER_DIE.value:
        wafer_die_page(stores['wafer'])
    elif page == ToolPage.YIELD.value:
        yield_page(stores['yield'])
    elif page == ToolPage.PARAMETRIC.value:
        parametric_page(stores['parametric'])
    elif page == ToolPage.STATISTICS.value:
        statistics_page(stores['statistics'])
    elif page == ToolPage.TEST_TIME.value:
        test_time_page(stores['test_time'])
    elif page == ToolPage.PERIOD_FREQUENCY.value:
        period_frequency_page(stores['period'])
    else:
        reference_page()


if __name__ == "__main__":
    main()
