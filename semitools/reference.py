"""
Reference Data Provider.

Static lookup tables of common semiconductor test values. The tables are a
fixed, versioned data asset: read-only, searched but never modified.
"""
from typing import List

from semitools.core.models import ReferenceItem, ReferenceTable

REFERENCE_DATA_VERSION = "1.0"

REFERENCE_TABLES = (
    ReferenceTable(
        title="Common Voltage Thresholds",
        category="Voltage",
        items=(
            ReferenceItem("Logic High (5V CMOS)", "3.5", "V", "Minimum high voltage for 5V logic"),
            ReferenceItem("Logic Low (5V CMOS)", "0.5", "V", "Maximum low voltage for 5V logic"),
            ReferenceItem("Logic High (3.3V CMOS)", "2.0", "V", "Minimum high voltage for 3.3V logic"),
            ReferenceItem("Logic Low (3.3V CMOS)", "0.8", "V", "Maximum low voltage for 3.3V logic"),
            ReferenceItem("Logic High (1.8V CMOS)", "1.26", "V", "Minimum high voltage for 1.8V logic"),
            ReferenceItem("Logic Low (1.8V CMOS)", "0.54", "V", "Maximum low voltage for 1.8V logic"),
        ),
    ),
    ReferenceTable(
        title="Common Current Limits",
        category="Current",
        items=(
            ReferenceItem("Leakage Current (max)", "1", "μA", "Typical max static leakage"),
            ReferenceItem("Supply Current (typical)", "10", "mA", "Typical supply current during operation"),
            ReferenceItem("Output Drive Current", "20", "mA", "Typical output drive capability"),
            ReferenceItem("ESD Threshold", "2", "kV", "Electrostatic discharge protection level"),
        ),
    ),
    ReferenceTable(
        title="Common Frequency Standards",
        category="Frequency",
        items=(
            ReferenceItem("Crystal Oscillator", "32.768", "kHz", "Common real-time clock frequency"),
            ReferenceItem("Audio Sample Rate", "44.1", "kHz", "CD quality audio"),
            ReferenceItem("USB 2.0", "480", "Mbps", "High-speed USB standard"),
            ReferenceItem("DDR3 Memory", "1.6", "GHz", "Typical DDR3 clock speed"),
            ReferenceItem("DDR4 Memory", "2.4", "GHz", "Typical DDR4 clock speed"),
            ReferenceItem("PCIe 3.0", "8", "GT/s", "PCIe Gen 3 speed per lane"),
        ),
    ),
    ReferenceTable(
        title="Standard Temperature Ranges",
        category="Temperature",
        items=(
            ReferenceItem("Commercial Grade", "0 to 70", "°C", "Standard industrial devices"),
            ReferenceItem("Industrial Grade", "-40 to 85", "°C", "Extended temperature range"),
            ReferenceItem("Automotive Grade", "-40 to 125", "°C", "High temperature automotive devices"),
            ReferenceItem("Military Grade", "-55 to 125", "°C", "Extreme temperature range"),
        ),
    ),
    ReferenceTable(
        title="Power Consumption Classes",
        category="Power",
        items=(
            ReferenceItem("Ultra Low Power", "< 1", "mW", "Battery-powered IoT devices"),
            ReferenceItem("Low Power", "1 - 10", "mW", "Wearables and sensors"),
            ReferenceItem("Medium Power", "10 - 100", "mW", "Mobile and portable devices"),
            ReferenceItem("High Power", "> 100", "mW", "Server and compute chips"),
        ),
    ),
    ReferenceTable(
        title="Common Resistor Values (E12 Series)",
        category="Resistance",
        items=tuple(
            ReferenceItem(f"{v}Ω", str(v), "Ω")
            for v in (10, 12, 15, 18, 22, 27, 33, 39, 47, 56, 68, 82)
        ),
    ),
    ReferenceTable(
        title="Common Capacitor Values",
        category="Capacitance",
        items=(
            ReferenceItem("1pF", "1", "pF", "RF tuning capacitor"),
            ReferenceItem("10pF", "10", "pF", "Crystal load capacitance"),
            ReferenceItem("100pF", "100", "pF", "Common bypass capacitor"),
            ReferenceItem("1nF", "1", "nF", "Filtering and decoupling"),
            ReferenceItem("10nF", "10", "nF", "Standard bypass capacitor"),
            ReferenceItem("100nF", "100", "nF", "Most common bypass value"),
            ReferenceItem("1μF", "1", "μF", "General purpose filtering"),
            ReferenceItem("10μF", "10", "μF", "Bulk capacitance"),
        ),
    ),
    ReferenceTable(
        title="Signal Integrity Standards",
        category="Signal Integrity",
        items=(
            ReferenceItem("Setup Time", "typically", "< period/4", "Time before clock edge data must be stable"),
            ReferenceItem("Hold Time", "typically", "< period/4", "Time after clock edge data must remain stable"),
            ReferenceItem("Rise Time (3.3V)", "1 - 10", "ns", "Time to transition from low to high"),
            ReferenceItem("Fall Time (3.3V)", "1 - 10", "ns", "Time to transition from high to low"),
        ),
    ),
)


def get_tables() -> List[ReferenceTable]:
    return list(REFERENCE_TABLES)


def get_categories() -> List[str]:
    return [table.category for table in REFERENCE_TABLES]


def search(text: str) -> List[ReferenceTable]:
    """
    Tables whose title, or any item name or value, contains text (case-insensitive).
    Matching tables are returned whole. A blank query returns every table.
    """
    query = (text or "").strip().casefold()
    if not query:
        return get_tables()

    def matches(table: ReferenceTable) -> bool:
        if query in table.title.casefold():
            return True
        return any(query in item.name.casefold() or query in item.value.casefold() for item in table.items)

    return [table for table in REFERENCE_TABLES if matches(table)]
