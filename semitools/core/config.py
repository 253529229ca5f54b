"""
Configuration Module.

This module contains all configuration variables for the calculator suite,
including persistence keys, seeded defaults, unit scale tables, capability
thresholds and the chart colour theme.
"""
from dataclasses import dataclass
from pathlib import Path

# --- Persistence Keys ---
# One stable key per entity collection in the blob store.
BINS_KEY = "yieldBins"
RECORDS_KEY = "yieldRecords"
SPECS_KEY = "parametricSpecs"
MEASUREMENTS_KEY = "parametricMeasurements"
DATA_SETS_KEY = "statisticalDataSets"
PROFILES_KEY = "testTimeProfiles"
PERIOD_FREQUENCY_KEY = "periodFrequencyCalculations"
WAFER_DIE_KEY = "waferDieCalculations"

STORAGE_KEYS = [
    BINS_KEY,
    RECORDS_KEY,
    SPECS_KEY,
    MEASUREMENTS_KEY,
    DATA_SETS_KEY,
    PROFILES_KEY,
    PERIOD_FREQUENCY_KEY,
    WAFER_DIE_KEY,
]

# Default on-disk location for the JSON blob store
DEFAULT_STORAGE_PATH = Path.home() / ".semitools" / "storage.json"

# --- Bin / Yield ---
# Seeded on first run when no bins are stored: (name, hex colour)
DEFAULT_BINS = [
    ("Good", "#34C759"),      # Green
    ("Fail", "#FF3B30"),      # Red
    ("Marginal", "#FF9500"),  # Orange
]

# Overall yield is the percentage of the bin with this name (case-insensitive)
GOOD_BIN_NAME = "good"

DPM_SCALE = 1_000_000

# --- Test Time ---
SECONDS_PER_MINUTE = 60.0
SECONDS_PER_HOUR = 3600.0

# --- Unit Scales ---
# Time unit symbol -> seconds
TIME_UNIT_SECONDS = {
    "ns": 1e-9,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
}

# Frequency unit symbol -> Hz divisor
FREQUENCY_UNIT_DIVISORS = {
    "Hz": 1.0,
    "kHz": 1e3,
    "MHz": 1e6,
    "GHz": 1e9,
}

# --- Process Capability ---
# Cpk >= CPK_CAPABLE is capable, >= CPK_MARGINAL is marginal, below is not capable.
CPK_CAPABLE = 1.33
CPK_MARGINAL = 1.0

# --- Logging ---
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# --- Theme Configuration ---
@dataclass
class PlotTheme:
    background_color: str
    plot_area_color: str
    axis_color: str
    text_color: str

    # Marker colours for limit overlays
    limit_color: str = '#FF3B30'   # Red
    mean_color: str = '#34C759'    # Green
    bar_color: str = '#007AFF'     # Blue

# Default Theme (Dark)
DEFAULT_THEME = PlotTheme(
    background_color='#2C3E50',       # Dark Blue-Grey
    plot_area_color='#333333',        # Dark Grey
    axis_color='#8B8B8B',             # Mid Grey
    text_color='#FFFFFF',             # White
)

# Fallback colour for bins whose id no longer resolves to a definition
UNKNOWN_BIN_COLOR = '#8E8E93'

# --- Excel Report ---
REPORT_HEADER_COLOR = '#1F497D'       # Dark Blue (Headers)
