import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")

# --- Source Configuration ---
# Each source is either a file name (resolved under INPUT_DIR), an absolute path,
# or an http(s) URL.
PY_INVENTORY_SOURCE = os.getenv(
    "PY_INVENTORY_SOURCE", "HQST05_2412_merged_inventory.csv"
)
CY_INVENTORY_SOURCE = os.getenv(
    "CY_INVENTORY_SOURCE", "HQST05_2512_merged_inventory.csv"
)
GRAPH_SOURCE = os.getenv("GRAPH_SOURCE", "HKMC_Inventory Graph_2512.csv")
TARGET_SOURCE = os.getenv("TARGET_SOURCE", "hkmc_past_season_target.csv")

REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = BASE_DIR / os.getenv("LOG_FILE", "logs/offseason.log")

# --- Fiscal Calendar ---
# Two-digit fiscal year of the current FW season. The prior-year extract is
# always read against CURRENT_FISCAL_YEAR - 1.
CURRENT_FISCAL_YEAR = int(os.getenv("CURRENT_FISCAL_YEAR", "25"))

# --- Shared Business Logic ---
# Local currency units per one unit of the reporting currency (HKD).
FX_RATES = {
    "HK": 1.0,
    "MC": 1.03,
    "TW": 4.02,
}
DEFAULT_FX_RATE = 1.0
BASE_CURRENCY_COUNTRY = "HK"

# Countries included in past-season reporting.
REPORTING_COUNTRIES = [
    "HK",
    "MC",
    "MO",
]

# Category codes/names -> standardized reporting category.
CATEGORY_MAP = {
    "INN": "INNER",
    "INNER": "INNER",
    "OUT": "OUTER",
    "OUTER": "OUTER",
    "BOT": "BOTTOM",
    "BOTTOM": "BOTTOM",
}

# Extra physical lines a quoted header may span after the first one.
MAX_HEADER_CONTINUATION_LINES = 4

# Monthly stock-to-COGS ratio is expressed in days.
INVENTORY_DAYS_FACTOR = 30

# An item is stagnant when monthly sales are below this share of its stock.
STAGNANT_RATIO_THRESHOLD = 0.001

# Months compared in the PY vs CY trend (second half of the fiscal year).
TREND_MONTHS = [6, 7, 8, 9, 10, 11, 12]
