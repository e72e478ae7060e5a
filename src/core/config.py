"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
OUTPUT_DIR = Path(os.environ.get("TIMELEDGER_OUTPUT_DIR", str(PROJECT_ROOT / "output")))

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get("TIMELEDGER_LOG_LEVEL", "INFO").upper()

# =============================================================================
# BILLING CONFIGURATION
# =============================================================================

# Days before the cutoff still belong to the previous billing month
BILLING_CUTOFF_DAY = int(os.environ.get("TIMELEDGER_BILLING_CUTOFF_DAY", "20"))

# =============================================================================
# ANALYTICS CONFIGURATION
# =============================================================================

HOURS_PRECISION = 1  # hours shown with 0.1 precision
ROI_PRECISION = 2  # revenue per hour with cent precision
TOP_CLIENTS_LIMIT = 5
DAYS_PER_YEAR = 365

TIME_VIEW_MODES = {"monthly", "daily"}

# Notes markers that identify a legacy rectification (Storno) invoice
RECTIFICATION_MARKERS = ("stornorechnung", "storno")

# Payment term applied to invoices created by a rectification
RECTIFICATION_DUE_DAYS = 14

# =============================================================================
# TAX CONFIGURATION
# =============================================================================

# VAT rate used by the VAT simulation unless the caller passes one
VAT_RATE_PERCENT = float(os.environ.get("TIMELEDGER_VAT_RATE_PERCENT", "19"))

# Client VAT IDs with this prefix are domestic; any other ID means reverse charge
DOMESTIC_VAT_ID_PREFIX = "DE"

# Exemption reasons that make an invoice non-taxable
VAT_EXEMPTION_MARKERS = ("§ 19", "kleinunternehmer", "reverse")

# Small-business (Kleinunternehmer) turnover limits in EUR
SMALL_BUSINESS_PREVIOUS_YEAR_LIMIT = 22000
SMALL_BUSINESS_CURRENT_YEAR_LIMIT = 50000

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

TIMESHEET_SHEET_NAME = "Timesheet"
TIMESHEET_HEADERS = ["Date", "Start", "Pause (min)", "End", "Duration (hh:mm)", "Notes"]

TIME_REPORT_SHEETS = {
    "hours": "Monthly Hours",
    "roi": "ROI",
    "invoices": "Invoices",
    "revenue": "Revenue",
}
ROI_HEADERS = ["Customer", "Hours", "Revenue", "Revenue / Hour"]
INVOICE_HEADERS = ["Invoice #", "Date", "Client", "Total", "Status", "Actions"]
REVENUE_ROW_LABELS = ["Total YTD", "Projected annual", "Average monthly"]

MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 60
