"""
Application constants for Worksite Reports.

Centralized location for all application-wide constants.
"""

from pathlib import Path

# ==================== Application Info ====================

APP_NAME = "Worksite Reports"
APP_VERSION = "1.0.0"

# ==================== File Extensions ====================

RECORD_FILE_EXTENSIONS = [".json", ".csv", ".xlsx", ".xls"]
EXPORT_FORMATS = ["csv", "print", "pdf"]

EXPORT_EXTENSIONS = {
    "csv": "csv",
    "print": "html",
    "pdf": "pdf",
}

# ==================== Default Values ====================

DEFAULT_PDF_PAGE_SIZE = "A4"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_BROWSER_CHANNEL = "chrome"

# Number of month buckets kept in trend series
TREND_MONTHS = 6

# Supplier offers shown in a supplier CSV cell
MAX_OFFERS_IN_CELL = 3
DEFAULT_OFFER_UNIT = "kg"

# ==================== Export Constants ====================

CSV_LINE_TERMINATOR = "\r\n"
EMPTY_REPORT_TEXT = "No data."

# ==================== Notification Constants ====================

NOTIFICATION_TTL_ERROR = 6.5  # seconds
NOTIFICATION_TTL_DEFAULT = 4.2  # seconds

# ==================== Colors ====================

COLOR_SAVING = "#16a34a"  # best offer cheaper than average cost
COLOR_PREMIUM = "#b91c1c"  # best offer more expensive
COLOR_NEUTRAL = "#374151"

# ==================== Paths ====================

# Relative to working directory
DATA_DIR = Path("data")
OUTPUT_DIR = Path("reports")

# ==================== Error Messages ====================

ERROR_MESSAGES = {
    "file_not_found": "File not found: {path}",
    "unsupported_format": "Unsupported record file format: {path}",
    "invalid_records": "Record file must contain a list of records: {path}",
    "export_failed": "Export failed: {error}",
    "remote_error": "Request failed. Please try again.",
    "conflict": "The record already exists.",
    "browser_not_found": "Chrome/Chromium is required for PDF export but could not be started.",
}

# ==================== Success Messages ====================

SUCCESS_MESSAGES = {
    "csv_exported": "CSV exported",
    "csv_exported_detail": "Downloaded {count} rows.",
    "print_ready": "Report ready to print",
    "print_ready_detail": "{count} rows in the print view.",
    "pdf_exported": "PDF exported",
    "pdf_exported_detail": "{count} rows saved to {filename}.",
}
