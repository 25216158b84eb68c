"""Configuration constants for the clinic point-of-sale."""

from pathlib import Path

# Workbook holding the medicine catalog and, optionally, consultation services.
CATALOG_PATH: Path = Path("data/medicines.xlsx")
MEDICINES_SHEET: str = "Medicines"
SERVICES_SHEET: str = "Services"

# Workbook where committed sales are appended; created on first sale.
SALES_PATH: Path = Path("data/sales.xlsx")
SALES_SHEET: str = "Sales"

# Name of the Windows printer to target for receipts.
PRINTER_NAME: str = "Star TSP700II (TSP743II)"

# Receipt paper width in millimeters for 80mm thermal rolls.
RECEIPT_WIDTH_MM: float = 80.0

# Header printed on top of every bill.
CLINIC_NAME: str = "Clinic"
DOCTOR_NAME: str = ""
CLINIC_ADDRESS: str = ""
CLINIC_PHONE: str = ""

CURRENCY_SYMBOL: str = "₹"

# Warn when a patient comes back within this many days.
REVISIT_ALERT_DAYS: int = 3

DEFAULT_PAYMENT_METHOD: str = "cash"

# Used when the catalog workbook has no services sheet. Amounts in rupees.
DEFAULT_CONSULTATION_SERVICES = [
    {"id": "1", "name": "General Consultation", "amount": 200, "is_default": True},
    {"id": "2", "name": "Follow-up Consultation", "amount": 150, "is_default": False},
    {"id": "3", "name": "Emergency Consultation", "amount": 500, "is_default": False},
]

LOG_LEVEL: str = "INFO"
LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
