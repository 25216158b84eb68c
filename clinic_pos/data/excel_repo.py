"""Excel-backed medicine catalog."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Optional

from openpyxl import load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from clinic_pos import config
from clinic_pos.data.catalog_store import CatalogStore
from clinic_pos.models.medicine import MedicineCatalogEntry
from clinic_pos.money import to_minor

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["Medicine_Name", "Stock", "Selling_Price"]


def _normalize_name(name: str) -> str:
    return str(name).strip().lower()


def detect_columns(sheet: Worksheet, required) -> Dict[str, int]:
    """Map header names in the first row to 1-based column indexes."""
    headers: Dict[str, int] = {}
    for idx, cell in enumerate(sheet[1], start=1):
        if cell.value is not None:
            headers[str(cell.value).strip()] = idx

    missing = [col for col in required if col not in headers]
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(missing)}")
    return headers


def to_int(value, default: int) -> int:
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def to_decimal(value, default: Optional[Decimal]) -> Optional[Decimal]:
    if value in (None, ""):
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


class ExcelCatalogStore(CatalogStore):
    """Loads medicines from a worksheet and writes stock decrements back to it."""

    def __init__(self, path: Path | str = None, sheet_name: str | None = None) -> None:
        super().__init__()
        self.path: Path = Path(path) if path else config.CATALOG_PATH
        self.sheet_name = sheet_name or config.MEDICINES_SHEET
        self._workbook = None
        self._sheet: Optional[Worksheet] = None
        self._col_map: Dict[str, int] = {}
        self._stock_cells: Dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            raise FileNotFoundError(f"Excel file not found: {self.path}")

        self._workbook = load_workbook(self.path)
        if self.sheet_name not in self._workbook.sheetnames:
            raise ValueError(f"Sheet '{self.sheet_name}' not found in Excel file.")

        self._sheet = self._workbook[self.sheet_name]
        self._col_map = detect_columns(self._sheet, REQUIRED_COLUMNS)
        self._read_rows()
        logger.info("Loaded %d medicine(s) from %s", len(self), self.path)

    def _cell(self, row, column: str):
        idx = self._col_map.get(column)
        return row[idx - 1].value if idx else None

    def _read_rows(self) -> None:
        for row in self._sheet.iter_rows(min_row=2):
            name_val = self._cell(row, "Medicine_Name")
            if name_val in (None, ""):
                continue

            medicine_id = self._cell(row, "Medicine_ID")
            if medicine_id in (None, ""):
                medicine_id = _normalize_name(name_val)
            total_price = to_decimal(self._cell(row, "Total_Selling_Price"), default=None)

            entry = MedicineCatalogEntry(
                id=str(medicine_id),
                name=str(name_val),
                brand=str(self._cell(row, "Brand") or ""),
                quantity=max(0, to_int(self._cell(row, "Stock"), default=0)),
                tablets_per_strip=max(1, to_int(self._cell(row, "Tablets_Per_Strip"), default=1)),
                selling_price=to_minor(
                    to_decimal(self._cell(row, "Selling_Price"), default=Decimal("0"))
                ),
                selling_price_gst=to_decimal(
                    self._cell(row, "Selling_Price_GST"), default=Decimal("0")
                ),
                total_selling_price=to_minor(total_price) if total_price is not None else None,
                min_stock_level=to_int(self._cell(row, "Min_Stock_Level"), default=0),
            )
            self._add(entry)
            self._stock_cells[entry.id] = row[self._col_map["Stock"] - 1].coordinate

    def _persist(self, quantities: Dict[str, int]) -> None:
        old_values = {}
        for medicine_id, quantity in quantities.items():
            ref = self._stock_cells[medicine_id]
            old_values[ref] = self._sheet[ref].value
            self._sheet[ref].value = quantity
        try:
            self._workbook.save(self.path)
        except Exception:
            for ref, value in old_values.items():
                self._sheet[ref].value = value
            raise

    def self_check(self) -> bool:
        """Verify required columns exist; returns True when valid."""
        return all(col in self._col_map for col in REQUIRED_COLUMNS)
