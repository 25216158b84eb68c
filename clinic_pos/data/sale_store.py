"""Committed sales: an in-memory store and an Excel sales ledger."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from clinic_pos import config
from clinic_pos.data.excel_repo import detect_columns, to_int
from clinic_pos.models.medicine import SaleType
from clinic_pos.models.sale import ItemKind, PaymentMethod, Sale, SaleItem
from clinic_pos.money import to_major, to_minor

logger = logging.getLogger(__name__)

SALE_COLUMNS = [
    "Sale_ID",
    "Created_At",
    "Customer_ID",
    "Customer_Name",
    "Patient_ID",
    "Payment_Method",
    "Total_Amount",
    "Discount",
    "Final_Amount",
    "Item_Kind",
    "Item_ID",
    "Item_Name",
    "Sale_Type",
    "Quantity",
    "Unit_Price",
    "Total_Price",
    "Total_Tablets",
]


class SaleStore:
    """Append-only list of sales kept in memory."""

    def __init__(self, sales: Iterable[Sale] = ()) -> None:
        self._sales: List[Sale] = list(sales)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sales)

    def list_sales(self) -> List[Sale]:
        return list(self._sales)

    def get(self, sale_id: str) -> Optional[Sale]:
        for sale in self._sales:
            if sale.id == sale_id:
                return sale
        return None

    def append(self, sale: Sale) -> None:
        with self._lock:
            if any(existing.id == sale.id for existing in self._sales):
                raise ValueError(f"Sale '{sale.id}' already stored.")
            self._sales.append(sale)
            try:
                self._write_sale(sale)
            except Exception:
                self._sales.pop()
                raise

    def discard(self, sale_id: str) -> bool:
        """Remove a sale whose commit did not complete."""
        with self._lock:
            sale = self.get(sale_id)
            if sale is None:
                return False
            self._sales.remove(sale)
            self._remove_sale(sale_id)
            return True

    def _write_sale(self, sale: Sale) -> None:
        pass

    def _remove_sale(self, sale_id: str) -> None:
        pass

    def for_customer(self, customer_id: str) -> List[Sale]:
        return [sale for sale in self._sales if sale.customer_id == customer_id]

    def search(self, term: str) -> List[Sale]:
        """Sales matching customer name, patient id or sale id, newest first."""
        needle = str(term).strip().lower()
        found = [
            sale
            for sale in self._sales
            if needle in sale.customer_name.lower()
            or needle in sale.patient_id.lower()
            or needle in sale.id.lower()
        ]
        return sorted(found, key=lambda sale: sale.created_at, reverse=True)


def _sale_rows(sale: Sale) -> List[list]:
    header = [
        sale.id,
        sale.created_at.isoformat(),
        sale.customer_id,
        sale.customer_name,
        sale.patient_id,
        sale.payment_method.value,
        to_major(sale.total_amount),
        to_major(sale.discount),
        to_major(sale.final_amount),
    ]
    return [
        header
        + [
            item.kind.value,
            item.item_id,
            item.name,
            item.sale_type.value if item.sale_type else "",
            item.quantity,
            to_major(item.unit_price),
            to_major(item.total_price),
            item.total_tablets,
        ]
        for item in sale.items
    ]


class ExcelSaleStore(SaleStore):
    """Sales ledger in a workbook, one row per sold item."""

    def __init__(self, path: Path | str = None, sheet_name: str | None = None) -> None:
        super().__init__()
        self.path: Path = Path(path) if path else config.SALES_PATH
        self.sheet_name = sheet_name or config.SALES_SHEET
        self._workbook = None
        self._sheet: Optional[Worksheet] = None
        self._col_map: Dict[str, int] = {}
        self._load()

    def _load(self) -> None:
        if self.path.exists():
            self._workbook = load_workbook(self.path)
        else:
            self._workbook = Workbook()
            self._workbook.active.title = self.sheet_name
        if self.sheet_name not in self._workbook.sheetnames:
            self._workbook.create_sheet(self.sheet_name)
        self._sheet = self._workbook[self.sheet_name]
        if self._sheet.max_row == 1 and self._sheet.cell(row=1, column=1).value is None:
            for idx, name in enumerate(SALE_COLUMNS, start=1):
                self._sheet.cell(row=1, column=idx, value=name)
        self._col_map = detect_columns(self._sheet, SALE_COLUMNS)
        self._read_rows()
        logger.info("Loaded %d sale(s) from %s", len(self), self.path)

    def _read_rows(self) -> None:
        grouped: Dict[str, List[Dict]] = {}
        for row in self._sheet.iter_rows(min_row=2, values_only=True):
            record = {name: row[idx - 1] for name, idx in self._col_map.items()}
            if record["Sale_ID"] in (None, ""):
                continue
            grouped.setdefault(str(record["Sale_ID"]), []).append(record)

        for sale_id, records in grouped.items():
            first = records[0]
            items = tuple(
                SaleItem(
                    kind=ItemKind(record["Item_Kind"]),
                    item_id=str(record["Item_ID"]),
                    name=str(record["Item_Name"]),
                    quantity=to_int(record["Quantity"], default=0),
                    unit_price=to_minor(record["Unit_Price"] or 0),
                    total_price=to_minor(record["Total_Price"] or 0),
                    sale_type=SaleType(record["Sale_Type"]) if record["Sale_Type"] else None,
                    total_tablets=to_int(record["Total_Tablets"], default=0),
                )
                for record in records
            )
            created_at = first["Created_At"]
            if not isinstance(created_at, datetime):
                created_at = datetime.fromisoformat(str(created_at))
            self._sales.append(
                Sale(
                    id=sale_id,
                    customer_id=str(first["Customer_ID"]),
                    customer_name=str(first["Customer_Name"] or ""),
                    patient_id=str(first["Patient_ID"] or ""),
                    items=items,
                    total_amount=to_minor(first["Total_Amount"] or 0),
                    discount=to_minor(first["Discount"] or 0),
                    final_amount=to_minor(first["Final_Amount"] or 0),
                    payment_method=PaymentMethod(first["Payment_Method"]),
                    created_at=created_at,
                )
            )

    def _write_sale(self, sale: Sale) -> None:
        start = self._sheet.max_row + 1
        rows = _sale_rows(sale)
        for row in rows:
            self._sheet.append(row)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._workbook.save(self.path)
        except Exception:
            self._sheet.delete_rows(start, len(rows))
            raise

    def _remove_sale(self, sale_id: str) -> None:
        id_col = self._col_map["Sale_ID"]
        for row_idx in range(self._sheet.max_row, 1, -1):
            if self._sheet.cell(row=row_idx, column=id_col).value == sale_id:
                self._sheet.delete_rows(row_idx)
        self._workbook.save(self.path)
