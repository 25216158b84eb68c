"""Consultation services offered at the counter."""

from __future__ import annotations

from pathlib import Path
from typing import List

from openpyxl import load_workbook

from clinic_pos import config
from clinic_pos.data.excel_repo import detect_columns, to_decimal
from clinic_pos.models.sale import ConsultationService
from clinic_pos.money import to_minor

REQUIRED_COLUMNS = ["Service_Name", "Amount"]

_TRUE_VALUES = {"1", "true", "yes", "y", "x"}


def default_services() -> List[ConsultationService]:
    return [
        ConsultationService(
            id=str(raw["id"]),
            name=raw["name"],
            amount=to_minor(raw["amount"]),
            is_default=bool(raw["is_default"]),
        )
        for raw in config.DEFAULT_CONSULTATION_SERVICES
    ]


def _is_true(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def load_consultation_services(
    path: Path | str = None, sheet_name: str | None = None
) -> List[ConsultationService]:
    """Read services from the catalog workbook, or fall back to the built-in list."""
    path = Path(path) if path else config.CATALOG_PATH
    sheet_name = sheet_name or config.SERVICES_SHEET
    if not path.exists():
        return default_services()

    workbook = load_workbook(path)
    if sheet_name not in workbook.sheetnames:
        return default_services()

    sheet = workbook[sheet_name]
    columns = detect_columns(sheet, REQUIRED_COLUMNS)
    services: List[ConsultationService] = []
    for number, row in enumerate(sheet.iter_rows(min_row=2, values_only=True), start=1):
        name = row[columns["Service_Name"] - 1]
        if name in (None, ""):
            continue
        service_id = row[columns["Service_ID"] - 1] if "Service_ID" in columns else None
        is_default = row[columns["Is_Default"] - 1] if "Is_Default" in columns else False
        amount = to_decimal(row[columns["Amount"] - 1], default=None) or 0
        services.append(
            ConsultationService(
                id=str(service_id if service_id not in (None, "") else number),
                name=str(name),
                amount=to_minor(amount),
                is_default=_is_true(is_default),
            )
        )
    return services
