"""Low-stock and repeat-visit warnings shown while a sale is edited."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from clinic_pos import config
from clinic_pos.models.medicine import MedicineCatalogEntry
from clinic_pos.models.sale import Customer, Sale


def is_low_stock(entry: MedicineCatalogEntry, available_strips: Optional[int] = None) -> bool:
    available = entry.quantity if available_strips is None else available_strips
    return available <= entry.min_stock_level


def low_stock(catalog) -> List[MedicineCatalogEntry]:
    """Catalog entries at or below their minimum stock level, by name."""
    entries = [entry for entry in catalog.list_medicines() if is_low_stock(entry)]
    return sorted(entries, key=lambda entry: entry.name.lower())


def revisit_alert(
    customer: Customer,
    sales: Iterable[Sale],
    now: datetime,
    window_days: int = config.REVISIT_ALERT_DAYS,
) -> Optional[int]:
    """Whole days since the customer's last sale, when inside ``window_days``."""
    visits = [sale.created_at for sale in sales if sale.customer_id == customer.id]
    if not visits:
        return None
    days = (now - max(visits)).days
    return days if days <= window_days else None
