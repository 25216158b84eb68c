"""Stock left for reservation once the open cart lines are taken out."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from clinic_pos.models.medicine import CartLine, MedicineCatalogEntry, SaleType


@dataclass(frozen=True)
class Availability:
    tablets: int
    strips: int

    def in_units(self, sale_type: SaleType) -> int:
        return self.strips if sale_type is SaleType.STRIP else self.tablets


NONE_AVAILABLE = Availability(tablets=0, strips=0)


def reserved_tablets(
    medicine_id: str,
    lines: Iterable[CartLine],
    exclude: Optional[Tuple[str, SaleType]] = None,
) -> int:
    return sum(
        line.total_tablets
        for line in lines
        if line.medicine_id == medicine_id and line.key != exclude
    )


def availability(
    entry: Optional[MedicineCatalogEntry],
    lines: Iterable[CartLine],
    exclude: Optional[Tuple[str, SaleType]] = None,
) -> Availability:
    """Compute what can still be put in the cart for ``entry``.

    ``exclude`` leaves one ``(medicine_id, sale_type)`` line out of the
    reservation, which is how a line's own quantity is re-validated.
    Unknown medicines have nothing available.
    """
    if entry is None:
        return NONE_AVAILABLE
    reserved = reserved_tablets(entry.id, lines, exclude)
    tablets = max(0, entry.total_tablets - reserved)
    return Availability(tablets=tablets, strips=tablets // entry.tablets_per_strip)


def tablets_for(entry: MedicineCatalogEntry, quantity: int, sale_type: SaleType) -> int:
    if sale_type is SaleType.STRIP:
        return quantity * entry.tablets_per_strip
    return quantity
