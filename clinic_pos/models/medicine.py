"""Dataclasses representing catalog medicines and cart lines."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class SaleType(str, Enum):
    STRIP = "strip"
    TABLET = "tablet"


@dataclass(frozen=True)
class MedicineCatalogEntry:
    """A medicine as the catalog store holds it.

    ``quantity`` counts strips (raw units when ``tablets_per_strip`` is 1).
    Prices are integer paise; ``selling_price_gst`` is a percentage.
    """

    id: str
    name: str
    quantity: int
    selling_price: int
    brand: str = ""
    tablets_per_strip: int = 1
    selling_price_gst: Decimal = Decimal("0")
    total_selling_price: Optional[int] = None
    min_stock_level: int = 0

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(f"Stock for '{self.name}' cannot be negative.")
        if self.tablets_per_strip < 1:
            raise ValueError(f"Tablets per strip for '{self.name}' must be at least 1.")

    @property
    def total_tablets(self) -> int:
        return self.quantity * self.tablets_per_strip

    @property
    def is_divisible(self) -> bool:
        return self.tablets_per_strip > 1


@dataclass
class CartLine:
    """A provisional medicine line of the sale being edited."""

    medicine_id: str
    medicine_name: str
    sale_type: SaleType
    quantity: int
    unit_price: int
    tablets_per_strip: int = 1

    @property
    def total_price(self) -> int:
        return self.quantity * self.unit_price

    @property
    def total_tablets(self) -> int:
        if self.sale_type is SaleType.STRIP:
            return self.quantity * self.tablets_per_strip
        return self.quantity

    @property
    def key(self):
        return (self.medicine_id, self.sale_type)
