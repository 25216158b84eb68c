"""Per-strip and per-tablet selling prices, and the GST split of a price."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from clinic_pos.models.medicine import MedicineCatalogEntry, SaleType
from clinic_pos.money import divide, percent_of


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: int
    gst_percent: Decimal
    gst_amount: int

    @property
    def total_price(self) -> int:
        return self.base_price + self.gst_amount


def strip_price(entry: MedicineCatalogEntry) -> int:
    """GST-inclusive price when set, otherwise the plain selling price."""
    if entry.total_selling_price is not None:
        return entry.total_selling_price
    return entry.selling_price


def unit_price(entry: MedicineCatalogEntry, sale_type: SaleType) -> int:
    price = strip_price(entry)
    if sale_type is SaleType.TABLET:
        return divide(price, entry.tablets_per_strip)
    return price


def gst_breakdown(base_price: int, gst_percent: Decimal) -> PriceBreakdown:
    return PriceBreakdown(
        base_price=base_price,
        gst_percent=gst_percent,
        gst_amount=percent_of(base_price, gst_percent),
    )


def medicine_breakdown(entry: MedicineCatalogEntry, sale_type: SaleType) -> PriceBreakdown:
    """GST split of one strip or one tablet, based on the pre-tax price."""
    base = entry.selling_price
    if sale_type is SaleType.TABLET:
        base = divide(base, entry.tablets_per_strip)
    return gst_breakdown(base, entry.selling_price_gst)
