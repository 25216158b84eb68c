"""Totals of a sale: medicines, services, discount and the amount due."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from clinic_pos.engine.pricing import PriceBreakdown, medicine_breakdown
from clinic_pos.models.medicine import CartLine, SaleType
from clinic_pos.models.sale import Sale, ServiceSelection


@dataclass(frozen=True)
class BillTotals:
    medicines_total: int
    services_total: int
    discount: int

    @property
    def subtotal(self) -> int:
        return self.medicines_total + self.services_total

    @property
    def final_amount(self) -> int:
        return max(0, self.subtotal - self.discount)


@dataclass(frozen=True)
class BillSummary:
    """Figures a bill shows under the item list."""

    medicines_total: int
    services_total: int
    base_amount: int
    gst_amount: int
    subtotal: int
    discount: int
    final_amount: int
    line_gst: Dict[Tuple[str, Optional[SaleType]], PriceBreakdown] = field(default_factory=dict)


def compute_totals(
    lines: Iterable[CartLine], selections: Iterable[ServiceSelection], discount: int = 0
) -> BillTotals:
    """Sum the open sale. ``discount`` is clamped to ``[0, subtotal]``."""
    medicines_total = sum(line.total_price for line in lines)
    services_total = sum(selection.total_price for selection in selections)
    subtotal = medicines_total + services_total
    clamped = min(max(0, int(discount or 0)), subtotal)
    return BillTotals(medicines_total, services_total, clamped)


def bill_summary(sale: Sale, catalog) -> BillSummary:
    """Split a committed sale into base and GST amounts for rendering.

    Medicines with a GST rate contribute their pre-tax selling price to the
    base and the tax to ``gst_amount``; everything else counts as base.
    """
    medicines_total = sum(item.total_price for item in sale.medicine_items)
    services_total = sum(item.total_price for item in sale.service_items)
    base_amount = services_total
    gst_amount = 0
    line_gst = {}
    for item in sale.medicine_items:
        entry = catalog.get(item.item_id)
        if entry is not None and entry.selling_price_gst > 0:
            split = medicine_breakdown(entry, item.sale_type or SaleType.STRIP)
            line_gst[(item.item_id, item.sale_type)] = split
            base_amount += split.base_price * item.quantity
            gst_amount += split.gst_amount * item.quantity
        else:
            base_amount += item.total_price
    return BillSummary(
        medicines_total=medicines_total,
        services_total=services_total,
        base_amount=base_amount,
        gst_amount=gst_amount,
        subtotal=sale.total_amount,
        discount=sale.discount,
        final_amount=sale.final_amount,
        line_gst=line_gst,
    )
