"""Rejections raised by the cart and billing engine.

Every error leaves the cart, the service selection and the catalog exactly
as they were before the failed call.
"""

from __future__ import annotations

from typing import Optional


class SaleError(Exception):
    """Base class for recoverable sale-editing and commit failures."""


class InvalidQuantity(SaleError):
    def __init__(self, quantity) -> None:
        super().__init__(f"Quantity must be a positive whole number, got {quantity!r}.")
        self.quantity = quantity


class InsufficientStock(SaleError):
    def __init__(self, medicine_id: str, requested: int, available: int, unit: str) -> None:
        super().__init__(
            f"Insufficient stock for '{medicine_id}'. "
            f"Available: {available} {unit}(s), requested: {requested}."
        )
        self.medicine_id = medicine_id
        self.requested = requested
        self.available = available
        self.unit = unit


class LineNotFound(SaleError):
    def __init__(self, item_id: str, sale_type: Optional[str] = None) -> None:
        where = f"{item_id} ({sale_type})" if sale_type else item_id
        super().__init__(f"No line for {where} in the current sale.")
        self.item_id = item_id
        self.sale_type = sale_type


class MissingCustomer(SaleError):
    def __init__(self) -> None:
        super().__init__("Select a patient before completing the sale.")


class EmptyCart(SaleError):
    def __init__(self) -> None:
        super().__init__("Add at least one medicine or service before completing the sale.")


class ConcurrentStockConflict(SaleError):
    """Stock changed underneath the sale between editing and commit."""

    def __init__(self, medicine_id: str, requested_tablets: int, available_tablets: int) -> None:
        super().__init__(
            f"Stock for '{medicine_id}' changed while the sale was open. "
            f"Needed {requested_tablets} tablet(s), only {available_tablets} left."
        )
        self.medicine_id = medicine_id
        self.requested_tablets = requested_tablets
        self.available_tablets = available_tablets
