"""One in-flight sale: cart, services, patient, discount and payment method."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from clinic_pos import config
from clinic_pos.engine.billing import BillTotals, compute_totals
from clinic_pos.engine.cart import Cart
from clinic_pos.engine.services import ServiceSelector
from clinic_pos.models.sale import ConsultationService, Customer, PaymentMethod, Sale


class SessionState(str, Enum):
    EMPTY = "empty"
    POPULATED = "populated"
    COMMITTED = "committed"


class SaleSession:
    """Editing state of a single sale. Never share one between operators."""

    def __init__(self, catalog, services: Iterable[ConsultationService] = ()) -> None:
        self.catalog = catalog
        self.cart = Cart(catalog)
        self.services = ServiceSelector(services)
        self.customer: Optional[Customer] = None
        self.discount: int = 0
        self.payment_method = PaymentMethod(config.DEFAULT_PAYMENT_METHOD)
        self.last_sale: Optional[Sale] = None

    @property
    def state(self) -> SessionState:
        if self.cart or self.services:
            return SessionState.POPULATED
        if self.last_sale is not None:
            return SessionState.COMMITTED
        return SessionState.EMPTY

    def set_customer(self, customer: Optional[Customer]) -> None:
        self.customer = customer

    def set_discount(self, discount: int) -> None:
        self.discount = max(0, int(discount))

    def set_payment_method(self, method: PaymentMethod | str) -> None:
        self.payment_method = PaymentMethod(method)

    def totals(self) -> BillTotals:
        return compute_totals(self.cart, self.services, self.discount)

    def reset(self) -> None:
        """Discard the sale being edited. Default services come back."""
        self.cart.clear()
        self.services.reset()
        self.customer = None
        self.discount = 0
        self.payment_method = PaymentMethod(config.DEFAULT_PAYMENT_METHOD)
