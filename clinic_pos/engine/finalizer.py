"""Turns an edited sale into a stored Sale and takes its stock out of the catalog."""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime
from typing import Callable, List, Optional

from clinic_pos.errors import ConcurrentStockConflict, EmptyCart, MissingCustomer
from clinic_pos.models.medicine import MedicineCatalogEntry
from clinic_pos.models.sale import ItemKind, Sale, SaleItem

logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def remaining_strips(entry: MedicineCatalogEntry, sold_tablets: int) -> int:
    """Strip count left after selling ``sold_tablets``.

    Rounds up, so a strip with tablets still in it is kept in stock.
    """
    left = entry.total_tablets - sold_tablets
    return math.ceil(left / entry.tablets_per_strip)


def freeze_items(session) -> List[SaleItem]:
    """Medicine lines first, then services, each in the order they were added."""
    items = [
        SaleItem(
            kind=ItemKind.MEDICINE,
            item_id=line.medicine_id,
            name=line.medicine_name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.total_price,
            sale_type=line.sale_type,
            total_tablets=line.total_tablets,
        )
        for line in session.cart
    ]
    items.extend(
        SaleItem(
            kind=ItemKind.SERVICE,
            item_id=selection.service.id,
            name=selection.service.name,
            quantity=selection.quantity,
            unit_price=selection.unit_price,
            total_price=selection.total_price,
        )
        for selection in session.services
    )
    return items


class SaleFinalizer:
    """Commits sessions against a catalog store and a sale store."""

    def __init__(self, catalog, sale_store, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.catalog = catalog
        self.sale_store = sale_store
        self.clock = clock or _local_now

    def build_sale(self, session) -> Sale:
        customer = session.customer
        totals = session.totals()
        return Sale(
            id=uuid.uuid4().hex,
            customer_id=customer.id,
            customer_name=customer.name,
            patient_id=customer.patient_id,
            items=tuple(freeze_items(session)),
            total_amount=totals.subtotal,
            discount=totals.discount,
            final_amount=totals.final_amount,
            payment_method=session.payment_method,
            created_at=self.clock(),
        )

    def commit(self, session) -> Sale:
        """Store the sale and decrement stock, all or nothing.

        Raises :class:`MissingCustomer` or :class:`EmptyCart` before touching
        anything, and :class:`ConcurrentStockConflict` when the catalog no
        longer holds what the cart reserved. On any failure the session, the
        catalog and the sale store are left as they were.
        """
        if session.customer is None:
            raise MissingCustomer()
        if not session.cart and not session.services:
            raise EmptyCart()

        sale = self.build_sale(session)
        reserved = session.cart.reserved_tablets()
        appended = False
        try:
            with self.catalog.transaction(reserved) as txn:
                for medicine_id, tablets in reserved.items():
                    entry = txn.get(medicine_id)
                    in_stock = entry.total_tablets if entry is not None else 0
                    if tablets > in_stock:
                        raise ConcurrentStockConflict(medicine_id, tablets, in_stock)
                    txn.decrement_stock(medicine_id, remaining_strips(entry, tablets))
                self.sale_store.append(sale)
                appended = True
        except ConcurrentStockConflict as exc:
            logger.warning("Sale for %s rejected: %s", sale.customer_name, exc)
            raise
        except Exception:
            if appended:
                try:
                    self.sale_store.discard(sale.id)
                except Exception:
                    logger.exception("Could not discard sale %s", sale.bill_number)
            logger.warning("Sale %s rolled back", sale.bill_number)
            raise

        session.reset()
        session.last_sale = sale
        logger.info(
            "Sale %s committed for %s: %d item(s), final %d paise",
            sale.bill_number,
            sale.customer_name,
            len(sale.items),
            sale.final_amount,
        )
        return sale
