"""Medicine lines of the sale being edited.

Lines refer to catalog entries by id only. Nothing here writes to the
catalog: a line is a virtual reservation until the sale is committed.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from clinic_pos.engine.availability import Availability, availability, tablets_for
from clinic_pos.engine.pricing import unit_price
from clinic_pos.errors import InsufficientStock, InvalidQuantity, LineNotFound
from clinic_pos.models.medicine import CartLine, SaleType

logger = logging.getLogger(__name__)

LineKey = Tuple[str, SaleType]


def _check_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantity(quantity)


class Cart:
    """Ordered medicine lines, at most one per (medicine, sale type)."""

    def __init__(self, catalog) -> None:
        self.catalog = catalog
        self._lines: Dict[LineKey, CartLine] = {}

    def __iter__(self) -> Iterator[CartLine]:
        return iter(list(self._lines.values()))

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def get_line(self, medicine_id: str, sale_type: SaleType | str) -> Optional[CartLine]:
        return self._lines.get((medicine_id, SaleType(sale_type)))

    def availability(self, medicine_id: str, exclude: Optional[LineKey] = None) -> Availability:
        return availability(self.catalog.get(medicine_id), self._lines.values(), exclude)

    def available(self, medicine_id: str, sale_type: SaleType | str) -> int:
        """Strips or tablets of ``medicine_id`` that can still be added."""
        return self.availability(medicine_id).in_units(SaleType(sale_type))

    def reserved_tablets(self) -> Dict[str, int]:
        """Tablets held per medicine, in first-added order."""
        reserved: Dict[str, int] = {}
        for line in self._lines.values():
            reserved[line.medicine_id] = reserved.get(line.medicine_id, 0) + line.total_tablets
        return reserved

    def _validate(
        self, medicine_id: str, quantity: int, sale_type: SaleType, exclude: Optional[LineKey]
    ) -> None:
        entry = self.catalog.get(medicine_id)
        free = availability(entry, self._lines.values(), exclude)
        if entry is None or tablets_for(entry, quantity, sale_type) > free.tablets:
            raise InsufficientStock(
                medicine_id, quantity, free.in_units(sale_type), sale_type.value
            )

    def add_line(
        self, medicine_id: str, quantity: int, sale_type: SaleType | str = SaleType.STRIP
    ) -> CartLine:
        """Reserve ``quantity`` strips or tablets, merging into an existing line."""
        sale_type = SaleType(sale_type)
        _check_quantity(quantity)
        if quantity <= 0:
            raise InvalidQuantity(quantity)
        self._validate(medicine_id, quantity, sale_type, exclude=None)

        key = (medicine_id, sale_type)
        line = self._lines.get(key)
        if line is not None:
            line.quantity += quantity
        else:
            entry = self.catalog.get(medicine_id)
            line = CartLine(
                medicine_id=medicine_id,
                medicine_name=entry.name,
                sale_type=sale_type,
                quantity=quantity,
                unit_price=unit_price(entry, sale_type),
                tablets_per_strip=entry.tablets_per_strip,
            )
            self._lines[key] = line
        logger.debug("Cart line %s/%s now %d", medicine_id, sale_type.value, line.quantity)
        return line

    def update_line_quantity(
        self, medicine_id: str, sale_type: SaleType | str, quantity: int
    ) -> Optional[CartLine]:
        """Set a line's quantity; zero or less removes the line and returns None."""
        sale_type = SaleType(sale_type)
        key = (medicine_id, sale_type)
        line = self._lines.get(key)
        if line is None:
            raise LineNotFound(medicine_id, sale_type.value)
        _check_quantity(quantity)
        if quantity <= 0:
            del self._lines[key]
            return None
        self._validate(medicine_id, quantity, sale_type, exclude=key)
        line.quantity = quantity
        return line

    def update_line_price(
        self, medicine_id: str, sale_type: SaleType | str, price: int
    ) -> CartLine:
        """Override the unit price of a line. Negative prices become zero."""
        sale_type = SaleType(sale_type)
        line = self._lines.get((medicine_id, sale_type))
        if line is None:
            raise LineNotFound(medicine_id, sale_type.value)
        line.unit_price = max(0, int(price))
        return line

    def remove_line(
        self, medicine_id: str, sale_type: SaleType | str | None = None
    ) -> List[CartLine]:
        """Drop one line, or every line of the medicine when no sale type is given."""
        if sale_type is None:
            keys = [key for key in self._lines if key[0] == medicine_id]
        else:
            keys = [(medicine_id, SaleType(sale_type))]
        return [self._lines.pop(key) for key in keys if key in self._lines]

    def clear(self) -> None:
        self._lines.clear()
