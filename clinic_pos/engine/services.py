"""Consultation services picked for the sale being edited."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from clinic_pos.errors import InvalidQuantity, LineNotFound
from clinic_pos.models.sale import ConsultationService, ServiceSelection


class ServiceSelector:
    """Selections keyed by service id, kept in the order they were picked.

    Services flagged ``is_default`` are selected whenever the selection is
    empty at start-up, on :meth:`reset` and when the service list changes.
    """

    def __init__(self, services: Iterable[ConsultationService] = ()) -> None:
        self.services: List[ConsultationService] = list(services)
        self._selected: Dict[str, ServiceSelection] = {}
        self._select_defaults()

    def __iter__(self) -> Iterator[ServiceSelection]:
        return iter(list(self._selected.values()))

    def __len__(self) -> int:
        return len(self._selected)

    def __bool__(self) -> bool:
        return bool(self._selected)

    @property
    def selections(self) -> List[ServiceSelection]:
        return list(self._selected.values())

    def _select_defaults(self) -> None:
        if self._selected:
            return
        for service in self.services:
            if service.is_default:
                self._selected[service.id] = ServiceSelection(service, 1, service.amount)

    def set_services(self, services: Iterable[ConsultationService]) -> None:
        self.services = list(services)
        self._select_defaults()

    def is_selected(self, service_id: str) -> bool:
        return service_id in self._selected

    def get(self, service_id: str) -> Optional[ServiceSelection]:
        return self._selected.get(service_id)

    def toggle_service(self, service: ConsultationService) -> bool:
        """Select ``service`` if absent, drop it if present. Returns the new state."""
        if service.id in self._selected:
            del self._selected[service.id]
            return False
        self._selected[service.id] = ServiceSelection(service, 1, service.amount)
        return True

    def update_quantity(self, service_id: str, quantity: int) -> Optional[ServiceSelection]:
        selection = self._selected.get(service_id)
        if selection is None:
            raise LineNotFound(service_id)
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidQuantity(quantity)
        if quantity <= 0:
            del self._selected[service_id]
            return None
        selection.quantity = quantity
        return selection

    def update_price(self, service_id: str, price: int) -> ServiceSelection:
        selection = self._selected.get(service_id)
        if selection is None:
            raise LineNotFound(service_id)
        selection.custom_price = max(0, int(price))
        return selection

    def reset(self) -> None:
        self._selected.clear()
        self._select_defaults()
