"""Consultation services, customers and the immutable Sale record."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from clinic_pos.models.medicine import SaleType


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"


class ItemKind(str, Enum):
    MEDICINE = "medicine"
    SERVICE = "service"


@dataclass(frozen=True)
class ConsultationService:
    id: str
    name: str
    amount: int
    is_default: bool = False


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    patient_id: str = ""
    phone: str = ""


@dataclass
class ServiceSelection:
    service: ConsultationService
    quantity: int = 1
    custom_price: Optional[int] = None

    @property
    def unit_price(self) -> int:
        return self.service.amount if self.custom_price is None else self.custom_price

    @property
    def total_price(self) -> int:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class SaleItem:
    kind: ItemKind
    item_id: str
    name: str
    quantity: int
    unit_price: int
    total_price: int
    sale_type: Optional[SaleType] = None
    total_tablets: int = 0


@dataclass(frozen=True)
class Sale:
    """A committed sale. Amounts are integer paise."""

    id: str
    customer_id: str
    customer_name: str
    patient_id: str
    items: Tuple[SaleItem, ...]
    total_amount: int
    discount: int
    final_amount: int
    payment_method: PaymentMethod
    created_at: datetime

    @property
    def bill_number(self) -> str:
        return self.id[:8]

    @property
    def medicine_items(self) -> Tuple[SaleItem, ...]:
        return tuple(item for item in self.items if item.kind is ItemKind.MEDICINE)

    @property
    def service_items(self) -> Tuple[SaleItem, ...]:
        return tuple(item for item in self.items if item.kind is ItemKind.SERVICE)
