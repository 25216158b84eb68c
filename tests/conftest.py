from datetime import datetime, timezone
from decimal import Decimal

import pytest

from clinic_pos.data.catalog_store import CatalogStore
from clinic_pos.data.sale_store import SaleStore
from clinic_pos.engine.finalizer import SaleFinalizer
from clinic_pos.engine.session import SaleSession
from clinic_pos.models.medicine import MedicineCatalogEntry
from clinic_pos.models.sale import ConsultationService, Customer

FIXED_NOW = datetime(2026, 10, 18, 10, 30, tzinfo=timezone.utc)


def make_medicine(**overrides) -> MedicineCatalogEntry:
    values = dict(
        id="x",
        name="Paracetamol 500",
        brand="Calpol",
        quantity=5,
        tablets_per_strip=10,
        selling_price=10000,
    )
    values.update(overrides)
    return MedicineCatalogEntry(**values)


@pytest.fixture
def medicines():
    return [
        make_medicine(),
        make_medicine(
            id="y",
            name="Amoxicillin 250",
            brand="Mox",
            quantity=4,
            tablets_per_strip=6,
            selling_price=12000,
            selling_price_gst=Decimal("12"),
            total_selling_price=13440,
        ),
        make_medicine(
            id="z",
            name="Cough Syrup",
            brand="Benadryl",
            quantity=3,
            tablets_per_strip=1,
            selling_price=8550,
            min_stock_level=5,
        ),
    ]


@pytest.fixture
def catalog(medicines):
    return CatalogStore(medicines)


@pytest.fixture
def services():
    return [
        ConsultationService(id="1", name="General Consultation", amount=20000, is_default=True),
        ConsultationService(id="2", name="Follow-up Consultation", amount=15000),
        ConsultationService(id="3", name="Emergency Consultation", amount=50000),
    ]


@pytest.fixture
def customer():
    return Customer(id="07", name="Asha Rao", patient_id="07", phone="9876543210")


@pytest.fixture
def session(catalog):
    return SaleSession(catalog)


@pytest.fixture
def sale_store():
    return SaleStore()


@pytest.fixture
def finalizer(catalog, sale_store):
    return SaleFinalizer(catalog, sale_store, clock=lambda: FIXED_NOW)
