"""Tests for low-stock and repeat-visit alerts."""
from dataclasses import replace
from datetime import timedelta

from clinic_pos.engine.alerts import is_low_stock, low_stock, revisit_alert
from clinic_pos.models.medicine import SaleType
from clinic_pos.models.sale import Customer
from conftest import FIXED_NOW, make_medicine


class TestLowStock:
    def test_uses_available_strips_when_given(self):
        medicine = make_medicine(quantity=5, min_stock_level=2)
        assert not is_low_stock(medicine)
        assert is_low_stock(medicine, available_strips=2)

    def test_catalog_report(self, catalog):
        assert [entry.id for entry in low_stock(catalog)] == ["z"]


class TestRevisitAlert:
    def _sale(self, session, finalizer, customer):
        session.cart.add_line("x", 1, SaleType.STRIP)
        session.set_customer(customer)
        return finalizer.commit(session)

    def test_recent_visit(self, session, finalizer, customer):
        sale = self._sale(session, finalizer, customer)
        assert revisit_alert(customer, [sale], FIXED_NOW + timedelta(days=2, hours=3)) == 2

    def test_same_day_visit(self, session, finalizer, customer):
        sale = self._sale(session, finalizer, customer)
        assert revisit_alert(customer, [sale], FIXED_NOW) == 0

    def test_old_visit_is_ignored(self, session, finalizer, customer):
        sale = self._sale(session, finalizer, customer)
        assert revisit_alert(customer, [sale], FIXED_NOW + timedelta(days=5)) is None

    def test_latest_visit_wins(self, session, finalizer, customer):
        old = self._sale(session, finalizer, customer)
        older = replace(old, id="older", created_at=FIXED_NOW - timedelta(days=30))
        assert revisit_alert(customer, [older, old], FIXED_NOW + timedelta(days=1)) == 1

    def test_other_patients_do_not_count(self, session, finalizer, customer):
        sale = self._sale(session, finalizer, customer)
        stranger = Customer(id="99", name="Someone Else")
        assert revisit_alert(stranger, [sale], FIXED_NOW) is None
