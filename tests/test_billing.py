"""Tests for bill totals and the GST summary."""
from clinic_pos.engine.billing import bill_summary, compute_totals
from clinic_pos.models.medicine import CartLine, SaleType
from clinic_pos.models.sale import ServiceSelection


def _tablets(quantity=15, price=1000):
    return CartLine("x", "Paracetamol 500", SaleType.TABLET, quantity, price, 10)


class TestComputeTotals:
    def test_sums_medicines_and_services(self, services):
        selections = [ServiceSelection(services[0], 1, 20000), ServiceSelection(services[1], 2)]
        totals = compute_totals([_tablets()], selections, discount=5000)
        assert totals.medicines_total == 15000
        assert totals.services_total == 50000
        assert totals.subtotal == 65000
        assert totals.final_amount == 60000

    def test_discount_larger_than_subtotal_gives_zero(self):
        totals = compute_totals([_tablets()], [], discount=50000)
        assert totals.subtotal == 15000
        assert totals.discount == 15000
        assert totals.final_amount == 0

    def test_negative_discount_is_ignored(self):
        totals = compute_totals([_tablets()], [], discount=-500)
        assert totals.discount == 0
        assert totals.final_amount == 15000

    def test_custom_service_price_used(self, services):
        totals = compute_totals([], [ServiceSelection(services[2], 1, 40000)])
        assert totals.services_total == 40000


class TestBillSummary:
    def test_gst_split_for_taxed_medicine(self, session, finalizer, catalog, customer):
        session.cart.add_line("y", 4, SaleType.TABLET)
        session.cart.add_line("x", 1, SaleType.STRIP)
        session.set_customer(customer)
        sale = finalizer.commit(session)

        summary = bill_summary(sale, catalog)
        assert summary.medicines_total == 4 * 2240 + 10000
        assert summary.gst_amount == 4 * 240
        assert summary.base_amount == 4 * 2000 + 10000
        assert summary.services_total == 0
        assert summary.final_amount == sale.final_amount
        assert set(summary.line_gst) == {("y", SaleType.TABLET)}
        assert summary.line_gst[("y", SaleType.TABLET)].total_price == 2240
