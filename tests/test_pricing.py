"""Tests for strip/tablet pricing and GST breakdown."""
from decimal import Decimal

from clinic_pos.engine.pricing import gst_breakdown, medicine_breakdown, strip_price, unit_price
from clinic_pos.models.medicine import SaleType
from conftest import make_medicine


class TestUnitPrice:
    def test_strip_price_prefers_gst_inclusive_total(self):
        medicine = make_medicine(selling_price=12000, total_selling_price=13440)
        assert strip_price(medicine) == 13440

    def test_strip_price_falls_back_to_selling_price(self):
        assert strip_price(make_medicine(selling_price=10000)) == 10000

    def test_tablet_price_divides_strip_price(self):
        medicine = make_medicine(selling_price=10000, tablets_per_strip=10)
        assert unit_price(medicine, SaleType.TABLET) == 1000
        assert unit_price(medicine, SaleType.STRIP) == 10000

    def test_tablet_times_pack_matches_strip_within_rounding(self):
        """Per-tablet price times pack size stays within a paisa per tablet."""
        for pack in (1, 3, 7, 10, 15):
            medicine = make_medicine(selling_price=9999, tablets_per_strip=pack)
            strip = unit_price(medicine, SaleType.STRIP)
            tablet = unit_price(medicine, SaleType.TABLET)
            assert abs(tablet * pack - strip) <= pack

    def test_non_divisible_medicine_has_same_price_either_way(self):
        medicine = make_medicine(selling_price=8550, tablets_per_strip=1)
        assert unit_price(medicine, SaleType.TABLET) == unit_price(medicine, SaleType.STRIP)


class TestGstBreakdown:
    def test_gst_amount_and_total(self):
        split = gst_breakdown(12000, Decimal("12"))
        assert split.gst_amount == 1440
        assert split.total_price == 13440

    def test_medicine_breakdown_per_tablet(self):
        medicine = make_medicine(
            selling_price=12000, tablets_per_strip=6, selling_price_gst=Decimal("12")
        )
        split = medicine_breakdown(medicine, SaleType.TABLET)
        assert split.base_price == 2000
        assert split.gst_amount == 240
