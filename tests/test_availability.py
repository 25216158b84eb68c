"""Tests for reservation-aware availability."""
from clinic_pos.engine.availability import NONE_AVAILABLE, availability, reserved_tablets
from clinic_pos.models.medicine import CartLine, SaleType
from conftest import make_medicine


def _line(sale_type, quantity, medicine_id="x", pack=10):
    return CartLine(medicine_id, "Paracetamol 500", sale_type, quantity, 0, pack)


class TestAvailability:
    def test_nothing_reserved(self):
        free = availability(make_medicine(), [])
        assert free.tablets == 50
        assert free.strips == 5

    def test_reservations_across_sale_types(self):
        lines = [_line(SaleType.STRIP, 2), _line(SaleType.TABLET, 15)]
        free = availability(make_medicine(), lines)
        assert free.tablets == 15
        assert free.strips == 1
        assert free.in_units(SaleType.TABLET) == 15
        assert free.in_units(SaleType.STRIP) == 1

    def test_other_medicines_do_not_count(self):
        lines = [_line(SaleType.STRIP, 4, medicine_id="y")]
        assert availability(make_medicine(), lines).tablets == 50

    def test_exclude_leaves_one_line_out(self):
        lines = [_line(SaleType.STRIP, 2), _line(SaleType.TABLET, 15)]
        assert reserved_tablets("x", lines, exclude=("x", SaleType.STRIP)) == 15
        free = availability(make_medicine(), lines, exclude=("x", SaleType.TABLET))
        assert free.tablets == 30

    def test_never_negative(self):
        lines = [_line(SaleType.STRIP, 9)]
        assert availability(make_medicine(), lines).tablets == 0

    def test_unknown_medicine_has_nothing(self):
        assert availability(None, []) == NONE_AVAILABLE
