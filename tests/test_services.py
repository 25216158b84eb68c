"""Tests for consultation service selection."""
import pytest

from clinic_pos.engine.services import ServiceSelector
from clinic_pos.errors import InvalidQuantity, LineNotFound


class TestServiceSelector:
    def test_defaults_selected_on_start(self, services):
        selector = ServiceSelector(services)
        assert [s.service.id for s in selector] == ["1"]
        assert selector.get("1").custom_price == 20000

    def test_toggle_adds_then_removes(self, services):
        selector = ServiceSelector(services)
        assert selector.toggle_service(services[2]) is True
        assert selector.get("3").quantity == 1
        assert selector.get("3").unit_price == 50000
        assert selector.toggle_service(services[2]) is False
        assert not selector.is_selected("3")

    def test_defaults_can_be_deselected(self, services):
        selector = ServiceSelector(services)
        selector.toggle_service(services[0])
        assert len(selector) == 0

    def test_update_quantity(self, services):
        selector = ServiceSelector(services)
        selection = selector.update_quantity("1", 2)
        assert selection.total_price == 40000
        assert selector.update_quantity("1", 0) is None
        assert not selector.is_selected("1")

    def test_update_quantity_rejects_fractions(self, services):
        selector = ServiceSelector(services)
        with pytest.raises(InvalidQuantity):
            selector.update_quantity("1", 1.5)

    def test_update_price_is_clamped(self, services):
        selector = ServiceSelector(services)
        assert selector.update_price("1", -10).unit_price == 0
        assert selector.update_price("1", 18000).total_price == 18000

    def test_zero_custom_price_is_kept(self, services):
        selector = ServiceSelector(services)
        selector.update_price("1", 0)
        assert selector.get("1").total_price == 0

    def test_unselected_service_edits_fail(self, services):
        selector = ServiceSelector(services)
        with pytest.raises(LineNotFound):
            selector.update_quantity("2", 1)
        with pytest.raises(LineNotFound):
            selector.update_price("2", 100)

    def test_reset_restores_defaults(self, services):
        selector = ServiceSelector(services)
        selector.toggle_service(services[0])
        selector.toggle_service(services[1])
        selector.reset()
        assert [s.service.id for s in selector] == ["1"]

    def test_new_service_list_selects_defaults_when_empty(self, services):
        selector = ServiceSelector()
        assert len(selector) == 0
        selector.set_services(services)
        assert selector.is_selected("1")
