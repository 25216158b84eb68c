"""Tests for the Excel-backed catalog, services and sales ledger."""
from decimal import Decimal

import pytest
from openpyxl import Workbook, load_workbook

from clinic_pos.data.excel_repo import ExcelCatalogStore
from clinic_pos.data.sale_store import ExcelSaleStore
from clinic_pos.data.settings_repo import load_consultation_services
from clinic_pos.engine.finalizer import SaleFinalizer
from clinic_pos.engine.session import SaleSession
from clinic_pos.models.medicine import SaleType
from conftest import FIXED_NOW

HEADERS = [
    "Medicine_ID",
    "Medicine_Name",
    "Brand",
    "Stock",
    "Tablets_Per_Strip",
    "Selling_Price",
    "Selling_Price_GST",
    "Total_Selling_Price",
    "Min_Stock_Level",
]


@pytest.fixture
def workbook_path(tmp_path):
    path = tmp_path / "medicines.xlsx"
    wb = Workbook()
    sheet = wb.active
    sheet.title = "Medicines"
    sheet.append(HEADERS)
    sheet.append(["M1", "Paracetamol 500", "Calpol", 5, 10, 100, 0, None, 2])
    sheet.append(["M2", "Amoxicillin 250", "Mox", 4, 6, 120, 12, 134.4, 1])
    sheet.append([None, "Cough Syrup", "", 3, None, 85.5, None, None, None])
    sheet.append([None, None, None, None, None, None, None, None, None])
    wb.save(path)
    return path


class TestExcelCatalogStore:
    def test_reads_rows(self, workbook_path):
        store = ExcelCatalogStore(workbook_path)
        assert len(store) == 3
        amox = store.get("M2")
        assert amox.selling_price == 12000
        assert amox.total_selling_price == 13440
        assert amox.selling_price_gst == Decimal("12")
        assert amox.tablets_per_strip == 6

    def test_missing_id_uses_normalized_name(self, workbook_path):
        syrup = ExcelCatalogStore(workbook_path).get("cough syrup")
        assert syrup.tablets_per_strip == 1
        assert syrup.selling_price == 8550
        assert syrup.total_selling_price is None

    def test_decrement_written_to_workbook(self, workbook_path):
        store = ExcelCatalogStore(workbook_path)
        store.decrement_stock("M1", 2)
        sheet = load_workbook(workbook_path)["Medicines"]
        assert sheet["D2"].value == 2
        assert ExcelCatalogStore(workbook_path).get("M1").quantity == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ExcelCatalogStore(tmp_path / "none.xlsx")

    def test_missing_sheet(self, workbook_path):
        with pytest.raises(ValueError):
            ExcelCatalogStore(workbook_path, sheet_name="Stock")

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "bad.xlsx"
        wb = Workbook()
        wb.active.title = "Medicines"
        wb.active.append(["Medicine_Name", "Stock"])
        wb.save(path)
        with pytest.raises(ValueError, match="Selling_Price"):
            ExcelCatalogStore(path)


class TestConsultationServices:
    def test_defaults_without_sheet(self, workbook_path):
        services = load_consultation_services(workbook_path)
        assert [s.name for s in services][0] == "General Consultation"
        assert services[0].amount == 20000
        assert services[0].is_default

    def test_defaults_without_workbook(self, tmp_path):
        assert len(load_consultation_services(tmp_path / "none.xlsx")) == 3

    def test_reads_services_sheet(self, workbook_path):
        wb = load_workbook(workbook_path)
        sheet = wb.create_sheet("Services")
        sheet.append(["Service_ID", "Service_Name", "Amount", "Is_Default"])
        sheet.append(["S1", "Dressing", 75.5, "yes"])
        sheet.append([None, "Injection", 50, None])
        wb.save(workbook_path)

        services = load_consultation_services(workbook_path)
        assert [(s.id, s.amount, s.is_default) for s in services] == [
            ("S1", 7550, True),
            ("2", 5000, False),
        ]


class TestExcelSaleStore:
    def _commit(self, workbook_path, sales_path, customer):
        catalog = ExcelCatalogStore(workbook_path)
        sales = ExcelSaleStore(sales_path)
        session = SaleSession(catalog, load_consultation_services(workbook_path))
        session.cart.add_line("M1", 1, SaleType.STRIP)
        session.cart.add_line("M2", 3, SaleType.TABLET)
        session.set_customer(customer)
        session.set_discount(1050)
        return SaleFinalizer(catalog, sales, clock=lambda: FIXED_NOW).commit(session), sales

    def test_sales_survive_reload(self, workbook_path, tmp_path, customer):
        sales_path = tmp_path / "ledger" / "sales.xlsx"
        sale, _ = self._commit(workbook_path, sales_path, customer)
        assert sales_path.exists()

        reloaded = ExcelSaleStore(sales_path)
        assert reloaded.list_sales() == [sale]
        assert reloaded.get(sale.id).items[1].sale_type is SaleType.TABLET

    def test_discard_removes_rows(self, workbook_path, tmp_path, customer):
        sales_path = tmp_path / "sales.xlsx"
        sale, sales = self._commit(workbook_path, sales_path, customer)
        assert sales.discard(sale.id) is True
        assert sales.discard(sale.id) is False
        assert len(ExcelSaleStore(sales_path)) == 0

    def test_search_and_customer_history(self, workbook_path, tmp_path, customer):
        sale, sales = self._commit(workbook_path, tmp_path / "sales.xlsx", customer)
        assert sales.search("asha") == [sale]
        assert sales.search(sale.bill_number) == [sale]
        assert sales.search("nobody") == []
        assert sales.for_customer("07") == [sale]
