"""Main PyQt window for the clinic point-of-sale."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QComboBox,
    QCompleter,
    QDoubleSpinBox,
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from clinic_pos import config
from clinic_pos.data.catalog_store import CatalogStore
from clinic_pos.data.excel_repo import ExcelCatalogStore
from clinic_pos.data.sale_store import ExcelSaleStore
from clinic_pos.data.settings_repo import load_consultation_services
from clinic_pos.engine.alerts import is_low_stock, revisit_alert
from clinic_pos.engine.billing import bill_summary
from clinic_pos.engine.finalizer import SaleFinalizer
from clinic_pos.engine.pricing import unit_price
from clinic_pos.engine.session import SaleSession
from clinic_pos.errors import SaleError
from clinic_pos.models.medicine import MedicineCatalogEntry, SaleType
from clinic_pos.models.sale import Customer, PaymentMethod
from clinic_pos.money import format_currency, to_minor
from clinic_pos.printing.receipt_printer import ReceiptPrinter

logger = logging.getLogger(__name__)

QTY_COL, RATE_COL = 2, 3


class MainWindow(QMainWindow):
    """UI controller that ties together search, the open sale, and printing."""

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle(f"{config.CLINIC_NAME} - Point of Sale")
        self.setMinimumSize(1100, 700)

        self.catalog: CatalogStore = CatalogStore()
        self.sales: Optional[ExcelSaleStore] = None
        self.session = SaleSession(self.catalog)
        self.finalizer: Optional[SaleFinalizer] = None
        self.medicines_by_name: Dict[str, MedicineCatalogEntry] = {}
        self.selected_medicine: Optional[MedicineCatalogEntry] = None
        self._service_boxes: Dict[str, QCheckBox] = {}
        self._refreshing = False

        self._build_ui()
        self._load_inventory()

    # ----------------------------------------------------------------- layout
    def _build_ui(self) -> None:
        """Construct all widgets and layouts."""
        central = QWidget()
        root_layout = QVBoxLayout()

        # Search + details
        search_layout = QHBoxLayout()
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search medicine name...")
        self.search_input.textChanged.connect(self._on_search_text_changed)
        search_layout.addWidget(QLabel("Medicine:"))
        search_layout.addWidget(self.search_input, 1)

        details_layout = QFormLayout()
        self.brand_label = QLabel("-")
        self.stock_label = QLabel("-")
        self.pack_label = QLabel("-")
        self.price_label = QLabel("-")
        details_layout.addRow("Brand:", self.brand_label)
        details_layout.addRow("Available:", self.stock_label)
        details_layout.addRow("Pack:", self.pack_label)
        details_layout.addRow("Price:", self.price_label)

        qty_layout = QHBoxLayout()
        self.sale_type_combo = QComboBox()
        self.sale_type_combo.addItem("Strip", SaleType.STRIP)
        self.sale_type_combo.addItem("Tablet", SaleType.TABLET)
        self.sale_type_combo.currentIndexChanged.connect(self._show_selected)
        self.qty_spin = QSpinBox()
        self.qty_spin.setMinimum(1)
        self.qty_spin.setMaximum(100000)
        qty_layout.addWidget(QLabel("Sell by:"))
        qty_layout.addWidget(self.sale_type_combo)
        qty_layout.addWidget(QLabel("Qty:"))
        qty_layout.addWidget(self.qty_spin)

        self.add_button = QPushButton("Add to Sale")
        self.add_button.clicked.connect(self._on_add_clicked)

        top_grid = QGridLayout()
        top_grid.addLayout(search_layout, 0, 0, 1, 2)
        top_grid.addLayout(details_layout, 1, 0)
        top_grid.addLayout(qty_layout, 1, 1)
        top_grid.addWidget(self.add_button, 2, 0, 1, 2)

        # Cart and services tables
        self.table = QTableWidget(0, 5)
        self.table.setHorizontalHeaderLabels(["Medicine", "Type", "Qty", "Rate", "Total"])
        self.table.setEditTriggers(QAbstractItemView.DoubleClicked)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.cellChanged.connect(self._on_cart_cell_changed)
        self.remove_button = QPushButton("Remove Selected")
        self.remove_button.clicked.connect(self._on_remove_clicked)

        self.services_group = QGroupBox("Consultation Services")
        self.services_box_layout = QHBoxLayout()
        services_layout = QVBoxLayout()
        self.services_table = QTableWidget(0, 4)
        self.services_table.setHorizontalHeaderLabels(["Service", "Qty", "Rate", "Total"])
        self.services_table.horizontalHeader().setStretchLastSection(True)
        self.services_table.cellChanged.connect(self._on_service_cell_changed)
        services_layout.addLayout(self.services_box_layout)
        services_layout.addWidget(self.services_table)
        self.services_group.setLayout(services_layout)

        # Patient
        patient_group = QGroupBox("Patient")
        patient_layout = QFormLayout()
        self.customer_name = QLineEdit()
        self.customer_name.editingFinished.connect(self._check_revisit)
        self.patient_id = QLineEdit()
        self.patient_id.editingFinished.connect(self._check_revisit)
        self.customer_phone = QLineEdit()
        self.revisit_label = QLabel("")
        self.revisit_label.setStyleSheet("color: #b45309;")
        patient_layout.addRow("Name", self.customer_name)
        patient_layout.addRow("Patient ID", self.patient_id)
        patient_layout.addRow("Phone", self.customer_phone)
        patient_layout.addRow(self.revisit_label)
        patient_group.setLayout(patient_layout)

        # Totals
        totals_group = QGroupBox("Totals")
        totals_layout = QGridLayout()
        self.subtotal_value = QLabel("0.00")
        self.discount_spin = QDoubleSpinBox()
        self.discount_spin.setRange(0, 10_000_000)
        self.discount_spin.setDecimals(2)
        self.discount_spin.valueChanged.connect(self._update_totals)
        self.payment_combo = QComboBox()
        for method in PaymentMethod:
            self.payment_combo.addItem(method.value.upper(), method)
        self.payment_combo.currentIndexChanged.connect(self._on_payment_changed)
        self.net_total_value = QLabel("0.00")
        totals_layout.addWidget(QLabel("Subtotal"), 0, 0)
        totals_layout.addWidget(self.subtotal_value, 0, 1)
        totals_layout.addWidget(QLabel("Discount"), 1, 0)
        totals_layout.addWidget(self.discount_spin, 1, 1)
        totals_layout.addWidget(QLabel("Payment"), 2, 0)
        totals_layout.addWidget(self.payment_combo, 2, 1)
        totals_layout.addWidget(QLabel("Net Total"), 3, 0)
        totals_layout.addWidget(self.net_total_value, 3, 1)
        totals_group.setLayout(totals_layout)

        buttons_layout = QVBoxLayout()
        self.print_button = QPushButton("COMPLETE && PRINT")
        self.print_button.setStyleSheet("font-size: 16px; padding: 10px;")
        self.print_button.clicked.connect(self._on_print_clicked)
        self.clear_button = QPushButton("Clear")
        self.clear_button.clicked.connect(self._reset_sale)
        buttons_layout.addWidget(self.print_button)
        buttons_layout.addWidget(self.clear_button)
        buttons_layout.addStretch()

        bottom = QHBoxLayout()
        bottom.addWidget(patient_group)
        bottom.addWidget(totals_group)
        bottom.addLayout(buttons_layout)

        root_layout.addLayout(top_grid)
        root_layout.addWidget(self.table, 2)
        root_layout.addWidget(self.remove_button, alignment=Qt.AlignRight)
        root_layout.addWidget(self.services_group, 1)
        root_layout.addLayout(bottom)

        central.setLayout(root_layout)
        self.setCentralWidget(central)

    # ------------------------------------------------------------------ data
    def _load_inventory(self) -> None:
        """Load medicines, services and the sales ledger; configure the completer."""
        try:
            self.catalog = ExcelCatalogStore()
            self.sales = ExcelSaleStore()
            services = load_consultation_services()
        except Exception as exc:  # noqa: BLE001 - surface Excel issues to user
            QMessageBox.critical(self, "Error", f"Failed to load Excel data:\n{exc}")
            self.add_button.setEnabled(False)
            self.print_button.setEnabled(False)
            self.catalog = CatalogStore()
            services = []

        self.session = SaleSession(self.catalog, services)
        if self.sales is not None:
            self.finalizer = SaleFinalizer(self.catalog, self.sales)
        self.medicines_by_name = {m.name: m for m in self.catalog.list_medicines()}
        completer = QCompleter(list(self.medicines_by_name.keys()))
        completer.setCaseSensitivity(Qt.CaseInsensitive)
        completer.setFilterMode(Qt.MatchContains)
        completer.setCompletionMode(QCompleter.PopupCompletion)
        completer.activated[str].connect(self._on_medicine_selected)
        self.search_input.setCompleter(completer)
        self._build_service_boxes()
        self._clear_selection()
        self._refresh_all()

    def _build_service_boxes(self) -> None:
        while self.services_box_layout.count():
            widget = self.services_box_layout.takeAt(0).widget()
            if widget is not None:
                widget.deleteLater()
        self._service_boxes.clear()
        for service in self.session.services.services:
            box = QCheckBox(f"{service.name} ({format_currency(service.amount)})")
            box.toggled.connect(lambda _checked, s=service: self._on_service_toggled(s))
            self.services_box_layout.addWidget(box)
            self._service_boxes[service.id] = box
        self.services_box_layout.addStretch()

    # ------------------------------------------------------------- selection
    def _clear_selection(self) -> None:
        self.selected_medicine = None
        for label in (self.brand_label, self.stock_label, self.pack_label, self.price_label):
            label.setText("-")
            label.setStyleSheet("")

    def _on_search_text_changed(self, text: str) -> None:
        if text in self.medicines_by_name:
            self._on_medicine_selected(text)

    def _on_medicine_selected(self, name: str) -> None:
        medicine = self.medicines_by_name.get(name)
        if not medicine:
            self._clear_selection()
            return
        self.selected_medicine = medicine
        self._show_selected()

    def _current_sale_type(self) -> SaleType:
        return self.sale_type_combo.currentData()

    def _show_selected(self) -> None:
        medicine = self.selected_medicine
        if medicine is None:
            return
        free = self.session.cart.availability(medicine.id)
        sale_type = self._current_sale_type()
        self.brand_label.setText(medicine.brand or "-")
        self.stock_label.setText(f"{free.strips} strip(s) / {free.tablets} tablet(s)")
        low = is_low_stock(medicine, free.strips)
        self.stock_label.setStyleSheet("color: #c2410c;" if low else "color: #15803d;")
        self.pack_label.setText(f"{medicine.tablets_per_strip} per strip")
        self.price_label.setText(
            f"{format_currency(unit_price(medicine, sale_type))} per {sale_type.value}"
        )

    # ------------------------------------------------------------------ cart
    def _on_add_clicked(self) -> None:
        if not self.selected_medicine:
            QMessageBox.warning(self, "Select Medicine", "Please choose a medicine first.")
            return
        try:
            self.session.cart.add_line(
                self.selected_medicine.id, int(self.qty_spin.value()), self._current_sale_type()
            )
        except SaleError as exc:
            QMessageBox.warning(self, "Cannot Add", str(exc))
            return
        self._refresh_all()

    def _on_remove_clicked(self) -> None:
        lines = self.session.cart.lines
        rows = sorted({index.row() for index in self.table.selectedIndexes()}, reverse=True)
        for row in rows:
            if row < len(lines):
                self.session.cart.remove_line(lines[row].medicine_id, lines[row].sale_type)
        self._refresh_all()

    def _on_cart_cell_changed(self, row: int, col: int) -> None:
        if self._refreshing or col not in (QTY_COL, RATE_COL):
            return
        line = self.session.cart.lines[row]
        text = self.table.item(row, col).text().strip()
        try:
            if col == QTY_COL:
                self.session.cart.update_line_quantity(line.medicine_id, line.sale_type, int(text))
            else:
                self.session.cart.update_line_price(line.medicine_id, line.sale_type, to_minor(text))
        except (SaleError, ValueError, ArithmeticError) as exc:
            QMessageBox.warning(self, "Invalid Value", str(exc))
        self._refresh_all()

    # -------------------------------------------------------------- services
    def _on_service_toggled(self, service) -> None:
        if self._refreshing:
            return
        self.session.services.toggle_service(service)
        self._refresh_all()

    def _on_service_cell_changed(self, row: int, col: int) -> None:
        if self._refreshing or col not in (1, 2):
            return
        selection = self.session.services.selections[row]
        text = self.services_table.item(row, col).text().strip()
        try:
            if col == 1:
                self.session.services.update_quantity(selection.service.id, int(text))
            else:
                self.session.services.update_price(selection.service.id, to_minor(text))
        except (SaleError, ValueError, ArithmeticError) as exc:
            QMessageBox.warning(self, "Invalid Value", str(exc))
        self._refresh_all()

    # --------------------------------------------------------------- display
    def _refresh_all(self) -> None:
        self._refreshing = True
        try:
            self._refresh_table()
            self._refresh_services()
        finally:
            self._refreshing = False
        self._update_totals()
        self._show_selected()

    def _set_row(self, table: QTableWidget, row: int, values: List[str], editable) -> None:
        for col, value in enumerate(values):
            item = QTableWidgetItem(value)
            if col not in editable:
                item.setFlags(item.flags() & ~Qt.ItemIsEditable)
            table.setItem(row, col, item)

    def _refresh_table(self) -> None:
        lines = self.session.cart.lines
        self.table.setRowCount(len(lines))
        for row, line in enumerate(lines):
            values = [
                line.medicine_name,
                line.sale_type.value,
                str(line.quantity),
                format_currency(line.unit_price),
                format_currency(line.total_price),
            ]
            self._set_row(self.table, row, values, editable=(QTY_COL, RATE_COL))
        self.table.resizeColumnsToContents()

    def _refresh_services(self) -> None:
        for service_id, box in self._service_boxes.items():
            box.setChecked(self.session.services.is_selected(service_id))
        selections = self.session.services.selections
        self.services_table.setRowCount(len(selections))
        for row, selection in enumerate(selections):
            values = [
                selection.service.name,
                str(selection.quantity),
                format_currency(selection.unit_price),
                format_currency(selection.total_price),
            ]
            self._set_row(self.services_table, row, values, editable=(1, 2))

    def _update_totals(self) -> None:
        self.session.set_discount(to_minor(self.discount_spin.value()))
        totals = self.session.totals()
        self.subtotal_value.setText(format_currency(totals.subtotal))
        self.net_total_value.setText(format_currency(totals.final_amount))

    def _on_payment_changed(self) -> None:
        self.session.set_payment_method(self.payment_combo.currentData())

    def _current_customer(self) -> Optional[Customer]:
        name = self.customer_name.text().strip()
        patient_id = self.patient_id.text().strip()
        if not name and not patient_id:
            return None
        return Customer(
            id=patient_id or name.lower(),
            name=name or "Walk-in Patient",
            patient_id=patient_id,
            phone=self.customer_phone.text().strip(),
        )

    def _check_revisit(self) -> None:
        customer = self._current_customer()
        days = None
        if customer is not None and self.finalizer is not None:
            now = self.finalizer.clock()
            days = revisit_alert(customer, self.sales.for_customer(customer.id), now)
        self.revisit_label.setText(
            f"Patient visited {days} day(s) ago." if days is not None else ""
        )

    # ---------------------------------------------------------------- commit
    def _on_print_clicked(self) -> None:
        if self.finalizer is None:
            QMessageBox.warning(self, "Excel not loaded", "Cannot complete a sale without Excel data.")
            return
        self.session.set_customer(self._current_customer())
        phone = self.customer_phone.text().strip()
        try:
            sale = self.finalizer.commit(self.session)
        except SaleError as exc:
            QMessageBox.warning(self, "Cannot Complete Sale", str(exc))
            return
        except Exception as exc:  # noqa: BLE001
            logger.exception("Sale commit failed")
            QMessageBox.critical(self, "Excel Error", f"Could not save the sale:\n{exc}")
            return

        summary = bill_summary(sale, self.catalog)
        if ReceiptPrinter().print_receipt(sale, summary, phone):
            QMessageBox.information(self, "Printed", f"Bill {sale.bill_number} saved and printed.")
        else:
            QMessageBox.warning(
                self, "Print Failed", f"Bill {sale.bill_number} saved, but the printer is not available."
            )
        self._reset_form()

    def _reset_sale(self) -> None:
        self.session.reset()
        self._reset_form()

    def _reset_form(self) -> None:
        self.customer_name.clear()
        self.patient_id.clear()
        self.customer_phone.clear()
        self.revisit_label.setText("")
        self.discount_spin.setValue(0.0)
        self.payment_combo.setCurrentIndex(0)
        self.search_input.clear()
        self._clear_selection()
        self._refresh_all()

