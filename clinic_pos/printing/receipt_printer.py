"""Receipt printing via QTextDocument to a Windows printer."""

from __future__ import annotations

from PyQt5.QtCore import QSizeF
from PyQt5.QtGui import QTextDocument
from PyQt5.QtPrintSupport import QPrinter

from clinic_pos import config
from clinic_pos.engine.billing import BillSummary
from clinic_pos.models.sale import Sale
from clinic_pos.printing.bill_html import build_bill_html


class ReceiptPrinter:
    """Render and print bills as HTML to a target printer."""

    def __init__(self, printer_name: str | None = None, receipt_width_mm: float | None = None) -> None:
        self.printer_name = printer_name or config.PRINTER_NAME
        self.receipt_width_mm = receipt_width_mm or config.RECEIPT_WIDTH_MM

    def print_receipt(self, sale: Sale, summary: BillSummary, phone: str = "") -> bool:
        """Send the bill to the printer; returns True on success."""
        printer = QPrinter(QPrinter.HighResolution)
        printer.setPrinterName(self.printer_name)

        if not printer.isValid():
            return False

        # Dynamic height to avoid truncation; 90mm of header and totals plus 8mm per line.
        height_mm = 90 + (len(sale.items) * 8)
        printer.setPaperSize(QSizeF(self.receipt_width_mm, height_mm), QPrinter.Millimeter)
        printer.setFullPage(True)

        doc = QTextDocument()
        doc.setHtml(build_bill_html(sale, summary, phone))
        doc.setPageSize(QSizeF(self.receipt_width_mm, height_mm))

        doc.print_(printer)
        return printer.isValid()
