"""HTML bill for a committed sale."""

from __future__ import annotations

from decimal import Decimal
from html import escape
from typing import Dict, Iterable, List, Optional

from clinic_pos import config
from clinic_pos.engine.billing import BillSummary
from clinic_pos.engine.pricing import PriceBreakdown
from clinic_pos.models.sale import Sale, SaleItem
from clinic_pos.money import format_currency


def _money(minor: int) -> str:
    return f"{config.CURRENCY_SYMBOL}{format_currency(minor)}"


def _gst_note(split: PriceBreakdown) -> str:
    return (
        f"Base: {_money(split.base_price)} + "
        f"GST {Decimal(str(split.gst_percent)).normalize():f}%: {_money(split.gst_amount)}"
    )


def _item_rows(items: Iterable[SaleItem], line_gst: Optional[Dict] = None) -> List[str]:
    rows: List[str] = []
    for item in items:
        name = escape(item.name)
        if item.sale_type is not None:
            name += f" <small>({item.sale_type.value})</small>"
        split = (line_gst or {}).get((item.item_id, item.sale_type))
        if split is not None:
            name += f"<br/><small>{_gst_note(split)}</small>"
        rows.append(
            f"<tr><td>{name}</td>"
            f"<td align='right'>{item.quantity}</td>"
            f"<td align='right'>{format_currency(item.unit_price)}</td>"
            f"<td align='right'>{format_currency(item.total_price)}</td></tr>"
        )
    return rows


def _section(title: str, items, line_gst=None) -> str:
    if not items:
        return ""
    return f"""
            <p><b>{title}</b></p>
            <table>
                <tr><th align='left'>Item</th><th align='right'>Qty</th><th align='right'>Rate</th><th align='right'>Total</th></tr>
                {''.join(_item_rows(items, line_gst))}
            </table>"""


def build_bill_html(sale: Sale, summary: BillSummary, phone: str = "") -> str:
    header_lines = [
        escape(line)
        for line in (config.DOCTOR_NAME, config.CLINIC_ADDRESS, config.CLINIC_PHONE)
        if line
    ]
    patient = escape(sale.customer_name)
    if phone:
        patient += f" ({escape(phone)})"

    totals = []
    if summary.services_total:
        totals.append(("Services Total", _money(summary.services_total)))
    if summary.medicines_total:
        totals.append(("Medicines Total", _money(summary.medicines_total)))
    if summary.gst_amount:
        totals.append(("GST Amount", _money(summary.gst_amount)))
    totals.append(("Subtotal", _money(summary.subtotal)))
    totals.append(("Discount", f"-{_money(summary.discount)}"))
    total_rows = "".join(
        f"<tr><td>{label}</td><td align='right'>{value}</td></tr>" for label, value in totals
    )

    return f"""
        <html>
        <head>
            <style>
                body {{ font-family: 'Arial'; font-size: 11pt; }}
                h2 {{ text-align: center; margin: 0 0 6px 0; }}
                table {{ width: 100%; border-collapse: collapse; }}
                td {{ padding: 2px 0; }}
                .totals td {{ padding-top: 4px; }}
            </style>
        </head>
        <body>
            <h2>{escape(config.CLINIC_NAME)}</h2>
            <p style='text-align:center;'>{'<br/>'.join(header_lines)}</p>
            <p>Bill No: {sale.bill_number}<br/>
               Patient ID: {escape(sale.patient_id)}<br/>
               Date: {sale.created_at:%d-%m-%Y %H:%M}</p>
            <p>Patient: {patient}</p>
            {_section("Consultation Services", sale.service_items)}
            {_section("Medicines", sale.medicine_items, summary.line_gst)}
            <hr />
            <table class='totals'>
                {total_rows}
                <tr><td><b>Total Amount</b></td><td align='right'><b>{_money(summary.final_amount)}</b></td></tr>
                <tr><td>Payment Method</td><td align='right'>{sale.payment_method.value.upper()}</td></tr>
            </table>
            <p style='text-align:center;margin-top:8px;'>Thank you for visiting {escape(config.CLINIC_NAME)}!<br/>Get well soon!</p>
        </body>
        </html>
        """
