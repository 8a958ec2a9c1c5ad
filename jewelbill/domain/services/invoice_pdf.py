# jewelbill/domain/services/invoice_pdf.py
"""
Generate printable jewelry invoice PDFs from a stored bill snapshot.
Uses ReportLab for PDF generation.

Amounts are recomputed from the bill with the billing engine, so the PDF
always matches what the billing screen shows for the same snapshot.
"""

from __future__ import annotations

import io
import logging
from datetime import datetime

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from jewelbill.config.settings import settings
from jewelbill.domain.models.billing import BillInput
from jewelbill.domain.services.billing_math import (
    compute_bill_totals,
    compute_misc_item_amount,
    compute_new_item_amount,
    compute_new_item_net_weight_gm,
    compute_old_item_amount,
    compute_old_item_payable_weight_gm,
    format_inr,
    to_amount,
)

logger = logging.getLogger("invoice_pdf")

TERMS = (
    "Gold 22k, 18k Hallmark Jewellery can exchange 100% of the weight.",
    "Stones, Meena, Pola, Moti & other materials will be deducted on Exchange or Cash.",
    "No guarantee for color/chemical impact on Silver/Gold articles.",
)

_HEADER_BG = colors.Color(0.45, 0.33, 0.1)
_TOTAL_BG = colors.Color(1.0, 0.96, 0.85)
_GRID = colors.Color(0.8, 0.8, 0.8)


def _rs(value) -> str:
    # Base-14 PDF fonts have no rupee glyph
    return format_inr(value).replace("₹", "Rs. ")


def _grams(value) -> str:
    return f"{to_amount(value):.3f}"


def _item_table(rows: list[list[str]], col_widths: list[int]) -> Table:
    table = Table(rows, colWidths=col_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), _HEADER_BG),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("GRID", (0, 0), (-1, -1), 0.5, _GRID),
                ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
                ("TOPPADDING", (0, 0), (-1, -1), 4),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ("LEFTPADDING", (0, 0), (-1, -1), 4),
                ("RIGHTPADDING", (0, 0), (-1, -1), 4),
            ]
        )
    )
    return table


def generate_invoice_pdf(
    bill: BillInput,
    *,
    invoice_no: int | None = None,
    color: str = "",
    issued_at: datetime | None = None,
) -> bytes:
    """
    Render one invoice.

    Args:
        bill: decoded snapshot of the invoice.
        invoice_no: number within the color series (None for a preview).
        color: invoice series label, printed next to the number.
        issued_at: invoice date.

    Returns:
        PDF file as bytes.
    """
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=12 * mm,
        rightMargin=12 * mm,
        topMargin=12 * mm,
        bottomMargin=12 * mm,
        title=f"Invoice {invoice_no or ''}".strip(),
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ShopTitle",
        parent=styles["Heading1"],
        fontSize=18,
        alignment=1,
        spaceAfter=4,
    )
    small_center = ParagraphStyle(
        "ShopSub",
        parent=styles["Normal"],
        fontSize=9,
        alignment=1,
        textColor=colors.grey,
    )
    section_style = ParagraphStyle(
        "Section",
        parent=styles["Heading4"],
        spaceBefore=8,
        spaceAfter=4,
    )
    terms_style = ParagraphStyle(
        "Terms",
        parent=styles["Normal"],
        fontSize=7.5,
        textColor=colors.grey,
        leading=10,
    )

    totals = compute_bill_totals(bill)
    elements = []

    # Shop header
    elements.append(Paragraph(settings.SHOP_NAME, title_style))
    if settings.SHOP_ADDRESS:
        elements.append(Paragraph(settings.SHOP_ADDRESS, small_center))
    if settings.SHOP_GSTIN:
        elements.append(Paragraph(f"GSTIN: {settings.SHOP_GSTIN}", small_center))
    elements.append(Spacer(1, 8))

    # Invoice + customer block
    number = f"{invoice_no}" if invoice_no else "DRAFT"
    if color:
        number = f"{number} ({color})"
    when = (issued_at or datetime.now()).strftime("%d-%b-%Y")
    header_data = [
        ["Invoice No", number, "Date", when],
        ["Customer", bill.customer_name or "-", "Mobile", bill.customer_mobile or "-"],
        ["Address", bill.customer_address or "-", "", ""],
    ]
    header_table = Table(header_data, colWidths=[70, 200, 60, 140])
    header_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (0, -1), colors.Color(0.95, 0.95, 0.95)),
                ("BACKGROUND", (2, 0), (2, -1), colors.Color(0.95, 0.95, 0.95)),
                ("TEXTCOLOR", (0, 0), (0, -1), colors.grey),
                ("TEXTCOLOR", (2, 0), (2, -1), colors.grey),
                ("SPAN", (1, 2), (3, 2)),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("GRID", (0, 0), (-1, -1), 0.5, _GRID),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("TOPPADDING", (0, 0), (-1, -1), 5),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
            ]
        )
    )
    elements.append(header_table)

    # New items
    if bill.new_items:
        elements.append(Paragraph("Items", section_style))
        rows = [["#", "Description", "Karat", "Gross g", "Stone g", "Net g", "Rate/g", "MC", "HM", "Amount"]]
        for idx, item in enumerate(bill.new_items, start=1):
            mode = item.making_charge_mode.value if item.making_charge_mode else "-"
            mc = f"{to_amount(item.making_charge_value):g} {mode}" if item.making_charge_mode else "-"
            rows.append([
                str(idx),
                item.description[:30],
                item.karat.value,
                _grams(item.gross_weight_gm),
                _grams(item.stone_weight_gm),
                _grams(compute_new_item_net_weight_gm(item)),
                f"{to_amount(item.rate_per_gm):,.2f}",
                mc,
                f"{to_amount(item.hallmark_cost):,.2f}",
                _rs(compute_new_item_amount(item)),
            ])
        elements.append(_item_table(rows, [18, 100, 36, 44, 40, 40, 52, 56, 38, 80]))

    # Old / exchange items
    if bill.old_items:
        elements.append(Paragraph("Old Gold / Exchange", section_style))
        rows = [["#", "Description", "Weight g", "Wastage g", "Payable g", "Rate/g", "Amount"]]
        for idx, item in enumerate(bill.old_items, start=1):
            rows.append([
                str(idx),
                item.description[:40],
                _grams(item.weight_gm),
                _grams(item.wastage_gm),
                _grams(compute_old_item_payable_weight_gm(item)),
                f"{to_amount(item.rate_per_gm):,.2f}",
                _rs(compute_old_item_amount(item)),
            ])
        elements.append(_item_table(rows, [18, 150, 60, 60, 60, 60, 96]))

    # Misc charges
    if bill.misc_items:
        elements.append(Paragraph("Other Charges", section_style))
        rows = [["#", "Description", "Amount"]]
        for idx, item in enumerate(bill.misc_items, start=1):
            rows.append([str(idx), item.description[:60], _rs(compute_misc_item_amount(item))])
        elements.append(_item_table(rows, [18, 350, 136]))

    elements.append(Spacer(1, 10))

    # Totals
    amount_rows = [
        ["New Items", _rs(totals.new_items_total)],
        ["Other Charges", _rs(totals.misc_total)],
        ["Gross", _rs(totals.gross_total)],
        [f"CGST @ {to_amount(bill.cgst_pct):g}%", _rs(totals.cgst_amount)],
        [f"SGST @ {to_amount(bill.sgst_pct):g}%", _rs(totals.sgst_amount)],
        ["Less: Old Exchange", _rs(-totals.old_items_total if totals.old_items_total else 0)],
        ["NET PAYABLE", _rs(totals.grand_total)],
    ]
    amount_table = Table(amount_rows, colWidths=[300, 160], hAlign="RIGHT")
    amount_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, -1), (-1, -1), _TOTAL_BG),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("GRID", (0, 0), (-1, -1), 0.5, _GRID),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("TOPPADDING", (0, 0), (-1, -1), 5),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
                ("RIGHTPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    elements.append(amount_table)
    elements.append(Spacer(1, 16))

    # Terms
    elements.append(Paragraph("Terms &amp; Conditions", section_style))
    for line in TERMS:
        elements.append(Paragraph(f"- {line.replace('&', '&amp;')}", terms_style))

    doc.build(elements)
    logger.debug("Rendered invoice PDF %s (%d bytes)", number, buf.tell())
    return buf.getvalue()
