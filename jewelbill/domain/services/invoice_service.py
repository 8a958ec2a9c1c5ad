# jewelbill/domain/services/invoice_service.py
"""
Invoice submission.

Prices every line once with the billing engine, freezes the result into an
InvoiceRecord and hands it to the repository, which stores it in a single
transaction and assigns the invoice number.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.config.settings import settings
from jewelbill.domain.models.billing import BillInput
from jewelbill.domain.models.invoice_record import (
    InvoiceRecord,
    MiscItemLine,
    NewItemLine,
    OldItemLine,
    SavedInvoice,
)
from jewelbill.domain.services.billing_math import (
    compute_bill_totals,
    compute_misc_item_amount,
    compute_new_item_amount,
    compute_new_item_net_weight_gm,
    compute_old_item_amount,
    to_amount,
)
from jewelbill.domain.services.snapshot_codec import encode_snapshot
from jewelbill.infrastructure.audit import log_invoice_submitted
from jewelbill.infrastructure.db.repositories.invoice_repository import InvoiceRepository

logger = logging.getLogger("invoice_service")


class InvoiceValidationError(ValueError):
    """Raised when a bill cannot be submitted (e.g. no customer mobile)."""


def build_breakdown(bill: BillInput) -> tuple[list[NewItemLine], list[OldItemLine], list[MiscItemLine]]:
    """Per-line stored values, computed once by the billing engine."""
    new_lines = [
        NewItemLine(
            position=pos,
            description=item.description,
            karat=item.karat.value,
            gross=to_amount(item.gross_weight_gm),
            stone=to_amount(item.stone_weight_gm),
            net=compute_new_item_net_weight_gm(item),
            rate=to_amount(item.rate_per_gm),
            making_mode=item.making_charge_mode.value if item.making_charge_mode else None,
            making_value=to_amount(item.making_charge_value),
            hallmark=to_amount(item.hallmark_cost),
            stone_cost=to_amount(item.stone_cost),
            line_total=compute_new_item_amount(item),
        )
        for pos, item in enumerate(bill.new_items)
    ]
    old_lines = [
        OldItemLine(
            position=pos,
            description=item.description,
            weight=to_amount(item.weight_gm),
            wastage=to_amount(item.wastage_gm),
            rate=to_amount(item.rate_per_gm),
            total=compute_old_item_amount(item),
        )
        for pos, item in enumerate(bill.old_items)
    ]
    misc_lines = [
        MiscItemLine(
            position=pos,
            description=item.description,
            amount=compute_misc_item_amount(item),
        )
        for pos, item in enumerate(bill.misc_items)
    ]
    return new_lines, old_lines, misc_lines


def prepare_invoice(
    bill: BillInput,
    *,
    color: str | None = None,
    issued_at: datetime | None = None,
    invoice_no: int | None = None,
) -> InvoiceRecord:
    """Freeze a bill into an InvoiceRecord. Raises InvoiceValidationError."""
    if not (bill.customer_mobile or "").strip():
        raise InvoiceValidationError("customer mobile is required")

    new_lines, old_lines, misc_lines = build_breakdown(bill)
    return InvoiceRecord(
        bill=bill,
        totals=compute_bill_totals(bill),
        snapshot=encode_snapshot(bill),
        issued_at=issued_at or datetime.now(timezone.utc),
        color=(color or settings.DEFAULT_INVOICE_COLOR).strip().lower(),
        invoice_no=invoice_no if invoice_no and invoice_no > 0 else None,
        new_lines=new_lines,
        old_lines=old_lines,
        misc_lines=misc_lines,
    )


async def submit_invoice(
    db: AsyncSession,
    bill: BillInput,
    *,
    color: str | None = None,
    issued_at: datetime | None = None,
    invoice_no: int | None = None,
) -> SavedInvoice:
    """
    Store a bill as a numbered invoice.

    Either everything is stored (customer, invoice, all lines, number) or,
    on any failure, nothing is and the error propagates.
    """
    record = prepare_invoice(bill, color=color, issued_at=issued_at, invoice_no=invoice_no)
    repo = InvoiceRepository(db)
    saved = await repo.create_invoice(record)

    logger.info(
        "Invoice %s #%s (%s) stored: total=%.2f",
        saved.id, saved.invoice_no, saved.color, saved.totals.grand_total,
    )
    log_invoice_submitted(
        invoice_id=saved.id,
        invoice_no=saved.invoice_no,
        color=saved.color,
        customer_mobile=record.customer_mobile,
        total=saved.totals.grand_total,
    )
    return saved
