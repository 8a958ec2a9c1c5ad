# jewelbill/api/v1/routes/invoices.py
"""
Invoice submission, preview, lookup and PDF download endpoints.
"""

from __future__ import annotations

import io
import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.api.v1.envelope import ok
from jewelbill.api.v1.schemas.billing import BillIn, InvoiceCreate
from jewelbill.core.db import get_db
from jewelbill.domain.services.billing_math import compute_bill_totals
from jewelbill.domain.services.invoice_pdf import generate_invoice_pdf
from jewelbill.domain.services.invoice_service import (
    InvoiceValidationError,
    build_breakdown,
    submit_invoice,
)
from jewelbill.domain.services.snapshot_codec import decode_snapshot, snapshot_to_share_param
from jewelbill.infrastructure.db.models import Invoice
from jewelbill.infrastructure.db.repositories.invoice_repository import (
    InvoiceNumberConflict,
    InvoiceRepository,
)

logger = logging.getLogger("api.v1.invoices")

router = APIRouter(prefix="/invoices", tags=["Invoices"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _load_invoice(db: AsyncSession, invoice_id: str) -> Invoice:
    inv = await InvoiceRepository(db).get_by_id(invoice_id)
    if not inv:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return inv


def _invoice_to_detail(inv: Invoice) -> dict:
    """Stored header plus the bill decoded from the snapshot, with totals recomputed."""
    bill = decode_snapshot(inv.snapshot)
    if bill is None:
        logger.warning("Invoice %s has an undecodable snapshot", inv.id)
    return {
        "id": inv.id,
        "number": inv.invoice_no,
        "color": inv.color,
        "issuedAt": inv.issued_at.isoformat() if inv.issued_at else None,
        "customer": {
            "mobile": inv.customer_mobile,
            "name": inv.customer.name if inv.customer else None,
        },
        "storedTotal": inv.total,
        "bill": bill.to_dict() if bill else None,
        "totals": compute_bill_totals(bill).to_dict() if bill else None,
        "shareParam": snapshot_to_share_param(inv.snapshot) if bill else None,
    }


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------

@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    body: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
):
    """Store a bill as a numbered invoice (customer, items and number in one transaction)."""
    try:
        saved = await submit_invoice(
            db,
            body.bill.to_domain(),
            color=body.color,
            issued_at=body.issued_at,
            invoice_no=body.invoice_no,
        )
    except InvoiceValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except InvoiceNumberConflict as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    return ok(data=saved.to_dict(), message="Invoice saved")


# ---------------------------------------------------------------------------
# Preview (nothing stored)
# ---------------------------------------------------------------------------

@router.post("/preview", response_model=dict)
async def preview_invoice(body: BillIn):
    """Totals and per-line breakdown for a bill, without storing anything."""
    bill = body.to_domain()
    new_lines, old_lines, misc_lines = build_breakdown(bill)
    return ok(data={
        "totals": compute_bill_totals(bill).to_dict(),
        "newItems": [asdict(line) for line in new_lines],
        "oldItems": [asdict(line) for line in old_lines],
        "miscItems": [asdict(line) for line in misc_lines],
    })


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

@router.get("/{invoice_id}", response_model=dict)
async def get_invoice(
    invoice_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Return a stored invoice with its decoded snapshot."""
    inv = await _load_invoice(db, invoice_id)
    return ok(data=_invoice_to_detail(inv))


# ---------------------------------------------------------------------------
# PDF download
# ---------------------------------------------------------------------------

@router.get("/{invoice_id}/pdf")
async def download_pdf(
    invoice_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Render the stored invoice as a printable PDF."""
    inv = await _load_invoice(db, invoice_id)
    bill = decode_snapshot(inv.snapshot)
    if bill is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invoice snapshot cannot be decoded",
        )

    pdf_bytes = generate_invoice_pdf(
        bill,
        invoice_no=inv.invoice_no,
        color=inv.color,
        issued_at=inv.issued_at,
    )
    return StreamingResponse(
        io.BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="invoice_{inv.color}_{inv.invoice_no}.pdf"'
        },
    )
