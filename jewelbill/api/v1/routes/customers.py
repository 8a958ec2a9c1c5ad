# jewelbill/api/v1/routes/customers.py
"""
Customer lookup endpoints and shop-wide counters.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.api.v1.envelope import ok, paginated
from jewelbill.api.v1.schemas.customers import CustomerOut, CustomerPurchasesOut, PurchaseOut
from jewelbill.core.db import get_db
from jewelbill.domain.services.snapshot_codec import snapshot_to_share_param
from jewelbill.infrastructure.db.repositories.customer_repository import (
    LIST_DEFAULT_LIMIT,
    CustomerRepository,
    clamp_limit,
)
from jewelbill.infrastructure.db.repositories.invoice_repository import InvoiceRepository

logger = logging.getLogger("api.v1.customers")

router = APIRouter(tags=["Customers"])


@router.get("/customers/search", response_model=dict)
async def search_customers(
    name: str = Query(default=""),
    db: AsyncSession = Depends(get_db),
):
    """Name search, at most 25 matches. An empty name returns no matches."""
    customers = await CustomerRepository(db).search_by_name(name)
    return ok(data=[CustomerOut.model_validate(c).model_dump() for c in customers])


@router.get("/customers", response_model=dict)
async def list_customers(
    limit: int = Query(default=LIST_DEFAULT_LIMIT),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Customers ordered by name; limit is clamped to 1..500."""
    repo = CustomerRepository(db)
    limit = clamp_limit(limit)
    customers = await repo.list_all(limit, offset)
    total = await repo.count()
    return paginated(
        items=[CustomerOut.model_validate(c).model_dump() for c in customers],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/customers/{mobile}", response_model=dict)
async def get_customer(
    mobile: str,
    db: AsyncSession = Depends(get_db),
):
    """Customer details with purchases, newest first."""
    customer = await CustomerRepository(db).get_by_mobile(mobile)
    invoices = await InvoiceRepository(db).list_for_customer(mobile.strip())
    if customer is None and not invoices:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")

    purchases = [
        PurchaseOut(
            id=inv.id,
            invoice_no=inv.invoice_no,
            color=inv.color,
            issued_at=inv.issued_at,
            total=inv.total or 0.0,
            share_param=snapshot_to_share_param(inv.snapshot) if inv.snapshot else None,
        )
        for inv in invoices
    ]
    out = CustomerPurchasesOut(
        customer=CustomerOut.model_validate(customer) if customer else None,
        purchases=purchases,
    )
    return ok(data=out.model_dump(mode="json"))


@router.get("/stats", response_model=dict)
async def get_stats(db: AsyncSession = Depends(get_db)):
    """Total customers, total invoices and the last invoice number."""
    invoice_stats = await InvoiceRepository(db).stats()
    return ok(data={
        "customers": await CustomerRepository(db).count(),
        **invoice_stats,
    })
