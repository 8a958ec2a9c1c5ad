# jewelbill/api/v1/schemas/customers.py
"""Response schemas for customer lookup."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class CustomerOut(BaseModel):
    mobile: str
    name: str | None = None
    address: str | None = None

    class Config:
        from_attributes = True


class PurchaseOut(BaseModel):
    id: str
    invoice_no: int
    color: str
    issued_at: datetime
    total: float
    share_param: str | None = None


class CustomerPurchasesOut(BaseModel):
    customer: CustomerOut | None
    purchases: list[PurchaseOut]
