# jewelbill/api/v1/routes/rates.py
"""
Karat rate endpoints: read the current table, replace entries, derive grades.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.api.v1.envelope import ok
from jewelbill.api.v1.schemas.rates import RatesDerive, RatesUpdate
from jewelbill.core.db import get_db
from jewelbill.domain.models.rate_table import derive_karat_rates
from jewelbill.domain.services.rate_service import InvalidRateError, rate_service

logger = logging.getLogger("api.v1.rates")

router = APIRouter(prefix="/rates", tags=["Rates"])


@router.get("", response_model=dict)
async def get_rates(db: AsyncSession = Depends(get_db)):
    """Current rate table (stored rates, or the defaults when none are stored)."""
    table = await rate_service.get_rate_table(db)
    return ok(data=table.to_dict())


@router.put("", response_model=dict)
async def update_rates(
    body: RatesUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Upsert rates. One invalid value rejects the whole payload."""
    try:
        table = await rate_service.save_rates(db, body.rates, source="manual")
    except InvalidRateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return ok(data=table.to_dict(), message="Rates updated")


@router.post("/derive", response_model=dict)
async def derive_rates(
    body: RatesDerive,
    db: AsyncSession = Depends(get_db),
):
    """Derive 10K-24K from the pure 24K rate. Saved only when ``save`` is true."""
    table = derive_karat_rates(body.pure_24k, body.silver, body.overrides)
    if not body.save:
        return ok(data=table.to_dict())

    try:
        saved = await rate_service.save_rates(db, dict(table.rates), source="derived")
    except InvalidRateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return ok(data=saved.to_dict(), message="Derived rates saved")
