# jewelbill/api/v1/routes/reports.py
"""
Monthly sales report endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.api.v1.envelope import ok
from jewelbill.core.db import get_db
from jewelbill.domain.services.monthly_report import (
    build_monthly_report,
    compare_months,
    previous_month,
)

logger = logging.getLogger("api.v1.reports")

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/monthly", response_model=dict)
async def monthly_report(
    year: int = Query(ge=2000, le=2100),
    month: int = Query(ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """KPIs, per-day and per-karat totals for one calendar month."""
    report = await build_monthly_report(db, year, month)
    return ok(data=report.to_dict())


@router.get("/compare", response_model=dict)
async def compare_with_previous_month(
    year: int = Query(ge=2000, le=2100),
    month: int = Query(ge=1, le=12),
    db: AsyncSession = Depends(get_db),
):
    """Compare a month against the one before it."""
    current = await build_monthly_report(db, year, month)
    prev_year, prev_month = previous_month(year, month)
    previous = await build_monthly_report(db, prev_year, prev_month)
    comparison = compare_months(current, previous)
    return ok(data={**comparison.to_dict(), "text": comparison.text()})
