# jewelbill/domain/services/rate_service.py
"""
Karat rate provider with 2-layer resolution.

Resolution order:
1. Database (`rates` table, edited from the rate screen or the assistant)
2. Hardcoded defaults (final fallback, never fails)
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.domain.models.rate_table import RateTable, normalize_label
from jewelbill.domain.services.rate_defaults import default_rate_table
from jewelbill.infrastructure.audit import log_rates_changed
from jewelbill.infrastructure.db.repositories.rate_repository import RateRepository

logger = logging.getLogger("rate_service")


class InvalidRateError(ValueError):
    """A rate value is missing, non-numeric, non-finite or negative."""


def validate_rates(rates: Mapping[str, Any]) -> dict[str, float]:
    """Normalize labels and check every value. One bad entry rejects all."""
    cleaned: dict[str, float] = {}
    for label, value in rates.items():
        key = normalize_label(label)
        if not key:
            raise InvalidRateError("empty karat label")
        try:
            num = float(value)
        except (TypeError, ValueError):
            raise InvalidRateError(f"rate for {key} is not a number: {value!r}")
        if not math.isfinite(num) or num < 0:
            raise InvalidRateError(f"rate for {key} must be a finite, non-negative number")
        cleaned[key] = num
    return cleaned


class RateService:
    """DB -> hardcoded resolution for the current rate table."""

    async def get_rate_table(self, db: AsyncSession) -> RateTable:
        """
        Current rates as an immutable snapshot.

        Never raises. An empty or unreachable store yields the default table.
        """
        try:
            rows = await RateRepository(db).list_rates()
            if rows:
                logger.debug("Rate table loaded from DB (%d rows)", len(rows))
                return RateTable(rates={r.karat: r.rate for r in rows}, source="db")
        except Exception:
            logger.warning("Rate store unavailable, using hardcoded rates", exc_info=True)
            # Leave the session usable for the caller's next statement
            await db.rollback()

        logger.info("Using hardcoded rate table")
        return default_rate_table()

    async def save_rates(
        self,
        db: AsyncSession,
        rates: Mapping[str, Any],
        *,
        source: str = "manual",
    ) -> RateTable:
        """Validate and upsert rates in one transaction. Raises InvalidRateError."""
        cleaned = validate_rates(rates)
        if not cleaned:
            raise InvalidRateError("no rates given")
        rows = await RateRepository(db).upsert_rates(cleaned)
        log_rates_changed(cleaned, source=source)
        return RateTable(rates={r.karat: r.rate for r in rows}, source="db")


rate_service = RateService()
