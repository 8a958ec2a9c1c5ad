# jewelbill/infrastructure/db/repositories/rate_repository.py
"""Repository for the per-karat price table."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.infrastructure.db.models import KaratRate


class RateRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_rates(self) -> list[KaratRate]:
        result = await self.db.execute(select(KaratRate).order_by(KaratRate.karat))
        return list(result.scalars().all())

    async def upsert_rates(self, rates: Mapping[str, float]) -> list[KaratRate]:
        """Insert or update every entry in one transaction."""
        now = datetime.now(timezone.utc)
        try:
            for karat, rate in rates.items():
                row = await self.db.get(KaratRate, karat)
                if row is None:
                    self.db.add(KaratRate(karat=karat, rate=rate, updated_at=now))
                else:
                    row.rate = rate
                    row.updated_at = now
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return await self.list_rates()
