# jewelbill/infrastructure/db/repositories/customer_repository.py
"""Repository for shop customers, keyed by mobile number."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from jewelbill.infrastructure.db.models import Customer

SEARCH_LIMIT = 25
LIST_DEFAULT_LIMIT = 200
LIST_MAX_LIMIT = 500


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return LIST_DEFAULT_LIMIT
    return max(1, min(LIST_MAX_LIMIT, int(limit)))


class CustomerRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_mobile(self, mobile: str) -> Customer | None:
        stmt = select(Customer).where(Customer.mobile == mobile.strip())
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def search_by_name(self, name: str, limit: int = SEARCH_LIMIT) -> list[Customer]:
        """Case-insensitive substring match on the name. Empty name -> []."""
        needle = (name or "").strip()
        if not needle:
            return []
        stmt = (
            select(Customer)
            .where(Customer.name.ilike(f"%{needle}%"))
            .order_by(Customer.name)
            .limit(min(limit, SEARCH_LIMIT))
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_all(self, limit: int | None = None, offset: int = 0) -> list[Customer]:
        stmt = (
            select(Customer)
            .order_by(Customer.name)
            .offset(max(0, offset))
            .limit(clamp_limit(limit))
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Customer))
        return int(result.scalar_one() or 0)

    def stage_upsert(self, mobile: str, name: str, address: str, existing: Customer | None) -> Customer:
        """
        Add or update a customer in the current unit of work without committing.
        Blank name/address never overwrite stored values.
        """
        if existing is None:
            customer = Customer(mobile=mobile, name=name or None, address=address or None)
            self.db.add(customer)
            return customer

        if name:
            existing.name = name
        if address:
            existing.address = address
        existing.updated_at = datetime.now(timezone.utc)
        return existing
