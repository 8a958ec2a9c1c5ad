"""Shared test fixtures for the jewelbill test suite."""

import asyncio
import os

# Must be set before jewelbill.config.settings is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GEMINI_API_KEY"] = ""
os.environ["GOOGLE_API_KEY"] = ""

import pytest

from jewelbill.core.db import AsyncSessionLocal, engine
from jewelbill.domain.models.billing import (
    BillInput,
    Karat,
    MakingChargeMode,
    NewItem,
    OldItem,
)
from jewelbill.infrastructure.db.base import Base
import jewelbill.infrastructure.db.models  # noqa: F401


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def db(event_loop):
    """Fresh in-memory schema per test, with one AsyncSession bound to it."""

    async def _reset():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)

    event_loop.run_until_complete(_reset())
    session = AsyncSessionLocal()
    yield session
    event_loop.run_until_complete(session.close())


@pytest.fixture
def ring_22k() -> NewItem:
    """10 g 22K ring at 6000/g, 10% making, 100 hallmark."""
    return NewItem(
        description="Ring",
        karat=Karat.K22,
        gross_weight_gm=10,
        stone_weight_gm=0,
        rate_per_gm=6000,
        making_charge_mode=MakingChargeMode.PERCENT,
        making_charge_value=10,
        hallmark_cost=100,
    )


@pytest.fixture
def sample_bill(ring_22k) -> BillInput:
    """A one-item bill with 1.5% CGST and SGST; grand total 68083.00."""
    return BillInput(
        customer_name="Ravi Kumar",
        customer_mobile="9876543210",
        customer_address="MG Road",
        cgst_pct=1.5,
        sgst_pct=1.5,
        new_items=[ring_22k],
    )


@pytest.fixture
def exchange_bill(sample_bill) -> BillInput:
    """sample_bill plus 5 g of old gold at 5000/g; grand total 43083.00."""
    sample_bill.old_items.append(OldItem(description="Old chain", weight_gm=5, rate_per_gm=5000))
    return sample_bill


@pytest.fixture
def sample_prompt() -> str:
    """A typical assistant draft-bill prompt."""
    return (
        "generate bill for Ravi Kumar mobile 9876543210 "
        "22K 5g ring, making 12%, hallmark 100, old chain 4g @ 5800"
    )
