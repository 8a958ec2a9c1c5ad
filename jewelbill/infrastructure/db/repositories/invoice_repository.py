# jewelbill/infrastructure/db/repositories/invoice_repository.py
"""
Repository for stored invoices.

create_invoice() is the only writer: customer upsert, number assignment and
all item rows go into one transaction, and nothing is left behind on failure.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import and_, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from jewelbill.domain.models.invoice_record import InvoiceRecord, SavedInvoice
from jewelbill.infrastructure.db.models import (
    Customer,
    Invoice,
    InvoiceCounter,
    InvoiceMiscItem,
    InvoiceNewItem,
    InvoiceOldItem,
)
from jewelbill.infrastructure.db.repositories.customer_repository import CustomerRepository

logger = logging.getLogger("invoice_repository")


class InvoiceNumberConflict(ValueError):
    """The invoice number is already used for the color."""


class InvoiceRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ---------- numbering ----------

    async def _max_number(self, color: str) -> int:
        stmt = select(func.max(Invoice.invoice_no)).where(Invoice.color == color)
        result = await self.db.execute(stmt)
        return int(result.scalar_one_or_none() or 0)

    async def _next_number(self, color: str) -> int:
        """
        Atomic increment-and-fetch on the color's counter. The first invoice of
        a color seeds the counter from the highest number already stored.
        """
        stmt = (
            update(InvoiceCounter)
            .where(InvoiceCounter.color == color)
            .values(last_no=InvoiceCounter.last_no + 1)
            .returning(InvoiceCounter.last_no)
        )
        result = await self.db.execute(stmt)
        number = result.scalar_one_or_none()
        if number is not None:
            return int(number)

        seeded = await self._max_number(color) + 1
        self.db.add(InvoiceCounter(color=color, last_no=seeded))
        await self.db.flush()
        return seeded

    async def _claim_number(self, color: str, number: int) -> int:
        """Use a caller-supplied number and move the counter past it."""
        taken = await self.db.execute(
            select(Invoice.id).where(and_(Invoice.color == color, Invoice.invoice_no == number))
        )
        if taken.first() is not None:
            raise InvoiceNumberConflict(f"invoice number {number} already used for {color}")

        counter = await self.db.get(InvoiceCounter, color)
        if counter is None:
            self.db.add(InvoiceCounter(color=color, last_no=max(number, await self._max_number(color))))
        elif counter.last_no < number:
            counter.last_no = number
        await self.db.flush()
        return number

    # ---------- main methods ----------

    async def create_invoice(self, record: InvoiceRecord) -> SavedInvoice:
        """
        Store an invoice with its customer and items in one transaction.
        Rolls back and re-raises on any failure. A unique-constraint clash on
        the number or the color's counter surfaces as InvoiceNumberConflict.
        """
        bill = record.bill
        customers = CustomerRepository(self.db)
        try:
            existing = await customers.get_by_mobile(record.customer_mobile)
            customers.stage_upsert(
                record.customer_mobile,
                bill.customer_name.strip(),
                bill.customer_address.strip(),
                existing,
            )

            if record.invoice_no:
                number = await self._claim_number(record.color, record.invoice_no)
            else:
                number = await self._next_number(record.color)

            totals = record.totals
            invoice = Invoice(
                customer_mobile=record.customer_mobile,
                invoice_no=number,
                color=record.color,
                issued_at=record.issued_at,
                cgst_pct=bill.cgst_pct,
                sgst_pct=bill.sgst_pct,
                cgst_amount=totals.cgst_amount,
                sgst_amount=totals.sgst_amount,
                gross_total=totals.gross_total,
                old_total=totals.old_items_total,
                total=totals.grand_total,
                snapshot=record.snapshot,
            )
            invoice.new_items = [
                InvoiceNewItem(
                    position=line.position,
                    description=line.description,
                    karat=line.karat,
                    gross=line.gross,
                    stone=line.stone,
                    net=line.net,
                    rate=line.rate,
                    making_mode=line.making_mode,
                    making_value=line.making_value,
                    hallmark=line.hallmark,
                    stone_cost=line.stone_cost,
                    line_total=line.line_total,
                )
                for line in record.new_lines
            ]
            invoice.old_items = [
                InvoiceOldItem(
                    position=line.position,
                    description=line.description,
                    weight=line.weight,
                    wastage=line.wastage,
                    rate=line.rate,
                    total=line.total,
                )
                for line in record.old_lines
            ]
            invoice.misc_items = [
                InvoiceMiscItem(position=line.position, description=line.description, amount=line.amount)
                for line in record.misc_lines
            ]
            self.db.add(invoice)
            await self.db.flush()
            invoice_id = invoice.id
            await self.db.commit()
        except IntegrityError as exc:
            # A concurrent submission took the same number or seeded the same counter
            await self.db.rollback()
            logger.warning("Invoice number clash for %s, transaction rolled back", record.color)
            raise InvoiceNumberConflict(
                f"invoice number already taken for {record.color}, please resubmit"
            ) from exc
        except Exception:
            await self.db.rollback()
            logger.exception("Invoice for %s not stored, transaction rolled back", record.customer_mobile)
            raise

        return SavedInvoice(id=invoice_id, invoice_no=number, color=record.color, totals=record.totals)

    async def get_by_id(self, invoice_id: str) -> Invoice | None:
        stmt = (
            select(Invoice)
            .options(
                selectinload(Invoice.customer),
                selectinload(Invoice.new_items),
                selectinload(Invoice.old_items),
                selectinload(Invoice.misc_items),
            )
            .where(Invoice.id == invoice_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_customer(self, mobile: str) -> list[Invoice]:
        """All invoices of a customer, newest first."""
        stmt = (
            select(Invoice)
            .where(Invoice.customer_mobile == mobile)
            .order_by(Invoice.issued_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_for_period(self, start: datetime, end: datetime) -> list[Invoice]:
        """
        Invoices issued in [start, end), oldest first, with their items loaded.
        Used by the monthly report.
        """
        stmt = (
            select(Invoice)
            .options(selectinload(Invoice.new_items), selectinload(Invoice.misc_items))
            .where(and_(Invoice.issued_at >= start, Invoice.issued_at < end))
            .order_by(Invoice.issued_at)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def search_purchases_by_name(
        self,
        name: str,
        min_total: float,
        year: int,
    ) -> list[tuple[Invoice, Customer]]:
        """Invoices above min_total in a calendar year for customers whose name matches."""
        start = datetime(year, 1, 1, tzinfo=timezone.utc)
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
        stmt = (
            select(Invoice, Customer)
            .join(Customer, Customer.mobile == Invoice.customer_mobile)
            .where(
                and_(
                    func.lower(Customer.name).like(f"%{name.strip().lower()}%"),
                    Invoice.total > min_total,
                    Invoice.issued_at >= start,
                    Invoice.issued_at < end,
                )
            )
            .order_by(Invoice.issued_at.desc())
        )
        result = await self.db.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def stats(self) -> dict:
        """Invoice count and the highest invoice number issued."""
        stmt = select(func.count(Invoice.id), func.max(Invoice.invoice_no))
        result = await self.db.execute(stmt)
        count, last_no = result.one()
        return {"invoices": int(count or 0), "lastInvoiceNo": int(last_no or 0)}
