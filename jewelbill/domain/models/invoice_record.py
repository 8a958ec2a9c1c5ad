# jewelbill/domain/models/invoice_record.py
"""
A finalized bill ready to be stored: the snapshot, the computed totals and the
per-line breakdown. The persistence layer stores these values as given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from jewelbill.domain.models.billing import BillInput, BillTotals


@dataclass(frozen=True)
class NewItemLine:
    position: int
    description: str
    karat: str
    gross: float
    stone: float
    net: float
    rate: float
    making_mode: str | None
    making_value: float
    hallmark: float
    stone_cost: float
    line_total: float


@dataclass(frozen=True)
class OldItemLine:
    position: int
    description: str
    weight: float
    wastage: float
    rate: float
    total: float


@dataclass(frozen=True)
class MiscItemLine:
    position: int
    description: str
    amount: float


@dataclass
class InvoiceRecord:
    bill: BillInput
    totals: BillTotals
    snapshot: str
    issued_at: datetime
    color: str = "white"
    # Explicit number from the caller; None means "assign the next one"
    invoice_no: int | None = None
    new_lines: list[NewItemLine] = field(default_factory=list)
    old_lines: list[OldItemLine] = field(default_factory=list)
    misc_lines: list[MiscItemLine] = field(default_factory=list)

    @property
    def customer_mobile(self) -> str:
        return self.bill.customer_mobile.strip()


@dataclass(frozen=True)
class SavedInvoice:
    id: str
    invoice_no: int
    color: str
    totals: BillTotals

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.invoice_no,
            "color": self.color,
            "totals": self.totals.to_dict(),
        }
