import uuid

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from jewelbill.infrastructure.db.base import Base


def _uuid_str() -> str:
    return str(uuid.uuid4())


def Money():
    return Numeric(12, 2, asdecimal=False)


class Customer(Base):
    __tablename__ = "customers"
    mobile = Column(String(20), primary_key=True)
    name = Column(String(120))
    address = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True))
    invoices = relationship("Invoice", back_populates="customer")


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (UniqueConstraint("color", "invoice_no", name="uq_invoices_color_number"),)

    id = Column(String(36), primary_key=True, default=_uuid_str)
    customer_mobile = Column(String(20), ForeignKey("customers.mobile"), index=True)
    invoice_no = Column(Integer, nullable=False)
    color = Column(String(20), nullable=False, default="white", index=True)
    issued_at = Column(DateTime(timezone=True), nullable=False, index=True)
    cgst_pct = Column(Numeric(5, 2, asdecimal=False), default=0)
    sgst_pct = Column(Numeric(5, 2, asdecimal=False), default=0)
    cgst_amount = Column(Money(), default=0)
    sgst_amount = Column(Money(), default=0)
    gross_total = Column(Money(), default=0)
    old_total = Column(Money(), default=0)
    total = Column(Money(), nullable=False)
    snapshot = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

    customer = relationship("Customer", back_populates="invoices")
    new_items = relationship(
        "InvoiceNewItem", back_populates="invoice",
        order_by="InvoiceNewItem.position", cascade="all, delete-orphan",
    )
    old_items = relationship(
        "InvoiceOldItem", back_populates="invoice",
        order_by="InvoiceOldItem.position", cascade="all, delete-orphan",
    )
    misc_items = relationship(
        "InvoiceMiscItem", back_populates="invoice",
        order_by="InvoiceMiscItem.position", cascade="all, delete-orphan",
    )


class InvoiceNewItem(Base):
    __tablename__ = "invoice_items"
    id = Column(String(36), primary_key=True, default=_uuid_str)
    invoice_id = Column(String(36), ForeignKey("invoices.id", ondelete="CASCADE"), index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(200))
    karat = Column(String(10))
    gross = Column(Numeric(10, 3, asdecimal=False))
    stone = Column(Numeric(10, 3, asdecimal=False))
    net = Column(Numeric(10, 3, asdecimal=False))
    rate = Column(Money())
    making_mode = Column(String(10))
    making_value = Column(Money())
    hallmark = Column(Money())
    stone_cost = Column(Money())
    line_total = Column(Money(), nullable=False)
    invoice = relationship("Invoice", back_populates="new_items")


class InvoiceOldItem(Base):
    __tablename__ = "invoice_old_items"
    id = Column(String(36), primary_key=True, default=_uuid_str)
    invoice_id = Column(String(36), ForeignKey("invoices.id", ondelete="CASCADE"), index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(200))
    weight = Column(Numeric(10, 3, asdecimal=False))
    wastage = Column(Numeric(10, 3, asdecimal=False))
    rate = Column(Money())
    total = Column(Money(), nullable=False)
    invoice = relationship("Invoice", back_populates="old_items")


class InvoiceMiscItem(Base):
    __tablename__ = "invoice_misc_items"
    id = Column(String(36), primary_key=True, default=_uuid_str)
    invoice_id = Column(String(36), ForeignKey("invoices.id", ondelete="CASCADE"), index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(200))
    amount = Column(Money(), nullable=False)
    invoice = relationship("Invoice", back_populates="misc_items")


class InvoiceCounter(Base):
    """Last issued invoice number per color partition."""
    __tablename__ = "invoice_counters"
    color = Column(String(20), primary_key=True)
    last_no = Column(Integer, nullable=False, default=0)


class KaratRate(Base):
    __tablename__ = "rates"
    karat = Column(String(10), primary_key=True)
    rate = Column(Money(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
    )
