from .customer_repository import CustomerRepository
from .invoice_repository import InvoiceNumberConflict, InvoiceRepository
from .rate_repository import RateRepository

__all__ = [
    "CustomerRepository",
    "InvoiceRepository",
    "InvoiceNumberConflict",
    "RateRepository",
]
