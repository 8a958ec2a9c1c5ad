# jewelbill/api/v1/__init__.py
"""
Versioned API v1, aggregates all sub-routers under ``/api/v1``.

Usage in ``main.py``::

    from jewelbill.api.v1 import v1_router
    app.include_router(v1_router)
"""

from fastapi import APIRouter

from jewelbill.api.v1.routes.assistant import router as assistant_router
from jewelbill.api.v1.routes.customers import router as customers_router
from jewelbill.api.v1.routes.invoices import router as invoices_router
from jewelbill.api.v1.routes.rates import router as rates_router
from jewelbill.api.v1.routes.reports import router as reports_router

v1_router = APIRouter(prefix="/api/v1")

# Billing
v1_router.include_router(invoices_router)
v1_router.include_router(rates_router)

# Lookups and reporting
v1_router.include_router(customers_router)
v1_router.include_router(reports_router)

# Assistant
v1_router.include_router(assistant_router)

__all__ = ["v1_router"]
