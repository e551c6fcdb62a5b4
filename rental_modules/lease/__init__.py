"""
Lease Billing Module (``rental_modules.lease``).

Responsibility
--------------
Thin glue for rental invoicing: monthly invoices, first-month pro-ration,
lease termination against the deposit, and room-sharing splits.

Architecture position
---------------------
**Modules layer** -- record models and a service facade that delegates all
computation to ``rental_engines``.
"""

from rental_modules.lease.models import (
    InvoiceStatus,
    InvoiceSummary,
    Lease,
    LeaseStatus,
    LeaseTermination,
    Meter,
    MeterReadings,
    MeterType,
    Reading,
    Room,
)
from rental_modules.lease.service import LeaseBillingService

__all__ = [
    "InvoiceStatus",
    "InvoiceSummary",
    "Lease",
    "LeaseBillingService",
    "LeaseStatus",
    "LeaseTermination",
    "Meter",
    "MeterReadings",
    "MeterType",
    "Reading",
    "Room",
]
