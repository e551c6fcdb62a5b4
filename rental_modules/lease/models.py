"""
Lease Billing Domain Models (``rental_modules.lease.models``).

Responsibility
--------------
Frozen dataclass value objects for the records the persistence layer hands
to the billing service: rooms, leases, meters and readings, plus the
flattened invoice summary and termination outcome the service hands back.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``LeaseBillingService`` and returned to callers.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Money`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from rental_engines.apportionment import Participant
from rental_engines.invoice import InvoiceResult
from rental_engines.settlement import DepositSettlement
from rental_kernel.domain.values import Money, Period


class LeaseStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"  # Terminated; no further invoices


class MeterType(Enum):
    ELECTRIC = "electric"
    WATER = "water"


class InvoiceStatus(Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


@dataclass(frozen=True)
class Room:
    id: int
    name: str
    base_rent: Money
    deposit: Money
    is_active: bool = True


@dataclass(frozen=True)
class Lease:
    """
    A room rented to one leaseholder, possibly shared with sub-tenants.

    ``participants`` lists everyone living in the room. Leases recorded
    before room sharing existed carry none; ``occupants`` then falls back
    to the leaseholder alone.
    """

    id: int
    room_id: int
    tenant_id: int
    start_date: date
    monthly_rent: Money
    deposit: Money
    wifi_fee: Money = field(default_factory=Money.zero)
    trash_fee: Money = field(default_factory=Money.zero)
    participants: tuple[Participant, ...] = ()
    end_date: date | None = None
    status: LeaseStatus = LeaseStatus.ACTIVE

    def __post_init__(self) -> None:
        object.__setattr__(self, "participants", tuple(self.participants))

    @property
    def occupants(self) -> tuple[Participant, ...]:
        if self.participants:
            return self.participants
        return (
            Participant(
                tenant_id=self.tenant_id,
                join_date=self.start_date,
                leave_date=self.end_date,
                is_primary=True,
            ),
        )

    @property
    def number_of_people(self) -> int:
        return len(self.occupants)

    @property
    def is_active(self) -> bool:
        return self.status is LeaseStatus.ACTIVE


@dataclass(frozen=True)
class Meter:
    """A room's utility meter. ``unit_price`` of None bills at the configured rate."""

    id: int
    room_id: int
    type: MeterType
    unit_price: Money | None = None


@dataclass(frozen=True)
class Reading:
    """Meter value recorded for a ``YYYY-MM`` month."""

    id: int
    meter_id: int
    month: str
    value: Decimal

    def __post_init__(self) -> None:
        if isinstance(self.value, float):
            raise TypeError("Reading value must not be float")
        if not isinstance(self.value, Decimal):
            object.__setattr__(self, "value", Decimal(str(self.value)))


@dataclass(frozen=True)
class MeterReadings:
    """
    The pair of readings that bound one billing period for one meter.

    A missing ``previous`` reading (first invoice of a new meter) counts
    as zero.
    """

    meter: Meter
    current: Reading
    previous: Reading | None = None

    @property
    def previous_value(self) -> Decimal:
        return self.previous.value if self.previous is not None else Decimal("0")


@dataclass(frozen=True)
class InvoiceSummary:
    """Invoice flattened into the columns the persistence layer stores."""

    lease_id: int
    month: str
    rent: Money
    electric_usage: Decimal | None
    electric_cost: Money | None
    water_usage: Decimal | None
    water_cost: Money | None
    other_fees: Money
    total: Money
    amount_paid: Money = field(default_factory=Money.zero)
    status: InvoiceStatus = InvoiceStatus.UNPAID


@dataclass(frozen=True)
class LeaseTermination:
    """
    Final invoice of an ending lease and its settlement against the deposit.

    ``lease`` is the input lease marked inactive with ``end_date`` set to
    the move-out date, ready to be stored in place of the active record.
    """

    period: Period
    invoice: InvoiceResult
    settlement: DepositSettlement
    lease: Lease
