"""
Lease Billing Module Service (``rental_modules.lease.service``).

Responsibility
--------------
Orchestrates invoicing for rented rooms -- monthly invoice generation,
first-month pro-ration, lease termination with deposit settlement, and
splitting rent and utilities among room-mates -- by turning persistence
records into engine inputs and delegating every computation to
``rental_engines``.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``LeaseBillingService`` is the sole
public entry point for lease invoicing.  It composes ``build_invoice``,
``settle_with_deposit``, ``calculate_pro_rata_rent``,
``calculate_pro_rata_utilities`` and the period helpers.

Invariants enforced
-------------------
* The service never persists anything; it returns values for the caller
  to store verbatim.
* The current date comes only from the injected ``Clock``.
* All monetary calculations use ``Money`` -- NEVER ``float``.

Failure modes
-------------
* ``InvertedPeriodError`` for a termination period shorter than one day,
  and for any inverted period when ``reject_inverted_periods`` is set.
* ``LeaseNotActiveError`` when invoicing or terminating an inactive lease.
* ``InvalidCutDateError`` from ``close_period_for_arrival``.
* ``InvalidMonthError`` for a malformed ``YYYY-MM`` month.

Audit relevance
---------------
Structured log events are emitted at operation start and completion,
carrying lease and room IDs bound through ``LogContext``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import date

from rental_config.schema import BillingConfig
from rental_engines.apportionment import (
    ProRataResult,
    calculate_pro_rata_rent,
    calculate_pro_rata_utilities,
)
from rental_engines.invoice import InvoiceDraft, InvoiceResult, build_invoice
from rental_engines.lines import Line, LineCode
from rental_engines.period import (
    days_between,
    month_period,
    next_period_start,
    parse_month,
    period_for_new_lease,
    split_at,
)
from rental_engines.settlement import settle_with_deposit
from rental_engines.utilities import MeterUsage, UtilityUsage
from rental_kernel.domain.clock import Clock, SystemClock
from rental_kernel.domain.values import Money, Period
from rental_kernel.exceptions import InvertedPeriodError, LeaseNotActiveError
from rental_kernel.logging_config import LogContext, get_logger
from rental_modules.lease.models import (
    InvoiceSummary,
    Lease,
    LeaseStatus,
    LeaseTermination,
    MeterReadings,
    Room,
)

logger = get_logger("modules.lease.service")


class LeaseBillingService:
    """
    Orchestrates rental invoicing through the pure engines.

    Contract
    --------
    * Every method is deterministic given its arguments, the config and
      the clock.
    * Utilities are billed only for meters whose readings are supplied.

    Non-goals
    ---------
    * Does NOT look up readings or previous invoices; callers pass them.
    * Does NOT check meter-reading plausibility.
    """

    def __init__(
        self,
        config: BillingConfig | None = None,
        clock: Clock | None = None,
    ):
        self._config = config or BillingConfig.with_defaults()
        self._clock = clock or SystemClock()

    @property
    def config(self) -> BillingConfig:
        return self._config

    # =========================================================================
    # Drafts
    # =========================================================================

    def _meter_usage(self, readings: MeterReadings, default_rate: Money) -> MeterUsage:
        rate = readings.meter.unit_price
        return MeterUsage(
            previous=readings.previous_value,
            current=readings.current.value,
            rate=rate if rate is not None else default_rate,
        )

    def create_invoice_draft(
        self,
        lease: Lease,
        room: Room,
        period: Period,
        electric: MeterReadings | None = None,
        water: MeterReadings | None = None,
        discounts: Sequence[Line] = (),
    ) -> InvoiceDraft:
        """
        Build the engine input for one room and period.

        Wifi and trash fees become surcharges when the lease charges them.
        """
        utilities = None
        if electric is not None or water is not None:
            utilities = UtilityUsage(
                electric=(
                    self._meter_usage(electric, self._config.electric_rate)
                    if electric is not None else None
                ),
                water=(
                    self._meter_usage(water, self._config.water_rate)
                    if water is not None else None
                ),
            )

        surcharges: list[Line] = []
        if lease.wifi_fee.is_positive:
            surcharges.append(Line.surcharge(LineCode.WIFI.value, lease.wifi_fee, "Wifi fee"))
        if lease.trash_fee.is_positive:
            surcharges.append(Line.surcharge(LineCode.TRASH.value, lease.trash_fee, "Trash fee"))

        return InvoiceDraft(
            room_id=str(room.id),
            period=period,
            monthly_rent=lease.monthly_rent,
            utilities=utilities,
            surcharges=tuple(surcharges),
            discounts=tuple(discounts),
            rounding_step=self._config.rounding_step,
        )

    def _check_period(self, period: Period) -> None:
        if self._config.reject_inverted_periods and period.is_inverted:
            raise InvertedPeriodError(period.start.isoformat(), period.end.isoformat())

    def _require_active(self, lease: Lease) -> None:
        if not lease.is_active:
            logger.warning("lease_not_active", extra={"status": lease.status.value})
            raise LeaseNotActiveError(str(lease.id), lease.status.value)

    # =========================================================================
    # Invoicing
    # =========================================================================

    def billing_period(self, lease: Lease, month: str | date | None = None) -> Period:
        """
        Period billed for ``month`` (default: the clock's current month).

        The lease's first month is pro-rated from its start date when
        ``prorate_first_month`` is enabled.
        """
        target = parse_month(month if month is not None else self._clock.today())
        if self._config.prorate_first_month:
            return period_for_new_lease(lease.start_date, target)
        return month_period(target)

    def generate_invoice(
        self,
        lease: Lease,
        room: Room,
        month: str | date | None = None,
        electric: MeterReadings | None = None,
        water: MeterReadings | None = None,
        discounts: Sequence[Line] = (),
        period: Period | None = None,
    ) -> InvoiceResult:
        """Invoice one lease for one month (or an explicit ``period``)."""
        with LogContext.bind(lease_id=lease.id, room_id=room.id):
            self._require_active(lease)
            billed = period if period is not None else self.billing_period(lease, month)
            self._check_period(billed)

            logger.info("lease_invoice_started", extra={
                "period_start": billed.start.isoformat(),
                "period_end": billed.end.isoformat(),
                "has_electric": electric is not None,
                "has_water": water is not None,
            })

            draft = self.create_invoice_draft(
                lease, room, billed, electric=electric, water=water, discounts=discounts,
            )
            result = build_invoice(draft)

            logger.info("lease_invoice_completed", extra={
                "total": str(result.total.amount),
                "rounding_delta": str(result.rounding_delta.amount),
            })
            return result

    def summarize_invoice(
        self,
        result: InvoiceResult,
        lease_id: int,
        month: str | date,
    ) -> InvoiceSummary:
        """Flatten an invoice into the stored per-column summary."""
        first = parse_month(month)
        electric = result.line(LineCode.ELEC)
        water = result.line(LineCode.WATER)
        return InvoiceSummary(
            lease_id=lease_id,
            month=f"{first.year:04d}-{first.month:02d}",
            rent=result.rent,
            electric_usage=electric.quantity.value if electric and electric.quantity else None,
            electric_cost=electric.amount if electric else None,
            water_usage=water.quantity.value if water and water.quantity else None,
            water_cost=water.amount if water else None,
            other_fees=result.other_fees,
            total=result.total,
        )

    def next_invoice_period_start(
        self,
        lease: Lease,
        last_billed_month: str | date | None,
    ) -> date:
        return next_period_start(lease.start_date, last_billed_month)

    # =========================================================================
    # Termination
    # =========================================================================

    def terminate_lease(
        self,
        lease: Lease,
        room: Room,
        period_start: date,
        move_out_date: date,
        electric: MeterReadings | None = None,
        water: MeterReadings | None = None,
    ) -> LeaseTermination:
        """
        Final invoice for ``[period_start, move_out_date)`` settled against
        the lease deposit.

        The returned ``lease`` is the input marked inactive and ended on
        ``move_out_date``.

        Raises:
            LeaseNotActiveError: if the lease was already terminated.
            InvertedPeriodError: if the final period covers less than a day.
        """
        with LogContext.bind(lease_id=lease.id, room_id=room.id):
            self._require_active(lease)
            period = Period(start=period_start, end=move_out_date)
            if days_between(period) < 1:
                logger.error("lease_termination_rejected", extra={
                    "period_start": period_start.isoformat(),
                    "move_out_date": move_out_date.isoformat(),
                })
                raise InvertedPeriodError(period_start.isoformat(), move_out_date.isoformat())

            draft = self.create_invoice_draft(lease, room, period, electric=electric, water=water)
            invoice = build_invoice(draft)
            settlement = settle_with_deposit(invoice.total, lease.deposit)

            logger.info("lease_terminated", extra={
                "days": invoice.days,
                "final_total": str(invoice.total.amount),
                "deposit": str(lease.deposit.amount),
                "refund": str(settlement.refund.amount),
                "collect_more": str(settlement.collect_more.amount),
            })
            return LeaseTermination(
                period=period,
                invoice=invoice,
                settlement=settlement,
                lease=replace(lease, status=LeaseStatus.INACTIVE, end_date=move_out_date),
            )

    # =========================================================================
    # Room sharing
    # =========================================================================

    def split_rent_among_occupants(
        self,
        lease: Lease,
        period: Period,
    ) -> tuple[ProRataResult, ...]:
        """Each occupant's person-day share of the lease's monthly rent."""
        return calculate_pro_rata_rent(
            lease.monthly_rent,
            lease.occupants,
            period,
            remainder_policy=self._config.remainder_policy,
        )

    def split_utilities_among_occupants(
        self,
        lease: Lease,
        invoice: InvoiceResult,
        period: Period,
    ) -> dict[str, tuple[ProRataResult, ...]]:
        """Equal split of each metered utility line, keyed by line code."""
        shares: dict[str, tuple[ProRataResult, ...]] = {}
        for code in (LineCode.ELEC, LineCode.WATER):
            line = invoice.line(code)
            if line is None:
                continue
            shares[code.value] = calculate_pro_rata_utilities(
                line.amount,
                lease.occupants,
                period,
                remainder_policy=self._config.remainder_policy,
            )
        return shares

    def close_period_for_arrival(self, period: Period, arrival: date) -> tuple[Period, Period]:
        """Close the running period on ``arrival`` and open the next one there."""
        closed, opened = split_at(period, arrival)
        logger.info("period_closed_for_arrival", extra={
            "arrival": arrival.isoformat(),
            "closed_days": days_between(closed),
            "opened_days": days_between(opened),
        })
        return closed, opened
