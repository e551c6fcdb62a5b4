"""
Module: rental_engines.proration
Responsibility:
    Convert a (possibly multi-month) billing period and a monthly rent into
    a whole-VND rent amount, pro-rated against each calendar month's own
    day count.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Depends on rental_engines.period and rental_kernel value objects.

Invariants enforced:
    - Each month fragment is rounded independently (ROUND_HALF_UP) before
      fragments are summed; the total is the sum of rounded fragments.
    - A fragment is charged against its own month length (28-31 days),
      never a blended average.
    - Inverted or empty periods yield zero rent, never an error.

Failure modes:
    None for well-typed inputs.

Usage:
    from rental_engines.proration import calc_rent_by_period

    rent = calc_rent_by_period(
        Period.of("2024-01-25", "2024-02-05"), Money.of(3_000_000)
    )
    # Money(1091212): 677,419 for 7 January days + 413,793 for 4 February days
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from rental_engines.period import days_between, days_in_month, split_period_by_months
from rental_engines.tracer import traced_engine
from rental_kernel.domain.values import Money, Period
from rental_kernel.logging_config import get_logger

logger = get_logger("engines.proration")


@dataclass(frozen=True)
class RentFragment:
    """
    One calendar-month slice of a pro-rated rent.

    Guarantees:
        - ``amount == round(monthly_rent * days / month_days)``.
    """

    period: Period
    days: int
    month_days: int
    amount: Money

    @property
    def is_full_month(self) -> bool:
        return self.days == self.month_days


def calc_rent_fragments(period: Period, monthly_rent: Money) -> tuple[RentFragment, ...]:
    """Per-month rent breakdown of a period, each fragment rounded on its own."""
    fragments: list[RentFragment] = []
    for chunk in split_period_by_months(period):
        month_days = days_in_month(chunk.start)
        days = days_between(chunk)
        amount = (monthly_rent * Decimal(days) / Decimal(month_days)).round()
        fragments.append(RentFragment(
            period=chunk,
            days=days,
            month_days=month_days,
            amount=amount,
        ))
    return tuple(fragments)


@traced_engine("proration", "1.0", fingerprint_fields=("period", "monthly_rent"))
def calc_rent_by_period(period: Period, monthly_rent: Money) -> Money:
    """
    Rent owed for ``period`` at ``monthly_rent``.

    Postconditions:
        Returns a whole-VND Money equal to the sum of the independently
        rounded month fragments. Zero for an empty or inverted period.
    """
    if period.is_inverted:
        logger.warning("period_inverted", extra={
            "period_start": period.start.isoformat(),
            "period_end": period.end.isoformat(),
            "monthly_rent": str(monthly_rent.amount),
        })

    fragments = calc_rent_fragments(period, monthly_rent)
    total = sum((f.amount for f in fragments), Money.zero())

    logger.debug("rent_prorated", extra={
        "period_start": period.start.isoformat(),
        "period_end": period.end.isoformat(),
        "monthly_rent": str(monthly_rent.amount),
        "fragment_count": len(fragments),
        "fragment_amounts": [str(f.amount.amount) for f in fragments],
        "rent": str(total.amount),
    })
    return total
