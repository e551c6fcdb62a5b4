"""
Module: rental_engines.period
Responsibility:
    Calendar arithmetic over half-open billing periods: day counting,
    month-length lookup, month-boundary splitting, cutting a period in two,
    and deriving billing periods from ``YYYY-MM`` month designators.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Foundation for proration, invoice assembly and apportionment.

Invariants enforced:
    - Calendar-date arithmetic only; no timestamps, no timezones.
    - ``days_between`` never raises: inverted periods count as zero days.
    - ``split_at`` preserves days: both halves sum to the original length.

Failure modes:
    - InvalidCutDateError from ``split_at`` when the cut date lies outside
      ``(start, end]``.
    - InvalidMonthError when a month designator is not ``YYYY-MM``.

Usage:
    from rental_engines.period import split_period_by_months
    from rental_kernel.domain.values import Period

    chunks = split_period_by_months(Period.of("2024-01-25", "2024-02-05"))
"""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta

from rental_kernel.domain.values import Period
from rental_kernel.exceptions import InvalidCutDateError, InvalidMonthError
from rental_kernel.logging_config import get_logger

logger = get_logger("engines.period")

_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def days_between(period: Period) -> int:
    """Number of whole days in ``[start, end)``, floored at 0."""
    days = (period.end - period.start).days
    if days < 0:
        logger.debug("period_inverted", extra={
            "period_start": period.start.isoformat(),
            "period_end": period.end.isoformat(),
        })
        return 0
    return days


def days_in_month(day: date) -> int:
    """Number of calendar days in the month containing ``day``."""
    return calendar.monthrange(day.year, day.month)[1]


def first_of_next_month(day: date) -> date:
    """First calendar day of the month after the one containing ``day``."""
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def split_period_by_months(period: Period) -> list[Period]:
    """
    Decompose a period into one sub-period per calendar month touched.

    Each sub-period ends on the first day of the following month or on
    ``period.end``, whichever comes first. Returns an empty list for an
    empty or inverted period.
    """
    chunks: list[Period] = []
    cursor = period.start
    while cursor < period.end:
        chunk_end = min(first_of_next_month(cursor), period.end)
        chunks.append(Period(start=cursor, end=chunk_end))
        cursor = chunk_end
    return chunks


def split_at(period: Period, cut_date: date) -> tuple[Period, Period]:
    """
    Cut a period into two contiguous periods at ``cut_date``.

    Preconditions:
        ``period.start < cut_date <= period.end``.
    Postconditions:
        Returns ``(Period(start, cut_date), Period(cut_date, end))``.
    Raises:
        InvalidCutDateError: if the precondition does not hold.
    """
    if not (period.start < cut_date <= period.end):
        logger.error("period_split_rejected", extra={
            "period_start": period.start.isoformat(),
            "period_end": period.end.isoformat(),
            "cut_date": cut_date.isoformat(),
        })
        raise InvalidCutDateError(
            period.start.isoformat(),
            period.end.isoformat(),
            cut_date.isoformat(),
        )
    return (
        Period(start=period.start, end=cut_date),
        Period(start=cut_date, end=period.end),
    )


# ---------------------------------------------------------------------------
# Month designators
# ---------------------------------------------------------------------------


def parse_month(month: str | date) -> date:
    """
    Normalize a month designator to the first day of that month.

    Accepts a ``YYYY-MM`` string or any date inside the month.

    Raises:
        InvalidMonthError: if the string is not a valid ``YYYY-MM``.
    """
    if isinstance(month, date):
        return date(month.year, month.month, 1)
    match = _MONTH_PATTERN.match(month.strip()) if isinstance(month, str) else None
    if match is None:
        raise InvalidMonthError(str(month))
    year, month_number = int(match.group(1)), int(match.group(2))
    if not 1 <= month_number <= 12:
        raise InvalidMonthError(str(month))
    return date(year, month_number, 1)


def month_period(month: str | date) -> Period:
    """Full-month period: first of the month to first of the next month."""
    first = parse_month(month)
    return Period(start=first, end=first_of_next_month(first))


def last_day_of_month(month: str | date) -> date:
    first = parse_month(month)
    return date(first.year, first.month, days_in_month(first))


def period_for_new_lease(lease_start: date, month: str | date) -> Period:
    """
    Billing period for ``month`` of a lease that began on ``lease_start``.

    A lease that started inside the month is billed from its start date to
    the end of the month; otherwise the full month is billed.
    """
    full = month_period(month)
    if full.start <= lease_start < full.end:
        return Period(start=lease_start, end=full.end)
    return full


def is_full_month(period: Period) -> bool:
    """True if the period spans exactly one whole calendar month."""
    if period.start.day != 1:
        return False
    return period.end == first_of_next_month(period.start)


def next_period_start(lease_start: date, last_billed_month: str | date | None) -> date:
    """
    Start date of the next billing period of a lease.

    The day after the last billed month, or the lease start when no month
    has been billed yet.
    """
    if last_billed_month is None:
        return lease_start
    return last_day_of_month(last_billed_month) + timedelta(days=1)
