"""
Module: rental_engines.apportionment
Responsibility:
    Split one room's monthly rent and, separately, its utility costs among
    the occupants sharing it, including occupants who join or leave in the
    middle of the billing period.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Rent is day-weighted: each occupant's share is proportional to the
      person-days they spent in the period.
    - Utilities are split equally among occupants active at any point in
      the period (consumption is not metered per occupant).
    - Shares are rounded to whole VND (ROUND_HALF_UP) and the rounding
      remainder is assigned in full to ONE recipient chosen by the
      RemainderPolicy, so shares always sum to the amount being split.
    - Zero person-days yields all-zero shares instead of dividing by zero.

Failure modes:
    None for well-typed inputs.

Usage:
    from rental_engines.apportionment import Participant, calculate_pro_rata_rent

    shares = calculate_pro_rata_rent(
        monthly_rent=Money.of(3_000_000),
        participants=[
            Participant("A", date(2024, 6, 1), is_primary=True),
            Participant("B", date(2024, 6, 11)),
            Participant("C", date(2024, 6, 21)),
        ],
        billing_period=Period.of("2024-06-01", "2024-07-01"),
    )
    # A 1,500,000 / B 1,000,000 / C 500,000
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum

from rental_engines.period import days_between
from rental_engines.tracer import traced_engine
from rental_kernel.domain.values import Money, Period
from rental_kernel.logging_config import get_logger

logger = get_logger("engines.apportionment")

_HUNDRED = Decimal("100")


class RemainderPolicy(str, Enum):
    """Which participant absorbs the rounding remainder of a split."""

    FIRST_LISTED = "first_listed"  # First participant in input order
    PRIMARY_OCCUPANT = "primary_occupant"  # First primary; else first listed


@dataclass(frozen=True)
class Participant:
    """
    One occupant of a shared room.

    ``leave_date`` of None means the occupant is still living there.
    ``is_primary`` marks the leaseholder; it only matters to the
    PRIMARY_OCCUPANT remainder policy.
    """

    tenant_id: str | int
    join_date: date
    leave_date: date | None = None
    is_primary: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.join_date, str):
            object.__setattr__(self, "join_date", date.fromisoformat(self.join_date))
        if isinstance(self.leave_date, str):
            object.__setattr__(self, "leave_date", date.fromisoformat(self.leave_date))

    def occupancy_within(self, period: Period) -> Period:
        """The part of ``period`` this participant occupied (may be inverted)."""
        end = period.end if self.leave_date is None else min(self.leave_date, period.end)
        return Period(start=max(self.join_date, period.start), end=end)


@dataclass(frozen=True)
class ProRataResult:
    """
    One participant's share of a split.

    ``ratio`` is an informational percentage; it plays no part in the
    share computation.
    """

    tenant_id: str | int
    days: int
    rent_share: Money
    ratio: Decimal


def _remainder_index(
    participants: Sequence[Participant],
    policy: RemainderPolicy,
) -> int:
    if policy is RemainderPolicy.PRIMARY_OCCUPANT:
        for i, p in enumerate(participants):
            if p.is_primary:
                return i
    return 0


def _absorb_remainder(
    results: list[ProRataResult],
    amount: Money,
    recipient: int,
) -> Money:
    """Give ``amount - sum(shares)`` to ``results[recipient]``; return the diff."""
    allocated = sum((r.rent_share for r in results), Money.zero())
    diff = amount - allocated
    if not diff.is_zero:
        target = results[recipient]
        results[recipient] = replace(target, rent_share=target.rent_share + diff)
    return diff


# ---------------------------------------------------------------------------
# Participant queries
# ---------------------------------------------------------------------------


def is_active_in_period(participant: Participant, period: Period) -> bool:
    """True if the participant overlaps the period at all (bounds inclusive)."""
    joined_before_end = participant.join_date <= period.end
    left_after_start = participant.leave_date is None or participant.leave_date >= period.start
    return joined_before_end and left_after_start


def active_participant_count(
    participants: Sequence[Participant] | None,
    period: Period,
) -> int:
    if not participants:
        return 0
    return sum(1 for p in participants if is_active_in_period(p, period))


def has_multiple_occupants(participants: Sequence[Participant] | None) -> bool:
    return len(participants or ()) > 1


def primary_participant(participants: Sequence[Participant] | None) -> Participant | None:
    return next((p for p in participants or () if p.is_primary), None)


def sub_participants(participants: Sequence[Participant] | None) -> list[Participant]:
    """Everyone sharing the room besides the primary leaseholder."""
    return [p for p in participants or () if not p.is_primary]


# ---------------------------------------------------------------------------
# Splits
# ---------------------------------------------------------------------------


@traced_engine(
    "apportionment.rent", "1.0",
    fingerprint_fields=("monthly_rent", "participants", "billing_period", "remainder_policy"),
)
def calculate_pro_rata_rent(
    monthly_rent: Money,
    participants: Sequence[Participant],
    billing_period: Period,
    remainder_policy: RemainderPolicy = RemainderPolicy.FIRST_LISTED,
) -> tuple[ProRataResult, ...]:
    """
    Split ``monthly_rent`` among participants by person-days.

    Preconditions:
        ``monthly_rent`` is a whole-VND amount.
    Postconditions:
        - One result per participant, in input order.
        - When person-days are positive, shares sum exactly to
          ``monthly_rent``; the remainder goes to the policy's recipient.
        - When person-days are zero, every share is zero.
        - An empty participant list yields an empty tuple.
    """
    remainder_policy = RemainderPolicy(remainder_policy)
    if not participants:
        return ()

    occupancy = [days_between(p.occupancy_within(billing_period)) for p in participants]
    total_person_days = sum(occupancy)

    logger.info("rent_apportionment_started", extra={
        "monthly_rent": str(monthly_rent.amount),
        "participant_count": len(participants),
        "period_start": billing_period.start.isoformat(),
        "period_end": billing_period.end.isoformat(),
        "total_person_days": total_person_days,
    })

    if total_person_days == 0:
        logger.warning("rent_apportionment_no_person_days", extra={
            "participant_count": len(participants),
        })
        return tuple(
            ProRataResult(
                tenant_id=p.tenant_id,
                days=days,
                rent_share=Money.zero(),
                ratio=Decimal("0"),
            )
            for p, days in zip(participants, occupancy)
        )

    total = Decimal(total_person_days)
    results = [
        ProRataResult(
            tenant_id=p.tenant_id,
            days=days,
            rent_share=(monthly_rent * Decimal(days) / total).round(),
            ratio=Decimal(days) / total * _HUNDRED,
        )
        for p, days in zip(participants, occupancy)
    ]

    recipient = _remainder_index(participants, remainder_policy)
    diff = _absorb_remainder(results, monthly_rent, recipient)

    logger.info("rent_apportionment_completed", extra={
        "price_per_person_day": str(monthly_rent.amount / total),
        "remainder": str(diff.amount),
        "remainder_recipient": str(results[recipient].tenant_id),
        "remainder_policy": remainder_policy.value,
    })
    return tuple(results)


@traced_engine(
    "apportionment.utilities", "1.0",
    fingerprint_fields=("cost", "participants", "billing_period", "remainder_policy"),
)
def calculate_pro_rata_utilities(
    cost: Money,
    participants: Sequence[Participant],
    billing_period: Period,
    remainder_policy: RemainderPolicy = RemainderPolicy.FIRST_LISTED,
) -> tuple[ProRataResult, ...]:
    """
    Split a utility ``cost`` equally among participants active in the period.

    Postconditions:
        - One result per ACTIVE participant, in input order; inactive
          participants are omitted. ``days`` is always 0.
        - Shares sum exactly to ``cost``.
        - No active participant yields an empty tuple.
    """
    remainder_policy = RemainderPolicy(remainder_policy)
    if not participants:
        return ()

    active = [p for p in participants if is_active_in_period(p, billing_period)]
    if not active:
        logger.warning("utility_apportionment_no_active_participants", extra={
            "cost": str(cost.amount),
            "participant_count": len(participants),
        })
        return ()

    count = Decimal(len(active))
    share = (cost / count).round()
    ratio = _HUNDRED / count
    results = [
        ProRataResult(tenant_id=p.tenant_id, days=0, rent_share=share, ratio=ratio)
        for p in active
    ]

    recipient = _remainder_index(active, remainder_policy)
    diff = _absorb_remainder(results, cost, recipient)

    logger.info("utility_apportionment_completed", extra={
        "cost": str(cost.amount),
        "active_count": len(active),
        "share_per_person": str(share.amount),
        "remainder": str(diff.amount),
        "remainder_recipient": str(results[recipient].tenant_id),
    })
    return tuple(results)
