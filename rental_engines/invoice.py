"""
Module: rental_engines.invoice
Responsibility:
    Assemble rent, utility, surcharge and discount lines into an itemized
    invoice, apply currency rounding to the subtotal, and report the signed
    rounding delta.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Composes rental_engines.proration and rental_engines.utilities.

Invariants enforced:
    - Line order is fixed: RENT, ELEC, WATER, surcharges as given,
      discounts as given.
    - ``subtotal == sum(line.amount for line in lines)``.
    - ``total == round_half_away(subtotal / step) * step``.
    - ``rounding_delta == total - subtotal`` is surfaced, never absorbed.

Failure modes:
    - InvalidRoundingStepError when the rounding step is not positive.

Audit relevance:
    Callers persist ``total`` and ``lines`` verbatim; the rounding delta
    explains the difference between them.

Usage:
    from rental_engines.invoice import InvoiceDraft, build_invoice

    result = build_invoice(InvoiceDraft(
        room_id="101",
        period=Period.of("2024-06-01", "2024-07-01"),
        monthly_rent=Money.of(2_500_000),
        surcharges=(Line.surcharge("WIFI", Money.of(100_000)),),
    ))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from rental_engines.lines import Line, LineCode
from rental_engines.period import days_between
from rental_engines.proration import calc_rent_by_period
from rental_engines.tracer import traced_engine
from rental_engines.utilities import UtilityUsage, calc_utilities
from rental_kernel.domain.values import Money, Period
from rental_kernel.exceptions import InvalidRoundingStepError
from rental_kernel.logging_config import get_logger

logger = get_logger("engines.invoice")

DEFAULT_ROUNDING_STEP = Money.of(1000)


@dataclass(frozen=True)
class InvoiceDraft:
    """
    Everything needed to price one room for one billing period.

    Contract:
        ``surcharges`` carry positive amounts and ``discounts`` negative
        ones; both are copied into the invoice unmodified.
    """

    room_id: str
    period: Period
    monthly_rent: Money
    utilities: UtilityUsage | None = None
    surcharges: tuple[Line, ...] = field(default_factory=tuple)
    discounts: tuple[Line, ...] = field(default_factory=tuple)
    rounding_step: Money = DEFAULT_ROUNDING_STEP

    def __post_init__(self) -> None:
        object.__setattr__(self, "surcharges", tuple(self.surcharges))
        object.__setattr__(self, "discounts", tuple(self.discounts))


@dataclass(frozen=True)
class InvoiceResult:
    """
    Assembled invoice.

    Guarantees:
        - ``subtotal`` is the exact sum of line amounts.
        - ``total`` is a multiple of the rounding step.
        - ``subtotal + rounding_delta == total``.
    """

    lines: tuple[Line, ...]
    subtotal: Money
    rounding_delta: Money
    total: Money
    days: int

    def line(self, code: str | LineCode) -> Line | None:
        """First line carrying ``code``, if any."""
        wanted = code.value if isinstance(code, LineCode) else code
        return next((l for l in self.lines if l.code == wanted), None)

    @property
    def rent(self) -> Money:
        rent_line = self.line(LineCode.RENT)
        return rent_line.amount if rent_line else Money.zero()

    @property
    def other_fees(self) -> Money:
        """Sum of every line that is neither rent nor metered utility."""
        metered = {LineCode.RENT.value, LineCode.ELEC.value, LineCode.WATER.value}
        return sum(
            (l.amount for l in self.lines if l.code not in metered),
            Money.zero(),
        )


def round_to_step(amount: Money, step: Money = DEFAULT_ROUNDING_STEP) -> tuple[Money, Money]:
    """
    Round ``amount`` to the nearest multiple of ``step``.

    Ties round away from zero.

    Returns:
        ``(rounded, delta)`` where ``delta = rounded - amount``.

    Raises:
        InvalidRoundingStepError: if ``step`` is zero or negative.
    """
    if not step.is_positive:
        raise InvalidRoundingStepError(str(step.amount))
    units = (amount.amount / step.amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    rounded = Money.of(units * step.amount)
    return rounded, rounded - amount


@traced_engine(
    "invoice", "1.0",
    fingerprint_fields=("draft",),
)
def build_invoice(draft: InvoiceDraft) -> InvoiceResult:
    """
    Build the itemized, rounded invoice for ``draft``.

    Postconditions:
        Lines are RENT, utility lines, surcharges, discounts in that order;
        subtotal, rounding delta and total satisfy the class invariants.
    Raises:
        InvalidRoundingStepError: if the draft's rounding step is not positive.
    """
    logger.info("invoice_build_started", extra={
        "room_id": draft.room_id,
        "period_start": draft.period.start.isoformat(),
        "period_end": draft.period.end.isoformat(),
        "monthly_rent": str(draft.monthly_rent.amount),
        "surcharge_count": len(draft.surcharges),
        "discount_count": len(draft.discounts),
    })

    days = days_between(draft.period)
    rent = calc_rent_by_period(draft.period, draft.monthly_rent)
    lines: list[Line] = [
        Line(code=LineCode.RENT.value, amount=rent, note=f"Rent ({days} days)"),
    ]
    lines.extend(calc_utilities(draft.utilities).lines)
    lines.extend(draft.surcharges)
    lines.extend(draft.discounts)

    subtotal = sum((l.amount for l in lines), Money.zero())
    total, delta = round_to_step(subtotal, draft.rounding_step)

    logger.info("invoice_build_completed", extra={
        "room_id": draft.room_id,
        "line_count": len(lines),
        "days": days,
        "subtotal": str(subtotal.amount),
        "rounding_delta": str(delta.amount),
        "total": str(total.amount),
    })

    return InvoiceResult(
        lines=tuple(lines),
        subtotal=subtotal,
        rounding_delta=delta,
        total=total,
        days=days,
    )
