"""
Module: rental_engines.settlement
Responsibility:
    Settle the final invoice of a terminated lease against the deposit held
    for it.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``from_deposit + collect_more == total``.
    - ``from_deposit + refund == deposit_balance`` when the deposit covers
      the total.
    - ``deposit_remaining`` is always zero: the deposit is fully resolved
      at settlement time.

Failure modes:
    None.

Non-goals:
    - Rolling "advance balance" payment modes are tracked by the
      persistence layer, not here.
"""

from __future__ import annotations

from dataclasses import dataclass

from rental_engines.tracer import traced_engine
from rental_kernel.domain.values import Money
from rental_kernel.logging_config import get_logger

logger = get_logger("engines.settlement")


@dataclass(frozen=True)
class DepositSettlement:
    """Outcome of settling a final invoice against a deposit."""

    from_deposit: Money
    collect_more: Money
    refund: Money
    deposit_remaining: Money

    @property
    def is_even(self) -> bool:
        """Deposit matched the invoice exactly: nothing to collect or refund."""
        return self.collect_more.is_zero and self.refund.is_zero


@traced_engine("settlement", "1.0", fingerprint_fields=("total", "deposit_balance"))
def settle_with_deposit(total: Money, deposit_balance: Money) -> DepositSettlement:
    """
    Consume the deposit against ``total``.

    A deposit that covers the total is consumed for the total and the
    excess refunded. A short deposit is consumed entirely and the shortfall
    is collected from the occupant.
    """
    zero = Money.zero()
    if deposit_balance >= total:
        settlement = DepositSettlement(
            from_deposit=total,
            collect_more=zero,
            refund=deposit_balance - total,
            deposit_remaining=zero,
        )
    else:
        settlement = DepositSettlement(
            from_deposit=deposit_balance,
            collect_more=total - deposit_balance,
            refund=zero,
            deposit_remaining=zero,
        )

    logger.info("deposit_settled", extra={
        "total": str(total.amount),
        "deposit_balance": str(deposit_balance.amount),
        "from_deposit": str(settlement.from_deposit.amount),
        "collect_more": str(settlement.collect_more.amount),
        "refund": str(settlement.refund.amount),
    })
    return settlement
