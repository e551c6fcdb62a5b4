"""
Billing configuration schema.

Frozen dataclass describing the house rules a landlord bills by: utility
unit rates, fixed monthly fees, invoice rounding, and the apportionment
remainder policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Self

from rental_engines.apportionment import RemainderPolicy
from rental_kernel.domain.values import Money
from rental_kernel.logging_config import get_logger

logger = get_logger("config.schema")


@dataclass(frozen=True)
class BillingConfig:
    """Configuration schema for rental invoicing."""

    # Invoice totals are rounded to a multiple of this step
    rounding_step: Money = Money.of(1000)

    # Default unit rates for meters that do not carry their own
    electric_rate: Money = Money.of(3500)  # per kWh
    water_rate: Money = Money.of(20000)  # per m3

    # Fixed monthly surcharges
    wifi_fee: Money = Money.of(100000)
    trash_fee: Money = Money.of(30000)

    # Bill a lease's first month from its start date instead of the 1st
    prorate_first_month: bool = True

    remainder_policy: RemainderPolicy = RemainderPolicy.FIRST_LISTED

    # Engines zero an inverted period; the service can reject it instead
    reject_inverted_periods: bool = False

    def __post_init__(self) -> None:
        if not self.rounding_step.is_positive:
            raise ValueError("rounding_step must be positive")
        for name in ("electric_rate", "water_rate", "wifi_fee", "trash_fee"):
            if getattr(self, name).is_negative:
                raise ValueError(f"{name} cannot be negative")
        object.__setattr__(self, "remainder_policy", RemainderPolicy(self.remainder_policy))

        logger.debug(
            "billing_config_initialized",
            extra={
                "rounding_step": str(self.rounding_step.amount),
                "electric_rate": str(self.electric_rate.amount),
                "water_rate": str(self.water_rate.amount),
                "remainder_policy": self.remainder_policy.value,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the standard house defaults."""
        return cls()

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-serializable representation."""
        return {
            "rounding_step": str(self.rounding_step.amount),
            "electric_rate": str(self.electric_rate.amount),
            "water_rate": str(self.water_rate.amount),
            "wifi_fee": str(self.wifi_fee.amount),
            "trash_fee": str(self.trash_fee.amount),
            "prorate_first_month": self.prorate_first_month,
            "remainder_policy": self.remainder_policy.value,
            "reject_inverted_periods": self.reject_inverted_periods,
        }
