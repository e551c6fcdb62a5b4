"""
Module: rental_engines.utilities
Responsibility:
    Convert meter-reading deltas and unit rates into utility cost lines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - One line per utility actually supplied, electricity before water.
    - ``cost = round(used * rate)`` with ROUND_HALF_UP to whole VND.
    - Readings are NOT sanity-checked: a decreasing meter yields a negative
      line. Plausibility checks belong to the caller.

Failure modes:
    None for well-typed inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from rental_engines.lines import Line, LineCode
from rental_engines.tracer import traced_engine
from rental_kernel.domain.values import Money, Quantity
from rental_kernel.logging_config import get_logger

logger = get_logger("engines.utilities")

KWH = "kWh"
CUBIC_METRE = "m3"


@dataclass(frozen=True)
class MeterUsage:
    """Previous and current reading of one meter plus its unit rate."""

    previous: Decimal
    current: Decimal
    rate: Money

    def __post_init__(self) -> None:
        for name in ("previous", "current"):
            value = getattr(self, name)
            if isinstance(value, float):
                raise TypeError(f"{name} reading must not be float")
            if not isinstance(value, Decimal):
                object.__setattr__(self, name, Decimal(str(value)))

    @property
    def used(self) -> Decimal:
        return self.current - self.previous


@dataclass(frozen=True)
class UtilityUsage:
    """Usage per utility type; a type left as None is not billed."""

    electric: MeterUsage | None = None
    water: MeterUsage | None = None


@dataclass(frozen=True)
class UtilityCharges:
    """Utility lines and their summed cost."""

    lines: tuple[Line, ...]
    total: Money


def _meter_line(code: LineCode, label: str, unit: str, usage: MeterUsage) -> Line:
    used = usage.used
    if used < 0:
        logger.warning("utility_reading_decreased", extra={
            "code": code.value,
            "previous": str(usage.previous),
            "current": str(usage.current),
        })
    amount = (usage.rate * used).round()
    return Line(
        code=code.value,
        amount=amount,
        note=f"{label} {used} {unit}",
        quantity=Quantity.of(used, unit),
        unit_price=usage.rate,
    )


@traced_engine("utilities", "1.0", fingerprint_fields=("usage",))
def calc_utilities(usage: UtilityUsage | None) -> UtilityCharges:
    """Cost lines for the supplied utility usage (electric, then water)."""
    lines: list[Line] = []
    if usage is not None:
        if usage.electric is not None:
            lines.append(_meter_line(LineCode.ELEC, "Electricity", KWH, usage.electric))
        if usage.water is not None:
            lines.append(_meter_line(LineCode.WATER, "Water", CUBIC_METRE, usage.water))

    total = sum((line.amount for line in lines), Money.zero())

    logger.debug("utilities_calculated", extra={
        "line_count": len(lines),
        "total": str(total.amount),
    })
    return UtilityCharges(lines=tuple(lines), total=total)
