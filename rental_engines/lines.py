"""
Invoice line types shared by the utility calculator and invoice assembler.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rental_kernel.domain.values import Money, Quantity


class LineCode(str, Enum):
    """Well-known invoice line codes. Any other string is a valid code too."""

    RENT = "RENT"
    ELEC = "ELEC"  # Electricity, metered in kWh
    WATER = "WATER"  # Water, metered in m3
    WIFI = "WIFI"
    TRASH = "TRASH"


@dataclass(frozen=True)
class Line:
    """
    One invoice component.

    Contract:
        ``amount`` is signed: positive for a charge, negative for a credit
        or discount. Metered lines also carry ``quantity`` and
        ``unit_price``.
    """

    code: str
    amount: Money
    note: str | None = None
    quantity: Quantity | None = None
    unit_price: Money | None = None

    def __post_init__(self) -> None:
        if isinstance(self.code, LineCode):
            object.__setattr__(self, "code", self.code.value)
        if not self.code or not self.code.strip():
            raise ValueError("Line code is required")

    @classmethod
    def surcharge(cls, code: str, amount: Money, note: str | None = None) -> Line:
        """Fixed positive charge (wifi fee, trash fee, cleaning ...)."""
        return cls(code=code, amount=abs(amount), note=note)

    @classmethod
    def discount(cls, code: str, amount: Money, note: str | None = None) -> Line:
        """Fixed credit; the amount is stored negative."""
        return cls(code=code, amount=-abs(amount), note=note)

    @property
    def is_credit(self) -> bool:
        return self.amount.is_negative
