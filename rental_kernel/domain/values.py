"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the foundational value types for all invoicing computations:
    Money, Quantity, and Period. These replace primitive types (Decimal,
    str, date pairs) wherever billing data appears in engine logic.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine and module. No outward dependencies.

Invariants enforced:
    - All monetary amounts use Money value objects (never raw Decimal/float)
    - Money is denominated in whole VND; ``round()`` quantizes to the unit
      with round-half-away-from-zero
    - Period boundaries are calendar dates, never timestamps

Failure modes:
    - ValueError on construction with invalid amounts, units or dates
    - TypeError when a float or datetime reaches a constructor
    - TypeError when Money operations mix incompatible types
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

VND = "VND"

# VND has no fractional subunit in practice.
_WHOLE_UNIT = Decimal("1")


def _to_decimal(value: Decimal | int | str, label: str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        raise TypeError(f"{label} must not be float, got {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid {label}: {value}") from e


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object, in VND.

    Contract:
        Wraps a Decimal amount. Intermediate values (after division) may
        carry fractions; engines call ``round()`` before surfacing a value.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - amount is always a Decimal (never float)
        - ``round()`` yields a whole-unit amount (ROUND_HALF_UP, which rounds
          ties away from zero)

    Non-goals:
        - Does NOT carry a currency; the engines are single-currency
        - Does NOT auto-round -- callers must explicitly call .round()
    """

    amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _to_decimal(self.amount, "amount"))

    @classmethod
    def of(cls, amount: Decimal | str | int) -> Money:
        """
        Factory method for creating Money.

        Raises:
            TypeError: If amount is a float.
            ValueError: If amount cannot be converted to Decimal.
        """
        return cls(amount=_to_decimal(amount, "amount"))

    @classmethod
    def zero(cls) -> Money:
        """Create a zero amount."""
        return cls(amount=Decimal("0"))

    @property
    def currency(self) -> str:
        return VND

    @property
    def is_zero(self) -> bool:
        """Check if amount is zero."""
        return self.amount == Decimal("0")

    @property
    def is_positive(self) -> bool:
        """Check if amount is positive."""
        return self.amount > Decimal("0")

    @property
    def is_negative(self) -> bool:
        """Check if amount is negative."""
        return self.amount < Decimal("0")

    @property
    def is_whole(self) -> bool:
        """True if the amount carries no fractional part."""
        return self.amount == self.amount.to_integral_value()

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """
        Round to whole VND.

        Postconditions:
            - Returns a new Money whose amount is integral.
            - Original Money is unchanged (immutable).
        """
        rounded = self.amount.quantize(_WHOLE_UNIT, rounding=rounding)
        return Money(amount=rounded)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(amount=self.amount + other.amount)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(amount=self.amount - other.amount)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount)

    def __abs__(self) -> Money:
        return Money(amount=abs(self.amount))

    def __mul__(self, factor: Decimal | int | str) -> Money:
        """Multiply by a scalar."""
        if isinstance(factor, (int, str)) and not isinstance(factor, bool):
            factor = Decimal(str(factor))
        if not isinstance(factor, Decimal):
            return NotImplemented
        return Money(amount=self.amount * factor)

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __truediv__(self, divisor: Decimal | int | str) -> Money:
        """Divide by a scalar. The result is NOT rounded."""
        if isinstance(divisor, (int, str)) and not isinstance(divisor, bool):
            divisor = Decimal(str(divisor))
        if not isinstance(divisor, Decimal):
            return NotImplemented
        return Money(amount=self.amount / divisor)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {VND}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r})"


@dataclass(frozen=True, slots=True)
class Quantity:
    """
    Numeric quantity with unit value object.

    Contract:
        Pairs a Decimal value with its unit of measure. Used for metered
        consumption (kWh of electricity, m3 of water).

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - value is always Decimal (never float)
        - unit is always a non-empty, stripped string

    Non-goals:
        - Does NOT perform arithmetic or unit conversion; consumption is
          computed on the readings and recorded here once
    """

    value: Decimal
    unit: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _to_decimal(self.value, "quantity value"))
        if not self.unit or not self.unit.strip():
            raise ValueError("Quantity unit is required")
        object.__setattr__(self, "unit", self.unit.strip())

    @classmethod
    def of(cls, value: Decimal | str | int, unit: str) -> Quantity:
        """Factory method for creating Quantity."""
        return cls(value=_to_decimal(value, "quantity value"), unit=unit)

    def __str__(self) -> str:
        return f"{self.value} {self.unit}"

    def __repr__(self) -> str:
        return f"Quantity({self.value!r}, {self.unit!r})"


def _to_date(value: date | str, label: str) -> date:
    # datetime is a date subclass; time-of-day never belongs in a Period.
    if isinstance(value, datetime):
        raise TypeError(f"Period {label} must be a calendar date, got datetime {value!r}")
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise ValueError(f"Invalid period {label}: {value!r}") from e
    raise TypeError(f"Period {label} must be a date or ISO string, got {type(value)}")


@dataclass(frozen=True, slots=True)
class Period:
    """
    Half-open calendar date range ``[start, end)``.

    Contract:
        ``start`` is inclusive, ``end`` is exclusive. Accepts ``date``
        objects or ISO ``YYYY-MM-DD`` strings.

    Guarantees:
        - Immutable and hashable
        - Both boundaries are ``datetime.date`` (never ``datetime``)

    Non-goals:
        - Does NOT reject ``end < start``; engines treat an inverted period
          as zero days and callers decide whether to reject it.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _to_date(self.start, "start"))
        object.__setattr__(self, "end", _to_date(self.end, "end"))

    @classmethod
    def of(cls, start: date | str, end: date | str) -> Period:
        return cls(start=start, end=end)

    @property
    def is_inverted(self) -> bool:
        """True if end falls before start."""
        return self.end < self.start

    @property
    def is_empty(self) -> bool:
        """True if the period covers no day at all."""
        return self.end <= self.start

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"
