"""
Module: rental_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    calculation engine sub-modules.  This is the canonical import surface
    for higher layers (rental_modules).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import rental_kernel (and sibling engine modules).
    MUST NOT import rental_modules or rental_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates must be passed in as explicit parameters.
    - Decimal-only arithmetic: all monetary amounts use ``Money``; floats
      are rejected.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine entry point is traced via the ``@traced_engine`` decorator
    (see ``rental_engines.tracer``), emitting RENTAL_ENGINE_TRACE log
    records that include engine name, version, input fingerprint, and
    duration.

Usage:
    from rental_engines.invoice import InvoiceDraft, build_invoice
    from rental_engines.settlement import settle_with_deposit
    from rental_engines.apportionment import calculate_pro_rata_rent
"""

from rental_kernel.logging_config import get_logger

logger = get_logger("engines")

from rental_engines.apportionment import (
    Participant,
    ProRataResult,
    RemainderPolicy,
    active_participant_count,
    calculate_pro_rata_rent,
    calculate_pro_rata_utilities,
    has_multiple_occupants,
    is_active_in_period,
    primary_participant,
    sub_participants,
)
from rental_engines.invoice import (
    DEFAULT_ROUNDING_STEP,
    InvoiceDraft,
    InvoiceResult,
    build_invoice,
    round_to_step,
)
from rental_engines.lines import Line, LineCode
from rental_engines.period import (
    days_between,
    days_in_month,
    is_full_month,
    last_day_of_month,
    month_period,
    next_period_start,
    parse_month,
    period_for_new_lease,
    split_at,
    split_period_by_months,
)
from rental_engines.proration import RentFragment, calc_rent_by_period, calc_rent_fragments
from rental_engines.settlement import DepositSettlement, settle_with_deposit
from rental_engines.tracer import traced_engine
from rental_engines.utilities import MeterUsage, UtilityCharges, UtilityUsage, calc_utilities

__all__ = [
    # Apportionment
    "Participant",
    "ProRataResult",
    "RemainderPolicy",
    "active_participant_count",
    "calculate_pro_rata_rent",
    "calculate_pro_rata_utilities",
    "has_multiple_occupants",
    "is_active_in_period",
    "primary_participant",
    "sub_participants",
    # Invoice
    "DEFAULT_ROUNDING_STEP",
    "InvoiceDraft",
    "InvoiceResult",
    "Line",
    "LineCode",
    "build_invoice",
    "round_to_step",
    # Period
    "days_between",
    "days_in_month",
    "is_full_month",
    "last_day_of_month",
    "month_period",
    "next_period_start",
    "parse_month",
    "period_for_new_lease",
    "split_at",
    "split_period_by_months",
    # Proration
    "RentFragment",
    "calc_rent_by_period",
    "calc_rent_fragments",
    # Settlement
    "DepositSettlement",
    "settle_with_deposit",
    # Utilities
    "MeterUsage",
    "UtilityCharges",
    "UtilityUsage",
    "calc_utilities",
    # Tracing
    "traced_engine",
]
