"""
Typed Exception Hierarchy for the Rental Kernel.

Every error the engines and services raise has a TYPED exception class
(catch by type, not message), a machine-readable ``code`` attribute, and
structured data attributes instead of a bare message string.

Example:
    try:
        first, second = split_at(period, arrival)
    except InvalidCutDateError as e:
        log.warning("bad cut date", extra={"cut_date": e.cut_date})
        api_response(code=e.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    RentalKernelError (base)
    |
    +-- PeriodError
    |   +-- InvalidCutDateError
    |   +-- InvertedPeriodError
    |   +-- InvalidMonthError
    |
    +-- BillingError
    |   +-- InvalidRoundingStepError
    |   +-- LeaseNotActiveError
    |
    +-- ConfigError
        +-- InvalidConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                    | When Raised
----------------|-------------------------|---------------------------------------
Period          | INVALID_CUT_DATE        | split_at cut date outside (start, end]
                | INVERTED_PERIOD         | Period shorter than one day where one
                |                         | is required (lease termination, strict
                |                         | config)
                | INVALID_MONTH           | Month string is not YYYY-MM
----------------|-------------------------|---------------------------------------
Billing         | INVALID_ROUNDING_STEP   | Rounding step is zero or negative
                | LEASE_NOT_ACTIVE        | Invoicing or terminating an inactive
                |                         | lease
----------------|-------------------------|---------------------------------------
Config          | INVALID_CONFIG          | Unknown key or bad value in config
"""


class RentalKernelError(Exception):
    """
    Base exception for all rental kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "RENTAL_KERNEL_ERROR"


# Period-related exceptions


class PeriodError(RentalKernelError):
    """Base exception for billing-period errors."""

    code: str = "PERIOD_ERROR"


class InvalidCutDateError(PeriodError):
    """Cut date does not lie strictly inside the period being split."""

    code: str = "INVALID_CUT_DATE"

    def __init__(self, period_start: str, period_end: str, cut_date: str):
        self.period_start = period_start
        self.period_end = period_end
        self.cut_date = cut_date
        super().__init__(
            f"Cut date {cut_date} must lie within "
            f"({period_start}, {period_end}]"
        )


class InvertedPeriodError(PeriodError):
    """Period covers less than one day where a billable period is required."""

    code: str = "INVERTED_PERIOD"

    def __init__(self, period_start: str, period_end: str):
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"Period {period_start} to {period_end} must cover at least one day"
        )


class InvalidMonthError(PeriodError):
    """Month designator could not be parsed."""

    code: str = "INVALID_MONTH"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid month {value!r}: expected YYYY-MM")


# Billing exceptions


class BillingError(RentalKernelError):
    """Base exception for invoice assembly errors."""

    code: str = "BILLING_ERROR"


class InvalidRoundingStepError(BillingError):
    """Rounding step must be a positive amount."""

    code: str = "INVALID_ROUNDING_STEP"

    def __init__(self, step: str):
        self.step = step
        super().__init__(f"Rounding step must be positive, got {step}")


class LeaseNotActiveError(BillingError):
    """Lease has already ended and can no longer be invoiced or terminated."""

    code: str = "LEASE_NOT_ACTIVE"

    def __init__(self, lease_id: str, status: str):
        self.lease_id = lease_id
        self.status = status
        super().__init__(f"Lease {lease_id} is {status}, expected active")


# Configuration exceptions


class ConfigError(RentalKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class InvalidConfigError(ConfigError):
    """Configuration document contains an unknown key or an invalid value."""

    code: str = "INVALID_CONFIG"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid billing configuration for {key!r}: {reason}")
