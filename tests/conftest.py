"""
Pytest fixtures for the rental invoicing test suite.

Provides:
- Structured logging setup and log capture
- Deterministic clock
- Common rooms, leases, meters and readings
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from rental_config.schema import BillingConfig
from rental_engines.apportionment import Participant
from rental_kernel.domain.clock import DeterministicClock
from rental_kernel.domain.values import Money, Period
from rental_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from rental_modules.lease.models import (
    Lease,
    Meter,
    MeterReadings,
    MeterType,
    Reading,
    Room,
)
from rental_modules.lease.service import LeaseBillingService


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture rental_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            build_invoice(draft)
            logs = captured_logs()
            assert any(r["message"] == "invoice_build_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("rental_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Clock fixed at 2024-06-15 12:00 UTC."""
    return DeterministicClock(datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc))


# =============================================================================
# Record fixtures
# =============================================================================


@pytest.fixture
def june():
    return Period.of("2024-06-01", "2024-07-01")


@pytest.fixture
def room():
    return Room(
        id=1,
        name="Room 01",
        base_rent=Money.of(1_800_000),
        deposit=Money.of(1_800_000),
    )


@pytest.fixture
def lease():
    return Lease(
        id=10,
        room_id=1,
        tenant_id=100,
        start_date=date(2023, 1, 15),
        monthly_rent=Money.of(2_500_000),
        deposit=Money.of(1_700_000),
        wifi_fee=Money.of(100_000),
        trash_fee=Money.of(30_000),
    )


@pytest.fixture
def shared_lease():
    """Lease shared by three occupants arriving on the 1st, 11th and 21st of June."""
    return Lease(
        id=11,
        room_id=1,
        tenant_id=100,
        start_date=date(2024, 6, 1),
        monthly_rent=Money.of(3_000_000),
        deposit=Money.of(3_000_000),
        participants=(
            Participant("A", date(2024, 6, 1), is_primary=True),
            Participant("B", date(2024, 6, 11)),
            Participant("C", date(2024, 6, 21)),
        ),
    )


@pytest.fixture
def electric_meter():
    return Meter(id=1, room_id=1, type=MeterType.ELECTRIC, unit_price=Money.of(3500))


@pytest.fixture
def water_meter():
    return Meter(id=9, room_id=1, type=MeterType.WATER, unit_price=Money.of(20000))


@pytest.fixture
def electric_readings(electric_meter):
    """50 kWh used."""
    return MeterReadings(
        meter=electric_meter,
        previous=Reading(id=1, meter_id=1, month="2024-05", value=Decimal("100")),
        current=Reading(id=3, meter_id=1, month="2024-06", value=Decimal("150")),
    )


@pytest.fixture
def water_readings(water_meter):
    """5 m3 used."""
    return MeterReadings(
        meter=water_meter,
        previous=Reading(id=2, meter_id=9, month="2024-05", value=Decimal("10")),
        current=Reading(id=4, meter_id=9, month="2024-06", value=Decimal("15")),
    )


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def billing_config():
    return BillingConfig.with_defaults()


@pytest.fixture
def billing_service(billing_config, deterministic_clock):
    return LeaseBillingService(config=billing_config, clock=deterministic_clock)
