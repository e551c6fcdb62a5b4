"""
Tests for LeaseBillingService.

Covers:
- Monthly invoice generation and first-month pro-ration
- Meter rates and missing previous readings
- Invoice summaries
- Lease termination with deposit settlement
- Rejection of inactive leases
- Inverted-period policy
- Room sharing splits
"""

import pytest
from dataclasses import replace
from datetime import date
from decimal import Decimal

from rental_config.schema import BillingConfig
from rental_engines.apportionment import Participant, RemainderPolicy
from rental_engines.lines import Line
from rental_kernel.domain.values import Money, Period
from rental_kernel.exceptions import (
    InvalidCutDateError,
    InvalidMonthError,
    InvertedPeriodError,
    LeaseNotActiveError,
)
from rental_modules.lease.models import (
    InvoiceStatus,
    Lease,
    LeaseStatus,
    Meter,
    MeterReadings,
    MeterType,
    Reading,
)
from rental_modules.lease.service import LeaseBillingService


# =============================================================================
# Monthly invoices
# =============================================================================


class TestGenerateInvoice:
    def test_full_month_with_utilities_and_fees(
        self, billing_service, lease, room, electric_readings, water_readings,
    ):
        result = billing_service.generate_invoice(
            lease, room, "2024-06", electric=electric_readings, water=water_readings,
        )
        assert [l.code for l in result.lines] == ["RENT", "ELEC", "WATER", "WIFI", "TRASH"]
        assert result.rent == Money.of(2_500_000)
        assert result.line("ELEC").amount == Money.of(175_000)
        assert result.line("WATER").amount == Money.of(100_000)
        assert result.total == Money.of(2_905_000)
        assert result.days == 30

    def test_month_defaults_to_clock(self, billing_service, lease, room):
        result = billing_service.generate_invoice(lease, room)
        assert result.days == 30
        assert result.total == Money.of(2_630_000)

    def test_fees_skipped_when_zero(self, billing_service, lease, room):
        no_fees = replace(lease, wifi_fee=Money.zero(), trash_fee=Money.zero())
        result = billing_service.generate_invoice(no_fees, room, "2024-06")
        assert [l.code for l in result.lines] == ["RENT"]

    def test_discounts_appended(self, billing_service, lease, room):
        result = billing_service.generate_invoice(
            lease, room, "2024-06",
            discounts=(Line.discount("PROMO", Money.of(200_000), "Referral"),),
        )
        assert result.lines[-1].code == "PROMO"
        assert result.total == Money.of(2_430_000)

    def test_first_month_is_prorated(self, billing_service, room):
        new_lease = _new_lease(start=date(2024, 6, 10))
        result = billing_service.generate_invoice(new_lease, room, "2024-06")
        assert result.days == 21
        assert result.rent == Money.of(1_260_000)

    def test_first_month_full_when_proration_disabled(self, deterministic_clock, room):
        service = LeaseBillingService(
            config=BillingConfig(prorate_first_month=False), clock=deterministic_clock,
        )
        result = service.generate_invoice(_new_lease(start=date(2024, 6, 10)), room, "2024-06")
        assert result.rent == Money.of(1_800_000)

    def test_explicit_period(self, billing_service, room):
        result = billing_service.generate_invoice(
            _new_lease(start=date(2024, 1, 1), rent=3_000_000), room,
            period=Period.of("2024-01-25", "2024-02-05"),
        )
        assert result.subtotal == Money.of(1_091_212)
        assert result.total == Money.of(1_091_000)

    def test_rounding_step_from_config(self, deterministic_clock, room):
        service = LeaseBillingService(
            config=BillingConfig(rounding_step=Money.of(500)), clock=deterministic_clock,
        )
        result = service.generate_invoice(
            _new_lease(start=date(2024, 1, 1), rent=1_999_400), room, "2024-06",
        )
        assert result.total == Money.of(1_999_500)

    def test_invalid_month(self, billing_service, lease, room):
        with pytest.raises(InvalidMonthError):
            billing_service.generate_invoice(lease, room, "2024-13")

    def test_invoice_logs_carry_lease_context(self, billing_service, lease, room, captured_logs):
        billing_service.generate_invoice(lease, room, "2024-06")
        records = [r for r in captured_logs() if r["message"] == "lease_invoice_completed"]
        assert records[0]["lease_id"] == "10"
        assert records[0]["room_id"] == "1"
        assert records[0]["total"] == "2630000"


class TestMeters:
    def test_meter_without_price_uses_config_rate(self, deterministic_clock, lease, room):
        service = LeaseBillingService(
            config=BillingConfig(electric_rate=Money.of(4000)), clock=deterministic_clock,
        )
        meter = Meter(id=2, room_id=1, type=MeterType.ELECTRIC)
        readings = MeterReadings(
            meter=meter,
            previous=Reading(id=1, meter_id=2, month="2024-05", value=Decimal("100")),
            current=Reading(id=2, meter_id=2, month="2024-06", value=Decimal("150")),
        )
        result = service.generate_invoice(lease, room, "2024-06", electric=readings)
        assert result.line("ELEC").amount == Money.of(200_000)
        assert result.line("ELEC").unit_price == Money.of(4000)

    def test_missing_previous_reading_counts_from_zero(self, billing_service, lease, room, electric_meter):
        readings = MeterReadings(
            meter=electric_meter,
            current=Reading(id=3, meter_id=1, month="2024-06", value=Decimal("150")),
        )
        result = billing_service.generate_invoice(lease, room, "2024-06", electric=readings)
        assert result.line("ELEC").amount == Money.of(525_000)

    def test_float_reading_rejected(self):
        with pytest.raises(TypeError):
            Reading(id=1, meter_id=1, month="2024-06", value=150.0)


# =============================================================================
# Summaries and period bookkeeping
# =============================================================================


class TestSummaries:
    def test_summarize_invoice(
        self, billing_service, lease, room, electric_readings, water_readings,
    ):
        result = billing_service.generate_invoice(
            lease, room, "2024-06", electric=electric_readings, water=water_readings,
        )
        summary = billing_service.summarize_invoice(result, lease.id, date(2024, 6, 1))
        assert summary.month == "2024-06"
        assert summary.rent == Money.of(2_500_000)
        assert summary.electric_usage == Decimal("50")
        assert summary.electric_cost == Money.of(175_000)
        assert summary.water_usage == Decimal("5")
        assert summary.water_cost == Money.of(100_000)
        assert summary.other_fees == Money.of(130_000)
        assert summary.total == Money.of(2_905_000)
        assert summary.status is InvoiceStatus.UNPAID
        assert summary.amount_paid == Money.zero()

    def test_summary_without_utilities(self, billing_service, lease, room):
        result = billing_service.generate_invoice(lease, room, "2024-06")
        summary = billing_service.summarize_invoice(result, lease.id, "2024-06")
        assert summary.electric_usage is None
        assert summary.water_cost is None

    def test_next_invoice_period_start(self, billing_service, lease):
        assert billing_service.next_invoice_period_start(lease, None) == date(2023, 1, 15)
        assert billing_service.next_invoice_period_start(lease, "2024-06") == date(2024, 7, 1)

    def test_billing_period(self, billing_service, lease):
        assert billing_service.billing_period(lease) == Period.of("2024-06-01", "2024-07-01")


# =============================================================================
# Termination
# =============================================================================


class TestTerminateLease:
    def test_final_invoice_and_refund(
        self, billing_service, lease, room, electric_readings, water_readings,
    ):
        termination = billing_service.terminate_lease(
            lease, room, date(2024, 6, 1), date(2024, 6, 16),
            electric=electric_readings, water=water_readings,
        )
        assert termination.period == Period.of("2024-06-01", "2024-06-16")
        assert termination.invoice.rent == Money.of(1_250_000)
        assert termination.invoice.total == Money.of(1_655_000)
        assert termination.settlement.from_deposit == Money.of(1_655_000)
        assert termination.settlement.refund == Money.of(45_000)
        assert termination.settlement.collect_more == Money.zero()
        assert termination.settlement.deposit_remaining == Money.zero()

    def test_shortfall_is_collected(self, billing_service, lease, room):
        small_deposit = replace(lease, deposit=Money.of(1_000_000))
        termination = billing_service.terminate_lease(
            small_deposit, room, date(2024, 6, 1), date(2024, 6, 16),
        )
        # 1,250,000 rent + 130,000 fees
        assert termination.invoice.total == Money.of(1_380_000)
        assert termination.settlement.collect_more == Money.of(380_000)

    def test_same_day_move_out_rejected(self, billing_service, lease, room):
        with pytest.raises(InvertedPeriodError) as exc_info:
            billing_service.terminate_lease(lease, room, date(2024, 6, 16), date(2024, 6, 16))
        assert exc_info.value.code == "INVERTED_PERIOD"

    def test_move_out_before_start_rejected(self, billing_service, lease, room, captured_logs):
        with pytest.raises(InvertedPeriodError):
            billing_service.terminate_lease(lease, room, date(2024, 6, 16), date(2024, 6, 1))
        assert any(r["message"] == "lease_termination_rejected" for r in captured_logs())

    def test_terminated_lease_is_inactive(self, billing_service, lease, room):
        termination = billing_service.terminate_lease(
            lease, room, date(2024, 6, 1), date(2024, 6, 16),
        )
        assert termination.lease.status is LeaseStatus.INACTIVE
        assert termination.lease.end_date == date(2024, 6, 16)
        assert termination.lease.id == lease.id
        assert lease.is_active

    def test_terminating_twice_rejected(self, billing_service, lease, room):
        ended = billing_service.terminate_lease(
            lease, room, date(2024, 6, 1), date(2024, 6, 16),
        ).lease
        with pytest.raises(LeaseNotActiveError) as exc_info:
            billing_service.terminate_lease(ended, room, date(2024, 6, 1), date(2024, 6, 20))
        assert exc_info.value.code == "LEASE_NOT_ACTIVE"
        assert exc_info.value.lease_id == "10"


class TestInactiveLease:
    def test_invoice_rejected(self, billing_service, lease, room, captured_logs):
        ended = replace(lease, status=LeaseStatus.INACTIVE)
        with pytest.raises(LeaseNotActiveError) as exc_info:
            billing_service.generate_invoice(ended, room, month="2024-06")
        assert exc_info.value.status == "inactive"
        rejected = [r for r in captured_logs() if r["message"] == "lease_not_active"]
        assert rejected[0]["lease_id"] == "10"
        assert rejected[0]["level"] == "WARNING"

    def test_draft_still_available_for_inactive_lease(self, billing_service, lease, room, june):
        """Drafting is a pure input mapping; only invoicing checks status."""
        ended = replace(lease, status=LeaseStatus.INACTIVE)
        draft = billing_service.create_invoice_draft(ended, room, june)
        assert draft.monthly_rent == Money.of(2_500_000)


class TestInvertedPeriods:
    def test_inverted_period_billed_as_zero_rent(self, billing_service, lease, room):
        result = billing_service.generate_invoice(
            lease, room, period=Period.of("2024-06-30", "2024-06-10"),
        )
        assert result.rent == Money.zero()
        assert result.total == Money.of(130_000)

    def test_inverted_period_rejected_when_configured(self, deterministic_clock, lease, room):
        service = LeaseBillingService(
            config=BillingConfig(reject_inverted_periods=True), clock=deterministic_clock,
        )
        with pytest.raises(InvertedPeriodError) as exc_info:
            service.generate_invoice(lease, room, period=Period.of("2024-06-30", "2024-06-10"))
        assert exc_info.value.period_start == "2024-06-30"


# =============================================================================
# Room sharing
# =============================================================================


class TestRoomSharing:
    def test_rent_split(self, billing_service, shared_lease, june):
        shares = billing_service.split_rent_among_occupants(shared_lease, june)
        assert [(s.tenant_id, s.rent_share) for s in shares] == [
            ("A", Money.of(1_500_000)),
            ("B", Money.of(1_000_000)),
            ("C", Money.of(500_000)),
        ]

    def test_utility_split(
        self, billing_service, shared_lease, room, june, electric_readings, water_readings,
    ):
        invoice = billing_service.generate_invoice(
            shared_lease, room, "2024-06", electric=electric_readings, water=water_readings,
        )
        shares = billing_service.split_utilities_among_occupants(shared_lease, invoice, june)
        assert set(shares) == {"ELEC", "WATER"}
        assert [s.rent_share for s in shares["ELEC"]] == [
            Money.of(58_334), Money.of(58_333), Money.of(58_333),
        ]
        assert [s.rent_share for s in shares["WATER"]] == [
            Money.of(33_334), Money.of(33_333), Money.of(33_333),
        ]

    def test_utility_split_skips_unbilled_meters(self, billing_service, shared_lease, room, june):
        invoice = billing_service.generate_invoice(shared_lease, room, "2024-06")
        assert billing_service.split_utilities_among_occupants(shared_lease, invoice, june) == {}

    def test_remainder_policy_from_config(self, deterministic_clock, june):
        service = LeaseBillingService(
            config=BillingConfig(remainder_policy=RemainderPolicy.PRIMARY_OCCUPANT),
            clock=deterministic_clock,
        )
        lease = _new_lease(start=date(2024, 1, 1), rent=1_000_000, participants=(
            _participant("A", "2024-01-01"),
            _participant("B", "2024-01-01", primary=True),
            _participant("C", "2024-01-01"),
        ))
        shares = service.split_rent_among_occupants(lease, june)
        assert [s.rent_share for s in shares] == [
            Money.of(333_333), Money.of(333_334), Money.of(333_333),
        ]

    def test_lease_without_participants_bills_tenant(self, billing_service, lease, june):
        shares = billing_service.split_rent_among_occupants(lease, june)
        assert len(shares) == 1
        assert shares[0].tenant_id == 100
        assert shares[0].rent_share == Money.of(2_500_000)
        assert lease.number_of_people == 1

    def test_close_period_for_arrival(self, billing_service, june):
        closed, opened = billing_service.close_period_for_arrival(june, date(2024, 6, 11))
        assert closed == Period.of("2024-06-01", "2024-06-11")
        assert opened == Period.of("2024-06-11", "2024-07-01")

    def test_arrival_on_period_start_rejected(self, billing_service, june):
        with pytest.raises(InvalidCutDateError):
            billing_service.close_period_for_arrival(june, date(2024, 6, 1))


# =============================================================================
# Helpers
# =============================================================================


def _participant(tenant_id, join, primary=False):
    return Participant(tenant_id, join, is_primary=primary)


def _new_lease(start, rent=1_800_000, participants=()):
    return Lease(
        id=20,
        room_id=1,
        tenant_id=200,
        start_date=start,
        monthly_rent=Money.of(rent),
        deposit=Money.of(rent),
        participants=participants,
    )
