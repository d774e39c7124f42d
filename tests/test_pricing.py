"""Tests for makeeasy/pricing.py: tenure lookup, quotes and derived rental values."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

from makeeasy.lifecycle import BookingType, RentalStatus
from makeeasy.pricing import (
    AddOnSnapshot,
    billing_totals,
    can_request_early_closure,
    early_closure_charge,
    find_city_pricing,
    find_tenure_pricing,
    is_in_stock,
    planned_end_date,
    quote_rental,
    remaining_months,
    total_rental_amount,
)

from .factories import NOW, city_pricing_dict


def rental(**overrides) -> SimpleNamespace:
    base = dict(
        booking_type=BookingType.RENTAL,
        rental_status=RentalStatus.ACTIVE,
        early_closure_requested=False,
        rental_start_date=NOW,
        planned_end_date=NOW + timedelta(days=180),
        end_date=NOW + timedelta(days=180),
        selected_tenure=6,
        monthly_rent=Decimal("1000"),
        delivery_charge=Decimal("100"),
        selected_add_ons=[],
    )
    return SimpleNamespace(**{**base, **overrides})


def snapshot(monthly="50", one_time="20") -> AddOnSnapshot:
    return AddOnSnapshot(
        add_on_id=uuid4(),
        name="Stabilizer",
        monthly_charge=Decimal(monthly),
        one_time_charge=Decimal(one_time),
    )


# ---------------------------------------------------------------------------
# City / tenure resolution
# ---------------------------------------------------------------------------


class TestFindCityPricing:
    def test_match_is_case_insensitive(self):
        entry = find_city_pricing([city_pricing_dict(city="Kanpur")], "  kanpur ")
        assert entry is not None
        assert entry["city"] == "Kanpur"

    def test_unknown_city_returns_none(self):
        assert find_city_pricing([city_pricing_dict()], "Delhi") is None

    def test_empty_pricing_returns_none(self):
        assert find_city_pricing([], "Kanpur") is None


class TestIsInStock:
    def test_available_with_stock(self):
        assert is_in_stock(city_pricing_dict(stock=1)) is True

    def test_zero_stock(self):
        assert is_in_stock(city_pricing_dict(stock=0)) is False

    def test_unavailable_city(self):
        assert is_in_stock(city_pricing_dict(available=False, stock=5)) is False


class TestFindTenurePricing:
    def _entry(self, *months):
        return city_pricing_dict(
            tenures=[dict(months=m, monthly_rent=str(100 * m)) for m in months]
        )

    def test_exact_match_wins(self):
        assert find_tenure_pricing(self._entry(3, 6, 12), 6)["months"] == 6

    def test_nearest_tenure_is_used(self):
        # 8 is 2 away from 6 and 4 away from 12
        assert find_tenure_pricing(self._entry(3, 6, 12), 8)["months"] == 6

    def test_tie_resolves_to_first_listed(self):
        assert find_tenure_pricing(self._entry(3, 9), 6)["months"] == 3
        assert find_tenure_pricing(self._entry(9, 3), 6)["months"] == 9

    def test_no_tenures_returns_none(self):
        assert find_tenure_pricing(self._entry(), 6) is None


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------


class TestQuoteRental:
    def test_first_payment_breakdown(self):
        quote = quote_rental("1000", "2000", "100", [snapshot("50", "20")])
        assert quote.subtotal == Decimal("3170")
        assert quote.gst == Decimal("570.60")
        assert quote.total == Decimal("3740.60")

    def test_add_ons_accepted_as_stored_dicts(self):
        stored = snapshot().to_dict()
        quote = quote_rental(Decimal("1000"), Decimal("2000"), Decimal("100"), [stored])
        assert quote.add_ons_monthly == Decimal("50")
        assert quote.add_ons_one_time == Decimal("20")

    def test_missing_deposit_and_delivery_count_as_zero(self):
        quote = quote_rental("1000", None, None)
        assert quote.subtotal == Decimal("1000")
        assert quote.total == Decimal("1180.00")

    def test_summary_keys(self):
        summary = quote_rental("1000", "0", "0").as_summary()
        assert set(summary) == {
            "monthly_rent",
            "deposit",
            "delivery_charge",
            "add_ons_monthly",
            "add_ons_one_time",
            "subtotal",
            "gst",
            "total",
        }


class TestAddOnSnapshot:
    def test_to_dict_is_json_safe(self):
        data = snapshot().to_dict()
        assert all(isinstance(v, str) for v in data.values())


class TestPlannedEndDate:
    def test_calendar_months(self):
        start = datetime(2026, 1, 31, tzinfo=UTC)
        assert planned_end_date(start, 1) == datetime(2026, 2, 28, tzinfo=UTC)
        assert planned_end_date(start, 12) == datetime(2027, 1, 31, tzinfo=UTC)


class TestEarlyClosureCharge:
    def test_product_charge_wins(self):
        assert early_closure_charge("750", "1000") == Decimal("750")

    def test_falls_back_to_half_month_rent(self):
        assert early_closure_charge(None, "1000") == Decimal("500.00")
        assert early_closure_charge(0, "999") == Decimal("499.50")


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


class TestTotalRentalAmount:
    def test_rent_add_ons_and_delivery(self):
        booking = rental(selected_add_ons=[snapshot("50", "20").to_dict()])
        # 6 * 1000 + 6 * 50 + 20 + 100
        assert total_rental_amount(booking) == Decimal("6420")

    def test_service_booking_is_zero(self):
        assert total_rental_amount(rental(booking_type=BookingType.SERVICE)) == 0


class TestRemainingMonths:
    def test_partial_blocks_round_up(self):
        booking = rental(planned_end_date=NOW + timedelta(days=45))
        assert remaining_months(booking, NOW) == 2

    def test_exact_blocks(self):
        booking = rental(planned_end_date=NOW + timedelta(days=60))
        assert remaining_months(booking, NOW) == 2

    def test_past_end_is_zero(self):
        booking = rental(planned_end_date=NOW - timedelta(days=1))
        assert remaining_months(booking, NOW) == 0

    def test_not_started_is_zero(self):
        assert remaining_months(rental(rental_start_date=None), NOW) == 0

    def test_falls_back_to_end_date(self):
        booking = rental(planned_end_date=None, end_date=NOW + timedelta(days=10))
        assert remaining_months(booking, NOW) == 1


class TestCanRequestEarlyClosure:
    def test_refused_inside_first_month(self):
        assert can_request_early_closure(rental(), NOW + timedelta(days=20)) is False

    def test_allowed_after_first_month(self):
        assert can_request_early_closure(rental(), NOW + timedelta(days=31)) is True

    def test_refused_when_already_requested(self):
        booking = rental(early_closure_requested=True)
        assert can_request_early_closure(booking, NOW + timedelta(days=60)) is False

    def test_refused_when_not_active(self):
        booking = rental(rental_status=RentalStatus.PAUSED)
        assert can_request_early_closure(booking, NOW + timedelta(days=60)) is False

    def test_refused_before_start(self):
        booking = rental(rental_start_date=None)
        assert can_request_early_closure(booking, NOW + timedelta(days=60)) is False


class TestBillingTotals:
    def test_gst_on_rent_and_add_ons_late_fee_untaxed(self):
        add_on_total, gst, total = billing_totals(
            "1000", [{"charge": "50"}, {"charge": "30"}], late_fee="25"
        )
        assert add_on_total == Decimal("80")
        assert gst == Decimal("194.40")
        assert total == Decimal("1299.40")
