"""
Rental pricing and the derived numbers shown on a rental.

Everything here is pure: callers pass the product's city pricing and the
resolved add-ons and get Decimals back. Money is rounded to paise only at the
edges (GST and totals), matching how amounts are stored.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable
from uuid import UUID

from makeeasy.dates import add_months, to_utc, utcnow
from makeeasy.lifecycle import BookingType, RentalStatus

GST_RATE = Decimal("0.18")
EARLY_CLOSURE_RENT_SHARE = Decimal("0.5")
# getRemainingMonths has always counted 30-day blocks, unlike planned_end_date
REMAINING_MONTH_DAYS = 30
CENT = Decimal("0.01")


def _money(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


@dataclass(frozen=True)
class AddOnSnapshot:
    """Add-on price frozen onto a booking at selection time."""

    add_on_id: UUID
    name: str
    monthly_charge: Decimal
    one_time_charge: Decimal

    @classmethod
    def from_add_on(cls, add_on: Any) -> AddOnSnapshot:
        return cls(
            add_on_id=add_on.id,
            name=add_on.name,
            monthly_charge=_money(add_on.monthly_charge),
            one_time_charge=_money(add_on.one_time_charge),
        )

    @classmethod
    def from_dict(cls, data: dict) -> AddOnSnapshot:
        return cls(
            add_on_id=UUID(str(data["add_on_id"])),
            name=data.get("name", ""),
            monthly_charge=_money(data.get("monthly_charge")),
            one_time_charge=_money(data.get("one_time_charge")),
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["add_on_id"] = str(self.add_on_id)
        data["monthly_charge"] = str(self.monthly_charge)
        data["one_time_charge"] = str(self.one_time_charge)
        return data


def _snapshots(add_ons: Iterable[Any]) -> list[AddOnSnapshot]:
    return [
        a if isinstance(a, AddOnSnapshot) else AddOnSnapshot.from_dict(a)
        for a in add_ons
    ]


# ---------------------------------------------------------------------------
# City / tenure resolution
# ---------------------------------------------------------------------------


def find_city_pricing(city_pricing: list[dict], city: str) -> dict | None:
    """Case-insensitive lookup of a product's pricing entry for `city`."""
    wanted = city.strip().lower()
    for entry in city_pricing or []:
        if str(entry.get("city", "")).strip().lower() == wanted:
            return entry
    return None


def is_in_stock(city_entry: dict) -> bool:
    if not city_entry.get("available", True):
        return False
    return int(city_entry.get("stock", 0)) > 0


def find_tenure_pricing(city_entry: dict, months: int) -> dict | None:
    """
    Exact month match wins. Otherwise the tenure with the smallest absolute
    month distance is used; on a tie the entry listed first wins.
    """
    tenures = city_entry.get("tenures") or []
    if not tenures:
        return None
    for tenure in tenures:
        if int(tenure["months"]) == months:
            return tenure
    return min(tenures, key=lambda t: abs(int(t["months"]) - months))


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RentalQuote:
    monthly_rent: Decimal
    deposit: Decimal
    delivery_charge: Decimal
    add_ons_monthly: Decimal
    add_ons_one_time: Decimal
    subtotal: Decimal
    gst: Decimal
    total: Decimal

    def as_summary(self) -> dict[str, Decimal]:
        return asdict(self)


def quote_rental(
    monthly_rent: Any,
    deposit: Any,
    delivery_charge: Any,
    add_ons: Iterable[Any] = (),
) -> RentalQuote:
    """First payment: deposit + first month + delivery + add-ons, plus GST."""
    snapshots = _snapshots(add_ons)
    rent = _money(monthly_rent)
    deposit_amount = _money(deposit)
    delivery = _money(delivery_charge)
    add_ons_monthly = sum((a.monthly_charge for a in snapshots), Decimal("0"))
    add_ons_one_time = sum((a.one_time_charge for a in snapshots), Decimal("0"))

    subtotal = deposit_amount + rent + add_ons_monthly + delivery + add_ons_one_time
    gst = (subtotal * GST_RATE).quantize(CENT)
    return RentalQuote(
        monthly_rent=rent,
        deposit=deposit_amount,
        delivery_charge=delivery,
        add_ons_monthly=add_ons_monthly,
        add_ons_one_time=add_ons_one_time,
        subtotal=subtotal,
        gst=gst,
        total=(subtotal + gst).quantize(CENT),
    )


def planned_end_date(start: datetime, tenure_months: int) -> datetime:
    return add_months(start, tenure_months)


def early_closure_charge(product_charge: Any, monthly_rent: Any) -> Decimal:
    """The product's own early-closure charge, or half a month's rent."""
    if product_charge:
        return _money(product_charge)
    return (_money(monthly_rent) * EARLY_CLOSURE_RENT_SHARE).quantize(CENT)


# ---------------------------------------------------------------------------
# Derived values on an existing booking
# ---------------------------------------------------------------------------


def total_rental_amount(booking: Any) -> Decimal:
    if booking.booking_type != BookingType.RENTAL:
        return Decimal("0")
    tenure = booking.selected_tenure or 0
    total = _money(booking.monthly_rent) * tenure
    for add_on in _snapshots(booking.selected_add_ons or []):
        total += add_on.monthly_charge * tenure + add_on.one_time_charge
    return total + _money(booking.delivery_charge)


def remaining_months(booking: Any, now: datetime | None = None) -> int:
    if booking.booking_type != BookingType.RENTAL or booking.rental_start_date is None:
        return 0
    now = to_utc(now or utcnow())
    end = to_utc(booking.planned_end_date or booking.end_date)
    if now >= end:
        return 0
    return math.ceil((end - now) / timedelta(days=REMAINING_MONTH_DAYS))


def can_request_early_closure(booking: Any, now: datetime | None = None) -> bool:
    if booking.rental_status != RentalStatus.ACTIVE:
        return False
    if booking.early_closure_requested:
        return False
    if booking.rental_start_date is None:
        return False
    now = to_utc(now or utcnow())
    return now >= add_months(to_utc(booking.rental_start_date), 1)


def billing_totals(
    rental_amount: Any, add_ons: Iterable[dict], late_fee: Any = 0
) -> tuple[Decimal, Decimal, Decimal]:
    """(add_on_total, gst, total_amount) for one monthly bill."""
    add_on_total = sum((_money(a.get("charge")) for a in add_ons), Decimal("0"))
    subtotal = _money(rental_amount) + add_on_total
    gst = (subtotal * GST_RATE).quantize(CENT)
    return add_on_total, gst, subtotal + gst + _money(late_fee)
