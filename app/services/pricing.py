"""
Pricing engine.

Pure functions that turn booking / order inputs into a ``PricingBreakdown``.
Nothing here touches the database or the clock: the only date arithmetic is
the nights-between-dates computation for rooms.

Every published monetary field is rounded to cents (half-up), and
``total_amount`` is always assembled from the rounded fields so that
``total_amount == subtotal + tax + service_charge + delivery_fee - discount``
holds exactly.
"""

import math
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Callable, Dict, Iterable, Mapping

from app.core.exceptions import ValidationError
from app.models.order import OrderType
from app.schemas.pricing import PricingBreakdown

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

TAX_RATE = Decimal("0.10")
ROOM_DEPOSIT_RATE = Decimal("0.20")
TABLE_DEPOSIT_RATE = Decimal("0")
GARDEN_DEPOSIT_RATE = Decimal("0.30")
DELIVERY_FEE = Decimal("5.00")

DEFAULT_TABLE_DURATION = 2
MIN_TABLE_DURATION = 1
MAX_TABLE_DURATION = 6

SECONDS_PER_DAY = 24 * 60 * 60


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_money(value) -> Decimal:
    """Round a Decimal to cents, half-up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _amount(value, field: str) -> Decimal:
    """Coerce a rate / price / fee to Decimal and reject negatives."""
    if value is None:
        raise ValidationError(f"{field} is required", details={"field": field})
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number", details={"field": field})
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number", details={"field": field})
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative", details={"field": field})
    return amount


def _count(value, field: str, minimum: int = 1) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be a whole number", details={"field": field})
    if value < minimum:
        raise ValidationError(f"{field} must be at least {minimum}", details={"field": field})
    return value


def _check_capacity(guest_count: int, capacity: int, resource: str) -> None:
    if guest_count > capacity:
        raise ValidationError(
            f"{resource} capacity is {capacity} guests",
            details={"guest_count": guest_count, "capacity": capacity},
        )


def _tax_rate_percent() -> Decimal:
    return (TAX_RATE * 100).quantize(CENT)


def nights_between(check_in, check_out) -> int:
    """Whole nights between two dates, rounded up, never less than one."""
    if isinstance(check_in, datetime) != isinstance(check_out, datetime):
        raise ValidationError("Check-in and check-out must both be dates or both be datetimes")
    if isinstance(check_in, datetime) and (check_in.tzinfo is None) != (check_out.tzinfo is None):
        raise ValidationError("Check-in and check-out must both carry a timezone or neither")
    if not isinstance(check_in, date) or not isinstance(check_out, date):
        raise ValidationError("Check-in and check-out must be dates")
    if check_out <= check_in:
        raise ValidationError("Check-out date must be after check-in date")
    seconds = (check_out - check_in).total_seconds()
    return max(1, math.ceil(seconds / SECONDS_PER_DAY))


def _hour_of(value, field: str) -> int:
    """Hour component of an ``HH:MM`` string or ``time``; minutes are ignored."""
    if isinstance(value, time):
        return value.hour
    if not isinstance(value, str) or ":" not in value:
        raise ValidationError(f"{field} must be in HH:MM format", details={"field": field})
    hours, _, minutes = value.strip().partition(":")
    if not (hours.isdigit() and minutes.isdigit()):
        raise ValidationError(f"{field} must be in HH:MM format", details={"field": field})
    hour, minute = int(hours), int(minutes)
    if hour > 23 or minute > 59:
        raise ValidationError(f"{field} is not a valid time of day", details={"field": field})
    return hour


def garden_hours(start_time, end_time, minimum_hours: int) -> int:
    """Billable garden hours: ``max(end_hour - start_hour, minimum_hours)``.

    Only the hour component of each time is used, so 18:00-22:30 bills as 4 hours.
    """
    minimum_hours = _count(minimum_hours, "minimum_hours")
    start_hour = _hour_of(start_time, "start_time")
    end_hour = _hour_of(end_time, "end_time")
    return max(end_hour - start_hour, minimum_hours)


def clamp_table_duration(duration_hours) -> int:
    """Requested hours clamped to 1-6, so zero or negative values bill one hour."""
    if duration_hours is None:
        return DEFAULT_TABLE_DURATION
    if isinstance(duration_hours, bool) or not isinstance(duration_hours, int):
        raise ValidationError("duration must be a whole number", details={"field": "duration"})
    return min(max(duration_hours, MIN_TABLE_DURATION), MAX_TABLE_DURATION)


def _breakdown(
    subtotal: Decimal,
    deposit_rate: Decimal,
    *,
    service_charge: Decimal = ZERO,
    delivery_fee: Decimal = ZERO,
    unit_rate=None,
    units=None,
) -> PricingBreakdown:
    subtotal = to_money(subtotal)
    tax = to_money(subtotal * TAX_RATE)
    service_charge = to_money(service_charge)
    delivery_fee = to_money(delivery_fee)
    total = subtotal + tax + service_charge + delivery_fee
    return PricingBreakdown(
        subtotal=subtotal,
        tax=tax,
        tax_rate=_tax_rate_percent(),
        service_charge=service_charge,
        discount=ZERO,
        deposit=to_money(total * deposit_rate),
        delivery_fee=delivery_fee,
        total_amount=total,
        unit_rate=to_money(unit_rate) if unit_rate is not None else None,
        units=units,
    )


# ---------------------------------------------------------------------------
# Pricing per kind
# ---------------------------------------------------------------------------


def price_room_booking(
    rate_per_night,
    check_in,
    check_out,
    room_count: int = 1,
    guest_count: int = 1,
    room_capacity: int = 1,
) -> PricingBreakdown:
    rate = _amount(rate_per_night, "rate_per_night")
    room_count = _count(room_count, "room_count")
    guest_count = _count(guest_count, "guest_count")
    nights = nights_between(check_in, check_out)
    _check_capacity(guest_count, room_capacity, "Room")

    return _breakdown(
        rate * nights * room_count,
        ROOM_DEPOSIT_RATE,
        unit_rate=rate,
        units=nights,
    )


def price_table_booking(
    minimum_spend,
    duration_hours=None,
    guest_count: int = 1,
    table_capacity: int = 1,
) -> PricingBreakdown:
    minimum_spend = _amount(minimum_spend, "minimum_spend")
    guest_count = _count(guest_count, "guest_count")
    _check_capacity(guest_count, table_capacity, "Table")
    duration = clamp_table_duration(duration_hours)

    return _breakdown(
        minimum_spend * duration,
        TABLE_DEPOSIT_RATE,
        unit_rate=minimum_spend,
        units=duration,
    )


def price_garden_booking(
    price_per_hour,
    minimum_hours,
    start_time,
    end_time,
    cleaning_fee=0,
    guest_count: int = 1,
    garden_capacity: int = 1,
) -> PricingBreakdown:
    rate = _amount(price_per_hour, "price_per_hour")
    cleaning_fee = _amount(cleaning_fee or 0, "cleaning_fee")
    guest_count = _count(guest_count, "guest_count")
    _check_capacity(guest_count, garden_capacity, "Garden")
    hours = garden_hours(start_time, end_time, minimum_hours)

    # Cleaning fee is carried as the service charge so the stored total stays
    # subtotal + tax + service_charge - discount.
    return _breakdown(
        rate * hours,
        GARDEN_DEPOSIT_RATE,
        service_charge=cleaning_fee,
        unit_rate=rate,
        units=hours,
    )


def _line_value(item: Any, field: str):
    if isinstance(item, Mapping):
        return item.get(field)
    return getattr(item, field, None)


def price_order(line_items: Iterable[Any], order_type) -> PricingBreakdown:
    """Price an order from ``[{unit_price, quantity}, ...]`` (dicts or objects)."""
    try:
        order_type = OrderType(order_type)
    except ValueError:
        raise ValidationError(f"Invalid order type: {order_type}")

    items = list(line_items or [])
    if not items:
        raise ValidationError("Order must have at least one item")

    subtotal = ZERO
    for index, item in enumerate(items):
        unit_price = _amount(_line_value(item, "unit_price"), f"items[{index}].unit_price")
        quantity = _count(_line_value(item, "quantity"), f"items[{index}].quantity")
        subtotal += unit_price * quantity

    delivery_fee = DELIVERY_FEE if order_type == OrderType.delivery else ZERO
    return _breakdown(subtotal, Decimal("0"), delivery_fee=delivery_fee)


PRICERS: Dict[str, Callable[..., PricingBreakdown]] = {
    "room": price_room_booking,
    "table": price_table_booking,
    "garden": price_garden_booking,
    "order": price_order,
}


def compute_pricing(kind, params: Mapping[str, Any]) -> PricingBreakdown:
    """Dispatch to the pricer for ``kind`` (room, table, garden, order)."""
    kind = getattr(kind, "value", kind)
    pricer = PRICERS.get(kind)
    if pricer is None:
        raise ValidationError(f"Unknown pricing kind: {kind}")
    try:
        return pricer(**params)
    except TypeError as exc:
        raise ValidationError(f"Invalid pricing parameters for {kind}: {exc}")
