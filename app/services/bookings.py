"""
Booking creation and bounded updates.

Looks up the bookable resource, prices it once through the pricing engine and
stores the resulting breakdown on the booking. The booking is then handed to
the lifecycle for its initial ``pending`` status and history entry.
"""

import logging
from typing import Any, Callable, Mapping, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotEligible, NotFound, ValidationError
from app.models.booking import (
    Booking,
    BookingType,
    GardenBookingDetails,
    RoomBookingDetails,
    TableBookingDetails,
)
from app.models.garden import Garden
from app.models.room import Room
from app.models.table import Table
from app.models.user import User
from app.schemas.pricing import PricingBreakdown
from app.services import lifecycle, pricing
from app.utils.reference import BOOKING_PREFIX, generate_unique_reference

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = frozenset({"pending", "confirmed"})
EDITABLE_FIELDS = frozenset({"special_requests", "internal_notes"})


def _enum_value(value):
    return getattr(value, "value", value)


def get_bookable(db: Session, model, resource_id, label: str):
    """Load an active resource row and make sure it can be booked."""
    resource = db.query(model).filter(model.id == resource_id, model.is_active == True).first()  # noqa: E712
    if not resource:
        raise NotFound(f"{label} not found", details={"id": str(resource_id)})
    if not resource.is_available:
        raise ValidationError(f"{label} is not available for booking", details={"id": str(resource_id)})
    return resource


def _pricing_columns(breakdown: PricingBreakdown) -> dict:
    return {
        "unit_rate": breakdown.unit_rate or 0,
        "units": breakdown.units or 1,
        "subtotal": breakdown.subtotal,
        "tax": breakdown.tax,
        "tax_rate": breakdown.tax_rate,
        "service_charge": breakdown.service_charge,
        "discount": breakdown.discount,
        "deposit": breakdown.deposit,
        "total_amount": breakdown.total_amount,
    }


# ---------------------------------------------------------------------------
# Per-kind builders: (breakdown, detail row)
# ---------------------------------------------------------------------------


def _build_room(db: Session, data: Mapping[str, Any]):
    room = get_bookable(db, Room, data["room_id"], "Room")
    breakdown = pricing.price_room_booking(
        room.current_price,
        data["check_in_date"],
        data["check_out_date"],
        room_count=data.get("number_of_rooms") or 1,
        guest_count=data["number_of_guests"],
        room_capacity=room.capacity,
    )
    details = RoomBookingDetails(
        room_id=room.id,
        check_in_date=data["check_in_date"],
        check_out_date=data["check_out_date"],
        number_of_guests=data["number_of_guests"],
        number_of_rooms=data.get("number_of_rooms") or 1,
        room_type=_enum_value(room.type),
    )
    return breakdown, details


def _build_table(db: Session, data: Mapping[str, Any]):
    table = get_bookable(db, Table, data["table_id"], "Table")
    breakdown = pricing.price_table_booking(
        table.minimum_spend or 0,
        duration_hours=data.get("duration"),
        guest_count=data["number_of_guests"],
        table_capacity=table.capacity,
    )
    details = TableBookingDetails(
        table_id=table.id,
        reservation_date=data["reservation_date"],
        reservation_time=data["reservation_time"],
        duration=breakdown.units,
        number_of_guests=data["number_of_guests"],
        occasion=data.get("occasion") or "none",
        table_location=_enum_value(table.location),
    )
    return breakdown, details


def _build_garden(db: Session, data: Mapping[str, Any]):
    garden = get_bookable(db, Garden, data["garden_id"], "Garden")
    breakdown = pricing.price_garden_booking(
        garden.price_per_hour,
        garden.minimum_hours,
        data["event_start_time"],
        data["event_end_time"],
        cleaning_fee=garden.cleaning_fee,
        guest_count=data["expected_guests"],
        garden_capacity=garden.capacity,
    )
    details = GardenBookingDetails(
        garden_id=garden.id,
        event_date=data["event_date"],
        event_start_time=data["event_start_time"],
        event_end_time=data["event_end_time"],
        event_type=data.get("event_type"),
        event_name=data.get("event_name"),
        expected_guests=data["expected_guests"],
    )
    return breakdown, details


_BUILDERS = {
    BookingType.room: (_build_room, "room_details"),
    BookingType.table: (_build_table, "table_details"),
    BookingType.garden: (_build_garden, "garden_details"),
}


def create_booking(
    db: Session,
    kind,
    params: Mapping[str, Any],
    user: User,
    reference_factory: Optional[Callable[[str], str]] = None,
) -> Booking:
    """
    Create a ``pending`` booking of ``kind`` (room, table, garden) for ``user``.

    ``params`` carries the kind-specific fields (see ``app.schemas.booking``).
    Raises ``NotFound`` for a missing resource and ``ValidationError`` for an
    unavailable resource or invalid pricing input; nothing is written then.
    """
    try:
        booking_type = BookingType(_enum_value(kind))
    except ValueError:
        raise ValidationError(f"Invalid booking type: {kind}")

    build, details_attr = _BUILDERS[booking_type]
    breakdown, details = build(db, params)

    booking = Booking(
        booking_number=generate_unique_reference(
            db, Booking.booking_number, BOOKING_PREFIX, reference_factory
        ),
        user_id=user.id,
        booking_type=booking_type.value,
        special_requests=params.get("special_requests"),
        **_pricing_columns(breakdown),
    )
    setattr(booking, details_attr, details)
    lifecycle.record_creation(booking, actor=user, note="Booking created")

    db.add(booking)
    db.commit()
    db.refresh(booking)
    logger.info(
        "Created %s booking %s for user %s (total %s)",
        booking.booking_type, booking.booking_number, user.id, booking.total_amount,
    )
    return booking


def update_booking(booking: Booking, changes: Mapping[str, Any]) -> Booking:
    """Apply the bounded field updates allowed while a booking is still editable."""
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(
            "Only special requests and internal notes can be changed",
            details={"fields": sorted(unknown)},
        )
    if booking.status not in EDITABLE_STATUSES:
        raise NotEligible(
            f"Cannot update booking with status: {booking.status}",
            details={"status": booking.status},
        )
    for field, value in changes.items():
        setattr(booking, field, value)
    return booking
