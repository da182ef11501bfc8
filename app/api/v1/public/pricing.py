from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.garden import Garden
from app.models.room import Room
from app.models.table import Table
from app.schemas.pricing import PricingBreakdown, PricingQuoteRequest, RoomQuote, TableQuote, GardenQuote
from app.services import pricing
from app.services.bookings import get_bookable
from app.services.orders import snapshot_lines

router = APIRouter(prefix="/pricing", tags=["Pricing"])


@router.post("/quote", response_model=PricingBreakdown)
def quote(
    data: PricingQuoteRequest,
    db: Session = Depends(get_db),
):
    """
    Price a room, table, garden or order without creating anything.
    Uses the same rules as booking and order creation.
    """
    if isinstance(data, RoomQuote):
        room = get_bookable(db, Room, data.room_id, "Room")
        return pricing.price_room_booking(
            room.current_price,
            data.check_in_date,
            data.check_out_date,
            room_count=data.number_of_rooms,
            guest_count=data.number_of_guests,
            room_capacity=room.capacity,
        )
    if isinstance(data, TableQuote):
        table = get_bookable(db, Table, data.table_id, "Table")
        return pricing.price_table_booking(
            table.minimum_spend or 0,
            duration_hours=data.duration,
            guest_count=data.number_of_guests,
            table_capacity=table.capacity,
        )
    if isinstance(data, GardenQuote):
        garden = get_bookable(db, Garden, data.garden_id, "Garden")
        return pricing.price_garden_booking(
            garden.price_per_hour,
            garden.minimum_hours,
            data.event_start_time,
            data.event_end_time,
            cleaning_fee=garden.cleaning_fee,
            guest_count=data.expected_guests,
            garden_capacity=garden.capacity,
        )

    lines = snapshot_lines(db, [item.model_dump() for item in data.items])
    return pricing.price_order([line for _, line in lines], data.order_type)
