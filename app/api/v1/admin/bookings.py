from uuid import UUID
from typing import Optional
from datetime import date, datetime, time, timedelta, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from app.db.session import get_db
from app.api.deps import get_current_staff_user
from app.api.v1.public.bookings import load_booking, serialize_admin_booking
from app.models.user import User
from app.models.booking import (
    Booking,
    BookingType,
    RoomBookingDetails,
    TableBookingDetails,
    GardenBookingDetails,
)
from app.schemas.booking import AdminBooking, BookingStatusUpdate
from app.schemas.common import PaginatedResponse
from app.services import lifecycle

router = APIRouter(prefix="/admin/bookings", tags=["Admin - Bookings"])


@router.get("/", response_model=PaginatedResponse[AdminBooking])
def list_all_bookings(
    # --- Filters ---
    booking_type: Optional[BookingType] = Query(None, description="room, table or garden"),
    status: Optional[str] = Query(None, description="Filter by booking status"),
    payment_status: Optional[str] = Query(None),
    date: Optional[date] = Query(None, description="Check-in / reservation / event date (YYYY-MM-DD)"),
    user_id: Optional[UUID] = Query(None),
    # --- Pagination ---
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    """
    Return bookings of every guest, newest first.
    Filtering by date matches the check-in, reservation or event date.
    """
    query = db.query(Booking).options(
        joinedload(Booking.user),
        joinedload(Booking.room_details),
        joinedload(Booking.table_details),
        joinedload(Booking.garden_details),
    )

    if booking_type:
        query = query.filter(Booking.booking_type == booking_type.value)
    if status:
        query = query.filter(Booking.status == status)
    if payment_status:
        query = query.filter(Booking.payment_status == payment_status)
    if user_id:
        query = query.filter(Booking.user_id == user_id)
    if date:
        day_start = datetime.combine(date, time.min, tzinfo=timezone.utc)
        query = query.filter(or_(
            Booking.room_details.has(and_(
                RoomBookingDetails.check_in_date >= day_start,
                RoomBookingDetails.check_in_date < day_start + timedelta(days=1),
            )),
            Booking.table_details.has(TableBookingDetails.reservation_date == date),
            Booking.garden_details.has(GardenBookingDetails.event_date == date),
        ))

    total = query.count()
    bookings = (
        query.order_by(Booking.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return PaginatedResponse(
        data=[serialize_admin_booking(b) for b in bookings],
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


@router.get("/{booking_id}", response_model=AdminBooking)
def get_any_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    return serialize_admin_booking(load_booking(booking_id, db))


@router.patch("/{booking_id}/status", response_model=AdminBooking)
def update_booking_status(
    booking_id: UUID,
    data: BookingStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    """
    Move a booking to its next status. Only allowed transitions succeed;
    check-in/out apply to rooms only and no-show needs an admin.
    """
    booking = load_booking(booking_id, db)
    lifecycle.transition_booking_status(booking, data.status, actor=current_user, note=data.note)
    db.commit()
    db.refresh(booking)
    return serialize_admin_booking(booking)


@router.post("/{booking_id}/check-in", response_model=AdminBooking)
def check_in_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    booking = load_booking(booking_id, db)
    lifecycle.check_in(booking, actor=current_user, note="Guest checked in")
    db.commit()
    db.refresh(booking)
    return serialize_admin_booking(booking)


@router.post("/{booking_id}/check-out", response_model=AdminBooking)
def check_out_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    booking = load_booking(booking_id, db)
    lifecycle.check_out(booking, actor=current_user, note="Guest checked out")
    db.commit()
    db.refresh(booking)
    return serialize_admin_booking(booking)
