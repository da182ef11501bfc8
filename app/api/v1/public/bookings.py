from uuid import UUID
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload

from app.db.session import get_db
from app.api.deps import get_current_user
from app.core.exceptions import Unauthorized
from app.models.user import User
from app.models.booking import Booking, BookingType
from app.schemas.booking import (
    RoomBookingCreate,
    TableBookingCreate,
    GardenBookingCreate,
    BookingUpdate,
    CancelRequest,
    ReviewCreate,
    Booking as BookingSchema,
    AdminBooking,
    BookingPricing,
    BookingReview,
    RoomDetails,
    TableDetails,
    GardenDetails,
    StatusHistoryEntry,
)
from app.schemas.user import UserSummary
from app.schemas.common import PaginatedResponse
from app.services import lifecycle
from app.services.bookings import create_booking, update_booking

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _booking_query(db: Session):
    return db.query(Booking).options(
        joinedload(Booking.room_details),
        joinedload(Booking.table_details),
        joinedload(Booking.garden_details),
    )


def load_booking(booking_id: UUID, db: Session) -> Booking:
    booking = _booking_query(db).filter(Booking.id == booking_id).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


def _load_owned_booking(booking_id: UUID, user: User, db: Session) -> Booking:
    """Owner, staff or admin only."""
    booking = load_booking(booking_id, db)
    if booking.user_id != user.id and not user.is_staff:
        raise Unauthorized("Not authorized to access this booking")
    return booking


def _booking_fields(booking: Booking) -> dict:
    review = None
    if booking.has_review:
        review = BookingReview(
            rating=booking.review_rating,
            comment=booking.review_comment,
            created_at=booking.reviewed_at,
        )
    return dict(
        id=booking.id,
        booking_number=booking.booking_number,
        user_id=booking.user_id,
        booking_type=booking.booking_type,
        room_details=RoomDetails.model_validate(booking.room_details) if booking.room_details else None,
        table_details=TableDetails.model_validate(booking.table_details) if booking.table_details else None,
        garden_details=GardenDetails.model_validate(booking.garden_details) if booking.garden_details else None,
        pricing=BookingPricing.model_validate(booking),
        status=booking.status,
        payment_status=booking.payment_status,
        payment_method=booking.payment_method,
        status_history=[StatusHistoryEntry.model_validate(h) for h in booking.status_history],
        actual_check_in=booking.actual_check_in,
        actual_check_out=booking.actual_check_out,
        special_requests=booking.special_requests,
        cancellation_reason=booking.cancellation_reason,
        cancelled_at=booking.cancelled_at,
        cancelled_by=booking.cancelled_by,
        has_review=booking.has_review,
        review=review,
        created_at=booking.created_at,
    )


def serialize_booking(booking: Booking) -> BookingSchema:
    """Convert a Booking ORM object to its schema representation."""
    return BookingSchema(**_booking_fields(booking))


def serialize_admin_booking(booking: Booking) -> AdminBooking:
    user_summary = UserSummary.model_validate(booking.user) if booking.user else None
    return AdminBooking(
        **_booking_fields(booking),
        internal_notes=booking.internal_notes,
        user=user_summary,
    )


def _create(kind: BookingType, data, db: Session, current_user: User) -> BookingSchema:
    booking = create_booking(db, kind, data.model_dump(), current_user)
    return serialize_booking(booking)


# ---------------------------------------------------------------------------
# POST /bookings/{room|table|garden}
# ---------------------------------------------------------------------------


@router.post("/room", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_room_booking(
    data: RoomBookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Reserve a room. Priced per night at the room's current rate:
    subtotal = rate × nights × rooms, plus 10% tax; 20% deposit.
    """
    return _create(BookingType.room, data, db, current_user)


@router.post("/table", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_table_booking(
    data: TableBookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Reserve a table. The minimum spend is charged per hour (1-6 hours, default 2)."""
    return _create(BookingType.table, data, db, current_user)


@router.post("/garden", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_garden_booking(
    data: GardenBookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Book a garden for an event. Billed by whole hours, with a 30% deposit."""
    return _create(BookingType.garden, data, db, current_user)


# ---------------------------------------------------------------------------
# GET /bookings: current user's bookings
# ---------------------------------------------------------------------------


@router.get("/", response_model=PaginatedResponse[BookingSchema])
def list_my_bookings(
    status: Optional[str] = Query(None, description="Filter by booking status"),
    booking_type: Optional[BookingType] = Query(None, description="room, table or garden"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = _booking_query(db).filter(Booking.user_id == current_user.id)
    if status:
        query = query.filter(Booking.status == status)
    if booking_type:
        query = query.filter(Booking.booking_type == booking_type.value)

    total = query.count()
    bookings = (
        query.order_by(Booking.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return PaginatedResponse(
        data=[serialize_booking(b) for b in bookings],
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


# ---------------------------------------------------------------------------
# GET / PATCH /bookings/{id}
# ---------------------------------------------------------------------------


@router.get("/{booking_id}", response_model=BookingSchema)
def get_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return serialize_booking(_load_owned_booking(booking_id, current_user, db))


@router.patch("/{booking_id}", response_model=BookingSchema)
def update_my_booking(
    booking_id: UUID,
    data: BookingUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Change special requests (internal notes: staff only) while pending or confirmed."""
    booking = _load_owned_booking(booking_id, current_user, db)
    changes = data.model_dump(exclude_unset=True)
    if "internal_notes" in changes and not current_user.is_staff:
        raise Unauthorized("Only staff can edit internal notes")

    update_booking(booking, changes)
    db.commit()
    db.refresh(booking)
    return serialize_booking(booking)


# ---------------------------------------------------------------------------
# Cancel / review
# ---------------------------------------------------------------------------


@router.patch("/{booking_id}/cancel", response_model=BookingSchema)
def cancel_booking(
    booking_id: UUID,
    data: Optional[CancelRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Cancel a pending or confirmed booking."""
    booking = _load_owned_booking(booking_id, current_user, db)
    lifecycle.cancel(booking, reason=data.reason if data else None, actor=current_user)
    db.commit()
    db.refresh(booking)
    return serialize_booking(booking)


@router.post("/{booking_id}/review", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def review_booking(
    booking_id: UUID,
    data: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """One review per booking, once the stay or visit is over."""
    booking = load_booking(booking_id, db)
    if booking.user_id != current_user.id:
        raise Unauthorized("Only the guest who booked can review this booking")

    lifecycle.add_review(booking, data.rating, data.comment)
    db.commit()
    db.refresh(booking)
    return serialize_booking(booking)
