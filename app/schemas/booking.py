from __future__ import annotations

from typing import Optional, List, Literal
from pydantic import BaseModel, Field, UUID4, model_validator
from decimal import Decimal
from datetime import date, datetime

TIME_PATTERN = r"^([01]?\d|2[0-3]):[0-5]\d$"

Occasion = Literal["birthday", "anniversary", "business", "date", "celebration", "other", "none"]


# Booking: Create (POST /bookings/room)
class RoomBookingCreate(BaseModel):
    room_id: UUID4
    check_in_date: datetime
    check_out_date: datetime
    number_of_guests: int = Field(ge=1, le=10)
    number_of_rooms: int = Field(1, ge=1)
    special_requests: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def check_dates(self):
        if (self.check_in_date.tzinfo is None) != (self.check_out_date.tzinfo is None):
            raise ValueError("Check-in and check-out must both carry a timezone or neither")
        if self.check_out_date <= self.check_in_date:
            raise ValueError("Check-out date must be after check-in date")
        return self


# Booking: Create (POST /bookings/table)
class TableBookingCreate(BaseModel):
    table_id: UUID4
    reservation_date: date
    reservation_time: str = Field(pattern=TIME_PATTERN)
    number_of_guests: int = Field(ge=1)
    duration: Optional[int] = None
    occasion: Occasion = "none"
    special_requests: Optional[str] = Field(None, max_length=1000)


# Booking: Create (POST /bookings/garden)
class GardenBookingCreate(BaseModel):
    garden_id: UUID4
    event_date: date
    event_start_time: str = Field(pattern=TIME_PATTERN)
    event_end_time: str = Field(pattern=TIME_PATTERN)
    event_type: Optional[str] = None
    event_name: Optional[str] = Field(None, max_length=255)
    expected_guests: int = Field(ge=1)
    special_requests: Optional[str] = Field(None, max_length=1000)


# Booking: bounded update while pending/confirmed (PATCH /bookings/{id})
class BookingUpdate(BaseModel):
    special_requests: Optional[str] = Field(None, max_length=1000)
    internal_notes: Optional[str] = Field(None, max_length=500)


class BookingStatusUpdate(BaseModel):
    status: str
    note: Optional[str] = None


class CancelRequest(BaseModel):
    reason: Optional[str] = None


class ReviewCreate(BaseModel):
    rating: int
    comment: Optional[str] = None


# Nested response objects
class StatusHistoryEntry(BaseModel):
    status: str
    timestamp: datetime
    note: Optional[str] = None
    updated_by: Optional[UUID4] = None

    class Config:
        from_attributes = True


class RoomDetails(BaseModel):
    room_id: UUID4
    check_in_date: datetime
    check_out_date: datetime
    number_of_guests: int
    number_of_rooms: int
    room_type: Optional[str] = None

    class Config:
        from_attributes = True


class TableDetails(BaseModel):
    table_id: UUID4
    reservation_date: date
    reservation_time: str
    duration: int
    number_of_guests: int
    occasion: Optional[str] = None
    table_location: Optional[str] = None

    class Config:
        from_attributes = True


class GardenDetails(BaseModel):
    garden_id: UUID4
    event_date: date
    event_start_time: str
    event_end_time: str
    event_type: Optional[str] = None
    event_name: Optional[str] = None
    expected_guests: int

    class Config:
        from_attributes = True


class BookingPricing(BaseModel):
    unit_rate: Decimal
    units: int
    subtotal: Decimal
    tax: Decimal
    tax_rate: Decimal
    service_charge: Decimal
    discount: Decimal
    deposit: Decimal
    deposit_paid: bool
    total_amount: Decimal
    amount_paid: Decimal

    class Config:
        from_attributes = True


class BookingReview(BaseModel):
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


# Booking: Full response
class Booking(BaseModel):
    id: UUID4
    booking_number: str
    user_id: UUID4
    booking_type: str
    room_details: Optional[RoomDetails] = None
    table_details: Optional[TableDetails] = None
    garden_details: Optional[GardenDetails] = None
    pricing: BookingPricing
    status: str
    payment_status: str
    payment_method: Optional[str] = None
    status_history: List[StatusHistoryEntry] = []
    actual_check_in: Optional[datetime] = None
    actual_check_out: Optional[datetime] = None
    special_requests: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[UUID4] = None
    has_review: bool = False
    review: Optional[BookingReview] = None
    created_at: datetime


# Booking: Admin view, includes internal notes and user info
class AdminBooking(Booking):
    internal_notes: Optional[str] = None
    user: Optional[UserSummary] = None


# Import at the bottom to avoid circular imports
from app.schemas.user import UserSummary  # noqa: E402

AdminBooking.model_rebuild()
