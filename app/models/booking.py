import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Boolean, DateTime, func, DECIMAL, Integer, ForeignKey, Text, Date,
    CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.db.session import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingType(str, enum.Enum):
    room = "room"
    table = "table"
    garden = "garden"

class BookingStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    checked_in = "checked-in"
    checked_out = "checked-out"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no-show"

class BookingPaymentStatus(str, enum.Enum):
    pending = "pending"
    deposit_paid = "deposit-paid"
    fully_paid = "fully-paid"
    partially_refunded = "partially-refunded"
    refunded = "refunded"
    failed = "failed"

class PaymentMethod(str, enum.Enum):
    card = "card"
    cash = "cash"
    mobile_money = "mobile-money"
    bank_transfer = "bank-transfer"
    credit = "credit"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_number = Column(String(40), unique=True, nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    booking_type = Column(String(10), nullable=False, index=True) # room, table, garden

    # Pricing: computed once at creation, never re-derived
    unit_rate = Column(DECIMAL(10, 2), nullable=False, default=0) # rate snapshot (per night / per hour)
    units = Column(Integer, nullable=False, default=1) # nights or hours
    subtotal = Column(DECIMAL(10, 2), nullable=False)
    tax = Column(DECIMAL(10, 2), nullable=False)
    tax_rate = Column(DECIMAL(5, 2), nullable=False, default=10)
    service_charge = Column(DECIMAL(10, 2), nullable=False, default=0)
    discount = Column(DECIMAL(10, 2), nullable=False, default=0)
    deposit = Column(DECIMAL(10, 2), nullable=False, default=0)
    deposit_paid = Column(Boolean, nullable=False, default=False)
    total_amount = Column(DECIMAL(10, 2), nullable=False)
    amount_paid = Column(DECIMAL(10, 2), nullable=False, default=0)

    status = Column(String(20), nullable=False, default=BookingStatus.pending.value, index=True)
    payment_status = Column(String(20), nullable=False, default=BookingPaymentStatus.pending.value, index=True)
    payment_method = Column(String(20), nullable=True)

    actual_check_in = Column(DateTime(timezone=True), nullable=True)
    actual_check_out = Column(DateTime(timezone=True), nullable=True)

    special_requests = Column(String(1000), nullable=True)
    internal_notes = Column(String(500), nullable=True)

    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    has_review = Column(Boolean, nullable=False, default=False)
    review_rating = Column(Integer, nullable=True) # 1-5
    review_comment = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    __table_args__ = (
        CheckConstraint("subtotal >= 0", name="ck_bookings_subtotal"),
        CheckConstraint("tax >= 0", name="ck_bookings_tax"),
        CheckConstraint("service_charge >= 0", name="ck_bookings_service_charge"),
        CheckConstraint("discount >= 0", name="ck_bookings_discount"),
        CheckConstraint("deposit >= 0", name="ck_bookings_deposit"),
        CheckConstraint("total_amount >= 0", name="ck_bookings_total_amount"),
        CheckConstraint("amount_paid >= 0", name="ck_bookings_amount_paid"),
        CheckConstraint("booking_type IN ('room', 'table', 'garden')", name="ck_bookings_type"),
    )
    __mapper_args__ = {"version_id_col": version_id}

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    room_details = relationship("RoomBookingDetails", back_populates="booking", uselist=False, cascade="all, delete-orphan")
    table_details = relationship("TableBookingDetails", back_populates="booking", uselist=False, cascade="all, delete-orphan")
    garden_details = relationship("GardenBookingDetails", back_populates="booking", uselist=False, cascade="all, delete-orphan")
    status_history = relationship(
        "BookingStatusHistory",
        back_populates="booking",
        order_by="BookingStatusHistory.id",
        cascade="all, delete-orphan",
    )
    payments = relationship("Payment", back_populates="booking")

    @property
    def details(self):
        """The single populated detail row matching ``booking_type``."""
        return {
            BookingType.room.value: self.room_details,
            BookingType.table.value: self.table_details,
            BookingType.garden.value: self.garden_details,
        }.get(self.booking_type)

    @property
    def reference(self) -> str:
        return self.booking_number


class RoomBookingDetails(Base):
    __tablename__ = "booking_room_details"

    booking_id = Column(UUID(as_uuid=True), ForeignKey("bookings.id"), primary_key=True)
    room_id = Column(UUID(as_uuid=True), ForeignKey("rooms.id"), nullable=False, index=True)
    check_in_date = Column(DateTime(timezone=True), nullable=False, index=True)
    check_out_date = Column(DateTime(timezone=True), nullable=False)
    number_of_guests = Column(Integer, nullable=False)
    number_of_rooms = Column(Integer, nullable=False, default=1)
    room_type = Column(String(20), nullable=True)

    booking = relationship("Booking", back_populates="room_details")
    room = relationship("Room")

class TableBookingDetails(Base):
    __tablename__ = "booking_table_details"

    booking_id = Column(UUID(as_uuid=True), ForeignKey("bookings.id"), primary_key=True)
    table_id = Column(UUID(as_uuid=True), ForeignKey("dining_tables.id"), nullable=False, index=True)
    reservation_date = Column(Date, nullable=False, index=True)
    reservation_time = Column(String(5), nullable=False) # HH:MM
    duration = Column(Integer, nullable=False, default=2) # hours
    number_of_guests = Column(Integer, nullable=False)
    occasion = Column(String(20), nullable=True)
    table_location = Column(String(20), nullable=True)

    booking = relationship("Booking", back_populates="table_details")
    table = relationship("Table")

class GardenBookingDetails(Base):
    __tablename__ = "booking_garden_details"

    booking_id = Column(UUID(as_uuid=True), ForeignKey("bookings.id"), primary_key=True)
    garden_id = Column(UUID(as_uuid=True), ForeignKey("gardens.id"), nullable=False, index=True)
    event_date = Column(Date, nullable=False, index=True)
    event_start_time = Column(String(5), nullable=False) # HH:MM
    event_end_time = Column(String(5), nullable=False) # HH:MM
    event_type = Column(String(30), nullable=True)
    event_name = Column(String(255), nullable=True)
    expected_guests = Column(Integer, nullable=False)

    booking = relationship("Booking", back_populates="garden_details")
    garden = relationship("Garden")


class BookingStatusHistory(Base):
    """Append-only audit trail: one row per status write."""

    __tablename__ = "booking_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(UUID(as_uuid=True), ForeignKey("bookings.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    note = Column(Text, nullable=True)
    updated_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    booking = relationship("Booking", back_populates="status_history")
