import uuid
import enum
from sqlalchemy import (
    Column, String, DateTime, func, DECIMAL, Integer, ForeignKey, Text, CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.booking import utcnow


class PaymentType(str, enum.Enum):
    booking = "booking"
    order = "order"

class PaymentStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    success = "success"
    failed = "failed"
    cancelled = "cancelled"
    refunded = "refunded"
    partially_refunded = "partially-refunded"


class Payment(Base):
    """Ledger entry for exactly one booking or one order."""

    __tablename__ = "payments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    payment_number = Column(String(40), unique=True, nullable=False, index=True)
    payment_type = Column(String(10), nullable=False)
    booking_id = Column(UUID(as_uuid=True), ForeignKey("bookings.id"), nullable=True, index=True)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=True, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    amount = Column(DECIMAL(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    payment_method = Column(String(20), nullable=True)
    transaction_id = Column(String(100), nullable=True, index=True)
    description = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default=PaymentStatus.pending.value, index=True)

    refund_amount = Column(DECIMAL(10, 2), nullable=False, default=0)
    refund_reason = Column(Text, nullable=True)
    refunded_at = Column(DateTime(timezone=True), nullable=True)

    failure_message = Column(Text, nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    failed_at = Column(DateTime(timezone=True), nullable=True)

    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payments_amount"),
        CheckConstraint("refund_amount >= 0 AND refund_amount <= amount", name="ck_payments_refund_amount"),
        CheckConstraint(
            "(booking_id IS NULL AND order_id IS NOT NULL) OR (booking_id IS NOT NULL AND order_id IS NULL)",
            name="ck_payments_single_target",
        ),
    )
    __mapper_args__ = {"version_id_col": version_id}

    user = relationship("User")
    booking = relationship("Booking", back_populates="payments")
    order = relationship("Order", back_populates="payments")
    status_history = relationship(
        "PaymentStatusHistory",
        back_populates="payment",
        order_by="PaymentStatusHistory.id",
        cascade="all, delete-orphan",
    )

    @property
    def reference(self) -> str:
        return self.payment_number

    @property
    def target(self):
        return self.booking if self.payment_type == PaymentType.booking.value else self.order


class PaymentStatusHistory(Base):
    __tablename__ = "payment_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payment_id = Column(UUID(as_uuid=True), ForeignKey("payments.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    note = Column(Text, nullable=True)

    payment = relationship("Payment", back_populates="status_history")
