import uuid
import enum
from sqlalchemy import (
    Column, String, Boolean, DateTime, func, DECIMAL, Integer, ForeignKey, Text, JSON,
    CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.booking import utcnow


class OrderType(str, enum.Enum):
    dine_in = "dine-in"
    takeout = "takeout"
    room_service = "room-service"
    delivery = "delivery"

class OrderStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    preparing = "preparing"
    ready = "ready"
    served = "served"
    delivered = "delivered"
    cancelled = "cancelled"
    refunded = "refunded"

class OrderPaymentStatus(str, enum.Enum):
    pending = "pending"
    partial = "partial"
    paid = "paid"
    refunded = "refunded"
    failed = "failed"


class Order(Base):
    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_number = Column(String(40), unique=True, nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    order_type = Column(String(20), nullable=False, index=True)

    subtotal = Column(DECIMAL(10, 2), nullable=False)
    tax = Column(DECIMAL(10, 2), nullable=False)
    tax_rate = Column(DECIMAL(5, 2), nullable=False, default=10)
    delivery_fee = Column(DECIMAL(10, 2), nullable=False, default=0)
    service_charge = Column(DECIMAL(10, 2), nullable=False, default=0)
    discount = Column(DECIMAL(10, 2), nullable=False, default=0)
    total_amount = Column(DECIMAL(10, 2), nullable=False)

    status = Column(String(20), nullable=False, default=OrderStatus.pending.value, index=True)
    payment_status = Column(String(20), nullable=False, default=OrderPaymentStatus.pending.value, index=True)
    payment_method = Column(String(20), nullable=True)

    # street, city, state, zip_code, country, instructions
    delivery_address = Column(JSON, nullable=True)
    table_number = Column(String(20), nullable=True)
    room_number = Column(String(20), nullable=True)

    estimated_time = Column(Integer, nullable=True) # minutes
    actual_time = Column(Integer, nullable=True) # minutes
    scheduled_time = Column(DateTime(timezone=True), nullable=True)

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
        CheckConstraint("subtotal >= 0", name="ck_orders_subtotal"),
        CheckConstraint("tax >= 0", name="ck_orders_tax"),
        CheckConstraint("delivery_fee >= 0", name="ck_orders_delivery_fee"),
        CheckConstraint("service_charge >= 0", name="ck_orders_service_charge"),
        CheckConstraint("discount >= 0", name="ck_orders_discount"),
        CheckConstraint("total_amount >= 0", name="ck_orders_total_amount"),
    )
    __mapper_args__ = {"version_id_col": version_id}

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.position", cascade="all, delete-orphan")
    status_history = relationship(
        "OrderStatusHistory",
        back_populates="order",
        order_by="OrderStatusHistory.id",
        cascade="all, delete-orphan",
    )
    payments = relationship("Payment", back_populates="order")

    @property
    def reference(self) -> str:
        return self.order_number


class OrderItem(Base):
    """Line item. ``name`` and ``unit_price`` are snapshots taken at order time."""

    __tablename__ = "order_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = Column(UUID(as_uuid=True), ForeignKey("menu_items.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(DECIMAL(10, 2), nullable=False)
    special_instructions = Column(String(500), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity"),
        CheckConstraint("unit_price >= 0", name="ck_order_items_unit_price"),
    )

    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem")


class OrderStatusHistory(Base):
    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    note = Column(Text, nullable=True)
    updated_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    order = relationship("Order", back_populates="status_history")
