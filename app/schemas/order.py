from __future__ import annotations

from typing import Optional, List
from pydantic import BaseModel, Field, UUID4
from decimal import Decimal
from datetime import datetime

from app.models.order import OrderType
from app.schemas.booking import BookingReview, StatusHistoryEntry


class DeliveryAddress(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    instructions: Optional[str] = None


class OrderItemCreate(BaseModel):
    menu_item_id: UUID4
    quantity: int = Field(ge=1)
    special_instructions: Optional[str] = Field(None, max_length=500)


# Order: Create (POST /orders)
class OrderCreate(BaseModel):
    order_type: OrderType
    items: List[OrderItemCreate] = Field(min_length=1)
    scheduled_time: Optional[datetime] = None
    special_requests: Optional[str] = Field(None, max_length=1000)
    delivery_address: Optional[DeliveryAddress] = None
    table_number: Optional[str] = None
    room_number: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: str
    note: Optional[str] = None


class OrderItem(BaseModel):
    id: UUID4
    menu_item_id: UUID4
    name: str
    quantity: int
    unit_price: Decimal
    special_instructions: Optional[str] = None

    class Config:
        from_attributes = True


# Order: Full response
class Order(BaseModel):
    id: UUID4
    order_number: str
    user_id: UUID4
    order_type: str
    items: List[OrderItem] = []
    subtotal: Decimal
    tax: Decimal
    tax_rate: Decimal
    delivery_fee: Decimal
    service_charge: Decimal
    discount: Decimal
    total_amount: Decimal
    status: str
    payment_status: str
    payment_method: Optional[str] = None
    status_history: List[StatusHistoryEntry] = []
    delivery_address: Optional[DeliveryAddress] = None
    table_number: Optional[str] = None
    room_number: Optional[str] = None
    estimated_time: Optional[int] = None
    actual_time: Optional[int] = None
    scheduled_time: Optional[datetime] = None
    special_requests: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    has_review: bool = False
    review: Optional[BookingReview] = None
    created_at: datetime


class AdminOrder(Order):
    internal_notes: Optional[str] = None
    user: Optional[UserSummary] = None


# Order: public tracking (GET /orders/track/{order_number})
class OrderTrack(BaseModel):
    order_number: str
    status: str
    status_history: List[StatusHistoryEntry] = []
    estimated_time: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


from app.schemas.user import UserSummary  # noqa: E402

AdminOrder.model_rebuild()
