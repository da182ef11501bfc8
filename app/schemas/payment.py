from __future__ import annotations

from typing import Optional, List
from pydantic import BaseModel, Field, UUID4, model_validator
from decimal import Decimal
from datetime import datetime

from app.models.booking import PaymentMethod
from app.models.payment import PaymentType


# Payment: Create (POST /payments)
class PaymentCreate(BaseModel):
    payment_type: PaymentType
    booking_id: Optional[UUID4] = None
    order_id: Optional[UUID4] = None
    amount: Decimal = Field(ge=0)
    payment_method: PaymentMethod
    transaction_id: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def check_target(self):
        # A payment references exactly one booking or one order
        if self.payment_type == PaymentType.booking:
            if self.booking_id is None or self.order_id is not None:
                raise ValueError("Booking payments need booking_id and no order_id")
        elif self.order_id is None or self.booking_id is not None:
            raise ValueError("Order payments need order_id and no booking_id")
        return self


# Refund (POST /admin/payments/{id}/refund)
class RefundRequest(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0)
    reason: Optional[str] = None


class PaymentHistoryEntry(BaseModel):
    status: str
    timestamp: datetime
    note: Optional[str] = None

    class Config:
        from_attributes = True


class Payment(BaseModel):
    id: UUID4
    payment_number: str
    payment_type: str
    booking_id: Optional[UUID4] = None
    order_id: Optional[UUID4] = None
    user_id: UUID4
    amount: Decimal
    currency: str
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    status: str
    status_history: List[PaymentHistoryEntry] = []
    refund_amount: Decimal
    refund_reason: Optional[str] = None
    refunded_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


# Admin list: totals over the current filter
class PaymentSummary(BaseModel):
    total_amount: Decimal
    total_refunds: Decimal
    net_revenue: Decimal
