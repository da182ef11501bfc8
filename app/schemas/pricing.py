from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field


# Pricing breakdown: produced by app.services.pricing, stored on bookings/orders
class PricingBreakdown(BaseModel):
    subtotal: Decimal
    tax: Decimal
    tax_rate: Decimal = Decimal("10")  # percent
    service_charge: Decimal = Decimal("0.00")
    discount: Decimal = Decimal("0.00")
    deposit: Decimal = Decimal("0.00")
    delivery_fee: Decimal = Decimal("0.00")
    total_amount: Decimal
    unit_rate: Optional[Decimal] = None  # per night / per hour
    units: Optional[int] = None  # nights / hours


# Quote requests (POST /pricing/quote): one per pricing kind
class RoomQuote(BaseModel):
    kind: Literal["room"]
    room_id: UUID
    check_in_date: datetime
    check_out_date: datetime
    number_of_guests: int = Field(ge=1, le=10)
    number_of_rooms: int = Field(1, ge=1)


class TableQuote(BaseModel):
    kind: Literal["table"]
    table_id: UUID
    number_of_guests: int = Field(ge=1)
    duration: Optional[int] = None


class GardenQuote(BaseModel):
    kind: Literal["garden"]
    garden_id: UUID
    event_start_time: str
    event_end_time: str
    expected_guests: int = Field(ge=1)


class OrderQuoteItem(BaseModel):
    menu_item_id: UUID
    quantity: int = Field(ge=1)


class OrderQuote(BaseModel):
    kind: Literal["order"]
    order_type: str
    items: List[OrderQuoteItem] = Field(min_length=1)


PricingQuoteRequest = Union[RoomQuote, TableQuote, GardenQuote, OrderQuote]
