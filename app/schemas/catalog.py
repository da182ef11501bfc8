from typing import List, Optional
from pydantic import BaseModel, Field, UUID4
from decimal import Decimal
from datetime import date, datetime

from app.models.menu_item import MealType
from app.models.room import RoomType
from app.models.table import TableLocation


# Room Schemas
class RoomBase(BaseModel):
    room_number: str
    name: str = Field(max_length=100)
    type: RoomType
    description: Optional[str] = None
    capacity: int = Field(ge=1, le=10)
    price_per_night: Decimal = Field(ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0, le=100)
    floor: Optional[int] = Field(None, ge=1, le=50)
    is_available: bool = True


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    type: Optional[RoomType] = None
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1, le=10)
    price_per_night: Optional[Decimal] = Field(None, ge=0)
    discount: Optional[Decimal] = Field(None, ge=0, le=100)
    floor: Optional[int] = Field(None, ge=1, le=50)
    is_available: Optional[bool] = None


class Room(RoomBase):
    id: UUID4
    current_price: Decimal
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Table Schemas
class TableBase(BaseModel):
    table_number: str
    name: Optional[str] = Field(None, max_length=50)
    location: TableLocation
    capacity: int = Field(ge=1, le=20)
    minimum_spend: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = Field(None, max_length=500)
    is_available: bool = True


class TableCreate(TableBase):
    pass


class TableUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=50)
    location: Optional[TableLocation] = None
    capacity: Optional[int] = Field(None, ge=1, le=20)
    minimum_spend: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=500)
    is_available: Optional[bool] = None


class Table(TableBase):
    id: UUID4

    class Config:
        from_attributes = True


# Garden Schemas
class GardenBase(BaseModel):
    name: str = Field(max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    capacity: int = Field(ge=1, le=1000)
    price_per_hour: Decimal = Field(ge=0)
    minimum_hours: int = Field(2, ge=1)
    security_deposit: Decimal = Field(Decimal("0"), ge=0)
    cleaning_fee: Decimal = Field(Decimal("0"), ge=0)
    is_available: bool = True


class GardenCreate(GardenBase):
    pass


class GardenUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    capacity: Optional[int] = Field(None, ge=1, le=1000)
    price_per_hour: Optional[Decimal] = Field(None, ge=0)
    minimum_hours: Optional[int] = Field(None, ge=1)
    security_deposit: Optional[Decimal] = Field(None, ge=0)
    cleaning_fee: Optional[Decimal] = Field(None, ge=0)
    is_available: Optional[bool] = None


class Garden(GardenBase):
    id: UUID4

    class Config:
        from_attributes = True


# Menu Item Schemas
class MenuItemBase(BaseModel):
    name: str = Field(max_length=100)
    category_id: UUID4
    description: Optional[str] = None
    price: Decimal = Field(ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0, le=100)
    preparation_time: int = Field(20, ge=0)
    display_order: int = 0
    is_featured: bool = False
    is_available: bool = True


class MenuItemCreate(MenuItemBase):
    pass


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    category_id: Optional[UUID4] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    discount: Optional[Decimal] = Field(None, ge=0, le=100)
    preparation_time: Optional[int] = Field(None, ge=0)
    display_order: Optional[int] = None
    is_featured: Optional[bool] = None
    is_available: Optional[bool] = None


class MenuItem(MenuItemBase):
    id: UUID4
    category_name: Optional[str] = None
    current_price: Decimal

    class Config:
        from_attributes = True


# Garden availability (GET /gardens/availability)
class GardenAvailability(BaseModel):
    date: date
    count: int
    data: List[Garden]


# Menu Category Schemas
TIME_PATTERN = r"^([01]?\d|2[0-3]):[0-5]\d$"


class MenuCategoryBase(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    meal_type: MealType = MealType.all_day
    display_order: int = 0
    available_from: Optional[str] = Field(None, pattern=TIME_PATTERN)
    available_until: Optional[str] = Field(None, pattern=TIME_PATTERN)
    is_featured: bool = False


class MenuCategoryCreate(MenuCategoryBase):
    pass


class MenuCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    meal_type: Optional[MealType] = None
    display_order: Optional[int] = None
    available_from: Optional[str] = Field(None, pattern=TIME_PATTERN)
    available_until: Optional[str] = Field(None, pattern=TIME_PATTERN)
    is_featured: Optional[bool] = None


class MenuCategory(MenuCategoryBase):
    id: UUID4
    is_active: bool

    class Config:
        from_attributes = True


# Full menu: categories with their available items (GET /menu/full)
class MenuSection(MenuCategory):
    items: List[MenuItem] = []
    item_count: int = 0
