from uuid import UUID
from typing import List, Optional
from decimal import Decimal
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.db.session import get_db
from app.models.room import Room, RoomType
from app.models.table import Table, TableLocation
from app.models.garden import Garden
from app.models.booking import Booking, BookingStatus, GardenBookingDetails
from app.models.menu_item import MenuCategory, MenuItem, MealType
from app.schemas.catalog import (
    Room as RoomSchema,
    Table as TableSchema,
    Garden as GardenSchema,
    GardenAvailability,
    MenuItem as MenuItemSchema,
    MenuCategory as MenuCategorySchema,
    MenuSection,
)
from app.schemas.common import PaginatedResponse

rooms_router = APIRouter(prefix="/rooms", tags=["Rooms"])
tables_router = APIRouter(prefix="/tables", tags=["Tables"])
gardens_router = APIRouter(prefix="/gardens", tags=["Gardens"])
menu_router = APIRouter(prefix="/menu", tags=["Menu"])


def _paginate(query, order_by, schema, page: int, limit: int) -> PaginatedResponse:
    total = query.count()
    rows = query.order_by(order_by).offset((page - 1) * limit).limit(limit).all()
    return PaginatedResponse(
        data=[schema.model_validate(r) for r in rows],
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


def _get_active(db: Session, model, item_id: UUID, label: str):
    item = db.query(model).filter(model.id == item_id, model.is_active == True).first()  # noqa: E712
    if not item:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return item


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------


@rooms_router.get("/", response_model=PaginatedResponse[RoomSchema])
def list_rooms(
    type: Optional[RoomType] = Query(None, description="standard, deluxe, suite, presidential"),
    guests: Optional[int] = Query(None, ge=1, description="Minimum capacity"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    available_only: bool = Query(True),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    query = db.query(Room).filter(Room.is_active == True)  # noqa: E712
    if type:
        query = query.filter(Room.type == type)
    if guests:
        query = query.filter(Room.capacity >= guests)
    if min_price is not None:
        query = query.filter(Room.price_per_night >= min_price)
    if max_price is not None:
        query = query.filter(Room.price_per_night <= max_price)
    if available_only:
        query = query.filter(Room.is_available == True)  # noqa: E712
    return _paginate(query, Room.price_per_night, RoomSchema, page, limit)


@rooms_router.get("/{room_id}", response_model=RoomSchema)
def get_room(room_id: UUID, db: Session = Depends(get_db)):
    return _get_active(db, Room, room_id, "Room")


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


@tables_router.get("/", response_model=PaginatedResponse[TableSchema])
def list_tables(
    location: Optional[TableLocation] = Query(None),
    guests: Optional[int] = Query(None, ge=1, description="Minimum capacity"),
    available_only: bool = Query(True),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    query = db.query(Table).filter(Table.is_active == True)  # noqa: E712
    if location:
        query = query.filter(Table.location == location)
    if guests:
        query = query.filter(Table.capacity >= guests)
    if available_only:
        query = query.filter(Table.is_available == True)  # noqa: E712
    return _paginate(query, Table.table_number, TableSchema, page, limit)


@tables_router.get("/{table_id}", response_model=TableSchema)
def get_table(table_id: UUID, db: Session = Depends(get_db)):
    return _get_active(db, Table, table_id, "Table")


# ---------------------------------------------------------------------------
# Gardens
# ---------------------------------------------------------------------------


@gardens_router.get("/", response_model=PaginatedResponse[GardenSchema])
def list_gardens(
    guests: Optional[int] = Query(None, ge=1, description="Minimum capacity"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    query = db.query(Garden).filter(Garden.is_active == True)  # noqa: E712
    if guests:
        query = query.filter(Garden.capacity >= guests)
    return _paginate(query, Garden.name, GardenSchema, page, limit)


@gardens_router.get("/availability", response_model=GardenAvailability)
def garden_availability(
    date: date = Query(..., description="Event date"),
    guests: Optional[int] = Query(None, ge=1, description="Minimum capacity"),
    db: Session = Depends(get_db),
):
    """Gardens with no live booking on the given date."""
    booked = (
        db.query(GardenBookingDetails.garden_id)
        .join(Booking, Booking.id == GardenBookingDetails.booking_id)
        .filter(
            GardenBookingDetails.event_date == date,
            Booking.status.notin_([BookingStatus.cancelled.value, BookingStatus.no_show.value]),
        )
    )
    query = db.query(Garden).filter(
        Garden.is_active == True,  # noqa: E712
        Garden.is_available == True,  # noqa: E712
        Garden.id.notin_(booked),
    )
    if guests:
        query = query.filter(Garden.capacity >= guests)
    gardens = query.order_by(Garden.name).all()
    return GardenAvailability(
        date=date,
        count=len(gardens),
        data=[GardenSchema.model_validate(g) for g in gardens],
    )


@gardens_router.get("/{garden_id}", response_model=GardenSchema)
def get_garden(garden_id: UUID, db: Session = Depends(get_db)):
    return _get_active(db, Garden, garden_id, "Garden")


# ---------------------------------------------------------------------------
# Menu
# ---------------------------------------------------------------------------


def _menu_items(db: Session):
    return (
        db.query(MenuItem)
        .options(joinedload(MenuItem.category))
        .filter(MenuItem.is_active == True)  # noqa: E712
    )


@menu_router.get("/", response_model=PaginatedResponse[MenuItemSchema])
def list_menu_items(
    category_id: Optional[UUID] = Query(None),
    featured: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Case-insensitive name search"),
    available_only: bool = Query(True),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
):
    query = _menu_items(db)
    if category_id:
        query = query.filter(MenuItem.category_id == category_id)
    if featured is not None:
        query = query.filter(MenuItem.is_featured == featured)
    if search:
        query = query.filter(MenuItem.name.ilike(f"%{search}%"))
    if available_only:
        query = query.filter(MenuItem.is_available == True)  # noqa: E712
    return _paginate(query, MenuItem.name, MenuItemSchema, page, limit)


@menu_router.get("/categories", response_model=List[MenuCategorySchema])
def list_menu_categories(
    meal_type: Optional[MealType] = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(MenuCategory).filter(MenuCategory.is_active == True)  # noqa: E712
    if meal_type:
        query = query.filter(MenuCategory.meal_type == meal_type.value)
    return query.order_by(MenuCategory.display_order, MenuCategory.name).all()


@menu_router.get("/categories/{category_id}", response_model=MenuCategorySchema)
def get_menu_category(category_id: UUID, db: Session = Depends(get_db)):
    return _get_active(db, MenuCategory, category_id, "Menu category")


@menu_router.get("/featured", response_model=List[MenuItemSchema])
def featured_menu_items(db: Session = Depends(get_db)):
    return (
        _menu_items(db)
        .filter(MenuItem.is_featured == True, MenuItem.is_available == True)  # noqa: E712
        .order_by(MenuItem.display_order, MenuItem.name)
        .limit(10)
        .all()
    )


@menu_router.get("/search", response_model=List[MenuItemSchema])
def search_menu_items(
    q: Optional[str] = Query(None, description="Matches name or description"),
    db: Session = Depends(get_db),
):
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Search query is required")
    pattern = f"%{q.strip()}%"
    return (
        _menu_items(db)
        .filter(
            MenuItem.is_available == True,  # noqa: E712
            or_(MenuItem.name.ilike(pattern), MenuItem.description.ilike(pattern)),
        )
        .order_by(MenuItem.name)
        .limit(20)
        .all()
    )


@menu_router.get("/full", response_model=List[MenuSection])
def full_menu(db: Session = Depends(get_db)):
    """Active categories in display order, each with its available items."""
    categories = (
        db.query(MenuCategory)
        .filter(MenuCategory.is_active == True)  # noqa: E712
        .order_by(MenuCategory.display_order, MenuCategory.name)
        .all()
    )
    items = (
        _menu_items(db)
        .filter(MenuItem.is_available == True)  # noqa: E712
        .order_by(MenuItem.display_order, MenuItem.name)
        .all()
    )
    sections = []
    for category in categories:
        mine = [MenuItemSchema.model_validate(i) for i in items if i.category_id == category.id]
        sections.append(MenuSection(
            **MenuCategorySchema.model_validate(category).model_dump(),
            items=mine,
            item_count=len(mine),
        ))
    return sections


@menu_router.get("/{item_id}", response_model=MenuItemSchema)
def get_menu_item(item_id: UUID, db: Session = Depends(get_db)):
    return _get_active(db, MenuItem, item_id, "Menu item")
