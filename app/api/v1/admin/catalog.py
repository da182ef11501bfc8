from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin_user
from app.models.user import User
from app.models.room import Room
from app.models.table import Table
from app.models.garden import Garden
from app.models.menu_item import MenuCategory, MenuItem
from app.schemas.catalog import (
    RoomCreate,
    RoomUpdate,
    Room as RoomSchema,
    TableCreate,
    TableUpdate,
    Table as TableSchema,
    GardenCreate,
    GardenUpdate,
    Garden as GardenSchema,
    MenuItemCreate,
    MenuItemUpdate,
    MenuItem as MenuItemSchema,
    MenuCategoryCreate,
    MenuCategoryUpdate,
    MenuCategory as MenuCategorySchema,
)
from app.schemas.common import MessageResponse

rooms_router = APIRouter(prefix="/admin/rooms", tags=["Admin - Rooms"])
tables_router = APIRouter(prefix="/admin/tables", tags=["Admin - Tables"])
gardens_router = APIRouter(prefix="/admin/gardens", tags=["Admin - Gardens"])
menu_router = APIRouter(prefix="/admin/menu", tags=["Admin - Menu"])
menu_categories_router = APIRouter(prefix="/admin/menu/categories", tags=["Admin - Menu"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_or_404(db: Session, model, item_id: UUID, label: str):
    item = db.query(model).filter(model.id == item_id, model.is_active == True).first()  # noqa: E712
    if not item:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return item


def _apply_update(db: Session, item, data):
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(item, field, value)
    db.commit()
    db.refresh(item)
    return item


def _soft_delete(db: Session, item, label: str) -> MessageResponse:
    # Bookings and orders keep referencing the row
    item.is_active = False
    item.is_available = False
    db.commit()
    return MessageResponse(message=f"{label} deleted")


def _ensure_unique(db: Session, column, value, label: str):
    if db.query(column).filter(column == value).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{label} {value} already exists",
        )


def _add(db: Session, item):
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------


@rooms_router.post("/", response_model=RoomSchema, status_code=status.HTTP_201_CREATED)
def create_room(
    data: RoomCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    _ensure_unique(db, Room.room_number, data.room_number, "Room")
    return _add(db, Room(**data.model_dump()))


@rooms_router.patch("/{room_id}", response_model=RoomSchema)
def update_room(
    room_id: UUID,
    data: RoomUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Rate changes only affect bookings made afterwards."""
    return _apply_update(db, _get_or_404(db, Room, room_id, "Room"), data)


@rooms_router.delete("/{room_id}", response_model=MessageResponse)
def delete_room(
    room_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    return _soft_delete(db, _get_or_404(db, Room, room_id, "Room"), "Room")


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


@tables_router.post("/", response_model=TableSchema, status_code=status.HTTP_201_CREATED)
def create_table(
    data: TableCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    _ensure_unique(db, Table.table_number, data.table_number, "Table")
    return _add(db, Table(**data.model_dump()))


@tables_router.patch("/{table_id}", response_model=TableSchema)
def update_table(
    table_id: UUID,
    data: TableUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    return _apply_update(db, _get_or_404(db, Table, table_id, "Table"), data)


@tables_router.delete("/{table_id}", response_model=MessageResponse)
def delete_table(
    table_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    return _soft_delete(db, _get_or_404(db, Table, table_id, "Table"), "Table")


# ---------------------------------------------------------------------------
# Gardens
# ---------------------------------------------------------------------------


@gardens_router.post("/", response_model=GardenSchema, status_code=status.HTTP_201_CREATED)
def create_garden(
    data: GardenCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    return _add(db, Garden(**data.model_dump()))


@gardens_router.patch("/{garden_id}", response_model=GardenSchema)
def update_garden(
    garden_id: UUID,
    data: GardenUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    return _apply_update(db, _get_or_404(db, Garden, garden_id, "Garden"), data)


@gardens_router.delete("/{garden_id}", response_model=MessageResponse)
def delete_garden(
    garden_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    return _soft_delete(db, _get_or_404(db, Garden, garden_id, "Garden"), "Garden")


# ---------------------------------------------------------------------------
# Menu categories
# ---------------------------------------------------------------------------


@menu_categories_router.post("/", response_model=MenuCategorySchema, status_code=status.HTTP_201_CREATED)
def create_menu_category(
    data: MenuCategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    _ensure_unique(db, MenuCategory.name, data.name, "Menu category")
    return _add(db, MenuCategory(**data.model_dump(mode="json")))


@menu_categories_router.patch("/{category_id}", response_model=MenuCategorySchema)
def update_menu_category(
    category_id: UUID,
    data: MenuCategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    category = _get_or_404(db, MenuCategory, category_id, "Menu category")
    if data.name is not None and data.name != category.name:
        _ensure_unique(db, MenuCategory.name, data.name, "Menu category")
    for field, value in data.model_dump(exclude_unset=True, mode="json").items():
        setattr(category, field, value)
    db.commit()
    db.refresh(category)
    return category


@menu_categories_router.delete("/{category_id}", response_model=MessageResponse)
def delete_menu_category(
    category_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    category = _get_or_404(db, MenuCategory, category_id, "Menu category")
    in_use = (
        db.query(MenuItem)
        .filter(MenuItem.category_id == category.id, MenuItem.is_active == True)  # noqa: E712
        .count()
    )
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Menu category still has {in_use} item(s)",
        )
    category.is_active = False
    db.commit()
    return MessageResponse(message="Menu category deleted")


# ---------------------------------------------------------------------------
# Menu items
# ---------------------------------------------------------------------------


@menu_router.post("/", response_model=MenuItemSchema, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    data: MenuItemCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    _get_or_404(db, MenuCategory, data.category_id, "Menu category")
    return _add(db, MenuItem(**data.model_dump()))


@menu_router.patch("/{item_id}", response_model=MenuItemSchema)
def update_menu_item(
    item_id: UUID,
    data: MenuItemUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    """Existing orders keep the name and price they were placed with."""
    item = _get_or_404(db, MenuItem, item_id, "Menu item")
    if data.category_id is not None:
        _get_or_404(db, MenuCategory, data.category_id, "Menu category")
    return _apply_update(db, item, data)


@menu_router.patch("/{item_id}/availability", response_model=MenuItemSchema)
def toggle_menu_item_availability(
    item_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    item = _get_or_404(db, MenuItem, item_id, "Menu item")
    item.is_available = not item.is_available
    db.commit()
    db.refresh(item)
    return item


@menu_router.delete("/{item_id}", response_model=MessageResponse)
def delete_menu_item(
    item_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    return _soft_delete(db, _get_or_404(db, MenuItem, item_id, "Menu item"), "Menu item")
