"""Pytest configuration and fixtures."""

import os

# Point the application at SQLite before anything imports app.core.config
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from decimal import Decimal
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import get_password_hash, create_access_token
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.user import User, UserRole
from app.models.room import Room, RoomType
from app.models.table import Table, TableLocation
from app.models.garden import Garden
from app.models.menu_item import MenuCategory, MenuItem

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def _make_user(db_session: Session, email: str, role: UserRole, name: str) -> User:
    user = User(
        email=email,
        password_hash=get_password_hash("testpass123"),
        full_name=name,
        role=role.value,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def _headers(user: User) -> dict:
    token = create_access_token(subject=str(user.id), role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_user(db_session: Session) -> User:
    """A customer."""
    return _make_user(db_session, "guest@example.com", UserRole.customer, "Test Guest")


@pytest.fixture
def other_user(db_session: Session) -> User:
    return _make_user(db_session, "other@example.com", UserRole.customer, "Other Guest")


@pytest.fixture
def staff_user(db_session: Session) -> User:
    return _make_user(db_session, "staff@example.com", UserRole.staff, "Front Desk")


@pytest.fixture
def admin_user(db_session: Session) -> User:
    return _make_user(db_session, "admin@example.com", UserRole.admin, "Manager")


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Authentication headers for the customer."""
    return _headers(test_user)


@pytest.fixture
def other_headers(other_user: User) -> dict:
    return _headers(other_user)


@pytest.fixture
def staff_headers(staff_user: User) -> dict:
    return _headers(staff_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return _headers(admin_user)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture
def test_room(db_session: Session) -> Room:
    room = Room(
        room_number="101",
        name="Harbour Deluxe",
        type=RoomType.deluxe,
        capacity=2,
        price_per_night=Decimal("100.00"),
        discount=Decimal("0"),
        floor=1,
    )
    db_session.add(room)
    db_session.commit()
    db_session.refresh(room)
    return room


@pytest.fixture
def test_table(db_session: Session) -> Table:
    table = Table(
        table_number="T1",
        name="Window",
        location=TableLocation.indoor,
        capacity=4,
        minimum_spend=Decimal("20.00"),
    )
    db_session.add(table)
    db_session.commit()
    db_session.refresh(table)
    return table


@pytest.fixture
def test_garden(db_session: Session) -> Garden:
    garden = Garden(
        name="Rose Garden",
        capacity=100,
        price_per_hour=Decimal("50.00"),
        minimum_hours=2,
        cleaning_fee=Decimal("25.00"),
    )
    db_session.add(garden)
    db_session.commit()
    db_session.refresh(garden)
    return garden


@pytest.fixture
def menu_categories(db_session: Session) -> dict:
    categories = {
        "mains": MenuCategory(name="Mains", meal_type="all-day", display_order=2),
        "starters": MenuCategory(name="Starters", meal_type="all-day", display_order=1),
    }
    db_session.add_all(categories.values())
    db_session.commit()
    for category in categories.values():
        db_session.refresh(category)
    return categories


@pytest.fixture
def menu_items(db_session: Session, menu_categories) -> dict:
    items = {
        "burger": MenuItem(
            name="Burger", category_id=menu_categories["mains"].id, price=Decimal("12.50"), preparation_time=25,
        ),
        "salad": MenuItem(
            name="Salad", category_id=menu_categories["starters"].id, price=Decimal("8.00"), preparation_time=10,
        ),
    }
    db_session.add_all(items.values())
    db_session.commit()
    for item in items.values():
        db_session.refresh(item)
    return items
