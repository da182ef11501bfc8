import enum
import uuid
from decimal import Decimal
from sqlalchemy import Column, String, Boolean, DateTime, func, Text, DECIMAL, Integer, CheckConstraint, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.db.session import Base


class MealType(str, enum.Enum):
    breakfast = "breakfast"
    brunch = "brunch"
    lunch = "lunch"
    dinner = "dinner"
    all_day = "all-day"
    snacks = "snacks"
    drinks = "drinks"


class MenuCategory(Base):
    __tablename__ = "menu_categories"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(500), nullable=True)
    meal_type = Column(String(20), nullable=False, default=MealType.all_day.value)
    display_order = Column(Integer, nullable=False, default=0)
    available_from = Column(String(5), nullable=True) # HH:MM
    available_until = Column(String(5), nullable=True)
    is_featured = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship("MenuItem", back_populates="category")


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    category_id = Column(UUID(as_uuid=True), ForeignKey("menu_categories.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(DECIMAL(10, 2), nullable=False)
    discount = Column(DECIMAL(5, 2), default=0) # percent
    preparation_time = Column(Integer, default=20) # minutes
    display_order = Column(Integer, nullable=False, default=0)
    is_featured = Column(Boolean, default=False)
    is_available = Column(Boolean, default=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_menu_items_price_non_negative"),
    )

    category = relationship("MenuCategory", back_populates="items")

    @property
    def category_name(self):
        return self.category.name if self.category else None

    @property
    def current_price(self) -> Decimal:
        price = Decimal(self.price)
        if self.discount and Decimal(self.discount) > 0:
            return price * (1 - Decimal(self.discount) / 100)
        return price
