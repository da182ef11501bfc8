import uuid
import enum
from decimal import Decimal
from sqlalchemy import Column, String, Boolean, DateTime, func, Text, DECIMAL, Integer, CheckConstraint, Enum as SAEnum
from sqlalchemy.dialects.postgresql import UUID
from app.db.session import Base

class RoomType(str, enum.Enum):
    standard = "standard"
    deluxe = "deluxe"
    suite = "suite"
    presidential = "presidential"

class Room(Base):
    __tablename__ = "rooms"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    room_number = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    type = Column(SAEnum(RoomType, native_enum=False), nullable=False, index=True)
    description = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=False)
    price_per_night = Column(DECIMAL(10, 2), nullable=False)
    discount = Column(DECIMAL(5, 2), default=0) # percent
    floor = Column(Integer, nullable=True)
    is_available = Column(Boolean, default=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("price_per_night >= 0", name="ck_rooms_price_non_negative"),
        CheckConstraint("capacity BETWEEN 1 AND 10", name="ck_rooms_capacity"),
    )

    @property
    def current_price(self) -> Decimal:
        price = Decimal(self.price_per_night)
        if self.discount and Decimal(self.discount) > 0:
            return price * (1 - Decimal(self.discount) / 100)
        return price
