import uuid
import enum
from sqlalchemy import Column, String, Boolean, DateTime, func, Text, DECIMAL, Integer, CheckConstraint, Enum as SAEnum
from sqlalchemy.dialects.postgresql import UUID
from app.db.session import Base

class TableLocation(str, enum.Enum):
    indoor = "indoor"
    outdoor = "outdoor"
    vip = "vip"
    bar = "bar"
    patio = "patio"

class Table(Base):
    """A dining table that can be reserved."""

    __tablename__ = "dining_tables"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    table_number = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(50), nullable=True)
    location = Column(SAEnum(TableLocation, native_enum=False), nullable=False)
    capacity = Column(Integer, nullable=False)
    minimum_spend = Column(DECIMAL(10, 2), default=0) # charged per reserved hour
    notes = Column(Text, nullable=True)
    is_available = Column(Boolean, default=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("minimum_spend >= 0", name="ck_tables_minimum_spend_non_negative"),
        CheckConstraint("capacity BETWEEN 1 AND 20", name="ck_tables_capacity"),
    )
