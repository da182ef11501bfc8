import uuid
from sqlalchemy import Column, String, Boolean, DateTime, func, Text, DECIMAL, Integer, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from app.db.session import Base

class Garden(Base):
    """Garden / event venue booked by the hour."""

    __tablename__ = "gardens"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=False)
    price_per_hour = Column(DECIMAL(10, 2), nullable=False)
    minimum_hours = Column(Integer, nullable=False, default=2)
    security_deposit = Column(DECIMAL(10, 2), default=0)
    cleaning_fee = Column(DECIMAL(10, 2), default=0)
    is_available = Column(Boolean, default=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("price_per_hour >= 0", name="ck_gardens_price_non_negative"),
        CheckConstraint("cleaning_fee >= 0", name="ck_gardens_cleaning_fee_non_negative"),
        CheckConstraint("minimum_hours >= 1", name="ck_gardens_minimum_hours"),
        CheckConstraint("capacity BETWEEN 1 AND 1000", name="ck_gardens_capacity"),
    )
