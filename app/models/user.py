import uuid
import enum
from sqlalchemy import Column, String, Boolean, DateTime, func, Text
from sqlalchemy.dialects.postgresql import UUID
from app.db.session import Base

class UserRole(str, enum.Enum):
    customer = "customer"
    staff = "staff"
    admin = "admin"

class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    avatar_url = Column(Text, nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.customer.value, index=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin.value

    @property
    def is_staff(self) -> bool:
        """Staff or admin: may operate bookings and orders of other users."""
        return self.role in (UserRole.staff.value, UserRole.admin.value)
