from typing import Optional, Literal
from pydantic import BaseModel, EmailStr, Field, UUID4
from datetime import datetime


# Shared properties
class UserBase(BaseModel):
    email: EmailStr
    full_name: str = Field(min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    avatar_url: Optional[str] = None


# Properties to receive via API on creation (POST /auth/register)
class UserCreate(UserBase):
    password: str = Field(min_length=6)


# Properties to receive via API on staff creation (POST /auth/staff/register)
class StaffCreate(UserCreate):
    admin_secret: str
    role: Literal["staff", "admin"] = "staff"


# Properties to receive via API on update (PATCH /me)
class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    avatar_url: Optional[str] = None


class UserInDBBase(UserBase):
    id: UUID4
    role: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Properties returned via API
class User(UserInDBBase):
    pass


# Compact user for nested responses (admin booking / order views)
class UserSummary(BaseModel):
    id: UUID4
    full_name: str
    email: str
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str
    user: User


class TokenPayload(BaseModel):
    sub: Optional[str] = None


# PATCH /me/password
class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)
