from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator
from datetime import datetime

from app.models.enum import UserRole
from app.schemas.base import BaseSchema, as_utc


class UserBase(BaseSchema):
    """Base user schema"""
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_.-]+$",
                          description="Unique username")
    email: EmailStr = Field(..., description="Email address")


class UserCreate(UserBase):
    """Registration payload"""
    password: str = Field(..., min_length=6, max_length=72, description="Password")
    firstname: str | None = Field(None, max_length=100, description="First name")
    lastname: str | None = Field(None, max_length=100, description="Last name")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "john_doe",
                "email": "john@example.com",
                "password": "StrongPassword123!",
                "firstname": "John",
                "lastname": "Doe"
            }
        }
    )


class AdminUserCreate(UserCreate):
    """User created by an administrator, role can be chosen"""
    role: UserRole = UserRole.USER


class UserUpdate(BaseSchema):
    """Profile update, changing the password requires the current one"""
    firstname: str | None = Field(None, max_length=100)
    lastname: str | None = Field(None, max_length=100)
    avatar: HttpUrl | None = None
    password: str | None = Field(None, min_length=6, max_length=72)
    current_password: str | None = Field(None, description="Required when changing the password")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "firstname": "John",
                "lastname": "Smith",
                "avatar": "https://example.com/avatar.jpg"
            }
        }
    )


class AdminUserUpdate(BaseSchema):
    """Update performed by an administrator"""
    firstname: str | None = Field(None, max_length=100)
    lastname: str | None = Field(None, max_length=100)
    avatar: HttpUrl | None = None
    password: str | None = Field(None, min_length=6, max_length=72)
    role: UserRole | None = None
    is_active: bool | None = None


class UserLogin(BaseModel):
    """Login payload"""
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., description="Password")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "john@example.com",
                "password": "StrongPassword123!"
            }
        }
    )


class UserOut(BaseModel):
    """User returned by the API (never includes the password hash)"""
    id: int
    username: str
    email: str
    firstname: str | None
    lastname: str | None
    avatar: str | None
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime | None

    @field_validator("created_at", "updated_at")
    @classmethod
    def timestamps_in_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    model_config = ConfigDict(from_attributes=True)
