"""Schemas for sign-up and login."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from services.user_service import MIN_PASSWORD_LENGTH


class UserCreate(BaseModel):
    """Sign-up form."""

    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    is_linked: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
