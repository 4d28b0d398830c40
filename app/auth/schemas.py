import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    model_config = {"populate_by_name": True}

    email: EmailStr
    full_name: str = Field(alias="fullName", min_length=3, max_length=50)
    # The byte limit that includes the pepper is enforced at registration.
    password: str = Field(min_length=6, max_length=64)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    token: str


class UserResponse(BaseModel):
    """Public view of a user. Never carries the password or its hash."""
    model_config = {"from_attributes": True}

    id: uuid.UUID
    email: str
    full_name: str = Field(serialization_alias="fullName")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")
