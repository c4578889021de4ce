from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from leasehub.api.v1.common import CamelModel
from leasehub.models.enums import Role


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=120, description="Full name")
    email: EmailStr
    phone: str = Field(..., min_length=7, max_length=20, description="Contact phone number")
    password: str = Field(..., min_length=8, max_length=128)
    auto_login: bool = Field(False, description="Sign the new user in immediately")

    @field_validator("name", "phone")
    @classmethod
    def strip_and_require(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class OwnerSummary(CamelModel):
    id: UUID
    name: str
    email: str


class UserResponse(CamelModel):
    id: UUID
    name: str
    email: str
    phone: str
    role: Role
    created_at: Optional[datetime] = None


class RegisterResponse(CamelModel):
    message: str
    user: UserResponse
    signed_in: bool = False
