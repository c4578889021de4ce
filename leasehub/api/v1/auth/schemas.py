from uuid import UUID

from pydantic import Field, field_validator

from leasehub.api.v1.common import CamelModel
from leasehub.api.v1.users.schemas import UserResponse


class LoginRequest(CamelModel):
    # Not EmailStr: seeded accounts may use special-use domains such as .local
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginResponse(CamelModel):
    message: str = "Signed in successfully"
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


class SessionResponse(CamelModel):
    """What downstream handlers trust about the caller."""
    id: UUID
    email: str
    name: str
    role: str
