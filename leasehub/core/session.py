"""
Session handling: the signed access token travels in an HttpOnly cookie.

The token payload carries the user id (``sub``), email, name and role. Request
handlers turn it into an :class:`Identity` once and pass that to services.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID

from fastapi import Response

from leasehub.core.config import settings
from leasehub.core.security import create_access_token
from leasehub.models.enums import Role


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, derived from a verified session token."""

    user_id: UUID
    email: str
    name: str
    role: str

    @classmethod
    def from_payload(cls, payload: dict) -> Optional["Identity"]:
        try:
            user_id = UUID(str(payload.get("sub")))
        except (ValueError, TypeError):
            return None
        return cls(
            user_id=user_id,
            email=payload.get("email") or "",
            name=payload.get("name") or "",
            role=payload.get("role") or Role.lessee.value,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin.value

    def owns(self, owner_id: UUID | None) -> bool:
        return owner_id is not None and owner_id == self.user_id


def session_payload_for(user) -> dict:
    return {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
    }


def issue_session(response: Response, user) -> str:
    """Create a session token for ``user`` and attach it to ``response`` as a cookie."""
    max_age = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    token = create_access_token(
        data=session_payload_for(user),
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )
    return token


def clear_session(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
