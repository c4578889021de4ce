from typing import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from leasehub.core.config import settings
from leasehub.core.database import Database
from leasehub.core.exceptions import AppException
from leasehub.core.notifier import Notifier
from leasehub.core.security import decode_access_token
from leasehub.core.session import Identity


bearer_scheme = HTTPBearer(auto_error=False)


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db(database: Database = Depends(get_database)) -> AsyncGenerator[AsyncSession, None]:
    async with database.session_maker() as session:
        yield session


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


async def get_session_payload(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    """
    Return the verified session payload.
    The session cookie is preferred; a bearer token with the same contents is accepted too.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        AppException().raise_401("Not authenticated")
    payload = decode_access_token(token)
    if payload is None or not payload.get("sub"):
        AppException().raise_401("Invalid or expired session. Please sign in again.")
    return payload


async def get_current_identity(payload: dict = Depends(get_session_payload)) -> Identity:
    identity = Identity.from_payload(payload)
    if identity is None:
        AppException().raise_401("Invalid session subject")
    return identity


async def get_current_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        AppException().raise_403("Not an admin user")
    return identity
