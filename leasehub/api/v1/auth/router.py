from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from leasehub.api.v1.auth.schemas import LoginRequest, LoginResponse, SessionResponse
from leasehub.api.v1.common import MessageResponse
from leasehub.api.v1.users.schemas import UserResponse
from leasehub.api.v1.users.service import UserService
from leasehub.core.deps import get_current_identity, get_db
from leasehub.core.session import Identity, clear_session, issue_session

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Sign in",
    description="Verify email and password and set the session cookie. "
    "The same token is returned as accessToken for bearer use.",
)
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).authenticate(data.email, data.password)
    token = issue_session(response, user)
    return LoginResponse(user=UserResponse.model_validate(user), access_token=token)


@router.post("/logout", response_model=MessageResponse, summary="Sign out")
async def logout(response: Response):
    clear_session(response)
    return MessageResponse(message="Signed out")


@router.get(
    "/session",
    response_model=SessionResponse,
    summary="Current session",
    description="Return the identity carried by the session token.",
)
async def get_session(identity: Identity = Depends(get_current_identity)):
    return SessionResponse(id=identity.user_id, email=identity.email, name=identity.name, role=identity.role)
