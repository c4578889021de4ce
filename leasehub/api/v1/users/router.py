import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from leasehub.api.v1.leases.schemas import LeaseWithVehicleResponse
from leasehub.api.v1.leases.service import LeaseService
from leasehub.api.v1.payments.schemas import PaymentResponse
from leasehub.api.v1.payments.service import PaymentService
from leasehub.api.v1.users.schemas import RegisterRequest, RegisterResponse, UserResponse
from leasehub.api.v1.users.service import UserService
from leasehub.api.v1.vehicles.schemas import VehicleResponse
from leasehub.api.v1.vehicles.service import VehicleService
from leasehub.core.deps import get_current_admin, get_current_identity, get_db, get_notifier
from leasehub.core.exceptions import AppException
from leasehub.core.notifier import Notifier
from leasehub.core.session import Identity, issue_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="Create a lessee account. A welcome email is sent after the response; "
    "with autoLogin the session cookie is set as well.",
)
async def register(
    data: RegisterRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    user_service = UserService(db)
    user = await user_service.register_user(data)
    background_tasks.add_task(notifier.send_welcome, user.email, user.name)

    if not data.auto_login:
        return RegisterResponse(message="User registered successfully", user=UserResponse.model_validate(user))

    try:
        signed_in_user = await user_service.authenticate(data.email, data.password)
        issue_session(response, signed_in_user)
    except HTTPException as exc:
        logger.warning("Auto sign-in failed after registering %s: %s", user.email, exc.detail)
        return RegisterResponse(
            message="Account created. Please sign in to continue.",
            user=UserResponse.model_validate(user),
        )
    return RegisterResponse(
        message="Account created and signed in",
        user=UserResponse.model_validate(user),
        signed_in=True,
    )


@router.get("/me", response_model=UserResponse, summary="Get the signed-in user")
async def get_me(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).get_user_by_id(identity.user_id)
    if not user:
        AppException().raise_404("User not found")
    return UserResponse.model_validate(user)


@router.get(
    "/me/vehicles",
    response_model=List[VehicleResponse],
    summary="List my vehicles",
    description="Vehicles listed by the signed-in user, newest first.",
)
async def get_my_vehicles(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    vehicles = await VehicleService(db).get_vehicles_for_owner(identity.user_id)
    return [VehicleResponse.model_validate(vehicle) for vehicle in vehicles]


@router.get(
    "/me/leases",
    response_model=List[LeaseWithVehicleResponse],
    summary="List my leases",
    description="Leases held by the signed-in user with a vehicle summary, most recent start date first.",
)
async def get_my_leases(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    leases = await LeaseService(db).get_leases_for_user(identity.user_id)
    return [LeaseWithVehicleResponse.model_validate(lease) for lease in leases]


@router.get("/me/payments", response_model=List[PaymentResponse], summary="List my payments")
async def get_my_payments(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    payments = await PaymentService(db).get_payments_for_user(identity.user_id)
    return [PaymentResponse.model_validate(payment) for payment in payments]


@router.get(
    "",
    response_model=List[UserResponse],
    summary="Get all users",
    dependencies=[Depends(get_current_admin)],
)
async def get_users(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
):
    users = await UserService(db).get_users(skip=skip, limit=limit)
    return [UserResponse.model_validate(user) for user in users]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user by ID",
    dependencies=[Depends(get_current_admin)],
)
async def get_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).get_user_by_id(user_id)
    if not user:
        AppException().raise_404("User not found")
    return UserResponse.model_validate(user)
