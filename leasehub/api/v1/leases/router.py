from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from leasehub.api.v1.leases.schemas import (
    CreateLeaseRequest,
    LeaseMessageResponse,
    LeaseResponse,
    LeaseWithVehicleResponse,
)
from leasehub.api.v1.leases.service import LeaseService
from leasehub.core.deps import get_current_identity, get_db
from leasehub.core.session import Identity

router = APIRouter()


@router.post(
    "",
    response_model=LeaseMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a lease",
    description="Create an active lease for the signed-in user. Payment and the vehicle status "
    "update are separate calls; prefer POST /vehicles/{id}/lease.",
)
async def create_lease(
    lease_data: CreateLeaseRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    lease = await LeaseService(db).create_lease(identity, lease_data)
    return LeaseMessageResponse(message="Lease created successfully", lease=LeaseResponse.model_validate(lease))


@router.get("/{lease_id}", response_model=LeaseWithVehicleResponse, summary="Get a lease by ID")
async def get_lease(
    lease_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    lease = await LeaseService(db).get_lease_for_user(identity, lease_id)
    return LeaseWithVehicleResponse.model_validate(lease)
