from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from leasehub.api.v1.common import MessageResponse
from leasehub.api.v1.leases.schemas import AcquireLeaseRequest, AcquireLeaseResponse, LeaseResponse
from leasehub.api.v1.leases.workflow import LeaseAcquisitionService
from leasehub.api.v1.payments.schemas import PaymentResponse
from leasehub.api.v1.vehicles.schemas import (
    CreateVehicleRequest,
    UpdateVehicleRequest,
    VehicleMessageResponse,
    VehicleResponse,
)
from leasehub.api.v1.vehicles.service import VehicleService
from leasehub.core.deps import get_current_identity, get_db
from leasehub.core.session import Identity

router = APIRouter()


@router.post(
    "",
    response_model=VehicleMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="List a vehicle",
    description="Create a listing owned by the signed-in user. New listings are always available.",
)
async def create_vehicle(
    vehicle_data: CreateVehicleRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    vehicle = await VehicleService(db).create_vehicle(identity, vehicle_data)
    return VehicleMessageResponse(message="Vehicle listed successfully", vehicle=VehicleResponse.model_validate(vehicle))


@router.get(
    "",
    response_model=List[VehicleResponse],
    summary="Get all vehicles",
    description="Every listing with its owner summary, newest first. Filtering and sorting are left to the client.",
)
async def get_all_vehicles(db: AsyncSession = Depends(get_db)):
    vehicles = await VehicleService(db).get_all_vehicles()
    return [VehicleResponse.model_validate(vehicle) for vehicle in vehicles]


@router.get(
    "/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Get vehicle by ID",
)
async def get_vehicle_by_id(
    vehicle_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    vehicle = await VehicleService(db).get_vehicle_or_404(vehicle_id)
    return VehicleResponse.model_validate(vehicle)


@router.patch(
    "/{vehicle_id}",
    response_model=VehicleMessageResponse,
    summary="Partially update vehicle",
    description="Owner only. A lessee holding an active lease on the vehicle may send exactly {status: leased}.",
)
async def patch_vehicle(
    vehicle_id: UUID,
    vehicle_data: UpdateVehicleRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    vehicle = await VehicleService(db).update_vehicle(identity, vehicle_id, vehicle_data)
    return VehicleMessageResponse(message="Vehicle updated successfully", vehicle=VehicleResponse.model_validate(vehicle))


@router.delete(
    "/{vehicle_id}",
    response_model=MessageResponse,
    summary="Delete vehicle",
    description="Owner only. Vehicles with an active lease cannot be deleted.",
)
async def delete_vehicle(
    vehicle_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    await VehicleService(db).delete_vehicle(identity, vehicle_id)
    return MessageResponse(message="Vehicle deleted successfully")


@router.post(
    "/{vehicle_id}/lease",
    response_model=AcquireLeaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Lease a vehicle",
    description="Reserve the vehicle and create an active lease in one transaction, then record the "
    "simulated payment. Resubmitting the same idempotencyKey returns the original result with status 200.",
)
async def acquire_lease(
    vehicle_id: UUID,
    response: Response,
    lease_request: AcquireLeaseRequest | None = None,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    result = await LeaseAcquisitionService(db).acquire(identity, vehicle_id, lease_request or AcquireLeaseRequest())
    if result.replayed:
        response.status_code = status.HTTP_200_OK
        message = "Lease already created for this request"
    elif result.payment_recorded:
        message = "Vehicle leased successfully"
    else:
        message = "Vehicle leased; payment could not be recorded"
    return AcquireLeaseResponse(
        message=message,
        lease=LeaseResponse.model_validate(result.lease),
        payment=PaymentResponse.model_validate(result.payment) if result.payment else None,
        vehicle=VehicleResponse.model_validate(result.vehicle),
        payment_recorded=result.payment_recorded,
        replayed=result.replayed,
    )
