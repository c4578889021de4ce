import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leasehub.api.v1.vehicles.schemas import CreateVehicleRequest, UpdateVehicleRequest
from leasehub.core.exceptions import AppException, commit_or_conflict
from leasehub.core.session import Identity
from leasehub.models.enums import LeaseStatus, VehicleStatus
from leasehub.models.lease import Lease
from leasehub.models.vehicle import Vehicle

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = ("image_url", "description", "features")
LICENSE_TAKEN = "A vehicle with this license plate already exists."


class VehicleService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_vehicle_by_id(self, vehicle_id: UUID) -> Optional[Vehicle]:
        result = await self.db.execute(
            select(Vehicle)
            .where(Vehicle.id == vehicle_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def get_vehicle_or_404(self, vehicle_id: UUID) -> Vehicle:
        vehicle = await self.get_vehicle_by_id(vehicle_id)
        if not vehicle:
            AppException().raise_404("Vehicle not found")
        return vehicle

    async def get_all_vehicles(self) -> List[Vehicle]:
        # Full listing set; browse filtering and sorting happen client-side
        result = await self.db.execute(select(Vehicle).order_by(Vehicle.created_at.desc()))
        return list(result.scalars().all())

    async def get_vehicles_for_owner(self, owner_id: UUID) -> List[Vehicle]:
        result = await self.db.execute(
            select(Vehicle).where(Vehicle.owner_id == owner_id).order_by(Vehicle.created_at.desc())
        )
        return list(result.scalars().all())

    async def _ensure_license_free(self, license: str, exclude_id: UUID | None = None) -> None:
        query = select(Vehicle.id).where(Vehicle.license == license)
        if exclude_id is not None:
            query = query.where(Vehicle.id != exclude_id)
        existing = await self.db.execute(query.limit(1))
        if existing.scalar_one_or_none() is not None:
            AppException().raise_409(LICENSE_TAKEN)

    async def _has_active_lease(self, vehicle_id: UUID, user_id: UUID | None = None) -> bool:
        query = select(Lease.id).where(
            Lease.vehicle_id == vehicle_id,
            Lease.status == LeaseStatus.active.value,
        )
        if user_id is not None:
            query = query.where(Lease.user_id == user_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def _check_status_change(self, vehicle: Vehicle, new_status: VehicleStatus) -> None:
        """Owners cannot mark a vehicle leased without a lease, nor release one that is under lease."""
        has_active_lease = await self._has_active_lease(vehicle.id)
        if new_status == VehicleStatus.leased and not has_active_lease:
            AppException().raise_409("A vehicle can only be marked as leased while it has an active lease")
        if new_status != VehicleStatus.leased and has_active_lease and new_status.value != vehicle.status:
            AppException().raise_409("Cannot change the status of a vehicle with an active lease")

    async def create_vehicle(self, identity: Identity, vehicle_data: CreateVehicleRequest) -> Vehicle:
        await self._ensure_license_free(vehicle_data.license)

        new_vehicle = Vehicle(
            make=vehicle_data.make,
            model=vehicle_data.model,
            year=vehicle_data.year,
            license=vehicle_data.license,
            lease_price=vehicle_data.lease_price,
            image_url=vehicle_data.image_url,
            description=vehicle_data.description,
            features=vehicle_data.features,
            owner_id=identity.user_id,
            status=VehicleStatus.available.value,
        )
        self.db.add(new_vehicle)
        await commit_or_conflict(self.db, LICENSE_TAKEN)
        logger.info("Vehicle %s listed by %s", new_vehicle.id, identity.user_id)
        return await self.get_vehicle_or_404(new_vehicle.id)

    async def update_vehicle(
        self,
        identity: Identity,
        vehicle_id: UUID,
        vehicle_data: UpdateVehicleRequest,
    ) -> Vehicle:
        vehicle = await self.get_vehicle_or_404(vehicle_id)
        update_data = {
            field: value
            for field, value in vehicle_data.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        if not update_data:
            AppException().raise_400("No fields to update")

        is_status_only_lease = (
            list(update_data) == ["status"] and update_data["status"] == VehicleStatus.leased
        )
        if not identity.owns(vehicle.owner_id):
            # A lessee may only flip the status of a vehicle they hold an active lease on
            if not is_status_only_lease or not await self._has_active_lease(vehicle.id, identity.user_id):
                AppException().raise_403("Forbidden: You are not authorized to make these changes to the vehicle.")
            logger.info("Lease holder %s marking vehicle %s as leased", identity.user_id, vehicle.id)
        elif "status" in update_data:
            await self._check_status_change(vehicle, update_data["status"])

        if update_data.get("license") and update_data["license"] != vehicle.license:
            await self._ensure_license_free(update_data["license"], exclude_id=vehicle.id)

        for field, value in update_data.items():
            if isinstance(value, VehicleStatus):
                value = value.value
            setattr(vehicle, field, value)

        self.db.add(vehicle)
        await commit_or_conflict(self.db, LICENSE_TAKEN)
        return await self.get_vehicle_or_404(vehicle.id)

    async def delete_vehicle(self, identity: Identity, vehicle_id: UUID) -> None:
        vehicle = await self.get_vehicle_or_404(vehicle_id)
        if not identity.owns(vehicle.owner_id):
            AppException().raise_403("Forbidden: You are not the owner of this vehicle")

        if await self._has_active_lease(vehicle.id):
            AppException().raise_409("Cannot delete a vehicle with an active lease")

        await self.db.delete(vehicle)
        await self.db.commit()
        logger.info("Vehicle %s deleted by %s", vehicle_id, identity.user_id)
