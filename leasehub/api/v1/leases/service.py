import logging
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leasehub.api.v1.leases.schemas import CreateLeaseRequest
from leasehub.core.exceptions import AppException
from leasehub.core.session import Identity
from leasehub.models.enums import LeaseStatus, VehicleStatus
from leasehub.models.lease import Lease
from leasehub.models.vehicle import Vehicle

logger = logging.getLogger(__name__)


class LeaseService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_lease(self, identity: Identity, lease_data: CreateLeaseRequest) -> Lease:
        """
        First call of the client-orchestrated sequence.
        Payment and the vehicle status update follow as separate requests.
        """
        if lease_data.user_id != identity.user_id:
            AppException().raise_403("You can only create leases for your own account")

        vehicle = await self.db.get(Vehicle, lease_data.vehicle_id)
        if not vehicle:
            AppException().raise_404("Vehicle not found")
        if vehicle.status != VehicleStatus.available.value:
            AppException().raise_409("Vehicle is not available for lease")
        if identity.owns(vehicle.owner_id):
            AppException().raise_403("You cannot lease your own vehicle")

        active = await self.db.execute(
            select(Lease.id)
            .where(Lease.vehicle_id == vehicle.id, Lease.status == LeaseStatus.active.value)
            .limit(1)
        )
        if active.scalar_one_or_none() is not None:
            AppException().raise_409("This vehicle already has an active lease")

        if abs(lease_data.monthly_payment - vehicle.lease_price) > 0.005:
            AppException().raise_400("Monthly payment must match the vehicle lease price")

        lease = Lease(
            user_id=identity.user_id,
            vehicle_id=vehicle.id,
            start_date=lease_data.start_date,
            end_date=lease_data.end_date,
            monthly_payment=vehicle.lease_price,
            status=LeaseStatus.active.value,
        )
        self.db.add(lease)
        await self.db.commit()
        await self.db.refresh(lease)
        logger.info("Lease %s created by %s for vehicle %s", lease.id, identity.user_id, vehicle.id)
        return lease

    async def get_lease_for_user(self, identity: Identity, lease_id: UUID) -> Lease:
        lease = await self.db.get(Lease, lease_id)
        if not lease:
            AppException().raise_404("Lease not found")
        if lease.user_id != identity.user_id:
            AppException().raise_403("Forbidden: This lease does not belong to you")
        return lease

    async def get_leases_for_user(self, user_id: UUID) -> List[Lease]:
        result = await self.db.execute(
            select(Lease).where(Lease.user_id == user_id).order_by(Lease.start_date.desc())
        )
        return list(result.scalars().all())
