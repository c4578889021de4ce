"""
Server-side lease acquisition.

The reservation (lease row plus the ``available -> leased`` transition) commits
as one transaction guarded by a conditional UPDATE, so two concurrent callers
can never both obtain the same vehicle. Recording the simulated payment runs
afterwards in its own transaction and is best-effort: a failure there is
logged and reported, never rolled back into the reservation.
"""
import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from leasehub.api.v1.leases.schemas import AcquireLeaseRequest
from leasehub.core.config import settings
from leasehub.core.exceptions import AppException
from leasehub.core.payment_gateway import simulate_charge
from leasehub.core.session import Identity
from leasehub.models.enums import LeaseStatus, PaymentStatus, VehicleStatus
from leasehub.models.lease import Lease
from leasehub.models.payment import Payment
from leasehub.models.vehicle import Vehicle

logger = logging.getLogger(__name__)


def idempotency_key_for(user_id: UUID, vehicle_id: UUID, nonce: str) -> str:
    return hashlib.sha256(f"{user_id}:{vehicle_id}:{nonce}".encode("utf-8")).hexdigest()


@dataclass
class AcquisitionResult:
    lease: Lease
    vehicle: Vehicle
    payment: Optional[Payment] = None
    payment_recorded: bool = False
    replayed: bool = False


class LeaseAcquisitionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def acquire(
        self,
        identity: Identity,
        vehicle_id: UUID,
        request: AcquireLeaseRequest,
    ) -> AcquisitionResult:
        key = None
        if request.idempotency_key:
            key = idempotency_key_for(identity.user_id, vehicle_id, request.idempotency_key)
            replay = await self._replay(key)
            if replay:
                return replay

        lease = await self._reserve(identity, vehicle_id, key)
        if lease is None:
            # Lost the unique-key race to an identical request
            replay = await self._replay(key)
            if replay:
                return replay
            AppException().raise_409("Vehicle is not available for lease")

        payment = await self._record_payment(identity, lease, request)
        await self.db.refresh(lease)
        vehicle = await self._load_vehicle(vehicle_id)
        return AcquisitionResult(
            lease=lease,
            vehicle=vehicle,
            payment=payment,
            payment_recorded=payment is not None,
        )

    async def _reserve(self, identity: Identity, vehicle_id: UUID, key: Optional[str]) -> Optional[Lease]:
        """Insert the lease and flip the vehicle status in one transaction. None on a key collision."""
        vehicle = await self.db.get(Vehicle, vehicle_id)
        if not vehicle:
            AppException().raise_404("Vehicle not found")
        if identity.owns(vehicle.owner_id):
            AppException().raise_403("You cannot lease your own vehicle")
        if vehicle.status != VehicleStatus.available.value:
            AppException().raise_409("Vehicle is not available for lease")
        # A client-orchestrated lease leaves the vehicle available until its status PATCH
        active = await self.db.execute(
            select(Lease.id)
            .where(Lease.vehicle_id == vehicle.id, Lease.status == LeaseStatus.active.value)
            .limit(1)
        )
        if active.scalar_one_or_none() is not None:
            AppException().raise_409("This vehicle already has an active lease")

        now = datetime.utcnow()
        lease = Lease(
            user_id=identity.user_id,
            vehicle_id=vehicle.id,
            start_date=now,
            end_date=now + timedelta(days=settings.LEASE_TERM_DAYS),
            monthly_payment=vehicle.lease_price,
            status=LeaseStatus.active.value,
            idempotency_key=key,
        )
        try:
            self.db.add(lease)
            await self.db.flush()
            swapped = await self.db.execute(
                update(Vehicle)
                .where(Vehicle.id == vehicle.id, Vehicle.status == VehicleStatus.available.value)
                .values(status=VehicleStatus.leased.value, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if swapped.rowcount != 1:
                await self.db.rollback()
                logger.info("Vehicle %s was taken before %s could reserve it", vehicle_id, identity.user_id)
                AppException().raise_409("Vehicle is not available for lease")
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            if key is None:
                raise
            return None

        logger.info("Lease %s reserved vehicle %s for %s", lease.id, vehicle_id, identity.user_id)
        return lease

    async def _record_payment(
        self,
        identity: Identity,
        lease: Lease,
        request: AcquireLeaseRequest,
    ) -> Optional[Payment]:
        try:
            charge = await simulate_charge(
                lease.monthly_payment,
                payment_method=request.payment_method,
                transaction_id=request.transaction_id,
            )
            payment = Payment(
                lease_id=lease.id,
                user_id=identity.user_id,
                amount=charge.amount,
                payment_method=charge.payment_method,
                transaction_id=charge.transaction_id,
                status=PaymentStatus.succeeded.value,
            )
            self.db.add(payment)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception("Payment recording failed for lease %s; the lease stays active", lease.id)
            return None
        return payment

    async def _replay(self, key: str) -> Optional[AcquisitionResult]:
        result = await self.db.execute(select(Lease).where(Lease.idempotency_key == key))
        lease = result.scalars().first()
        if not lease:
            return None

        payments = await self.db.execute(
            select(Payment).where(Payment.lease_id == lease.id).order_by(Payment.created_at).limit(1)
        )
        payment = payments.scalars().first()
        logger.info("Replaying lease %s for idempotency key %s", lease.id, key[:12])
        return AcquisitionResult(
            lease=lease,
            vehicle=await self._load_vehicle(lease.vehicle_id),
            payment=payment,
            payment_recorded=payment is not None,
            replayed=True,
        )

    async def _load_vehicle(self, vehicle_id: UUID) -> Vehicle:
        result = await self.db.execute(
            select(Vehicle)
            .where(Vehicle.id == vehicle_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().one()
