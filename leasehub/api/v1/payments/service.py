import logging
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leasehub.api.v1.payments.schemas import CreatePaymentRequest
from leasehub.core.exceptions import AppException
from leasehub.core.payment_gateway import RECORDED_TRANSACTION_PREFIX, synthesize_transaction_id
from leasehub.core.session import Identity
from leasehub.models.enums import PaymentStatus
from leasehub.models.lease import Lease
from leasehub.models.payment import Payment

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_payment(self, identity: Identity, payment_data: CreatePaymentRequest) -> Payment:
        lease = await self.db.get(Lease, payment_data.lease_id)
        if not lease:
            AppException().raise_404("Lease not found")
        if lease.user_id != identity.user_id:
            AppException().raise_403("Forbidden: You can only pay for your own leases")

        payment = Payment(
            lease_id=lease.id,
            user_id=identity.user_id,
            amount=payment_data.amount,
            payment_method=payment_data.payment_method,
            transaction_id=payment_data.transaction_id or synthesize_transaction_id(RECORDED_TRANSACTION_PREFIX),
            status=PaymentStatus.succeeded.value,
        )
        self.db.add(payment)
        await self.db.commit()
        await self.db.refresh(payment)
        logger.info("Payment %s of %.2f recorded for lease %s", payment.id, payment.amount, lease.id)
        return payment

    async def get_payments_for_user(self, user_id: UUID) -> List[Payment]:
        result = await self.db.execute(
            select(Payment).where(Payment.user_id == user_id).order_by(Payment.payment_date.desc())
        )
        return list(result.scalars().all())
