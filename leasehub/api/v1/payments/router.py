from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from leasehub.api.v1.payments.schemas import CreatePaymentRequest, PaymentMessageResponse, PaymentResponse
from leasehub.api.v1.payments.service import PaymentService
from leasehub.core.deps import get_current_identity, get_db
from leasehub.core.session import Identity

router = APIRouter()


@router.post(
    "",
    response_model=PaymentMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a payment",
    description="Record a succeeded payment against one of the caller's leases. "
    "transactionId defaults to SIM_<epoch ms>.",
)
async def record_payment(
    payment_data: CreatePaymentRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    payment = await PaymentService(db).record_payment(identity, payment_data)
    return PaymentMessageResponse(message="Payment recorded successfully", payment=PaymentResponse.model_validate(payment))
