from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from leasehub.api.v1.common import CamelModel


class CreatePaymentRequest(CamelModel):
    lease_id: UUID
    amount: float = Field(..., gt=0, description="Amount charged")
    payment_method: str = Field(..., min_length=1, max_length=64, description="e.g. 'Simulated Card'")
    transaction_id: Optional[str] = Field(None, min_length=1, max_length=128, description="Gateway reference; synthesized when omitted")


class PaymentResponse(CamelModel):
    id: UUID
    lease_id: UUID
    user_id: UUID
    amount: float
    payment_method: str
    transaction_id: Optional[str] = None
    status: str
    payment_date: datetime


class PaymentMessageResponse(CamelModel):
    message: str
    payment: PaymentResponse
