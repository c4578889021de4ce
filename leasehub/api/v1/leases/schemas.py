from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from leasehub.api.v1.common import CamelModel
from leasehub.api.v1.payments.schemas import PaymentResponse
from leasehub.api.v1.vehicles.schemas import VehicleResponse, VehicleSummary


class CreateLeaseRequest(CamelModel):
    """Client-orchestrated lease creation (first step of the three-call sequence)."""
    user_id: UUID = Field(..., description="Must equal the signed-in user")
    vehicle_id: UUID
    start_date: datetime
    end_date: datetime
    monthly_payment: float = Field(..., ge=0, description="Must equal the vehicle lease price")

    @model_validator(mode="after")
    def end_after_start(self):
        # Stored as naive UTC
        if self.start_date.tzinfo is not None:
            self.start_date = self.start_date.astimezone(timezone.utc).replace(tzinfo=None)
        if self.end_date.tzinfo is not None:
            self.end_date = self.end_date.astimezone(timezone.utc).replace(tzinfo=None)
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self


class LeaseResponse(CamelModel):
    id: UUID
    user_id: UUID
    vehicle_id: UUID
    start_date: datetime
    end_date: datetime
    monthly_payment: float
    status: str
    created_at: Optional[datetime] = None


class LeaseWithVehicleResponse(LeaseResponse):
    vehicle: Optional[VehicleSummary] = None


class LeaseMessageResponse(CamelModel):
    message: str
    lease: LeaseResponse


class AcquireLeaseRequest(CamelModel):
    """Server-side acquisition of an available vehicle."""
    payment_method: Optional[str] = Field(None, min_length=1, max_length=64, description="Defaults to 'Simulated Card'")
    transaction_id: Optional[str] = Field(None, min_length=1, max_length=128, description="Synthesized when omitted")
    idempotency_key: Optional[str] = Field(
        None,
        min_length=1,
        max_length=128,
        description="Client nonce; resubmitting the same nonce replays the original result",
    )


class AcquireLeaseResponse(CamelModel):
    message: str
    lease: LeaseResponse
    payment: Optional[PaymentResponse] = None
    vehicle: VehicleResponse
    payment_recorded: bool
    replayed: bool = False
