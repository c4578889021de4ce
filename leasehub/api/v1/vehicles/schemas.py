from typing import List, Optional
from uuid import UUID
from datetime import datetime

from pydantic import AliasChoices, Field, field_validator

from leasehub.api.v1.common import CamelModel
from leasehub.api.v1.users.schemas import OwnerSummary
from leasehub.models.enums import VehicleStatus


class CreateVehicleRequest(CamelModel):
    make: str = Field(..., min_length=1, description="Vehicle manufacturer")
    model: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("model", "vehicleModel"),
        description="Vehicle model",
    )
    year: int = Field(..., ge=1990, le=2100, description="Model year")
    license: str = Field(..., min_length=3, description="License plate, unique across listings")
    lease_price: float = Field(..., gt=0, description="Monthly lease price")
    image_url: Optional[str] = Field(None, description="Listing image URL")
    description: Optional[str] = Field(None, description="Free-text description")
    features: Optional[List[str]] = Field(None, description="Feature tags")

    @field_validator("make", "model", "license")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class UpdateVehicleRequest(CamelModel):
    make: Optional[str] = Field(None, min_length=1, description="Vehicle manufacturer")
    model: Optional[str] = Field(
        None,
        min_length=1,
        validation_alias=AliasChoices("model", "vehicleModel"),
        description="Vehicle model",
    )
    year: Optional[int] = Field(None, ge=1990, le=2100, description="Model year")
    license: Optional[str] = Field(None, min_length=3, description="License plate")
    lease_price: Optional[float] = Field(None, gt=0, description="Monthly lease price")
    status: Optional[VehicleStatus] = Field(None, description="available / leased / maintenance")
    image_url: Optional[str] = Field(None, description="Listing image URL")
    description: Optional[str] = Field(None, description="Free-text description")
    features: Optional[List[str]] = Field(None, description="Feature tags")

    @field_validator("make", "model", "license")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class VehicleSummary(CamelModel):
    id: UUID
    make: str
    model: str
    year: int
    license: str
    lease_price: float
    status: str
    image_url: Optional[str] = None


class VehicleResponse(VehicleSummary):
    owner_id: UUID
    description: Optional[str] = None
    features: Optional[List[str]] = None
    owner: Optional[OwnerSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VehicleMessageResponse(CamelModel):
    message: str
    vehicle: VehicleResponse
