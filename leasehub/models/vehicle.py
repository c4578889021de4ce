import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from leasehub.core.database import Base
from leasehub.models.enums import VehicleStatus


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    make = Column(String, nullable=False)
    model = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    license = Column(String, unique=True, index=True, nullable=False)
    lease_price = Column(Float, nullable=False)
    status = Column(String(20), default=VehicleStatus.available.value, nullable=False)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    image_url = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    features = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Listing responses always carry the owner summary
    owner = relationship("User", back_populates="vehicles", lazy="selectin")
    leases = relationship("Lease", back_populates="vehicle")
