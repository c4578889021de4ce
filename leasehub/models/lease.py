import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from leasehub.core.database import Base
from leasehub.models.enums import LeaseStatus


class Lease(Base):
    __tablename__ = "leases"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    vehicle_id = Column(UUID(as_uuid=True), ForeignKey("vehicles.id"), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    monthly_payment = Column(Float, nullable=False)
    status = Column(String(20), default=LeaseStatus.active.value, nullable=False)  # active | ended | cancelled
    # sha256(user:vehicle:nonce) for replay-safe acquisition requests
    idempotency_key = Column(String(64), unique=True, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="leases")
    vehicle = relationship("Vehicle", back_populates="leases", lazy="selectin")
    payments = relationship("Payment", back_populates="lease")
