from enum import Enum


class Role(str, Enum):
    admin = "admin"
    lessee = "lessee"


class VehicleStatus(str, Enum):
    available = "available"
    leased = "leased"
    maintenance = "maintenance"


class LeaseStatus(str, Enum):
    active = "active"
    ended = "ended"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    succeeded = "succeeded"
    pending = "pending"
    failed = "failed"
