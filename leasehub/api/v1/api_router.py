from fastapi import APIRouter

from leasehub.api.v1.health import router as health_router
from leasehub.api.v1.auth.router import router as auth_router
from leasehub.api.v1.users.router import router as users_router
from leasehub.api.v1.vehicles.router import router as vehicles_router
from leasehub.api.v1.leases.router import router as leases_router
from leasehub.api.v1.payments.router import router as payments_router

api_router = APIRouter()
api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(vehicles_router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(leases_router, prefix="/leases", tags=["leases"])
api_router.include_router(payments_router, prefix="/payments", tags=["payments"])
