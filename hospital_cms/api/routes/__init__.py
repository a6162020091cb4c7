"""API routers, mounted under /api."""
from fastapi import APIRouter, Depends

from hospital_cms.api.dependencies import require_admin_key
from hospital_cms.api.routes import availability, doctors, time_slots, users

api_router = APIRouter(prefix="/api", dependencies=[Depends(require_admin_key)])
api_router.include_router(doctors.router)
api_router.include_router(users.router)
api_router.include_router(time_slots.router)
api_router.include_router(availability.router)

__all__ = ["api_router"]
