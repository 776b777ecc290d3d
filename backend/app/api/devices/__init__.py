"""Device API."""
from fastapi import APIRouter

from app.api.devices import routes_register, routes_status

router = APIRouter()

router.include_router(routes_register.router, tags=["devices"])
router.include_router(routes_status.router, tags=["devices"])
