"""Payment notification API."""
from fastapi import APIRouter

from app.api.notify import routes_notify

router = APIRouter()

router.include_router(routes_notify.router, tags=["notify"])
