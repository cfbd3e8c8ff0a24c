from fastapi import APIRouter

from . import health, notifications, recipients

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(recipients.router)
api_router.include_router(notifications.router)
