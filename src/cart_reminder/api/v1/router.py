"""API v1 router that aggregates all endpoint routers."""

from fastapi import APIRouter

from cart_reminder.api.v1 import (
    carts,
    health,
    settings,
    shops,
    sms,
    webhooks,
)

api_router = APIRouter()

# Include all routers
api_router.include_router(
    health.router,
    tags=["Health"],
)

api_router.include_router(
    shops.router,
    tags=["Shops"],
)

api_router.include_router(
    settings.router,
    prefix="/settings",
    tags=["Settings"],
)

api_router.include_router(
    carts.router,
    tags=["Abandoned Carts"],
)

api_router.include_router(
    sms.router,
    tags=["SMS"],
)

api_router.include_router(
    webhooks.router,
    prefix="/webhooks",
    tags=["Webhooks"],
)
