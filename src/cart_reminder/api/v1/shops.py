"""Shop endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.api.deps import get_shop_domain
from cart_reminder.infrastructure.database.connection import get_session
from cart_reminder.schemas import CamelModel
from cart_reminder.services.shop_registry import ShopRegistry

router = APIRouter()


class RegisterShopRequest(CamelModel):
    shopify_plan: str | None = None
    shopify_id: str | None = None


class ShopResponse(CamelModel):
    shop: str
    is_active: bool | None = None


@router.get("/shop", response_model=ShopResponse)
async def current_shop(shop: str = Depends(get_shop_domain)) -> ShopResponse:
    """Shop domain of the current request, for the frontend."""
    return ShopResponse(shop=shop)


@router.post("/shops", response_model=ShopResponse)
async def register_shop(
    request: RegisterShopRequest,
    shop: str = Depends(get_shop_domain),
    session: AsyncSession = Depends(get_session),
) -> ShopResponse:
    """Register the shop after install so scheduled runs include it."""
    record = await ShopRegistry(session).register(
        shop, shopify_plan=request.shopify_plan, shopify_id=request.shopify_id
    )
    return ShopResponse(shop=record.shop_domain, is_active=record.is_active)
