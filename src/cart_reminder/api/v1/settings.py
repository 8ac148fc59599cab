"""Shop settings endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.api.deps import get_shop_domain
from cart_reminder.infrastructure.database.connection import get_session
from cart_reminder.schemas import ShopSettingsUpdate, ShopSettingsView
from cart_reminder.services.settings_store import SettingsService

router = APIRouter()


@router.get("", response_model=ShopSettingsView)
async def get_settings_for_shop(
    shop: str = Depends(get_shop_domain),
    session: AsyncSession = Depends(get_session),
) -> ShopSettingsView:
    """
    Get the reminder settings for the current shop.

    Settings are created with defaults (reminders disabled, 24 hour
    threshold, default template) the first time a shop asks for them.
    """
    service = SettingsService(session)
    settings = await service.get_shop_settings(shop)
    return service.to_view(settings)


@router.post("", response_model=ShopSettingsView)
async def update_settings_for_shop(
    update: ShopSettingsUpdate,
    shop: str = Depends(get_shop_domain),
    session: AsyncSession = Depends(get_session),
) -> ShopSettingsView:
    """
    Update the reminder settings for the current shop.

    Only the fields present in the body are changed; omitted sections keep
    their stored values.
    """
    service = SettingsService(session)
    settings = await service.update_shop_settings(shop, update)
    return service.to_view(settings)
