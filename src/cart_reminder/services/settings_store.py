"""Per-shop settings with get-or-create semantics."""

from dataclasses import dataclass

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.config import Settings, get_settings
from cart_reminder.infrastructure.database.models import ShopSettings, utcnow
from cart_reminder.schemas import (
    CcaiCredentials,
    ReminderSettings,
    ShopSettingsUpdate,
    ShopSettingsView,
)

logger = structlog.get_logger()


def shop_name_from_domain(shop: str) -> str:
    """``my-store.myshopify.com`` -> ``my-store``."""
    return shop.split(".")[0]


@dataclass
class SettingsLookup:
    """Result of a get-or-create: the settings row and whether it was just made."""

    settings: ShopSettings
    created: bool


class SettingsService:
    """Reads and updates shop settings, creating defaults on first access."""

    def __init__(self, session: AsyncSession, app_settings: Settings | None = None):
        self.session = session
        self.app_settings = app_settings or get_settings()

    async def find(self, shop: str) -> ShopSettings | None:
        result = await self.session.execute(
            select(ShopSettings).where(ShopSettings.shop_domain == shop)
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, shop: str) -> SettingsLookup:
        """Return the shop's settings, persisting defaults if none exist yet."""
        existing = await self.find(shop)
        if existing is not None:
            return SettingsLookup(settings=existing, created=False)

        settings = ShopSettings(
            shop_domain=shop,
            shop_name=shop_name_from_domain(shop),
            reminders_enabled=False,
            hour_threshold=self.app_settings.default_hour_threshold,
            message_template=self.app_settings.default_message_template,
            ccai_client_id=self.app_settings.default_ccai_client_id,
            ccai_api_key=self.app_settings.default_ccai_api_key,
        )
        self.session.add(settings)
        try:
            await self.session.commit()
        except IntegrityError:
            # Created concurrently by another request
            await self.session.rollback()
            existing = await self.find(shop)
            if existing is None:
                raise
            return SettingsLookup(settings=existing, created=False)

        logger.info("Created default settings", shop=shop)
        return SettingsLookup(settings=settings, created=True)

    async def get_shop_settings(self, shop: str) -> ShopSettings:
        return (await self.get_or_create(shop)).settings

    async def update_shop_settings(
        self, shop: str, update: ShopSettingsUpdate
    ) -> ShopSettings:
        """Merge the provided fields into the stored settings."""
        settings = await self.get_shop_settings(shop)

        if update.shop_name:
            settings.shop_name = update.shop_name

        reminders = update.abandoned_cart_reminders
        if reminders is not None:
            if reminders.enabled is not None:
                settings.reminders_enabled = reminders.enabled
            if reminders.hour_threshold is not None:
                settings.hour_threshold = reminders.hour_threshold
            if reminders.message_template is not None:
                settings.message_template = reminders.message_template

        if update.ccai is not None:
            if update.ccai.client_id is not None:
                settings.ccai_client_id = update.ccai.client_id
            if update.ccai.api_key is not None:
                settings.ccai_api_key = update.ccai.api_key

        settings.updated_at = utcnow()
        await self.session.commit()

        logger.info(
            "Updated shop settings",
            shop=shop,
            reminders_enabled=settings.reminders_enabled,
            hour_threshold=settings.hour_threshold,
        )
        return settings

    @staticmethod
    def to_view(settings: ShopSettings) -> ShopSettingsView:
        return ShopSettingsView(
            shop_domain=settings.shop_domain,
            shop_name=settings.shop_name,
            abandoned_cart_reminders=ReminderSettings(
                enabled=settings.reminders_enabled,
                hour_threshold=settings.hour_threshold,
                message_template=settings.message_template,
            ),
            ccai=CcaiCredentials(
                client_id=settings.ccai_client_id,
                api_key=settings.ccai_api_key,
            ),
        )
