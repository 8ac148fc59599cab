"""Installed shop registry."""

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.infrastructure.database.models import Shop, utcnow

logger = structlog.get_logger()


class ShopRegistry:
    """Tracks which shops have the app installed."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, shop: str) -> Shop | None:
        result = await self.session.execute(select(Shop).where(Shop.shop_domain == shop))
        return result.scalar_one_or_none()

    async def register(
        self,
        shop: str,
        shopify_plan: str | None = None,
        shopify_id: str | None = None,
    ) -> Shop:
        """Register a shop, reactivating it if it was uninstalled before."""
        record = await self.find(shop)
        if record is None:
            record = Shop(shop_domain=shop, is_active=True, installed_at=utcnow())
            self.session.add(record)
            logger.info("Registered shop", shop=shop)
        elif not record.is_active:
            record.is_active = True
            record.installed_at = utcnow()
            record.uninstalled_at = None
            logger.info("Reactivated shop", shop=shop)

        if shopify_plan is not None:
            record.shopify_plan = shopify_plan
        if shopify_id is not None:
            record.shopify_id = shopify_id

        await self.session.commit()
        return record

    async def deactivate(self, shop: str) -> Shop | None:
        record = await self.find(shop)
        if record is None:
            logger.warning("Uninstall for unknown shop", shop=shop)
            return None
        if record.is_active:
            record.is_active = False
            record.uninstalled_at = utcnow()
            await self.session.commit()
            logger.info("Deactivated shop", shop=shop)
        return record

    async def list_active_domains(self) -> list[str]:
        result = await self.session.execute(
            select(Shop.shop_domain).where(Shop.is_active.is_(True)).order_by(Shop.id)
        )
        return list(result.scalars().all())
