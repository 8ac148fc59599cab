"""Abandoned cart detection."""

from datetime import timedelta

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.infrastructure.database.models import Cart, utcnow
from shared.constants import DEFAULT_HOUR_THRESHOLD

logger = structlog.get_logger()


class AbandonmentScanner:
    """Finds carts that qualify for a reminder.

    A cart is abandoned when it has not been updated for ``hour_threshold``
    hours, has not converted, has not been reminded yet and has a customer
    phone number to text.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_abandoned(
        self,
        shop: str,
        hour_threshold: float = DEFAULT_HOUR_THRESHOLD,
        cart_ids: list[str] | None = None,
    ) -> list[Cart]:
        if hour_threshold <= 0:
            raise ValueError("hour_threshold must be positive")

        cutoff = utcnow() - timedelta(hours=hour_threshold)
        query = (
            select(Cart)
            .where(
                Cart.shop_domain == shop,
                Cart.updated_at < cutoff,
                Cart.converted.is_(False),
                Cart.reminder_sent.is_(False),
                Cart.customer_phone.is_not(None),
            )
            .order_by(Cart.updated_at.asc(), Cart.id.asc())
        )
        if cart_ids:
            query = query.where(Cart.cart_id.in_(cart_ids))

        result = await self.session.execute(query)
        carts = list(result.scalars().all())

        logger.debug(
            "Abandoned cart scan",
            shop=shop,
            hour_threshold=hour_threshold,
            found=len(carts),
        )
        return carts
