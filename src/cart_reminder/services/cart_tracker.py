"""Cart lifecycle tracking.

Ingests cart and checkout events from Shopify webhooks and keeps one row per
(shop, cart id) up to date. Conversion and reminder flags only ever move from
false to true.
"""

from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.exceptions import InvalidCartPayloadError
from cart_reminder.infrastructure.database.models import Cart, utcnow

logger = structlog.get_logger()


def _cart_id(payload: dict[str, Any]) -> str:
    cart_id = payload.get("id") if isinstance(payload, dict) else None
    if cart_id is None or cart_id == "":
        raise InvalidCartPayloadError("cart payload is missing 'id'")
    return str(cart_id)


def _apply_customer(cart: Cart, payload: dict[str, Any]) -> None:
    customer = payload.get("customer")
    if not customer:
        return
    customer_id = customer.get("id")
    cart.customer_id = str(customer_id) if customer_id is not None else None
    cart.customer_first_name = customer.get("first_name")
    cart.customer_last_name = customer.get("last_name")
    cart.customer_email = customer.get("email")
    cart.customer_phone = customer.get("phone")


class CartTrackerService:
    """Service for recording cart lifecycle events."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_cart(self, shop: str, cart_id: str) -> Cart | None:
        result = await self.session.execute(
            select(Cart).where(Cart.shop_domain == shop, Cart.cart_id == cart_id)
        )
        return result.scalar_one_or_none()

    async def ingest_create(self, shop: str, payload: dict[str, Any]) -> Cart:
        """Start tracking a cart, or update it if we already know it."""
        cart_id = _cart_id(payload)
        if await self.find_cart(shop, cart_id) is not None:
            return await self.ingest_update(shop, payload)

        now = utcnow()
        cart = Cart(
            shop_domain=shop,
            cart_id=cart_id,
            cart_token=str(payload.get("token") or cart_id),
            cart_data=payload,
            created_at=now,
            updated_at=now,
            is_abandoned=False,
            reminder_sent=False,
            converted=False,
        )
        _apply_customer(cart, payload)

        self.session.add(cart)
        await self.session.commit()
        logger.info("Tracking new cart", shop=shop, cart_id=cart_id)
        return cart

    async def ingest_update(self, shop: str, payload: dict[str, Any]) -> Cart:
        """Replace a tracked cart's payload and customer snapshot.

        Unknown carts are created. Reminder and conversion flags are untouched.
        """
        cart_id = _cart_id(payload)
        cart = await self.find_cart(shop, cart_id)
        if cart is None:
            return await self.ingest_create(shop, payload)

        cart.cart_data = payload
        cart.updated_at = utcnow()
        _apply_customer(cart, payload)

        await self.session.commit()
        logger.debug("Updated cart", shop=shop, cart_id=cart_id)
        return cart

    async def mark_converted(self, shop: str, cart_token: str) -> Cart | None:
        """Flag the cart behind a checkout as converted."""
        result = await self.session.execute(
            select(Cart).where(Cart.shop_domain == shop, Cart.cart_token == cart_token)
        )
        cart = result.scalars().first()
        if cart is None:
            logger.warning("No tracked cart for checkout", shop=shop, cart_token=cart_token)
            return None

        if not cart.converted:
            cart.converted = True
            cart.converted_at = utcnow()
            await self.session.commit()
            logger.info("Cart converted", shop=shop, cart_id=cart.cart_id)
        return cart

    async def mark_abandoned(self, cart_pks: list[int]) -> int:
        """Flag carts as abandoned the first time they are picked up for a reminder."""
        if not cart_pks:
            return 0
        result = await self.session.execute(
            update(Cart)
            .where(Cart.id.in_(cart_pks), Cart.is_abandoned.is_(False))
            .values(is_abandoned=True, abandoned_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount or 0

    async def mark_reminder_sent(self, cart_pk: int) -> bool:
        """Set the reminder flag if it is still unset.

        Conditional on ``reminder_sent = false`` so concurrent runs cannot both
        claim the same cart. Returns True if this call flipped the flag.
        """
        result = await self.session.execute(
            update(Cart)
            .where(Cart.id == cart_pk, Cart.reminder_sent.is_(False))
            .values(reminder_sent=True, reminder_sent_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return (result.rowcount or 0) > 0
