"""Shopify webhook receivers.

Every handler acknowledges the delivery once the shop is known, even when the
payload cannot be processed: a bad event is logged and dropped rather than
retried by Shopify.
"""

from typing import Any

import orjson
import structlog
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.api.deps import get_shop_domain
from cart_reminder.infrastructure.database.connection import get_session
from cart_reminder.services.cart_tracker import CartTrackerService
from cart_reminder.services.shop_registry import ShopRegistry

logger = structlog.get_logger()

router = APIRouter()

ACK = {"received": True}


async def _read_payload(request: Request) -> dict[str, Any]:
    payload = orjson.loads(await request.body())
    if not isinstance(payload, dict):
        raise ValueError("webhook body must be a JSON object")
    return payload


@router.post("/carts/create")
async def cart_created(
    request: Request,
    shop: str = Depends(get_shop_domain),
    session: AsyncSession = Depends(get_session),
) -> dict[str, bool]:
    """Handle the ``carts/create`` topic."""
    try:
        payload = await _read_payload(request)
        logger.info("Cart created", shop=shop, cart_id=payload.get("id"))
        await CartTrackerService(session).ingest_create(shop, payload)
    except Exception as e:
        await session.rollback()
        logger.error("Error handling webhook", topic="carts/create", shop=shop, error=str(e))
    return ACK


@router.post("/carts/update")
async def cart_updated(
    request: Request,
    shop: str = Depends(get_shop_domain),
    session: AsyncSession = Depends(get_session),
) -> dict[str, bool]:
    """Handle the ``carts/update`` topic."""
    try:
        payload = await _read_payload(request)
        logger.info("Cart updated", shop=shop, cart_id=payload.get("id"))
        await CartTrackerService(session).ingest_update(shop, payload)
    except Exception as e:
        await session.rollback()
        logger.error("Error handling webhook", topic="carts/update", shop=shop, error=str(e))
    return ACK


@router.post("/checkouts/create")
async def checkout_created(
    request: Request,
    shop: str = Depends(get_shop_domain),
    session: AsyncSession = Depends(get_session),
) -> dict[str, bool]:
    """Handle the ``checkouts/create`` topic; marks the originating cart as converted."""
    try:
        payload = await _read_payload(request)
        logger.info("Checkout created", shop=shop, checkout_id=payload.get("id"))
        cart_token = payload.get("cart_token")
        if cart_token:
            await CartTrackerService(session).mark_converted(shop, str(cart_token))
    except Exception as e:
        await session.rollback()
        logger.error("Error handling webhook", topic="checkouts/create", shop=shop, error=str(e))
    return ACK


@router.post("/app/uninstalled")
async def app_uninstalled(
    shop: str = Depends(get_shop_domain),
    session: AsyncSession = Depends(get_session),
) -> dict[str, bool]:
    """Handle the ``app/uninstalled`` topic; stops scheduled sweeps for the shop."""
    try:
        await ShopRegistry(session).deactivate(shop)
    except Exception as e:
        await session.rollback()
        logger.error("Error handling webhook", topic="app/uninstalled", shop=shop, error=str(e))
    return ACK
