"""Shared FastAPI dependencies."""

from typing import Annotated

from fastapi import Header, HTTPException

from cart_reminder.services.messaging import TransportFactory, build_ccai_transport


async def get_shop_domain(
    x_shopify_shop_domain: Annotated[str | None, Header()] = None,
) -> str:
    """Shop domain of the current request, taken from the Shopify header."""
    shop = (x_shopify_shop_domain or "").strip().lower()
    if not shop:
        raise HTTPException(status_code=400, detail="Shop not found in request")
    return shop


def get_transport_factory() -> TransportFactory:
    """SMS transport factory; overridden in tests."""
    return build_ccai_transport
