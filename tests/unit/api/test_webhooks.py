"""Unit tests for Shopify webhook receivers."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.infrastructure.database.models import Cart, Shop

SHOP = "test-shop.myshopify.com"


class TestCartWebhooks:
    """carts/create and carts/update."""

    @pytest.mark.asyncio
    async def test_cart_create_tracks_cart(
        self, async_client: AsyncClient, shop_headers, sample_cart_payload, reload_cart
    ) -> None:
        response = await async_client.post(
            "/api/v1/webhooks/carts/create", json=sample_cart_payload, headers=shop_headers
        )

        assert response.status_code == 200
        assert response.json() == {"received": True}
        cart = await reload_cart("123456")
        assert cart.cart_token == "abc123"
        assert cart.customer_phone == "5551234567"

    @pytest.mark.asyncio
    async def test_cart_update_replaces_snapshot(
        self, async_client: AsyncClient, shop_headers, sample_cart_payload, reload_cart
    ) -> None:
        await async_client.post(
            "/api/v1/webhooks/carts/create", json=sample_cart_payload, headers=shop_headers
        )
        sample_cart_payload["customer"]["phone"] = "5559998888"

        response = await async_client.post(
            "/api/v1/webhooks/carts/update", json=sample_cart_payload, headers=shop_headers
        )

        assert response.status_code == 200
        cart = await reload_cart("123456")
        assert cart.customer_phone == "5559998888"

    @pytest.mark.asyncio
    async def test_missing_shop_header(self, async_client: AsyncClient, sample_cart_payload) -> None:
        response = await async_client.post(
            "/api/v1/webhooks/carts/create", json=sample_cart_payload
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Shop not found in request"

    @pytest.mark.asyncio
    async def test_bad_payload_still_acknowledged(
        self, async_client: AsyncClient, shop_headers, session: AsyncSession
    ) -> None:
        no_id = await async_client.post(
            "/api/v1/webhooks/carts/create", json={"token": "abc"}, headers=shop_headers
        )
        not_json = await async_client.post(
            "/api/v1/webhooks/carts/update",
            content=b"not json",
            headers={**shop_headers, "Content-Type": "application/json"},
        )

        assert no_id.status_code == 200
        assert no_id.json() == {"received": True}
        assert not_json.status_code == 200
        count = (await session.execute(select(func.count(Cart.id)))).scalar()
        assert count == 0


class TestCheckoutWebhook:
    """checkouts/create marks carts converted."""

    @pytest.mark.asyncio
    async def test_checkout_converts_cart(
        self, async_client: AsyncClient, shop_headers, make_cart, reload_cart
    ) -> None:
        await make_cart("c1")

        response = await async_client.post(
            "/api/v1/webhooks/checkouts/create",
            json={"id": 555, "cart_token": "token-c1"},
            headers=shop_headers,
        )

        assert response.status_code == 200
        cart = await reload_cart("c1")
        assert cart.converted is True
        assert cart.converted_at is not None

    @pytest.mark.asyncio
    async def test_checkout_without_cart_token(
        self, async_client: AsyncClient, shop_headers, make_cart, reload_cart
    ) -> None:
        await make_cart("c1")

        response = await async_client.post(
            "/api/v1/webhooks/checkouts/create", json={"id": 555}, headers=shop_headers
        )

        assert response.status_code == 200
        assert (await reload_cart("c1")).converted is False


class TestUninstallWebhook:
    @pytest.mark.asyncio
    async def test_uninstall_deactivates_shop(
        self, async_client: AsyncClient, shop_headers, configure_shop, session: AsyncSession
    ) -> None:
        await configure_shop()

        response = await async_client.post(
            "/api/v1/webhooks/app/uninstalled", json={}, headers=shop_headers
        )

        assert response.status_code == 200
        shop = (
            await session.execute(
                select(Shop)
                .where(Shop.shop_domain == SHOP)
                .execution_options(populate_existing=True)
            )
        ).scalar_one()
        assert shop.is_active is False
        assert shop.uninstalled_at is not None
