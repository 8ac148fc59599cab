"""Unit tests for abandoned cart detection."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.services.abandonment import AbandonmentScanner

SHOP = "test-shop.myshopify.com"


class TestFindAbandoned:
    """Selection rules for reminder candidates."""

    @pytest.mark.asyncio
    async def test_returns_only_qualifying_carts(self, session: AsyncSession, make_cart) -> None:
        await make_cart("old", hours_old=48)
        await make_cart("fresh", hours_old=2)
        await make_cart("converted", hours_old=48, converted=True)
        await make_cart("reminded", hours_old=48, reminder_sent=True)
        await make_cart("no-phone", hours_old=48, phone=None)
        await make_cart("other-shop", shop="other.myshopify.com", hours_old=48)

        carts = await AbandonmentScanner(session).find_abandoned(SHOP, 24)

        assert [c.cart_id for c in carts] == ["old"]

    @pytest.mark.asyncio
    async def test_oldest_first(self, session: AsyncSession, make_cart) -> None:
        await make_cart("c-30", hours_old=30)
        await make_cart("c-72", hours_old=72)
        await make_cart("c-48", hours_old=48)

        carts = await AbandonmentScanner(session).find_abandoned(SHOP, 24)

        assert [c.cart_id for c in carts] == ["c-72", "c-48", "c-30"]

    @pytest.mark.asyncio
    async def test_threshold_controls_cutoff(self, session: AsyncSession, make_cart) -> None:
        await make_cart("c-3", hours_old=3)
        await make_cart("c-1", hours_old=1)
        scanner = AbandonmentScanner(session)

        assert [c.cart_id for c in await scanner.find_abandoned(SHOP, 2)] == ["c-3"]
        assert await scanner.find_abandoned(SHOP, 4) == []

    @pytest.mark.asyncio
    async def test_restricted_to_cart_ids(self, session: AsyncSession, make_cart) -> None:
        await make_cart("a", hours_old=48)
        await make_cart("b", hours_old=48)
        await make_cart("fresh", hours_old=1)

        carts = await AbandonmentScanner(session).find_abandoned(
            SHOP, 24, cart_ids=["b", "fresh"]
        )

        assert [c.cart_id for c in carts] == ["b"]

    @pytest.mark.asyncio
    async def test_empty_shop(self, session: AsyncSession) -> None:
        assert await AbandonmentScanner(session).find_abandoned(SHOP) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("threshold", [0, -5])
    async def test_rejects_non_positive_threshold(
        self, session: AsyncSession, threshold: int
    ) -> None:
        with pytest.raises(ValueError):
            await AbandonmentScanner(session).find_abandoned(SHOP, threshold)
