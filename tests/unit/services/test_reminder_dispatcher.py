"""Unit tests for per-shop reminder dispatch."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.infrastructure.database.models import SmsHistory, SmsMessageType, SmsStatus
from cart_reminder.services.reminder_dispatcher import (
    ReminderDispatcher,
    build_cart_url,
    render_message,
)
from shared.constants import DEFAULT_MESSAGE_TEMPLATE

SHOP = "test-shop.myshopify.com"


class TestRenderMessage:
    """Placeholder substitution."""

    def test_fills_placeholders(self) -> None:
        message = render_message(
            "Hi ${firstName}, visit ${cartUrl}",
            "John",
            "Doe",
            "Shop",
            "https://shop.test/cart/abc",
        )
        assert message == "Hi John, visit https://shop.test/cart/abc"

    def test_missing_names_use_fallbacks(self) -> None:
        message = render_message("Hi ${firstName} ${lastName}!", None, None, "Shop", "u")
        assert message == "Hi there !"

    def test_replaces_first_occurrence_only(self) -> None:
        message = render_message("${shopName} / ${shopName}", "A", "B", "Acme", "u")
        assert message == "Acme / ${shopName}"

    def test_default_template_has_no_placeholders_left(self) -> None:
        message = render_message(DEFAULT_MESSAGE_TEMPLATE, "Jo", "Li", "Acme", "https://x/cart/t")
        assert "${" not in message
        assert "https://x/cart/t" in message

    def test_build_cart_url(self) -> None:
        assert build_cart_url(SHOP, "abc") == f"https://{SHOP}/cart/abc"


class TestProcessShop:
    """Dispatch rules for one shop."""

    @pytest.mark.asyncio
    async def test_disabled_shop_does_nothing(
        self, session: AsyncSession, configure_shop, make_cart, transport_factory, sms_transport
    ) -> None:
        await configure_shop(enabled=False)
        await make_cart("c1")
        dispatcher = ReminderDispatcher(session, transport_factory)

        scanned = []

        async def spy(*args, **kwargs):
            scanned.append(args)
            return []

        dispatcher.scanner.find_abandoned = spy

        result = await dispatcher.process_shop(SHOP)

        assert result.success is True
        assert result.processed == 0
        assert result.message == "Abandoned cart reminders are disabled for this shop"
        assert scanned == []
        assert sms_transport.calls == []

    @pytest.mark.asyncio
    async def test_unknown_shop_gets_disabled_defaults(
        self, session: AsyncSession, transport_factory
    ) -> None:
        result = await ReminderDispatcher(session, transport_factory).process_shop(SHOP)

        assert result.success is True
        assert result.processed == 0
        assert result.message == "Abandoned cart reminders are disabled for this shop"

    @pytest.mark.asyncio
    async def test_missing_credentials(
        self, session: AsyncSession, configure_shop, make_cart, transport_factory, sms_transport
    ) -> None:
        await configure_shop(api_key="")
        await make_cart("c1")

        result = await ReminderDispatcher(session, transport_factory).process_shop(SHOP)

        assert result.success is False
        assert result.processed == 0
        assert result.error == "CloudContactAI credentials not configured"
        assert sms_transport.calls == []

    @pytest.mark.asyncio
    async def test_sends_rendered_reminder(
        self, session: AsyncSession, configure_shop, make_cart, transport_factory, sms_transport
    ) -> None:
        await configure_shop(message_template="Hi ${firstName}, visit ${cartUrl}")
        await make_cart("c1")

        result = await ReminderDispatcher(session, transport_factory).process_shop(SHOP)

        assert result.success is True
        assert result.processed == 1
        assert sms_transport.credentials == ("test-client-id", "test-api-key")
        call = sms_transport.calls[0]
        assert call["message"] == f"Hi John, visit https://{SHOP}/cart/token-c1"
        assert call["title"] == "Test Shop - Cart Reminder"
        assert call["phone"] == "+15551234567"

        entry = result.results[0]
        assert entry.cart_id == "c1"
        assert entry.customer == "John Doe"
        assert entry.success is True
        assert entry.message_id == "mock-message-1"

    @pytest.mark.asyncio
    async def test_partial_failure(
        self,
        session: AsyncSession,
        configure_shop,
        make_cart,
        reload_cart,
        transport_factory,
        sms_transport,
    ) -> None:
        await configure_shop()
        await make_cart("ok", hours_old=50, phone="5551111111")
        await make_cart("bad", hours_old=49, phone="5552222222")
        sms_transport.fail_phones = {"+15552222222"}

        result = await ReminderDispatcher(session, transport_factory).process_shop(SHOP)

        assert result.success is True
        assert result.processed == 2
        outcomes = {r.cart_id: r for r in result.results}
        assert outcomes["ok"].success is True
        assert outcomes["bad"].success is False
        assert outcomes["bad"].error == "API Error"

        ok_cart = await reload_cart("ok")
        bad_cart = await reload_cart("bad")
        assert ok_cart.reminder_sent is True
        assert ok_cart.reminder_sent_at is not None
        assert ok_cart.is_abandoned is True
        assert bad_cart.reminder_sent is False
        assert bad_cart.is_abandoned is True

        history = (
            await session.execute(select(SmsHistory).order_by(SmsHistory.id))
        ).scalars().all()
        assert [h.status for h in history] == [SmsStatus.SENT, SmsStatus.FAILED]
        assert all(h.message_type == SmsMessageType.ABANDONED_CART for h in history)
        assert history[0].cart_id == "ok"
        assert history[1].recipient_phone == "5552222222"

    @pytest.mark.asyncio
    async def test_reminded_cart_not_selected_again(
        self, session: AsyncSession, configure_shop, make_cart, transport_factory, sms_transport
    ) -> None:
        await configure_shop()
        await make_cart("ok", hours_old=50, phone="5551111111")
        await make_cart("bad", hours_old=49, phone="5552222222")
        sms_transport.fail_phones = {"+15552222222"}
        dispatcher = ReminderDispatcher(session, transport_factory)

        await dispatcher.process_shop(SHOP)
        second = await dispatcher.process_shop(SHOP)

        assert [r.cart_id for r in second.results] == ["bad"]
        sent_to = [c["phone"] for c in sms_transport.calls]
        assert sent_to.count("+15551111111") == 1

    @pytest.mark.asyncio
    async def test_uses_shop_hour_threshold(
        self, session: AsyncSession, configure_shop, make_cart, transport_factory
    ) -> None:
        await configure_shop(hour_threshold=72)
        await make_cart("c-48", hours_old=48)
        await make_cart("c-96", hours_old=96)

        result = await ReminderDispatcher(session, transport_factory).process_shop(SHOP)

        assert [r.cart_id for r in result.results] == ["c-96"]

    @pytest.mark.asyncio
    async def test_skips_blank_phone(
        self, session: AsyncSession, configure_shop, make_cart, transport_factory, sms_transport
    ) -> None:
        await configure_shop()
        await make_cart("blank", phone="")

        result = await ReminderDispatcher(session, transport_factory).process_shop(SHOP)

        assert result.processed == 0
        assert sms_transport.calls == []

    @pytest.mark.asyncio
    async def test_cart_ids_restrict_run(
        self, session: AsyncSession, configure_shop, make_cart, transport_factory
    ) -> None:
        await configure_shop()
        await make_cart("a")
        await make_cart("b")

        result = await ReminderDispatcher(session, transport_factory).process_shop(
            SHOP, cart_ids=["b"]
        )

        assert [r.cart_id for r in result.results] == ["b"]

    @pytest.mark.asyncio
    async def test_error_on_one_cart_does_not_stop_batch(
        self, session: AsyncSession, configure_shop, make_cart, transport_factory
    ) -> None:
        await configure_shop()
        await make_cart("first", hours_old=50, phone="5551111111")
        await make_cart("second", hours_old=49, phone="5552222222")
        dispatcher = ReminderDispatcher(session, transport_factory)

        original = dispatcher.tracker.mark_reminder_sent
        calls = []

        async def flaky(cart_pk: int) -> bool:
            calls.append(cart_pk)
            if len(calls) == 1:
                raise RuntimeError("database went away")
            return await original(cart_pk)

        dispatcher.tracker.mark_reminder_sent = flaky

        result = await dispatcher.process_shop(SHOP)

        assert result.processed == 2
        assert result.results[0].success is False
        assert result.results[0].error == "database went away"
        assert result.results[1].success is True

    @pytest.mark.asyncio
    async def test_title_falls_back_to_shop_domain(
        self, session: AsyncSession, configure_shop, make_cart, transport_factory, sms_transport
    ) -> None:
        await configure_shop(shop_name="", message_template="${shopName}")
        await make_cart("c1")

        await ReminderDispatcher(session, transport_factory).process_shop(SHOP)

        call = sms_transport.calls[0]
        assert call["title"] == f"{SHOP} - Cart Reminder"
        assert call["message"] == "test-shop"

    @pytest.mark.asyncio
    async def test_failed_send_keeps_cart_activity_time(
        self,
        session: AsyncSession,
        configure_shop,
        make_cart,
        reload_cart,
        transport_factory,
        sms_transport,
    ) -> None:
        await configure_shop()
        cart = await make_cart("bad", hours_old=49, phone="5552222222")
        before = cart.updated_at
        sms_transport.fail_phones = {"+15552222222"}

        await ReminderDispatcher(session, transport_factory).process_shop(SHOP)

        reloaded = await reload_cart("bad")
        assert reloaded.is_abandoned is True
        assert reloaded.reminder_sent is False
        assert reloaded.updated_at == before
