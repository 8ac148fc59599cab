"""Abandoned cart reminder dispatch for a single shop."""

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.infrastructure.database.models import Cart, SmsMessageType
from cart_reminder.schemas import CartReminderResult, ShopProcessResult
from cart_reminder.services.abandonment import AbandonmentScanner
from cart_reminder.services.cart_tracker import CartTrackerService
from cart_reminder.services.messaging import (
    MessagingGateway,
    TransportFactory,
    build_ccai_transport,
)
from cart_reminder.services.settings_store import SettingsService, shop_name_from_domain
from shared.constants import (
    DEFAULT_HOUR_THRESHOLD,
    DEFAULT_MESSAGE_TEMPLATE,
    FIRST_NAME_FALLBACK,
    LAST_NAME_FALLBACK,
    PLACEHOLDER_CART_URL,
    PLACEHOLDER_FIRST_NAME,
    PLACEHOLDER_LAST_NAME,
    PLACEHOLDER_SHOP_NAME,
)

logger = structlog.get_logger()


def build_cart_url(shop: str, cart_token: str) -> str:
    return f"https://{shop}/cart/{cart_token}"


def render_message(
    template: str,
    first_name: str | None,
    last_name: str | None,
    shop_name: str,
    cart_url: str,
) -> str:
    """Fill the reminder placeholders by plain substring replacement.

    Only the first occurrence of each placeholder is substituted.
    """
    return (
        template.replace(PLACEHOLDER_FIRST_NAME, first_name or FIRST_NAME_FALLBACK, 1)
        .replace(PLACEHOLDER_LAST_NAME, last_name or LAST_NAME_FALLBACK, 1)
        .replace(PLACEHOLDER_SHOP_NAME, shop_name, 1)
        .replace(PLACEHOLDER_CART_URL, cart_url, 1)
    )


@dataclass(frozen=True)
class ReminderCandidate:
    """Detached copy of the cart fields needed to send one reminder."""

    pk: int
    cart_id: str
    cart_token: str
    first_name: str | None
    last_name: str | None
    phone: str | None

    @classmethod
    def from_cart(cls, cart: Cart) -> "ReminderCandidate":
        return cls(
            pk=cart.id,
            cart_id=cart.cart_id,
            cart_token=cart.cart_token,
            first_name=cart.customer_first_name,
            last_name=cart.customer_last_name,
            phone=cart.customer_phone,
        )

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class ReminderDispatcher:
    """Sends SMS reminders for one shop's abandoned carts."""

    def __init__(
        self,
        session: AsyncSession,
        transport_factory: TransportFactory = build_ccai_transport,
    ):
        self.session = session
        self.transport_factory = transport_factory
        self.settings_service = SettingsService(session)
        self.scanner = AbandonmentScanner(session)
        self.tracker = CartTrackerService(session)

    async def process_shop(
        self, shop: str, cart_ids: list[str] | None = None
    ) -> ShopProcessResult:
        """
        Process abandoned carts for a shop.

        Steps, in order:
        1. Load settings (created with defaults if missing)
        2. Stop if reminders are disabled
        3. Stop if CloudContactAI credentials are missing
        4. Scan for abandoned carts using the shop's hour threshold
        5. Render and send a reminder per cart that has a phone number
        6. Mark the cart as reminded after a successful send

        A failure on one cart is recorded in its result and does not stop
        the rest of the batch.

        Args:
            shop: Shop domain
            cart_ids: Restrict the run to these cart ids (manual trigger)

        Returns:
            ShopProcessResult: processed count and per-cart results
        """
        settings = await self.settings_service.get_shop_settings(shop)

        if not settings.reminders_enabled:
            return ShopProcessResult(
                success=True,
                processed=0,
                message="Abandoned cart reminders are disabled for this shop",
            )

        if not settings.has_ccai_credentials:
            return ShopProcessResult(
                success=False,
                processed=0,
                error="CloudContactAI credentials not configured",
            )

        # Copy what we need now; a rollback inside the loop expires ORM state
        shop_name = settings.shop_name or shop_name_from_domain(shop)
        title = f"{settings.shop_name or shop} - Cart Reminder"
        template = settings.message_template or DEFAULT_MESSAGE_TEMPLATE
        hour_threshold = settings.hour_threshold or DEFAULT_HOUR_THRESHOLD
        gateway = MessagingGateway(
            self.session,
            self.transport_factory(settings.ccai_client_id, settings.ccai_api_key),
        )

        carts = await self.scanner.find_abandoned(shop, hour_threshold, cart_ids=cart_ids)
        candidates = [ReminderCandidate.from_cart(cart) for cart in carts]
        await self.tracker.mark_abandoned([c.pk for c in candidates if c.phone])

        results: list[CartReminderResult] = []
        for candidate in candidates:
            if not candidate.phone:
                continue
            try:
                message = render_message(
                    template,
                    candidate.first_name,
                    candidate.last_name,
                    shop_name,
                    build_cart_url(shop, candidate.cart_token),
                )
                send_result = await gateway.send(
                    candidate.first_name or "",
                    candidate.last_name or "",
                    candidate.phone,
                    message,
                    title,
                    shop=shop,
                    message_type=SmsMessageType.ABANDONED_CART,
                    cart_id=candidate.cart_id,
                )

                if send_result.success:
                    await self.tracker.mark_reminder_sent(candidate.pk)

                results.append(
                    CartReminderResult(
                        cart_id=candidate.cart_id,
                        customer=candidate.display_name,
                        phone=candidate.phone,
                        success=send_result.success,
                        message_id=send_result.message_id,
                        error=send_result.error,
                    )
                )
            except Exception as e:
                logger.error(
                    "Error processing cart",
                    shop=shop,
                    cart_id=candidate.cart_id,
                    error=str(e),
                )
                await self.session.rollback()
                results.append(
                    CartReminderResult(
                        cart_id=candidate.cart_id,
                        customer=candidate.display_name,
                        phone=candidate.phone,
                        success=False,
                        error=str(e),
                    )
                )

        logger.info(
            "Processed abandoned carts",
            shop=shop,
            processed=len(results),
            sent=sum(1 for r in results if r.success),
        )
        return ShopProcessResult(success=True, processed=len(results), results=results)
