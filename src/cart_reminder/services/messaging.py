"""SMS messaging gateway.

Wraps an SMS transport, normalizes phone numbers and keeps an append-only
history of every send attempt made on behalf of a shop.
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.config import get_settings
from cart_reminder.infrastructure.ccai import CloudContactClient
from cart_reminder.infrastructure.database.models import (
    SmsHistory,
    SmsMessageType,
    SmsStatus,
)
from cart_reminder.schemas import (
    Pagination,
    SendResult,
    SmsHistoryEntry,
    SmsHistoryPage,
    SmsRecipient,
)

logger = structlog.get_logger()

_NON_DIGITS = re.compile(r"\D")


class SmsTransport(Protocol):
    """Anything able to deliver a single SMS."""

    async def send_single(
        self,
        first_name: str,
        last_name: str,
        phone: str,
        message: str,
        title: str,
    ) -> dict[str, Any]: ...


# Builds a transport from a shop's (client_id, api_key)
TransportFactory = Callable[[str, str], SmsTransport]


def build_ccai_transport(client_id: str, api_key: str) -> SmsTransport:
    """Default transport factory: a CloudContactAI client per shop."""
    settings = get_settings()
    return CloudContactClient(
        client_id,
        api_key,
        base_url=settings.ccai_base_url,
        timeout=settings.ccai_timeout,
    )


def format_phone_number(phone: str) -> str:
    """Normalize a phone number to E.164.

    Numbers already starting with ``+`` are passed through untouched. Otherwise
    non-digits are stripped; ten digits are assumed to be US/Canada and get
    ``+1``, anything else just gets ``+``.
    """
    if phone.startswith("+"):
        return phone

    digits = _NON_DIGITS.sub("", phone)
    if len(digits) == 10:
        return f"+1{digits}"
    return f"+{digits}"


def _coerce_status(status: Any) -> SmsStatus:
    try:
        return SmsStatus(status)
    except ValueError:
        return SmsStatus.UNKNOWN


class MessagingGateway:
    """Sends SMS through a transport and records the outcome."""

    def __init__(self, session: AsyncSession, transport: SmsTransport):
        self.session = session
        self.transport = transport

    async def send(
        self,
        first_name: str,
        last_name: str,
        phone: str,
        message: str,
        title: str,
        shop: str | None = None,
        message_type: SmsMessageType = SmsMessageType.ABANDONED_CART,
        cart_id: str | None = None,
    ) -> SendResult:
        """
        Send one SMS. Never raises.

        Args:
            first_name: Recipient first name
            last_name: Recipient last name
            phone: Recipient phone, normalized before sending
            message: Rendered message body
            title: Campaign title
            shop: Shop domain; when given the attempt is written to SMS history
            message_type: History category of the message
            cart_id: Cart the message is about, if any

        Returns:
            SendResult: success flag with provider message id/status or the error
        """
        try:
            formatted_phone = format_phone_number(phone)
            response = await self.transport.send_single(
                first_name, last_name, formatted_phone, message, title
            )
        except Exception as e:
            logger.error("Failed to send SMS", shop=shop, error=str(e))
            if shop:
                await self.record_history(
                    shop,
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone or "",
                    message=message,
                    title=title,
                    status=SmsStatus.FAILED,
                    error=str(e),
                    message_type=message_type,
                    cart_id=cart_id,
                )
            return SendResult(success=False, error=str(e))

        message_id = response.get("id") or response.get("messageId")
        message_id = str(message_id) if message_id is not None else None
        status = response.get("status") or SmsStatus.SENT.value

        if shop:
            await self.record_history(
                shop,
                first_name=first_name,
                last_name=last_name,
                phone=formatted_phone,
                message=message,
                title=title,
                message_id=message_id,
                status=_coerce_status(status),
                message_type=message_type,
                cart_id=cart_id,
            )

        logger.info("SMS sent", shop=shop, message_id=message_id, status=status)
        return SendResult(
            success=True,
            message_id=message_id,
            status=str(status),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    async def record_history(
        self,
        shop: str,
        *,
        first_name: str | None,
        last_name: str | None,
        phone: str,
        message: str,
        title: str | None,
        status: SmsStatus,
        message_type: SmsMessageType,
        message_id: str | None = None,
        error: str | None = None,
        cart_id: str | None = None,
    ) -> SmsHistory | None:
        """Append an SMS history entry. Failures are logged, not raised."""
        entry = SmsHistory(
            shop_domain=shop,
            recipient_first_name=first_name,
            recipient_last_name=last_name,
            recipient_phone=phone,
            message=message,
            title=title,
            message_id=message_id,
            status=status,
            error=error,
            message_type=message_type,
            cart_id=cart_id,
        )
        try:
            self.session.add(entry)
            await self.session.commit()
            return entry
        except Exception as e:
            await self.session.rollback()
            logger.error("Error recording SMS history", shop=shop, error=str(e))
            return None

    async def get_history(
        self,
        shop: str,
        page: int = 1,
        limit: int = 20,
        message_type: SmsMessageType | None = None,
    ) -> SmsHistoryPage:
        """Paginated SMS history for a shop, newest first."""
        filters = [SmsHistory.shop_domain == shop]
        if message_type is not None:
            filters.append(SmsHistory.message_type == message_type)

        total = (
            await self.session.execute(select(func.count(SmsHistory.id)).where(*filters))
        ).scalar() or 0

        result = await self.session.execute(
            select(SmsHistory)
            .where(*filters)
            .order_by(SmsHistory.timestamp.desc(), SmsHistory.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = result.scalars().all()

        return SmsHistoryPage(
            history=[
                SmsHistoryEntry(
                    id=row.id,
                    shop_domain=row.shop_domain,
                    recipient=SmsRecipient(
                        first_name=row.recipient_first_name,
                        last_name=row.recipient_last_name,
                        phone=row.recipient_phone,
                    ),
                    message=row.message,
                    title=row.title,
                    message_id=row.message_id,
                    status=row.status.value,
                    error=row.error,
                    message_type=row.message_type.value,
                    cart_id=row.cart_id,
                    timestamp=row.timestamp.isoformat(),
                )
                for row in rows
            ],
            pagination=Pagination(
                total=total,
                page=page,
                limit=limit,
                pages=math.ceil(total / limit) if limit else 0,
            ),
        )
