"""SMS test and history endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.api.deps import get_shop_domain, get_transport_factory
from cart_reminder.infrastructure.database.connection import get_session
from cart_reminder.infrastructure.database.models import SmsMessageType
from cart_reminder.schemas import CamelModel, SendResult, SmsHistoryPage
from cart_reminder.services.messaging import MessagingGateway, TransportFactory
from cart_reminder.services.settings_store import SettingsService
from shared.constants import DEFAULT_HISTORY_PAGE_SIZE, MAX_HISTORY_PAGE_SIZE

router = APIRouter()


class SendTestSmsRequest(CamelModel):
    first_name: str = ""
    last_name: str = ""
    phone: str = Field(..., min_length=1)
    message: str | None = None


@router.post("/test-sms", response_model=SendResult)
async def send_test_sms(
    request: SendTestSmsRequest,
    shop: str = Depends(get_shop_domain),
    session: AsyncSession = Depends(get_session),
    transport_factory: TransportFactory = Depends(get_transport_factory),
) -> SendResult:
    """Send a test SMS with the shop's CloudContactAI credentials."""
    settings = await SettingsService(session).get_shop_settings(shop)
    if not settings.has_ccai_credentials:
        raise HTTPException(status_code=400, detail="CloudContactAI credentials not configured")

    gateway = MessagingGateway(
        session, transport_factory(settings.ccai_client_id, settings.ccai_api_key)
    )
    return await gateway.send(
        request.first_name,
        request.last_name,
        request.phone,
        request.message or f"Hi {request.first_name}, this is a test message from {shop}",
        f"Test Message - {shop}",
        shop=shop,
        message_type=SmsMessageType.TEST,
    )


@router.get("/sms-history", response_model=SmsHistoryPage)
async def get_sms_history(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_HISTORY_PAGE_SIZE)] = DEFAULT_HISTORY_PAGE_SIZE,
    message_type: Annotated[SmsMessageType | None, Query(alias="type")] = None,
    shop: str = Depends(get_shop_domain),
    session: AsyncSession = Depends(get_session),
) -> SmsHistoryPage:
    """Paginated SMS history for the current shop, newest first."""
    gateway = MessagingGateway(session, transport=None)
    return await gateway.get_history(shop, page=page, limit=limit, message_type=message_type)
