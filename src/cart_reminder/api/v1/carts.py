"""Abandoned cart endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from cart_reminder.api.deps import get_shop_domain, get_transport_factory
from cart_reminder.infrastructure.database.connection import get_session
from cart_reminder.infrastructure.database.models import Cart
from cart_reminder.schemas import CamelModel, ShopProcessResult
from cart_reminder.services.abandonment import AbandonmentScanner
from cart_reminder.services.messaging import TransportFactory
from cart_reminder.services.reminder_dispatcher import ReminderDispatcher

router = APIRouter()


class CustomerSnapshot(CamelModel):
    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None


class AbandonedCart(CamelModel):
    """An abandoned cart as shown in the admin UI."""

    cart_id: str
    cart_token: str
    customer: CustomerSnapshot
    cart_data: dict[str, Any]
    created_at: str
    updated_at: str
    is_abandoned: bool
    reminder_sent: bool

    @classmethod
    def from_cart(cls, cart: Cart) -> "AbandonedCart":
        return cls(
            cart_id=cart.cart_id,
            cart_token=cart.cart_token,
            customer=CustomerSnapshot(
                id=cart.customer_id,
                first_name=cart.customer_first_name,
                last_name=cart.customer_last_name,
                email=cart.customer_email,
                phone=cart.customer_phone,
            ),
            cart_data=cart.cart_data or {},
            created_at=cart.created_at.isoformat(),
            updated_at=cart.updated_at.isoformat(),
            is_abandoned=cart.is_abandoned,
            reminder_sent=cart.reminder_sent,
        )


class TriggerRemindersRequest(CamelModel):
    cart_ids: list[str] = Field(default_factory=list, description="Carts to remind")


@router.get("/abandoned-carts", response_model=list[AbandonedCart])
async def list_abandoned_carts(
    hours: Annotated[int, Query(gt=0, description="Hours since last cart update")] = 24,
    shop: str = Depends(get_shop_domain),
    session: AsyncSession = Depends(get_session),
) -> list[AbandonedCart]:
    """List carts that currently qualify for a reminder."""
    carts = await AbandonmentScanner(session).find_abandoned(shop, hours)
    return [AbandonedCart.from_cart(cart) for cart in carts]


@router.post("/trigger-reminders", response_model=ShopProcessResult)
async def trigger_reminders(
    request: TriggerRemindersRequest,
    shop: str = Depends(get_shop_domain),
    session: AsyncSession = Depends(get_session),
    transport_factory: TransportFactory = Depends(get_transport_factory),
) -> ShopProcessResult:
    """
    Send reminders now for selected abandoned carts.

    Uses the same rules as the scheduled run (settings, threshold, one
    reminder per cart) but only for the given cart ids.
    """
    if not request.cart_ids:
        raise HTTPException(status_code=400, detail="cartIds must be a non-empty array")

    dispatcher = ReminderDispatcher(session, transport_factory)
    return await dispatcher.process_shop(shop, cart_ids=request.cart_ids)
