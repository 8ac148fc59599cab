#!/usr/bin/env python3
"""
Seed database with test data for development.

Creates one shop with reminders enabled and a handful of carts in different
states: abandoned, fresh, converted, already reminded and without a phone.

Usage:
    python scripts/seed_data.py [shop-domain]
"""

import asyncio
import os
import sys
from datetime import timedelta

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from cart_reminder.config import get_settings
from cart_reminder.infrastructure.database.connection import get_db_session
from cart_reminder.infrastructure.database.models import Cart, utcnow
from cart_reminder.schemas import (
    CcaiCredentialsUpdate,
    ReminderSettingsUpdate,
    ShopSettingsUpdate,
)
from cart_reminder.services.settings_store import SettingsService
from cart_reminder.services.shop_registry import ShopRegistry

DEFAULT_SHOP = "dev-store.myshopify.com"

CARTS = [
    # cart id, first name, phone, hours since last update, flags
    ("dev-1001", "Alice", "5551230001", 30, {}),
    ("dev-1002", "Bob", "5551230002", 2, {}),
    ("dev-1003", "Carol", "5551230003", 48, {"converted": True}),
    ("dev-1004", "Dan", "5551230004", 72, {"reminder_sent": True}),
    ("dev-1005", "Erin", None, 40, {}),
]


def cart_payload(cart_id: str, first_name: str, phone: str | None) -> dict:
    return {
        "id": cart_id,
        "token": f"tok-{cart_id}",
        "currency": "USD",
        "line_items": [
            {"id": 1, "title": "Merino Wool Socks", "quantity": 2, "price": "12.00"},
            {"id": 2, "title": "Canvas Tote", "quantity": 1, "price": "24.00"},
        ],
        "customer": {
            "id": f"cust-{cart_id}",
            "first_name": first_name,
            "last_name": "Example",
            "email": f"{first_name.lower()}@example.com",
            "phone": phone,
        },
    }


async def seed_shop(session, shop: str):
    """Register the shop and enable reminders."""
    await ShopRegistry(session).register(shop, shopify_plan="development")

    settings = get_settings()
    await SettingsService(session).update_shop_settings(
        shop,
        ShopSettingsUpdate(
            abandoned_cart_reminders=ReminderSettingsUpdate(enabled=True, hour_threshold=24),
            ccai=CcaiCredentialsUpdate(
                client_id=settings.default_ccai_client_id or None,
                api_key=settings.default_ccai_api_key or None,
            ),
        ),
    )
    print(f"Registered {shop} with reminders enabled")


async def seed_carts(session, shop: str):
    now = utcnow()
    for cart_id, first_name, phone, hours_old, flags in CARTS:
        payload = cart_payload(cart_id, first_name, phone)
        updated = now - timedelta(hours=hours_old)
        session.add(
            Cart(
                shop_domain=shop,
                cart_id=cart_id,
                cart_token=payload["token"],
                customer_id=payload["customer"]["id"],
                customer_first_name=first_name,
                customer_last_name="Example",
                customer_email=payload["customer"]["email"],
                customer_phone=phone,
                cart_data=payload,
                created_at=updated,
                updated_at=updated,
                **flags,
            )
        )
    await session.commit()
    print(f"Created {len(CARTS)} sample carts")


async def main(shop: str):
    print("Seeding database with test data...")
    print("=" * 50)

    async with get_db_session() as session:
        await seed_shop(session, shop)
        await seed_carts(session, shop)

    print("=" * 50)
    print("Seeding complete!")
    print("")
    print("Run `python scripts/run_reminders.py` to send reminders for the abandoned carts.")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_SHOP))
