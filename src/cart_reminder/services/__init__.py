"""Business logic services."""

from cart_reminder.services.abandonment import AbandonmentScanner
from cart_reminder.services.cart_tracker import CartTrackerService
from cart_reminder.services.messaging import MessagingGateway, format_phone_number
from cart_reminder.services.reminder_dispatcher import ReminderDispatcher
from cart_reminder.services.scheduler import AbandonedCartScheduler
from cart_reminder.services.settings_store import SettingsLookup, SettingsService
from cart_reminder.services.shop_registry import ShopRegistry

__all__ = [
    "AbandonmentScanner",
    "AbandonedCartScheduler",
    "CartTrackerService",
    "MessagingGateway",
    "ReminderDispatcher",
    "SettingsLookup",
    "SettingsService",
    "ShopRegistry",
    "format_phone_number",
]
