"""Pydantic models shared by services, API endpoints and background tasks.

Every model serializes with camelCase aliases so the JSON shapes match what
the embedded admin UI exchanges (``shopName``, ``messageId``, ``totalShops``...).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting snake_case or camelCase input, emitting camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# Messaging
# =============================================================================


class SendResult(CamelModel):
    """Outcome of one SMS send attempt."""

    success: bool
    message_id: str | None = None
    status: str | None = None
    error: str | None = None
    timestamp: str | None = None


class SmsRecipient(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str


class SmsHistoryEntry(CamelModel):
    id: int
    shop_domain: str
    recipient: SmsRecipient
    message: str
    title: str | None = None
    message_id: str | None = None
    status: str
    error: str | None = None
    message_type: str = Field(alias="type")
    cart_id: str | None = None
    timestamp: str


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    pages: int


class SmsHistoryPage(CamelModel):
    history: list[SmsHistoryEntry]
    pagination: Pagination


# =============================================================================
# Reminder dispatch
# =============================================================================


class CartReminderResult(CamelModel):
    """Per-cart outcome inside a shop run."""

    cart_id: str
    customer: str | None = None
    phone: str | None = None
    success: bool
    message_id: str | None = None
    error: str | None = None


class ShopProcessResult(CamelModel):
    """Outcome of processing one shop's abandoned carts."""

    success: bool
    processed: int = 0
    results: list[CartReminderResult] | None = None
    error: str | None = None
    message: str | None = None


class ShopRunEntry(CamelModel):
    """One shop's line in a scheduler run summary."""

    shop: str
    success: bool
    processed: int = 0
    error: str | None = None


class SchedulerRunResult(CamelModel):
    total_shops: int
    results: list[ShopRunEntry]
    skipped: bool = False


# =============================================================================
# Settings
# =============================================================================


class ReminderSettings(CamelModel):
    enabled: bool
    hour_threshold: int
    message_template: str


class CcaiCredentials(CamelModel):
    client_id: str
    api_key: str


class ShopSettingsView(CamelModel):
    """Persisted settings shape as exchanged with the admin UI."""

    shop_domain: str
    shop_name: str
    abandoned_cart_reminders: ReminderSettings
    ccai: CcaiCredentials


class ReminderSettingsUpdate(CamelModel):
    enabled: bool | None = None
    hour_threshold: int | None = Field(default=None, gt=0)
    message_template: str | None = Field(default=None, min_length=1)


class CcaiCredentialsUpdate(CamelModel):
    client_id: str | None = None
    api_key: str | None = None


class ShopSettingsUpdate(CamelModel):
    """Partial settings update. Sections left out are preserved as stored."""

    shop_name: str | None = None
    abandoned_cart_reminders: ReminderSettingsUpdate | None = None
    ccai: CcaiCredentialsUpdate | None = None
