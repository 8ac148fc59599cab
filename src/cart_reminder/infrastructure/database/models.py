"""SQLAlchemy models for cart tracking and SMS reminders.

All records are scoped to a shop domain; there are no cross-shop relationships.
"""

from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from shared.constants import DEFAULT_HOUR_THRESHOLD, DEFAULT_MESSAGE_TEMPLATE


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the naive DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""


# =============================================================================
# Enums
# =============================================================================


class SmsStatus(str, PyEnum):
    """Delivery status of an SMS history entry."""

    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"
    UNKNOWN = "unknown"


class SmsMessageType(str, PyEnum):
    """Why an SMS was sent."""

    ABANDONED_CART = "abandoned_cart"
    TEST = "test"
    OTHER = "other"


# =============================================================================
# Shops
# =============================================================================


class Shop(Base):
    """An installed shop. Only active shops are swept by the scheduler."""

    __tablename__ = "shops"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shop_domain: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    shopify_plan: Mapped[Optional[str]] = mapped_column(String(100))
    shopify_id: Mapped[Optional[str]] = mapped_column(String(100))

    installed_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    uninstalled_at: Mapped[Optional[datetime]] = mapped_column(DateTime)


# =============================================================================
# Carts
# =============================================================================


class Cart(Base):
    """A tracked cart with its customer snapshot and lifecycle flags."""

    __tablename__ = "carts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shop_domain: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    cart_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    cart_token: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Customer snapshot (all optional)
    customer_id: Mapped[Optional[str]] = mapped_column(String(255))
    customer_first_name: Mapped[Optional[str]] = mapped_column(String(255))
    customer_last_name: Mapped[Optional[str]] = mapped_column(String(255))
    customer_email: Mapped[Optional[str]] = mapped_column(String(255))
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50))

    # Raw cart payload as received (line items, currency, subtotal...)
    cart_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    # Last cart activity; only cart create/update events move it
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    # Lifecycle flags
    is_abandoned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    abandoned_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    reminder_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reminder_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    converted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    converted_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    __table_args__ = (
        UniqueConstraint("shop_domain", "cart_id", name="uq_carts_shop_cart"),
        Index(
            "ix_carts_abandonment_scan",
            "shop_domain",
            "updated_at",
            "converted",
            "reminder_sent",
        ),
    )


# =============================================================================
# Shop Settings
# =============================================================================


class ShopSettings(Base):
    """Per-shop reminder configuration and messaging credentials."""

    __tablename__ = "shop_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shop_domain: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    shop_name: Mapped[str] = mapped_column(String(255), nullable=False)

    reminders_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    hour_threshold: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_HOUR_THRESHOLD, nullable=False
    )
    message_template: Mapped[str] = mapped_column(
        Text, default=DEFAULT_MESSAGE_TEMPLATE, nullable=False
    )

    ccai_client_id: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    ccai_api_key: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    @property
    def has_ccai_credentials(self) -> bool:
        return bool(self.ccai_client_id) and bool(self.ccai_api_key)


# =============================================================================
# SMS History
# =============================================================================


class SmsHistory(Base):
    """Append-only log of every SMS send attempt."""

    __tablename__ = "sms_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shop_domain: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    recipient_first_name: Mapped[Optional[str]] = mapped_column(String(255))
    recipient_last_name: Mapped[Optional[str]] = mapped_column(String(255))
    recipient_phone: Mapped[str] = mapped_column(String(50), nullable=False)

    message: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(255))
    message_id: Mapped[Optional[str]] = mapped_column(String(255))

    status: Mapped[SmsStatus] = mapped_column(
        Enum(SmsStatus), default=SmsStatus.UNKNOWN, nullable=False
    )
    error: Mapped[Optional[str]] = mapped_column(Text)
    message_type: Mapped[SmsMessageType] = mapped_column(
        Enum(SmsMessageType), default=SmsMessageType.OTHER, nullable=False
    )
    cart_id: Mapped[Optional[str]] = mapped_column(String(255))

    timestamp: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False, index=True
    )

    __table_args__ = (Index("ix_sms_history_shop_timestamp", "shop_domain", "timestamp"),)
