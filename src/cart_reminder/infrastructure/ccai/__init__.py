"""CloudContactAI SMS provider integration."""

from cart_reminder.infrastructure.ccai.client import CloudContactClient

__all__ = ["CloudContactClient"]
