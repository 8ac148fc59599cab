"""Shopify abandoned cart tracking with SMS reminders."""

__version__ = "1.0.0"
