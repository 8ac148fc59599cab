"""Shared constants across the application."""

# Message template placeholders (literal substitution, no expressions)
PLACEHOLDER_FIRST_NAME = "${firstName}"
PLACEHOLDER_LAST_NAME = "${lastName}"
PLACEHOLDER_SHOP_NAME = "${shopName}"
PLACEHOLDER_CART_URL = "${cartUrl}"

DEFAULT_MESSAGE_TEMPLATE = (
    "Hi ${firstName}, you have items waiting in your cart at ${shopName}. "
    "Complete your purchase here: ${cartUrl}"
)

# Fallbacks used when rendering a reminder
FIRST_NAME_FALLBACK = "there"
LAST_NAME_FALLBACK = ""

# Time windows
DEFAULT_HOUR_THRESHOLD = 24

# Default limits
DEFAULT_HISTORY_PAGE_SIZE = 20
MAX_HISTORY_PAGE_SIZE = 100

# Webhook header carrying the shop domain
SHOP_DOMAIN_HEADER = "X-Shopify-Shop-Domain"

# Redis key guarding overlapping scheduler runs
ABANDONED_CART_RUN_LOCK_KEY = "locks:abandoned_cart_run"
