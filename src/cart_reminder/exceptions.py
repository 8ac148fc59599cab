"""Domain exceptions."""


class CartReminderError(Exception):
    """Base class for errors raised by the cart reminder services."""


class InvalidCartPayloadError(CartReminderError):
    """A cart or checkout webhook payload is missing required fields."""


class SmsTransportError(CartReminderError):
    """The SMS provider rejected or failed to accept a message."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
