"""CloudContactAI SMS client.

Thin async HTTP client for the CloudContactAI "direct campaign" endpoint,
which sends one message to a list of accounts. We always send to a single
recipient.
"""

from typing import Any

import httpx
import structlog

from cart_reminder.exceptions import SmsTransportError

logger = structlog.get_logger()

DEFAULT_BASE_URL = "https://core.cloudcontactai.com/api"


class CloudContactClient:
    """Sends SMS through CloudContactAI using one shop's credentials."""

    def __init__(
        self,
        client_id: str,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not client_id or not api_key:
            raise ValueError("CloudContactAI client id and api key are required")
        self.client_id = client_id
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def campaign_url(self) -> str:
        return f"{self.base_url}/clients/{self.client_id}/campaigns/direct"

    async def send_single(
        self,
        first_name: str,
        last_name: str,
        phone: str,
        message: str,
        title: str,
    ) -> dict[str, Any]:
        """
        Send a single SMS.

        Args:
            first_name: Recipient first name
            last_name: Recipient last name
            phone: Recipient phone in E.164 format
            message: Message body
            title: Campaign title shown in the CloudContactAI dashboard

        Returns:
            dict: Provider response (contains ``id`` or ``messageId`` and ``status``)

        Raises:
            SmsTransportError: On network failure or a non-2xx response
        """
        payload = {
            "accounts": [
                {"firstName": first_name, "lastName": last_name, "phone": phone}
            ],
            "message": message,
            "title": title,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "*/*",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.campaign_url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SmsTransportError(
                f"CloudContactAI returned {e.response.status_code}: {e.response.text}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise SmsTransportError(f"CloudContactAI request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        logger.debug(
            "CloudContactAI accepted message",
            client_id=self.client_id,
            status_code=response.status_code,
        )
        return data if isinstance(data, dict) else {"data": data}
