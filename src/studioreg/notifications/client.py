"""EmailClient - sends transactional email through an HTTP email API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from studioreg.notifications.exceptions import NotificationError

if TYPE_CHECKING:
    from studioreg.notifications.models import Notification

logger = logging.getLogger(__name__)


class EmailClient:
    """Client for a JSON email-sending API.

    Posts ``{from, to, subject, text, html}`` to ``api_url`` with a bearer key.
    """

    def __init__(
        self,
        api_url: str,
        sender: str,
        api_key: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the EmailClient.

        Args:
            api_url: Endpoint accepting a single message per POST
            sender: From address
            api_key: Bearer key for the email API (optional)
            timeout: Request timeout in seconds
        """
        self.api_url = api_url
        self.sender = sender
        self.api_key = api_key
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the email API."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._client = httpx.Client(headers=headers, timeout=self.timeout)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def send(self, notification: Notification) -> None:
        """Send one email.

        Args:
            notification: The message to deliver

        Raises:
            NotificationError: If the request fails or the API rejects it
        """
        payload: dict[str, Any] = {
            "from": self.sender,
            "to": notification.to_email,
            "subject": notification.subject,
            "text": notification.body,
        }
        if notification.html_body:
            payload["html"] = notification.html_body
        if notification.template:
            payload["tags"] = [notification.template]

        try:
            response = self.client.post(self.api_url, json=payload)
        except httpx.HTTPError as e:
            raise NotificationError(f"Email request failed: {e}") from e

        if response.status_code >= 300:
            raise NotificationError(
                f"Email API rejected message: {response.status_code} - {response.text}"
            )

        logger.debug("Email '%s' accepted for delivery", notification.subject)
