from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from svc_content.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailSender(Protocol):
    async def send(self, to: str, subject: str, text: str) -> None:
        ...


class LogSender:
    """Writes messages to the log instead of delivering them (local/dev)."""

    async def send(self, to: str, subject: str, text: str) -> None:
        logger.info("Email to %s - %s: %s", to, subject, text)


class ResendSender:
    def __init__(
        self,
        api_key: str,
        *,
        sender: str = "develop@resend.dev",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self._api_key = api_key
        self._sender = sender
        self._client = client
        self._timeout = timeout

    async def send(self, to: str, subject: str, text: str) -> None:
        payload = {"from": self._sender, "to": to, "subject": subject, "text": text}
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if self._client is not None:
            resp = await self._client.post(RESEND_API_URL, json=payload, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(RESEND_API_URL, json=payload, headers=headers)
        if resp.is_error:
            try:
                message = resp.json().get("message") or resp.text
            except ValueError:
                message = resp.text
            raise EmailDeliveryError(f"Email delivery failed ({resp.status_code}): {message}")
        logger.debug("Email sent to %s", to)


__all__ = ["EmailSender", "LogSender", "ResendSender"]
