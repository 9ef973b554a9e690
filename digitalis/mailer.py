from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from digitalis.errors import DependencyUnavailable, FeatureNotImplemented

logger = logging.getLogger("digitalis.mailer")


@dataclass(frozen=True)
class MailMessage:
    recipient: str
    subject: str
    body: str


class MailerPort(Protocol):
    async def send(self, message: MailMessage) -> None:
        ...


class HttpMailer:
    """Posts messages to an HTTP mail relay."""

    def __init__(
        self,
        *,
        url: str,
        sender: str,
        api_key: str | None = None,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._sender = sender
        self._api_key = api_key
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            return {}
        return {"Authorization": f"Bearer {self._api_key}"}

    async def send(self, message: MailMessage) -> None:
        payload = {
            "from": self._sender,
            "to": message.recipient,
            "subject": message.subject,
            "text": message.body,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, json=payload, headers=self._headers())
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("mail_delivery_failed", extra={"error_type": type(exc).__name__})
            raise DependencyUnavailable("mailer", "mail delivery failed") from exc


class DisabledMailer:
    async def send(self, message: MailMessage) -> None:
        raise FeatureNotImplemented("mail delivery is not configured")


def build_mailer(config: Any, *, transport: httpx.AsyncBaseTransport | None = None) -> MailerPort:
    if not config.mailer_enabled:
        return DisabledMailer()
    return HttpMailer(
        url=str(config.MAILER_URL).strip(),
        sender=config.MAILER_SENDER,
        api_key=config.MAILER_API_KEY,
        timeout_seconds=float(config.MAILER_TIMEOUT_SECONDS),
        transport=transport,
    )
