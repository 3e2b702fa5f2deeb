"""Twilio messaging adapters — SMS and WhatsApp over the Messages API.

Both providers share one thin HTTP client. A configured Messaging Service
SID takes precedence over an explicit sender number.
"""

from __future__ import annotations

import logging

import httpx

from familydays.ports.channel_port import ChannelError, ConfigurationError

logger = logging.getLogger(__name__)

_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{account_sid}/Messages.json"
_DEFAULT_TIMEOUT_SECONDS = 10.0


def _error_detail(response: httpx.Response) -> str:
    try:
        return response.json().get("message") or response.text
    except ValueError:
        return response.text


class TwilioClient:
    """Minimal async client for Twilio's Messages resource."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._account_sid and self._auth_token)

    async def create_message(
        self,
        to: str,
        body: str,
        from_: str | None = None,
        messaging_service_sid: str | None = None,
    ) -> str:
        """Create a message and return its SID."""
        if not self.configured:
            raise ConfigurationError("Twilio credentials not configured")

        data = {"To": to, "Body": body}
        if messaging_service_sid:
            data["MessagingServiceSid"] = messaging_service_sid
        elif from_:
            data["From"] = from_

        url = _MESSAGES_URL.format(account_sid=self._account_sid)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    url, data=data, auth=(self._account_sid, self._auth_token),
                )
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPStatusError as exc:
            raise ChannelError(
                f"Twilio rejected message ({exc.response.status_code}): "
                f"{_error_detail(exc.response)}"
            ) from exc
        except httpx.RequestError as exc:
            raise ChannelError(f"Twilio request failed: {exc}") from exc

        logger.debug("Twilio accepted message %s to %s", payload["sid"], to)
        return payload["sid"]


class TwilioSmsProvider:
    """SMS channel provider."""

    def __init__(
        self,
        client: TwilioClient,
        phone_number: str = "",
        messaging_service_sid: str = "",
    ) -> None:
        self._client = client
        self._phone_number = phone_number
        self._messaging_service_sid = messaging_service_sid

    async def send(self, to: str, body: str) -> str:
        if not (self._messaging_service_sid or self._phone_number):
            raise ConfigurationError("No Twilio phone number configured for SMS")
        return await self._client.create_message(
            to, body,
            from_=self._phone_number,
            messaging_service_sid=self._messaging_service_sid,
        )


class TwilioWhatsAppProvider:
    """Chat channel provider using WhatsApp via Twilio."""

    def __init__(
        self,
        client: TwilioClient,
        from_number: str = "whatsapp:+14155238886",
        messaging_service_sid: str = "",
    ) -> None:
        self._client = client
        self._from_number = self._address(from_number) if from_number else ""
        self._messaging_service_sid = messaging_service_sid

    @staticmethod
    def _address(number: str) -> str:
        return number if number.startswith("whatsapp:") else f"whatsapp:{number}"

    async def send(self, to: str, body: str) -> str:
        return await self._client.create_message(
            self._address(to), body,
            from_=self._from_number,
            messaging_service_sid=self._messaging_service_sid,
        )
