"""Resend email adapter — implements EmailProvider over the Resend HTTP API."""

from __future__ import annotations

import logging

import httpx

from familydays.ports.channel_port import ChannelError, ConfigurationError

logger = logging.getLogger(__name__)

_RESEND_EMAILS_URL = "https://api.resend.com/emails"
_DEFAULT_TIMEOUT_SECONDS = 10.0


class ResendEmailProvider:
    """Email channel provider."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._api_key = api_key
        self._from_email = from_email
        self._timeout = timeout

    async def send(self, to: str, subject: str, html_body: str, text_body: str) -> str:
        """Send one email and return the Resend message id."""
        if not self._api_key:
            raise ConfigurationError("Email not configured. Set RESEND_API_KEY in environment.")

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    _RESEND_EMAILS_URL,
                    json={
                        "from": self._from_email,
                        "to": [to],
                        "subject": subject,
                        "html": html_body,
                        "text": text_body,
                    },
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            try:
                detail = exc.response.json().get("message") or "Failed to send email"
            except ValueError:
                detail = "Failed to send email"
            raise ChannelError(detail) from exc
        except httpx.RequestError as exc:
            raise ChannelError(f"Resend request failed: {exc}") from exc

        logger.debug("Resend accepted email %s to %s", data.get("id"), to)
        return data.get("id", "")
