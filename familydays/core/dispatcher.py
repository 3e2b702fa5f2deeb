"""
Family Days — Notification Dispatcher.

Thin switch from a channel to its provider. Providers are built in the
composition root and injected, so tests can substitute fakes.

A failure is reported for the one channel it happened on; sending on the
other channels is unaffected. There is no retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from familydays.core.messages import render_email_html
from familydays.data.models import Channel, DeliveryStatus
from familydays.ports.channel_port import ChannelError, ConfigurationError

if TYPE_CHECKING:
    from familydays.ports.channel_port import EmailProvider, MessageProvider

logger = logging.getLogger(__name__)


@dataclass
class SendResult:
    """A message accepted by a provider."""

    channel: Channel
    result_id: str


@dataclass
class DeliveryOutcome:
    """Structured result of one send attempt, successful or not."""

    channel: Channel
    destination: str
    status: DeliveryStatus
    result_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == DeliveryStatus.SENT


class NotificationDispatcher:
    """Routes messages to the provider registered for each channel."""

    def __init__(
        self,
        providers: dict[Channel, MessageProvider | EmailProvider],
        email_subject: str = "🔔 Family Days Reminder",
    ) -> None:
        self._providers = dict(providers)
        self._email_subject = email_subject

    async def close(self) -> None:
        """Release provider resources, such as open bot sessions."""
        for provider in self._providers.values():
            close = getattr(provider, "close", None)
            if close is not None:
                await close()

    async def send_via_channel(
        self,
        channel: Channel,
        destination: str,
        body: str,
        subject: str | None = None,
    ) -> SendResult:
        """Send one message. Raises ChannelError (or ConfigurationError)."""
        channel = Channel(channel)
        provider = self._providers.get(channel)
        if provider is None:
            raise ConfigurationError(f"No provider configured for channel {channel.value!r}")

        if channel == Channel.EMAIL:
            result_id = await provider.send(
                destination, subject or self._email_subject, render_email_html(body), body,
            )
        else:
            result_id = await provider.send(destination, body)

        logger.info("Sent %s message to %s (id=%s)", channel.value, destination, result_id)
        return SendResult(channel=channel, result_id=result_id)

    async def try_send(
        self,
        channel: Channel,
        destination: str,
        body: str,
        subject: str | None = None,
    ) -> DeliveryOutcome:
        """Like send_via_channel, but a ChannelError becomes a failed outcome."""
        try:
            result = await self.send_via_channel(channel, destination, body, subject)
        except ChannelError as exc:
            logger.error("Failed to send %s message to %s: %s", Channel(channel).value, destination, exc)
            return DeliveryOutcome(
                channel=Channel(channel),
                destination=destination,
                status=DeliveryStatus.FAILED,
                error=str(exc),
            )
        return DeliveryOutcome(
            channel=result.channel,
            destination=destination,
            status=DeliveryStatus.SENT,
            result_id=result.result_id,
        )
