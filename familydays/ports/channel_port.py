"""Channel port — abstract interfaces for message providers.

The dispatcher depends on these protocols, never on a specific provider.
Every provider returns the provider-assigned message id.
"""

from __future__ import annotations

from typing import Protocol


class ChannelError(Exception):
    """Raised when a provider rejects or fails to deliver a message."""


class ConfigurationError(ChannelError):
    """Raised when a channel's provider credentials are missing."""


class MessageProvider(Protocol):
    """Chat or SMS provider: one plain-text body to one address."""

    async def send(self, to: str, body: str) -> str: ...


class EmailProvider(Protocol):
    """Email provider: HTML and plain-text alternatives with a subject."""

    async def send(
        self, to: str, subject: str, html_body: str, text_body: str
    ) -> str: ...
