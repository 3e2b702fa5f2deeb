"""Channel provider factory — creates the providers configured in settings."""

from __future__ import annotations

from familydays.config import settings
from familydays.data.models import Channel
from familydays.ports.channel_port import EmailProvider, MessageProvider


def create_chat_provider() -> MessageProvider:
    """Return the chat provider matching the CHAT_PROVIDER setting."""
    provider = settings.CHAT_PROVIDER.lower()

    if provider == "whatsapp":
        from familydays.adapters.twilio_messaging import TwilioClient, TwilioWhatsAppProvider

        client = TwilioClient(
            settings.TWILIO_ACCOUNT_SID,
            settings.TWILIO_AUTH_TOKEN,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        return TwilioWhatsAppProvider(
            client,
            from_number=settings.TWILIO_WHATSAPP_FROM,
            messaging_service_sid=settings.TWILIO_MESSAGING_SERVICE_SID,
        )

    if provider == "telegram":
        from telegram import Bot

        from familydays.adapters.telegram_notifier import TelegramChatProvider

        token = settings.TELEGRAM_BOT_TOKEN
        return TelegramChatProvider(Bot(token=token) if token else None)

    raise ValueError(f"Unknown CHAT_PROVIDER: {provider!r}")


def create_channel_providers() -> dict[Channel, MessageProvider | EmailProvider]:
    """One provider per channel. Missing credentials fail at send time, not here."""
    from familydays.adapters.resend_email import ResendEmailProvider
    from familydays.adapters.twilio_messaging import TwilioClient, TwilioSmsProvider

    twilio = TwilioClient(
        settings.TWILIO_ACCOUNT_SID,
        settings.TWILIO_AUTH_TOKEN,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    return {
        Channel.EMAIL: ResendEmailProvider(
            settings.RESEND_API_KEY,
            settings.FROM_EMAIL,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        ),
        Channel.SMS: TwilioSmsProvider(
            twilio,
            phone_number=settings.TWILIO_PHONE_NUMBER,
            messaging_service_sid=settings.TWILIO_MESSAGING_SERVICE_SID,
        ),
        Channel.CHAT: create_chat_provider(),
    }
