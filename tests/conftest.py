"""Shared test fixtures and configuration.

Sets up environment variables before any familydays imports, and provides
common fixtures: a temp document store and fake channel providers.
"""

import os

# Patch env vars BEFORE any familydays imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("SCHEDULER_TIMEZONE", "America/New_York")
os.environ.setdefault("CHAT_PROVIDER", "whatsapp")
os.environ.setdefault("TWILIO_ACCOUNT_SID", "")
os.environ.setdefault("TWILIO_AUTH_TOKEN", "")
os.environ.setdefault("RESEND_API_KEY", "")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "")

import pytest

from familydays.ports.channel_port import ChannelError


class FakeMessageProvider:
    """Chat/SMS provider that records messages instead of sending them."""

    def __init__(self, name: str = "fake", fail_with: Exception | None = None) -> None:
        self.name = name
        self.fail_with = fail_with
        self.sent: list[tuple[str, str]] = []

    async def send(self, to: str, body: str) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append((to, body))
        return f"{self.name}-{len(self.sent)}"


class FakeEmailProvider:
    """Email provider that records messages instead of sending them."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.fail_with = fail_with
        self.sent: list[dict] = []

    async def send(self, to: str, subject: str, html_body: str, text_body: str) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append({"to": to, "subject": subject, "html": html_body, "text": text_body})
        return f"email-{len(self.sent)}"


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_familydays.db")


@pytest.fixture
def store(tmp_db_path):
    """Return a DocumentDB instance backed by a temp file."""
    from familydays.data.db import DocumentDB
    return DocumentDB(db_path=tmp_db_path, timeout=1.0)


@pytest.fixture
def event_db(store):
    from familydays.data.db import EventDB
    return EventDB(store)


@pytest.fixture
def user_db(store):
    from familydays.data.db import UserDB
    return UserDB(store)


@pytest.fixture
def chat_provider():
    return FakeMessageProvider("chat")


@pytest.fixture
def sms_provider():
    return FakeMessageProvider("sms")


@pytest.fixture
def email_provider():
    return FakeEmailProvider()


@pytest.fixture
def failing_sms_provider():
    return FakeMessageProvider("sms", fail_with=ChannelError("Twilio rejected message (400): Invalid To"))


@pytest.fixture
def providers(chat_provider, sms_provider, email_provider):
    from familydays.data.models import Channel
    return {
        Channel.CHAT: chat_provider,
        Channel.SMS: sms_provider,
        Channel.EMAIL: email_provider,
    }


@pytest.fixture
def dispatcher(providers):
    from familydays.core.dispatcher import NotificationDispatcher
    return NotificationDispatcher(providers, email_subject="🔔 Family Days Reminder")


@pytest.fixture
def ledger(store):
    from familydays.core.ledger import DeliveryLedger
    return DeliveryLedger(store, atomic_claim=True)


@pytest.fixture
def reminder_scheduler(event_db, user_db, ledger, dispatcher):
    from familydays.core.access_policy import AccessPolicy
    from familydays.core.scheduler import ReminderScheduler
    return ReminderScheduler(
        event_db,
        user_db,
        ledger,
        dispatcher,
        timezone="America/New_York",
        access_policy=AccessPolicy(user_db),
    )


@pytest.fixture
def make_provider():
    """Factory for extra fake chat/SMS providers."""
    return FakeMessageProvider
