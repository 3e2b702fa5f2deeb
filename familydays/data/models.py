"""
Family Days — Data Models.

Validated records read from the document store. Malformed documents are
rejected here, at the store-read boundary, with a DataError, instead of
failing later inside date arithmetic.

Field names written by the web front end (camelCase, ``userId``,
``useHebrewDate``, ``notificationMethods`` ...) are accepted as aliases.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)

from familydays.core import hebrew_calendar


class DataError(Exception):
    """Raised when an event or user document is malformed."""


class TimeSlot(str, Enum):
    """One of the three fixed daily scheduler invocations."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class Channel(str, Enum):
    """A messaging transport."""

    EMAIL = "email"
    SMS = "sms"
    CHAT = "chat"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class DeliveryStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"


def _aliases(*names: str) -> AliasChoices:
    return AliasChoices(*names)


def parse_channel(value: Channel | str) -> Channel:
    """Channel from its name. "whatsapp" is the legacy name of the chat channel."""
    if isinstance(value, Channel):
        return value
    name = str(value).strip().lower()
    return Channel("chat" if name == "whatsapp" else name)


# ---------------------------------------------------------------------------
# Calendar values
# ---------------------------------------------------------------------------


class HebrewDate(BaseModel):
    """A Hebrew calendar date. Immutable.

    ``month_name`` and ``is_leap_year`` are derived from month and year, so a
    stored document can never carry inconsistent values for them.
    """

    model_config = ConfigDict(frozen=True)

    day: int = Field(ge=1, le=30)
    month: int = Field(ge=1, le=13)
    year: int = Field(ge=1)

    @model_validator(mode="after")
    def check_calendar(self) -> HebrewDate:
        if self.month == hebrew_calendar.ADAR_II and not hebrew_calendar.is_leap_year(self.year):
            raise ValueError(f"Adar II does not exist in common year {self.year}")
        try:
            max_day = hebrew_calendar.days_in_month(self.month, self.year)
            if self.day <= max_day:
                hebrew_calendar.to_gregorian(self)
        except (ValueError, OverflowError) as exc:
            raise ValueError(
                f"{self.day}/{self.month}/{self.year} has no Gregorian equivalent"
            ) from exc
        if self.day > max_day:
            raise ValueError(
                f"Day {self.day} out of range for month {self.month} of {self.year} "
                f"({max_day} days)"
            )
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def month_name(self) -> str:
        return hebrew_calendar.month_name(self.month, self.year)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_leap_year(self) -> bool:
        return hebrew_calendar.is_leap_year(self.year)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class ReminderRule(BaseModel):
    """Fire ``offset_days`` before the occurrence, in ``time_slot``."""

    model_config = ConfigDict(frozen=True)

    offset_days: int = Field(ge=0, validation_alias=_aliases("offset_days", "offsetDays", "daysBefore"))
    time_slot: TimeSlot = Field(validation_alias=_aliases("time_slot", "timeSlot", "timeOfDay"))


class ReminderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_enabled: bool = Field(True, validation_alias=_aliases("is_enabled", "isEnabled"))
    reminders: tuple[ReminderRule, ...] = ()


class Event(BaseModel):
    """One recurring (or one-off) reminder target. Read-only input to the scheduler."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    owner_id: str | None = Field(None, validation_alias=_aliases("owner_id", "ownerId", "userId"))
    title: str
    event_type: Literal["birthday", "anniversary", "yahrzeit", "holiday", "custom"] = Field(
        "custom", validation_alias=_aliases("event_type", "eventType", "type"),
    )
    reference_date: date = Field(
        validation_alias=_aliases("reference_date", "referenceDate", "gregorianDate"),
    )
    uses_hebrew_date: bool = Field(
        False, validation_alias=_aliases("uses_hebrew_date", "usesHebrewDate", "useHebrewDate"),
    )
    hebrew_date: HebrewDate | None = Field(
        None, validation_alias=_aliases("hebrew_date", "hebrewDate"),
    )
    is_recurring: bool = Field(True, validation_alias=_aliases("is_recurring", "isRecurring"))
    reminder_config: ReminderConfig | None = Field(
        None, validation_alias=_aliases("reminder_config", "reminderConfig"),
    )
    notes: str = ""
    person_id: str | None = Field(None, validation_alias=_aliases("person_id", "personId"))

    @field_validator("reference_date", mode="before")
    @classmethod
    def instant_to_day(cls, v: Any) -> Any:
        """Reduce a stored instant to its own calendar day."""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        return v

    @field_validator("notes", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @model_validator(mode="after")
    def require_hebrew_date(self) -> Event:
        if self.uses_hebrew_date and self.hebrew_date is None:
            raise ValueError("Hebrew-calendar event is missing its hebrew_date")
        return self

    @property
    def reminder_rules(self) -> tuple[ReminderRule, ...]:
        """Custom rules in effect; empty means the slot defaults apply."""
        if self.reminder_config is None or not self.reminder_config.is_enabled:
            return ()
        return self.reminder_config.reminders


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserPreferences(BaseModel):
    """Contact details and channel choices of an event owner."""

    model_config = ConfigDict(frozen=True)

    email: str | None = None
    phone: str | None = None
    chat_handle: str | None = Field(None, validation_alias=_aliases("chat_handle", "chatHandle"))
    notification_channels: tuple[Channel, ...] = Field(
        (Channel.CHAT,),
        validation_alias=_aliases(
            "notification_channels", "notificationChannels", "notificationMethods",
        ),
    )
    default_offset_days: int = Field(
        0, ge=0, validation_alias=_aliases("default_offset_days", "defaultOffsetDays"),
    )

    @field_validator("notification_channels", mode="before")
    @classmethod
    def normalize_channels(cls, v: Any) -> Any:
        if v is None:
            return (Channel.CHAT,)
        if isinstance(v, (str, Channel)):
            v = [v]
        return tuple(dict.fromkeys(parse_channel(item) for item in v))

    @field_validator("email", "phone", "chat_handle", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    def destination_for(self, channel: Channel) -> str | None:
        """Address for ``channel``, or None when the user has not provided one."""
        if channel is Channel.EMAIL:
            return self.email
        if channel is Channel.SMS:
            return self.phone
        return self.chat_handle or self.phone


class UserProfile(BaseModel):
    """A stored user record. The role replaces any hard-coded admin list."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    display_name: str = Field("", validation_alias=_aliases("display_name", "displayName", "name"))
    role: Role = Role.USER
    preferences: UserPreferences = UserPreferences()

    @model_validator(mode="before")
    @classmethod
    def merge_contact_details(cls, data: Any) -> Any:
        """Top-level email/phone live beside the nested preferences in stored documents."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        prefs = data.get("preferences") or {}
        if isinstance(prefs, BaseModel):
            prefs = prefs.model_dump()
        prefs = dict(prefs)
        for key in ("email", "phone", "chat_handle", "chatHandle"):
            if key in data and key not in prefs:
                prefs[key] = data[key]
        data["preferences"] = prefs
        if data.get("role") is None:
            data.pop("role", None)
        return data


# ---------------------------------------------------------------------------
# Delivery ledger
# ---------------------------------------------------------------------------


class DeliveryLogEntry(BaseModel):
    """Outcome of one delivery attempt. Written once, never mutated."""

    model_config = ConfigDict(frozen=True)

    status: DeliveryStatus
    channel: Channel
    message: str
    event_id: str
    user_id: str
    offset_days: int
    time_slot: TimeSlot
    result_id: str | None = None
    error: str | None = None
    sent_at: datetime | None = None


# ---------------------------------------------------------------------------
# Store-boundary parsing
# ---------------------------------------------------------------------------


def parse_event(doc_id: str, data: dict) -> Event:
    """Validate a stored event document; raise DataError when malformed."""
    try:
        return Event.model_validate({**data, "id": doc_id})
    except ValidationError as exc:
        raise DataError(f"Malformed event {doc_id!r}: {exc}") from exc


def parse_user(doc_id: str, data: dict) -> UserProfile:
    """Validate a stored user document; raise DataError when malformed."""
    try:
        return UserProfile.model_validate({**data, "id": doc_id})
    except ValidationError as exc:
        raise DataError(f"Malformed user {doc_id!r}: {exc}") from exc
