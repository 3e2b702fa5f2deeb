"""Tests for familydays.config — settings parsing and validation."""

import pytest
from pydantic import ValidationError

from familydays.config import Settings, _load_settings


class TestLoadSettings:
    def test_defaults(self, monkeypatch):
        for key in ("MORNING_HOUR", "LEAP_DAY_RULE", "LEDGER_ATOMIC_CLAIM", "SCHEDULER_TIMEZONE", "CHAT_PROVIDER"):
            monkeypatch.delenv(key, raising=False)
        s = _load_settings()
        assert s.MORNING_HOUR == 9
        assert s.AFTERNOON_HOUR == 14
        assert s.EVENING_HOUR == 19
        assert s.LEAP_DAY_RULE == "mar1"
        assert s.LEDGER_ATOMIC_CLAIM is True
        assert s.SCHEDULER_TIMEZONE == "America/New_York"
        assert s.CHAT_PROVIDER == "whatsapp"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("MORNING_HOUR", "8")
        monkeypatch.setenv("LEAP_DAY_RULE", " FEB28 ")
        monkeypatch.setenv("LEDGER_ATOMIC_CLAIM", "no")
        monkeypatch.setenv("CHAT_PROVIDER", "Telegram")
        monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "2.5")
        s = _load_settings()
        assert s.MORNING_HOUR == 8
        assert s.LEAP_DAY_RULE == "feb28"
        assert s.LEDGER_ATOMIC_CLAIM is False
        assert s.CHAT_PROVIDER == "telegram"
        assert s.HTTP_TIMEOUT_SECONDS == 2.5


class TestValidation:
    def test_hour_out_of_range(self):
        with pytest.raises(ValidationError, match="Hour out of range"):
            Settings(EVENING_HOUR="25")

    def test_unknown_leap_day_rule(self):
        with pytest.raises(ValidationError, match="LEAP_DAY_RULE"):
            Settings(LEAP_DAY_RULE="skip")

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError, match="SCHEDULER_TIMEZONE"):
            Settings(SCHEDULER_TIMEZONE="Mars/Olympus_Mons")

    @pytest.mark.parametrize("raw", ["1", "true", "YES", "on"])
    def test_truthy_values(self, raw):
        assert Settings(LEDGER_ATOMIC_CLAIM=raw).LEDGER_ATOMIC_CLAIM is True
