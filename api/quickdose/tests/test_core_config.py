"""Tests for settings validation."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from quickdose.core.config import Settings, get_settings

SECURE_KEY = "k" * 40


class TestSecretKey:
    """Tests for SECRET_KEY validation."""

    def test_short_key_rejected(self):
        with pytest.raises(ValidationError, match="at least 32 characters"):
            Settings(secret_key="short")

    def test_default_value_rejected(self):
        with pytest.raises(ValidationError):
            Settings(secret_key="changeme")

    def test_long_key_accepted(self):
        assert Settings(secret_key=SECURE_KEY).secret_key == SECURE_KEY


class TestOtpLength:
    """Tests for OTP_LENGTH validation."""

    @pytest.mark.parametrize("length", [3, 11])
    def test_out_of_range(self, length):
        with pytest.raises(ValidationError):
            Settings(secret_key=SECURE_KEY, otp_length=length)

    def test_short_code_warns(self):
        with pytest.warns(UserWarning, match="OTP length 4"):
            settings = Settings(secret_key=SECURE_KEY, otp_length=4)
        assert settings.otp_length == 4


class TestSearchRadius:
    """Tests for the nearby search limits."""

    def test_defaults(self):
        settings = Settings(secret_key=SECURE_KEY)
        assert settings.default_radius_km == 50.0
        assert settings.max_radius_km == 100.0

    def test_non_positive_max_rejected(self):
        with pytest.raises(ValidationError):
            Settings(secret_key=SECURE_KEY, max_radius_km=0)


def test_settings_read_from_environment():
    settings = get_settings()
    assert settings.database_url == "sqlite+aiosqlite://"
    assert settings.environment == "development"
    assert get_settings() is settings
