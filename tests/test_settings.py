"""
Unit tests for environment variable parsing and duration handling.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import importlib
import os
from datetime import timedelta
from unittest.mock import patch

import pytest

from lifehook import settings


class TestDurationParsing:
    """Test duration parsing functionality."""

    def test_parse_duration_milliseconds(self):
        """Test parsing milliseconds."""
        assert settings.parse_duration("500ms") == timedelta(milliseconds=500)

    def test_parse_duration_seconds(self):
        """Test parsing seconds."""
        assert settings.parse_duration("30s") == timedelta(seconds=30)

    def test_parse_duration_minutes(self):
        """Test parsing minutes."""
        assert settings.parse_duration("15m") == timedelta(minutes=15)

    def test_parse_duration_hours(self):
        """Test parsing hours."""
        assert settings.parse_duration("2h") == timedelta(hours=2)

    def test_parse_duration_days(self):
        """Test parsing days."""
        assert settings.parse_duration("3d") == timedelta(days=3)

    def test_parse_duration_bare_number_is_seconds(self):
        """Test strings and numbers without unit are seconds."""
        assert settings.parse_duration("7") == timedelta(seconds=7)
        assert settings.parse_duration(2.5) == timedelta(seconds=2.5)
        assert settings.parse_duration(0) == timedelta(0)

    def test_parse_duration_timedelta_passthrough(self):
        """Test timedelta values are returned unchanged."""
        assert settings.parse_duration(timedelta(seconds=3)) == timedelta(seconds=3)

    def test_parse_duration_case_insensitive(self):
        """Test case insensitive parsing."""
        assert settings.parse_duration("30S") == timedelta(seconds=30)

    @pytest.mark.parametrize("value", ["invalid", "", "10x", "-5s", True])
    def test_parse_duration_invalid(self, value):
        """Test invalid durations raise ValueError."""
        with pytest.raises(ValueError):
            settings.parse_duration(value)


class TestBooleanParsing:
    """Test boolean environment variable parsing."""

    def test_get_bool_env_true_values(self):
        """Test various true values."""
        for value in ["true", "True", "1", "yes", "ON"]:
            with patch.dict(os.environ, {"TEST_BOOL": value}):
                assert settings._get_bool_env("TEST_BOOL", False) is True, value

    def test_get_bool_env_false_values(self):
        """Test various false values."""
        for value in ["false", "0", "no", "off", "invalid"]:
            with patch.dict(os.environ, {"TEST_BOOL": value}):
                assert settings._get_bool_env("TEST_BOOL", True) is False, value

    def test_get_bool_env_default_when_missing(self):
        """Test default value when environment variable is missing."""
        with patch.dict(os.environ, {}, clear=True):
            assert settings._get_bool_env("MISSING_VAR", True) is True
            assert settings._get_bool_env("MISSING_VAR", False) is False


class TestSettingsIntegration:
    """Test settings module integration."""

    def teardown_method(self):
        """Restore settings computed from the test environment."""
        importlib.reload(settings)

    def test_default_settings(self):
        """Test default settings values."""
        with patch.dict(os.environ, {}, clear=True):
            importlib.reload(settings)

            assert settings.LOG_LEVEL == "INFO"
            assert settings.ENABLE_JSON_LOGS is True
            assert settings.HTTP_HOOK_METHOD == "POST"
            assert settings.HTTP_HOOK_TIMEOUT == timedelta(seconds=20)

    def test_environment_variable_override(self):
        """Test environment variable overrides."""
        env_vars = {
            "LOG_LEVEL": "debug",
            "ENABLE_JSON_LOGS": "false",
            "HTTP_HOOK_METHOD": "put",
            "HTTP_HOOK_TIMEOUT": "5s",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            importlib.reload(settings)

            assert settings.LOG_LEVEL == "DEBUG"
            assert settings.ENABLE_JSON_LOGS is False
            assert settings.HTTP_HOOK_METHOD == "PUT"
            assert settings.HTTP_HOOK_TIMEOUT == timedelta(seconds=5)

    def test_invalid_timeout_falls_back_to_default(self):
        """Test an unparseable timeout env var keeps the 20s default."""
        with patch.dict(os.environ, {"HTTP_HOOK_TIMEOUT": "soon"}, clear=True):
            importlib.reload(settings)

            assert settings.HTTP_HOOK_TIMEOUT == timedelta(seconds=20)

    @pytest.mark.parametrize("value", ["0s", "0", "0ms"])
    def test_zero_timeout_falls_back_to_default(self, value):
        """Test a zero timeout env var keeps the 20s default instead of disabling the bound."""
        with patch.dict(os.environ, {"HTTP_HOOK_TIMEOUT": value}, clear=True):
            importlib.reload(settings)

            assert settings.HTTP_HOOK_TIMEOUT == timedelta(seconds=20)

    def test_get_duration_env_rejects_zero(self):
        """Test the duration helper only returns positive durations."""
        with patch.dict(os.environ, {"TEST_DURATION": "0s"}):
            assert settings._get_duration_env("TEST_DURATION", "3s") == timedelta(seconds=3)
        with patch.dict(os.environ, {"TEST_DURATION": "250ms"}):
            assert settings._get_duration_env("TEST_DURATION", "3s") == timedelta(milliseconds=250)
