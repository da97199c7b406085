"""Tests for configuration helpers."""

import pytest

from mutter import config


class TestFloatEnv:
    """Numeric environment overrides."""

    def test_unset_uses_default(self, monkeypatch):
        """An unset variable falls back to the default."""
        monkeypatch.delenv("MUTTER_TEST_TIMEOUT", raising=False)
        assert config._float_env("MUTTER_TEST_TIMEOUT", 60.0) == 60.0

    def test_parses_number(self, monkeypatch):
        """A numeric value is parsed as seconds."""
        monkeypatch.setenv("MUTTER_TEST_TIMEOUT", "12.5")
        assert config._float_env("MUTTER_TEST_TIMEOUT", 60.0) == 12.5

    def test_rejects_garbage(self, monkeypatch):
        """A non-numeric value names the variable in the error."""
        monkeypatch.setenv("MUTTER_TEST_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="MUTTER_TEST_TIMEOUT"):
            config._float_env("MUTTER_TEST_TIMEOUT", 60.0)


class TestDefaultThreadCount:
    """Host-derived thread count."""

    def test_follows_cpu_count(self, monkeypatch):
        """The value is read from os.cpu_count() on every call."""
        monkeypatch.setattr("os.cpu_count", lambda: 12)
        assert config.default_thread_count() == 12

    def test_never_zero(self, monkeypatch):
        """An unknown CPU count yields one thread."""
        monkeypatch.setattr("os.cpu_count", lambda: None)
        assert config.default_thread_count() == 1


def test_supported_formats_are_lowercase_extensions():
    """Extensions are stored lowercase with a leading dot."""
    for ext in config.SUPPORTED_AUDIO_FORMATS:
        assert ext.startswith(".")
        assert ext == ext.lower()
