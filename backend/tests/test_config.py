"""Tests for settings and engine configuration."""

import pytest
from pydantic import ValidationError

from signal_core.models import EngineConfig, SignalType
from signal_server.config import Settings, get_settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.feed_mode == "simulated"
        assert settings.port == 3000
        assert settings.symbols == ["R_100", "R_50"]
        assert settings.cooldown_ms == 5000
        assert settings.matches_pair is None
        assert settings.max_pending_writes == 10_000

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("FEED_MODE", "deriv")
        monkeypatch.setenv("SYMBOLS", '["R_10", "R_25"]')
        monkeypatch.setenv("COOLDOWN_SCOPE", "per_type")
        monkeypatch.setenv("THRESHOLD_OVER_UNDER", "0.8")

        settings = Settings(_env_file=None)

        assert settings.feed_mode == "deriv"
        assert settings.symbols == ["R_10", "R_25"]
        assert settings.cooldown_scope == "per_type"
        assert settings.threshold_over_under == 0.8

    def test_invalid_feed_mode(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, feed_mode="replay")

    def test_to_engine_config(self):
        settings = Settings(
            _env_file=None,
            symbols=["A", "B"],
            cooldown_ms=1000,
            enabled_signals=[SignalType.MATCHES],
        )
        config = settings.to_engine_config()

        assert config.symbols == ["A", "B"]
        assert config.cooldown_ms == 1000
        assert config.enabled_signals == [SignalType.MATCHES]
        assert config.resolved_matches_pair() == ("A", "B")

    def test_matches_pair_passed_through(self):
        settings = Settings(_env_file=None, symbols=["A", "B", "C"], matches_pair=("C", "A"))

        assert settings.to_engine_config().resolved_matches_pair() == ("C", "A")

    def test_matches_pair_from_environment(self, monkeypatch):
        monkeypatch.setenv("SYMBOLS", '["A", "B", "C"]')
        monkeypatch.setenv("MATCHES_PAIR", '["C", "A"]')

        settings = Settings(_env_file=None)

        assert settings.matches_pair == ("C", "A")
        assert settings.to_engine_config().matches_pair == ("C", "A")

    def test_bad_weights_rejected(self):
        settings = Settings(_env_file=None, weight_momentum=0.9)
        with pytest.raises(ValidationError):
            settings.to_engine_config()

    def test_get_settings_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()


class TestEngineConfig:
    def test_buffer_capacity_minimum(self):
        with pytest.raises(ValidationError):
            EngineConfig(buffer_capacity=19)

    def test_threshold_range(self):
        with pytest.raises(ValidationError):
            EngineConfig(thresholds={"over_under": 1.5})

    def test_defaults(self):
        config = EngineConfig()
        assert config.expiry_seconds == 60
        assert config.cooldown_scope == "shared"
        assert config.resolved_matches_pair() is None
