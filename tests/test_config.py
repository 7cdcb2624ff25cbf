"""Tests for cookie_cutter.config — defaults and environment binding."""

from __future__ import annotations

import pydantic
import pytest

from cookie_cutter import config


class TestEngineSettings:
    def test_defaults(self) -> None:
        settings = config.EngineSettings()
        assert settings.activation_threshold == 50
        assert settings.max_isolated_depth == 3
        assert settings.context_gate_depth == 10
        assert settings.proximity_depth == 6
        assert settings.hidden_fallback is True

    def test_environment_aliases(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COOKIE_CUTTER_ACTIVATION_THRESHOLD", "65")
        monkeypatch.setenv("COOKIE_CUTTER_PASS_DELAYS_MS", "[100, 50]")
        monkeypatch.setenv("COOKIE_CUTTER_HIDDEN_FALLBACK", "false")
        settings = config.EngineSettings()
        assert settings.activation_threshold == 65
        assert settings.pass_delays_ms == [50, 100]
        assert settings.hidden_fallback is False

    def test_delays_are_sorted(self) -> None:
        assert config.EngineSettings(pass_delays_ms=[800, 0, 300]).pass_delays_ms == [0, 300, 800]

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            config.EngineSettings(pass_delays_ms=[-1])

    def test_negative_depth_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            config.EngineSettings(max_isolated_depth=-1)


class TestServerSettings:
    def test_production_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        assert config.ServerSettings().is_production is True

    def test_development_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        assert config.ServerSettings().is_production is False
