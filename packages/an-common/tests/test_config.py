"""
Tests for an-common configuration module.

Validates that environment-based configuration loading, default values,
and validation constraints work correctly via pydantic-settings.
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from an_common.config import Settings, get_settings


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _clear_settings_cache() -> None:
    """Reset the ``get_settings`` lru_cache between tests."""
    get_settings.cache_clear()


def _clean_env() -> dict[str, str]:
    """Environment without AN_ variables so Settings reads only defaults."""
    return {k: v for k, v in os.environ.items() if not k.startswith("AN_")}


# ---------------------------------------------------------------------------
# Tests: default values
# ---------------------------------------------------------------------------


class TestSettingsDefaults:
    """Verify that ``Settings`` populates the public network defaults."""

    def test_default_core_seeds(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            s = Settings(_env_file=None)
        assert len(s.core_ips) == 5
        assert "3.142.136.148" in s.core_ips

    def test_default_fallback_gateways(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            s = Settings(_env_file=None)
        assert s.fallback_gateway_uris == [
            "http://3.133.135.157",
            "http://18.191.50.129",
            "http://18.224.185.143",
        ]

    def test_default_denylist(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            assert Settings(_env_file=None).denylisted_gateway_ips == ["3.92.247.27"]

    def test_default_verify_gateway(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            assert Settings(_env_file=None).default_verify_gateway_uri == "http://3.17.155.208"

    def test_default_limits(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            s = Settings(_env_file=None)
        assert (s.max_hashes, s.max_uris, s.min_gateways) == (250, 5, 3)

    def test_default_timeouts(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            s = Settings(_env_file=None)
        assert s.probe_timeout_s == pytest.approx(0.15)
        assert s.request_timeout_s == pytest.approx(10.0)

    def test_discovery_is_single_attempt(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            s = Settings(_env_file=None)
        assert s.discovery_max_attempts == 1
        assert s.strict_core_discovery is False


# ---------------------------------------------------------------------------
# Tests: environment variable overrides
# ---------------------------------------------------------------------------


class TestSettingsFromEnv:
    """Verify that env vars with AN_ prefix override defaults."""

    def test_override_core_ips(self) -> None:
        with patch.dict(os.environ, {"AN_CORE_IPS": '["10.0.0.1", "10.0.0.2"]'}):
            s = Settings(_env_file=None)
        assert s.core_ips == ["10.0.0.1", "10.0.0.2"]

    def test_override_log_level(self) -> None:
        with patch.dict(os.environ, {"AN_LOG_LEVEL": "DEBUG"}):
            assert Settings(_env_file=None).log_level == "DEBUG"

    def test_override_strict_discovery(self) -> None:
        with patch.dict(os.environ, {"AN_STRICT_CORE_DISCOVERY": "true"}):
            assert Settings(_env_file=None).strict_core_discovery is True

    def test_override_probe_timeout(self) -> None:
        with patch.dict(os.environ, {"AN_PROBE_TIMEOUT_S": "0.5"}):
            assert Settings(_env_file=None).probe_timeout_s == pytest.approx(0.5)


# ---------------------------------------------------------------------------
# Tests: validation constraints
# ---------------------------------------------------------------------------


class TestSettingsValidation:
    """Verify pydantic validators on ``Settings`` fields."""

    def test_min_gateways_zero(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, min_gateways=0)  # type: ignore[call-arg]

    def test_discovery_attempts_too_high(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, discovery_max_attempts=11)  # type: ignore[call-arg]

    def test_probe_timeout_zero(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, probe_timeout_s=0)  # type: ignore[call-arg]


# ---------------------------------------------------------------------------
# Tests: get_settings singleton
# ---------------------------------------------------------------------------


class TestGetSettings:
    """Verify the cached ``get_settings()`` helper."""

    def setup_method(self) -> None:
        _clear_settings_cache()

    def teardown_method(self) -> None:
        _clear_settings_cache()

    def test_returns_settings_instance(self) -> None:
        assert isinstance(get_settings(), Settings)

    def test_cached(self) -> None:
        assert get_settings() is get_settings()
