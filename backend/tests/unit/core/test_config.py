"""Unit tests for configuration loading and startup validation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from fits.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_int,
    get_config,
    validate_config,
)

GOOD_SECRET = "x" * 32


def _config(**overrides):
    base = {
        "JWT_SECRET_KEY": GOOD_SECRET,
        "ACCESS_TOKEN_EXPIRES": timedelta(minutes=15),
        "REFRESH_TOKEN_EXPIRES": timedelta(days=7),
        "INVITATION_TOKEN_EXPIRES": timedelta(days=7),
        "ADMIN_TOKEN_EXPIRES": timedelta(days=36500),
    }
    base.update(overrides)
    return base


class TestValidateConfig:
    def test_accepts_sane_values(self):
        validate_config(_config())

    @pytest.mark.parametrize("secret", [None, "", "x" * 31])
    def test_refuses_missing_or_short_secret(self, secret):
        with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
            validate_config(_config(JWT_SECRET_KEY=secret))

    @pytest.mark.parametrize("value", [timedelta(0), timedelta(seconds=-1), 900, None])
    def test_refuses_non_positive_lifetimes(self, value):
        with pytest.raises(RuntimeError, match="ACCESS_TOKEN_EXPIRES"):
            validate_config(_config(ACCESS_TOKEN_EXPIRES=value))

    def test_testing_config_is_valid(self):
        settings = {key: getattr(TestingConfig, key) for key in dir(TestingConfig) if key.isupper()}

        validate_config(settings)


class TestEnvironmentHelpers:
    def test_get_config_uses_app_env(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")
        assert get_config() is ProductionConfig

        monkeypatch.setenv("APP_ENV", "unknown")
        assert get_config() is DevelopmentConfig

    @pytest.mark.parametrize(("raw", "expected"), [("1", True), ("yes", True), ("off", False)])
    def test_env_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("FITS_FLAG", raw)

        assert env_bool("FITS_FLAG") is expected

    def test_env_defaults(self, monkeypatch):
        monkeypatch.delenv("FITS_MISSING", raising=False)

        assert env_bool("FITS_MISSING", True) is True
        assert env_int("FITS_MISSING", 7) == 7

    def test_env_int(self, monkeypatch):
        monkeypatch.setenv("FITS_NUMBER", "42")

        assert env_int("FITS_NUMBER", 0) == 42
