"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Minimum HS256 secret size accepted at startup
MIN_SECRET_BYTES: Final[int] = 32


# Loads .env during development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    JWT_SECRET_KEY: str
        HS256 signing secret for bearer tokens. Must be at least
        ``MIN_SECRET_BYTES`` long; the factory refuses to start otherwise.
    ACCESS_TOKEN_EXPIRES / REFRESH_TOKEN_EXPIRES / INVITATION_TOKEN_EXPIRES /
    ADMIN_TOKEN_EXPIRES: timedelta
        Lifetimes per token type.
    PASSWORD_*: int | bool
        Password strength policy thresholds and bcrypt cost factor.
    ADMIN_KEY_DIR: str
        Restricted directory receiving the admin RSA keypair and certificate.
    ADMIN_KEY_BITS: int
        RSA modulus size for the admin keypair.
    INVITATION_BASE_URL: str
        Prefix used to build invitation links returned to admins.
    AUTH_LOGIN_RATE_LIMIT: str
        Flask-Limiter expression applied to the login endpoint.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")

    # Token lifetimes
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=env_int("ACCESS_TOKEN_EXPIRES_MINUTES", 15))
    REFRESH_TOKEN_EXPIRES = timedelta(days=env_int("REFRESH_TOKEN_EXPIRES_DAYS", 7))
    INVITATION_TOKEN_EXPIRES = timedelta(days=env_int("INVITATION_TOKEN_EXPIRES_DAYS", 7))
    ADMIN_TOKEN_EXPIRES = timedelta(days=env_int("ADMIN_TOKEN_EXPIRES_DAYS", 100 * 365))

    # Password policy
    PASSWORD_MIN_LENGTH = env_int("PASSWORD_MIN_LENGTH", 8)
    PASSWORD_REQUIRE_UPPER = env_bool("PASSWORD_REQUIRE_UPPER", True)
    PASSWORD_REQUIRE_LOWER = env_bool("PASSWORD_REQUIRE_LOWER", True)
    PASSWORD_REQUIRE_DIGIT = env_bool("PASSWORD_REQUIRE_DIGIT", True)
    PASSWORD_REQUIRE_SYMBOL = env_bool("PASSWORD_REQUIRE_SYMBOL", True)
    PASSWORD_HASH_ROUNDS = env_int("PASSWORD_HASH_ROUNDS", 12)

    # Bootstrap key material
    ADMIN_KEY_DIR = os.getenv("ADMIN_KEY_DIR", "configs/keys")
    ADMIN_KEY_BITS = env_int("ADMIN_KEY_BITS", 4096)

    # Invitations
    INVITATION_BASE_URL = os.getenv("INVITATION_BASE_URL", "https://fits.example.com/invite/")

    # Rate limiting (Flask-Limiter); Redis shares counters across workers
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    REDIS_URL = os.getenv("REDIS_URL")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", REDIS_URL or "memory://")
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode and falls back to a throwaway signing secret so the
    server can boot without a ``.env`` file. Never use it beyond a laptop.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-only-signing-secret-change-me-0123456789")
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Lowers the bcrypt cost and RSA key size so suites stay fast.
    - Disables rate limiting.
    """

    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = "testing-signing-secret-0123456789abcdef"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    PASSWORD_HASH_ROUNDS = 4
    ADMIN_KEY_BITS = 2048
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = "memory://"
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    ``JWT_SECRET_KEY`` has no fallback here: a missing secret aborts startup.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, object]) -> None:
    """Abort startup when security-critical settings are unusable.

    :param config: Loaded Flask configuration mapping.
    :raises RuntimeError: If the signing secret is missing or too short, or a
        token lifetime is not positive.
    """
    secret = config.get("JWT_SECRET_KEY") or ""
    if isinstance(secret, str):
        raw = secret.encode("utf-8")
    else:
        raw = bytes(secret)  # type: ignore[arg-type]
    if len(raw) < MIN_SECRET_BYTES:
        raise RuntimeError(
            f"JWT_SECRET_KEY must be set and at least {MIN_SECRET_BYTES} bytes long."
        )
    for key in (
        "ACCESS_TOKEN_EXPIRES",
        "REFRESH_TOKEN_EXPIRES",
        "INVITATION_TOKEN_EXPIRES",
        "ADMIN_TOKEN_EXPIRES",
    ):
        value = config.get(key)
        if not isinstance(value, timedelta) or value <= timedelta(0):
            raise RuntimeError(f"{key} must be a positive timedelta.")
