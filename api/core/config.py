"""
Configuration structs built from environment variables.

Settings are read once (at app construction) and passed down explicitly.
Nothing in the data-access layer reads the environment at query time, so tests
can build a `DatabaseConfig` pointing at a throwaway database.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from dotenv import load_dotenv

DEFAULT_SSLMODE = "prefer"
DEFAULT_MAX_PAGE_SIZE = 100
DEFAULT_MAX_BULK_UPLOAD = 1000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(RuntimeError):
    pass


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    return default


def split_sslmode(url: str) -> tuple[str, str | None]:
    """
    Remove `sslmode` from a DSN query string and return it separately.

    asyncpg takes the SSL mode as a keyword argument; leaving it in the URL
    works for some versions and not others.
    """
    parts = urlsplit(url)
    if not parts.query:
        return url, None

    sslmode: str | None = None
    params = []
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key == "sslmode":
            sslmode = value or None
            continue
        params.append((key, value))
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment)), sslmode


@dataclass(frozen=True)
class DatabaseConfig:
    dsn: str
    sslmode: str | None = DEFAULT_SSLMODE
    min_size: int = 1
    max_size: int = 5
    command_timeout: float = 30.0
    create_schema: bool = False

    @classmethod
    def from_url(cls, url: str, **overrides) -> "DatabaseConfig":
        dsn, sslmode = split_sslmode(url.strip())
        if not dsn:
            raise ConfigError("Database URL is empty.")
        overrides.setdefault("sslmode", sslmode or DEFAULT_SSLMODE)
        return cls(dsn=dsn, **overrides)

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """
        Prefer `DATABASE_URL`; otherwise assemble a DSN from `DB_*` parts.
        """
        tuning = {
            "min_size": max(1, _env_int("DB_POOL_MIN_SIZE", 1)),
            "max_size": max(1, _env_int("DB_POOL_MAX_SIZE", 5)),
            "command_timeout": _env_float("DB_COMMAND_TIMEOUT", 30.0),
            "create_schema": _env_bool("DB_CREATE_SCHEMA", False),
        }
        if tuning["max_size"] < tuning["min_size"]:
            tuning["max_size"] = tuning["min_size"]

        url = _env_str("DATABASE_URL")
        if url:
            return cls.from_url(url, **tuning)

        host = _env_str("DB_HOST", "localhost")
        port = _env_int("DB_PORT", 5432)
        name = _env_str("DB_NAME", "contacts")
        user = _env_str("DB_USER", "postgres")
        password = os.environ.get("DB_PASSWORD", "")
        auth = quote(user, safe="")
        if password:
            auth += ":" + quote(password, safe="")
        return cls(
            dsn=f"postgresql://{auth}@{host}:{port}/{name}",
            sslmode=_env_str("DB_SSLMODE", DEFAULT_SSLMODE),
            **tuning,
        )


@dataclass(frozen=True)
class AuthConfig:
    enabled: bool = False
    jwt_secret: str = "dev-change-this-secret"
    jwt_algorithm: str = "HS256"

    @classmethod
    def from_env(cls) -> "AuthConfig":
        return cls(
            enabled=_env_bool("AUTH_ENABLED", False),
            # Local default keeps development simple.
            # In production, set JWT_SECRET in environment.
            jwt_secret=_env_str("JWT_SECRET", "dev-change-this-secret"),
            jwt_algorithm=_env_str("JWT_ALG", "HS256"),
        )


@dataclass(frozen=True)
class AppConfig:
    database: DatabaseConfig
    auth: AuthConfig = field(default_factory=AuthConfig)
    cors_origins: tuple[str, ...] = ("*",)
    max_page_size: int = DEFAULT_MAX_PAGE_SIZE
    max_bulk_upload: int = DEFAULT_MAX_BULK_UPLOAD
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, *, env_file: str | None = ".env") -> "AppConfig":
        if env_file:
            load_dotenv(env_file, override=False)

        origins = tuple(
            origin.strip()
            for origin in _env_str("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        )
        return cls(
            database=DatabaseConfig.from_env(),
            auth=AuthConfig.from_env(),
            cors_origins=origins or ("*",),
            max_page_size=max(1, _env_int("MAX_PAGE_SIZE", DEFAULT_MAX_PAGE_SIZE)),
            max_bulk_upload=max(1, _env_int("MAX_BULK_UPLOAD", DEFAULT_MAX_BULK_UPLOAD)),
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
        )
