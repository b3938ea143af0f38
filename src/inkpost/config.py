"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, passed
explicitly to the app, the session middleware, and the database gateway.
``load_config()`` builds one from the process environment (and a ``.env``
file, via python-dotenv).
"""

from __future__ import annotations

import logging
import os
import secrets
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import quote, urlsplit

from dotenv import find_dotenv, load_dotenv

from inkpost.errors import ConfigurationError

logger = logging.getLogger("inkpost.config")

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class DatabaseSettings:
    """Connection settings for the database gateway.

    ``url`` wins over the individual parts when set.
    """

    driver: str = "postgresql"
    host: str = "127.0.0.1"
    port: int = 5432
    name: str = "blog_db"
    user: str = "postgres"
    password: str = ""
    charset: str = "utf8"
    url: str | None = None

    @property
    def dsn(self) -> str:
        """Connection URL understood by ``inkpost.data.Database``."""
        if self.url:
            return self.url
        if self.driver == "sqlite":
            return f"sqlite:///{self.name}"
        auth = quote(self.user, safe="")
        if self.password:
            auth = f"{auth}:{quote(self.password, safe='')}"
        return f"{self.driver}://{auth}@{self.host}:{self.port}/{self.name}"


@dataclass(frozen=True, slots=True)
class MailSettings:
    """Outgoing mail settings. Consumed by future mail features."""

    host: str | None = None
    port: int = 587
    user: str | None = None
    password: str | None = None
    from_email: str = "no-reply@example.com"
    from_name: str = "Inkpost Multi-User Blog"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=False, secret_key="s3cr3t")
    """

    # Application
    app_name: str = "Inkpost Multi-User Blog"
    app_url: str = "http://localhost"
    app_env: str = "development"
    debug: bool = True
    timezone: str = "UTC"
    log_level: str = "info"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Security / sessions
    secret_key: str = ""
    cookie_domain: str | None = None

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    mail: MailSettings = field(default_factory=MailSettings)

    @property
    def base_path(self) -> str:
        """Path prefix of ``app_url`` without trailing slash (``""`` at web root)."""
        return urlsplit(self.app_url).path.rstrip("/")

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> AppConfig:
        """Build a config from an environment mapping, applying defaults."""
        defaults = cls()
        db_defaults = DatabaseSettings()
        mail_defaults = MailSettings()
        debug = _get_bool(environ, "DEBUG_MODE", default=True)
        app_name = environ.get("APP_NAME") or defaults.app_name

        secret_key = environ.get("SECRET_KEY", "")
        if not secret_key and debug:
            # Sessions from a previous process become unreadable on restart.
            secret_key = secrets.token_urlsafe(32)
            logger.warning("SECRET_KEY not set; using a random key for this process")

        database = DatabaseSettings(
            driver=environ.get("DB_DRIVER") or db_defaults.driver,
            host=environ.get("DB_HOST") or db_defaults.host,
            port=_get_int(environ, "DB_PORT", db_defaults.port),
            name=environ.get("DB_NAME") or db_defaults.name,
            user=environ.get("DB_USER") or db_defaults.user,
            password=environ.get("DB_PASS", ""),
            charset=environ.get("DB_CHARSET") or db_defaults.charset,
            url=environ.get("DB_URL") or None,
        )
        mail = MailSettings(
            host=environ.get("SMTP_HOST") or None,
            port=_get_int(environ, "SMTP_PORT", mail_defaults.port),
            user=environ.get("SMTP_USER") or None,
            password=environ.get("SMTP_PASS") or None,
            from_email=environ.get("SMTP_FROM_EMAIL") or mail_defaults.from_email,
            from_name=environ.get("SMTP_FROM_NAME") or app_name,
        )
        return cls(
            app_name=app_name,
            app_url=environ.get("APP_URL") or defaults.app_url,
            app_env=environ.get("APP_ENV") or defaults.app_env,
            debug=debug,
            timezone=environ.get("APP_TIMEZONE") or defaults.timezone,
            log_level=(environ.get("LOG_LEVEL") or ("debug" if debug else "info")).lower(),
            host=environ.get("HOST") or defaults.host,
            port=_get_int(environ, "PORT", defaults.port),
            secret_key=secret_key,
            cookie_domain=environ.get("APP_COOKIE_DOMAIN") or None,
            database=database,
            mail=mail,
        )


def load_config(
    environ: Mapping[str, str] | None = None,
    *,
    dotenv_path: str | os.PathLike[str] | None = None,
) -> AppConfig:
    """Load the application config and apply process-wide settings.

    When *environ* is omitted, a ``.env`` file is loaded first (real
    environment variables take precedence) and ``os.environ`` is read.
    The configured timezone becomes the process default.
    """
    if environ is None:
        path = dotenv_path if dotenv_path is not None else find_dotenv(usecwd=True)
        if path:
            load_dotenv(path, override=False)
        environ = os.environ
    config = AppConfig.from_env(environ)
    apply_timezone(config.timezone)
    return config


def apply_timezone(name: str) -> None:
    """Set the process default timezone (``TZ``)."""
    os.environ["TZ"] = name
    if hasattr(time, "tzset"):
        time.tzset()


def _get_bool(environ: Mapping[str, str], key: str, *, default: bool) -> bool:
    value = environ.get(key)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUTHY


def _get_int(environ: Mapping[str, str], key: str, default: int) -> int:
    value = environ.get(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        msg = f"{key} must be an integer, got {value!r}"
        raise ConfigurationError(msg) from None
