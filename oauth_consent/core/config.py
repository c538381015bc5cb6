from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off", "")


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    auth_server_url: str
    auth_server_token: str
    auth_server_auth_scheme: str
    auth_server_timeout_sec: float
    consent_session_ttl_sec: int

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def auth_server_configured(self) -> bool:
        return bool(self.auth_server_url)

    def __repr__(self) -> str:
        # The credential must never end up in logs or tracebacks.
        token = "***" if self.auth_server_token else "''"
        return (
            f"Settings(app_env={self.app_env!r}, log_level={self.log_level!r}, "
            f"log_json={self.log_json!r}, port={self.port!r}, "
            f"auth_server_url={self.auth_server_url!r}, "
            f"auth_server_token={token}, "
            f"auth_server_auth_scheme={self.auth_server_auth_scheme!r}, "
            f"auth_server_timeout_sec={self.auth_server_timeout_sec!r}, "
            f"consent_session_ttl_sec={self.consent_session_ttl_sec!r})"
        )


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    port_raw = _getenv("PORT", "8000")
    timeout_raw = _getenv("AUTH_SERVER_TIMEOUT_SEC", "10")
    ttl_raw = _getenv("CONSENT_SESSION_TTL_SEC", "600")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if log_json_raw not in _TRUTHY + _FALSY:
        raise ValueError(f"LOG_JSON must be true|false (got {log_json_raw!r})")

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ValueError(
            f"AUTH_SERVER_TIMEOUT_SEC must be a number (got {timeout_raw!r})"
        ) from None
    if timeout <= 0:
        raise ValueError(f"AUTH_SERVER_TIMEOUT_SEC must be > 0 (got {timeout_raw!r})")

    try:
        ttl = int(ttl_raw)
    except ValueError:
        raise ValueError(
            f"CONSENT_SESSION_TTL_SEC must be an integer (got {ttl_raw!r})"
        ) from None
    if ttl <= 0:
        raise ValueError(f"CONSENT_SESSION_TTL_SEC must be > 0 (got {ttl_raw!r})")

    # Trailing slash is dropped so endpoint paths can be appended verbatim.
    auth_server_url = _getenv("AUTH_SERVER_URL", "").rstrip("/")
    auth_server_token = _getenv("AUTH_SERVER_TOKEN", "")

    if app_env_raw == "prod":
        if not auth_server_url:
            raise ValueError("AUTH_SERVER_URL is required when APP_ENV=prod")
        if not auth_server_token:
            raise ValueError("AUTH_SERVER_TOKEN is required when APP_ENV=prod")

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in _TRUTHY,
        port=port,
        auth_server_url=auth_server_url,
        auth_server_token=auth_server_token,
        auth_server_auth_scheme=_getenv("AUTH_SERVER_AUTH_SCHEME", "Bearer"),
        auth_server_timeout_sec=timeout,
        consent_session_ttl_sec=ttl,
    )


# Loaded once at import; immutable for the life of the process.
SETTINGS = load_settings()
