from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off", "")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it’s easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _getenv_bool(name: str, default: bool) -> bool:
    raw = _getenv(name, "true" if default else "false").lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    bootstrap_admin: str | None
    bootstrap_admin_name: str
    jwt_public_key_path: str | None

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
    def uses_database(self) -> bool:
        return self.database_url is not None


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    log_json = _getenv_bool("LOG_JSON", default=False)
    database_url = _getenv("DATABASE_URL", "") or None
    bootstrap_admin = _getenv("BOOTSTRAP_ADMIN", "") or None
    bootstrap_admin_name = _getenv("BOOTSTRAP_ADMIN_NAME", "") or "Administrator"
    jwt_public_key_path = _getenv("JWT_PUBLIC_KEY_PATH", "") or None

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json,
        port=port,
        database_url=database_url,
        bootstrap_admin=bootstrap_admin,
        bootstrap_admin_name=bootstrap_admin_name,
        jwt_public_key_path=jwt_public_key_path,
    )


# Optional: module-level singleton so imports are cheap
SETTINGS = load_settings()
