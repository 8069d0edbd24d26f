"""Configuration statique du backend."""
from __future__ import annotations

import os
from dataclasses import dataclass

from backend.core.env_loader import load_env

_TRUE_VALUES = {"1", "true", "yes", "on", "y", "t"}
_FALSE_VALUES = {"0", "false", "no", "off", "n", "f"}

DEFAULT_MONGO_URI = "mongodb://localhost:27017/collibra-app"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)


def _get_env_flag(name: str, default: bool = False) -> bool:
    """Retourne une valeur booléenne à partir d'une variable d'environnement."""

    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


def _get_env_int(name: str, default: int, minimum: int = 0) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _get_env_float(name: str, default: float, minimum: float = 0.0) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _get_env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _get_env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name, "")
    values = tuple(part.strip() for part in raw.split(",") if part.strip())
    return values or default


@dataclass(frozen=True)
class Settings:
    """Paramètres globaux lus depuis l'environnement."""

    MONGO_URI: str = DEFAULT_MONGO_URI
    MONGO_DB_NAME: str | None = None
    MENU_COLLECTION: str = "menusettings"
    MONGO_TIMEOUT_MS: int = 5000
    MENU_INIT_ON_STARTUP: bool = True
    MENU_INIT_MAX_ATTEMPTS: int = 5
    MENU_INIT_BACKOFF_SECONDS: float = 1.0
    JWT_SECRET_KEY: str = "change-me-please-with-a-32-byte-secret"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    CORS_ORIGINS: tuple[str, ...] = DEFAULT_CORS_ORIGINS


def load_settings() -> Settings:
    load_env()
    return Settings(
        MONGO_URI=_get_env_str("MONGO_URI", DEFAULT_MONGO_URI),
        MONGO_DB_NAME=os.getenv("MONGO_DB_NAME") or None,
        MENU_COLLECTION=_get_env_str("MENU_COLLECTION", "menusettings"),
        MONGO_TIMEOUT_MS=_get_env_int("MONGO_TIMEOUT_MS", 5000, minimum=1),
        MENU_INIT_ON_STARTUP=_get_env_flag("MENU_INIT_ON_STARTUP", default=True),
        MENU_INIT_MAX_ATTEMPTS=_get_env_int("MENU_INIT_MAX_ATTEMPTS", 5, minimum=1),
        MENU_INIT_BACKOFF_SECONDS=_get_env_float("MENU_INIT_BACKOFF_SECONDS", 1.0),
        JWT_SECRET_KEY=_get_env_str("JWT_SECRET_KEY", "change-me-please-with-a-32-byte-secret"),
        ACCESS_TOKEN_EXPIRE_MINUTES=_get_env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 30, minimum=1),
        CORS_ORIGINS=_get_env_list("BACKEND_CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
    )


settings = load_settings()
