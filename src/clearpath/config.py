"""Application configuration objects and helpers."""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float = 0.0) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        number = float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}.") from exc
    if not math.isfinite(number):
        raise ValueError(f"{name} must be a finite number, got {value!r}.")
    return number


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "ClearPath"
    DB_FILENAME = "clearpath.db"
    DEBUG = False
    TESTING = False

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("CLEARPATH_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("CLEARPATH_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("CLEARPATH_DATABASE_URL", self._build_sqlite_url())
        self.DEFAULT_STRATEGY = os.getenv("CLEARPATH_DEFAULT_STRATEGY", "avalanche").strip().lower()
        self.DEFAULT_EXTRA_PAYMENT = max(_env_float("CLEARPATH_DEFAULT_EXTRA_PAYMENT", 0.0), 0.0)
        self.LOG_LEVEL = os.getenv("CLEARPATH_LOG_LEVEL", "INFO")
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("CLEARPATH_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("CLEARPATH_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True


class TestConfig(BaseConfig):
    """Configuration used by the test-suite."""

    TESTING = True
