"""Runtime settings read from the environment."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple
import os

from todo_backend.errors import ConfigError

STORAGE_BACKENDS = ("memory", "redis", "postgres")
ID_STRATEGIES = ("counter", "random")


@dataclass(frozen=True)
class Settings:
    storage_backend: str = "memory"
    redis_url: str = "redis://127.0.0.1:6379/0"
    redis_todo_key: str = "todos"
    database_url: Optional[str] = None
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    id_strategy: str = "counter"
    seed_sample: bool = True
    allowed_origins: Tuple[str, ...] = ("*",)
    host: str = "0.0.0.0"
    port: int = 8080
    workers: int = 1
    log_level: str = "INFO"

    def validate(self) -> "Settings":
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ConfigError(
                f"TODO_STORAGE must be one of {', '.join(STORAGE_BACKENDS)}; got '{self.storage_backend}'"
            )
        if self.id_strategy not in ID_STRATEGIES:
            raise ConfigError(
                f"TODO_ID_STRATEGY must be one of {', '.join(ID_STRATEGIES)}; got '{self.id_strategy}'"
            )
        if self.storage_backend == "postgres" and not self.database_url:
            raise ConfigError("DATABASE_URL is required when TODO_STORAGE=postgres")
        if self.db_pool_min_size < 1 or self.db_pool_max_size < self.db_pool_min_size:
            raise ConfigError("DB_POOL_MIN_SIZE must be >= 1 and <= DB_POOL_MAX_SIZE")
        return self


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer; got '{raw}'") from exc


def parse_allowed_origins(raw: Optional[str]) -> Tuple[str, ...]:
    if raw is None:
        return ("*",)
    origins = tuple(origin.strip() for origin in raw.split(",") if origin.strip())
    return origins or ("*",)


def load_settings() -> Settings:
    return Settings(
        storage_backend=os.getenv("TODO_STORAGE", "memory").strip().lower(),
        redis_url=os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0"),
        redis_todo_key=os.getenv("REDIS_TODO_KEY", "todos"),
        database_url=os.getenv("DATABASE_URL") or None,
        db_pool_min_size=_env_int("DB_POOL_MIN_SIZE", 1),
        db_pool_max_size=_env_int("DB_POOL_MAX_SIZE", 5),
        id_strategy=os.getenv("TODO_ID_STRATEGY", "counter").strip().lower(),
        seed_sample=_env_bool("TODO_SEED_SAMPLE", True),
        allowed_origins=parse_allowed_origins(os.getenv("ALLOWED_ORIGINS")),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_env_int("PORT", 8080),
        workers=max(1, _env_int("WEB_CONCURRENCY", 1)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    ).validate()


@lru_cache
def get_settings() -> Settings:
    return load_settings()
