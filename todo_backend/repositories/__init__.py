"""Storage backends for todos."""

from __future__ import annotations

import logging
from typing import Optional

from todo_backend.config import Settings
from todo_backend.services.ids import IdGenerator, RandomIdGenerator

from .base import TodoRepository
from .memory import InMemoryTodoRepository
from .postgres_repository import PostgresTodoRepository
from .redis_repository import RedisTodoRepository

logger = logging.getLogger(__name__)


def build_repository(settings: Settings) -> TodoRepository:
    """Create the backend selected by ``settings.storage_backend``."""
    id_generator: Optional[IdGenerator] = RandomIdGenerator() if settings.id_strategy == "random" else None
    backend = settings.storage_backend
    if backend == "redis":
        repository: TodoRepository = RedisTodoRepository.from_url(
            settings.redis_url,
            key=settings.redis_todo_key,
            id_generator=id_generator,
            seed_sample=settings.seed_sample,
        )
    elif backend == "postgres":
        repository = PostgresTodoRepository(
            settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            id_generator=id_generator,
            seed_sample=settings.seed_sample,
        )
    elif backend == "memory":
        repository = InMemoryTodoRepository(id_generator, seed_sample=settings.seed_sample)
    else:
        raise ValueError(f"Unknown storage backend: {backend}")
    logger.info("Using %s storage with %s ids", repository.name, repository.ids.name)
    return repository


__all__ = [
    "InMemoryTodoRepository",
    "PostgresTodoRepository",
    "RedisTodoRepository",
    "TodoRepository",
    "build_repository",
]
