"""Todo repository backed by a PostgreSQL table.

Ids come from the ``todo_id_seq`` sequence, shared by every worker using the
database. The pool is created lazily: a server that is down at startup is
retried on the next request.

Smoke check:
  - Set TODO_STORAGE=postgres and DATABASE_URL, start the app, POST /todos,
    restart the server, then GET /todos/{id}.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Mapping, Optional

import asyncpg

from todo_backend.errors import BackendUnavailable
from todo_backend.models.todo import Todo
from todo_backend.repositories.base import TodoRepository
from todo_backend.services.ids import IdGenerator

logger = logging.getLogger(__name__)

SQL_CREATE = """
CREATE TABLE IF NOT EXISTS todo (
    id INTEGER PRIMARY KEY,
    title TEXT NULL,
    completed BOOLEAN NULL,
    "order" INTEGER NULL,
    url TEXT NULL
);
CREATE SEQUENCE IF NOT EXISTS todo_id_seq AS INTEGER;
"""
SQL_INSERT = """
INSERT INTO todo (id, title, completed, "order", url)
VALUES ($1, $2, $3, $4, $5)
ON CONFLICT (id) DO UPDATE SET
    title = EXCLUDED.title,
    completed = EXCLUDED.completed,
    "order" = EXCLUDED."order",
    url = EXCLUDED.url;
"""
SQL_QUERY = 'SELECT id, title, completed, "order", url FROM todo WHERE id = $1;'
SQL_QUERY_ALL = 'SELECT id, title, completed, "order", url FROM todo;'
SQL_QUERY_IDS = "SELECT id FROM todo;"
SQL_UPDATE = """
UPDATE todo
SET title = $2, completed = $3, "order" = $4, url = $5
WHERE id = $1;
"""
SQL_DELETE = "DELETE FROM todo WHERE id = $1;"
SQL_DELETE_ALL = "DELETE FROM todo;"
SQL_NEXT_ID = "SELECT nextval('todo_id_seq');"
SQL_OBSERVE_ID = """
SELECT setval('todo_id_seq', GREATEST($1::integer, (SELECT last_value FROM todo_id_seq)));
"""

_CONNECTION_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class PostgresSequenceIdGenerator:
    """Draws ids from ``todo_id_seq`` through the repository's pool."""

    name = "sequence"

    def __init__(self, repository: "PostgresTodoRepository") -> None:
        self._repository = repository

    async def next_id(self) -> int:
        async with self._repository._connection("next_id") as conn:
            return int(await conn.fetchval(SQL_NEXT_ID))

    async def observe(self, todo_id: int) -> None:
        async with self._repository._connection("observe") as conn:
            await conn.fetchval(SQL_OBSERVE_ID, todo_id)


class PostgresTodoRepository(TodoRepository):
    name = "postgres"

    def __init__(
        self,
        database_url: Optional[str] = None,
        *,
        pool: Any = None,
        min_size: int = 1,
        max_size: int = 5,
        id_generator: Optional[IdGenerator] = None,
        seed_sample: bool = True,
    ) -> None:
        super().__init__(id_generator, seed_sample=seed_sample)
        self._database_url = database_url
        self._pool = pool
        self._min_size = min_size
        self._max_size = max_size
        self._schema_ready = False

    def _default_id_generator(self) -> IdGenerator:
        return PostgresSequenceIdGenerator(self)

    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        if self._pool is not None:
            return
        if not self._database_url:
            raise BackendUnavailable("DATABASE_URL is not configured", backend=self.name)
        try:
            self._pool = await asyncpg.create_pool(
                dsn=self._database_url,
                min_size=self._min_size,
                max_size=self._max_size,
            )
        except _CONNECTION_ERRORS as exc:
            raise self._unavailable("connect", exc) from exc
        logger.info("Database pool created (min=%s max=%s)", self._min_size, self._max_size)

    async def close(self) -> None:
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        self._schema_ready = False
        logger.info("Database pool closed")

    async def insert(self, todo: Todo) -> Todo:
        async with self._connection("insert") as conn:
            await conn.execute(SQL_INSERT, *_params(todo))
        return todo

    async def get_all(self) -> List[Todo]:
        async with self._connection("get_all") as conn:
            rows = await conn.fetch(SQL_QUERY_ALL)
        return [_row_to_todo(row) for row in rows]

    async def get_certain(self, todo_id: int) -> Optional[Todo]:
        async with self._connection("get_certain") as conn:
            row = await conn.fetchrow(SQL_QUERY, todo_id)
        return _row_to_todo(row) if row is not None else None

    async def delete(self, todo_id: int) -> None:
        async with self._connection("delete") as conn:
            await conn.execute(SQL_DELETE, todo_id)

    async def delete_all(self) -> None:
        async with self._connection("delete_all") as conn:
            await conn.execute(SQL_DELETE_ALL)

    async def _prepare(self) -> None:
        await self._ensure_ready()

    async def _stored_ids(self) -> List[int]:
        async with self._connection("init_data") as conn:
            rows = await conn.fetch(SQL_QUERY_IDS)
        return [row["id"] for row in rows]

    async def _replace(self, todo: Todo) -> None:
        async with self._connection("update") as conn:
            await conn.execute(SQL_UPDATE, *_params(todo))

    async def _ensure_ready(self) -> None:
        """Create the pool and the schema if an earlier attempt did not."""
        await self.connect()
        if self._schema_ready:
            return
        async with self._acquire("init_data") as conn:
            await conn.execute(SQL_CREATE)
        self._schema_ready = True

    @asynccontextmanager
    async def _connection(self, operation: str) -> AsyncIterator[Any]:
        await self._ensure_ready()
        async with self._acquire(operation) as conn:
            yield conn

    @asynccontextmanager
    async def _acquire(self, operation: str) -> AsyncIterator[Any]:
        try:
            async with self._pool.acquire() as conn:
                yield conn
        except _CONNECTION_ERRORS as exc:
            raise self._unavailable(operation, exc) from exc

    def _unavailable(self, operation: str, exc: BaseException) -> BackendUnavailable:
        logger.warning("Postgres %s failed: %s", operation, exc)
        return BackendUnavailable(f"Postgres {operation} failed", backend=self.name)


def _params(todo: Todo) -> tuple:
    return (todo.id, todo.title, todo.completed, todo.order, todo.url)


def _row_to_todo(row: Mapping[str, Any]) -> Todo:
    return Todo(
        id=row["id"],
        title=row["title"],
        completed=row["completed"],
        order=row["order"],
        url=row["url"],
    )
