"""Todo repository backed by a Redis hash.

Layout: one hash named by ``key``; each field is the todo id and each value
the JSON record of that todo. The id counter lives in the string
``<key>:next_id`` so every worker sharing the server draws from it.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from todo_backend.errors import BackendUnavailable, DecodeError
from todo_backend.models.todo import Todo
from todo_backend.repositories.base import TodoRepository
from todo_backend.services.ids import IdGenerator

logger = logging.getLogger(__name__)

DEFAULT_KEY = "todos"

# Raises the counter to ARGV[1] unless it is already higher.
OBSERVE_SCRIPT = """
local current = tonumber(redis.call('GET', KEYS[1]) or '0')
local seen = tonumber(ARGV[1])
if seen > current then
    redis.call('SET', KEYS[1], seen)
    return seen
end
return current
"""


class RedisCounterIdGenerator:
    """Counter kept in a Redis string and advanced with INCR."""

    name = "counter"

    def __init__(self, client: Any, counter_key: str) -> None:
        self._client = client
        self.counter_key = counter_key

    async def next_id(self) -> int:
        try:
            return int(await self._client.incr(self.counter_key))
        except RedisError as exc:
            logger.warning("Redis next_id failed: %s", exc)
            raise BackendUnavailable("Redis next_id failed", backend="redis") from exc

    async def observe(self, todo_id: int) -> None:
        try:
            await self._client.eval(OBSERVE_SCRIPT, 1, self.counter_key, todo_id)
        except RedisError as exc:
            logger.warning("Redis observe failed: %s", exc)
            raise BackendUnavailable("Redis observe failed", backend="redis") from exc


class RedisTodoRepository(TodoRepository):
    name = "redis"

    def __init__(
        self,
        client: Any,
        *,
        key: str = DEFAULT_KEY,
        id_generator: Optional[IdGenerator] = None,
        seed_sample: bool = True,
    ) -> None:
        self._client = client
        self.key = key
        super().__init__(id_generator, seed_sample=seed_sample)

    def _default_id_generator(self) -> IdGenerator:
        return RedisCounterIdGenerator(self._client, f"{self.key}:next_id")

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "RedisTodoRepository":
        client = aioredis.from_url(url, decode_responses=True)
        return cls(client, **kwargs)

    async def insert(self, todo: Todo) -> Todo:
        try:
            await self._client.hset(self.key, str(todo.id), todo.to_record())
        except RedisError as exc:
            raise self._unavailable("insert", exc) from exc
        return todo

    async def get_all(self) -> List[Todo]:
        try:
            values = await self._client.hvals(self.key)
        except RedisError as exc:
            raise self._unavailable("get_all", exc) from exc
        return [self._decode(value) for value in values]

    async def get_certain(self, todo_id: int) -> Optional[Todo]:
        try:
            value = await self._client.hget(self.key, str(todo_id))
        except RedisError as exc:
            raise self._unavailable("get_certain", exc) from exc
        if value is None:
            return None
        return self._decode(value)

    async def delete(self, todo_id: int) -> None:
        try:
            await self._client.hdel(self.key, str(todo_id))
        except RedisError as exc:
            raise self._unavailable("delete", exc) from exc

    async def delete_all(self) -> None:
        try:
            await self._client.delete(self.key)
        except RedisError as exc:
            raise self._unavailable("delete_all", exc) from exc

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Redis client closed")

    async def _stored_ids(self) -> List[int]:
        try:
            fields = await self._client.hkeys(self.key)
        except RedisError as exc:
            raise self._unavailable("init_data", exc) from exc
        ids = []
        for field in fields:
            try:
                ids.append(int(field))
            except ValueError:
                logger.warning("Ignoring non-numeric todo field %r in hash %s", field, self.key)
        return ids

    def _decode(self, value: Any) -> Todo:
        try:
            return Todo.from_json(value)
        except DecodeError as exc:
            logger.error("Corrupt todo record in hash %s: %s", self.key, exc)
            raise BackendUnavailable("Stored todo record is corrupt", backend=self.name) from exc

    def _unavailable(self, operation: str, exc: Exception) -> BackendUnavailable:
        logger.warning("Redis %s failed: %s", operation, exc)
        return BackendUnavailable(f"Redis {operation} failed", backend=self.name)
