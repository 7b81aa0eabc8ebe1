"""Storage port shared by every todo backend."""

from __future__ import annotations

import abc
import logging
from typing import List, Optional

from todo_backend.models.todo import Todo
from todo_backend.services.ids import CounterIdGenerator, IdGenerator

logger = logging.getLogger(__name__)

SAMPLE_TITLE = "Something to do..."


class TodoRepository(abc.ABC):
    """Async persistence contract for todos.

    Every call is one round trip to the backend, except ``update`` which reads
    and then writes without any version check: concurrent updates of the same
    id are last-write-wins.

    ``ids`` is the store's id generator. Without an explicit generator each
    backend supplies its own counter, kept where every process sharing the
    store can see it.
    """

    name = "abstract"

    def __init__(self, id_generator: Optional[IdGenerator] = None, *, seed_sample: bool = True) -> None:
        self.ids: IdGenerator = id_generator or self._default_id_generator()
        self.seed_sample = seed_sample

    def _default_id_generator(self) -> IdGenerator:
        return CounterIdGenerator()

    async def init_data(self) -> None:
        """Prepare the backend, prime the id counter and seed a sample todo.

        The sample is only added to an empty store, so restarts and extra
        workers do not pile up copies.
        """
        await self._prepare()
        stored_ids = await self._stored_ids()
        if stored_ids:
            await self.ids.observe(max(stored_ids))
        if not self.seed_sample or stored_ids:
            return
        sample = Todo(
            id=await self.ids.next_id(),
            title=SAMPLE_TITLE,
            completed=False,
            order=1,
            url="todo/ex",
        )
        await self.insert(sample)
        logger.info("Seeded sample todo id=%s backend=%s", sample.id, self.name)

    async def update(self, todo_id: int, incoming: Todo) -> Optional[Todo]:
        """Merge ``incoming`` into the stored todo and persist the result."""
        existing = await self.get_certain(todo_id)
        if existing is None:
            return None
        merged = existing.merge(incoming)
        await self._replace(merged)
        return merged

    async def close(self) -> None:
        return None

    async def _prepare(self) -> None:
        return None

    async def _stored_ids(self) -> List[int]:
        return [todo.id for todo in await self.get_all()]

    async def _replace(self, todo: Todo) -> None:
        await self.insert(todo)

    @abc.abstractmethod
    async def insert(self, todo: Todo) -> Todo:
        """Store ``todo`` under its id, overwriting any previous record."""

    @abc.abstractmethod
    async def get_all(self) -> List[Todo]:
        """Return every stored todo, in no particular order."""

    @abc.abstractmethod
    async def get_certain(self, todo_id: int) -> Optional[Todo]:
        """Return the todo with ``todo_id`` or None."""

    @abc.abstractmethod
    async def delete(self, todo_id: int) -> None:
        """Remove the todo if present; absence is not an error."""

    @abc.abstractmethod
    async def delete_all(self) -> None:
        """Remove every todo."""
