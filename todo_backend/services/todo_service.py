"""Todo service - business logic layer."""

from __future__ import annotations

import logging
from typing import List, Optional

from todo_backend.models.todo import Todo
from todo_backend.repositories.base import TodoRepository

logger = logging.getLogger(__name__)


class TodoService:
    """Service for todo business logic."""

    def __init__(self, repository: TodoRepository) -> None:
        self.repository = repository

    async def get_todos(self) -> List[Todo]:
        """Get all todo items."""
        return await self.repository.get_all()

    async def get_todo_by_id(self, todo_id: int) -> Optional[Todo]:
        """Get a specific todo by ID."""
        todo = await self.repository.get_certain(todo_id)
        if todo is None:
            logger.debug("Todo %s not found", todo_id)
        return todo

    async def create_todo(self, todo: Todo, collection_url: str) -> Todo:
        """Assign an id and resource URL, then store the todo.

        A client-supplied id is kept and reported to the id generator so that
        later generated ids do not collide with it.
        """
        if todo.id == 0:
            todo_id = await self.repository.ids.next_id()
        else:
            todo_id = todo.id
            await self.repository.ids.observe(todo_id)
        created = todo.model_copy(
            update={"id": todo_id, "url": f"{collection_url.rstrip('/')}/{todo_id}"}
        )
        await self.repository.insert(created)
        logger.info("Created todo %s", todo_id)
        return created

    async def update_todo(self, todo_id: int, incoming: Todo) -> Optional[Todo]:
        """Merge a partial todo into an existing one."""
        updated = await self.repository.update(todo_id, incoming)
        if updated is None:
            logger.debug("Todo %s not found for update", todo_id)
        return updated

    async def delete_todo(self, todo_id: int) -> None:
        """Delete a todo item; unknown ids are ignored."""
        await self.repository.delete(todo_id)
        logger.info("Deleted todo %s", todo_id)

    async def delete_all_todos(self) -> None:
        await self.repository.delete_all()
        logger.info("Deleted all todos")
