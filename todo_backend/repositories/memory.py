"""Todo repository with in-memory storage."""

from __future__ import annotations

from typing import Dict, List, Optional

from todo_backend.models.todo import Todo
from todo_backend.repositories.base import TodoRepository
from todo_backend.services.ids import IdGenerator


class InMemoryTodoRepository(TodoRepository):
    """Repository keeping todos in a process-local dict."""

    name = "memory"

    def __init__(self, id_generator: Optional[IdGenerator] = None, *, seed_sample: bool = True) -> None:
        super().__init__(id_generator, seed_sample=seed_sample)
        self._todos: Dict[int, Todo] = {}

    async def insert(self, todo: Todo) -> Todo:
        self._todos[todo.id] = todo.model_copy()
        return todo

    async def get_all(self) -> List[Todo]:
        return [todo.model_copy() for todo in self._todos.values()]

    async def get_certain(self, todo_id: int) -> Optional[Todo]:
        todo = self._todos.get(todo_id)
        return todo.model_copy() if todo is not None else None

    async def delete(self, todo_id: int) -> None:
        self._todos.pop(todo_id, None)

    async def delete_all(self) -> None:
        self._todos.clear()
