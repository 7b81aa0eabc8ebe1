"""Service layer tests."""

import random

import pytest

from todo_backend.models.todo import Todo
from todo_backend.repositories.memory import InMemoryTodoRepository
from todo_backend.services.ids import MAX_ID, CounterIdGenerator, RandomIdGenerator
from todo_backend.services.todo_service import TodoService

COLLECTION_URL = "http://testserver/todos"


@pytest.fixture
def todo_service() -> TodoService:
    """Create todo service for testing."""
    return TodoService(InMemoryTodoRepository(seed_sample=False))


class TestIdGenerators:
    @pytest.mark.asyncio
    async def test_counter_is_monotonic(self) -> None:
        ids = CounterIdGenerator()
        assert [await ids.next_id() for _ in range(3)] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_counter_jumps_past_observed_ids(self) -> None:
        ids = CounterIdGenerator()
        await ids.observe(41)
        assert await ids.next_id() == 42
        await ids.observe(5)
        assert await ids.next_id() == 43
        assert ids.current == 43

    @pytest.mark.asyncio
    async def test_random_ids_are_positive_and_bounded(self) -> None:
        ids = RandomIdGenerator(random.Random(7))
        values = [await ids.next_id() for _ in range(50)]
        assert all(1 <= value <= MAX_ID for value in values)


class TestTodoService:
    """Test suite for TodoService."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_url(self, todo_service: TodoService) -> None:
        created = await todo_service.create_todo(Todo(title="Buy milk", order=1), COLLECTION_URL)

        assert created.id == 1
        assert created.url == f"{COLLECTION_URL}/1"
        assert created.is_completed() is False

        stored = await todo_service.get_todo_by_id(created.id)
        assert stored == created
        assert stored.url == created.url

    @pytest.mark.asyncio
    async def test_create_overwrites_client_url(self, todo_service: TodoService) -> None:
        created = await todo_service.create_todo(Todo(title="T", url="/elsewhere"), COLLECTION_URL + "/")
        assert created.url == f"{COLLECTION_URL}/{created.id}"

    @pytest.mark.asyncio
    async def test_create_keeps_client_id_and_advances_counter(self, todo_service: TodoService) -> None:
        supplied = await todo_service.create_todo(Todo(id=164, title="Given"), COLLECTION_URL)
        generated = await todo_service.create_todo(Todo(title="Next"), COLLECTION_URL)

        assert supplied.id == 164
        assert generated.id == 165

    @pytest.mark.asyncio
    async def test_create_with_existing_id_overwrites(self, todo_service: TodoService) -> None:
        await todo_service.create_todo(Todo(id=3, title="First"), COLLECTION_URL)
        await todo_service.create_todo(Todo(id=3, title="Second"), COLLECTION_URL)

        todos = await todo_service.get_todos()
        assert len(todos) == 1
        assert todos[0].title == "Second"

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, todo_service: TodoService) -> None:
        todo = await todo_service.create_todo(Todo(title="X", order=2), COLLECTION_URL)

        updated = await todo_service.update_todo(todo.id, Todo(completed=True))

        assert updated is not None
        assert updated.title == "X"
        assert updated.completed is True
        assert updated.order == 2
        assert updated.url == todo.url
        assert await todo_service.get_todo_by_id(todo.id) == updated

    @pytest.mark.asyncio
    async def test_update_nonexistent_todo(self, todo_service: TodoService) -> None:
        assert await todo_service.update_todo(9999, Todo(title="Updated")) is None

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, todo_service: TodoService) -> None:
        todo = await todo_service.create_todo(Todo(title="To delete"), COLLECTION_URL)

        await todo_service.delete_todo(todo.id)
        await todo_service.delete_todo(todo.id)

        assert await todo_service.get_todo_by_id(todo.id) is None

    @pytest.mark.asyncio
    async def test_delete_all(self, todo_service: TodoService) -> None:
        await todo_service.create_todo(Todo(title="Todo 1"), COLLECTION_URL)
        await todo_service.create_todo(Todo(title="Todo 2"), COLLECTION_URL)

        await todo_service.delete_all_todos()

        assert await todo_service.get_todos() == []
