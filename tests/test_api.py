"""API tests for todo endpoints."""

from fastapi.testclient import TestClient

from fakes import FakePool, FakeRedis
from todo_backend.config import Settings
from todo_backend.main import create_app
from todo_backend.repositories import PostgresTodoRepository, RedisTodoRepository
from todo_backend.repositories import postgres_repository as pg
from todo_backend.repositories.base import SAMPLE_TITLE


class TestTodoAPI:
    """Test suite for Todo API endpoints."""

    def test_root_endpoint(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Todo API"
        assert data["storage"] == "memory"

    def test_get_todos_empty(self, client: TestClient) -> None:
        response = client.get("/todos")
        assert response.status_code == 200
        assert response.json() == []

    def test_create_todo_defaults(self, client: TestClient) -> None:
        response = client.post("/todos", json={"title": "Buy milk", "order": 1})
        assert response.status_code == 201

        todo = response.json()
        assert todo["title"] == "Buy milk"
        assert todo["order"] == 1
        assert todo["completed"] is False
        assert isinstance(todo["id"], int) and todo["id"] > 0
        assert todo["url"] == f"http://testserver/todos/{todo['id']}"

    def test_create_todo_without_title_omits_it(self, client: TestClient) -> None:
        response = client.post("/todos", json={})
        assert response.status_code == 201
        todo = response.json()
        assert "title" not in todo
        assert todo["order"] == 0

    def test_create_todo_keeps_supplied_id(self, client: TestClient) -> None:
        response = client.post("/todos", json={"id": 164, "title": "Test case...", "url": "/164"})
        assert response.status_code == 201
        assert response.json()["id"] == 164
        assert response.json()["url"] == "http://testserver/todos/164"

        next_response = client.post("/todos", json={"title": "After"})
        assert next_response.json()["id"] == 165

    def test_create_todo_url_ignores_query(self, client: TestClient) -> None:
        response = client.post("/todos?source=test", json={"title": "Q"})
        assert response.json()["url"] == f"http://testserver/todos/{response.json()['id']}"

    def test_create_todo_invalid_body(self, client: TestClient) -> None:
        response = client.post(
            "/todos",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

        assert client.post("/todos").status_code == 400
        assert client.post("/todos", json=["a"]).status_code == 400
        assert client.post("/todos", json={"completed": "yes"}).status_code == 400

    def test_get_todo_by_id(self, client: TestClient) -> None:
        created = client.post("/todos", json={"title": "Test"}).json()

        response = client.get(f"/todos/{created['id']}")
        assert response.status_code == 200
        assert response.json() == created

    def test_get_nonexistent_todo(self, client: TestClient) -> None:
        response = client.get("/todos/999999")
        assert response.status_code == 404

    def test_get_todo_with_invalid_id(self, client: TestClient) -> None:
        response = client.get("/todos/not-a-number")
        assert response.status_code == 400

    def test_patch_merges(self, client: TestClient) -> None:
        created = client.post("/todos", json={"title": "X", "order": 4}).json()

        response = client.patch(f"/todos/{created['id']}", json={"completed": True})
        assert response.status_code == 200

        updated = response.json()
        assert updated["title"] == "X"
        assert updated["completed"] is True
        assert updated["order"] == 4
        assert updated["id"] == created["id"]
        assert updated["url"] == created["url"]

    def test_patch_cannot_change_identity(self, client: TestClient) -> None:
        created = client.post("/todos", json={"title": "X"}).json()

        response = client.patch(
            f"/todos/{created['id']}",
            json={"id": 9000, "url": "http://elsewhere/1", "title": "Y"},
        )

        assert response.json()["id"] == created["id"]
        assert response.json()["url"] == created["url"]
        assert response.json()["title"] == "Y"

    def test_patch_nonexistent_todo(self, client: TestClient) -> None:
        response = client.patch("/todos/424242", json={"title": "Nope"})
        assert response.status_code == 404

    def test_patch_invalid_body(self, client: TestClient) -> None:
        created = client.post("/todos", json={"title": "X"}).json()
        response = client.patch(
            f"/todos/{created['id']}",
            content="nope",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_delete_todo(self, client: TestClient) -> None:
        created = client.post("/todos", json={"title": "To delete"}).json()

        response = client.delete(f"/todos/{created['id']}")
        assert response.status_code == 204

        response = client.get(f"/todos/{created['id']}")
        assert response.status_code == 404

    def test_delete_nonexistent_todo(self, client: TestClient) -> None:
        response = client.delete("/todos/123456")
        assert response.status_code == 204

    def test_delete_all_then_list(self, client: TestClient) -> None:
        client.post("/todos", json={"title": "One"})
        client.post("/todos", json={"title": "Two"})

        response = client.delete("/todos")
        assert response.status_code == 204
        assert client.get("/todos").json() == []

    def test_request_id_is_echoed(self, client: TestClient) -> None:
        response = client.get("/todos", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"
        assert client.get("/todos").headers["X-Request-ID"]

    def test_cors_preflight(self, client: TestClient) -> None:
        response = client.options(
            "/todos",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "PATCH",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "PATCH" in response.headers["access-control-allow-methods"]


class TestStartup:
    def test_sample_todo_is_seeded(self) -> None:
        app = create_app(Settings(storage_backend="memory", seed_sample=True))
        with TestClient(app) as client:
            todos = client.get("/todos").json()
        assert [todo["title"] for todo in todos] == [SAMPLE_TITLE]


class TestBackendUnavailable:
    """Backend failures surface as 503."""

    def _client(self, redis_client: FakeRedis) -> TestClient:
        repository = RedisTodoRepository(redis_client, seed_sample=False)
        return TestClient(create_app(Settings(storage_backend="redis"), repository=repository))

    def test_every_route_returns_503(self) -> None:
        redis_client = FakeRedis()
        redis_client.fail = True

        with self._client(redis_client) as client:
            assert client.get("/todos").status_code == 503
            assert client.get("/todos/1").status_code == 503
            assert client.post("/todos", json={"title": "x"}).status_code == 503
            assert client.patch("/todos/1", json={"title": "x"}).status_code == 503
            assert client.delete("/todos/1").status_code == 503
            response = client.delete("/todos")
            assert response.status_code == 503
            assert response.json() == {"detail": "Service unavailable"}

    def test_recovers_when_backend_returns(self) -> None:
        redis_client = FakeRedis()
        redis_client.fail = True

        with self._client(redis_client) as client:
            assert client.get("/todos").status_code == 503
            redis_client.fail = False
            created = client.post("/todos", json={"title": "Back"})
            assert created.status_code == 201
            assert client.get(f"/todos/{created.json()['id']}").status_code == 200

    def test_postgres_down_at_startup_recovers_on_next_request(self, monkeypatch) -> None:
        pool = FakePool()
        attempts = []

        async def flaky_create_pool(**kwargs):
            attempts.append(kwargs)
            if len(attempts) == 1:
                raise ConnectionRefusedError("Connection refused")
            return pool

        monkeypatch.setattr(pg.asyncpg, "create_pool", flaky_create_pool)
        database_url = "postgresql://u:p@db/todos"
        repository = PostgresTodoRepository(database_url, seed_sample=False)
        app = create_app(Settings(storage_backend="postgres", database_url=database_url), repository=repository)

        with TestClient(app) as client:
            assert len(attempts) == 1
            created = client.post("/todos", json={"title": "After outage"})
            assert created.status_code == 201
            assert client.get(f"/todos/{created.json()['id']}").status_code == 200

        assert len(attempts) == 2
        assert pool.table_created is True
        assert pool.closed is True
