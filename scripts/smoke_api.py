"""End-to-end smoke check against a running todo backend.

Usage:
  TODO_API_URL=http://127.0.0.1:8080 python scripts/smoke_api.py
"""

import asyncio
import os

import httpx


async def main() -> None:
    base_url = os.getenv("TODO_API_URL", "http://127.0.0.1:8080")

    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        created = await client.post("/todos", json={"title": "Smoke test todo", "order": 7})
        assert created.status_code == 201, created.text
        todo = created.json()
        todo_id = todo["id"]
        assert todo["completed"] is False
        assert todo["url"].endswith(f"/todos/{todo_id}")

        fetched = await client.get(f"/todos/{todo_id}")
        assert fetched.status_code == 200, fetched.text
        assert fetched.json()["title"] == "Smoke test todo"

        patched = await client.patch(f"/todos/{todo_id}", json={"completed": True})
        assert patched.status_code == 200, patched.text
        assert patched.json()["completed"] is True
        assert patched.json()["order"] == 7

        listing = await client.get("/todos")
        assert any(item["id"] == todo_id for item in listing.json())

        deleted = await client.delete(f"/todos/{todo_id}")
        assert deleted.status_code == 204

        missing = await client.get(f"/todos/{todo_id}")
        assert missing.status_code == 404

    print(f"Smoke test passed against {base_url}")


if __name__ == "__main__":
    asyncio.run(main())
