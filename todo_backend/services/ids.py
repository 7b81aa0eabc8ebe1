"""Id generators owned by storage backends.

Backends shared between processes (Redis, PostgreSQL) keep their counter in
the store itself; the in-process counter here only serves the memory backend.
"""

from __future__ import annotations

import random
from typing import Optional, Protocol

MAX_ID = 2**31 - 1


class IdGenerator(Protocol):
    name: str

    async def next_id(self) -> int:
        """Return a fresh identifier."""

    async def observe(self, todo_id: int) -> None:
        """Record an identifier that entered the store from elsewhere."""


class CounterIdGenerator:
    """Monotonic counter scoped to one in-process store.

    ``next_id`` never awaits, so within one event loop two requests cannot
    receive the same value.
    """

    name = "counter"

    def __init__(self, start: int = 0) -> None:
        self._current = start

    @property
    def current(self) -> int:
        return self._current

    async def next_id(self) -> int:
        self._current += 1
        return self._current

    async def observe(self, todo_id: int) -> None:
        if todo_id > self._current:
            self._current = todo_id


class RandomIdGenerator:
    """Random positive identifiers."""

    name = "random"

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.SystemRandom()

    async def next_id(self) -> int:
        return self._rng.randint(1, MAX_ID)

    async def observe(self, todo_id: int) -> None:
        return None
