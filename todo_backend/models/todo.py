"""Todo data model using Pydantic."""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from todo_backend.errors import DecodeError


class Todo(BaseModel):
    """A single todo record.

    ``completed`` and ``order`` keep whatever the client sent (possibly
    nothing); readers go through :meth:`is_completed` and :meth:`get_order`
    or the wire form, which substitute the defaults.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    id: int = 0
    title: Optional[str] = None
    completed: Optional[bool] = None
    order: Optional[int] = None
    url: Optional[str] = None

    @classmethod
    def from_json(cls, raw: Union[str, bytes, bytearray]) -> "Todo":
        """Decode a todo from JSON text, raising DecodeError on bad input."""
        if not raw or not raw.strip():
            raise DecodeError("Request body is empty")
        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            raise DecodeError(_describe(exc)) from exc

    def is_completed(self) -> bool:
        return False if self.completed is None else self.completed

    def get_order(self) -> int:
        return 0 if self.order is None else self.order

    def merge(self, incoming: "Todo") -> "Todo":
        """Return a copy updated with the non-null fields of ``incoming``.

        Identity (``id``) and location (``url``) always stay those of self.
        """
        return Todo(
            id=self.id,
            title=incoming.title if incoming.title is not None else self.title,
            completed=incoming.completed if incoming.completed is not None else self.completed,
            order=incoming.order if incoming.order is not None else self.order,
            url=self.url,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: defaults filled in, absent title/url dropped."""
        data: Dict[str, Any] = {
            "id": self.id,
            "completed": self.is_completed(),
            "order": self.get_order(),
        }
        if self.title is not None:
            data["title"] = self.title
        if self.url is not None:
            data["url"] = self.url
        return data

    def to_record(self) -> str:
        """JSON text as persisted by key-value stores."""
        return self.model_dump_json(exclude_none=True)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Todo):
            return NotImplemented
        return (
            self.id == other.id
            and self.title == other.title
            and self.is_completed() == other.is_completed()
            and self.get_order() == other.get_order()
        )

    def __hash__(self) -> int:
        return hash((self.id, self.title, self.is_completed(), self.get_order()))


def _describe(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid todo payload"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "__root__")
    message = first.get("msg", "Invalid todo payload")
    return f"{location}: {message}" if location else message
