"""Response models for the todo API."""

from typing import Optional

from pydantic import BaseModel


class TodoView(BaseModel):
    id: int
    title: Optional[str] = None
    completed: bool = False
    order: int = 0
    url: Optional[str] = None
