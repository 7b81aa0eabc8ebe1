"""API routes for todo management."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from todo_backend.api.dependencies import get_todo_service
from todo_backend.api.models import TodoView
from todo_backend.models.todo import Todo
from todo_backend.services.todo_service import TodoService

router = APIRouter()

TODO_NOT_FOUND = "Todo not found"


@router.get(
    "/todos",
    response_model=List[TodoView],
    response_model_exclude_none=True,
)
async def get_todos(
    service: TodoService = Depends(get_todo_service),
) -> List[Dict[str, Any]]:
    """Get all todo items."""
    todos = await service.get_todos()
    return [todo.to_dict() for todo in todos]


@router.get(
    "/todos/{todo_id}",
    response_model=TodoView,
    response_model_exclude_none=True,
)
async def get_todo(
    todo_id: int,
    service: TodoService = Depends(get_todo_service),
) -> Dict[str, Any]:
    """Get a specific todo item by ID."""
    todo = await service.get_todo_by_id(todo_id)
    if todo is None:
        raise HTTPException(status_code=404, detail=TODO_NOT_FOUND)
    return todo.to_dict()


@router.post(
    "/todos",
    response_model=TodoView,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_todo(
    request: Request,
    service: TodoService = Depends(get_todo_service),
) -> Dict[str, Any]:
    """Create a new todo item from the raw JSON body."""
    todo = Todo.from_json(await request.body())
    collection_url = str(request.url.replace(query=""))
    created = await service.create_todo(todo, collection_url)
    return created.to_dict()


@router.patch(
    "/todos/{todo_id}",
    response_model=TodoView,
    response_model_exclude_none=True,
)
async def update_todo(
    todo_id: int,
    request: Request,
    service: TodoService = Depends(get_todo_service),
) -> Dict[str, Any]:
    """Merge the provided fields into an existing todo."""
    incoming = Todo.from_json(await request.body())
    todo = await service.update_todo(todo_id, incoming)
    if todo is None:
        raise HTTPException(status_code=404, detail=TODO_NOT_FOUND)
    return todo.to_dict()


@router.delete("/todos/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_todo(
    todo_id: int,
    service: TodoService = Depends(get_todo_service),
) -> Response:
    """Delete a todo item. Deleting an unknown id still succeeds."""
    await service.delete_todo(todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/todos", status_code=status.HTTP_204_NO_CONTENT)
async def delete_all_todos(
    service: TodoService = Depends(get_todo_service),
) -> Response:
    """Delete every todo item."""
    await service.delete_all_todos()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
