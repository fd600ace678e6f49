import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..access import check_rate_limit, clean_text, load_owned
from ..crud import todos as todos_crud
from ..database import get_db
from ..models import EntityKind, User
from ..rate_limiter import RateLimiter, get_rate_limiter
from ..schemas.todo import Todo as TodoSchema, TodoCreate, TodoStats, TodoTextUpdate
from ..validation import MAX_TODO_TEXT, is_valid_todo_text
from .auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_TEXT = f"Invalid todo text. Must be 1-{MAX_TODO_TEXT} characters."


@router.get("/todos", response_model=List[TodoSchema])
def list_todos(
    completed: Optional[bool] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """All of the caller's todos, newest first, optionally filtered by completion."""
    if completed is None:
        return todos_crud.get_todos_by_user(db, current_user.id)
    return todos_crud.get_todos_by_user_and_completed(db, current_user.id, completed)


@router.get("/todos/stats", response_model=TodoStats)
def todo_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return todos_crud.count_todos_by_user(db, current_user.id)


@router.post("/todos", response_model=TodoSchema, status_code=status.HTTP_201_CREATED)
def create_todo(
    payload: TodoCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    check_rate_limit(db, limiter, "create_todo", current_user)
    text = clean_text(payload.text, is_valid_todo_text, INVALID_TEXT, field="text")

    todo = todos_crud.create_todo(db, current_user.id, text)
    logger.info("Todo created", extra={"user_id": current_user.id, "entity_id": todo.id})
    return todo


@router.patch("/todos/{todo_id}/toggle", response_model=TodoSchema)
def toggle_todo(
    todo_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Flip a todo's completion state."""
    check_rate_limit(db, limiter, "update_todo", current_user)
    todo = load_owned(db, EntityKind.TODO, todo_id, current_user)

    return todos_crud.toggle_todo_completion(db, todo, not todo.is_completed)


@router.patch("/todos/{todo_id}", response_model=TodoSchema)
def update_todo_text(
    todo_id: str,
    payload: TodoTextUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    check_rate_limit(db, limiter, "update_todo", current_user)
    todo = load_owned(db, EntityKind.TODO, todo_id, current_user)
    text = clean_text(payload.text, is_valid_todo_text, INVALID_TEXT, field="text")

    return todos_crud.update_todo_text(db, todo, text)


@router.delete("/todos/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_todo(
    todo_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    check_rate_limit(db, limiter, "delete_todo", current_user)
    todo = load_owned(db, EntityKind.TODO, todo_id, current_user)

    todos_crud.delete_todo(db, todo)
    logger.info("Todo deleted", extra={"user_id": current_user.id, "entity_id": todo_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
