from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Todo
from ..models.base import next_timestamp, utcnow


def create_todo(db: Session, user_id: str, text: str) -> Todo:
    now = utcnow()
    todo = Todo(user_id=user_id, text=text, is_completed=False, created_at=now, updated_at=now)
    db.add(todo)
    db.commit()
    db.refresh(todo)
    return todo


def get_todo_by_id(db: Session, todo_id: str) -> Optional[Todo]:
    return db.query(Todo).filter(Todo.id == todo_id).first()


def get_todos_by_user(db: Session, user_id: str) -> List[Todo]:
    return (
        db.query(Todo)
        .filter(Todo.user_id == user_id)
        .order_by(Todo.created_at.desc())
        .all()
    )


def get_todos_by_user_and_completed(db: Session, user_id: str, is_completed: bool) -> List[Todo]:
    return (
        db.query(Todo)
        .filter(Todo.user_id == user_id, Todo.is_completed == is_completed)
        .order_by(Todo.created_at.desc())
        .all()
    )


def get_recent_todos(db: Session, user_id: str, limit: int = 10) -> List[Todo]:
    return (
        db.query(Todo)
        .filter(Todo.user_id == user_id)
        .order_by(Todo.created_at.desc())
        .limit(limit)
        .all()
    )


def toggle_todo_completion(db: Session, todo: Todo, is_completed: bool) -> Todo:
    todo.is_completed = is_completed
    todo.updated_at = next_timestamp(todo.updated_at)
    db.commit()
    db.refresh(todo)
    return todo


def update_todo_text(db: Session, todo: Todo, text: str) -> Todo:
    todo.text = text
    todo.updated_at = next_timestamp(todo.updated_at)
    db.commit()
    db.refresh(todo)
    return todo


def delete_todo(db: Session, todo: Todo) -> None:
    db.delete(todo)
    db.commit()


def count_todos_by_user(db: Session, user_id: str) -> dict:
    total = db.query(func.count(Todo.id)).filter(Todo.user_id == user_id).scalar() or 0
    completed = (
        db.query(func.count(Todo.id))
        .filter(Todo.user_id == user_id, Todo.is_completed == True)  # noqa: E712
        .scalar()
        or 0
    )
    return {"total": total, "completed": completed, "active": total - completed}
