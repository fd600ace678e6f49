"""Cross-table aggregates for the dashboard."""

from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import TRACKED_ENTITIES, Thread, ThreadStatus
from . import todos as todos_crud


def load_summary(db: Session, user_id: str) -> dict:
    per_table = {}
    for kind, model in TRACKED_ENTITIES.items():
        per_table[kind.value] = (
            db.query(func.count(model.id)).filter(model.user_id == user_id).scalar() or 0
        )

    todo_counts = todos_crud.count_todos_by_user(db, user_id)
    active_threads = (
        db.query(func.count(Thread.id))
        .filter(Thread.user_id == user_id, Thread.status == ThreadStatus.ACTIVE)
        .scalar()
        or 0
    )

    return {
        "total_records": sum(per_table.values()),
        "per_table": per_table,
        "todos": todo_counts,
        "threads": {
            "total": per_table["threads"],
            "active": active_threads,
        },
    }


def load_recent(db: Session, user_id: str, limit: int = 5) -> List[dict]:
    return [
        {
            "id": todo.id,
            "text": todo.text,
            "is_completed": todo.is_completed,
            "created_at": todo.created_at,
            "updated_at": todo.updated_at,
        }
        for todo in todos_crud.get_recent_todos(db, user_id, limit)
    ]
