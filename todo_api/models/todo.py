from sqlalchemy import Index
from sqlmodel import SQLModel, Field
from datetime import datetime
from uuid import uuid4

from .base import timestamp_field


class Todo(SQLModel, table=True):
    """A user-owned task with completion state."""
    __tablename__ = "todos"
    __table_args__ = (
        Index("ix_todos_user_completed", "user_id", "is_completed"),
        Index("ix_todos_user_created", "user_id", "created_at"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(index=True, foreign_key="users.id")
    text: str = Field(max_length=500)
    is_completed: bool = Field(default=False)
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
