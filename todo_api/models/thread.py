from sqlalchemy import Index
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import List, Optional
from uuid import uuid4
import enum

from .base import timestamp_field


class ThreadStatus(str, enum.Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class Thread(SQLModel, table=True):
    """Conversation container; owns its messages for lifecycle purposes."""
    __tablename__ = "threads"
    __table_args__ = (
        Index("ix_threads_user_status", "user_id", "status"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(index=True, foreign_key="users.id")
    title: Optional[str] = Field(default=None, max_length=200)
    status: ThreadStatus = Field(default=ThreadStatus.ACTIVE, sa_column_kwargs={"nullable": False})
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()

    messages: List["Message"] = Relationship(back_populates="thread")
