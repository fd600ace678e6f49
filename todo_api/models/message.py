from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import Optional
from uuid import uuid4
import enum

from .base import timestamp_field


class MessageRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Message(SQLModel, table=True):
    """Append-only entry within a thread."""
    __tablename__ = "messages"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    thread_id: str = Field(index=True, foreign_key="threads.id")
    user_id: str = Field(index=True, foreign_key="users.id")  # Redundant with the thread, but queries and ownership checks use it
    role: MessageRole = Field(sa_column_kwargs={"nullable": False})
    content: str = Field(sa_column_kwargs={"nullable": False})
    created_at: datetime = timestamp_field()

    thread: Optional["Thread"] = Relationship(back_populates="messages")
