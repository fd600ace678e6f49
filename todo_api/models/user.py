from sqlmodel import SQLModel, Field
from datetime import datetime
from uuid import uuid4

from .base import timestamp_field


class User(SQLModel, table=True):
    """Account that owns todos, threads and messages."""
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    email: str = Field(unique=True, index=True)
    hashed_password: str
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
