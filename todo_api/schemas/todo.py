from pydantic import BaseModel
from .types import UtcDatetime


class TodoCreate(BaseModel):
    """Schema for creating new todos."""
    text: str


class TodoTextUpdate(BaseModel):
    """Schema for replacing a todo's text."""
    text: str


class Todo(BaseModel):
    """Complete todo schema with all fields."""
    id: str
    user_id: str
    text: str
    is_completed: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime

    class Config:
        from_attributes = True


class TodoStats(BaseModel):
    total: int
    completed: int
    active: int
