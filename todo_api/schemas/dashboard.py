from pydantic import BaseModel
from .types import UtcDatetime
from typing import Dict


class TodoCounts(BaseModel):
    total: int = 0
    completed: int = 0
    active: int = 0


class ThreadCounts(BaseModel):
    total: int = 0
    active: int = 0


class DashboardSummary(BaseModel):
    total_records: int = 0
    per_table: Dict[str, int] = {}
    todos: TodoCounts = TodoCounts()
    threads: ThreadCounts = ThreadCounts()


class RecentTodo(BaseModel):
    id: str
    text: str
    is_completed: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime
