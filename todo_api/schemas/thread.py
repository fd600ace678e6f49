from pydantic import BaseModel
from .types import UtcDatetime
from typing import List, Optional

from ..models import MessageRole, ThreadStatus


class ThreadCreate(BaseModel):
    title: Optional[str] = None


class ThreadTitleUpdate(BaseModel):
    title: str


class ThreadStatusUpdate(BaseModel):
    status: ThreadStatus


class Thread(BaseModel):
    id: str
    user_id: str
    title: Optional[str] = None
    status: ThreadStatus
    created_at: UtcDatetime
    updated_at: UtcDatetime

    class Config:
        from_attributes = True


class MessageCreate(BaseModel):
    content: str


class Message(BaseModel):
    id: str
    thread_id: str
    user_id: str
    role: MessageRole
    content: str
    created_at: UtcDatetime

    class Config:
        from_attributes = True


class ThreadWithMessages(BaseModel):
    """A thread plus its messages in creation order."""
    thread: Thread
    messages: List[Message]
