import enum

from .user import User
from .todo import Todo
from .thread import Thread, ThreadStatus
from .message import Message, MessageRole
from .rate_limit import RateLimitBucket


class EntityKind(str, enum.Enum):
    TODO = "todos"
    THREAD = "threads"
    MESSAGE = "messages"


# Every user-owned table, keyed by its tag. Models all carry ``user_id``.
TRACKED_ENTITIES = {
    EntityKind.TODO: Todo,
    EntityKind.THREAD: Thread,
    EntityKind.MESSAGE: Message,
}

__all__ = [
    "EntityKind",
    "Message",
    "MessageRole",
    "RateLimitBucket",
    "Thread",
    "ThreadStatus",
    "Todo",
    "TRACKED_ENTITIES",
    "User",
]
