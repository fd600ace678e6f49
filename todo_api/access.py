"""Guards shared by every mutating endpoint.

Handlers call these in a fixed order: rate limit, ownership, validation.
Authentication happens earlier through the ``get_current_user`` dependency.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from .crud import messages as messages_crud
from .crud import threads as threads_crud
from .crud import todos as todos_crud
from .errors import Forbidden, InvalidArgument, NotFound, RateLimited
from .models import EntityKind, User
from .rate_limiter import RateLimiter
from .validation import sanitize_text

logger = logging.getLogger(__name__)

# Display label and by-id accessor for each owned entity
_LOADERS = {
    EntityKind.TODO: ("Todo", todos_crud.get_todo_by_id),
    EntityKind.THREAD: ("Thread", threads_crud.get_thread_by_id),
    EntityKind.MESSAGE: ("Message", messages_crud.get_message_by_id),
}


def check_rate_limit(db: Session, limiter: RateLimiter, operation: str, user: User) -> None:
    """Consume one token for ``operation`` keyed by the caller's id."""
    status = limiter.limit(db, operation, key=str(user.id))
    if not status.ok:
        raise RateLimited(status.retry_after_ms, operation=operation)


def load_owned(db: Session, kind: EntityKind, entity_id: str, user: User):
    """Load an entity by id and require that ``user`` owns it."""
    label, load = _LOADERS[kind]
    entity = load(db, entity_id)
    if entity is None:
        raise NotFound(f"{label} not found")
    if entity.user_id != str(user.id):
        logger.warning(
            f"Ownership check failed for {kind.value}",
            extra={"user_id": str(user.id), "entity_id": entity_id},
        )
        raise Forbidden(f"Not authorized to access this {label.lower()}")
    return entity


def clean_text(
    value: str,
    is_valid: Callable[[str], bool],
    message: str,
    field: Optional[str] = None,
) -> str:
    """Sanitize ``value`` and reject it unless ``is_valid`` accepts the result."""
    sanitized = sanitize_text(value)
    if not is_valid(sanitized):
        raise InvalidArgument(message, field=field)
    return sanitized
