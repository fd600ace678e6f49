import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..access import check_rate_limit, clean_text, load_owned
from ..crud import messages as messages_crud
from ..crud import threads as threads_crud
from ..database import get_db
from ..models import EntityKind, MessageRole, ThreadStatus, User
from ..rate_limiter import RateLimiter, get_rate_limiter
from ..schemas.thread import (
    Message as MessageSchema,
    MessageCreate,
    Thread as ThreadSchema,
    ThreadCreate,
    ThreadStatusUpdate,
    ThreadTitleUpdate,
    ThreadWithMessages,
)
from ..validation import (
    MAX_MESSAGE_CONTENT,
    MAX_THREAD_TITLE,
    is_valid_message_content,
    is_valid_thread_title,
)
from .auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_TITLE = f"Invalid thread title. Must be 1-{MAX_THREAD_TITLE} characters."
INVALID_CONTENT = f"Invalid message content. Must be 1-{MAX_MESSAGE_CONTENT} characters."


@router.get("/threads", response_model=List[ThreadSchema])
def list_threads(
    status: Optional[ThreadStatus] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The caller's threads, newest first, optionally filtered by status."""
    if status is None:
        return threads_crud.get_threads_by_user(db, current_user.id)
    return threads_crud.get_threads_by_user_and_status(db, current_user.id, status)


@router.get("/threads/{thread_id}", response_model=ThreadWithMessages)
def get_thread_with_messages(
    thread_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    thread = load_owned(db, EntityKind.THREAD, thread_id, current_user)
    messages = messages_crud.get_messages_by_thread(db, thread.id)
    return {"thread": thread, "messages": messages}


@router.post("/threads", response_model=ThreadSchema, status_code=status.HTTP_201_CREATED)
def create_thread(
    payload: ThreadCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    check_rate_limit(db, limiter, "create_thread", current_user)

    title = None
    if payload.title:
        title = clean_text(payload.title, is_valid_thread_title, INVALID_TITLE, field="title")

    thread = threads_crud.create_thread(db, current_user.id, title)
    logger.info("Thread created", extra={"user_id": current_user.id, "entity_id": thread.id})
    return thread


@router.patch("/threads/{thread_id}/title", response_model=ThreadSchema)
def update_thread_title(
    thread_id: str,
    payload: ThreadTitleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    check_rate_limit(db, limiter, "update_thread", current_user)
    thread = load_owned(db, EntityKind.THREAD, thread_id, current_user)
    title = clean_text(payload.title, is_valid_thread_title, INVALID_TITLE, field="title")

    return threads_crud.update_thread_title(db, thread, title)


@router.patch("/threads/{thread_id}/status", response_model=ThreadSchema)
def update_thread_status(
    thread_id: str,
    payload: ThreadStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Archive or unarchive a thread."""
    check_rate_limit(db, limiter, "update_thread", current_user)
    thread = load_owned(db, EntityKind.THREAD, thread_id, current_user)

    return threads_crud.update_thread_status(db, thread, payload.status)


@router.delete("/threads/{thread_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_thread(
    thread_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Delete a thread and all its messages.

    Messages go first so none stay reachable once the thread is gone. The two
    deletes commit separately; a failure in the second leaves an empty thread.
    """
    check_rate_limit(db, limiter, "delete_thread", current_user)
    thread = load_owned(db, EntityKind.THREAD, thread_id, current_user)

    removed = messages_crud.delete_messages_by_thread(db, thread.id)
    threads_crud.delete_thread(db, thread)
    logger.info(
        f"Thread deleted with {removed} messages",
        extra={"user_id": current_user.id, "entity_id": thread_id},
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/threads/{thread_id}/messages",
    response_model=MessageSchema,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    thread_id: str,
    payload: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Append a user message. Assistant replies are written by an external agent."""
    check_rate_limit(db, limiter, "send_message", current_user)
    thread = load_owned(db, EntityKind.THREAD, thread_id, current_user)
    content = clean_text(payload.content, is_valid_message_content, INVALID_CONTENT, field="content")

    return messages_crud.create_message(
        db,
        thread_id=thread.id,
        user_id=current_user.id,
        role=MessageRole.USER,
        content=content,
    )


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_message(
    message_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    check_rate_limit(db, limiter, "delete_message", current_user)
    message = load_owned(db, EntityKind.MESSAGE, message_id, current_user)

    messages_crud.delete_message(db, message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
