from typing import List, Optional

from sqlalchemy.orm import Session

from ..models import Message, MessageRole
from ..models.base import utcnow


def create_message(
    db: Session,
    thread_id: str,
    user_id: str,
    role: MessageRole,
    content: str,
) -> Message:
    message = Message(
        thread_id=thread_id,
        user_id=user_id,
        role=role,
        content=content,
        created_at=utcnow(),
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def get_message_by_id(db: Session, message_id: str) -> Optional[Message]:
    return db.query(Message).filter(Message.id == message_id).first()


def get_messages_by_thread(db: Session, thread_id: str) -> List[Message]:
    """Messages in a thread, oldest first."""
    return (
        db.query(Message)
        .filter(Message.thread_id == thread_id)
        .order_by(Message.created_at.asc())
        .all()
    )


def get_messages_by_user(db: Session, user_id: str) -> List[Message]:
    return (
        db.query(Message)
        .filter(Message.user_id == user_id)
        .order_by(Message.created_at.desc())
        .all()
    )


def delete_message(db: Session, message: Message) -> None:
    db.delete(message)
    db.commit()


def delete_messages_by_thread(db: Session, thread_id: str) -> int:
    """Delete every message in a thread in one commit; returns how many went."""
    messages = db.query(Message).filter(Message.thread_id == thread_id).all()
    for message in messages:
        db.delete(message)
    db.commit()
    return len(messages)
