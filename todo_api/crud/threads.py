from typing import List, Optional

from sqlalchemy.orm import Session

from ..models import Thread, ThreadStatus
from ..models.base import next_timestamp, utcnow


def create_thread(db: Session, user_id: str, title: Optional[str] = None) -> Thread:
    now = utcnow()
    thread = Thread(
        user_id=user_id,
        title=title,
        status=ThreadStatus.ACTIVE,
        created_at=now,
        updated_at=now,
    )
    db.add(thread)
    db.commit()
    db.refresh(thread)
    return thread


def get_thread_by_id(db: Session, thread_id: str) -> Optional[Thread]:
    return db.query(Thread).filter(Thread.id == thread_id).first()


def get_threads_by_user(db: Session, user_id: str) -> List[Thread]:
    return (
        db.query(Thread)
        .filter(Thread.user_id == user_id)
        .order_by(Thread.created_at.desc())
        .all()
    )


def get_threads_by_user_and_status(db: Session, user_id: str, status: ThreadStatus) -> List[Thread]:
    return (
        db.query(Thread)
        .filter(Thread.user_id == user_id, Thread.status == status)
        .order_by(Thread.created_at.desc())
        .all()
    )


def update_thread_title(db: Session, thread: Thread, title: str) -> Thread:
    thread.title = title
    thread.updated_at = next_timestamp(thread.updated_at)
    db.commit()
    db.refresh(thread)
    return thread


def update_thread_status(db: Session, thread: Thread, status: ThreadStatus) -> Thread:
    thread.status = status
    thread.updated_at = next_timestamp(thread.updated_at)
    db.commit()
    db.refresh(thread)
    return thread


def delete_thread(db: Session, thread: Thread) -> None:
    db.delete(thread)
    db.commit()
