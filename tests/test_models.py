from datetime import datetime, timedelta, timezone

from sqlalchemy import DateTime
from sqlmodel import SQLModel

from todo_api.crud import todos as todos_crud
from todo_api.models import Message, MessageRole, Thread, Todo, User
from todo_api.models.base import as_utc, next_timestamp, utcnow


def test_every_timestamp_column_is_timezone_aware():
    columns = [
        column
        for table in SQLModel.metadata.sorted_tables
        for column in table.columns
        if isinstance(column.type, DateTime)
    ]

    assert columns
    assert all(column.type.timezone for column in columns), [str(c) for c in columns]


def test_model_defaults_carry_utc():
    records = [
        User(email="a@example.com", hashed_password="x"),
        Todo(user_id="u", text="t"),
        Thread(user_id="u"),
        Message(thread_id="t", user_id="u", role=MessageRole.USER, content="c"),
    ]

    for record in records:
        assert record.created_at.tzinfo is not None
        assert record.created_at.utcoffset() == timedelta(0)


def test_defaults_insert_and_read_back(db):
    user = User(email="a@example.com", hashed_password="x")
    db.add(user)
    db.commit()
    todo = todos_crud.create_todo(db, user.id, "Buy milk")

    assert as_utc(todo.created_at) <= utcnow()
    assert todo.updated_at == todo.created_at


def test_next_timestamp_accepts_naive_values_from_sqlite():
    ahead = (utcnow() + timedelta(seconds=5)).replace(tzinfo=None)

    bumped = next_timestamp(ahead)

    assert bumped == ahead.replace(tzinfo=timezone.utc) + timedelta(microseconds=1)


def test_next_timestamp_moves_to_now_when_clock_advanced():
    past = datetime(2024, 1, 1, tzinfo=timezone.utc)

    assert next_timestamp(past) > past
    assert next_timestamp(past).tzinfo is not None
