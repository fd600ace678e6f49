import pytest

from todo_api.validation import (
    MAX_MESSAGE_CONTENT,
    MAX_THREAD_TITLE,
    MAX_TODO_TEXT,
    is_valid_message_content,
    is_valid_thread_title,
    is_valid_todo_text,
    sanitize_text,
)


@pytest.mark.parametrize("raw, expected", [
    ("  Buy milk  ", "Buy milk"),
    ("\n\tBuy milk\n", "Buy milk"),
    ("Buy  milk", "Buy  milk"),
    ("<b>bold</b>", "<b>bold</b>"),
    ("   ", ""),
])
def test_sanitize_text_only_strips_outer_whitespace(raw, expected):
    assert sanitize_text(raw) == expected


@pytest.mark.parametrize("check, limit", [
    (is_valid_todo_text, MAX_TODO_TEXT),
    (is_valid_thread_title, MAX_THREAD_TITLE),
    (is_valid_message_content, MAX_MESSAGE_CONTENT),
])
def test_length_boundaries(check, limit):
    assert check("x")
    assert check("x" * limit)
    assert not check("x" * (limit + 1))
    assert not check("")
    assert not check("   \n\t")


def test_limits_match_documented_values():
    assert (MAX_TODO_TEXT, MAX_THREAD_TITLE, MAX_MESSAGE_CONTENT) == (500, 200, 10000)


def test_surrounding_whitespace_does_not_count_toward_length():
    assert is_valid_todo_text("  " + "x" * MAX_TODO_TEXT + "  ")
