"""Pure input checks. No database access."""

MAX_TODO_TEXT = 500
MAX_THREAD_TITLE = 200
MAX_MESSAGE_CONTENT = 10000


def sanitize_text(text: str) -> str:
    """Strip leading/trailing whitespace. No escaping, no truncation."""
    return text.strip()


def _within(text: str, max_length: int) -> bool:
    return 1 <= len(text.strip()) <= max_length


def is_valid_todo_text(text: str) -> bool:
    return _within(text, MAX_TODO_TEXT)


def is_valid_thread_title(title: str) -> bool:
    return _within(title, MAX_THREAD_TITLE)


def is_valid_message_content(content: str) -> bool:
    return _within(content, MAX_MESSAGE_CONTENT)
