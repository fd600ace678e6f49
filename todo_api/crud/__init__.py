"""Data access. The only layer that queries tables directly."""

from . import dashboard, messages, threads, todos

__all__ = ["dashboard", "messages", "threads", "todos"]
