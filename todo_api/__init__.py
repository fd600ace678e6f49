"""Multi-tenant todo API with chat threads."""

__version__ = "1.0.0"
