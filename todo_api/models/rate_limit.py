from sqlmodel import SQLModel, Field


class RateLimitBucket(SQLModel, table=True):
    """Token bucket state for one (operation, key) pair."""
    __tablename__ = "rate_limits"

    name: str = Field(primary_key=True)
    key: str = Field(primary_key=True)
    value: float
    ts: float  # ms since epoch of the last refill
