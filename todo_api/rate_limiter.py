"""Token-bucket rate limiting keyed by (operation, user).

Bucket state lives in the ``rate_limits`` table and is written through the
caller's session, so a request that fails after the check never commits the
spent token. Writes are conditional on the state read, and rows are read
FOR UPDATE where the database supports it.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from sqlalchemy import insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import RATE_LIMITING_ENABLED
from .models import RateLimitBucket

logger = logging.getLogger(__name__)

SECOND = 1000
MINUTE = 60 * SECOND

# Retry hint when the bucket is too contended to settle
CONTENDED_RETRY_MS = 50

_UPSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


@dataclass(frozen=True)
class TokenBucket:
    rate: int
    period: int = MINUTE
    capacity: Optional[int] = None

    @property
    def max_tokens(self) -> int:
        return self.capacity if self.capacity is not None else self.rate


@dataclass(frozen=True)
class RateLimitStatus:
    ok: bool
    retry_after_ms: Optional[int] = None


RATE_LIMITS: Dict[str, TokenBucket] = {
    # Todo operations
    "create_todo": TokenBucket(rate=20, period=MINUTE, capacity=5),
    "update_todo": TokenBucket(rate=30, period=MINUTE, capacity=10),
    "delete_todo": TokenBucket(rate=20, period=MINUTE, capacity=5),
    # Thread operations
    "create_thread": TokenBucket(rate=5, period=MINUTE, capacity=2),
    "update_thread": TokenBucket(rate=10, period=MINUTE, capacity=3),
    "delete_thread": TokenBucket(rate=5, period=MINUTE, capacity=2),
    # Message operations
    "send_message": TokenBucket(rate=10, period=MINUTE, capacity=3),
    "delete_message": TokenBucket(rate=10, period=MINUTE, capacity=3),
}


class RateLimiter:
    """Checks and consumes tokens for named operations."""

    def __init__(
        self,
        limits: Dict[str, TokenBucket],
        clock: Callable[[], float] = lambda: time.time() * 1000,
        enabled: bool = True,
        max_attempts: int = 5,
    ):
        self.limits = dict(limits)
        self.clock = clock
        self.enabled = enabled
        self.max_attempts = max_attempts

    def limit(self, db: Session, name: str, key: str, count: int = 1) -> RateLimitStatus:
        """Consume ``count`` tokens from the (name, key) bucket.

        The write is a compare-and-swap on the state that was read, so two
        overlapping requests can never both spend the same token; the loser
        re-reads and decides again. Nothing is committed here.
        """
        if name not in self.limits:
            raise ValueError(f"Unknown rate limit: {name}")
        if not self.enabled:
            return RateLimitStatus(ok=True)

        config = self.limits[name]
        for _ in range(self.max_attempts):
            now = self.clock()
            row = _select_bucket(db, name, key)
            if row is None:
                _insert_missing(db, name, key, float(config.max_tokens), now)
                row = _select_bucket(db, name, key)
            stored_value, stored_ts = row

            elapsed = max(0.0, now - stored_ts)
            value = min(stored_value + elapsed * config.rate / config.period, config.max_tokens) - count
            if value < 0:
                retry_after_ms = math.ceil(-value * config.period / config.rate)
                logger.warning(
                    f"Rate limit hit for {name}",
                    extra={"operation": name, "user_id": key, "retry_after_ms": retry_after_ms},
                )
                return RateLimitStatus(ok=False, retry_after_ms=max(1, retry_after_ms))

            if _swap_bucket(db, name, key, (stored_value, stored_ts), (value, now)):
                return RateLimitStatus(ok=True)

        logger.warning(
            f"Rate limit bucket for {name} kept changing, rejecting",
            extra={"operation": name, "user_id": key},
        )
        return RateLimitStatus(ok=False, retry_after_ms=CONTENDED_RETRY_MS)


_buckets = RateLimitBucket.__table__


def _select_bucket(db: Session, name: str, key: str) -> Optional[Tuple[float, float]]:
    row = db.execute(
        select(_buckets.c.value, _buckets.c.ts)
        .where(_buckets.c.name == name, _buckets.c.key == key)
        .with_for_update()
    ).first()
    return (row.value, row.ts) if row else None


def _insert_missing(db: Session, name: str, key: str, value: float, ts: float) -> None:
    """Create a full bucket unless a concurrent request already has."""
    values = {"name": name, "key": key, "value": value, "ts": ts}
    upsert = _UPSERTS.get(db.get_bind().dialect.name)
    if upsert is not None:
        db.execute(upsert(_buckets).values(**values).on_conflict_do_nothing())
        return
    try:
        with db.begin_nested():
            db.execute(insert(_buckets).values(**values))
    except IntegrityError:
        pass


def _swap_bucket(
    db: Session,
    name: str,
    key: str,
    expected: Tuple[float, float],
    new: Tuple[float, float],
) -> bool:
    result = db.execute(
        update(_buckets)
        .where(
            _buckets.c.name == name,
            _buckets.c.key == key,
            _buckets.c.value == expected[0],
            _buckets.c.ts == expected[1],
        )
        .values(value=new[0], ts=new[1])
    )
    return result.rowcount == 1



rate_limiter = RateLimiter(RATE_LIMITS, enabled=RATE_LIMITING_ENABLED)


def get_rate_limiter() -> RateLimiter:
    """Dependency returning the process-wide limiter."""
    return rate_limiter
