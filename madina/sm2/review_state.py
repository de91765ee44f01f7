"""
Review State - SM-2 per-item scheduling state

Defines the review state carried for every learnable item and the time
helpers shared by the scheduler.

Key concepts:
- Ease factor (EF): multiplier controlling interval growth (>= 1.3)
- Interval (I): days from the last review until the next one
- Repetitions (n): consecutive successful reviews since the last lapse
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from madina.sm2.constants import DEFAULT_EASE_FACTOR, SECONDS_PER_DAY


@dataclass(frozen=True)
class ReviewState:
    """
    SM-2 state for a single item.

    Invariant: next_review_date == last review time + interval days.
    """
    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: object) -> Optional[datetime]:
    """
    Parse an ISO-8601 string, epoch milliseconds, or datetime.

    Args:
        value: Raw timestamp from a persisted record

    Returns:
        Aware datetime, or None if the value is missing or unparsable
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, (int, float)):
        # JavaScript-style epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return ensure_aware(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def days_between(start: datetime, end: datetime) -> float:
    """Signed fractional days from start to end."""
    delta = ensure_aware(end) - ensure_aware(start)
    return delta.total_seconds() / SECONDS_PER_DAY


def add_days(base: datetime, days: int) -> datetime:
    """Shift a timestamp by whole days."""
    return ensure_aware(base) + timedelta(days=days)


def new_review_state(now: Optional[datetime] = None) -> ReviewState:
    """
    Initialize state for a new item (never reviewed).

    Args:
        now: Creation time (defaults to now)

    Returns:
        ReviewState that is due immediately
    """
    if now is None:
        now = utc_now()

    return ReviewState(
        ease_factor=DEFAULT_EASE_FACTOR,
        interval=0,
        repetitions=0,
        next_review_date=ensure_aware(now),
    )
