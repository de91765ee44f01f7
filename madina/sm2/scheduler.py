"""
Scheduler - SM-2 Algorithm Logic

Pure SM-2 scheduling and state updates (no storage calls).

Main workflow:
1. Load review state (caller's responsibility)
2. Map the learner's outcome to a 0-5 quality
3. Advance the state
4. Persist the returned state (caller's responsibility)

Every time-dependent function takes an optional `now` so results are
deterministic under test.
"""

from __future__ import annotations
import logging
import math
from datetime import datetime
from typing import Callable, Iterable, Optional, TypeVar

from madina.sm2.constants import (
    FIRST_INTERVAL,
    FLASHCARD_RATINGS,
    LAPSE_INTERVAL,
    MIN_EASE_FACTOR,
    PASSING_QUALITY,
    SECOND_INTERVAL,
    Quality,
)
from madina.sm2.review_state import (
    ReviewState,
    add_days,
    days_between,
    ensure_aware,
    utc_now,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _coerce_quality(quality: int) -> int:
    """Clamp a quality value into 0..5 (malformed input is defaulted, not raised)."""
    try:
        value = int(quality)
    except (TypeError, ValueError):
        logger.warning("Invalid SM-2 quality %r, treating as blackout", quality)
        return int(Quality.BLACKOUT)
    if value < Quality.BLACKOUT or value > Quality.PERFECT:
        logger.debug("Clamping out-of-range SM-2 quality %r", quality)
    return max(int(Quality.BLACKOUT), min(int(Quality.PERFECT), value))


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """
    Update the ease factor for a review.

    Formula:
        EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))

    q=4 leaves EF unchanged, q=5 raises it, q<=3 lowers it.
    The result never drops below 1.3.
    """
    miss = 5 - quality
    new_ease = ease_factor + (0.1 - miss * (0.08 + miss * 0.02))
    return max(MIN_EASE_FACTOR, new_ease)


def advance(
    state: ReviewState,
    quality: int,
    now: Optional[datetime] = None
) -> ReviewState:
    """
    Calculate the new SM-2 state after a review.

    Args:
        state: Current review state (not modified)
        quality: Quality of recall, 0 (blackout) to 5 (perfect)
        now: Review timestamp (defaults to now)

    Returns:
        New ReviewState
    """
    if now is None:
        now = utc_now()

    q = _coerce_quality(quality)
    ease = next_ease_factor(state.ease_factor, q)

    if q < PASSING_QUALITY:
        # Lapse: start the repetition sequence again tomorrow
        repetitions = 0
        interval = LAPSE_INTERVAL
    else:
        repetitions = state.repetitions + 1
        if repetitions == 1:
            interval = FIRST_INTERVAL
        elif repetitions == 2:
            interval = SECOND_INTERVAL
        else:
            interval = int(round(state.interval * ease))

    return ReviewState(
        ease_factor=ease,
        interval=interval,
        repetitions=repetitions,
        next_review_date=add_days(now, interval),
    )


# ---- Due-ness ----

def is_due(state: ReviewState, now: Optional[datetime] = None) -> bool:
    """Check if an item is due (next_review_date <= now)."""
    if now is None:
        now = utc_now()
    return ensure_aware(state.next_review_date) <= ensure_aware(now)


def days_overdue(state: ReviewState, now: Optional[datetime] = None) -> int:
    """
    Whole days an item is overdue.

    Returns:
        floor(days past the due date), or 0 if not overdue
    """
    if now is None:
        now = utc_now()
    elapsed = days_between(state.next_review_date, now)
    if elapsed <= 0:
        return 0
    return math.floor(elapsed)


def days_until_review(state: ReviewState, now: Optional[datetime] = None) -> int:
    """
    Days until the next review (negative if overdue).

    Returns:
        ceil of the signed day difference
    """
    if now is None:
        now = utc_now()
    return math.ceil(days_between(now, state.next_review_date))


def estimate_retention(state: ReviewState, now: Optional[datetime] = None) -> float:
    """
    Estimate retention probability with an exponential forgetting curve.

    Formula: R = exp(-t / (I * EF))

    Where:
    - t = fractional days past the due date
    - I = interval in days (at least 1, so fresh items still decay)
    - EF = ease factor

    Items that are not yet due are assumed fully retained.

    Returns:
        Retention between 0 and 1
    """
    if now is None:
        now = utc_now()

    overdue = days_between(state.next_review_date, now)
    if overdue <= 0:
        return 1.0

    stability = max(state.interval, 1) * state.ease_factor
    retention = math.exp(-overdue / stability)
    return max(0.0, min(1.0, retention))


def sort_by_review_priority(
    items: Iterable[T],
    now: Optional[datetime] = None,
    key: Optional[Callable[[T], ReviewState]] = None
) -> list[T]:
    """
    Sort items by review urgency (most urgent first).

    Priority:
    1. Overdue items, most overdue first
    2. Remaining items, lowest estimated retention first

    The sort is stable and returns a new list; the input is not mutated.

    Args:
        items: Items carrying review state
        now: Reference time (defaults to now)
        key: Callable returning the ReviewState of an item
             (defaults to the item itself)

    Returns:
        New sorted list
    """
    if now is None:
        now = utc_now()
    if key is None:
        key = lambda item: item  # noqa: E731

    def priority(item: T) -> tuple[int, float]:
        state = key(item)
        overdue = days_overdue(state, now)
        if overdue > 0:
            return (0, -float(overdue))
        return (1, estimate_retention(state, now))

    return sorted(items, key=priority)


# ---- Simplified outcome mappers ----

def simple_to_quality(is_correct: bool, was_hard: bool = False) -> Quality:
    """
    Convert a correct/incorrect result to SM-2 quality.

    Incorrect -> 1, correct but hard -> 3, correct -> 4.
    """
    if not is_correct:
        return Quality.INCORRECT
    return Quality.HARD if was_hard else Quality.GOOD


def flashcard_to_quality(rating: str) -> Quality:
    """
    Convert a flashcard self-rating to SM-2 quality.

    'again' -> 1, 'hard' -> 3, 'good' -> 4, 'easy' -> 5.

    Raises:
        ValueError: For an unknown rating string
    """
    try:
        return FLASHCARD_RATINGS[rating.strip().lower()]
    except (KeyError, AttributeError):
        raise ValueError(
            f"Unknown flashcard rating {rating!r}; "
            f"expected one of {sorted(FLASHCARD_RATINGS)}"
        ) from None


# ---- Aggregate statistics ----

def review_stats(
    states: Iterable[ReviewState],
    now: Optional[datetime] = None
) -> dict[str, int]:
    """
    Summarize due work across many items.

    Returns:
        Dict with due_today (due by end of the current UTC day, overdue
        included), overdue_count (due before today began) and
        upcoming_week (due after today, within 7 days)
    """
    if now is None:
        now = utc_now()
    now = ensure_aware(now)

    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow_start = add_days(today_start, 1)
    week_from_now = add_days(now, 7)

    due_today = 0
    overdue_count = 0
    upcoming_week = 0

    for state in states:
        next_review = ensure_aware(state.next_review_date)
        if next_review < tomorrow_start:
            due_today += 1
            if next_review < today_start:
                overdue_count += 1
        elif next_review <= week_from_now:
            upcoming_week += 1

    return {
        "due_today": due_today,
        "overdue_count": overdue_count,
        "upcoming_week": upcoming_week,
    }
