"""
SM-2 - SuperMemo 2 Spaced Repetition Scheduler

Main API for per-item review scheduling.

Quick start:
    from madina import sm2

    state = sm2.new_review_state()
    state = sm2.advance(state, sm2.simple_to_quality(is_correct=True))
    if sm2.is_due(state):
        ...
"""

# Core scheduler API (algorithm logic)
from madina.sm2.scheduler import (
    advance,
    days_overdue,
    days_until_review,
    estimate_retention,
    flashcard_to_quality,
    is_due,
    next_ease_factor,
    review_stats,
    simple_to_quality,
    sort_by_review_priority,
)

# Review state
from madina.sm2.review_state import (
    ReviewState,
    new_review_state,
    parse_timestamp,
    utc_now,
)

# Constants and parameters
from madina.sm2.constants import (
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    PASSING_QUALITY,
    Quality,
)


__all__ = [
    # Core algorithm
    "advance",
    "next_ease_factor",
    "is_due",
    "days_overdue",
    "days_until_review",
    "estimate_retention",
    "sort_by_review_priority",
    "review_stats",

    # Mappers
    "simple_to_quality",
    "flashcard_to_quality",

    # Review state
    "ReviewState",
    "new_review_state",
    "parse_timestamp",
    "utc_now",

    # Parameters
    "Quality",
    "DEFAULT_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "PASSING_QUALITY",
]
