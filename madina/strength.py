"""
Legacy scalar strength model.

The single 0-100 strength predates SM-2 and directional tracking. It is
still maintained alongside them so older summaries (mastery labels,
lesson strength, challenge mode) keep working.
"""

from __future__ import annotations

import math
from typing import Optional


# Regular exercise scoring
STRENGTH_INCREASE = 10
STRENGTH_DECREASE = 20
STRENGTH_MAX = 100
STRENGTH_MIN = 0
DECAY_GRACE_DAYS = 3
DECAY_RATE_PER_DAY = 5

# Challenge exercise scoring
CHALLENGE_STRENGTH_INCREASE = 15
CHALLENGE_STRENGTH_DECREASE = 30
CHALLENGE_DECAY_GRACE_DAYS = 5  # Proven mastery decays slower
CHALLENGE_THRESHOLD = 80

# Mastery label thresholds
FAMILIAR_THRESHOLD = 40
MASTERED_THRESHOLD = 80


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def calculate_strength_change(current_strength: int, is_correct: bool) -> int:
    """Correct: +10 (capped at 100). Incorrect: -20 (minimum 0)."""
    if is_correct:
        return min(current_strength + STRENGTH_INCREASE, STRENGTH_MAX)
    return max(current_strength - STRENGTH_DECREASE, STRENGTH_MIN)


def calculate_challenge_strength_change(current_strength: int, is_correct: bool) -> int:
    """Challenge mode: +15 / -30."""
    if is_correct:
        return min(current_strength + CHALLENGE_STRENGTH_INCREASE, STRENGTH_MAX)
    return max(current_strength - CHALLENGE_STRENGTH_DECREASE, STRENGTH_MIN)


def should_trigger_challenge(strength: int) -> bool:
    return strength >= CHALLENGE_THRESHOLD


def calculate_decay(
    strength: int,
    days_since_last_practice: float,
    has_proven_mastery: bool = False
) -> int:
    """
    Apply time decay to a strength value.

    No decay during the grace period (3 days, 5 with proven mastery),
    then 5 points per day.
    """
    grace_days = CHALLENGE_DECAY_GRACE_DAYS if has_proven_mastery else DECAY_GRACE_DAYS
    if days_since_last_practice <= grace_days:
        return strength

    decay_amount = (days_since_last_practice - grace_days) * DECAY_RATE_PER_DAY
    return max(int(strength - decay_amount), STRENGTH_MIN)


def calculate_lesson_strength(
    avg_vocab_strength: float,
    avg_grammar_strength: float,
    exercise_accuracy: float
) -> int:
    """Weighted lesson strength: 50% vocabulary, 30% grammar, 20% accuracy."""
    weighted = (
        avg_vocab_strength * 0.5
        + avg_grammar_strength * 0.3
        + exercise_accuracy * 0.2
    )
    return round_half_up(weighted)


def mastery_level(strength: int, days_since_last_practice: Optional[float]) -> str:
    """
    Label a word as new / learning / familiar / mastered / decaying.

    Args:
        strength: Legacy strength (0-100)
        days_since_last_practice: Whole days since practice, None if never
    """
    if strength == 0 or days_since_last_practice is None:
        return "new"

    if days_since_last_practice > DECAY_GRACE_DAYS:
        return "decaying"

    effective = calculate_decay(strength, days_since_last_practice)
    if effective >= MASTERED_THRESHOLD:
        return "mastered"
    if effective >= FAMILIAR_THRESHOLD:
        return "familiar"
    return "learning"
