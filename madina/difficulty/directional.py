"""
Directional Strength - recognition vs production memory

A word can be easy to recognise yet hard to produce, so each direction
carries its own 0-100 strength and difficulty level.

Level changes:
- Promotion is immediate once strength crosses a threshold upward
- Regression waits until strength falls REGRESSION_BUFFER below the
  threshold, so levels do not oscillate
- A single update never moves more than one level
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from madina.difficulty.constants import (
    CUED_TO_FREE,
    LEVEL_ORDER,
    PRODUCTION_WEIGHT,
    RECOGNITION_TO_CUED,
    RECOGNITION_WEIGHT,
    REGRESSION_BUFFER,
    STRENGTH_CHANGES,
    STRENGTH_MAX,
    STRENGTH_MIN,
    DifficultyLevel,
    coerce_level,
)
from madina.exercise_types import Direction, coerce_direction
from madina.sm2.review_state import utc_now
from madina.strength import round_half_up


@dataclass(frozen=True)
class DirectionalStrength:
    """Per-item strength and level for each direction."""
    recognition_strength: int = 0
    production_strength: int = 0
    recognition_level: DifficultyLevel = DifficultyLevel.RECOGNITION
    production_level: DifficultyLevel = DifficultyLevel.RECOGNITION
    last_recognition_practice: Optional[datetime] = None
    last_production_practice: Optional[datetime] = None

    def strength_for(self, direction: Direction | str) -> int:
        if coerce_direction(direction) == Direction.RECOGNITION:
            return self.recognition_strength
        return self.production_strength

    def level_for(self, direction: Direction | str) -> DifficultyLevel:
        if coerce_direction(direction) == Direction.RECOGNITION:
            return self.recognition_level
        return self.production_level

    def last_practice_for(self, direction: Direction | str) -> Optional[datetime]:
        if coerce_direction(direction) == Direction.RECOGNITION:
            return self.last_recognition_practice
        return self.last_production_practice


def clamp_strength(value: float) -> int:
    """Clamp a strength value into [0, 100]."""
    return int(max(STRENGTH_MIN, min(STRENGTH_MAX, value)))


def level_for_strength(strength: int) -> DifficultyLevel:
    """
    Get the difficulty level implied by strength alone (no hysteresis).

    Args:
        strength: Current strength (0-100)

    Returns:
        The matching difficulty level
    """
    if strength >= CUED_TO_FREE:
        return DifficultyLevel.FREE_RECALL
    if strength >= RECOGNITION_TO_CUED:
        return DifficultyLevel.CUED_RECALL
    return DifficultyLevel.RECOGNITION


def check_regression(current_level: DifficultyLevel, strength: int) -> DifficultyLevel:
    """
    Check if a word should drop to the previous level.

    Uses a buffer below each threshold so a single miss right at the
    boundary does not bounce the level.

    Args:
        current_level: Current difficulty level
        strength: Current strength (0-100)

    Returns:
        The level after checking for regression
    """
    current_level = coerce_level(current_level)

    if current_level == DifficultyLevel.FREE_RECALL:
        if strength < CUED_TO_FREE - REGRESSION_BUFFER:
            return DifficultyLevel.CUED_RECALL

    if current_level == DifficultyLevel.CUED_RECALL:
        if strength < RECOGNITION_TO_CUED - REGRESSION_BUFFER:
            return DifficultyLevel.RECOGNITION

    return current_level


def next_level(current_level: DifficultyLevel, strength: int) -> DifficultyLevel:
    """
    Resolve the level after a strength change.

    Promotes one level when strength reaches the next threshold,
    otherwise applies hysteresis-guarded regression.
    """
    current_level = coerce_level(current_level)
    target = level_for_strength(strength)

    if target.rank > current_level.rank:
        return LEVEL_ORDER[current_level.rank + 1]

    return check_regression(current_level, strength)


def calculate_directional_strength(
    current_strength: int,
    is_correct: bool,
    level: DifficultyLevel
) -> int:
    """
    Calculate the new strength after an answer.

    Args:
        current_strength: Current strength (0-100)
        is_correct: Whether the answer was correct
        level: Difficulty level the exercise was presented at

    Returns:
        New strength, clamped to [0, 100]
    """
    changes = STRENGTH_CHANGES[coerce_level(level)]
    delta = changes["correct"] if is_correct else changes["incorrect"]
    return clamp_strength(current_strength + delta)


def update_directional_strength(
    current: DirectionalStrength,
    direction: Direction | str,
    is_correct: bool,
    level: Optional[DifficultyLevel] = None,
    now: Optional[datetime] = None
) -> DirectionalStrength:
    """
    Update directional strength after an exercise.

    Args:
        current: Current directional strength (not modified)
        direction: Which direction was practised
        is_correct: Whether the answer was correct
        level: Level the exercise was shown at (defaults to the stored
               level for that direction)
        now: Practice time (defaults to now)

    Returns:
        Updated DirectionalStrength
    """
    if now is None:
        now = utc_now()
    direction = coerce_direction(direction)
    if level is None:
        level = current.level_for(direction)

    if direction == Direction.RECOGNITION:
        strength = calculate_directional_strength(
            current.recognition_strength, is_correct, level
        )
        return replace(
            current,
            recognition_strength=strength,
            recognition_level=next_level(current.recognition_level, strength),
            last_recognition_practice=now,
        )

    strength = calculate_directional_strength(
        current.production_strength, is_correct, level
    )
    return replace(
        current,
        production_strength=strength,
        production_level=next_level(current.production_level, strength),
        last_production_practice=now,
    )


def combined_strength(ds: DirectionalStrength) -> int:
    """
    Single legacy-compatible strength value.

    Weights production more heavily (30% recognition, 70% production).
    """
    weighted = ds.recognition_strength * RECOGNITION_WEIGHT + ds.production_strength * PRODUCTION_WEIGHT
    return clamp_strength(round_half_up(weighted))
