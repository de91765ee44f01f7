"""
Exercise selection and practice scheduling for progressive difficulty.

Decides which direction to practise next, which exercise type to show
and with what assistance, and whether a word is due for practice.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from madina.difficulty.constants import (
    CUED_TO_FREE,
    PRODUCTION_GAP_LIMIT,
    PRODUCTION_REVIEW_DAYS,
    RECOGNITION_REVIEW_DAYS,
    RECOGNITION_TO_CUED,
    DifficultyLevel,
)
from madina.difficulty.directional import (
    DirectionalStrength,
    combined_strength,
    next_level,
)
from madina.exercise_types import (
    Direction,
    ExerciseType,
    coerce_direction,
    coerce_exercise_type,
    get_exercise_direction,
)
from madina.sm2.review_state import days_between, utc_now


@dataclass(frozen=True)
class ExerciseTypeSelection:
    """Result of choosing an exercise for a word."""
    exercise_type: ExerciseType
    difficulty_level: DifficultyLevel
    direction: Direction
    show_hints: bool
    use_word_bank: bool


DIFFICULTY_DESCRIPTIONS = {
    DifficultyLevel.RECOGNITION: "Choose from options",
    DifficultyLevel.CUED_RECALL: "Fill in with hints",
    DifficultyLevel.FREE_RECALL: "Type from memory",
}


def get_priority_direction(ds: DirectionalStrength) -> Direction:
    """
    Decide whether to practise recognition or production next.

    Priority logic:
    1. Weak recognition (< 40) comes first, it is the prerequisite
    2. Production lagging recognition by more than 20 -> production
    3. Strong production (>= 70) -> recognition, for maintenance
    4. Otherwise production, the harder and more valuable skill

    Args:
        ds: The word's directional strength

    Returns:
        Direction to prioritise
    """
    if ds.recognition_strength < RECOGNITION_TO_CUED:
        return Direction.RECOGNITION

    if ds.recognition_strength - ds.production_strength > PRODUCTION_GAP_LIMIT:
        return Direction.PRODUCTION

    if ds.production_strength >= CUED_TO_FREE:
        return Direction.RECOGNITION

    return Direction.PRODUCTION


def select_exercise_type(
    exercise_types: Sequence[ExerciseType | str],
    ds: DirectionalStrength,
    preferred_direction: Optional[Direction | str] = None,
    choose: Optional[Callable[[list[ExerciseType]], ExerciseType]] = None
) -> Optional[ExerciseTypeSelection]:
    """
    Select an exercise type for a word based on its strength.

    Args:
        exercise_types: Candidate exercise types for this word
        ds: The word's directional strength
        preferred_direction: Force a direction instead of the policy
        choose: Picks one type from the filtered candidates
                (defaults to the first)

    Returns:
        ExerciseTypeSelection, or None if there are no candidates
    """
    candidates = [coerce_exercise_type(t) for t in exercise_types]
    if not candidates:
        return None

    if preferred_direction is not None:
        target = coerce_direction(preferred_direction)
    else:
        target = get_priority_direction(ds)

    level = next_level(ds.level_for(target), ds.strength_for(target))

    matching = [t for t in candidates if get_exercise_direction(t) == target]
    available = matching or candidates

    selected = choose(available) if choose is not None else available[0]

    return ExerciseTypeSelection(
        exercise_type=selected,
        difficulty_level=level,
        direction=get_exercise_direction(selected),
        show_hints=level in (DifficultyLevel.RECOGNITION, DifficultyLevel.CUED_RECALL),
        use_word_bank=level == DifficultyLevel.RECOGNITION,
    )


def needs_recognition_practice(ds: DirectionalStrength, days_since: float) -> bool:
    """
    Check if a word needs recognition practice (weak or due).

    Args:
        ds: The word's directional strength
        days_since: Days since the last recognition practice
    """
    if ds.recognition_strength < RECOGNITION_TO_CUED:
        return True
    return days_since >= RECOGNITION_REVIEW_DAYS[ds.recognition_level]


def needs_production_practice(ds: DirectionalStrength, days_since: float) -> bool:
    """
    Check if a word needs production practice (weak or due).

    Production is never needed while recognition is still weak:
    production cannot outpace comprehension.

    Args:
        ds: The word's directional strength
        days_since: Days since the last production practice
    """
    if ds.recognition_strength < RECOGNITION_TO_CUED:
        return False
    if ds.production_strength < RECOGNITION_TO_CUED:
        return True
    return days_since >= PRODUCTION_REVIEW_DAYS[ds.production_level]


def days_since_practice(
    ds: DirectionalStrength,
    direction: Direction | str,
    now: Optional[datetime] = None
) -> float:
    """Whole days since a direction was last practised (inf if never)."""
    if now is None:
        now = utc_now()
    last = ds.last_practice_for(direction)
    if last is None:
        return math.inf
    return max(0.0, math.floor(days_between(last, now)))


def needs_practice(
    ds: DirectionalStrength,
    direction: Direction | str,
    now: Optional[datetime] = None
) -> bool:
    """Dispatch to the direction-specific practice predicate."""
    direction = coerce_direction(direction)
    days = days_since_practice(ds, direction, now)
    if direction == Direction.RECOGNITION:
        return needs_recognition_practice(ds, days)
    return needs_production_practice(ds, days)


def prioritize_for_practice(
    strengths: dict[str, DirectionalStrength] | Iterable[tuple[str, DirectionalStrength]],
    now: Optional[datetime] = None,
    limit: int = 20
) -> list[str]:
    """
    Order word ids by how urgently they need practice.

    Priority bands (lower first):
    - never practised
    - weak recognition
    - weak production
    - due for review in either direction
    - not urgent

    Args:
        strengths: Mapping (or pairs) of word id -> directional strength
        now: Reference time (defaults to now)
        limit: Maximum ids to return

    Returns:
        Word ids, most urgent first
    """
    if now is None:
        now = utc_now()
    pairs = strengths.items() if isinstance(strengths, dict) else strengths

    scored: list[tuple[int, str]] = []
    for word_id, ds in pairs:
        if ds.recognition_strength == 0:
            priority = 0
        elif ds.recognition_strength < RECOGNITION_TO_CUED:
            priority = 10 + ds.recognition_strength
        elif ds.production_strength < RECOGNITION_TO_CUED:
            priority = 50 + ds.production_strength
        elif needs_practice(ds, Direction.RECOGNITION, now) or needs_practice(ds, Direction.PRODUCTION, now):
            priority = 100 + combined_strength(ds)
        else:
            priority = 200 + combined_strength(ds)
        scored.append((priority, word_id))

    scored.sort(key=lambda entry: entry[0])
    return [word_id for _, word_id in scored[:max(0, limit)]]


def difficulty_description(level: DifficultyLevel | str) -> str:
    """Human-readable description of a difficulty level."""
    return DIFFICULTY_DESCRIPTIONS[DifficultyLevel(level)]
