"""
Progressive Difficulty - recognition -> cued recall -> free recall

Tracks recognition and production strength separately and picks the
exercise difficulty each word is ready for.
"""

from madina.difficulty.constants import (
    CUED_TO_FREE,
    RECOGNITION_TO_CUED,
    REGRESSION_BUFFER,
    STRENGTH_CHANGES,
    DifficultyLevel,
)
from madina.difficulty.directional import (
    DirectionalStrength,
    calculate_directional_strength,
    check_regression,
    combined_strength,
    level_for_strength,
    next_level,
    update_directional_strength,
)
from madina.difficulty.selection import (
    ExerciseTypeSelection,
    difficulty_description,
    get_priority_direction,
    needs_practice,
    needs_production_practice,
    needs_recognition_practice,
    prioritize_for_practice,
    select_exercise_type,
)


__all__ = [
    "DifficultyLevel",
    "RECOGNITION_TO_CUED",
    "CUED_TO_FREE",
    "REGRESSION_BUFFER",
    "STRENGTH_CHANGES",
    "DirectionalStrength",
    "calculate_directional_strength",
    "check_regression",
    "combined_strength",
    "level_for_strength",
    "next_level",
    "update_directional_strength",
    "ExerciseTypeSelection",
    "difficulty_description",
    "get_priority_direction",
    "needs_practice",
    "needs_production_practice",
    "needs_recognition_practice",
    "prioritize_for_practice",
    "select_exercise_type",
]
