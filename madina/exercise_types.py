"""
Exercise types and their skill direction.

Each exercise type is statically tagged as practising either recognition
(see Arabic, understand it) or production (produce Arabic from meaning).
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class Direction(str, Enum):
    """Skill direction practised by an exercise."""
    RECOGNITION = "recognition"
    PRODUCTION = "production"


class ExerciseType(str, Enum):
    """Exercise types supplied by the content layer."""
    WORD_TO_MEANING = "word-to-meaning"          # See Arabic, choose English meaning
    MEANING_TO_WORD = "meaning-to-word"          # See English, produce Arabic
    FILL_BLANK = "fill-blank"                    # Produce Arabic to fill a blank
    TRANSLATE_TO_ARABIC = "translate-to-arabic"
    CONSTRUCT_SENTENCE = "construct-sentence"
    GRAMMAR_APPLY = "grammar-apply"
    ERROR_CORRECTION = "error-correction"        # Identify errors (recognition-focused)
    MULTI_CLOZE = "multi-cloze"
    SEMANTIC_FIELD = "semantic-field"            # Categorize words
    SENTENCE_UNSCRAMBLE = "sentence-unscramble"


EXERCISE_DIRECTION_MAP: Final[dict[ExerciseType, Direction]] = {
    ExerciseType.WORD_TO_MEANING: Direction.RECOGNITION,
    ExerciseType.MEANING_TO_WORD: Direction.PRODUCTION,
    ExerciseType.FILL_BLANK: Direction.PRODUCTION,
    ExerciseType.TRANSLATE_TO_ARABIC: Direction.PRODUCTION,
    ExerciseType.CONSTRUCT_SENTENCE: Direction.PRODUCTION,
    ExerciseType.GRAMMAR_APPLY: Direction.PRODUCTION,
    ExerciseType.ERROR_CORRECTION: Direction.RECOGNITION,
    ExerciseType.MULTI_CLOZE: Direction.PRODUCTION,
    ExerciseType.SEMANTIC_FIELD: Direction.RECOGNITION,
    ExerciseType.SENTENCE_UNSCRAMBLE: Direction.PRODUCTION,
}


def coerce_exercise_type(value: object) -> ExerciseType:
    """
    Resolve an exercise type from an enum member or its string value.

    Raises:
        ValueError: For unknown exercise types (a caller bug)
    """
    if isinstance(value, ExerciseType):
        return value
    try:
        return ExerciseType(str(value))
    except ValueError:
        raise ValueError(f"Unknown exercise type {value!r}") from None


def coerce_direction(value: object) -> Direction:
    """
    Resolve a direction from an enum member or its string value.

    Raises:
        ValueError: For anything other than recognition/production
    """
    if isinstance(value, Direction):
        return value
    try:
        return Direction(str(value).strip().lower())
    except ValueError:
        raise ValueError(
            f"Unknown direction {value!r}; expected 'recognition' or 'production'"
        ) from None


def get_exercise_direction(exercise_type: ExerciseType | str) -> Direction:
    """Get the direction (recognition vs production) for an exercise type."""
    return EXERCISE_DIRECTION_MAP[coerce_exercise_type(exercise_type)]
