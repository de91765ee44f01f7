"""
Progressive Difficulty Constants

Thresholds, strength deltas and review intervals for the
recognition -> cued recall -> free recall progression.
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class DifficultyLevel(str, Enum):
    """Exercise difficulty, easiest first."""
    RECOGNITION = "recognition"   # Multiple choice / word bank
    CUED_RECALL = "cued_recall"   # Fill in with hints
    FREE_RECALL = "free_recall"   # Type from memory, no hints

    @property
    def rank(self) -> int:
        return LEVEL_ORDER.index(self)


LEVEL_ORDER: Final[tuple[DifficultyLevel, ...]] = (
    DifficultyLevel.RECOGNITION,
    DifficultyLevel.CUED_RECALL,
    DifficultyLevel.FREE_RECALL,
)


# ---- Level Thresholds ----

RECOGNITION_TO_CUED = 40   # Strength needed to reach cued recall
CUED_TO_FREE = 70          # Strength needed to reach free recall
REGRESSION_BUFFER = 10     # Hysteresis below a threshold before regressing

STRENGTH_MIN = 0
STRENGTH_MAX = 100


# ---- Strength Changes by Level ----
# Harder levels give more credit for correct, less penalty for wrong

STRENGTH_CHANGES: Final[dict[DifficultyLevel, dict[str, int]]] = {
    DifficultyLevel.RECOGNITION: {"correct": 5, "incorrect": -10},
    DifficultyLevel.CUED_RECALL: {"correct": 10, "incorrect": -15},
    DifficultyLevel.FREE_RECALL: {"correct": 15, "incorrect": -10},
}


# ---- Review Intervals (days) by Level ----

RECOGNITION_REVIEW_DAYS: Final[dict[DifficultyLevel, int]] = {
    DifficultyLevel.RECOGNITION: 1,
    DifficultyLevel.CUED_RECALL: 3,
    DifficultyLevel.FREE_RECALL: 7,
}

PRODUCTION_REVIEW_DAYS: Final[dict[DifficultyLevel, int]] = {
    DifficultyLevel.RECOGNITION: 1,
    DifficultyLevel.CUED_RECALL: 2,
    DifficultyLevel.FREE_RECALL: 5,
}


# Production lags recognition by more than this -> practise production
PRODUCTION_GAP_LIMIT = 20

# Legacy combined strength weighting
RECOGNITION_WEIGHT = 0.3
PRODUCTION_WEIGHT = 0.7


def coerce_level(value: object) -> DifficultyLevel:
    """
    Resolve a difficulty level from an enum member or its string value.

    Raises:
        ValueError: For unknown level names
    """
    if isinstance(value, DifficultyLevel):
        return value
    try:
        return DifficultyLevel(str(value).strip().lower())
    except ValueError:
        raise ValueError(
            f"Unknown difficulty level {value!r}; "
            f"expected one of {[lvl.value for lvl in DifficultyLevel]}"
        ) from None
