"""
SM-2 Constants and Parameters

All configurable parameters for the SM-2 algorithm in one place.
Based on the SuperMemo SM-2 description by Piotr Wozniak.
"""

from enum import IntEnum


# ---- Recall Quality ----

class Quality(IntEnum):
    """Quality of recall on the 0-5 SM-2 scale."""
    BLACKOUT = 0         # Complete blackout, no recall
    INCORRECT = 1        # Incorrect, but remembered on seeing the answer
    INCORRECT_EASY = 2   # Incorrect, but the answer seemed easy to recall
    HARD = 3             # Correct with serious difficulty
    GOOD = 4             # Correct after hesitation
    PERFECT = 5          # Perfect response


# ---- Global Constants ----

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
PASSING_QUALITY = 3      # quality < 3 is a lapse

FIRST_INTERVAL = 1       # days, after the first successful review
SECOND_INTERVAL = 6      # days, after the second successful review
LAPSE_INTERVAL = 1       # days, after any failure

SECONDS_PER_DAY = 86400.0


# ---- Simplified Outcome Mappings ----

FLASHCARD_RATINGS = {
    "again": Quality.INCORRECT,
    "hard": Quality.HARD,
    "good": Quality.GOOD,
    "easy": Quality.PERFECT,
}
