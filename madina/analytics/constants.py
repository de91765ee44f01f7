"""
Constants for calibration and weakness analytics.
"""

from __future__ import annotations

from typing import Final

from madina.arabic import ErrorCategory


# ---- Confidence Calibration ----

CONFIDENCE_LEVELS: Final[tuple[int, ...]] = (1, 2, 3)

# A well-calibrated learner is right about this often at each level
EXPECTED_ACCURACY: Final[dict[int, float]] = {
    1: 0.33,   # Unsure
    2: 0.66,   # Somewhat sure
    3: 0.90,   # Very sure
}

CONFIDENCE_LABELS: Final[dict[int, str]] = {
    1: "Unsure",
    2: "Somewhat sure",
    3: "Very sure",
}

MIN_RATINGS_FOR_CALIBRATION = 10
TENDENCY_THRESHOLD = 0.15
EXCELLENT_CALIBRATION_SCORE = 0.85
MIN_LEVEL_COUNT_FOR_FEEDBACK = 3

TREND_WINDOW = 20              # recent 20 vs previous 20 ratings
TREND_THRESHOLD = 0.1


# ---- Weakness Analysis ----

MIN_ERRORS_FOR_WEAKNESS = 3
MAX_TOP_WEAKNESSES = 5
RECENT_ERROR_DAYS = 14
MAX_EXAMPLES_PER_WEAKNESS = 5

SEVERE_ERROR_COUNT = 10
MODERATE_ERROR_COUNT = 5

WORSENING_RECENT_RATIO = 0.6
IMPROVING_RECENT_RATIO = 0.3

SEVERITY_ORDER: Final[dict[str, int]] = {"severe": 0, "moderate": 1, "mild": 2}

DEFAULT_PRACTICE_ITEMS = 10


ERROR_CATEGORY_INFO: Final[dict[ErrorCategory, tuple[str, str]]] = {
    ErrorCategory.TASHKEEL_MISSING: (
        "Missing diacritical marks (tashkeel)",
        "Practice writing words with full vowel marks. Pay attention to the short vowels (fatha, kasra, damma).",
    ),
    ErrorCategory.TASHKEEL_WRONG: (
        "Incorrect diacritical marks",
        "Review the vowel patterns for these words. Notice how the vowels change based on grammatical position.",
    ),
    ErrorCategory.LETTER_CONFUSION: (
        "Confusing similar-looking letters",
        "Focus on distinguishing between similar letters like ه/ة, ا/أ, ى/ي. Practice writing them side by side.",
    ),
    ErrorCategory.WORD_ORDER: (
        "Incorrect word order in sentences",
        "Review Arabic sentence structure. Remember: Arabic often follows Verb-Subject-Object order.",
    ),
    ErrorCategory.VOCABULARY_UNKNOWN: (
        "Unknown or forgotten vocabulary",
        "These words need more practice. Try using flashcards or reading them in context.",
    ),
    ErrorCategory.PARTIAL_MATCH: (
        "Close but not quite correct",
        "Pay attention to the exact form of words. Small details matter in Arabic.",
    ),
    ErrorCategory.SPELLING_ERROR: (
        "Spelling mistakes",
        "Practice writing these words carefully. Break them into syllables if needed.",
    ),
    ErrorCategory.TYPO: (
        "Typing errors",
        "Slow down when typing Arabic. Make sure your keyboard layout is correct.",
    ),
}

PRACTICE_INSTRUCTIONS: Final[dict[ErrorCategory, str]] = {
    ErrorCategory.TASHKEEL_MISSING: "Pay special attention to the vowel marks",
    ErrorCategory.TASHKEEL_WRONG: "Pay special attention to the vowel marks",
    ErrorCategory.LETTER_CONFUSION: "Look carefully at each letter",
    ErrorCategory.WORD_ORDER: "Focus on the word order",
    ErrorCategory.VOCABULARY_UNKNOWN: "Try to recall this word from memory",
    ErrorCategory.PARTIAL_MATCH: "Write the complete word carefully",
    ErrorCategory.SPELLING_ERROR: "Write the complete word carefully",
    ErrorCategory.TYPO: "Type slowly and accurately",
}

ERROR_CATEGORY_LABELS: Final[dict[ErrorCategory, str]] = {
    ErrorCategory.TASHKEEL_MISSING: "Missing Tashkeel",
    ErrorCategory.TASHKEEL_WRONG: "Wrong Tashkeel",
    ErrorCategory.LETTER_CONFUSION: "Letter Confusion",
    ErrorCategory.WORD_ORDER: "Word Order",
    ErrorCategory.VOCABULARY_UNKNOWN: "Unknown Words",
    ErrorCategory.PARTIAL_MATCH: "Partial Matches",
    ErrorCategory.SPELLING_ERROR: "Spelling",
    ErrorCategory.TYPO: "Typos",
}
