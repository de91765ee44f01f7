"""
Arabic Text - answer normalization, comparison and error classification

- normalize_arabic: strip tashkeel (diacritics), trim, collapse whitespace
- compare_answers / compare_answers_strict: lenient vs challenge-mode matching
- analyze_arabic_error: classify a wrong answer into an ErrorCategory
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Optional


# U+064B-U+065F: tanween, short vowels, shadda, sukun and other combining marks
# U+0670: superscript (dagger) alef
TASHKEEL_PATTERN: Final = re.compile("[\\u064B-\\u065F\\u0670]")
_WHITESPACE: Final = re.compile(r"\s+")


class ErrorCategory(str, Enum):
    """Kinds of mistakes tracked by weakness analysis."""
    TASHKEEL_MISSING = "tashkeel_missing"
    TASHKEEL_WRONG = "tashkeel_wrong"
    LETTER_CONFUSION = "letter_confusion"
    WORD_ORDER = "word_order"
    VOCABULARY_UNKNOWN = "vocabulary_unknown"
    PARTIAL_MATCH = "partial_match"
    SPELLING_ERROR = "spelling_error"
    TYPO = "typo"


def coerce_error_category(value: object) -> ErrorCategory:
    """
    Resolve an error category from an enum member or its string value.

    Raises:
        ValueError: For unknown categories
    """
    if isinstance(value, ErrorCategory):
        return value
    try:
        return ErrorCategory(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown error category {value!r}") from None


# Commonly confused letter pairs (order does not matter)
LETTER_CONFUSIONS: Final[tuple[tuple[str, str], ...]] = (
    ("ه", "ة"),   # Ha / Ta Marbuta
    ("ا", "أ"),   # Alef / Alef with hamza above
    ("ا", "إ"),   # Alef / Alef with hamza below
    ("ا", "آ"),   # Alef / Alef with madda
    ("ى", "ي"),   # Alef Maqsura / Ya
    ("ي", "ئ"),   # Ya / Ya with hamza
    ("و", "ؤ"),   # Waw / Waw with hamza
    ("ء", "أ"),   # Hamza / Alef with hamza
    ("ت", "ة"),   # Ta / Ta Marbuta
    ("ک", "ك"),   # Persian Kaf / Arabic Kaf
    ("ی", "ي"),   # Persian Ye / Arabic Ya
)

_CONFUSION_PAIRS: Final[frozenset[frozenset[str]]] = frozenset(
    frozenset(pair) for pair in LETTER_CONFUSIONS
)

# Similarity thresholds for edit-distance classification
TYPO_SIMILARITY = 0.8
SPELLING_SIMILARITY = 0.5
PARTIAL_SIMILARITY = 0.3


# ---- Normalization ----

def remove_tashkeel(text: str) -> str:
    """Remove all diacritical marks from Arabic text."""
    return TASHKEEL_PATTERN.sub("", text)


def normalize_arabic(text: str) -> str:
    """Strip tashkeel, trim, and collapse runs of whitespace to one space."""
    return _WHITESPACE.sub(" ", remove_tashkeel(text).strip())


def normalize_arabic_strict(text: str) -> str:
    """Whitespace-only normalization; tashkeel is kept."""
    return _WHITESPACE.sub(" ", text.strip())


def compare_answers(user_answer: str, correct_answer: str) -> bool:
    """
    Compare answers ignoring tashkeel and whitespace differences.

    Learners may type without vowel marks and still be marked correct.
    """
    return normalize_arabic(user_answer) == normalize_arabic(correct_answer)


def compare_answers_strict(user_answer: str, correct_answer: str) -> bool:
    """Compare answers requiring exact tashkeel (challenge mode)."""
    return normalize_arabic_strict(user_answer) == normalize_arabic_strict(correct_answer)


def extract_tashkeel(text: str) -> list[str]:
    """Diacritical marks in order of appearance."""
    return TASHKEEL_PATTERN.findall(text)


def has_tashkeel(text: str) -> bool:
    return TASHKEEL_PATTERN.search(text) is not None


def split_words(text: str) -> list[str]:
    """Normalized words of a phrase (empty list for blank input)."""
    normalized = normalize_arabic(text)
    return normalized.split(" ") if normalized else []


# ---- Error Analysis ----

def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance (insert, delete, substitute) between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(
                previous[j - 1] + cost,   # substitution
                current[j - 1] + 1,       # insertion
                previous[j] + 1,          # deletion
            ))
        previous = current
    return previous[-1]


def is_letter_confusion(char_a: str, char_b: str) -> bool:
    return char_a != char_b and frozenset((char_a, char_b)) in _CONFUSION_PAIRS


@dataclass(frozen=True)
class LetterConfusion:
    expected: str
    actual: str


def find_letter_confusions(expected: str, actual: str) -> list[LetterConfusion]:
    """
    Position-by-position scan for commonly confused letters.

    Only compares up to the shorter of the two (tashkeel removed).
    """
    expected_bare = remove_tashkeel(expected)
    actual_bare = remove_tashkeel(actual)
    return [
        LetterConfusion(expected=e, actual=a)
        for e, a in zip(expected_bare, actual_bare)
        if is_letter_confusion(e, a)
    ]


@dataclass(frozen=True)
class ErrorAnalysis:
    """Classified error with a short diagnostic."""
    category: ErrorCategory
    details: str
    letter_confusions: tuple[LetterConfusion, ...] = field(default_factory=tuple)


def analyze_arabic_error(expected: str, actual: Optional[str]) -> ErrorAnalysis:
    """
    Classify an incorrect Arabic answer.

    Checks, in order: empty answer, tashkeel-only differences, letter
    confusions, then edit-distance similarity (typo > spelling > partial
    > unknown vocabulary).

    Args:
        expected: The correct answer
        actual: The learner's answer

    Returns:
        ErrorAnalysis with the category and diagnostic details
    """
    if not actual or not actual.strip():
        return ErrorAnalysis(ErrorCategory.VOCABULARY_UNKNOWN, "No answer provided")

    expected_norm = normalize_arabic(expected)
    actual_norm = normalize_arabic(actual)

    if expected_norm == actual_norm:
        if normalize_arabic_strict(expected) != normalize_arabic_strict(actual):
            if not extract_tashkeel(actual) and extract_tashkeel(expected):
                return ErrorAnalysis(
                    ErrorCategory.TASHKEEL_MISSING, "Answer missing diacritical marks"
                )
            return ErrorAnalysis(
                ErrorCategory.TASHKEEL_WRONG, "Incorrect diacritical marks used"
            )
        # Identical answers; callers should not classify correct answers
        return ErrorAnalysis(ErrorCategory.PARTIAL_MATCH, "Answer is correct")

    confusions = find_letter_confusions(expected, actual)
    if confusions:
        summary = ", ".join(f"{c.actual} → {c.expected}" for c in confusions)
        return ErrorAnalysis(
            ErrorCategory.LETTER_CONFUSION,
            f"Letter confusion: {summary}",
            tuple(confusions),
        )

    distance = levenshtein_distance(expected_norm, actual_norm)
    similarity = 1 - distance / max(len(expected_norm), len(actual_norm))

    if similarity > TYPO_SIMILARITY:
        return ErrorAnalysis(ErrorCategory.TYPO, "Minor typing error detected")
    if similarity > SPELLING_SIMILARITY:
        return ErrorAnalysis(ErrorCategory.SPELLING_ERROR, "Spelling error in Arabic")
    if similarity > PARTIAL_SIMILARITY:
        return ErrorAnalysis(ErrorCategory.PARTIAL_MATCH, "Answer partially correct")
    return ErrorAnalysis(
        ErrorCategory.VOCABULARY_UNKNOWN, "Answer does not match expected word"
    )


ERROR_EXPLANATIONS: Final[dict[ErrorCategory, str]] = {
    ErrorCategory.TASHKEEL_MISSING: "Your answer needs diacritical marks (tashkeel). Try adding the vowel marks.",
    ErrorCategory.TASHKEEL_WRONG: "The letters are correct, but check your diacritical marks (tashkeel).",
    ErrorCategory.LETTER_CONFUSION: "Check for commonly confused letters in your answer.",
    ErrorCategory.TYPO: "Almost correct! Check for any typing mistakes.",
    ErrorCategory.SPELLING_ERROR: "The spelling needs some work. Review the word carefully.",
    ErrorCategory.PARTIAL_MATCH: "Your answer is on the right track, but not quite complete.",
    ErrorCategory.WORD_ORDER: "The words are correct, but the order needs adjustment.",
    ErrorCategory.VOCABULARY_UNKNOWN: "Review this word - it may need more practice.",
}


def error_explanation(category: ErrorCategory | str, expected: str = "", actual: str = "") -> str:
    """
    Learner-facing explanation for an error category.

    Letter confusions name the first confused pair when expected/actual
    are given.
    """
    category = coerce_error_category(category)
    if category == ErrorCategory.LETTER_CONFUSION:
        confusions = find_letter_confusions(expected, actual)
        if confusions:
            first = confusions[0]
            return (
                f'You wrote "{first.actual}" but the correct letter is '
                f'"{first.expected}". These letters are commonly confused.'
            )
    return ERROR_EXPLANATIONS[category]
