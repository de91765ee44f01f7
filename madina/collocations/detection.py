"""
Collocation Detection - rule-based pattern recognition for Arabic phrases

Rules are applied to the diacritic-free phrase, in order:
1. Demonstrative first word -> demonstrative_noun
2. Ambiguous من: question_answer before a demonstrative, else preposition_noun
3. Multi-letter preposition first word -> preposition_noun
4. Question particle first word -> question_answer
5. Attached preposition (بال / لل / كال ...) -> preposition_noun
6. Any other 2-word phrase -> noun_adjective
"""

from __future__ import annotations

import logging
from typing import Final, Iterable, Mapping, Optional

from madina.arabic import normalize_arabic, split_words
from madina.collocations.types import Collocation, CollocationType, ExerciseSource


logger = logging.getLogger(__name__)


DEMONSTRATIVES: Final[tuple[str, ...]] = (
    "هَذَا", "هَذِهِ", "ذَلِكَ", "تِلْكَ", "هَؤُلَاءِ", "أُولَئِكَ",
)
PREPOSITIONS: Final[tuple[str, ...]] = (
    "فِي", "مِنْ", "إِلَى", "عَلَى", "عَنْ", "بِ", "لِ", "كَ", "مَعَ",
)
QUESTION_WORDS: Final[tuple[str, ...]] = (
    "مَا", "مَنْ", "أَيْنَ", "كَيْفَ", "لِمَاذَا", "مَتَى", "كَمْ", "أَيُّ", "هَلْ", "أَ",
)
ATTACHED_PREPOSITIONS: Final[tuple[str, ...]] = ("ب", "ل", "ك")

# من reads as "who" or "from" depending on what follows
AMBIGUOUS_MIN = "من"

_DEMONSTRATIVES_BARE = frozenset(normalize_arabic(w) for w in DEMONSTRATIVES)
_MULTI_LETTER_PREPOSITIONS_BARE = frozenset(
    p for p in (normalize_arabic(w) for w in PREPOSITIONS)
    if len(p) > 1 and p != AMBIGUOUS_MIN
)
_QUESTION_PARTICLES_BARE = frozenset(
    q for q in (normalize_arabic(w) for w in QUESTION_WORDS) if q != AMBIGUOUS_MIN
)

# Phrases longer than this are sentences, not collocations
MIN_COLLOCATION_WORDS = 2
MAX_COLLOCATION_WORDS = 4


def _has_attached_preposition(word: str) -> bool:
    return any(
        word.startswith(prefix + "ال") or word.startswith(prefix + "ل")
        for prefix in ATTACHED_PREPOSITIONS
    )


def detect_collocation_type(phrase: str) -> Optional[CollocationType]:
    """
    Detect the collocation pattern of an Arabic phrase.

    Args:
        phrase: Arabic phrase, with or without tashkeel

    Returns:
        The detected CollocationType, or None for single words and
        unrecognised longer phrases
    """
    words = split_words(phrase)
    if len(words) < 2:
        return None

    first, second = words[0], words[1]

    if first in _DEMONSTRATIVES_BARE:
        return CollocationType.DEMONSTRATIVE_NOUN

    if first == AMBIGUOUS_MIN:
        if second in _DEMONSTRATIVES_BARE:
            return CollocationType.QUESTION_ANSWER   # من هذا = who is this?
        return CollocationType.PREPOSITION_NOUN      # من المدرسة = from the school

    if first in _MULTI_LETTER_PREPOSITIONS_BARE:
        return CollocationType.PREPOSITION_NOUN

    if first in _QUESTION_PARTICLES_BARE:
        return CollocationType.QUESTION_ANSWER

    if _has_attached_preposition(first):
        return CollocationType.PREPOSITION_NOUN

    if len(words) == 2:
        return CollocationType.NOUN_ADJECTIVE

    return None


def _as_source(exercise: ExerciseSource | Mapping) -> ExerciseSource:
    if isinstance(exercise, ExerciseSource):
        return exercise
    return ExerciseSource(
        id=str(exercise.get("id", "")),
        answer=str(exercise.get("answer", "")),
        item_ids=tuple(exercise.get("item_ids") or exercise.get("itemIds") or ()),
        type=exercise.get("type"),
    )


def extract_collocations_from_exercises(
    exercises: Iterable[ExerciseSource | Mapping],
    lesson_id: str
) -> list[Collocation]:
    """
    Pull collocations out of lesson exercises with 2-4 word answers.

    Duplicate phrases (after normalization) and phrases with no detectable
    pattern are skipped. Ids are numbered per lesson: coll-{lesson}-{n}.

    Args:
        exercises: ExerciseSource objects or plain dicts
                   (id, answer, item_ids / itemIds)
        lesson_id: Lesson the collocations are attributed to

    Returns:
        Extracted collocations, in exercise order
    """
    collocations: list[Collocation] = []
    seen: set[str] = set()

    for raw in exercises:
        exercise = _as_source(raw)
        words = exercise.answer.split()
        if not MIN_COLLOCATION_WORDS <= len(words) <= MAX_COLLOCATION_WORDS:
            continue

        normalized = normalize_arabic(exercise.answer)
        if normalized in seen:
            continue
        seen.add(normalized)

        collocation_type = detect_collocation_type(exercise.answer)
        if collocation_type is None:
            continue

        collocations.append(Collocation(
            id=f"coll-{lesson_id}-{len(collocations) + 1}",
            type=collocation_type,
            arabic=exercise.answer,
            english="",
            word_ids=exercise.item_ids,
            lesson_id=lesson_id,
        ))

    logger.debug(
        "Extracted %d collocations from lesson %s", len(collocations), lesson_id
    )
    return collocations
