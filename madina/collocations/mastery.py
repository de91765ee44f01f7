"""
Collocation Mastery - answer checking, strength updates and practice selection

Collocations use a single 0-100 strength:
- Correct answers give more credit than single words (+12)
- Wrong answers cost -15
- A collocation is only practised once every component word is known
  well enough (MIN_WORD_STRENGTH)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Mapping, Optional, Sequence

from madina.arabic import compare_answers, split_words
from madina.collocations.types import (
    AnswerCheck,
    Collocation,
    CollocationMastery,
    CollocationType,
)
from madina.shuffle import Shuffle, fisher_yates_shuffle
from madina.sm2.review_state import utc_now


logger = logging.getLogger(__name__)


MIN_WORD_STRENGTH = 20
STRENGTH_CORRECT = 12
STRENGTH_INCORRECT = -15
DEFAULT_PRACTICE_LIMIT = 10

WORD_ORDER_FEEDBACK = "Word order is incorrect. Try rearranging."


# ---- Answer Checking ----

def check_collocation_answer(user_answer: str, expected_answer: str) -> AnswerCheck:
    """
    Check a collocation answer, tolerant of tashkeel and spacing.

    Args:
        user_answer: What the learner typed
        expected_answer: The correct phrase

    Returns:
        AnswerCheck; feedback is set for word-order mistakes and for
        partially correct answers
    """
    if not user_answer or not user_answer.strip():
        return AnswerCheck(is_correct=False)

    if compare_answers(user_answer, expected_answer):
        return AnswerCheck(is_correct=True)

    user_words = split_words(user_answer)
    expected_words = split_words(expected_answer)

    if len(user_words) == len(expected_words) and sorted(user_words) == sorted(expected_words):
        return AnswerCheck(is_correct=False, feedback=WORD_ORDER_FEEDBACK)

    matching = sum(1 for word in user_words if word in expected_words)
    if 0 < matching < len(expected_words):
        return AnswerCheck(
            is_correct=False,
            feedback=f"You got {matching} of {len(expected_words)} words correct.",
        )

    return AnswerCheck(is_correct=False)


# ---- Mastery Tracking ----

def new_collocation_mastery(collocation_id: str) -> CollocationMastery:
    return CollocationMastery(collocation_id=collocation_id)


def calculate_collocation_strength(current_strength: int, is_correct: bool) -> int:
    """New strength after an answer, clamped to [0, 100]."""
    delta = STRENGTH_CORRECT if is_correct else STRENGTH_INCORRECT
    return max(0, min(100, current_strength + delta))


def update_collocation_mastery(
    mastery: CollocationMastery,
    is_correct: bool,
    was_production: bool,
    now: Optional[datetime] = None
) -> CollocationMastery:
    """
    Update collocation mastery after an exercise.

    Args:
        mastery: Current mastery (not modified)
        is_correct: Whether the answer was correct
        was_production: True for production exercises (anything but MCQ)
        now: Practice time (defaults to now)

    Returns:
        Updated CollocationMastery
    """
    if now is None:
        now = utc_now()

    return replace(
        mastery,
        strength=calculate_collocation_strength(mastery.strength, is_correct),
        times_correct=mastery.times_correct + (1 if is_correct else 0),
        times_incorrect=mastery.times_incorrect + (0 if is_correct else 1),
        can_produce=mastery.can_produce or (was_production and is_correct),
        last_practiced=now,
    )


# ---- Selection ----

def is_eligible(collocation: Collocation, word_strengths: Mapping[str, int]) -> bool:
    """Every component word must be at least MIN_WORD_STRENGTH (unknown words count as 0)."""
    return all(
        word_strengths.get(word_id, 0) >= MIN_WORD_STRENGTH
        for word_id in collocation.word_ids
    )


def select_collocations_for_practice(
    collocations: Iterable[Collocation],
    word_strengths: Mapping[str, int],
    limit: int = DEFAULT_PRACTICE_LIMIT,
    shuffle: Optional[Shuffle] = None
) -> list[Collocation]:
    """
    Pick collocations whose component words are all known well enough.

    Args:
        collocations: Candidate collocations
        word_strengths: word id -> strength (0-100)
        limit: Maximum collocations to return
        shuffle: Shuffler for the eligible set (defaults to Fisher-Yates)

    Returns:
        Up to `limit` eligible collocations in shuffled order
    """
    shuffle = shuffle or fisher_yates_shuffle
    eligible = [c for c in collocations if is_eligible(c, word_strengths)]
    logger.debug("%d collocations eligible for practice", len(eligible))
    return shuffle(eligible)[:max(0, limit)]


def collocations_for_word(word_id: str, collocations: Sequence[Collocation]) -> list[Collocation]:
    return [c for c in collocations if word_id in c.word_ids]


def collocations_for_lesson(lesson_id: str, collocations: Sequence[Collocation]) -> list[Collocation]:
    return [c for c in collocations if c.lesson_id == lesson_id]


# ---- Descriptions ----

TYPE_DESCRIPTIONS = {
    CollocationType.DEMONSTRATIVE_NOUN: 'Demonstrative + Noun (e.g., "this book")',
    CollocationType.NOUN_ADJECTIVE: 'Noun + Adjective (e.g., "big house")',
    CollocationType.VERB_OBJECT: 'Verb + Object (e.g., "read the book")',
    CollocationType.PREPOSITION_NOUN: 'Preposition + Noun (e.g., "in the house")',
    CollocationType.POSSESSIVE: 'Possessive (e.g., "my book")',
    CollocationType.IDIOMATIC: "Idiomatic Expression",
    CollocationType.QUESTION_ANSWER: "Question Pattern",
}

TYPE_DESCRIPTIONS_ARABIC = {
    CollocationType.DEMONSTRATIVE_NOUN: "اسم الإشارة + اسم",
    CollocationType.NOUN_ADJECTIVE: "اسم + صفة",
    CollocationType.VERB_OBJECT: "فعل + مفعول به",
    CollocationType.PREPOSITION_NOUN: "حرف جر + اسم",
    CollocationType.POSSESSIVE: "إضافة",
    CollocationType.IDIOMATIC: "تعبير اصطلاحي",
    CollocationType.QUESTION_ANSWER: "أداة استفهام",
}


def collocation_type_description(collocation_type: CollocationType | str, arabic: bool = False) -> str:
    """English (or Arabic) label for a collocation type."""
    try:
        key = CollocationType(collocation_type)
    except ValueError:
        return "تركيب" if arabic else "Word Combination"
    table = TYPE_DESCRIPTIONS_ARABIC if arabic else TYPE_DESCRIPTIONS
    return table[key]
