"""
Types for collocation (phrase-level) learning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class CollocationType(str, Enum):
    """Pattern a collocation follows."""
    DEMONSTRATIVE_NOUN = "demonstrative_noun"   # هَذَا/ذَلِكَ + noun
    NOUN_ADJECTIVE = "noun_adjective"
    VERB_OBJECT = "verb_object"
    PREPOSITION_NOUN = "preposition_noun"
    POSSESSIVE = "possessive"
    IDIOMATIC = "idiomatic"
    QUESTION_ANSWER = "question_answer"         # question word + structure


class CollocationExerciseType(str, Enum):
    COMPLETE = "complete_collocation"     # Given one part, complete the phrase
    TRANSLATE = "translate_collocation"   # English -> whole Arabic phrase
    CHOOSE = "choose_collocation"         # Multiple choice for the missing part


@dataclass(frozen=True)
class Collocation:
    """A word combination taught as a unit."""
    id: str
    type: CollocationType
    arabic: str
    english: str
    word_ids: tuple[str, ...]
    lesson_id: str
    pattern: Optional[str] = None
    notes: Optional[str] = None
    alternatives: tuple[str, ...] = ()

    @property
    def words(self) -> list[str]:
        """Surface words of the phrase (tashkeel kept)."""
        return self.arabic.split()


@dataclass(frozen=True)
class CollocationExercise:
    id: str
    type: CollocationExerciseType
    collocation_id: str
    prompt: str
    answer: str
    item_ids: tuple[str, ...]
    prompt_en: Optional[str] = None
    options: Optional[tuple[str, ...]] = None


@dataclass(frozen=True)
class CollocationMastery:
    """
    Phrase-level mastery, a single scalar strength.

    can_produce is sticky: once produced correctly it stays True.
    """
    collocation_id: str
    strength: int = 0
    times_correct: int = 0
    times_incorrect: int = 0
    can_produce: bool = False
    last_practiced: Optional[datetime] = None


@dataclass(frozen=True)
class AnswerCheck:
    is_correct: bool
    feedback: Optional[str] = None


@dataclass(frozen=True)
class ExerciseSource:
    """Minimal view of a lesson exercise used for collocation extraction."""
    id: str
    answer: str
    item_ids: tuple[str, ...] = field(default_factory=tuple)
    type: Optional[str] = None
