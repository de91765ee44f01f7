"""
Collocation exercise generation.

Production exercises (complete, translate) and a recognition MCQ
(choose) built from a single collocation.
"""

from __future__ import annotations

from typing import Optional, Sequence

from madina.collocations.types import (
    Collocation,
    CollocationExercise,
    CollocationExerciseType,
)
from madina.shuffle import Shuffle, fisher_yates_shuffle


BLANK = "___"
MAX_DISTRACTORS = 3


def _split_prompt(words: list[str], hide_first: bool) -> tuple[str, str]:
    """Return (prompt, answer) with either the first or the trailing words blanked."""
    if hide_first:
        return f"{BLANK} {' '.join(words[1:])}", words[0]
    return f"{words[0]} {BLANK}", " ".join(words[1:])


def generate_complete_exercise(
    collocation: Collocation,
    hide_first: bool = False
) -> CollocationExercise:
    """
    "Complete the collocation": show one part, learner supplies the rest.

    Single-word collocations fall back to a fully blank prompt.
    """
    words = collocation.words
    if len(words) < 2:
        return CollocationExercise(
            id=f"ex-{collocation.id}-complete",
            type=CollocationExerciseType.COMPLETE,
            collocation_id=collocation.id,
            prompt=BLANK,
            prompt_en=collocation.english,
            answer=collocation.arabic,
            item_ids=collocation.word_ids,
        )

    prompt, answer = _split_prompt(words, hide_first)
    return CollocationExercise(
        id=f"ex-{collocation.id}-complete-{'first' if hide_first else 'last'}",
        type=CollocationExerciseType.COMPLETE,
        collocation_id=collocation.id,
        prompt=prompt,
        prompt_en=collocation.english,
        answer=answer,
        item_ids=collocation.word_ids,
    )


def generate_translate_exercise(collocation: Collocation) -> CollocationExercise:
    """English prompt, whole Arabic phrase as the answer."""
    return CollocationExercise(
        id=f"ex-{collocation.id}-translate",
        type=CollocationExerciseType.TRANSLATE,
        collocation_id=collocation.id,
        prompt=collocation.english,
        answer=collocation.arabic,
        item_ids=collocation.word_ids,
    )


def generate_choose_exercise(
    collocation: Collocation,
    distractors: Sequence[str],
    hide_first: bool = False,
    shuffle: Optional[Shuffle] = None
) -> CollocationExercise:
    """
    Multiple choice: which word completes this phrase?

    Args:
        collocation: Target collocation (at least two words)
        distractors: Wrong options; only the first three are used
        hide_first: Blank the first word instead of the trailing words
        shuffle: Option shuffler (defaults to Fisher-Yates)

    Returns:
        Exercise whose options are the answer plus up to 3 distractors

    Raises:
        ValueError: If the collocation has fewer than two words
    """
    words = collocation.words
    if len(words) < 2:
        raise ValueError(
            f"Collocation {collocation.id!r} must have at least 2 words "
            f"for a multiple-choice exercise"
        )

    shuffle = shuffle or fisher_yates_shuffle
    prompt, answer = _split_prompt(words, hide_first)
    options = shuffle([answer, *list(distractors)[:MAX_DISTRACTORS]])

    return CollocationExercise(
        id=f"ex-{collocation.id}-choose-{'first' if hide_first else 'last'}",
        type=CollocationExerciseType.CHOOSE,
        collocation_id=collocation.id,
        prompt=prompt,
        prompt_en=collocation.english,
        answer=answer,
        item_ids=collocation.word_ids,
        options=tuple(options),
    )


def generate_collocation_exercises(
    collocation: Collocation,
    distractors: Sequence[str] = (),
    shuffle: Optional[Shuffle] = None
) -> list[CollocationExercise]:
    """
    Build the standard exercise set for a collocation.

    Always two "complete" variants; a translate exercise when an English
    gloss exists; an MCQ when at least three distractors are available
    and the phrase has more than one word.
    """
    exercises = [
        generate_complete_exercise(collocation, hide_first=False),
        generate_complete_exercise(collocation, hide_first=True),
    ]
    if collocation.english:
        exercises.append(generate_translate_exercise(collocation))
    if len(distractors) >= MAX_DISTRACTORS and len(collocation.words) >= 2:
        exercises.append(
            generate_choose_exercise(collocation, distractors, hide_first=False, shuffle=shuffle)
        )
    return exercises
