"""
Collocations - phrase-level learning

Detect collocation patterns, generate phrase exercises, score answers and
track a single strength per collocation, gated on component word strength.
"""

from madina.collocations.catalog import CollocationCatalog, collocation_from_dict
from madina.collocations.detection import (
    detect_collocation_type,
    extract_collocations_from_exercises,
)
from madina.collocations.exercises import (
    generate_choose_exercise,
    generate_collocation_exercises,
    generate_complete_exercise,
    generate_translate_exercise,
)
from madina.collocations.mastery import (
    MIN_WORD_STRENGTH,
    calculate_collocation_strength,
    check_collocation_answer,
    collocation_type_description,
    collocations_for_lesson,
    collocations_for_word,
    new_collocation_mastery,
    select_collocations_for_practice,
    update_collocation_mastery,
)
from madina.collocations.types import (
    AnswerCheck,
    Collocation,
    CollocationExercise,
    CollocationExerciseType,
    CollocationMastery,
    CollocationType,
    ExerciseSource,
)


__all__ = [
    "CollocationCatalog",
    "collocation_from_dict",
    "detect_collocation_type",
    "extract_collocations_from_exercises",
    "generate_choose_exercise",
    "generate_collocation_exercises",
    "generate_complete_exercise",
    "generate_translate_exercise",
    "MIN_WORD_STRENGTH",
    "calculate_collocation_strength",
    "check_collocation_answer",
    "collocation_type_description",
    "collocations_for_lesson",
    "collocations_for_word",
    "new_collocation_mastery",
    "select_collocations_for_practice",
    "update_collocation_mastery",
    "AnswerCheck",
    "Collocation",
    "CollocationExercise",
    "CollocationExerciseType",
    "CollocationMastery",
    "CollocationType",
    "ExerciseSource",
]
