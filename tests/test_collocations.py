from collections import Counter
from datetime import timedelta

import pytest

from madina.collocations import (
    Collocation,
    CollocationCatalog,
    CollocationExerciseType,
    CollocationMastery,
    CollocationType,
    check_collocation_answer,
    collocation_from_dict,
    collocation_type_description,
    detect_collocation_type,
    extract_collocations_from_exercises,
    generate_choose_exercise,
    generate_collocation_exercises,
    generate_complete_exercise,
    generate_translate_exercise,
    select_collocations_for_practice,
    update_collocation_mastery,
)
from madina.collocations.mastery import WORD_ORDER_FEEDBACK
from madina.shuffle import fisher_yates_shuffle, seed_default_shuffle, seeded_shuffle

from conftest import identity_shuffle


THIS_NEW_BOOK = Collocation(
    id="c1",
    type=CollocationType.DEMONSTRATIVE_NOUN,
    arabic="هَذَا الْكِتَابُ الْجَدِيدُ",
    english="this new book",
    word_ids=("w1", "w2", "w3"),
    lesson_id="L1",
)
DISTRACTORS = ["الْقَلَمُ", "الْبَيْتُ", "الْبَابُ", "الْوَلَدُ"]


def make_collocation(collocation_id, word_ids, lesson_id="L1"):
    return Collocation(
        id=collocation_id,
        type=CollocationType.NOUN_ADJECTIVE,
        arabic="بَيْتٌ كَبِيرٌ",
        english="a big house",
        word_ids=tuple(word_ids),
        lesson_id=lesson_id,
    )


class TestDetection:
    @pytest.mark.parametrize("phrase,expected", [
        ("هَذَا كِتَابٌ", CollocationType.DEMONSTRATIVE_NOUN),
        ("تِلْكَ السَّيَّارَةُ", CollocationType.DEMONSTRATIVE_NOUN),
        ("مَنْ هَذَا", CollocationType.QUESTION_ANSWER),
        ("مِنَ الْمَدْرَسَةِ", CollocationType.PREPOSITION_NOUN),
        ("فِي الْبَيْتِ", CollocationType.PREPOSITION_NOUN),
        ("أَيْنَ الْكِتَابُ", CollocationType.QUESTION_ANSWER),
        ("لِلْبَيْتِ الْكَبِيرِ", CollocationType.PREPOSITION_NOUN),
        ("بَيْتٌ كَبِيرٌ", CollocationType.NOUN_ADJECTIVE),
        ("بَيْتٌ كَبِيرٌ جِدًّا", None),
        ("كِتَابٌ", None),
        ("", None),
    ])
    def test_detect_collocation_type(self, phrase, expected):
        assert detect_collocation_type(phrase) == expected

    def test_extract_from_exercises(self):
        exercises = [
            {"id": "e1", "answer": "هَذَا كِتَابٌ", "itemIds": ["w1", "w2"]},
            {"id": "e2", "answer": "هذا كتاب", "itemIds": ["w1", "w2"]},
            {"id": "e3", "answer": "كِتَابٌ"},
            {"id": "e4", "answer": "فِي الْبَيْتِ", "item_ids": ["w3", "w4"]},
            {"id": "e5", "answer": "ذَهَبَ الْوَلَدُ إِلَى الْمَدْرَسَةِ صَبَاحًا"},
        ]
        collocations = extract_collocations_from_exercises(exercises, "L1")

        assert [c.id for c in collocations] == ["coll-L1-1", "coll-L1-2"]
        assert collocations[0].type == CollocationType.DEMONSTRATIVE_NOUN
        assert collocations[0].word_ids == ("w1", "w2")
        assert collocations[1].type == CollocationType.PREPOSITION_NOUN
        assert collocations[1].lesson_id == "L1"


class TestExercises:
    def test_complete_hides_last_by_default(self):
        exercise = generate_complete_exercise(THIS_NEW_BOOK)
        assert exercise.id == "ex-c1-complete-last"
        assert exercise.type == CollocationExerciseType.COMPLETE
        assert exercise.prompt == "هَذَا ___"
        assert exercise.answer == "الْكِتَابُ الْجَدِيدُ"
        assert exercise.prompt_en == "this new book"
        assert exercise.item_ids == ("w1", "w2", "w3")

    def test_complete_hide_first_variant(self):
        exercise = generate_complete_exercise(THIS_NEW_BOOK, hide_first=True)
        assert exercise.id == "ex-c1-complete-first"
        assert exercise.prompt == "___ الْكِتَابُ الْجَدِيدُ"
        assert exercise.answer == "هَذَا"

    def test_translate(self):
        exercise = generate_translate_exercise(THIS_NEW_BOOK)
        assert exercise.prompt == "this new book"
        assert exercise.answer == THIS_NEW_BOOK.arabic

    def test_choose_uses_at_most_three_distractors(self):
        exercise = generate_choose_exercise(THIS_NEW_BOOK, DISTRACTORS, shuffle=identity_shuffle)
        assert exercise.type == CollocationExerciseType.CHOOSE
        assert exercise.options == ("الْكِتَابُ الْجَدِيدُ", *DISTRACTORS[:3])
        assert exercise.answer in exercise.options

    def test_choose_rejects_single_word(self):
        single = Collocation("c9", CollocationType.IDIOMATIC, "مَرْحَبًا", "hello", ("w9",), "L1")
        with pytest.raises(ValueError):
            generate_choose_exercise(single, DISTRACTORS)

    def test_choose_options_are_uniformly_shuffled(self):
        shuffle = seeded_shuffle(1234)
        positions = Counter()
        orders = set()
        trials = 4000
        for _ in range(trials):
            exercise = generate_choose_exercise(THIS_NEW_BOOK, DISTRACTORS, shuffle=shuffle)
            positions[exercise.options.index(exercise.answer)] += 1
            orders.add(exercise.options)

        assert len(orders) > 1
        for position in range(4):
            # Expected 1000 per slot; the bound is more than 5 standard deviations
            assert 850 < positions[position] < 1150

    def test_fisher_yates_returns_new_list(self):
        items = [1, 2, 3, 4]
        shuffled = fisher_yates_shuffle(items)
        assert sorted(shuffled) == items
        assert shuffled is not items
        assert items == [1, 2, 3, 4]

    def test_default_shuffle_can_be_reseeded(self):
        items = list(range(10))
        seed_default_shuffle(42)
        first = fisher_yates_shuffle(items)
        seed_default_shuffle(42)
        assert fisher_yates_shuffle(items) == first
        seed_default_shuffle(None)

    def test_exercise_set(self):
        exercises = generate_collocation_exercises(THIS_NEW_BOOK, DISTRACTORS, shuffle=identity_shuffle)
        assert [e.type for e in exercises] == [
            CollocationExerciseType.COMPLETE,
            CollocationExerciseType.COMPLETE,
            CollocationExerciseType.TRANSLATE,
            CollocationExerciseType.CHOOSE,
        ]

    def test_exercise_set_without_gloss_or_distractors(self):
        bare = Collocation("c2", CollocationType.NOUN_ADJECTIVE, "بَيْتٌ كَبِيرٌ", "", ("w1", "w2"), "L1")
        exercises = generate_collocation_exercises(bare, DISTRACTORS[:2])
        assert [e.type for e in exercises] == [CollocationExerciseType.COMPLETE] * 2

    def test_single_word_set_skips_multiple_choice(self):
        single = Collocation("c9", CollocationType.IDIOMATIC, "مَرْحَبًا", "hello", ("w9",), "L1")
        exercises = generate_collocation_exercises(single, DISTRACTORS)
        assert CollocationExerciseType.CHOOSE not in [e.type for e in exercises]
        assert exercises[0].prompt == "___"


class TestAnswerChecking:
    def test_word_order(self):
        result = check_collocation_answer("كِتَابٌ هَذَا", "هَذَا كِتَابٌ")
        assert not result.is_correct
        assert result.feedback == WORD_ORDER_FEEDBACK

    def test_ignores_tashkeel(self):
        assert check_collocation_answer("هذا كتاب", "هَذَا كِتَابٌ").is_correct

    def test_partial(self):
        result = check_collocation_answer("هَذَا قَلَمٌ", "هَذَا كِتَابٌ")
        assert not result.is_correct
        assert result.feedback == "You got 1 of 2 words correct."

    def test_empty_answer_is_incorrect_without_feedback(self):
        result = check_collocation_answer("  ", "هَذَا كِتَابٌ")
        assert not result.is_correct
        assert result.feedback is None

    def test_wholly_wrong(self):
        result = check_collocation_answer("بَيْتٌ كَبِيرٌ", "هَذَا كِتَابٌ")
        assert result.feedback is None


class TestMastery:
    def test_strength_and_counters(self, now):
        mastery = update_collocation_mastery(CollocationMastery("c1"), True, False, now)
        assert mastery.strength == 12
        assert mastery.times_correct == 1
        assert not mastery.can_produce
        assert mastery.last_practiced == now

        mastery = update_collocation_mastery(mastery, False, True, now)
        assert mastery.strength == 0
        assert mastery.times_incorrect == 1

    def test_can_produce_is_sticky(self, now):
        mastery = update_collocation_mastery(CollocationMastery("c1", strength=50), True, True, now)
        assert mastery.can_produce
        later = now + timedelta(days=1)
        mastery = update_collocation_mastery(mastery, False, True, later)
        assert mastery.can_produce
        assert mastery.strength == 47

    def test_strength_is_capped(self, now):
        mastery = update_collocation_mastery(CollocationMastery("c1", strength=95), True, True, now)
        assert mastery.strength == 100


class TestSelection:
    def test_weak_component_excludes_collocation(self):
        strong = make_collocation("strong", ["a", "b"])
        weak = make_collocation("weak", ["a", "c"])
        unknown = make_collocation("unknown", ["a", "zzz"])
        strengths = {"a": 90, "b": 20, "c": 19}

        selected = select_collocations_for_practice(
            [strong, weak, unknown], strengths, shuffle=identity_shuffle
        )
        assert [c.id for c in selected] == ["strong"]

    def test_limit(self):
        collocations = [make_collocation(f"c{i}", ["a"]) for i in range(5)]
        selected = select_collocations_for_practice(collocations, {"a": 50}, limit=3, shuffle=identity_shuffle)
        assert [c.id for c in selected] == ["c0", "c1", "c2"]


class TestCatalog:
    def test_from_dicts_detects_missing_type(self):
        catalog = CollocationCatalog.from_dicts([
            {"id": "c1", "arabic": "فِي الْبَيْتِ", "wordIds": ["w1", "w2"], "lessonId": "L1"},
            {"id": "c2", "arabic": "بَيْتٌ كَبِيرٌ", "type": "noun_adjective", "word_ids": ["w2", "w3"], "lesson_id": "L2"},
        ])
        assert len(catalog) == 2
        assert catalog.get("c1").type == CollocationType.PREPOSITION_NOUN
        assert [c.id for c in catalog.for_word("w2")] == ["c1", "c2"]
        assert [c.id for c in catalog.for_lesson("L2")] == ["c2"]
        assert "c1" in catalog

    def test_replace_and_remove(self):
        catalog = CollocationCatalog([make_collocation("c1", ["a", "b"])])
        catalog.add(make_collocation("c1", ["a"], lesson_id="L2"))
        assert catalog.for_word("b") == []
        assert [c.id for c in catalog.for_lesson("L2")] == ["c1"]

        catalog.remove("c1")
        assert len(catalog) == 0
        assert catalog.get("c1") is None

    def test_invalid_entry_raises(self):
        with pytest.raises(ValueError):
            collocation_from_dict({"arabic": "فِي الْبَيْتِ"})

    def test_add_from_exercises(self):
        catalog = CollocationCatalog()
        added = catalog.add_from_exercises([{"id": "e1", "answer": "هَذَا كِتَابٌ", "itemIds": ["w1", "w2"]}], "L3")
        assert [c.id for c in catalog.for_lesson("L3")] == [c.id for c in added] == ["coll-L3-1"]


def test_type_descriptions():
    assert collocation_type_description("noun_adjective") == 'Noun + Adjective (e.g., "big house")'
    assert collocation_type_description(CollocationType.POSSESSIVE, arabic=True) == "إضافة"
    assert collocation_type_description("unknown") == "Word Combination"
