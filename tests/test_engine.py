import logging
from datetime import timedelta

import pytest

from madina.arabic import ErrorCategory
from madina.collocations import Collocation, CollocationCatalog, CollocationType
from madina.config import Settings
from madina.difficulty import DifficultyLevel
from madina.encounters import SourceType
from madina.engine import MasteryEngine
from madina.exercise_types import Direction, ExerciseType
from madina.schemas import MasteryRecordDoc
from madina.storage import (
    COLLOCATIONS_NAMESPACE,
    LOGS_NAMESPACE,
    MASTERY_NAMESPACE,
    SCHEMA_VERSION,
    SqlKeyValueStore,
    wrap,
)

from conftest import identity_shuffle


LEGACY_AT_50 = {"strength": 50, "lastPracticed": "2024-03-01T12:00:00Z", "timesCorrect": 3}
LEGACY_AT_10 = {"strength": 10, "lastPracticed": "2024-03-01T12:00:00Z"}


def collocation(collocation_id, word_ids):
    return Collocation(
        id=collocation_id,
        type=CollocationType.NOUN_ADJECTIVE,
        arabic="بَيْتٌ كَبِيرٌ",
        english="a big house",
        word_ids=tuple(word_ids),
        lesson_id="L1",
    )


class TestEncounters:
    def test_record_encounter_persists(self, engine, store):
        engine.record_encounter("w1", "reading")
        log = engine.record_encounter("w1", SourceType.LISTENING)

        assert log.total == 2
        assert engine.get_mastery("w1").encounters.by_type[SourceType.READING] == 1
        assert store.get(MASTERY_NAMESPACE, "w1")["schemaVersion"] == SCHEMA_VERSION

    def test_unknown_source_type_stores_nothing(self, engine, store):
        with pytest.raises(ValueError):
            engine.record_encounter("w1", "podcast")
        assert store.keys(MASTERY_NAMESPACE) == []


class TestAnswers:
    def test_production_practice_reaches_free_recall(self, engine):
        strengths = []
        for _ in range(7):
            ds = engine.record_answer("w1", "production", True, DifficultyLevel.FREE_RECALL)
            strengths.append(ds.production_strength)

        assert strengths[4] == 75
        assert strengths[-1] == 100
        assert ds.production_level == DifficultyLevel.FREE_RECALL

        record = engine.get_mastery("w1")
        assert record.directional.production_strength == 100
        assert record.strength == 70
        assert record.times_correct == 7

    def test_level_defaults_to_stored_level(self, engine, clock):
        ds = engine.record_answer("w1", Direction.RECOGNITION, True)
        assert ds.recognition_strength == 5
        assert ds.last_recognition_practice == clock()

    def test_promotion_and_regression_persist(self, engine):
        for _ in range(8):
            engine.record_answer("w1", "recognition", True)
        assert engine.get_mastery("w1").directional.recognition_level == DifficultyLevel.CUED_RECALL

        engine.record_answer("w1", "recognition", False)
        ds = engine.get_mastery("w1").directional
        assert ds.recognition_strength == 25
        assert ds.recognition_level == DifficultyLevel.RECOGNITION
        assert engine.get_mastery("w1").times_incorrect == 1

    def test_unknown_direction_raises(self, engine):
        with pytest.raises(ValueError):
            engine.record_answer("w1", "sideways", True)


class TestReviews:
    def test_review_schedule(self, engine, clock):
        state = engine.record_review("w1", is_correct=True)
        assert (state.interval, state.repetitions) == (1, 1)
        assert not engine.is_due("w1")

        clock.advance(timedelta(days=1))
        assert engine.is_due("w1")
        state = engine.record_review("w1", quality=4, source_type="flashcard")
        assert state.interval == 6

        record = engine.get_mastery("w1")
        assert record.times_correct == 2
        assert record.encounters.total == 2
        assert record.encounters.by_type[SourceType.FLASHCARD] == 1
        assert record.last_practiced == clock()

    def test_failed_review_counts_incorrect(self, engine):
        engine.record_review("w1", quality=1)
        assert engine.get_mastery("w1").times_incorrect == 1

    def test_review_needs_an_outcome(self, engine):
        with pytest.raises(ValueError):
            engine.record_review("w1")

    def test_unknown_items_are_due(self, engine):
        assert engine.is_due("never-seen")

    def test_due_items_most_urgent_first(self, engine, clock):
        engine.record_review("overdue", is_correct=True)
        clock.advance(timedelta(days=6))
        engine.record_review("fresh", is_correct=True)

        assert engine.get_due_items(["fresh", "new", "overdue"]) == ["overdue", "new"]

    def test_reviews_move_legacy_strength(self, engine):
        for _ in range(3):
            engine.record_review("w1", is_correct=True)
        assert engine.get_mastery("w1").strength == 30

        engine.record_review("w1", quality=2)
        assert engine.get_mastery("w1").strength == 10
        engine.record_review("w1", is_correct=False)
        assert engine.get_mastery("w1").strength == 0

    def test_review_summary(self, engine):
        engine.record_review("w1", is_correct=True)
        engine.record_encounter("w2", "reading")
        summary = engine.review_summary()
        assert summary["due_today"] == 1
        assert summary["upcoming_week"] == 1


class TestMigration:
    def test_legacy_record_migrates_on_read(self, engine, store, caplog):
        store.put(MASTERY_NAMESPACE, "old", LEGACY_AT_50)
        with caplog.at_level(logging.INFO, logger="madina.engine"):
            record = engine.get_mastery("old")

        assert record.review.interval == 3
        assert record.strength == 50
        assert record.times_correct == 3
        assert "Migrated legacy mastery for old" in caplog.text
        assert store.get(MASTERY_NAMESPACE, "old")["schemaVersion"] == SCHEMA_VERSION

    def test_migrate_if_needed_ignores_current_records(self, engine):
        assert engine.migrate_if_needed("w1", LEGACY_AT_50) is not None
        current = engine.store.get(MASTERY_NAMESPACE, "w1")
        assert engine.migrate_if_needed("w1", current) is None

    def test_import_and_migrate_all(self, engine, store):
        current = engine.get_mastery("b")
        records = {
            "a": LEGACY_AT_50,
            "b": wrap(MasteryRecordDoc.from_record(current).model_dump(mode="json")),
            "c": "junk",
        }
        assert engine.import_records(records) == 2
        assert store.keys(MASTERY_NAMESPACE) == ["a", "b"]

        store.put(MASTERY_NAMESPACE, "d", LEGACY_AT_10)
        assert engine.migrate_all() == 1
        assert engine.migrate_all() == 0

    def test_import_skips_envelopes_that_fail_validation(self, engine, store, caplog):
        good = wrap(MasteryRecordDoc.from_record(engine.get_mastery("other")).model_dump(mode="json"))
        records = {
            "bad": {"schemaVersion": SCHEMA_VERSION, "payload": {"item_id": "bad"}},
            "good": good,
        }
        with caplog.at_level(logging.WARNING):
            assert engine.import_records(records) == 1

        assert store.keys(MASTERY_NAMESPACE) == ["good"]
        assert engine.get_mastery("good").item_id == "good"
        assert "Skipping invalid record for bad" in caplog.text

    def test_invalid_payload_falls_back_to_default(self, engine, store, caplog):
        store.put(MASTERY_NAMESPACE, "bad", {"schemaVersion": SCHEMA_VERSION, "payload": {"item_id": "bad"}})
        with caplog.at_level(logging.WARNING):
            record = engine.get_mastery("bad")
        assert record.review.repetitions == 0
        assert engine.is_due("bad")
        assert "Invalid mastery record" in caplog.text

    def test_newer_schema_version_reads_as_missing(self, engine, store):
        store.put(MASTERY_NAMESPACE, "future", {"schemaVersion": SCHEMA_VERSION + 1, "payload": {}})
        assert not engine.has_mastery("future")


class TestSelection:
    def test_new_item_gets_recognition_exercise(self, engine):
        selection = engine.get_difficulty_selection("w1", ["meaning-to-word", "word-to-meaning"])
        assert selection.exercise_type == ExerciseType.WORD_TO_MEANING
        assert selection.use_word_bank

    def test_no_candidates(self, engine):
        assert engine.get_difficulty_selection("w1", []) is None

    def test_needs_practice(self, engine):
        assert engine.needs_practice("w1", "recognition")
        assert not engine.needs_practice("w1", "production")

    def test_prioritize_items(self, engine):
        for _ in range(3):
            engine.record_answer("practised", "recognition", True)
        engine.record_encounter("unseen", "reading")
        assert engine.prioritize_items() == ["unseen", "practised"]


class TestLogs:
    def test_confidence_is_clamped_and_logged(self, engine):
        record = engine.record_confidence(9, True)
        assert record.confidence_level == 3
        assert len(engine.calibration_records()) == 1

    def test_calibration_stats(self, engine):
        for i in range(10):
            engine.record_confidence(3, i < 9)
        stats = engine.get_calibration_stats()
        assert stats.total_ratings == 10
        assert stats.tendency == "well-calibrated"
        assert engine.get_calibration_trend() == "insufficient-data"

    def test_logs_are_capped_oldest_first(self, store, clock):
        settings = Settings(
            database_url="sqlite://",
            test_mode=True,
            log_level="WARNING",
            calibration_log_cap=5,
            error_log_cap=3,
        )
        engine = MasteryEngine(store, clock=clock, settings=settings)
        start = clock()
        for _ in range(8):
            engine.record_confidence(2, True)
            engine.record_error("typo", "w1")
            clock.advance(timedelta(minutes=1))

        calibration = engine.calibration_records()
        assert len(calibration) == 5
        assert calibration[0].timestamp == start + timedelta(minutes=3)
        assert len(engine.error_records()) == 3

    def test_weaknesses(self, engine):
        for _ in range(3):
            engine.record_error(ErrorCategory.LETTER_CONFUSION, "w1", "مدرسة", "مدرسه")
        engine.record_error("typo", "w2")

        top = engine.get_top_weaknesses()
        assert [w.category for w in top] == [ErrorCategory.LETTER_CONFUSION]
        assert top[0].examples[0].actual == "مدرسه"
        assert engine.get_weakness_report().total_errors == 4

    def test_unknown_error_category_raises(self, engine, store):
        with pytest.raises(ValueError):
            engine.record_error("grammar", "w1")
        assert store.keys(LOGS_NAMESPACE) == []

    def test_trend_under_a_fixed_clock_follows_logging_order(self, engine):
        for _ in range(20):
            engine.record_confidence(3, True)
        for _ in range(20):
            engine.record_confidence(3, False)
        assert engine.get_calibration_trend() == "declining"

    def test_corrupted_log_starts_empty(self, engine, store):
        store.put(LOGS_NAMESPACE, "calibration", wrap({"records": [{"confidence_level": 7}]}))
        assert engine.calibration_records() == []
        engine.record_confidence(1, False)
        assert len(engine.calibration_records()) == 1


class TestCollocations:
    def test_answers_persist(self, engine, store):
        engine.record_collocation_answer("c1", True, True)
        mastery = engine.record_collocation_answer("c1", False, False)

        assert mastery.strength == 0
        assert mastery.can_produce
        assert engine.get_collocation_mastery("c1") == mastery
        assert store.keys(COLLOCATIONS_NAMESPACE) == ["c1"]

    def test_unknown_collocation_has_default_mastery(self, engine):
        mastery = engine.get_collocation_mastery("c9")
        assert mastery.strength == 0
        assert not mastery.can_produce

    def test_select_collocations_uses_word_strengths(self, engine):
        engine.import_records({"w1": LEGACY_AT_50, "w2": LEGACY_AT_10})
        candidates = [collocation("ok", ["w1"]), collocation("weak", ["w1", "w2"])]
        assert [c.id for c in engine.select_collocations(candidates)] == ["ok"]

    def test_reviewed_words_make_collocations_eligible(self, engine):
        for _ in range(5):
            engine.record_review("w1", is_correct=True)
            engine.record_review("w2", is_correct=True)

        assert engine.get_mastery("w1").strength == 50
        selected = engine.select_collocations([collocation("both", ["w1", "w2"])])
        assert [c.id for c in selected] == ["both"]

    def test_select_collocations_defaults_to_catalog(self, store, clock):
        catalog = CollocationCatalog([collocation("ok", ["w1"]), collocation("unknown", ["w9"])])
        engine = MasteryEngine(store, clock=clock, shuffle=identity_shuffle, catalog=catalog)
        engine.import_records({"w1": LEGACY_AT_50})
        assert [c.id for c in engine.select_collocations(limit=5)] == ["ok"]


def test_reset_clears_everything(engine, store):
    engine.record_answer("w1", "recognition", True)
    engine.record_collocation_answer("c1", True, False)
    engine.record_confidence(2, True)

    engine.reset()

    for namespace in (MASTERY_NAMESPACE, COLLOCATIONS_NAMESPACE, LOGS_NAMESPACE):
        assert store.keys(namespace) == []
    assert engine.get_mastery("w1").directional.recognition_strength == 0


def test_state_survives_a_new_engine_on_the_same_database(clock):
    store = SqlKeyValueStore("sqlite://")
    MasteryEngine(store, clock=clock).record_answer("w1", "production", True, "cued_recall")

    reopened = MasteryEngine(store, clock=clock)
    assert reopened.get_mastery("w1").directional.production_strength == 10
    store.dispose()
