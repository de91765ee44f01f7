"""
Mastery Engine - stateful entry points over the pure algorithms

The engine owns the key-value store and is the only thing that mutates
persisted state:
- Per-item mastery records (SM-2, directional strength, encounters)
- Per-collocation mastery
- Capped calibration and error logs

Every transition is written to the store immediately. Records written
before SM-2 existed are migrated the first time they are read.

Usage:
    from madina import MasteryEngine
    from madina.storage import SqlKeyValueStore

    engine = MasteryEngine(SqlKeyValueStore())
    engine.record_answer("w1", "production", is_correct=True)
    engine.get_due_items(["w1", "w2"])
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from pydantic import ValidationError

from madina.analytics.calibration import (
    calculate_calibration_stats,
    calibration_trend,
    coerce_confidence_level,
)
from madina.analytics.types import (
    CalibrationRecord,
    CalibrationStats,
    CalibrationTrend,
    ErrorRecord,
    Weakness,
    WeaknessReport,
)
from madina.analytics.weakness import analyze_weaknesses
from madina.arabic import ErrorCategory, coerce_error_category
from madina.collocations.catalog import CollocationCatalog
from madina.collocations.mastery import (
    DEFAULT_PRACTICE_LIMIT,
    new_collocation_mastery,
    select_collocations_for_practice,
    update_collocation_mastery,
)
from madina.collocations.types import Collocation, CollocationMastery
from madina.config import DEFAULT_LOG_CAP, Settings
from madina.difficulty.constants import DifficultyLevel, coerce_level
from madina.difficulty.directional import DirectionalStrength, update_directional_strength
from madina.difficulty.selection import (
    ExerciseTypeSelection,
    needs_practice,
    prioritize_for_practice,
    select_exercise_type,
)
from madina.encounters import EncounterLog, SourceType, add_encounter, coerce_source_type
from madina.exercise_types import Direction, ExerciseType, coerce_direction
from madina.mastery import MasteryRecord, new_mastery_record, with_directional
from madina.migration import migrate_legacy_mastery, needs_migration
from madina.schemas import (
    CalibrationLogDoc,
    CalibrationRecordDoc,
    CollocationMasteryDoc,
    ErrorLogDoc,
    ErrorRecordDoc,
    MasteryRecordDoc,
)
from madina.shuffle import Shuffle, fisher_yates_shuffle
from madina.sm2 import scheduler
from madina.sm2.review_state import ReviewState, utc_now
from madina.strength import calculate_strength_change
from madina.storage.base import (
    COLLOCATIONS_NAMESPACE,
    LOGS_NAMESPACE,
    MASTERY_NAMESPACE,
    NAMESPACES,
    KeyValueStore,
)
from madina.storage.envelope import unwrap, wrap


logger = logging.getLogger(__name__)

CALIBRATION_LOG_KEY = "calibration"
ERROR_LOG_KEY = "errors"


class MasteryEngine:
    """
    Façade over the mastery store.

    Args:
        store: Key-value store holding all persisted state
        clock: Callable returning the current UTC time (defaults to utc_now)
        shuffle: Shuffler used for every random pick (defaults to Fisher-Yates)
        settings: Resolved settings; only the log caps are read here
        catalog: Collocations known to this engine (defaults to an empty catalog)
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Optional[Callable[[], datetime]] = None,
        shuffle: Optional[Shuffle] = None,
        settings: Optional[Settings] = None,
        catalog: Optional[CollocationCatalog] = None
    ):
        self.store = store
        self.clock = clock or utc_now
        self.shuffle = shuffle or fisher_yates_shuffle
        self.settings = settings
        self.calibration_log_cap = settings.calibration_log_cap if settings else DEFAULT_LOG_CAP
        self.error_log_cap = settings.error_log_cap if settings else DEFAULT_LOG_CAP
        self.catalog = catalog if catalog is not None else CollocationCatalog()

    def now(self) -> datetime:
        return self.clock()

    # ---- Mastery records ----

    def _load_mastery(self, item_id: str) -> Optional[MasteryRecord]:
        raw = self.store.get(MASTERY_NAMESPACE, item_id)
        if raw is None:
            return None

        migrated = self.migrate_if_needed(item_id, raw)
        if migrated is not None:
            return migrated

        payload = unwrap(raw)
        if payload is None:
            return None
        try:
            return MasteryRecordDoc.model_validate(payload).to_record()
        except ValidationError as e:
            logger.warning("Invalid mastery record for %s, using defaults: %s", item_id, e)
            return None

    def _save_mastery(self, record: MasteryRecord) -> None:
        doc = MasteryRecordDoc.from_record(record)
        self.store.put(MASTERY_NAMESPACE, record.item_id, wrap(doc.model_dump(mode="json")))

    def get_mastery(self, item_id: str) -> MasteryRecord:
        """
        Current record for an item.

        Unknown items get a fresh default record (due immediately); it is
        not written until the first transition.
        """
        record = self._load_mastery(item_id)
        if record is None:
            return new_mastery_record(item_id, self.now())
        return record

    def has_mastery(self, item_id: str) -> bool:
        return self._load_mastery(item_id) is not None

    def item_ids(self) -> list[str]:
        return self.store.keys(MASTERY_NAMESPACE)

    def migrate_if_needed(self, item_id: str, raw_record: object) -> Optional[MasteryRecord]:
        """
        Upgrade a legacy record and persist the result.

        Args:
            item_id: Item the record belongs to
            raw_record: Stored value as read from the store (or an export)

        Returns:
            The migrated MasteryRecord, or None if no migration was needed
        """
        if not needs_migration(raw_record):
            return None

        record = migrate_legacy_mastery(raw_record, item_id, self.now())
        self._save_mastery(record)
        logger.info(
            "Migrated legacy mastery for %s (strength %d, next review %s)",
            item_id, record.strength, record.review.next_review_date.isoformat(),
        )
        return record

    def migrate_all(self) -> int:
        """Migrate every legacy record in the store. Returns the count migrated."""
        migrated = 0
        for item_id in self.item_ids():
            raw = self.store.get(MASTERY_NAMESPACE, item_id)
            if self.migrate_if_needed(item_id, raw) is not None:
                migrated += 1
        return migrated

    def import_records(self, records: Mapping[str, Any]) -> int:
        """
        Load an exported {item_id: record} mapping.

        Legacy records are migrated, current envelopes are validated and
        re-stored, anything else is skipped with a warning.

        Returns:
            Number of records written
        """
        written = 0
        for item_id, raw in records.items():
            if self.migrate_if_needed(item_id, raw) is not None:
                written += 1
                continue

            payload = unwrap(raw)
            if payload is None:
                logger.warning("Skipping unrecognised record for %s", item_id)
                continue
            try:
                record = MasteryRecordDoc.model_validate(payload).to_record()
            except ValidationError as e:
                logger.warning("Skipping invalid record for %s: %s", item_id, e)
                continue
            self._save_mastery(replace(record, item_id=item_id))
            written += 1
        return written

    # ---- Transitions ----

    def record_encounter(self, item_id: str, source_type: SourceType | str) -> EncounterLog:
        """
        Count one encounter with an item.

        Raises:
            ValueError: For an unknown source type
        """
        source = coerce_source_type(source_type)
        record = self.get_mastery(item_id)
        encounters = add_encounter(record.encounters, source, self.now())
        self._save_mastery(replace(record, encounters=encounters))
        logger.debug("Encounter %s via %s (total %d)", item_id, source.value, encounters.total)
        return encounters

    def record_answer(
        self,
        item_id: str,
        direction: Direction | str,
        is_correct: bool,
        level: Optional[DifficultyLevel | str] = None
    ) -> DirectionalStrength:
        """
        Apply an exercise result to the item's directional strength.

        Args:
            item_id: Item that was practised
            direction: recognition or production
            is_correct: Whether the answer was correct
            level: Level the exercise was shown at (defaults to the stored
                   level for that direction)

        Returns:
            Updated DirectionalStrength

        Raises:
            ValueError: For an unknown direction or level
        """
        direction = coerce_direction(direction)
        if level is not None:
            level = coerce_level(level)

        now = self.now()
        record = self.get_mastery(item_id)
        old_level = record.directional.level_for(direction)
        directional = update_directional_strength(
            record.directional, direction, is_correct, level, now
        )
        record = replace(
            with_directional(record, directional),
            times_correct=record.times_correct + (1 if is_correct else 0),
            times_incorrect=record.times_incorrect + (0 if is_correct else 1),
            last_practiced=now,
        )
        self._save_mastery(record)

        logger.debug(
            "%s %s %s: strength %d, level %s",
            item_id, direction.value, "correct" if is_correct else "incorrect",
            directional.strength_for(direction), directional.level_for(direction).value,
        )
        if old_level != directional.level_for(direction):
            logger.debug(
                "%s %s level %s -> %s", item_id, direction.value,
                old_level.value, directional.level_for(direction).value,
            )
        return directional

    def record_review(
        self,
        item_id: str,
        quality: Optional[int] = None,
        is_correct: Optional[bool] = None,
        source_type: SourceType | str = SourceType.EXERCISE
    ) -> ReviewState:
        """
        Advance the item's SM-2 schedule.

        Pass either an explicit quality (0-5) or a plain correct/incorrect
        result. The legacy strength (+10/-20), counters and the encounter
        log are updated too.

        Returns:
            New ReviewState

        Raises:
            ValueError: If neither quality nor is_correct is given, or for an
                        unknown source type
        """
        if quality is None:
            if is_correct is None:
                raise ValueError("record_review needs either quality or is_correct")
            quality = scheduler.simple_to_quality(is_correct)
        source = coerce_source_type(source_type)

        now = self.now()
        record = self.get_mastery(item_id)
        review = scheduler.advance(record.review, quality, now)
        passed = review.repetitions > 0

        record = replace(
            record,
            review=review,
            encounters=add_encounter(record.encounters, source, now),
            strength=calculate_strength_change(record.strength, passed),
            times_correct=record.times_correct + (1 if passed else 0),
            times_incorrect=record.times_incorrect + (0 if passed else 1),
            last_practiced=now,
        )
        self._save_mastery(record)
        logger.debug(
            "Review %s q=%s: interval %d, ease %.2f, next %s",
            item_id, quality, review.interval, review.ease_factor,
            review.next_review_date.isoformat(),
        )
        return review

    # ---- Logs ----

    def _load_log(self, key: str, doc_type):
        raw = self.store.get(LOGS_NAMESPACE, key)
        payload = unwrap(raw) if raw is not None else None
        if payload is None:
            return doc_type()
        try:
            return doc_type.model_validate(payload)
        except ValidationError as e:
            logger.warning("Invalid %s log, starting empty: %s", key, e)
            return doc_type()

    def _append_log(self, key: str, doc_type, entry, cap: int) -> None:
        log = self._load_log(key, doc_type)
        records = [*log.records, entry]
        if len(records) > cap:
            logger.debug("Pruning %d oldest %s records", len(records) - cap, key)
            records = records[-cap:]
        self.store.put(LOGS_NAMESPACE, key, wrap(doc_type(records=records).model_dump(mode="json")))

    def calibration_records(self) -> list[CalibrationRecord]:
        return [doc.to_record() for doc in self._load_log(CALIBRATION_LOG_KEY, CalibrationLogDoc).records]

    def error_records(self) -> list[ErrorRecord]:
        return [doc.to_record() for doc in self._load_log(ERROR_LOG_KEY, ErrorLogDoc).records]

    def record_confidence(self, level: int, was_correct: bool) -> CalibrationRecord:
        """Log a confidence rating (1-3; out-of-range values are clamped)."""
        record = CalibrationRecord(
            confidence_level=coerce_confidence_level(level),
            was_correct=bool(was_correct),
            timestamp=self.now(),
        )
        entry = CalibrationRecordDoc(
            confidence_level=record.confidence_level,
            was_correct=record.was_correct,
            timestamp=record.timestamp,
        )
        self._append_log(CALIBRATION_LOG_KEY, CalibrationLogDoc, entry, self.calibration_log_cap)
        return record

    def record_error(
        self,
        category: ErrorCategory | str,
        item_id: str,
        expected: Optional[str] = None,
        actual: Optional[str] = None
    ) -> ErrorRecord:
        """
        Log a classified error.

        Raises:
            ValueError: For an unknown error category
        """
        record = ErrorRecord(
            category=coerce_error_category(category),
            timestamp=self.now(),
            item_id=item_id,
            expected=expected,
            actual=actual,
        )
        entry = ErrorRecordDoc(
            category=record.category,
            timestamp=record.timestamp,
            item_id=record.item_id,
            expected=record.expected,
            actual=record.actual,
        )
        self._append_log(ERROR_LOG_KEY, ErrorLogDoc, entry, self.error_log_cap)
        logger.debug("Error %s on %s", record.category.value, item_id)
        return record

    # ---- Collocations ----

    def get_collocation_mastery(self, collocation_id: str) -> CollocationMastery:
        raw = self.store.get(COLLOCATIONS_NAMESPACE, collocation_id)
        payload = unwrap(raw) if raw is not None else None
        if payload is None:
            return new_collocation_mastery(collocation_id)
        try:
            return CollocationMasteryDoc.model_validate(payload).to_mastery()
        except ValidationError as e:
            logger.warning("Invalid collocation mastery for %s: %s", collocation_id, e)
            return new_collocation_mastery(collocation_id)

    def record_collocation_answer(
        self,
        collocation_id: str,
        is_correct: bool,
        was_production: bool
    ) -> CollocationMastery:
        mastery = update_collocation_mastery(
            self.get_collocation_mastery(collocation_id), is_correct, was_production, self.now()
        )
        doc = CollocationMasteryDoc.from_mastery(mastery)
        self.store.put(COLLOCATIONS_NAMESPACE, collocation_id, wrap(doc.model_dump(mode="json")))
        logger.debug(
            "Collocation %s: strength %d, can_produce %s",
            collocation_id, mastery.strength, mastery.can_produce,
        )
        return mastery

    def word_strengths(self, item_ids: Optional[Iterable[str]] = None) -> dict[str, int]:
        """Legacy combined strength per stored item (all items by default)."""
        ids = self.item_ids() if item_ids is None else item_ids
        strengths = {}
        for item_id in ids:
            record = self._load_mastery(item_id)
            strengths[item_id] = record.strength if record is not None else 0
        return strengths

    def select_collocations(
        self,
        collocations: Optional[Iterable[Collocation]] = None,
        limit: int = DEFAULT_PRACTICE_LIMIT
    ) -> list[Collocation]:
        """
        Collocations whose words are all known well enough, shuffled.

        Candidates default to the engine's catalog.
        """
        collocations = self.catalog.all() if collocations is None else list(collocations)
        word_ids = {word_id for c in collocations for word_id in c.word_ids}
        return select_collocations_for_practice(
            collocations, self.word_strengths(word_ids), limit, self.shuffle
        )

    # ---- Queries ----

    def is_due(self, item_id: str) -> bool:
        """Unknown items are always due."""
        return scheduler.is_due(self.get_mastery(item_id).review, self.now())

    def get_due_items(self, item_ids: Iterable[str]) -> list[str]:
        """Due ids among `item_ids`, most urgent first."""
        now = self.now()
        states = [(item_id, self.get_mastery(item_id).review) for item_id in item_ids]
        due = [(item_id, state) for item_id, state in states if scheduler.is_due(state, now)]
        ordered = scheduler.sort_by_review_priority(due, now, key=lambda pair: pair[1])
        return [item_id for item_id, _ in ordered]

    def review_summary(self) -> dict[str, int]:
        states = [self.get_mastery(item_id).review for item_id in self.item_ids()]
        return scheduler.review_stats(states, self.now())

    def get_difficulty_selection(
        self,
        item_id: str,
        candidate_types: Sequence[ExerciseType | str],
        preferred_direction: Optional[Direction | str] = None
    ) -> Optional[ExerciseTypeSelection]:
        """Exercise type and presentation for the item's next exercise."""
        return select_exercise_type(
            candidate_types,
            self.get_mastery(item_id).directional,
            preferred_direction,
            choose=lambda available: self.shuffle(available)[0],
        )

    def needs_practice(self, item_id: str, direction: Direction | str) -> bool:
        return needs_practice(self.get_mastery(item_id).directional, direction, self.now())

    def prioritize_items(self, item_ids: Optional[Iterable[str]] = None, limit: int = 20) -> list[str]:
        ids = self.item_ids() if item_ids is None else item_ids
        strengths = [(item_id, self.get_mastery(item_id).directional) for item_id in ids]
        return prioritize_for_practice(strengths, self.now(), limit)

    def get_weakness_report(self) -> WeaknessReport:
        return analyze_weaknesses(self.error_records(), self.now())

    def get_top_weaknesses(self) -> list[Weakness]:
        return list(self.get_weakness_report().top_weaknesses)

    def get_calibration_stats(self) -> CalibrationStats:
        return calculate_calibration_stats(self.calibration_records())

    def get_calibration_trend(self) -> CalibrationTrend:
        return calibration_trend(self.calibration_records())

    # ---- Maintenance ----

    def reset(self) -> None:
        """
        DANGEROUS: Clear all mastery, collocation and log data.
        """
        for namespace in NAMESPACES:
            self.store.clear(namespace)
        logger.warning("Mastery engine reset: all progress cleared")
