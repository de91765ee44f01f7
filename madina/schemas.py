"""
Pydantic models for persisted mastery documents.

These models define the JSON shape written to the key-value store and
convert to and from the frozen dataclasses the algorithms work on.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from madina.analytics.types import CalibrationRecord, ErrorRecord
from madina.arabic import ErrorCategory
from madina.collocations.types import CollocationMastery
from madina.difficulty.constants import DifficultyLevel
from madina.difficulty.directional import DirectionalStrength
from madina.encounters import Encounter, EncounterLog, SourceType
from madina.mastery import MasteryRecord
from madina.sm2.constants import DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR
from madina.sm2.review_state import ReviewState, ensure_aware


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    return ensure_aware(value) if value is not None else None


# ---- SM-2 ----

class ReviewStateDoc(BaseModel):
    """SM-2 sub-state of a mastery document."""
    ease_factor: float = Field(DEFAULT_EASE_FACTOR, ge=MIN_EASE_FACTOR)
    interval: int = Field(0, ge=0)
    repetitions: int = Field(0, ge=0)
    next_review_date: datetime

    @classmethod
    def from_state(cls, state: ReviewState) -> "ReviewStateDoc":
        return cls(
            ease_factor=state.ease_factor,
            interval=state.interval,
            repetitions=state.repetitions,
            next_review_date=state.next_review_date,
        )

    def to_state(self) -> ReviewState:
        return ReviewState(
            ease_factor=self.ease_factor,
            interval=self.interval,
            repetitions=self.repetitions,
            next_review_date=ensure_aware(self.next_review_date),
        )


# ---- Encounters ----

class EncounterDoc(BaseModel):
    timestamp: datetime
    source_type: SourceType


class EncounterLogDoc(BaseModel):
    total: int = Field(0, ge=0)
    by_type: dict[SourceType, int] = Field(default_factory=dict)
    history: list[EncounterDoc] = Field(default_factory=list)

    @classmethod
    def from_log(cls, log: EncounterLog) -> "EncounterLogDoc":
        return cls(
            total=log.total,
            by_type=dict(log.by_type),
            history=[
                EncounterDoc(timestamp=e.timestamp, source_type=e.source_type)
                for e in log.history
            ],
        )

    def to_log(self) -> EncounterLog:
        by_type = {source: 0 for source in SourceType}
        by_type.update(self.by_type)
        return EncounterLog(
            total=self.total,
            by_type=by_type,
            history=tuple(
                Encounter(timestamp=ensure_aware(e.timestamp), source_type=e.source_type)
                for e in self.history
            ),
        )


# ---- Mastery Record ----

class MasteryRecordDoc(BaseModel):
    """
    Current mastery document, one per item id.

    Flat directional fields sit next to the nested sm2 and encounters
    sub-documents.
    """
    item_id: str
    sm2: ReviewStateDoc

    recognition_strength: int = Field(0, ge=0, le=100)
    recognition_level: DifficultyLevel = DifficultyLevel.RECOGNITION
    production_strength: int = Field(0, ge=0, le=100)
    production_level: DifficultyLevel = DifficultyLevel.RECOGNITION
    last_recognition_practice: Optional[datetime] = None
    last_production_practice: Optional[datetime] = None

    encounters: EncounterLogDoc = Field(default_factory=EncounterLogDoc)

    # Legacy scalar fields, kept in sync for older views
    strength: int = Field(0, ge=0, le=100)
    times_correct: int = Field(0, ge=0)
    times_incorrect: int = Field(0, ge=0)
    last_practiced: Optional[datetime] = None
    challenges_passed: int = Field(0, ge=0)
    last_challenge_date: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: MasteryRecord) -> "MasteryRecordDoc":
        ds = record.directional
        return cls(
            item_id=record.item_id,
            sm2=ReviewStateDoc.from_state(record.review),
            recognition_strength=ds.recognition_strength,
            recognition_level=ds.recognition_level,
            production_strength=ds.production_strength,
            production_level=ds.production_level,
            last_recognition_practice=ds.last_recognition_practice,
            last_production_practice=ds.last_production_practice,
            encounters=EncounterLogDoc.from_log(record.encounters),
            strength=record.strength,
            times_correct=record.times_correct,
            times_incorrect=record.times_incorrect,
            last_practiced=record.last_practiced,
            challenges_passed=record.challenges_passed,
            last_challenge_date=record.last_challenge_date,
        )

    def to_record(self) -> MasteryRecord:
        return MasteryRecord(
            item_id=self.item_id,
            review=self.sm2.to_state(),
            directional=DirectionalStrength(
                recognition_strength=self.recognition_strength,
                production_strength=self.production_strength,
                recognition_level=self.recognition_level,
                production_level=self.production_level,
                last_recognition_practice=_aware(self.last_recognition_practice),
                last_production_practice=_aware(self.last_production_practice),
            ),
            encounters=self.encounters.to_log(),
            strength=self.strength,
            times_correct=self.times_correct,
            times_incorrect=self.times_incorrect,
            last_practiced=_aware(self.last_practiced),
            challenges_passed=self.challenges_passed,
            last_challenge_date=_aware(self.last_challenge_date),
        )


# ---- Collocations ----

class CollocationMasteryDoc(BaseModel):
    collocation_id: str
    strength: int = Field(0, ge=0, le=100)
    times_correct: int = Field(0, ge=0)
    times_incorrect: int = Field(0, ge=0)
    can_produce: bool = False
    last_practiced: Optional[datetime] = None

    @classmethod
    def from_mastery(cls, mastery: CollocationMastery) -> "CollocationMasteryDoc":
        return cls(
            collocation_id=mastery.collocation_id,
            strength=mastery.strength,
            times_correct=mastery.times_correct,
            times_incorrect=mastery.times_incorrect,
            can_produce=mastery.can_produce,
            last_practiced=mastery.last_practiced,
        )

    def to_mastery(self) -> CollocationMastery:
        return CollocationMastery(
            collocation_id=self.collocation_id,
            strength=self.strength,
            times_correct=self.times_correct,
            times_incorrect=self.times_incorrect,
            can_produce=self.can_produce,
            last_practiced=_aware(self.last_practiced),
        )


# ---- Logs ----

class CalibrationRecordDoc(BaseModel):
    confidence_level: int = Field(..., ge=1, le=3)
    was_correct: bool
    timestamp: datetime

    def to_record(self) -> CalibrationRecord:
        return CalibrationRecord(
            confidence_level=self.confidence_level,
            was_correct=self.was_correct,
            timestamp=ensure_aware(self.timestamp),
        )


class ErrorRecordDoc(BaseModel):
    category: ErrorCategory
    timestamp: datetime
    item_id: str
    expected: Optional[str] = None
    actual: Optional[str] = None

    def to_record(self) -> ErrorRecord:
        return ErrorRecord(
            category=self.category,
            timestamp=ensure_aware(self.timestamp),
            item_id=self.item_id,
            expected=self.expected,
            actual=self.actual,
        )


class CalibrationLogDoc(BaseModel):
    """Capped, oldest-first list of confidence ratings."""
    records: list[CalibrationRecordDoc] = Field(default_factory=list)


class ErrorLogDoc(BaseModel):
    """Capped, oldest-first list of classified errors."""
    records: list[ErrorRecordDoc] = Field(default_factory=list)
