"""
Mastery Record - everything the engine knows about one learnable item

A current record bundles:
- SM-2 review state (when to review next)
- Directional strength (recognition vs production, with levels)
- Encounter log (how often the item was met)
- Legacy scalar strength and counters (kept in sync for older views)

Records written before SM-2 existed are LegacyMasteryRecord values;
madina.migration turns them into MasteryRecord.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Mapping, Optional, Union

from madina.difficulty.directional import DirectionalStrength, combined_strength
from madina.encounters import EncounterLog
from madina.sm2.review_state import ReviewState, new_review_state, utc_now


@dataclass(frozen=True)
class MasteryRecord:
    """Current (SM-2 era) mastery state for one item."""
    item_id: str
    review: ReviewState
    directional: DirectionalStrength = field(default_factory=DirectionalStrength)
    encounters: EncounterLog = field(default_factory=EncounterLog)
    strength: int = 0
    times_correct: int = 0
    times_incorrect: int = 0
    last_practiced: Optional[datetime] = None
    challenges_passed: int = 0
    last_challenge_date: Optional[datetime] = None


@dataclass(frozen=True)
class LegacyMasteryRecord:
    """
    Pre-SM-2 mastery: a single strength plus counters.

    last_practiced is kept raw (as stored) since old exports hold
    ISO strings of varying quality.
    """
    strength: float
    last_practiced: Optional[str] = None
    times_correct: int = 0
    times_incorrect: int = 0
    challenges_passed: int = 0
    last_challenge_date: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping) -> "LegacyMasteryRecord":
        """Read a legacy dict with camelCase or snake_case keys."""
        def pick(snake: str, camel: str, default=None):
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        return cls(
            strength=_number(pick("strength", "strength")),
            last_practiced=pick("last_practiced", "lastPracticed"),
            times_correct=_count(pick("times_correct", "timesCorrect")),
            times_incorrect=_count(pick("times_incorrect", "timesIncorrect")),
            challenges_passed=_count(pick("challenges_passed", "challengesPassed")),
            last_challenge_date=pick("last_challenge_date", "lastChallengeDate"),
        )


def _number(value: object) -> float:
    """Lenient numeric read for legacy fields; junk becomes 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0  # NaN


def _count(value: object) -> int:
    """Non-negative whole counter; junk, negatives and infinities become 0."""
    number = _number(value)
    if number < 0 or number == float("inf"):
        return 0
    return int(number)


AnyMasteryRecord = Union[LegacyMasteryRecord, MasteryRecord]


def new_mastery_record(item_id: str, now: Optional[datetime] = None) -> MasteryRecord:
    """Default record for an item seen for the first time (due immediately)."""
    if now is None:
        now = utc_now()
    return MasteryRecord(item_id=item_id, review=new_review_state(now))


def with_directional(record: MasteryRecord, directional: DirectionalStrength) -> MasteryRecord:
    """Replace directional strength and resync the legacy combined strength."""
    return replace(
        record,
        directional=directional,
        strength=combined_strength(directional),
    )
