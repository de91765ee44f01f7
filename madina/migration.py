"""
Mastery Migration - legacy scalar strength -> SM-2 + directional tracking

One-time, pure conversion for records written before SM-2 scheduling.

Strength bands (legacy 0-100):
- [0, 20)    new:          EF 2.5, interval 0,  reps 0 (due now)
- [20, 40)   learning:     EF 2.3, interval 1,  reps 1
- [40, 60)   familiar:     EF 2.5, interval 3,  reps 2
- [60, 80)   comfortable:  EF 2.6, interval 7,  reps 3
- [80, 100]  mastered:     EF 2.7, interval 14, reps 4

Next review = last practice + interval days (now, if last practice is
missing or unparsable). Encounter history cannot be reconstructed and
starts empty.
"""

from __future__ import annotations

import logging
import numbers
from datetime import datetime
from typing import Any, Mapping, Optional

from madina.difficulty.directional import DirectionalStrength, level_for_strength
from madina.encounters import EncounterLog, SourceType
from madina.mastery import LegacyMasteryRecord, MasteryRecord
from madina.sm2.review_state import ReviewState, add_days, parse_timestamp, utc_now
from madina.strength import round_half_up


logger = logging.getLogger(__name__)


# (upper bound exclusive, ease factor, interval days, repetitions)
MIGRATION_BANDS: tuple[tuple[float, float, int, int], ...] = (
    (20, 2.5, 0, 0),
    (40, 2.3, 1, 1),
    (60, 2.5, 3, 2),
    (80, 2.6, 7, 3),
)
MASTERED_BAND: tuple[float, int, int] = (2.7, 14, 4)

# Recognition usually runs ahead of production
RECOGNITION_ESTIMATE_FACTOR = 1.15


def migrate_strength_to_sm2(
    strength: float,
    last_practiced: Any,
    now: Optional[datetime] = None
) -> ReviewState:
    """
    Convert a legacy strength value to an SM-2 review state.

    Args:
        strength: Legacy strength (0-100)
        last_practiced: ISO timestamp of the last practice (may be None
                        or garbage)
        now: Migration time (defaults to now)

    Returns:
        ReviewState for the matching band
    """
    if now is None:
        now = utc_now()

    base = parse_timestamp(last_practiced)
    if base is None:
        if last_practiced not in (None, ""):
            logger.debug("Unparsable last_practiced %r, using now", last_practiced)
        base = now

    for upper, ease, interval, repetitions in MIGRATION_BANDS:
        if strength < upper:
            if interval == 0:
                # New items are due immediately, regardless of last practice
                return ReviewState(ease, interval, repetitions, now)
            return ReviewState(ease, interval, repetitions, add_days(base, interval))

    ease, interval, repetitions = MASTERED_BAND
    return ReviewState(ease, interval, repetitions, add_days(base, interval))


def estimate_encounters_from_legacy(legacy: LegacyMasteryRecord) -> EncounterLog:
    """
    Starting encounter log from legacy counters.

    Every answered exercise counts as one exercise encounter; history is
    left empty (it was never recorded).
    """
    total = max(0, legacy.times_correct + legacy.times_incorrect)
    by_type = {source: 0 for source in SourceType}
    by_type[SourceType.EXERCISE] = total
    return EncounterLog(total=total, by_type=by_type, history=())


def estimate_directional_from_legacy(
    strength: float,
    last_practiced: Any
) -> DirectionalStrength:
    """
    Split a legacy strength into recognition and production estimates.

    Recognition is estimated 15% above the legacy value (capped at 100);
    production takes the legacy value as is.
    """
    production = round_half_up(max(0.0, min(100.0, strength)))
    recognition = min(100, round_half_up(production * RECOGNITION_ESTIMATE_FACTOR))
    practiced = parse_timestamp(last_practiced)

    return DirectionalStrength(
        recognition_strength=recognition,
        production_strength=production,
        recognition_level=level_for_strength(recognition),
        production_level=level_for_strength(production),
        last_recognition_practice=practiced,
        last_production_practice=practiced,
    )


def migrate_legacy_mastery(
    legacy: LegacyMasteryRecord | Mapping,
    item_id: str,
    now: Optional[datetime] = None
) -> MasteryRecord:
    """
    Upgrade a legacy record to the current shape.

    Total over its input: bad timestamps fall back to now and counters
    default to zero.

    Args:
        legacy: LegacyMasteryRecord or the raw legacy dict
        item_id: Item the record belongs to
        now: Migration time (defaults to now)

    Returns:
        MasteryRecord with SM-2 state, directional estimate and encounters
    """
    if now is None:
        now = utc_now()
    if not isinstance(legacy, LegacyMasteryRecord):
        legacy = LegacyMasteryRecord.from_mapping(legacy)

    strength = round_half_up(max(0.0, min(100.0, legacy.strength)))

    return MasteryRecord(
        item_id=item_id,
        review=migrate_strength_to_sm2(legacy.strength, legacy.last_practiced, now),
        directional=estimate_directional_from_legacy(strength, legacy.last_practiced),
        encounters=estimate_encounters_from_legacy(legacy),
        strength=strength,
        times_correct=legacy.times_correct,
        times_incorrect=legacy.times_incorrect,
        last_practiced=parse_timestamp(legacy.last_practiced),
        challenges_passed=legacy.challenges_passed,
        last_challenge_date=parse_timestamp(legacy.last_challenge_date),
    )


def needs_migration(record: object) -> bool:
    """
    Check whether a raw stored record is in the legacy shape.

    Precedence:
    1. Not a mapping (None, list, str, ...) -> False
    2. Has schema_version / schemaVersion (already current) -> False
    3. Has an sm2 sub-state -> False
    4. Numeric strength and a string last_practiced -> True
    Anything else -> False.
    """
    if not isinstance(record, Mapping):
        return False
    if "schema_version" in record or "schemaVersion" in record:
        return False
    if "sm2" in record:
        return False

    strength = record.get("strength")
    if isinstance(strength, bool) or not isinstance(strength, numbers.Real):
        return False

    last_practiced = record.get("last_practiced", record.get("lastPracticed"))
    return isinstance(last_practiced, str)
