"""
Encounter tracking for the 10-12 encounter principle.

Counts how often an item has been met, independent of how strong it is,
so callers can tell whether a word has been seen "enough times".
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from madina.sm2.review_state import utc_now


MAX_HISTORY_ENTRIES = 20
TARGET_ENCOUNTERS = 12


class SourceType(str, Enum):
    """Where an encounter happened."""
    EXERCISE = "exercise"
    FLASHCARD = "flashcard"
    READING = "reading"
    LISTENING = "listening"


def coerce_source_type(value: object) -> SourceType:
    """
    Resolve a source type from an enum member or its string value.

    Raises:
        ValueError: If the value names no known source type
    """
    if isinstance(value, SourceType):
        return value
    try:
        return SourceType(str(value).strip().lower())
    except ValueError:
        raise ValueError(
            f"Unknown encounter source type {value!r}; "
            f"expected one of {[s.value for s in SourceType]}"
        ) from None


def _empty_counts() -> dict[SourceType, int]:
    return {source: 0 for source in SourceType}


@dataclass(frozen=True)
class Encounter:
    """A single encounter entry in the history ring buffer."""
    timestamp: datetime
    source_type: SourceType


@dataclass(frozen=True)
class EncounterLog:
    """Aggregate counts plus a capped, most-recent-first history."""
    total: int = 0
    by_type: dict[SourceType, int] = field(default_factory=_empty_counts)
    history: tuple[Encounter, ...] = ()


def add_encounter(
    current: EncounterLog,
    source_type: SourceType | str,
    now: Optional[datetime] = None
) -> EncounterLog:
    """
    Record one encounter.

    Args:
        current: Current encounter log (not modified)
        source_type: Where the item was encountered
        now: Encounter time (defaults to now)

    Returns:
        New EncounterLog with the entry prepended and history capped
    """
    if now is None:
        now = utc_now()
    source = coerce_source_type(source_type)

    by_type = _empty_counts()
    by_type.update(current.by_type)
    by_type[source] += 1

    history = (Encounter(timestamp=now, source_type=source),) + current.history
    return replace(
        current,
        total=current.total + 1,
        by_type=by_type,
        history=history[:MAX_HISTORY_ENTRIES],
    )


def has_reached_target(encounters: EncounterLog) -> bool:
    """Check if an item has been encountered the target number of times."""
    return encounters.total >= TARGET_ENCOUNTERS


def encounter_progress(encounters: EncounterLog) -> int:
    """Progress toward the target as a percentage (0-100)."""
    return min(100, round(encounters.total / TARGET_ENCOUNTERS * 100))
