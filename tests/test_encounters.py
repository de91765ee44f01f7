from datetime import timedelta

import pytest

from madina.encounters import (
    MAX_HISTORY_ENTRIES,
    EncounterLog,
    SourceType,
    add_encounter,
    encounter_progress,
    has_reached_target,
)


def test_add_encounter_counts_and_prepends(now):
    log = add_encounter(EncounterLog(), "reading", now)
    log = add_encounter(log, SourceType.FLASHCARD, now + timedelta(minutes=5))

    assert log.total == 2
    assert log.by_type[SourceType.READING] == 1
    assert log.by_type[SourceType.FLASHCARD] == 1
    assert log.by_type[SourceType.LISTENING] == 0
    assert log.history[0].source_type == SourceType.FLASHCARD
    assert log.history[1].timestamp == now


def test_history_is_capped_but_total_keeps_counting(now):
    log = EncounterLog()
    for i in range(MAX_HISTORY_ENTRIES + 5):
        log = add_encounter(log, "exercise", now + timedelta(minutes=i))

    assert log.total == 25
    assert len(log.history) == MAX_HISTORY_ENTRIES
    assert log.history[0].timestamp == now + timedelta(minutes=24)


def test_add_encounter_does_not_mutate(now):
    original = EncounterLog()
    add_encounter(original, "listening", now)
    assert original.total == 0
    assert original.by_type[SourceType.LISTENING] == 0


def test_unknown_source_type_raises(now):
    with pytest.raises(ValueError):
        add_encounter(EncounterLog(), "podcast", now)


def test_progress_toward_twelve(now):
    log = EncounterLog()
    for _ in range(6):
        log = add_encounter(log, "exercise", now)
    assert encounter_progress(log) == 50
    assert not has_reached_target(log)

    for _ in range(8):
        log = add_encounter(log, "exercise", now)
    assert encounter_progress(log) == 100
    assert has_reached_target(log)
