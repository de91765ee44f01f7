"""
Collocation catalog - an explicit, instance-owned index of collocations.

Content loaders hand plain dicts to the catalog; the engine and tests
each own their own catalog instead of sharing process-wide caches.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Mapping, Optional

from madina.collocations.detection import (
    detect_collocation_type,
    extract_collocations_from_exercises,
)
from madina.collocations.types import Collocation, CollocationType, ExerciseSource


logger = logging.getLogger(__name__)


def collocation_from_dict(data: Mapping) -> Collocation:
    """
    Build a Collocation from a content dict.

    Accepts snake_case or camelCase keys (word_ids / wordIds,
    lesson_id / lessonId). A missing type is detected from the phrase.

    Raises:
        ValueError: If id or arabic is missing, or the type cannot be resolved
    """
    collocation_id = data.get("id")
    arabic = data.get("arabic")
    if not collocation_id or not arabic:
        raise ValueError(f"Collocation entry needs 'id' and 'arabic': {dict(data)!r}")

    raw_type = data.get("type")
    if raw_type:
        collocation_type = CollocationType(raw_type)
    else:
        collocation_type = detect_collocation_type(arabic)
        if collocation_type is None:
            raise ValueError(f"Cannot detect collocation type for {collocation_id!r}")

    return Collocation(
        id=str(collocation_id),
        type=collocation_type,
        arabic=arabic,
        english=data.get("english", "") or "",
        word_ids=tuple(data.get("word_ids") or data.get("wordIds") or ()),
        lesson_id=str(data.get("lesson_id") or data.get("lessonId") or ""),
        pattern=data.get("pattern"),
        notes=data.get("notes"),
        alternatives=tuple(data.get("alternatives") or ()),
    )


class CollocationCatalog:
    """Collocations indexed by id, lesson and component word."""

    def __init__(self, collocations: Iterable[Collocation] = ()):
        self._by_id: dict[str, Collocation] = {}
        self._by_lesson: dict[str, list[str]] = {}
        self._by_word: dict[str, list[str]] = {}
        for collocation in collocations:
            self.add(collocation)

    @classmethod
    def from_dicts(cls, entries: Iterable[Mapping]) -> "CollocationCatalog":
        return cls(collocation_from_dict(entry) for entry in entries)

    def add(self, collocation: Collocation) -> None:
        """Add or replace a collocation."""
        if collocation.id in self._by_id:
            self.remove(collocation.id)
        self._by_id[collocation.id] = collocation
        self._by_lesson.setdefault(collocation.lesson_id, []).append(collocation.id)
        for word_id in collocation.word_ids:
            self._by_word.setdefault(word_id, []).append(collocation.id)

    def remove(self, collocation_id: str) -> None:
        collocation = self._by_id.pop(collocation_id, None)
        if collocation is None:
            return
        self._by_lesson[collocation.lesson_id].remove(collocation_id)
        for word_id in collocation.word_ids:
            ids = self._by_word[word_id]
            if collocation_id in ids:
                ids.remove(collocation_id)

    def add_from_exercises(
        self,
        exercises: Iterable[ExerciseSource | Mapping],
        lesson_id: str
    ) -> list[Collocation]:
        """Extract collocations from lesson exercises and add them."""
        extracted = extract_collocations_from_exercises(exercises, lesson_id)
        for collocation in extracted:
            self.add(collocation)
        logger.info("Catalogued %d collocations for lesson %s", len(extracted), lesson_id)
        return extracted

    def get(self, collocation_id: str) -> Optional[Collocation]:
        return self._by_id.get(collocation_id)

    def for_lesson(self, lesson_id: str) -> list[Collocation]:
        return [self._by_id[cid] for cid in self._by_lesson.get(lesson_id, [])]

    def for_word(self, word_id: str) -> list[Collocation]:
        # A word can appear twice in one phrase; list each collocation once
        ids = dict.fromkeys(self._by_word.get(word_id, []))
        return [self._by_id[cid] for cid in ids]

    def all(self) -> list[Collocation]:
        return list(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Collocation]:
        return iter(self.all())

    def __contains__(self, collocation_id: object) -> bool:
        return collocation_id in self._by_id
