"""Per-item practice, mastery and bookmark bookkeeping."""

import random
from collections.abc import Iterable
from typing import Generic, TypeVar

import structlog

from kanji_study_tracker.models.study_item import (
    MAX_MASTERY_LEVEL,
    Kanji,
    Phrase,
    PhraseCategory,
    PhraseDifficulty,
    StudyItem,
)
from kanji_study_tracker.tracking.clock import Clock, SystemClock

logger = structlog.get_logger()

T = TypeVar("T", bound=StudyItem)

DEFAULT_RECENT_LIMIT = 10


class StudyItemCatalog(Generic[T]):
    """All items of one content kind plus their favorites and recency views.

    Mutations on an unknown id are no-ops and return None.

    Args:
        items: Content table, ids must be unique.
        clock: Source of practice timestamps.
        recent_limit: Capacity of the recently-studied list.
        max_mastery: Upper bound of mastery levels.
    """

    kind = "item"

    def __init__(
        self,
        items: Iterable[T],
        clock: Clock | None = None,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
        max_mastery: int = MAX_MASTERY_LEVEL,
    ) -> None:
        self._items: dict[str, T] = {}
        for item in items:
            if item.id in self._items:
                raise ValueError(f"Duplicate {self.kind} id: {item.id}")
            self._items[item.id] = item
        self._clock = clock or SystemClock()
        self._recent_limit = recent_limit
        self._max_mastery = min(max_mastery, MAX_MASTERY_LEVEL)
        self._favorites: list[T] = [i for i in self._items.values() if i.is_bookmarked]
        self._recent_ids: list[str] = []

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    @property
    def items(self) -> list[T]:
        return list(self._items.values())

    @property
    def favorites(self) -> list[T]:
        return list(self._favorites)

    @property
    def recent_ids(self) -> list[str]:
        """Most recently practiced ids, newest first."""
        return list(self._recent_ids)

    @property
    def recently_studied(self) -> list[T]:
        return [self._items[item_id] for item_id in self._recent_ids]

    def get(self, item_id: str) -> T | None:
        return self._items.get(item_id)

    def _lookup(self, item_id: str, operation: str) -> T | None:
        item = self._items.get(item_id)
        if item is None:
            logger.warning("unknown_item", kind=self.kind, item_id=item_id, operation=operation)
        return item

    def mark_practiced(self, item_id: str) -> T | None:
        item = self._lookup(item_id, "mark_practiced")
        if item is None:
            return None
        item.practiced_count += 1
        item.last_practiced = self._clock.now()

        # An id already in the list keeps its position
        if item_id not in self._recent_ids:
            self._recent_ids.insert(0, item_id)
            del self._recent_ids[self._recent_limit:]
        return item

    def adjust_mastery(self, item_id: str, delta: int) -> T | None:
        item = self._lookup(item_id, "adjust_mastery")
        if item is None:
            return None
        level = min(max(item.mastery_level + delta, 0), self._max_mastery)
        if level != item.mastery_level:
            logger.debug(
                "mastery_changed",
                kind=self.kind,
                item_id=item_id,
                old_level=item.mastery_level,
                new_level=level,
            )
        item.mastery_level = level
        return item

    def record_progress(self, item_id: str, practiced: bool = True, mastery_change: int = 0) -> T | None:
        """Mark an item practiced (optionally) and move its mastery level."""
        if item_id not in self._items:
            return self._lookup(item_id, "record_progress")
        if practiced:
            self.mark_practiced(item_id)
        return self.adjust_mastery(item_id, mastery_change)

    def toggle_bookmark(self, item_id: str) -> T | None:
        item = self._lookup(item_id, "toggle_bookmark")
        if item is None:
            return None
        item.is_bookmarked = not item.is_bookmarked
        if item.is_bookmarked:
            self._favorites.append(item)
        else:
            self._favorites = [f for f in self._favorites if f.id != item_id]
        return item

    def by_mastery_level(self, level: int) -> list[T]:
        return [i for i in self._items.values() if i.mastery_level == level]

    def random_item(self, excluding: Iterable[str] = ()) -> T | None:
        """Pick a random item whose id is not in ``excluding``."""
        excluded = set(excluding)
        available = [i for i in self._items.values() if i.id not in excluded]
        if not available:
            return None
        return random.choice(available)

    def search(self, text: str) -> list[T]:
        """Case-insensitive substring search over the item's text fields."""
        if not text:
            return self.items
        needle = text.casefold()
        return [
            i for i in self._items.values()
            if any(needle in field.casefold() for field in i.search_fields())
        ]


class KanjiCatalog(StudyItemCatalog[Kanji]):
    kind = "kanji"


class PhraseCatalog(StudyItemCatalog[Phrase]):
    kind = "phrase"

    def by_category(self, category: PhraseCategory) -> list[Phrase]:
        return [p for p in self._items.values() if p.category == category]

    def by_difficulty(self, difficulty: PhraseDifficulty) -> list[Phrase]:
        return [p for p in self._items.values() if p.difficulty == difficulty]
