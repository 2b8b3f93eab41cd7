"""Study service wiring the progress tracker to the content catalogs."""

from collections.abc import Iterable
from enum import StrEnum

import structlog

from kanji_study_tracker.config import Settings
from kanji_study_tracker.models.study_item import PhraseCategory, PhraseDifficulty, StudyItem
from kanji_study_tracker.storage.content import load_kanji, load_phrases
from kanji_study_tracker.storage.kv_store import JsonFileStore
from kanji_study_tracker.storage.stats_repository import StatsRepository
from kanji_study_tracker.tracking.catalog import KanjiCatalog, PhraseCatalog, StudyItemCatalog
from kanji_study_tracker.tracking.clock import Clock
from kanji_study_tracker.tracking.progress import ProgressTracker

logger = structlog.get_logger()


class ItemKind(StrEnum):
    KANJI = "kanji"
    PHRASES = "phrases"

    @property
    def view_minutes(self) -> int:
        """Study minutes credited for opening an item."""
        return 5 if self is ItemKind.KANJI else 3


class StudyService:
    """Front door used by presentation code.

    Composes per-item progress with the aggregate stats the way the study
    screens do: viewing an item credits study time, and a positive mastery
    review counts the item as learned.
    """

    def __init__(
        self,
        tracker: ProgressTracker,
        kanji: KanjiCatalog,
        phrases: PhraseCatalog,
    ) -> None:
        self.tracker = tracker
        self.kanji = kanji
        self.phrases = phrases

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock | None = None) -> "StudyService":
        repository = StatsRepository(
            JsonFileStore(settings.stats_path),
            default_username=settings.default_username,
        )
        tracker = ProgressTracker.open(repository, clock)
        kanji = KanjiCatalog(
            load_kanji(settings.kanji_content_path),
            clock=clock,
            recent_limit=settings.recent_limit,
            max_mastery=settings.max_mastery,
        )
        phrases = PhraseCatalog(
            load_phrases(settings.phrase_content_path),
            clock=clock,
            recent_limit=settings.recent_limit,
            max_mastery=settings.max_mastery,
        )
        logger.info(
            "study_service_ready",
            kanji_count=len(kanji),
            phrase_count=len(phrases),
            streak=tracker.stats.study_streak_days,
        )
        return cls(tracker, kanji, phrases)

    def catalog(self, kind: ItemKind) -> StudyItemCatalog:
        return self.kanji if kind is ItemKind.KANJI else self.phrases

    def find_items(
        self,
        kind: ItemKind,
        text: str = "",
        mastery: int | None = None,
        category: PhraseCategory | None = None,
        difficulty: PhraseDifficulty | None = None,
    ) -> list[StudyItem]:
        """Search a catalog and narrow the result with the list-screen filters.

        Category and difficulty only exist on phrases.
        """
        if kind is ItemKind.KANJI and (category is not None or difficulty is not None):
            raise ValueError("Category and difficulty filters apply to phrases only")

        items = self.catalog(kind).search(text)
        if mastery is not None:
            allowed = {i.id for i in self.catalog(kind).by_mastery_level(mastery)}
            items = [i for i in items if i.id in allowed]
        if category is not None:
            allowed = {p.id for p in self.phrases.by_category(category)}
            items = [i for i in items if i.id in allowed]
        if difficulty is not None:
            allowed = {p.id for p in self.phrases.by_difficulty(difficulty)}
            items = [i for i in items if i.id in allowed]
        return items

    def random_item(self, kind: ItemKind, excluding: Iterable[str] = ()) -> StudyItem | None:
        """Next practice card, skipping ids already shown in this round."""
        return self.catalog(kind).random_item(excluding=excluding)

    def view_item(self, kind: ItemKind, item_id: str) -> StudyItem | None:
        """Open an item for study: mark it practiced and credit study time."""
        item = self.catalog(kind).mark_practiced(item_id)
        if item is not None:
            self.tracker.record_study_minutes(kind.view_minutes)
        return item

    def review_item(self, kind: ItemKind, item_id: str, mastery_change: int) -> StudyItem | None:
        """Record a self-assessed review of an item."""
        item = self.catalog(kind).record_progress(item_id, mastery_change=mastery_change)
        if item is None or mastery_change <= 0:
            return item
        if kind is ItemKind.KANJI:
            self.tracker.record_kanji_learned()
        else:
            self.tracker.record_phrase_learned()
        return item
