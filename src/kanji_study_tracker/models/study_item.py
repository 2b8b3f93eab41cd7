"""Study item models (Kanji and phrases) with per-item progress fields."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

MAX_MASTERY_LEVEL = 5


class PhraseCategory(StrEnum):
    """Conversation phrase groups."""

    GREETINGS = "greetings"
    THANKS = "thanks"
    APOLOGIES = "apologies"
    QUESTIONS = "questions"
    RESPONSES = "responses"
    DAILY = "daily"

    @property
    def label(self) -> str:
        return {
            PhraseCategory.GREETINGS: "Chào hỏi",
            PhraseCategory.THANKS: "Cảm ơn",
            PhraseCategory.APOLOGIES: "Xin lỗi",
            PhraseCategory.QUESTIONS: "Câu hỏi",
            PhraseCategory.RESPONSES: "Trả lời",
            PhraseCategory.DAILY: "Hàng ngày",
        }[self]

    @property
    def icon(self) -> str:
        return {
            PhraseCategory.GREETINGS: "hand.wave",
            PhraseCategory.THANKS: "heart",
            PhraseCategory.APOLOGIES: "exclamationmark.bubble",
            PhraseCategory.QUESTIONS: "questionmark.bubble",
            PhraseCategory.RESPONSES: "bubble.left.and.bubble.right",
            PhraseCategory.DAILY: "calendar",
        }[self]


class PhraseDifficulty(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def label(self) -> str:
        return {
            PhraseDifficulty.BEGINNER: "Cơ bản",
            PhraseDifficulty.INTERMEDIATE: "Trung cấp",
            PhraseDifficulty.ADVANCED: "Nâng cao",
        }[self]


class StudyItem(BaseModel):
    """Shared shape of every study item.

    Content fields are frozen once loaded; only the progress fields change,
    and only through the catalog operations.
    """

    id: str = Field(frozen=True)

    # Progress tracking
    practiced_count: int = Field(default=0, ge=0)
    mastery_level: int = Field(default=0, ge=0, le=MAX_MASTERY_LEVEL)  # 0-5 stars
    last_practiced: datetime | None = None
    is_bookmarked: bool = False

    def search_fields(self) -> tuple[str, ...]:
        """Text fields matched by catalog search."""
        return ()


class Kanji(StudyItem):
    character: str = Field(frozen=True)
    kana: str = Field(frozen=True)
    romaji: str = Field(frozen=True)
    meaning: str = Field(frozen=True)
    example: str = Field(frozen=True)
    example_kana: str = Field(frozen=True)
    example_romaji: str = Field(frozen=True)
    example_meaning: str = Field(frozen=True)
    stroke_count: int = Field(frozen=True, ge=1)
    stroke_order: list[str] = Field(default_factory=list, frozen=True)  # SVG path per stroke

    def search_fields(self) -> tuple[str, ...]:
        return (self.character, self.kana, self.romaji, self.meaning)


class Phrase(StudyItem):
    japanese: str = Field(frozen=True)
    kana: str = Field(frozen=True)
    romaji: str = Field(frozen=True)
    meaning: str = Field(frozen=True)
    notes: str = Field(default="", frozen=True)
    category: PhraseCategory = Field(frozen=True)
    difficulty: PhraseDifficulty = Field(default=PhraseDifficulty.BEGINNER, frozen=True)

    def search_fields(self) -> tuple[str, ...]:
        return (self.japanese, self.romaji, self.meaning, self.kana)
