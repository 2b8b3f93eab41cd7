"""Aggregate learner statistics tracked across study sessions."""

from datetime import date

from pydantic import BaseModel, Field


class UserStats(BaseModel):
    username: str = "Học viên"
    study_streak_days: int = Field(default=0, ge=0)
    total_study_minutes: int = Field(default=0, ge=0)
    last_study_date: date | None = None
    total_kanji_learned: int = Field(default=0, ge=0)
    total_phrases_learned: int = Field(default=0, ge=0)
    total_quizzes_taken: int = Field(default=0, ge=0)
    average_quiz_score: float = Field(default=0.0, ge=0.0, le=1.0)

    @property
    def total_items_learned(self) -> int:
        return self.total_kanji_learned + self.total_phrases_learned
