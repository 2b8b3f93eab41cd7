"""Achievement models and the fixed unlock rule table."""

from collections.abc import Callable

from pydantic import BaseModel

from kanji_study_tracker.models.user_stats import UserStats


class Achievement(BaseModel):
    """A single achievement with its unlock state for the current stats."""

    id: str
    title: str
    description: str
    icon: str
    is_unlocked: bool = False


class AchievementRule(BaseModel):
    """Static definition of an achievement and its unlock condition."""

    id: str
    title: str
    description: str
    icon: str
    condition: Callable[[UserStats], bool]

    def evaluate(self, stats: UserStats) -> Achievement:
        return Achievement(
            id=self.id,
            title=self.title,
            description=self.description,
            icon=self.icon,
            is_unlocked=bool(self.condition(stats)),
        )


ACHIEVEMENT_RULES: list[AchievementRule] = [
    AchievementRule(
        id="first_lesson",
        title="Người mới bắt đầu",
        description="Hoàn thành bài học đầu tiên",
        icon="book.fill",
        condition=lambda s: s.total_kanji_learned > 0 or s.total_phrases_learned > 0,
    ),
    AchievementRule(
        id="kanji_master_10",
        title="Thạo 10 Kanji",
        description="Học thuộc 10 chữ Kanji",
        icon="target",
        condition=lambda s: s.total_kanji_learned >= 10,
    ),
    AchievementRule(
        id="streak_7",
        title="Streak 7 ngày",
        description="Học liên tục 7 ngày",
        icon="flame.fill",
        condition=lambda s: s.study_streak_days >= 7,
    ),
    AchievementRule(
        id="quiz_master",
        title="Quiz Master",
        description="Đạt 90% trong quiz",
        icon="star.fill",
        condition=lambda s: s.average_quiz_score >= 0.9,
    ),
    AchievementRule(
        id="conversation_master",
        title="Thạo giao tiếp",
        description="Học thuộc 15 câu giao tiếp",
        icon="bubble.left.and.bubble.right.fill",
        condition=lambda s: s.total_phrases_learned >= 15,
    ),
    AchievementRule(
        id="kanji_expert",
        title="Chuyên gia Kanji",
        description="Hoàn thành tất cả 20 Kanji",
        icon="crown.fill",
        condition=lambda s: s.total_kanji_learned >= 20,
    ),
]


def evaluate_achievements(stats: UserStats) -> list[Achievement]:
    """Evaluate every rule against the given stats.

    Unlock state is derived from live stats on each call; nothing is sticky.
    """
    return [rule.evaluate(stats) for rule in ACHIEVEMENT_RULES]
