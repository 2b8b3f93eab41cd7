"""Aggregate study statistics, daily streak and achievement tracking."""

from collections.abc import Callable
from datetime import timedelta

import structlog

from kanji_study_tracker.models.achievement import Achievement, evaluate_achievements
from kanji_study_tracker.models.user_stats import UserStats
from kanji_study_tracker.storage.stats_repository import StatsRepository
from kanji_study_tracker.tracking.clock import Clock, SystemClock

logger = structlog.get_logger()

StatsCallback = Callable[[UserStats], None]


def format_study_time(minutes: int) -> str:
    """Render a minute count the way the profile screen shows it."""
    if minutes < 60:
        return f"{minutes} phút"
    hours, remaining = divmod(minutes, 60)
    return f"{hours}h {remaining}m"


class ProgressTracker:
    """Owns the learner's UserStats and keeps them persisted.

    Every mutation is applied in full, written through the repository, and
    then announced to the registered change callbacks.

    Args:
        repository: Stats persistence.
        clock: Source of the current local date and time.
    """

    def __init__(self, repository: StatsRepository, clock: Clock | None = None) -> None:
        self._repository = repository
        self._clock = clock or SystemClock()
        self._stats = repository.load()
        self._achievements = evaluate_achievements(self._stats)
        self._change_callbacks: list[StatsCallback] = []

    @classmethod
    def open(cls, repository: StatsRepository, clock: Clock | None = None) -> "ProgressTracker":
        """Load stats and reconcile the streak, as done once at app launch."""
        tracker = cls(repository, clock)
        tracker.reconcile_streak_on_launch()
        return tracker

    @property
    def stats(self) -> UserStats:
        return self._stats.model_copy()

    @property
    def achievements(self) -> list[Achievement]:
        return list(self._achievements)

    @property
    def unlocked_achievements(self) -> list[Achievement]:
        return [a for a in self._achievements if a.is_unlocked]

    def on_change(self, callback: StatsCallback) -> None:
        """Register a callback receiving the updated stats after each mutation."""
        self._change_callbacks.append(callback)

    def record_study_minutes(self, minutes: int) -> None:
        if minutes < 0:
            raise ValueError(f"Study minutes must be >= 0, got {minutes}")
        self._stats.total_study_minutes += minutes
        self._touch_study_date()
        self._commit()

    def touch_study_date(self) -> None:
        """Mark today as a study day, extending or restarting the streak."""
        self._touch_study_date()
        self._commit()

    def reconcile_streak_on_launch(self) -> None:
        """Drop a streak that can no longer be extended.

        A gap of exactly one day is kept: studying today still extends it.
        """
        stats = self._stats
        today = self._clock.today()
        previous_streak = stats.study_streak_days
        if stats.last_study_date is None:
            stats.study_streak_days = 0
        elif stats.last_study_date != today:
            gap_days = (today - stats.last_study_date).days
            if gap_days > 1:
                logger.info("streak_expired", gap_days=gap_days, streak=stats.study_streak_days)
                stats.study_streak_days = 0
        if stats.study_streak_days != previous_streak:
            self._commit()

    def record_quiz_score(self, score: float) -> None:
        if not 0.0 <= score <= 1.0:
            raise ValueError(f"Quiz score must be within [0, 1], got {score}")
        stats = self._stats
        # Weight by the pre-increment count so the average is the all-time mean
        total = stats.average_quiz_score * stats.total_quizzes_taken + score
        stats.average_quiz_score = min(1.0, total / (stats.total_quizzes_taken + 1))
        stats.total_quizzes_taken += 1
        self._touch_study_date()
        self._commit()

    def record_kanji_learned(self) -> None:
        self._stats.total_kanji_learned += 1
        self._touch_study_date()
        self._commit()

    def record_phrase_learned(self) -> None:
        self._stats.total_phrases_learned += 1
        self._touch_study_date()
        self._commit()

    def set_username(self, username: str) -> None:
        username = username.strip()
        if not username:
            raise ValueError("Username must not be blank")
        self._stats.username = username
        self._commit()

    def _touch_study_date(self) -> None:
        stats = self._stats
        today = self._clock.today()
        previous = stats.last_study_date
        if previous == today:
            return

        stats.last_study_date = today
        # Compare against the date recorded before this study day
        if previous == today - timedelta(days=1):
            stats.study_streak_days += 1
            logger.info("streak_extended", streak=stats.study_streak_days)
        else:
            stats.study_streak_days = 1
            logger.info("streak_started", previous_date=str(previous) if previous else None)

    def _commit(self) -> None:
        previously_unlocked = {a.id for a in self._achievements if a.is_unlocked}
        self._achievements = evaluate_achievements(self._stats)
        for achievement in self._achievements:
            if achievement.is_unlocked and achievement.id not in previously_unlocked:
                logger.info("achievement_unlocked", achievement_id=achievement.id)

        self._repository.save(self._stats)

        snapshot = self.stats
        for callback in self._change_callbacks:
            try:
                callback(snapshot)
            except Exception:
                logger.exception("stats_callback_failed")
