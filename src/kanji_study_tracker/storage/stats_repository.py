"""UserStats persistence over a flat key-value store."""

from datetime import date, datetime
from typing import Any

import structlog

from kanji_study_tracker.models.user_stats import UserStats
from kanji_study_tracker.storage.kv_store import KeyValueStore

logger = structlog.get_logger()

DATE_FORMAT = "%Y-%m-%d"

# Persisted key -> UserStats field
KEY_MAP: dict[str, str] = {
    "username": "username",
    "studyStreak": "study_streak_days",
    "totalStudyTime": "total_study_minutes",
    "lastStudyDate": "last_study_date",
    "totalKanjiLearned": "total_kanji_learned",
    "totalPhrasesLearned": "total_phrases_learned",
    "totalQuizzesTaken": "total_quizzes_taken",
    "averageQuizScore": "average_quiz_score",
}

COUNTER_KEYS = (
    "studyStreak",
    "totalStudyTime",
    "totalKanjiLearned",
    "totalPhrasesLearned",
    "totalQuizzesTaken",
)


def format_study_date(value: date | None) -> str:
    return value.strftime(DATE_FORMAT) if value is not None else ""


def parse_study_date(raw: Any) -> date | None:
    """Parse a stored YYYY-MM-DD string. Anything else counts as absent."""
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError:
        return None


def _parse_counter(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float) and raw.is_integer():
        value = int(raw)
    elif isinstance(raw, str) and raw.strip().isdecimal():
        value = int(raw.strip())
    else:
        return None
    return value if value >= 0 else None


def _parse_average(raw: Any) -> float | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if 0.0 <= value <= 1.0 else None


class StatsRepository:
    """Loads and saves UserStats as one key per field.

    Args:
        store: Backing key-value store.
        default_username: Name used when none is stored.
    """

    def __init__(self, store: KeyValueStore, default_username: str = "Học viên") -> None:
        self.store = store
        self.default_username = default_username

    def load(self) -> UserStats:
        values: dict[str, Any] = {"username": self.default_username}

        username = self.store.get("username")
        if isinstance(username, str) and username.strip():
            values["username"] = username
        elif username is not None:
            logger.warning("stats_value_invalid", key="username")

        for key in COUNTER_KEYS:
            raw = self.store.get(key)
            if raw is None:
                continue
            parsed = _parse_counter(raw)
            if parsed is None:
                logger.warning("stats_value_invalid", key=key, value=repr(raw))
                continue
            values[KEY_MAP[key]] = parsed

        raw_average = self.store.get("averageQuizScore")
        if raw_average is not None:
            average = _parse_average(raw_average)
            if average is None:
                logger.warning("stats_value_invalid", key="averageQuizScore", value=repr(raw_average))
            else:
                values["average_quiz_score"] = average

        raw_date = self.store.get("lastStudyDate")
        last_study_date = parse_study_date(raw_date)
        if last_study_date is None and raw_date not in (None, ""):
            logger.warning("stats_value_invalid", key="lastStudyDate", value=repr(raw_date))
        values["last_study_date"] = last_study_date

        return UserStats(**values)

    def save(self, stats: UserStats) -> None:
        self.store.set_many(
            {
                "username": stats.username,
                "studyStreak": stats.study_streak_days,
                "totalStudyTime": stats.total_study_minutes,
                "lastStudyDate": format_study_date(stats.last_study_date),
                "totalKanjiLearned": stats.total_kanji_learned,
                "totalPhrasesLearned": stats.total_phrases_learned,
                "totalQuizzesTaken": stats.total_quizzes_taken,
                "averageQuizScore": stats.average_quiz_score,
            }
        )
