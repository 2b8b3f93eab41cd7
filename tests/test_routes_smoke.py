"""Smoke tests for API routes."""

import inspect

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from kanji_study_tracker.api.routes import get_study_service, router
from kanji_study_tracker.config import Settings
from kanji_study_tracker.storage.content import load_kanji, load_phrases
from kanji_study_tracker.storage.kv_store import InMemoryStore
from kanji_study_tracker.storage.stats_repository import StatsRepository
from kanji_study_tracker.tracking.catalog import KanjiCatalog, PhraseCatalog
from kanji_study_tracker.tracking.progress import ProgressTracker
from kanji_study_tracker.tracking.service import StudyService


@pytest.fixture
def service(clock):
    settings = Settings()
    tracker = ProgressTracker.open(StatsRepository(InMemoryStore()), clock)
    return StudyService(
        tracker,
        KanjiCatalog(load_kanji(settings.kanji_content_path), clock=clock),
        PhraseCatalog(load_phrases(settings.phrase_content_path), clock=clock),
    )


@pytest.fixture
def client(service):
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_study_service] = lambda: service
    with TestClient(app) as c:
        yield c


class TestHealthCheck:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestStats:
    def test_fresh_stats(self, client):
        response = client.get("/api/stats")
        assert response.status_code == 200
        data = response.json()
        assert data["study_streak_days"] == 0
        assert data["last_study_date"] is None
        assert data["study_time_display"] == "0 phút"

    def test_study_minutes(self, client):
        data = client.post("/api/stats/study-minutes", json={"minutes": 75}).json()
        assert data["total_study_minutes"] == 75
        assert data["study_time_display"] == "1h 15m"
        assert data["study_streak_days"] == 1

    def test_quiz_score(self, client):
        client.post("/api/stats/quiz", json={"score": 1.0})
        data = client.post("/api/stats/quiz", json={"score": 0.5}).json()
        assert data["total_quizzes_taken"] == 2
        assert data["average_quiz_score"] == pytest.approx(0.75)

    def test_invalid_quiz_score(self, client):
        response = client.post("/api/stats/quiz", json={"score": 2.0})
        assert response.status_code == 400

    def test_username(self, client):
        assert client.put("/api/stats/username", json={"username": "Yuki"}).json()["username"] == "Yuki"
        assert client.put("/api/stats/username", json={"username": " "}).status_code == 400

    def test_achievements(self, client):
        achievements = client.get("/api/achievements").json()
        assert len(achievements) == 6
        assert not any(a["is_unlocked"] for a in achievements)


class TestItems:
    def test_list_kanji(self, client):
        response = client.get("/api/kanji")
        assert response.status_code == 200
        assert len(response.json()) == 20

    def test_search_phrases(self, client):
        data = client.get("/api/phrases", params={"q": "arigat"}).json()
        assert {p["id"] for p in data} == {"phrase-arigatou", "phrase-arigatou-gozaimasu"}

    def test_unknown_kind(self, client):
        assert client.get("/api/verbs").status_code == 422

    def test_unknown_item(self, client):
        assert client.get("/api/kanji/kanji-nope").status_code == 404
        assert client.post("/api/kanji/kanji-nope/bookmark").status_code == 404

    def test_view_item_credits_study_time(self, client):
        item = client.post("/api/kanji/kanji-hito/view").json()
        assert item["practiced_count"] == 1
        assert client.get("/api/stats").json()["total_study_minutes"] == 5
        assert [k["id"] for k in client.get("/api/kanji/recent").json()] == ["kanji-hito"]

    def test_positive_review_counts_as_learned(self, client):
        item = client.post("/api/phrases/phrase-hai/review", json={"mastery_change": 1}).json()
        assert item["mastery_level"] == 1
        stats = client.get("/api/stats").json()
        assert stats["total_phrases_learned"] == 1
        unlocked = [a["id"] for a in client.get("/api/achievements").json() if a["is_unlocked"]]
        assert unlocked == ["first_lesson"]

    def test_negative_review_is_not_learned(self, client):
        item = client.post("/api/kanji/kanji-te/review", json={"mastery_change": -1}).json()
        assert item["mastery_level"] == 0
        assert client.get("/api/stats").json()["total_kanji_learned"] == 0

    def test_bookmark_and_favorites(self, client):
        assert client.post("/api/kanji/kanji-me/bookmark").json()["is_bookmarked"] is True
        assert [k["id"] for k in client.get("/api/kanji/favorites").json()] == ["kanji-me"]
        client.post("/api/kanji/kanji-me/bookmark")
        assert client.get("/api/kanji/favorites").json() == []

    def test_filter_by_mastery(self, client):
        client.post("/api/kanji/kanji-kao/review", json={"mastery_change": 3})
        data = client.get("/api/kanji", params={"mastery": 3}).json()
        assert [k["id"] for k in data] == ["kanji-kao"]

    def test_filter_phrases_by_category(self, client):
        data = client.get("/api/phrases", params={"category": "greetings"}).json()
        assert len(data) == 4
        assert all(p["category"] == "greetings" for p in data)

    def test_filter_phrases_by_category_and_search(self, client):
        data = client.get("/api/phrases", params={"category": "thanks", "q": "gozaimasu"}).json()
        assert [p["id"] for p in data] == ["phrase-arigatou-gozaimasu"]

    def test_filter_phrases_by_difficulty(self, client):
        assert len(client.get("/api/phrases", params={"difficulty": "beginner"}).json()) == 15
        assert client.get("/api/phrases", params={"difficulty": "advanced"}).json() == []

    def test_category_filter_rejected_for_kanji(self, client):
        assert client.get("/api/kanji", params={"category": "greetings"}).status_code == 400

    def test_unknown_category(self, client):
        assert client.get("/api/phrases", params={"category": "food"}).status_code == 422


class TestRandomItem:
    def test_returns_an_item(self, client):
        response = client.get("/api/kanji/random")
        assert response.status_code == 200
        assert response.json()["id"].startswith("kanji-")

    def test_respects_exclusions(self, client, service):
        all_ids = [p.id for p in service.phrases.items]
        keep = all_ids[-1]
        response = client.get("/api/phrases/random", params={"exclude": all_ids[:-1]})
        assert response.json()["id"] == keep

    def test_nothing_left(self, client, service):
        all_ids = [k.id for k in service.kanji.items]
        response = client.get("/api/kanji/random", params={"exclude": all_ids})
        assert response.status_code == 404


def test_handlers_are_coroutines():
    for route in router.routes:
        assert inspect.iscoroutinefunction(route.endpoint), route.path
