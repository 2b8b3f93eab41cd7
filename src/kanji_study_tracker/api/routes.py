"""REST API routes for study progress."""

import functools

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from kanji_study_tracker.config import get_settings
from kanji_study_tracker.models.achievement import Achievement
from kanji_study_tracker.models.study_item import PhraseCategory, PhraseDifficulty
from kanji_study_tracker.tracking.progress import format_study_time
from kanji_study_tracker.tracking.service import ItemKind, StudyService

logger = structlog.get_logger()
router = APIRouter(prefix="/api")


class StudyMinutesRequest(BaseModel):
    minutes: int


class QuizScoreRequest(BaseModel):
    score: float


class UsernameRequest(BaseModel):
    username: str


class ReviewRequest(BaseModel):
    mastery_change: int = 0


@functools.lru_cache
def get_study_service() -> StudyService:
    """Get the process-wide study service."""
    return StudyService.from_settings(get_settings())


def _stats_payload(service: StudyService) -> dict:
    stats = service.tracker.stats
    payload = stats.model_dump(mode="json")
    payload["study_time_display"] = format_study_time(stats.total_study_minutes)
    return payload


def _require_item(item, kind: ItemKind, item_id: str):
    if item is None:
        raise HTTPException(status_code=404, detail=f"Unknown {kind.value} id: {item_id}")
    return item


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/stats")
async def get_stats(service: StudyService = Depends(get_study_service)) -> dict:
    return _stats_payload(service)


@router.get("/achievements")
async def get_achievements(service: StudyService = Depends(get_study_service)) -> list[Achievement]:
    return service.tracker.achievements


@router.post("/stats/study-minutes")
async def add_study_minutes(
    body: StudyMinutesRequest, service: StudyService = Depends(get_study_service)
) -> dict:
    try:
        service.tracker.record_study_minutes(body.minutes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _stats_payload(service)


@router.post("/stats/quiz")
async def submit_quiz_score(
    body: QuizScoreRequest, service: StudyService = Depends(get_study_service)
) -> dict:
    try:
        service.tracker.record_quiz_score(body.score)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _stats_payload(service)


@router.put("/stats/username")
async def update_username(
    body: UsernameRequest, service: StudyService = Depends(get_study_service)
) -> dict:
    try:
        service.tracker.set_username(body.username)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _stats_payload(service)


@router.get("/{kind}")
async def list_items(
    kind: ItemKind,
    q: str = "",
    mastery: int | None = None,
    category: PhraseCategory | None = None,
    difficulty: PhraseDifficulty | None = None,
    service: StudyService = Depends(get_study_service),
) -> list[dict]:
    try:
        items = service.find_items(
            kind, q, mastery=mastery, category=category, difficulty=difficulty
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [i.model_dump(mode="json") for i in items]


@router.get("/{kind}/random")
async def random_item(
    kind: ItemKind,
    exclude: list[str] = Query(default=[]),
    service: StudyService = Depends(get_study_service),
) -> dict:
    """Pick a practice item not yet shown in the current round."""
    item = service.random_item(kind, excluding=exclude)
    if item is None:
        raise HTTPException(status_code=404, detail=f"No {kind.value} left to practice")
    return item.model_dump(mode="json")


@router.get("/{kind}/favorites")
async def list_favorites(kind: ItemKind, service: StudyService = Depends(get_study_service)) -> list[dict]:
    return [i.model_dump(mode="json") for i in service.catalog(kind).favorites]


@router.get("/{kind}/recent")
async def list_recent(kind: ItemKind, service: StudyService = Depends(get_study_service)) -> list[dict]:
    return [i.model_dump(mode="json") for i in service.catalog(kind).recently_studied]


@router.get("/{kind}/{item_id}")
async def get_item(kind: ItemKind, item_id: str, service: StudyService = Depends(get_study_service)) -> dict:
    item = _require_item(service.catalog(kind).get(item_id), kind, item_id)
    return item.model_dump(mode="json")


@router.post("/{kind}/{item_id}/view")
async def view_item(kind: ItemKind, item_id: str, service: StudyService = Depends(get_study_service)) -> dict:
    item = _require_item(service.view_item(kind, item_id), kind, item_id)
    return item.model_dump(mode="json")


@router.post("/{kind}/{item_id}/review")
async def review_item(
    kind: ItemKind,
    item_id: str,
    body: ReviewRequest,
    service: StudyService = Depends(get_study_service),
) -> dict:
    item = _require_item(service.review_item(kind, item_id, body.mastery_change), kind, item_id)
    return item.model_dump(mode="json")


@router.post("/{kind}/{item_id}/bookmark")
async def toggle_bookmark(kind: ItemKind, item_id: str, service: StudyService = Depends(get_study_service)) -> dict:
    item = _require_item(service.catalog(kind).toggle_bookmark(item_id), kind, item_id)
    logger.info("bookmark_toggled", kind=kind.value, item_id=item_id, bookmarked=item.is_bookmarked)
    return item.model_dump(mode="json")
