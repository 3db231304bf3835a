import random
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from app.core.config import settings
from app.database import get_db
from app.schemas.recommendation import (
    MAX_FEAST_WINDOW_DAYS,
    FeastOut,
    FeastRecommendationsResponse,
    RecommendationsResponse,
    SeasonalRequest,
    SeasonalRecommendationsResponse,
    UpcomingFeastsRequest,
)
from app.services.recommendation_engine import (
    MonasteryRecommender,
    RecommendationError,
    RecommendationResult,
    build_request,
)
from app.utils.timing import now_ms, log_elapsed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/monasteries/recommendations", tags=["recommendations"])

FAILURE_DETAIL = "Failed to get monastery recommendations"


def get_recommender(db: Session = Depends(get_db)) -> MonasteryRecommender:
    """Per-request engine; seeded when RECOMMENDATIONS_RANDOM_SEED is set."""
    return MonasteryRecommender(db=db, rng=random.Random(settings.RECOMMENDATIONS_RANDOM_SEED))


def _run(recommender: MonasteryRecommender, request) -> RecommendationResult:
    t0 = now_ms()
    try:
        result = recommender.recommend(request)
    except RecommendationError:
        # Already logged with traceback by the engine
        raise HTTPException(status_code=500, detail=FAILURE_DETAIL)
    if settings.DEBUG:
        log_elapsed(t0, f"strategy={request.strategy} recommendations_request", logger.debug)
    return result


@router.get("", response_model=RecommendationsResponse)
def get_recommendations(
    strategy: Optional[str] = Query(None, description="by_feast, by_region, nearby, similar, popular, hidden_gems, upcoming_feasts or seasonal"),
    region: Optional[str] = Query(None, description="Region code for by_region"),
    reference_id: Optional[int] = Query(None, description="Reference monastery id for similar"),
    lat: Optional[float] = Query(None, description="Latitude for nearby"),
    lng: Optional[float] = Query(None, description="Longitude for nearby"),
    feast_date: Optional[str] = Query(None, description="ISO date for by_feast"),
    month: Optional[int] = Query(None, description="Month number (1-12) for seasonal"),
    days: Optional[int] = Query(None, ge=0, description="Look-ahead window for upcoming_feasts; longer windows are capped"),
    limit: int = Query(settings.RECOMMENDATIONS_DEFAULT_LIMIT, ge=1, le=settings.RECOMMENDATIONS_MAX_LIMIT),
    recommender: MonasteryRecommender = Depends(get_recommender),
):
    """Monastery recommendations for one strategy; unknown strategies fall back to popular."""
    request = build_request(
        strategy,
        region=region,
        reference_id=reference_id,
        lat=lat,
        lng=lng,
        feast_date=feast_date,
        month=month,
        days=days,
        limit=limit,
    )
    result = _run(recommender, request)
    return RecommendationsResponse(strategy=result.strategy, recommendations=result.items)


@router.get("/feasts", response_model=FeastRecommendationsResponse)
def get_feast_recommendations(
    days: int = Query(settings.UPCOMING_FEASTS_WINDOW_DAYS, ge=0, le=MAX_FEAST_WINDOW_DAYS),
    limit: int = Query(settings.RECOMMENDATIONS_DEFAULT_LIMIT, ge=1, le=settings.RECOMMENDATIONS_MAX_LIMIT),
    recommender: MonasteryRecommender = Depends(get_recommender),
):
    """Monasteries whose patron saints are celebrated in the coming days."""
    result = _run(recommender, UpcomingFeastsRequest(days=days, limit=limit))
    return FeastRecommendationsResponse(
        strategy=result.strategy,
        feasts=[FeastOut.model_validate(f) for f in result.feasts],
        recommendations=result.items,
    )


@router.get("/seasonal", response_model=SeasonalRecommendationsResponse)
def get_seasonal_recommendations(
    month: Optional[int] = Query(None, description="Month number (1-12); defaults to the current month"),
    limit: int = Query(settings.RECOMMENDATIONS_DEFAULT_LIMIT, ge=1, le=settings.RECOMMENDATIONS_MAX_LIMIT),
    recommender: MonasteryRecommender = Depends(get_recommender),
):
    """Monasteries suited to the season of the given month, plus that month's feasts."""
    result = _run(recommender, SeasonalRequest(month=month, limit=limit))
    return SeasonalRecommendationsResponse(
        strategy=result.strategy,
        month=result.month,
        season=result.season,
        feasts=[FeastOut.model_validate(f) for f in result.feasts],
        recommendations=result.items,
    )
