from pydantic import BaseModel, Field
from typing import Annotated, List, Literal, Optional, Union
import datetime as dt
import enum

from app.models import MonasteryRegion
from app.schemas.monastery import FormattedMonastery
from app.services.orthodox_calendar import FeastCategory
from app.services.recommendation_rules import Season

DEFAULT_LIMIT = 10
DEFAULT_FEAST_WINDOW_DAYS = 30
MAX_FEAST_WINDOW_DAYS = 366


class Strategy(str, enum.Enum):
    BY_FEAST = "by_feast"
    BY_REGION = "by_region"
    NEARBY = "nearby"
    SIMILAR = "similar"
    POPULAR = "popular"
    HIDDEN_GEMS = "hidden_gems"
    UPCOMING_FEASTS = "upcoming_feasts"
    SEASONAL = "seasonal"


class GeoPoint(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


# ----------------------------------------------------------------------
# Requests: one variant per strategy, each carrying only what it uses
# ----------------------------------------------------------------------
class _StrategyRequest(BaseModel):
    limit: int = Field(DEFAULT_LIMIT, ge=1)


class ByFeastRequest(_StrategyRequest):
    strategy: Literal["by_feast"] = "by_feast"
    feast_date: Optional[dt.date] = None


class ByRegionRequest(_StrategyRequest):
    strategy: Literal["by_region"] = "by_region"
    region: Optional[MonasteryRegion] = None


class NearbyRequest(_StrategyRequest):
    strategy: Literal["nearby"] = "nearby"
    point: Optional[GeoPoint] = None


class SimilarRequest(_StrategyRequest):
    strategy: Literal["similar"] = "similar"
    reference_id: Optional[int] = None


class PopularRequest(_StrategyRequest):
    strategy: Literal["popular"] = "popular"


class HiddenGemsRequest(_StrategyRequest):
    strategy: Literal["hidden_gems"] = "hidden_gems"


class UpcomingFeastsRequest(_StrategyRequest):
    strategy: Literal["upcoming_feasts"] = "upcoming_feasts"
    days: int = Field(DEFAULT_FEAST_WINDOW_DAYS, ge=0, le=MAX_FEAST_WINDOW_DAYS)


class SeasonalRequest(_StrategyRequest):
    strategy: Literal["seasonal"] = "seasonal"
    # Out-of-range months are allowed and select from the whole catalog
    month: Optional[int] = None


RecommendationRequest = Annotated[
    Union[
        ByFeastRequest,
        ByRegionRequest,
        NearbyRequest,
        SimilarRequest,
        PopularRequest,
        HiddenGemsRequest,
        UpcomingFeastsRequest,
        SeasonalRequest,
    ],
    Field(discriminator="strategy"),
]


# ----------------------------------------------------------------------
# Responses
# ----------------------------------------------------------------------
class FeastOut(BaseModel):
    name: str
    localized_name: str
    category: FeastCategory
    date: dt.date
    description: Optional[str] = None

    class Config:
        from_attributes = True


class RecommendationItem(FormattedMonastery):
    feast: Optional[FeastOut] = None  # feast-based strategies only
    distance_km: Optional[float] = None  # nearby only


class RecommendationsResponse(BaseModel):
    strategy: Strategy
    recommendations: List[RecommendationItem]


class FeastRecommendationsResponse(RecommendationsResponse):
    feasts: List[FeastOut]


class SeasonalRecommendationsResponse(RecommendationsResponse):
    month: int
    season: Optional[Season] = None
    feasts: List[FeastOut]
