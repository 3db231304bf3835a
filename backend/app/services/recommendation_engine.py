"""
Monastery recommendation engine.

Seven selection strategies over the monastery catalog (feast matching, region,
proximity, similarity, popularity, hidden gems, seasonal), dispatched from a
typed request variant. Results are formatted into RecommendationItem objects.

Discovery strategies (region, similar, hidden gems, seasonal and the no-input
fallbacks) return a random subset of their candidates. The random source is
injected so tests can seed it; popular, by_feast, upcoming_feasts and nearby
are deterministic.
"""
import logging
import random
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, List, Optional, Sequence

from dateutil import parser as dateparser
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models import Monastery, MonasteryRegion
from app.schemas.monastery import format_monastery
from app.schemas.recommendation import (
    MAX_FEAST_WINDOW_DAYS,
    ByFeastRequest,
    ByRegionRequest,
    FeastOut,
    GeoPoint,
    HiddenGemsRequest,
    NearbyRequest,
    PopularRequest,
    RecommendationItem,
    RecommendationRequest,
    SeasonalRequest,
    SimilarRequest,
    Strategy,
    UpcomingFeastsRequest,
)
from app.services.catalog_repository import CatalogRepository, haversine_km
from app.services.feast_matching import SaintNameMatcher
from app.services.orthodox_calendar import FeastDescriptor, OrthodoxCalendar
from app.services.recommendation_rules import (
    HIDDEN_GEM_MIN_DESCRIPTION_LENGTH,
    HIDDEN_GEM_REGIONS,
    MAJOR_FEAST_PATRONS,
    SEASONAL_RULES,
    Season,
    season_for_month,
)
from app.utils.timing import SLOW_STRATEGY_THRESHOLD_MS, time_operation

logger = logging.getLogger(__name__)


class RecommendationError(Exception):
    """Raised when recommendations cannot be loaded from the catalog."""
    pass


@dataclass
class RecommendationResult:
    strategy: Strategy
    items: List[RecommendationItem]
    # Feasts considered by the strategy (upcoming_feasts, by_feast, seasonal)
    feasts: List[FeastDescriptor] = field(default_factory=list)
    month: Optional[int] = None
    season: Optional[Season] = None


# ----------------------------------------------------------------------
# Request building
# ----------------------------------------------------------------------
def _clamp_limit(limit: Optional[int]) -> int:
    if limit is None or limit < 1:
        return settings.RECOMMENDATIONS_DEFAULT_LIMIT
    return min(limit, settings.RECOMMENDATIONS_MAX_LIMIT)


def _parse_strategy(strategy: Optional[str]) -> Strategy:
    if not strategy:
        return Strategy.POPULAR
    try:
        return Strategy(strategy.strip().lower())
    except ValueError:
        logger.warning("Unknown recommendation strategy %r, falling back to popular", strategy)
        return Strategy.POPULAR


def _parse_region(region: Any) -> Optional[MonasteryRegion]:
    if region is None or region == "":
        return None
    if isinstance(region, MonasteryRegion):
        return region
    try:
        return MonasteryRegion(str(region).strip().lower())
    except ValueError:
        logger.warning("Unknown monastery region %r, ignoring", region)
        return None


def _parse_feast_date(feast_date: Any) -> Optional[date]:
    if feast_date is None or feast_date == "":
        return None
    if isinstance(feast_date, datetime):
        return feast_date.date()
    if isinstance(feast_date, date):
        return feast_date
    try:
        return dateparser.isoparse(str(feast_date)).date()
    except (ValueError, OverflowError):
        logger.warning("Unparseable feast date %r, ignoring", feast_date)
        return None


def _parse_point(lat: Optional[float], lng: Optional[float]) -> Optional[GeoPoint]:
    if lat is None or lng is None:
        if lat is not None or lng is not None:
            logger.warning("Only one coordinate supplied (lat=%s, lng=%s), ignoring", lat, lng)
        return None
    try:
        return GeoPoint(lat=lat, lng=lng)
    except ValidationError:
        logger.warning("Coordinates out of range (lat=%s, lng=%s), ignoring", lat, lng)
        return None


def build_request(
    strategy: Optional[str] = None,
    *,
    region: Any = None,
    reference_id: Optional[int] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    feast_date: Any = None,
    month: Optional[int] = None,
    days: Optional[int] = None,
    limit: Optional[int] = None,
) -> RecommendationRequest:
    """
    Build the typed request for a strategy from loose, already-parsed parameters.

    Never raises for bad optional input: unknown strategies fall back to popular,
    unusable parameters are dropped so the strategy's own fallback applies.
    """
    key = _parse_strategy(strategy)
    limit = _clamp_limit(limit)

    if key == Strategy.BY_FEAST:
        return ByFeastRequest(feast_date=_parse_feast_date(feast_date), limit=limit)
    if key == Strategy.BY_REGION:
        return ByRegionRequest(region=_parse_region(region), limit=limit)
    if key == Strategy.NEARBY:
        return NearbyRequest(point=_parse_point(lat, lng), limit=limit)
    if key == Strategy.SIMILAR:
        return SimilarRequest(reference_id=reference_id, limit=limit)
    if key == Strategy.HIDDEN_GEMS:
        return HiddenGemsRequest(limit=limit)
    if key == Strategy.UPCOMING_FEASTS:
        if days is None or days < 0:
            days = settings.UPCOMING_FEASTS_WINDOW_DAYS
        elif days > MAX_FEAST_WINDOW_DAYS:
            logger.warning("Feast window of %d days capped at %d", days, MAX_FEAST_WINDOW_DAYS)
            days = MAX_FEAST_WINDOW_DAYS
        return UpcomingFeastsRequest(days=days, limit=limit)
    if key == Strategy.SEASONAL:
        return SeasonalRequest(month=month, limit=limit)
    return PopularRequest(limit=limit)


def _to_item(
    monastery: Monastery,
    feast: Optional[FeastDescriptor] = None,
    distance_km: Optional[float] = None,
) -> RecommendationItem:
    formatted = format_monastery(monastery)
    return RecommendationItem(
        **formatted.model_dump(),
        feast=FeastOut.model_validate(feast) if feast else None,
        distance_km=distance_km,
    )


# ----------------------------------------------------------------------
# Engine
# ----------------------------------------------------------------------
class MonasteryRecommender:
    def __init__(
        self,
        db: Session,
        calendar: Optional[OrthodoxCalendar] = None,
        rng: Optional[random.Random] = None,
        today: Optional[Callable[[], date]] = None,
        matcher: Optional[SaintNameMatcher] = None,
    ):
        self.today = today or date.today
        self.calendar = calendar or OrthodoxCalendar(today=self.today)
        self.repository = CatalogRepository(db, rng)
        self.matcher = matcher or SaintNameMatcher()
        self._handlers = {
            Strategy.BY_FEAST: self._recommend_by_feast,
            Strategy.BY_REGION: lambda r: self._result(r, self.by_region(r.region, r.limit)),
            Strategy.NEARBY: self._recommend_nearby,
            Strategy.SIMILAR: lambda r: self._result(r, self.similar(r.reference_id, r.limit)),
            Strategy.POPULAR: lambda r: self._result(r, self.popular(r.limit)),
            Strategy.HIDDEN_GEMS: lambda r: self._result(r, self.hidden_gems(r.limit)),
            Strategy.UPCOMING_FEASTS: self._recommend_upcoming_feasts,
            Strategy.SEASONAL: self._recommend_seasonal,
        }

    def recommend(self, request: RecommendationRequest) -> RecommendationResult:
        """
        Run the strategy for request and return its formatted, ranked results.

        Raises:
            RecommendationError: the catalog store failed; no partial results.
        """
        strategy = Strategy(request.strategy)
        handler = self._handlers[strategy]
        try:
            with time_operation(
                f"strategy={strategy.value} limit={request.limit}",
                slow_ms=SLOW_STRATEGY_THRESHOLD_MS,
            ):
                result = handler(request)
        except SQLAlchemyError as exc:
            logger.exception("Catalog query failed for strategy=%s", strategy.value)
            raise RecommendationError("Failed to load monastery recommendations") from exc

        logger.info(
            "Recommended %d monasteries (strategy=%s, limit=%d)",
            len(result.items), strategy.value, request.limit,
        )
        return result

    def _result(self, request: RecommendationRequest, monasteries: Sequence[Monastery]) -> RecommendationResult:
        return RecommendationResult(
            strategy=Strategy(request.strategy),
            items=[_to_item(m) for m in monasteries],
        )

    # ------------------------------------------------------------------
    # Feast matcher
    # ------------------------------------------------------------------
    def by_feast_date(self, feast_date: Optional[date], limit: int) -> List[Monastery]:
        """
        Monasteries whose patron saint feast falls on feast_date's month and day.

        Without a date, monasteries dedicated to one of the major feasts.
        """
        repo = self.repository
        if feast_date is None:
            return repo.first(
                repo.text_contains([Monastery.patron_saint], MAJOR_FEAST_PATRONS),
                limit=limit,
            )
        return repo.first(repo.feast_on(feast_date.month, feast_date.day), limit=limit)

    def by_feasts(self, feasts: Sequence[FeastDescriptor], limit: int) -> List[Monastery]:
        """Monasteries whose patron saint or name mentions a saint celebrated by one of the feasts."""
        names = self.matcher.candidate_names(feasts)
        if not names:
            return []
        repo = self.repository
        return repo.first(
            repo.text_contains([Monastery.patron_saint, Monastery.name], names),
            limit=limit,
        )

    def _recommend_by_feast(self, request: ByFeastRequest) -> RecommendationResult:
        monasteries = self.by_feast_date(request.feast_date, request.limit)
        if request.feast_date is None:
            return self._result(request, monasteries)

        day_feasts = self.calendar.feasts_on(
            request.feast_date.month, request.feast_date.day, year=request.feast_date.year
        )
        items = []
        for monastery in monasteries:
            feast = self.matcher.find_feast(monastery, day_feasts)
            if feast is None and day_feasts:
                feast = day_feasts[0]
            items.append(_to_item(monastery, feast=feast))
        return RecommendationResult(strategy=Strategy.BY_FEAST, items=items, feasts=day_feasts)

    def _recommend_upcoming_feasts(self, request: UpcomingFeastsRequest) -> RecommendationResult:
        feasts = self.calendar.upcoming_feasts(self.today(), request.days)
        monasteries = self.by_feasts(feasts, request.limit)
        items = [_to_item(m, feast=self.matcher.find_feast(m, feasts)) for m in monasteries]
        return RecommendationResult(strategy=Strategy.UPCOMING_FEASTS, items=items, feasts=feasts)

    # ------------------------------------------------------------------
    # Region, proximity, similarity
    # ------------------------------------------------------------------
    def by_region(self, region: Optional[MonasteryRegion], limit: int) -> List[Monastery]:
        repo = self.repository
        if region is None:
            return repo.sample(limit=limit)
        return repo.sample(repo.region_is(region), limit=limit)

    def nearby(self, point: Optional[GeoPoint], limit: int) -> List[Monastery]:
        if point is None:
            return self.repository.sample(limit=limit)
        return self.repository.nearest(point.lat, point.lng, limit=limit)

    def _recommend_nearby(self, request: NearbyRequest) -> RecommendationResult:
        monasteries = self.nearby(request.point, request.limit)
        point = request.point
        items = [
            _to_item(
                m,
                distance_km=(
                    haversine_km(point.lat, point.lng, m.latitude, m.longitude)
                    if point is not None and m.has_coordinates
                    else None
                ),
            )
            for m in monasteries
        ]
        return RecommendationResult(strategy=Strategy.NEARBY, items=items)

    def similar(self, reference_id: Optional[int], limit: int) -> List[Monastery]:
        """Monasteries sharing region, type or patron saint with the reference one."""
        repo = self.repository
        reference = repo.get(reference_id) if reference_id is not None else None
        if reference is None:
            if reference_id is not None:
                logger.info("Reference monastery %s not found, returning a random selection", reference_id)
            return repo.sample(limit=limit)

        conditions = []
        if reference.region is not None:
            conditions.append(repo.region_is(reference.region))
        if reference.type is not None:
            conditions.append(repo.type_is(reference.type))
        if reference.patron_saint:
            conditions.append(repo.text_contains([Monastery.patron_saint], [reference.patron_saint]))

        return repo.sample(repo.exclude_id(reference.id), repo.any_of(*conditions), limit=limit)

    # ------------------------------------------------------------------
    # Popularity, hidden gems, seasonal
    # ------------------------------------------------------------------
    def popular(self, limit: int) -> List[Monastery]:
        """Verified monasteries, newest first. Deterministic."""
        repo = self.repository
        return repo.newest(repo.is_verified(), limit=limit)

    def hidden_gems(self, limit: int) -> List[Monastery]:
        repo = self.repository
        return repo.sample(
            repo.is_verified(),
            repo.region_in(HIDDEN_GEM_REGIONS),
            repo.description_longer_than(HIDDEN_GEM_MIN_DESCRIPTION_LENGTH),
            limit=limit,
        )

    def seasonal(self, month: int, limit: int) -> List[Monastery]:
        repo = self.repository
        season = season_for_month(month)
        if season is None:
            return repo.sample(limit=limit)

        rule = SEASONAL_RULES[season]
        conditions = []
        if rule.regions:
            conditions.append(repo.region_in(rule.regions))
        if rule.keywords:
            conditions.append(
                repo.text_contains([Monastery.special_features, Monastery.description], rule.keywords)
            )
        return repo.sample(repo.any_of(*conditions), limit=limit)

    def _recommend_seasonal(self, request: SeasonalRequest) -> RecommendationResult:
        month = request.month if request.month is not None else self.today().month
        monasteries = self.seasonal(month, request.limit)
        return RecommendationResult(
            strategy=Strategy.SEASONAL,
            items=[_to_item(m) for m in monasteries],
            feasts=self.calendar.feasts_in_month(month),
            month=month,
            season=season_for_month(month),
        )
