"""
Read-only access to the monastery catalog.

Selectors compose the named predicates below and hand them to one of the read
methods; store-specific expressions (date-part extraction, the haversine
distance) live only here.
"""
import logging
import math
import random
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import and_, extract, false, func, or_
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from app.models import Monastery, MonasteryRegion, MonasteryType

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

# Monastery.id is an Integer column (int4 on PostgreSQL)
MIN_ID = -(2 ** 31)
MAX_ID = 2 ** 31 - 1


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres between two points given in degrees."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


class CatalogRepository:
    def __init__(self, db: Session, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------
    @staticmethod
    def region_is(region: MonasteryRegion) -> ColumnElement:
        return Monastery.region == region

    @staticmethod
    def region_in(regions: Iterable[MonasteryRegion]) -> ColumnElement:
        regions = sorted(regions, key=lambda r: r.value)
        if not regions:
            return false()
        return Monastery.region.in_(regions)

    @staticmethod
    def type_is(monastery_type: MonasteryType) -> ColumnElement:
        return Monastery.type == monastery_type

    @staticmethod
    def is_verified() -> ColumnElement:
        return Monastery.verification.is_(True)

    @staticmethod
    def exclude_id(monastery_id: int) -> ColumnElement:
        return Monastery.id != monastery_id

    @staticmethod
    def feast_on(month: int, day: int) -> ColumnElement:
        """Patron saint date falls on month/day in any year."""
        return and_(
            Monastery.patron_saint_date.isnot(None),
            extract("month", Monastery.patron_saint_date) == month,
            extract("day", Monastery.patron_saint_date) == day,
        )

    @staticmethod
    def text_contains(columns: Sequence, needles: Iterable[str]) -> ColumnElement:
        """
        Case-insensitive substring match of any needle in any column.

        An empty needle list matches nothing.
        """
        conditions = [
            column.icontains(needle, autoescape=True)
            for needle in needles
            if needle
            for column in columns
        ]
        if not conditions:
            return false()
        return or_(*conditions)

    @staticmethod
    def description_longer_than(length: int) -> ColumnElement:
        return func.length(Monastery.description) > length

    @staticmethod
    def has_coordinates() -> ColumnElement:
        return and_(Monastery.latitude.isnot(None), Monastery.longitude.isnot(None))

    @staticmethod
    def any_of(*conditions: ColumnElement) -> ColumnElement:
        """OR of the given conditions; matches nothing when there are none."""
        conditions = [c for c in conditions if c is not None]
        if not conditions:
            return false()
        return or_(*conditions)

    @staticmethod
    def distance_km(lat: float, lng: float) -> ColumnElement:
        """SQL haversine distance from (lat, lng) to each monastery."""
        lat_rad = math.radians(lat)
        lng_rad = math.radians(lng)
        row_lat = func.radians(Monastery.latitude)
        row_lng = func.radians(Monastery.longitude)
        a = (
            func.power(func.sin((row_lat - lat_rad) / 2), 2)
            + math.cos(lat_rad) * func.cos(row_lat) * func.power(func.sin((row_lng - lng_rad) / 2), 2)
        )
        return 2 * EARTH_RADIUS_KM * func.asin(func.sqrt(a))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get(self, monastery_id: int) -> Optional[Monastery]:
        """Monastery by id, or None. Ids outside the key column's range cannot exist."""
        if not MIN_ID <= monastery_id <= MAX_ID:
            logger.debug("Monastery id %s is outside the key range, treating as not found", monastery_id)
            return None
        return self.db.query(Monastery).filter(Monastery.id == monastery_id).one_or_none()

    def first(self, *conditions: ColumnElement, limit: int) -> List[Monastery]:
        """Matching monasteries in id order."""
        return (
            self.db.query(Monastery)
            .filter(*conditions)
            .order_by(Monastery.id)
            .limit(limit)
            .all()
        )

    def newest(self, *conditions: ColumnElement, limit: int) -> List[Monastery]:
        """Matching monasteries, most recently added (highest id) first."""
        return (
            self.db.query(Monastery)
            .filter(*conditions)
            .order_by(Monastery.id.desc())
            .limit(limit)
            .all()
        )

    def sample(self, *conditions: ColumnElement, limit: int) -> List[Monastery]:
        """
        Random subset of the matching monasteries, in draw order.

        Candidate ids are read in a stable order and drawn with the injected
        random source, so a seeded source gives repeatable results.
        """
        candidate_ids = [
            row.id
            for row in self.db.query(Monastery.id).filter(*conditions).order_by(Monastery.id).all()
        ]
        chosen = self.rng.sample(candidate_ids, min(limit, len(candidate_ids)))
        if not chosen:
            return []

        by_id = {
            monastery.id: monastery
            for monastery in self.db.query(Monastery).filter(Monastery.id.in_(chosen)).all()
        }
        return [by_id[monastery_id] for monastery_id in chosen if monastery_id in by_id]

    def nearest(self, lat: float, lng: float, limit: int) -> List[Monastery]:
        """Monasteries with coordinates, closest to (lat, lng) first."""
        return (
            self.db.query(Monastery)
            .filter(self.has_coordinates())
            .order_by(*self.order_by_distance(lat, lng))
            .limit(limit)
            .all()
        )

    def order_by_distance(self, lat: float, lng: float) -> Tuple[ColumnElement, ...]:
        """ORDER BY clauses for distance from (lat, lng), ties broken by id."""
        return self.distance_km(lat, lng), Monastery.id
