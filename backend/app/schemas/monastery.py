from pydantic import BaseModel, field_validator
from typing import Any, List, Mapping, Optional, Union
from datetime import date, datetime
import logging

from dateutil import parser as dateparser

from app.models import Monastery, MonasteryRegion, MonasteryType

logger = logging.getLogger(__name__)


class FormattedMonastery(BaseModel):
    """API-safe shape of a monastery record."""
    id: int
    name: str
    slug: str
    description: str
    short_description: Optional[str] = None
    address: Optional[str] = None
    region: Optional[MonasteryRegion] = None
    city: Optional[str] = None
    county: Optional[str] = None
    access: Optional[str] = None
    patron_saint: Optional[str] = None
    patron_saint_date: Optional[date] = None
    founded_year: Optional[int] = None
    history: Optional[str] = None
    special_features: Optional[str] = None
    relics: List[str] = []
    type: Optional[MonasteryType] = None
    images: List[str] = []
    cover_image: Optional[str] = None
    icon_descriptions: List[Any] = []
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    website: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    verification: bool = False
    administrator_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("patron_saint_date", mode="before")
    @classmethod
    def coerce_patron_saint_date(cls, value):
        if value is None or value == "":
            return None
        # datetime is a date subclass, check it first
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return dateparser.parse(value).date()
            except (ValueError, OverflowError):
                logger.warning("Unparseable patron_saint_date %r, treating as missing", value)
                return None
        return value

    @field_validator("images", "relics", "icon_descriptions", mode="before")
    @classmethod
    def default_empty_list(cls, value):
        return [] if value is None else value


def format_monastery(record: Union[Monastery, FormattedMonastery, Mapping[str, Any]]) -> FormattedMonastery:
    """
    Normalize a monastery for API responses.

    Accepts an ORM row, a plain mapping, or an already formatted record;
    formatting twice gives the same result as formatting once.
    """
    return FormattedMonastery.model_validate(record)
